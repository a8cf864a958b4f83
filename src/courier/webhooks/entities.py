"""Entity webhooks: content items, taxonomy terms, accounts and metadata.

Each class maps host-application change events to ``emit`` calls with a
small payload describing the entity. The host wires its own events to
these handlers.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any, Literal

from courier.models import DeliveryRequest, WebhookConfig

from . import payloads
from .base import Webhook

logger = logging.getLogger(__name__)

MetaObjectType = Literal["post", "term", "user"]


class PostWebhook(Webhook):
    """Content item create/update/delete."""

    def __init__(self, config: WebhookConfig | None = None) -> None:
        super().__init__(config or WebhookConfig(name="post"))

    async def on_save(
        self,
        post_id: int,
        post_type: str,
        update: bool,
        is_revision: bool = False,
        is_autosave: bool = False,
    ) -> DeliveryRequest | None:
        """Emit create or update. Revisions and autosaves are ignored."""
        if is_revision or is_autosave:
            return None
        action = "update" if update else "create"
        return await self.emit(action, "post", post_id, payloads.for_post(post_type))

    async def on_delete(self, post_id: int, post_type: str) -> DeliveryRequest | None:
        return await self.emit("delete", "post", post_id, payloads.for_post(post_type))


class TermWebhook(Webhook):
    """Taxonomy term create/update/delete."""

    def __init__(self, config: WebhookConfig | None = None) -> None:
        super().__init__(config or WebhookConfig(name="term"))

    async def on_created(self, term_id: int, taxonomy: str) -> DeliveryRequest | None:
        return await self.emit("create", "term", term_id, payloads.for_term(taxonomy))

    async def on_edited(self, term_id: int, taxonomy: str) -> DeliveryRequest | None:
        return await self.emit("update", "term", term_id, payloads.for_term(taxonomy))

    async def on_deleted(self, term_id: int, taxonomy: str) -> DeliveryRequest | None:
        return await self.emit("delete", "term", term_id, payloads.for_term(taxonomy))


class UserWebhook(Webhook):
    """Account create/update/delete."""

    def __init__(self, config: WebhookConfig | None = None) -> None:
        super().__init__(config or WebhookConfig(name="user"))

    async def on_registered(self, user_id: int, roles: Iterable[str]) -> DeliveryRequest | None:
        return await self.emit("create", "user", user_id, payloads.for_user(roles))

    async def on_updated(self, user_id: int, roles: Iterable[str]) -> DeliveryRequest | None:
        return await self.emit("update", "user", user_id, payloads.for_user(roles))

    async def on_deleted(self, user_id: int, roles: Iterable[str]) -> DeliveryRequest | None:
        return await self.emit("delete", "user", user_id, payloads.for_user(roles))


class MetaWebhook(Webhook):
    """Metadata changes on posts, terms and users.

    A field-managed meta key gets its own ``update`` event on the ``meta``
    entity type, keyed ``"<object_type>:<object_id>:<meta_key>"``. Every
    meta change also emits an ``update`` for the owning entity through
    its own registered webhook, so consumers see both levels.
    """

    def __init__(self, config: WebhookConfig | None = None) -> None:
        super().__init__(config or WebhookConfig(name="meta"))

    async def on_meta_changed(
        self,
        object_type: MetaObjectType,
        object_id: int,
        meta_key: str,
        context: Mapping[str, Any],
        deleted: bool = False,
        field_key: str | None = None,
    ) -> DeliveryRequest | None:
        """Handle an added, updated or deleted meta value.

        Args:
            object_type: Owner type (post, term, user).
            object_id: Owner id.
            meta_key: The meta key that changed.
            context: Owner payload fragment (post_type, taxonomy or roles).
            deleted: Whether the value was removed.
            field_key: Custom-field key when the meta is field-managed.

        Returns:
            The meta-level request, if one was scheduled.
        """
        request = None
        if field_key:
            payload = {**context, "meta_key": meta_key, "deleted": deleted, "field_key": field_key}
            request = await self.emit(
                "update", "meta", payloads.meta_id(object_type, object_id, meta_key), payload
            )

        await self._emit_upstream(object_type, object_id, context)
        return request

    async def on_field_update(
        self,
        object_type: MetaObjectType,
        object_id: int,
        field: Mapping[str, Any],
        context: Mapping[str, Any],
    ) -> DeliveryRequest | None:
        """Handle a custom-field save that carries a field definition."""
        payload = {**context, **payloads.from_field(field)}
        meta_key = field.get("name") if isinstance(field.get("name"), str) else None
        if meta_key is None:
            logger.debug("Field update on %s:%s has no name, skipping meta event", object_type, object_id)
            await self._emit_upstream(object_type, object_id, context)
            return None

        payload["meta_key"] = meta_key
        request = await self.emit(
            "update", "meta", payloads.meta_id(object_type, object_id, meta_key), payload
        )
        await self._emit_upstream(object_type, object_id, context)
        return request

    async def _emit_upstream(
        self, object_type: str, object_id: int, context: Mapping[str, Any]
    ) -> None:
        if self._registry is None:
            return
        owner = self._registry.get(object_type)
        if owner is None:
            return
        await owner.emit("update", object_type, object_id, dict(context))
