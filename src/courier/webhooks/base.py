"""Base webhook: binds a configuration to the dispatch gateway."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from courier.exceptions import CourierError
from courier.models import DeliveryRequest, EntityId, WebhookConfig

if TYPE_CHECKING:
    from .registry import WebhookRegistry

logger = logging.getLogger(__name__)


class Webhook:
    """A named webhook that emits entity events.

    Subclasses translate platform events into ``emit`` calls. ``emit``
    never raises a CourierError: a failed enqueue is logged and dropped
    so the caller's own save operation is never interrupted.

    Attributes:
        config: Immutable configuration of this webhook.
    """

    def __init__(self, config: WebhookConfig) -> None:
        self.config = config
        self._registry: WebhookRegistry | None = None

    @property
    def name(self) -> str:
        return self.config.name

    def bind(self, registry: WebhookRegistry) -> None:
        """Attach to a registry; called by ``WebhookRegistry.register``."""
        self._registry = registry

    def is_enabled(self) -> bool:
        if self._registry is None:
            return self.config.enabled
        return self._registry.hooks.apply_enabled(self.config.enabled, self.name)

    def destination(self) -> str:
        """This webhook's URL, falling back to the registry default."""
        if self.config.url:
            return self.config.url
        if self._registry is not None and self._registry.default_url:
            return self._registry.default_url
        return ""

    async def emit(
        self,
        action: str,
        entity_type: str,
        entity_id: EntityId,
        payload: dict[str, Any] | None = None,
    ) -> DeliveryRequest | None:
        """Schedule a delivery for an entity event.

        Returns:
            The scheduled request, or None if disabled, deduplicated or rejected.
        """
        if self._registry is None:
            raise RuntimeError(f'Webhook "{self.name}" is not registered')
        if not self.is_enabled():
            return None

        try:
            return await self._registry.gateway.schedule(
                action,
                entity_type,
                entity_id,
                self.destination(),
                payload,
                self.config.request_headers(),
            )
        except CourierError as e:
            logger.warning('Failed to schedule webhook "%s": %s', self.name, e.message)
            return None
