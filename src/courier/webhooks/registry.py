"""Registry of named webhooks.

One registry per Courier context, built explicitly and passed to whoever
needs it. The executor uses it to re-resolve a webhook's configuration
from the ``webhook-name`` header of a due delivery.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from courier.exceptions import WebhookRegistrationError
from courier.hooks import Hooks
from courier.models import WebhookConfig

if TYPE_CHECKING:
    from courier.delivery import DispatchGateway

    from .base import Webhook

logger = logging.getLogger(__name__)


class WebhookRegistry:
    """Holds registered webhooks by name.

    Example:
        ```python
        registry = WebhookRegistry(gateway, hooks)
        registry.register(PostWebhook(WebhookConfig(name="post", max_retries=3)))
        await registry.get("post").on_save(42, "page", update=True)
        ```
    """

    def __init__(
        self,
        gateway: DispatchGateway,
        hooks: Hooks,
        default_url: str | None = None,
    ) -> None:
        self._gateway = gateway
        self._hooks = hooks
        self._default_url = default_url
        self._webhooks: dict[str, Webhook] = {}

    @property
    def gateway(self) -> DispatchGateway:
        return self._gateway

    @property
    def hooks(self) -> Hooks:
        return self._hooks

    @property
    def default_url(self) -> str | None:
        return self._default_url

    def register(self, webhook: Webhook) -> WebhookRegistry:
        """Register a webhook.

        Raises:
            WebhookRegistrationError: If the name is already taken.
        """
        if webhook.name in self._webhooks:
            raise WebhookRegistrationError(webhook.name)
        webhook.bind(self)
        self._webhooks[webhook.name] = webhook
        logger.debug("Registered webhook %s", webhook.name)
        return self

    def get(self, name: str) -> Webhook | None:
        return self._webhooks.get(name)

    def get_config(self, name: str) -> WebhookConfig | None:
        webhook = self._webhooks.get(name)
        return webhook.config if webhook else None

    def has(self, name: str) -> bool:
        return name in self._webhooks

    def unregister(self, name: str) -> bool:
        """Remove a webhook. Returns False if it was not registered."""
        return self._webhooks.pop(name, None) is not None

    def all(self) -> dict[str, Webhook]:
        return dict(self._webhooks)

    def enabled(self) -> dict[str, Webhook]:
        """Registered webhooks that are enabled after the enabled hook."""
        return {name: webhook for name, webhook in self._webhooks.items() if webhook.is_enabled()}

    def __len__(self) -> int:
        return len(self._webhooks)

    def __contains__(self, name: object) -> bool:
        return name in self._webhooks
