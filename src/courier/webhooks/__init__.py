"""Webhook registry and entity webhooks for Courier.

Example:
    ```python
    from courier.webhooks import PostWebhook, WebhookRegistry

    registry = WebhookRegistry(gateway, hooks)
    registry.register(PostWebhook())
    await registry.get("post").on_save(42, "page", update=True)
    ```
"""

from . import payloads
from .base import Webhook
from .entities import MetaWebhook, PostWebhook, TermWebhook, UserWebhook
from .registry import WebhookRegistry

__all__ = [
    "MetaWebhook",
    "PostWebhook",
    "TermWebhook",
    "UserWebhook",
    "Webhook",
    "WebhookRegistry",
    "payloads",
]
