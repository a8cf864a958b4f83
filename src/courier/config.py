"""Configuration management for Courier."""

import logging
from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Courier configuration loaded from environment variables.

    All settings can be overridden via environment variables with
    the COURIER_ prefix. For example:
        COURIER_URL_OVERRIDE=https://hooks.example.com/ingest
        COURIER_STORE_BACKEND=redis

    Notes:
        - url_override always wins over hooks and per-webhook URLs, so
          operators can pin the destination outside extension code.
        - No notification email is sent while admin_email is unset.
    """

    # Environment
    env: Literal["development", "production", "test"] = Field(
        default="development",
        description="Environment: development, production, or test",
    )

    # Destinations
    url_override: str | None = Field(
        default=None,
        description="Global destination URL; replaces any hook or webhook URL when set",
    )
    default_url: str | None = Field(
        default=None,
        description="Destination used by webhooks that have no URL of their own",
    )

    # Dispatch
    dispatch_delay_seconds: int = Field(
        default=5,
        ge=0,
        description="Delay before the first delivery attempt, lets the source write settle",
    )
    task_name: str = Field(
        default="courier_send_webhook",
        description="Task name used on the task engine",
    )
    task_group: str = Field(
        default="courier",
        description="Task group (queue name) used on the task engine",
    )

    # Delivery
    default_timeout_seconds: int = Field(
        default=10,
        ge=1,
        le=300,
        description="HTTP timeout for requests without a registered webhook",
    )
    default_max_failures: int = Field(
        default=10,
        ge=1,
        description="Block threshold for requests without a registered webhook",
    )
    retry_base_seconds: int = Field(
        default=60,
        ge=1,
        description="Base delay of the exponential retry backoff",
    )

    # Failure tracking
    failure_window_seconds: int = Field(
        default=3600,
        ge=1,
        description="TTL of a failure record after its last write",
    )
    block_window_seconds: int = Field(
        default=3600,
        ge=1,
        description="Seconds after blocked_at when a block expires",
    )

    # Backends
    store_backend: Literal["memory", "redis"] = Field(
        default="memory",
        description="Failure store: 'memory' (single process) or 'redis' (shared)",
    )
    queue_backend: Literal["inprocess", "arq"] = Field(
        default="inprocess",
        description="Task engine: 'inprocess' (no durability) or 'arq' (Redis)",
    )
    redis_url: str = Field(
        default="redis://localhost:6379/0",
        description="Redis URL for the redis store and the arq task engine",
    )

    # Notifications
    admin_email: str | None = Field(
        default=None,
        description="Recipient of failure and block notifications",
    )
    site_name: str = Field(
        default="Courier",
        description="Site name used in notification subjects",
    )
    mail_from: str = Field(
        default="courier@localhost",
        description="Sender address for notifications",
    )
    smtp_host: str | None = Field(
        default=None,
        description="SMTP host; notifications are only logged when unset",
    )
    smtp_port: int = Field(default=587, ge=1, le=65535)
    smtp_username: str | None = Field(default=None)
    smtp_password: str | None = Field(default=None)
    smtp_use_tls: bool = Field(default=True, description="Use STARTTLS")

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level",
    )
    log_format: Literal["json", "text"] = Field(
        default="json",
        description="Log output format",
    )

    model_config = {
        "env_prefix": "COURIER_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
    }

    @model_validator(mode="after")
    def validate_override(self) -> "Settings":
        """Normalize a blank override to None."""
        if self.url_override is not None and not self.url_override.strip():
            object.__setattr__(self, "url_override", None)
        if self.env == "production" and self.admin_email is None:
            logger.warning("COURIER_ADMIN_EMAIL is not set; block notifications are disabled")
        return self


# Global settings instance
settings = Settings()
