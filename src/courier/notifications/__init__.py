"""Admin notifications for Courier."""

from .blocked import BlockedNotifier
from .mailer import LogMailer, Mailer, SmtpMailer, get_mailer

__all__ = [
    "BlockedNotifier",
    "LogMailer",
    "Mailer",
    "SmtpMailer",
    "get_mailer",
]
