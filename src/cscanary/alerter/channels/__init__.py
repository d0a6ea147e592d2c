"""Alert channel implementations."""

from cscanary.alerter.channels.email import EmailChannel

__all__ = [
    "EmailChannel",
]
