"""Status line and notification formatting."""

from __future__ import annotations

from typing import TYPE_CHECKING

from cscanary.models import NotificationMessage

if TYPE_CHECKING:
    from datetime import datetime

    from cscanary.models import CheckResult, ProtocolKind, StatusPair

SUBJECT_TEMPLATE = "CSCanary [{protocol}] - Failure"


def format_timestamp(moment: datetime) -> str:
    """Format as ``yyyy-M-d hh:mm``.

    Month and day carry no leading zero; the hour is on a 12-hour clock
    without an AM/PM marker.
    """
    return f"{moment.year}-{moment.month}-{moment.day} {moment:%I:%M}"


def passed_text(result: CheckResult | None) -> str:
    """Map a result to ``passed`` or ``failed``."""
    return "passed" if result is not None and result.success else "failed"


def format_status_line(kind: ProtocolKind, status: StatusPair) -> str:
    """Build the log line for a reported cycle."""
    return (
        f"{format_timestamp(status.timestamp)} - [{kind.label}] "
        f"Internal: {passed_text(status.internal)} | "
        f"External: {passed_text(status.external)}"
    )


def build_notification(kind: ProtocolKind, line: str) -> NotificationMessage:
    """Wrap a status line into an alert email."""
    return NotificationMessage(subject=SUBJECT_TEMPLATE.format(protocol=kind.label), body=line)
