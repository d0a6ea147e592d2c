"""Alerting layer - failure log, cooldown and notification delivery."""

from cscanary.alerter.channels.email import EmailChannel
from cscanary.alerter.formatter import build_notification, format_status_line
from cscanary.alerter.reporter import AlertChannel, Reporter
from cscanary.alerter.sink import FileLogSink
from cscanary.alerter.throttle import AlertThrottle

__all__ = [
    "AlertChannel",
    "AlertThrottle",
    "EmailChannel",
    "FileLogSink",
    "Reporter",
    "build_notification",
    "format_status_line",
]
