"""
approval_notifications -- Slack and Email notification collaborators.

Both implement ``approval_kernel.domain.directories.NotificationChannel``.
They validate and log the approval request and acknowledge it; they do not
deliver messages to a real workspace or mailbox.
"""

from approval_notifications.base import ConnectionConfig, EmailConfig, SlackConfig
from approval_notifications.email import EmailNotifier
from approval_notifications.slack import SlackNotifier

__all__ = [
    "ConnectionConfig",
    "EmailConfig",
    "EmailNotifier",
    "SlackConfig",
    "SlackNotifier",
]
