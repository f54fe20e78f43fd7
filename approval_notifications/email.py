"""Email notification collaborator."""

from __future__ import annotations

from approval_kernel.domain.workflow import ApprovalChannel
from approval_notifications.base import EmailConfig, Notifier


class EmailNotifier(Notifier):
    """Sends approval requests to an approver's email address."""

    channel = ApprovalChannel.EMAIL

    def __init__(self, config: EmailConfig) -> None:
        super().__init__(config)
