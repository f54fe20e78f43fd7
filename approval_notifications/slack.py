"""Slack notification collaborator."""

from __future__ import annotations

from approval_kernel.domain.workflow import ApprovalChannel
from approval_notifications.base import Notifier, SlackConfig


class SlackNotifier(Notifier):
    """Sends approval requests to an approver's Slack member id."""

    channel = ApprovalChannel.SLACK

    def __init__(self, config: SlackConfig) -> None:
        super().__init__(config)
