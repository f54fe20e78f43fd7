"""
approval_kernel.services.channel_dispatcher -- Channel selection, contact
checks and the single notification call.

Responsibility:
    Map a rule's ``ApprovalChannel`` to its notification collaborator,
    check the approver carries the handle that channel delivers to, and
    invoke the collaborator exactly once.

Invariants enforced:
    - A Slack rule only ever reaches the Slack collaborator, an Email rule
      only the Email collaborator.  A missing handle is a hard failure,
      never a fallback to the other channel.
    - select_channel() and validate_contact() make no notification call, so
      a failure in either leaves no side effect.
    - dispatch() is not retried; notification delivery is not idempotent.

Failure modes:
    - UnsupportedChannelError: selector with no collaborator.
    - MissingContactError: approver lacks the channel's handle.
    - UpstreamNotificationError: raised by the collaborator, propagated as is.
"""

from __future__ import annotations

from decimal import Decimal

from approval_kernel.domain.approval import ApprovalRequest, ApprovalResponse, Approver
from approval_kernel.domain.directories import NotificationChannel
from approval_kernel.domain.workflow import ApprovalChannel
from approval_kernel.exceptions import MissingContactError, UnsupportedChannelError
from approval_kernel.logging_config import get_logger

logger = get_logger("services.channel_dispatcher")


class ChannelDispatcher:
    """Routes approval requests to the Slack or Email collaborator."""

    def __init__(self, slack: NotificationChannel, email: NotificationChannel) -> None:
        self._channels: dict[ApprovalChannel, NotificationChannel] = {
            ApprovalChannel.SLACK: slack,
            ApprovalChannel.EMAIL: email,
        }

    def select_channel(self, channel: ApprovalChannel | str) -> ApprovalChannel:
        """Normalise a channel selector and check a collaborator serves it.

        Raises:
            UnsupportedChannelError: If no collaborator serves ``channel``.
        """
        try:
            selected = ApprovalChannel.parse(channel)
        except ValueError:
            raise UnsupportedChannelError(channel) from None
        if selected not in self._channels:
            raise UnsupportedChannelError(channel)
        return selected

    def validate_contact(self, approver: Approver, channel: ApprovalChannel) -> str:
        """Return the approver's handle for ``channel``.

        Raises:
            MissingContactError: If the approver has no such handle.
        """
        contact = approver.contact_for(channel)
        if not contact:
            raise MissingContactError(approver.id, channel.value, channel.contact_field)
        return contact

    def dispatch(
        self,
        approver: Approver,
        channel: ApprovalChannel,
        amount: Decimal,
    ) -> ApprovalResponse:
        """Send one approval request through ``channel``'s collaborator."""
        request = ApprovalRequest(approver=approver, amount=amount, channel=channel)
        response = self._channels[channel].send(request)
        logger.info(
            "approval_request_dispatched",
            extra={
                "approver_id": approver.id,
                "channel": channel.value,
                "contact_id": response.contact_id,
            },
        )
        return response
