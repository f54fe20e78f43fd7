"""
Shared plumbing for the notification collaborators.

Responsibility:
    Hold the connection configuration, reject an empty connection string at
    construction, and build the ``ApprovalResponse`` for an accepted request.

Invariants enforced:
    - A notifier never exists without a non-empty connection string.
    - A notifier only answers for its own channel and only with the
      approver's handle for that channel.

Failure modes:
    - ConfigurationError at construction.
    - UnsupportedChannelError if handed a request for another channel.
    - MissingContactError if the approver lacks the channel's handle.
"""

from __future__ import annotations

from dataclasses import dataclass

from approval_kernel.domain.approval import ApprovalRequest, ApprovalResponse
from approval_kernel.domain.workflow import ApprovalChannel
from approval_kernel.exceptions import (
    ConfigurationError,
    MissingContactError,
    UnsupportedChannelError,
)
from approval_kernel.logging_config import get_logger


@dataclass(frozen=True)
class ConnectionConfig:
    """Connection settings of one notification transport."""

    connection_string: str


@dataclass(frozen=True)
class SlackConfig(ConnectionConfig):
    pass


@dataclass(frozen=True)
class EmailConfig(ConnectionConfig):
    pass


class Notifier:
    """Base class for a single-channel notification collaborator."""

    channel: ApprovalChannel

    def __init__(self, config: ConnectionConfig) -> None:
        if not config.connection_string or not config.connection_string.strip():
            raise ConfigurationError(
                f"{self.channel.value}.connection_string",
                f"{self.channel.value} connection string is required",
            )
        self._config = config
        self._logger = get_logger(f"notifications.{self.channel.value}")

    @property
    def config(self) -> ConnectionConfig:
        return self._config

    def send(self, request: ApprovalRequest) -> ApprovalResponse:
        """Accept one approval request and acknowledge it."""
        if request.channel is not self.channel:
            raise UnsupportedChannelError(request.channel)

        approver = request.approver
        contact = approver.contact_for(self.channel)
        if not contact:
            raise MissingContactError(
                approver.id, self.channel.value, self.channel.contact_field,
            )

        self._logger.info(
            "approval_request_sent",
            extra={
                "approver_name": approver.name,
                "approver_role": approver.role,
                "contact_id": contact,
                "amount": request.amount,
            },
        )
        return ApprovalResponse(
            approver_name=approver.name,
            approver_role=approver.role,
            channel=self.channel.value,
            contact_id=contact,
        )
