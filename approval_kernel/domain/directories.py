"""
Collaborator protocols consumed by the invoice pipeline.

The persistence services in ``approval_kernel.services`` satisfy the
directory and catalog protocols; ``approval_notifications`` satisfies
``NotificationChannel``.  Tests substitute in-memory fakes.
"""

from __future__ import annotations

from typing import Protocol

from approval_kernel.domain.approval import ApprovalRequest, ApprovalResponse, Approver
from approval_kernel.domain.workflow import Company, WorkflowRule


class CompanyDirectory(Protocol):
    """Resolves company names."""

    def get_by_name(self, name: str) -> Company:
        """Return the company or raise CompanyNotFoundError."""
        ...


class ApproverDirectory(Protocol):
    """Resolves approver ids to contact details."""

    def get_by_id(self, approver_id: int) -> Approver:
        """Return the approver or raise ApproverNotFoundError."""
        ...


class RuleCatalog(Protocol):
    """Holds workflow rules per company."""

    def get_candidates(self, company_id: int) -> list[WorkflowRule]:
        """Return every rule of the company (may be empty)."""
        ...


class NotificationChannel(Protocol):
    """One notification transport (Slack or Email)."""

    def send(self, request: ApprovalRequest) -> ApprovalResponse:
        """Deliver the request or raise UpstreamNotificationError."""
        ...
