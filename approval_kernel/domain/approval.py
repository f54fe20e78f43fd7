"""
Approval domain types (``approval_kernel.domain.approval``).

Responsibility
--------------
Pure value objects for the approval hand-off: the approver being
contacted, the invoice request submitted by a caller, the request handed
to a notification collaborator and the acknowledgment it returns.

Architecture position
---------------------
**Kernel domain layer** -- pure value objects.  ZERO I/O.

Invariants enforced
-------------------
* An approver carries at least one of ``email`` / ``slack_id``.  Whether
  it carries the one a *particular* channel needs is checked at dispatch
  time, not here.
* An invoice request names a company and has a non-negative amount.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from approval_kernel.domain.workflow import ApprovalChannel, to_amount
from approval_kernel.exceptions import InvalidApproverError, InvalidInvoiceError


@dataclass(frozen=True)
class Approver:
    """A contactable decision-maker of one company."""

    company_id: int
    name: str
    role: str = ""
    email: str | None = None
    slack_id: str | None = None
    id: int | None = None

    def validate(self) -> None:
        """Check the approver can be stored.

        Raises:
            InvalidApproverError: naming the first violated invariant.
        """
        if self.company_id is None or self.company_id <= 0:
            raise InvalidApproverError("company_id must be positive", self.id)
        if not self.name or not self.name.strip():
            raise InvalidApproverError("name is required", self.id)
        if not self.email and not self.slack_id:
            raise InvalidApproverError("email or slack_id is required", self.id)

    def contact_for(self, channel: ApprovalChannel) -> str | None:
        """Return the handle ``channel`` delivers to, or None when absent."""
        return getattr(self, channel.contact_field) or None


@dataclass(frozen=True)
class InvoiceRequest:
    """A pending invoice submitted for routing."""

    company_name: str
    amount: Decimal
    department: str = ""
    manager_approval_required: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "amount", to_amount(self.amount))
        object.__setattr__(self, "department", (self.department or "").strip())

    def validate(self) -> None:
        """Raises InvalidInvoiceError if the request cannot be routed."""
        if not self.company_name or not self.company_name.strip():
            raise InvalidInvoiceError("company name is required")
        if self.amount < 0:
            raise InvalidInvoiceError(f"amount must not be negative, got {self.amount}")


@dataclass(frozen=True)
class ApprovalRequest:
    """What a notification collaborator receives."""

    approver: Approver
    amount: Decimal
    channel: ApprovalChannel


@dataclass(frozen=True)
class ApprovalResponse:
    """Acknowledgment of a dispatched approval request."""

    approver_name: str
    approver_role: str
    channel: str
    contact_id: str
