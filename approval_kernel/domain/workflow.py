"""
Workflow routing domain types (``approval_kernel.domain.workflow``).

Responsibility
--------------
Pure value objects describing how an invoice is routed: the approval
channel selector, the tri-state manager-approval constraint, workflow
rules, the per-call invoice query, and companies.

Architecture position
---------------------
**Kernel domain layer** -- pure value objects.  ZERO I/O.  No imports
from ``db/``, ``models/`` or ``services/``.

Invariants enforced
-------------------
* A rule's amount range is ``[min_amount, max_amount)``; when both bounds
  are present ``min_amount <= max_amount``.
* Amount bounds carry at most ``AMOUNT_PLACES`` decimal places, the
  scale of the amount columns; finer bounds are rejected rather than
  rounded on save.
* ``company_id`` and ``approver_id`` are positive.
* ``channel`` is one of the two ``ApprovalChannel`` members.
* "Manager approval not required" and "don't care" are distinct values
  (``ManagerApproval.NOT_REQUIRED`` vs ``ManagerApproval.ANY``); the
  nullable-boolean form exists only at the persistence boundary.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from enum import Enum

from approval_kernel.exceptions import InvalidInvoiceError, InvalidWorkflowRuleError

AMOUNT_PLACES = 2


# =========================================================================
# Channel and manager-approval selectors
# =========================================================================


class ApprovalChannel(str, Enum):
    """Notification transport a rule routes its approval request through."""

    SLACK = "slack"
    EMAIL = "email"

    @property
    def contact_field(self) -> str:
        """Name of the Approver attribute this channel delivers to."""
        return _CONTACT_FIELDS[self]

    @classmethod
    def parse(cls, value: str | ApprovalChannel) -> ApprovalChannel:
        """Parse a channel name case-insensitively.

        Raises:
            ValueError: if ``value`` names no channel.
        """
        if isinstance(value, ApprovalChannel):
            return value
        return cls(str(value).strip().lower())


_CONTACT_FIELDS: dict[ApprovalChannel, str] = {
    ApprovalChannel.SLACK: "slack_id",
    ApprovalChannel.EMAIL: "email",
}


class ManagerApproval(str, Enum):
    """Tri-state manager-approval constraint of a workflow rule."""

    ANY = "any"
    REQUIRED = "required"
    NOT_REQUIRED = "not_required"

    @property
    def is_constrained(self) -> bool:
        return self is not ManagerApproval.ANY

    def matches(self, manager_approval_required: bool) -> bool:
        """Check the constraint against an invoice's manager flag."""
        if self is ManagerApproval.ANY:
            return True
        return (self is ManagerApproval.REQUIRED) == manager_approval_required

    def to_optional_bool(self) -> bool | None:
        """Persistence form: None = any, True = required, False = not required."""
        if self is ManagerApproval.ANY:
            return None
        return self is ManagerApproval.REQUIRED

    @classmethod
    def from_optional_bool(cls, value: bool | None) -> ManagerApproval:
        if value is None:
            return cls.ANY
        return cls.REQUIRED if value else cls.NOT_REQUIRED


# =========================================================================
# Workflow rule
# =========================================================================


@dataclass(frozen=True)
class WorkflowRule:
    """A conditional routing record of one company.

    ``None`` for ``min_amount``, ``max_amount`` or ``department`` and
    ``ManagerApproval.ANY`` for ``manager_approval`` are wildcards.
    ``id`` is ``None`` until the rule catalog assigns one.
    """

    company_id: int
    approver_id: int
    channel: ApprovalChannel
    min_amount: Decimal | None = None
    max_amount: Decimal | None = None
    department: str | None = None
    manager_approval: ManagerApproval = ManagerApproval.ANY
    id: int | None = None

    def validate(self) -> None:
        """Check the rule's structural invariants.

        Raises:
            InvalidWorkflowRuleError: naming the first violated invariant.
        """
        if not isinstance(self.channel, ApprovalChannel):
            raise InvalidWorkflowRuleError(
                f"unsupported approval channel {self.channel!r}", self.id,
            )
        if not isinstance(self.manager_approval, ManagerApproval):
            raise InvalidWorkflowRuleError(
                f"invalid manager approval constraint {self.manager_approval!r}",
                self.id,
            )
        for name, bound in (("min_amount", self.min_amount), ("max_amount", self.max_amount)):
            if bound is not None and bound < 0:
                raise InvalidWorkflowRuleError(f"{name} must not be negative", self.id)
            if bound is not None and _decimal_places(bound) > AMOUNT_PLACES:
                raise InvalidWorkflowRuleError(
                    f"{name} {bound} has more than {AMOUNT_PLACES} decimal places",
                    self.id,
                )
        if (
            self.min_amount is not None
            and self.max_amount is not None
            and self.min_amount > self.max_amount
        ):
            raise InvalidWorkflowRuleError(
                f"min_amount {self.min_amount} exceeds max_amount {self.max_amount}",
                self.id,
            )
        if self.company_id is None or self.company_id <= 0:
            raise InvalidWorkflowRuleError("company_id must be positive", self.id)
        if self.approver_id is None or self.approver_id <= 0:
            raise InvalidWorkflowRuleError("approver_id must be positive", self.id)
        if self.department is not None and not self.department.strip():
            raise InvalidWorkflowRuleError(
                "department must be omitted rather than blank", self.id,
            )


# =========================================================================
# Invoice query and company
# =========================================================================


def _decimal_places(value: Decimal) -> int:
    exponent = Decimal(value).normalize().as_tuple().exponent
    return max(0, -exponent)


def to_amount(value: Decimal | int | str | float) -> Decimal:
    """Coerce a currency amount to ``Decimal``.

    Floats go through ``str`` so ``7500.1`` stays ``7500.1``.

    Raises:
        InvalidInvoiceError: if the value is not a finite number.
    """
    if isinstance(value, Decimal):
        amount = value
    else:
        try:
            amount = Decimal(str(value).strip())
        except InvalidOperation:
            raise InvalidInvoiceError(f"amount {value!r} is not a number") from None
    if not amount.is_finite():
        raise InvalidInvoiceError(f"amount {value!r} is not a finite number")
    return amount


@dataclass(frozen=True)
class InvoiceQuery:
    """Ephemeral tuple used to select a rule. Never persisted."""

    company_id: int
    amount: Decimal
    department: str = ""
    manager_approval_required: bool = False

    def __post_init__(self) -> None:
        if self.amount < 0:
            raise InvalidInvoiceError(f"amount must not be negative, got {self.amount}")


@dataclass(frozen=True)
class Company:
    """A company and, at the workflow layer, its allowed department names."""

    id: int
    name: str
    departments: tuple[str, ...] = ()
