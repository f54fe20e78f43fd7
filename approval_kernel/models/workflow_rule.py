"""
Module: approval_kernel.models.workflow_rule
Responsibility: ORM persistence for workflow rules.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - channel is one of the ApprovalChannel values (check constraint).
    - min_amount <= max_amount when both are set (check constraint, mirrors
      WorkflowRule.validate()).
    - The tri-state manager constraint is stored as a nullable boolean:
      NULL = any, TRUE = required, FALSE = not required.  Conversion to
      ManagerApproval happens only in to_dto()/from_dto().
    - Specificity scoring is NOT done in SQL; rules are fetched by company
      and scored in memory by approval_engines.rule_resolver.
"""

from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, CheckConstraint, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from approval_kernel.db.base import TrackedBase

if TYPE_CHECKING:
    from approval_kernel.domain.workflow import WorkflowRule as WorkflowRuleDTO


class WorkflowRule(TrackedBase):
    """Persistent workflow rule."""

    __tablename__ = "workflow_rules"

    __table_args__ = (
        CheckConstraint(
            "channel IN ('slack', 'email')",
            name="ck_workflow_rules_valid_channel",
        ),
        CheckConstraint(
            "min_amount IS NULL OR max_amount IS NULL OR min_amount <= max_amount",
            name="ck_workflow_rules_amount_range",
        ),
        Index("ix_workflow_rules_company", "company_id", "id"),
    )

    company_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("companies.id"), nullable=False,
    )
    min_amount: Mapped[Decimal | None] = mapped_column(nullable=True)
    max_amount: Mapped[Decimal | None] = mapped_column(nullable=True)
    department: Mapped[str | None] = mapped_column(String(100), nullable=True)
    manager_approval_required: Mapped[bool | None] = mapped_column(
        Boolean, nullable=True,
    )
    approver_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("approvers.id"), nullable=False,
    )
    channel: Mapped[str] = mapped_column(String(16), nullable=False)

    def __repr__(self) -> str:
        return (
            f"<WorkflowRule {self.id} company={self.company_id} "
            f"[{self.min_amount}, {self.max_amount}) channel={self.channel}>"
        )

    def to_dto(self) -> WorkflowRuleDTO:
        """Convert ORM model to frozen domain DTO."""
        from approval_kernel.domain.workflow import (
            ApprovalChannel,
            ManagerApproval,
            WorkflowRule as WorkflowRuleDTO,
        )

        return WorkflowRuleDTO(
            id=self.id,
            company_id=self.company_id,
            min_amount=self.min_amount,
            max_amount=self.max_amount,
            department=self.department,
            manager_approval=ManagerApproval.from_optional_bool(
                self.manager_approval_required
            ),
            approver_id=self.approver_id,
            channel=ApprovalChannel(self.channel),
        )

    def apply_dto(self, dto: WorkflowRuleDTO) -> None:
        """Copy every routing field of ``dto`` onto this row (not the id)."""
        self.company_id = dto.company_id
        self.min_amount = dto.min_amount
        self.max_amount = dto.max_amount
        self.department = dto.department
        self.manager_approval_required = dto.manager_approval.to_optional_bool()
        self.approver_id = dto.approver_id
        self.channel = dto.channel.value

    @classmethod
    def from_dto(cls, dto: WorkflowRuleDTO) -> WorkflowRule:
        """Create ORM model from domain DTO (id assigned on flush)."""
        row = cls()
        row.apply_dto(dto)
        return row
