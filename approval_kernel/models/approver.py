"""
Module: approval_kernel.models.approver
Responsibility: ORM persistence for approvers and their contact handles.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - An approver belongs to exactly one company (FK, NOT NULL).
    - Within a company an email address or Slack id identifies at most one
      approver (unique constraints; NULLs do not collide).
    - "At least one contact handle" is checked by Approver.validate() in
      the service layer before insert/update.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from approval_kernel.db.base import TrackedBase

if TYPE_CHECKING:
    from approval_kernel.domain.approval import Approver as ApproverDTO


class Approver(TrackedBase):
    """Persistent approver."""

    __tablename__ = "approvers"

    __table_args__ = (
        UniqueConstraint("company_id", "email", name="uq_approvers_company_email"),
        UniqueConstraint("company_id", "slack_id", name="uq_approvers_company_slack_id"),
        Index("ix_approvers_company", "company_id"),
    )

    company_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("companies.id"), nullable=False,
    )
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    role: Mapped[str] = mapped_column(String(200), nullable=False, default="")
    email: Mapped[str | None] = mapped_column(String(320), nullable=True)
    slack_id: Mapped[str | None] = mapped_column(String(64), nullable=True)

    def __repr__(self) -> str:
        return f"<Approver {self.id} {self.name} company={self.company_id}>"

    def to_dto(self) -> ApproverDTO:
        """Convert ORM model to frozen domain DTO."""
        from approval_kernel.domain.approval import Approver as ApproverDTO

        return ApproverDTO(
            id=self.id,
            company_id=self.company_id,
            name=self.name,
            role=self.role,
            email=self.email,
            slack_id=self.slack_id,
        )

    @classmethod
    def from_dto(cls, dto: ApproverDTO) -> Approver:
        """Create ORM model from domain DTO (id assigned on flush)."""
        return cls(
            company_id=dto.company_id,
            name=dto.name,
            role=dto.role,
            email=dto.email or None,
            slack_id=dto.slack_id or None,
        )
