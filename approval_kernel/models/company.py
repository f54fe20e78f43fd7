"""
Module: approval_kernel.models.company
Responsibility: ORM persistence for companies, the tenants that own
    approvers and workflow rules.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - Company names are unique (uq_companies_name); the invoice pipeline
      resolves companies by name.

Failure modes:
    - IntegrityError on duplicate name (CompanyService maps it to
      CompanyAlreadyExistsError).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from approval_kernel.db.base import TrackedBase

if TYPE_CHECKING:
    from approval_kernel.domain.workflow import Company as CompanyDTO


class Company(TrackedBase):
    """A company. Allowed departments are configuration, not stored here."""

    __tablename__ = "companies"

    __table_args__ = (
        UniqueConstraint("name", name="uq_companies_name"),
    )

    name: Mapped[str] = mapped_column(String(200), nullable=False)

    def __repr__(self) -> str:
        return f"<Company {self.id} {self.name}>"

    def to_dto(self, departments: tuple[str, ...] = ()) -> CompanyDTO:
        """Convert ORM model to frozen domain DTO."""
        from approval_kernel.domain.workflow import Company as CompanyDTO

        return CompanyDTO(id=self.id, name=self.name, departments=departments)
