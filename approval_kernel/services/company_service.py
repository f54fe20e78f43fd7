"""
Service layer for Company operations.

Satisfies the ``CompanyDirectory`` protocol consumed by the invoice
processor.  Returns ``Company`` DTOs instead of ORM entities.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence

from sqlalchemy import select
from sqlalchemy.orm import Session

from approval_kernel.domain.workflow import Company as CompanyInfo
from approval_kernel.exceptions import (
    CompanyAlreadyExistsError,
    CompanyNotFoundError,
    ValidationError,
)
from approval_kernel.logging_config import get_logger
from approval_kernel.models.company import Company
from approval_kernel.services.base import BaseService

logger = get_logger("services.company")


class CompanyService(BaseService[Company]):
    """
    Service for managing companies.

    ``departments`` maps a company name to its allowed departments.  The
    list is configuration, not persisted; it is attached to the returned
    DTOs so the CLI can validate department input.
    """

    def __init__(
        self,
        session: Session,
        departments: Mapping[str, Sequence[str]] | None = None,
    ):
        super().__init__(session)
        self._departments = {
            name: tuple(depts) for name, depts in (departments or {}).items()
        }

    def _to_dto(self, company: Company) -> CompanyInfo:
        return company.to_dto(self._departments.get(company.name, ()))

    def _find(self, name: str) -> Company | None:
        stmt = select(Company).where(Company.name == name)
        return self.session.execute(stmt).scalar_one_or_none()

    def get_by_name(self, name: str) -> CompanyInfo:
        """
        Get company by its exact name.

        Raises:
            CompanyNotFoundError: If no company has this name.
        """
        company = self._find(name)
        if company is None:
            raise CompanyNotFoundError(name)
        return self._to_dto(company)

    def find_by_name(self, name: str) -> CompanyInfo | None:
        """Find company by name, returning None if not found."""
        company = self._find(name)
        return self._to_dto(company) if company else None

    def get_by_id(self, company_id: int) -> CompanyInfo:
        """
        Get company by id.

        Raises:
            CompanyNotFoundError: If the id is unknown.
        """
        company = self.session.get(Company, company_id)
        if company is None:
            raise CompanyNotFoundError(str(company_id))
        return self._to_dto(company)

    def list_companies(self) -> list[CompanyInfo]:
        """List all companies ordered by id."""
        stmt = select(Company).order_by(Company.id)
        return [self._to_dto(c) for c in self.session.execute(stmt).scalars()]

    def create_company(self, name: str) -> CompanyInfo:
        """
        Create a new company.

        Raises:
            ValidationError: If the name is blank.
            CompanyAlreadyExistsError: If the name is taken.
        """
        name = (name or "").strip()
        if not name:
            raise ValidationError("company name is required")
        if self._find(name) is not None:
            raise CompanyAlreadyExistsError(name)

        company = Company(name=name)
        self.session.add(company)
        self.session.flush()
        logger.info("company_created", extra={"company_id": company.id, "company": name})
        return self._to_dto(company)
