"""
Service layer for Approver operations.

Satisfies the ``ApproverDirectory`` protocol consumed by the invoice
processor.  Every write runs ``Approver.validate()`` first: an approver
without any contact handle is never stored.
"""

from __future__ import annotations

from dataclasses import replace

from sqlalchemy import or_, select

from approval_kernel.domain.approval import Approver as ApproverInfo
from approval_kernel.exceptions import (
    ApproverInUseError,
    ApproverNotFoundError,
    InvalidApproverError,
)
from approval_kernel.logging_config import get_logger
from approval_kernel.models.approver import Approver
from approval_kernel.models.workflow_rule import WorkflowRule
from approval_kernel.services.base import BaseService

logger = get_logger("services.approver")


class ApproverService(BaseService[Approver]):
    """Service for managing approvers."""

    def _get_by_id(self, approver_id: int) -> Approver:
        approver = self.session.get(Approver, approver_id)
        if approver is None:
            raise ApproverNotFoundError(approver_id)
        return approver

    def get_by_id(self, approver_id: int) -> ApproverInfo:
        """
        Get approver by id.

        Raises:
            ApproverNotFoundError: If approver doesn't exist.
        """
        return self._get_by_id(approver_id).to_dto()

    def list_approvers(self, company_id: int) -> list[ApproverInfo]:
        """List the company's approvers ordered by id."""
        stmt = (
            select(Approver)
            .where(Approver.company_id == company_id)
            .order_by(Approver.id)
        )
        return [a.to_dto() for a in self.session.execute(stmt).scalars()]

    def create_approver(
        self,
        company_id: int,
        name: str,
        role: str = "",
        email: str | None = None,
        slack_id: str | None = None,
    ) -> ApproverInfo:
        """
        Create a new approver.

        Args:
            company_id: Owning company.
            name: Display name.
            role: Job title shown in the approval acknowledgment.
            email: Address used by the Email channel.
            slack_id: Member id used by the Slack channel.

        Returns:
            Created approver DTO with its assigned id.

        Raises:
            InvalidApproverError: If no contact handle is given, or a handle
                is already used by another approver of the company.
        """
        dto = ApproverInfo(
            company_id=company_id,
            name=(name or "").strip(),
            role=(role or "").strip(),
            email=_clean(email),
            slack_id=_clean(slack_id),
        )
        dto.validate()
        self._check_unique_handles(dto)

        approver = Approver.from_dto(dto)
        self.session.add(approver)
        self.session.flush()
        logger.info(
            "approver_created",
            extra={"approver_id": approver.id, "company_id": company_id},
        )
        return approver.to_dto()

    def update_approver(
        self,
        approver_id: int,
        name: str | None = None,
        role: str | None = None,
        email: str | None = None,
        slack_id: str | None = None,
    ) -> ApproverInfo:
        """
        Update approver details.

        ``None`` leaves a field unchanged; an empty string clears a contact
        handle.  The company of an approver cannot be changed.

        Raises:
            ApproverNotFoundError: If approver doesn't exist.
            InvalidApproverError: If the result would fail validation.
        """
        approver = self._get_by_id(approver_id)
        current = approver.to_dto()
        changes: dict[str, str | None] = {}
        if name is not None:
            changes["name"] = name.strip()
        if role is not None:
            changes["role"] = role.strip()
        if email is not None:
            changes["email"] = _clean(email)
        if slack_id is not None:
            changes["slack_id"] = _clean(slack_id)

        updated = replace(current, **changes)
        updated.validate()
        self._check_unique_handles(updated)

        approver.name = updated.name
        approver.role = updated.role
        approver.email = updated.email
        approver.slack_id = updated.slack_id
        self.session.flush()
        logger.info("approver_updated", extra={"approver_id": approver_id})
        return approver.to_dto()

    def delete_approver(self, approver_id: int) -> None:
        """
        Delete an approver.

        Raises:
            ApproverNotFoundError: If approver doesn't exist.
            ApproverInUseError: If workflow rules still route to it.
        """
        approver = self._get_by_id(approver_id)
        stmt = (
            select(WorkflowRule.id)
            .where(WorkflowRule.approver_id == approver_id)
            .order_by(WorkflowRule.id)
        )
        rule_ids = list(self.session.execute(stmt).scalars())
        if rule_ids:
            raise ApproverInUseError(approver_id, rule_ids)

        self.session.delete(approver)
        self.session.flush()
        logger.info("approver_deleted", extra={"approver_id": approver_id})

    def _check_unique_handles(self, dto: ApproverInfo) -> None:
        clauses = []
        if dto.email:
            clauses.append(Approver.email == dto.email)
        if dto.slack_id:
            clauses.append(Approver.slack_id == dto.slack_id)
        stmt = select(Approver).where(
            Approver.company_id == dto.company_id, or_(*clauses),
        )
        if dto.id is not None:
            stmt = stmt.where(Approver.id != dto.id)
        clash = self.session.execute(stmt).scalars().first()
        if clash is not None:
            raise InvalidApproverError(
                f"contact handle already used by approver {clash.id}", dto.id,
            )


def _clean(value: str | None) -> str | None:
    if value is None:
        return None
    return value.strip() or None
