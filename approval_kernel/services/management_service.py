"""
approval_kernel.services.management_service -- Company-scoped administration
of approvers and workflow rules.

Responsibility:
    The write boundary used by the CLI.  Resolves the company once, stamps
    its id on every record written, validates records, and hides records of
    other companies (they read as not found).

Invariants enforced:
    - A rule may only route to an existing approver of the same company.
    - Approver and rule validation run before any flush.

Failure modes:
    - CompanyNotFoundError at construction.
    - ApproverNotFoundError / WorkflowRuleNotFoundError for unknown ids and
      for ids owned by another company.
    - InvalidWorkflowRuleError / InvalidApproverError on validation.
"""

from __future__ import annotations

from dataclasses import replace

from sqlalchemy.orm import Session

from approval_kernel.domain.approval import Approver
from approval_kernel.domain.workflow import Company, WorkflowRule
from approval_kernel.exceptions import (
    ApproverNotFoundError,
    InvalidWorkflowRuleError,
    WorkflowRuleNotFoundError,
)
from approval_kernel.services.approver_service import ApproverService
from approval_kernel.services.company_service import CompanyService
from approval_kernel.services.workflow_rule_service import WorkflowRuleService


class ManagementService:
    """Approver and workflow rule administration for one company."""

    def __init__(
        self,
        session: Session,
        company_name: str,
        departments: tuple[str, ...] = (),
    ) -> None:
        self._companies = CompanyService(session, {company_name: departments})
        self._approvers = ApproverService(session)
        self._rules = WorkflowRuleService(session)
        self._company = self._companies.get_by_name(company_name)

    @property
    def company(self) -> Company:
        return self._company

    # ------------------------------------------------------------------
    # Workflow rules
    # ------------------------------------------------------------------

    def create_workflow_rule(self, rule: WorkflowRule) -> WorkflowRule:
        rule = replace(rule, company_id=self._company.id, id=None)
        rule.validate()
        self._check_rule_approver(rule)
        return self._rules.create_rule(rule)

    def get_workflow_rule(self, rule_id: int) -> WorkflowRule:
        rule = self._rules.get_by_id(rule_id)
        if rule.company_id != self._company.id:
            raise WorkflowRuleNotFoundError(rule_id)
        return rule

    def update_workflow_rule(self, rule: WorkflowRule) -> WorkflowRule:
        if rule.id is None or rule.id <= 0:
            raise InvalidWorkflowRuleError("id is required for update")
        self.get_workflow_rule(rule.id)
        rule = replace(rule, company_id=self._company.id)
        rule.validate()
        self._check_rule_approver(rule)
        return self._rules.update_rule(rule)

    def delete_workflow_rule(self, rule_id: int) -> None:
        self.get_workflow_rule(rule_id)
        self._rules.delete_rule(rule_id)

    def list_workflow_rules(self) -> list[WorkflowRule]:
        return self._rules.list_rules(self._company.id)

    def _check_rule_approver(self, rule: WorkflowRule) -> None:
        try:
            self.get_approver(rule.approver_id)
        except ApproverNotFoundError:
            raise InvalidWorkflowRuleError(
                f"approver {rule.approver_id} does not exist in company "
                f"{self._company.name}",
                rule.id,
            ) from None

    # ------------------------------------------------------------------
    # Approvers
    # ------------------------------------------------------------------

    def create_approver(
        self,
        name: str,
        role: str = "",
        email: str | None = None,
        slack_id: str | None = None,
    ) -> Approver:
        return self._approvers.create_approver(
            company_id=self._company.id,
            name=name,
            role=role,
            email=email,
            slack_id=slack_id,
        )

    def get_approver(self, approver_id: int) -> Approver:
        approver = self._approvers.get_by_id(approver_id)
        if approver.company_id != self._company.id:
            raise ApproverNotFoundError(approver_id)
        return approver

    def update_approver(
        self,
        approver_id: int,
        name: str | None = None,
        role: str | None = None,
        email: str | None = None,
        slack_id: str | None = None,
    ) -> Approver:
        self.get_approver(approver_id)
        return self._approvers.update_approver(
            approver_id, name=name, role=role, email=email, slack_id=slack_id,
        )

    def delete_approver(self, approver_id: int) -> None:
        self.get_approver(approver_id)
        self._approvers.delete_approver(approver_id)

    def list_approvers(self) -> list[Approver]:
        return self._approvers.list_approvers(self._company.id)
