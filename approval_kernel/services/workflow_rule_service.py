"""
Service layer for WorkflowRule operations (the rule catalog).

Satisfies the ``RuleCatalog`` protocol: ``get_candidates`` returns every
rule of a company in id order and leaves scoring to the pure engine.
Every write runs ``WorkflowRule.validate()`` first.
"""

from __future__ import annotations

from sqlalchemy import select

from approval_kernel.domain.workflow import WorkflowRule as WorkflowRuleInfo
from approval_kernel.exceptions import InvalidWorkflowRuleError, WorkflowRuleNotFoundError
from approval_kernel.logging_config import get_logger
from approval_kernel.models.workflow_rule import WorkflowRule
from approval_kernel.services.base import BaseService

logger = get_logger("services.workflow_rule")


class WorkflowRuleService(BaseService[WorkflowRule]):
    """Service for managing workflow rules."""

    def _get_by_id(self, rule_id: int) -> WorkflowRule:
        rule = self.session.get(WorkflowRule, rule_id)
        if rule is None:
            raise WorkflowRuleNotFoundError(rule_id)
        return rule

    def get_by_id(self, rule_id: int) -> WorkflowRuleInfo:
        """
        Get rule by id.

        Raises:
            WorkflowRuleNotFoundError: If the rule doesn't exist.
        """
        return self._get_by_id(rule_id).to_dto()

    def list_rules(self, company_id: int) -> list[WorkflowRuleInfo]:
        """List the company's rules ordered by id."""
        stmt = (
            select(WorkflowRule)
            .where(WorkflowRule.company_id == company_id)
            .order_by(WorkflowRule.id)
        )
        return [r.to_dto() for r in self.session.execute(stmt).scalars()]

    def get_candidates(self, company_id: int) -> list[WorkflowRuleInfo]:
        """Rule catalog lookup used by the resolver."""
        return self.list_rules(company_id)

    def create_rule(self, rule: WorkflowRuleInfo) -> WorkflowRuleInfo:
        """
        Create a workflow rule.  ``rule.id`` is ignored; the catalog assigns it.

        Raises:
            InvalidWorkflowRuleError: If the rule fails validation.
        """
        rule.validate()
        row = WorkflowRule.from_dto(rule)
        self.session.add(row)
        self.session.flush()
        logger.info(
            "workflow_rule_created",
            extra={"rule_id": row.id, "company_id": row.company_id},
        )
        return row.to_dto()

    def update_rule(self, rule: WorkflowRuleInfo) -> WorkflowRuleInfo:
        """
        Replace every routing field of an existing rule.

        Raises:
            InvalidWorkflowRuleError: If ``rule.id`` is missing or the rule
                fails validation.
            WorkflowRuleNotFoundError: If the rule doesn't exist.
        """
        if rule.id is None or rule.id <= 0:
            raise InvalidWorkflowRuleError("id is required for update")
        rule.validate()
        row = self._get_by_id(rule.id)
        row.apply_dto(rule)
        self.session.flush()
        logger.info("workflow_rule_updated", extra={"rule_id": row.id})
        return row.to_dto()

    def delete_rule(self, rule_id: int) -> None:
        """
        Delete a workflow rule.

        Raises:
            WorkflowRuleNotFoundError: If the rule doesn't exist.
        """
        row = self._get_by_id(rule_id)
        self.session.delete(row)
        self.session.flush()
        logger.info("workflow_rule_deleted", extra={"rule_id": rule_id})
