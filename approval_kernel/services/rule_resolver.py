"""
approval_kernel.services.rule_resolver -- Binds the pure resolution engine
to a rule catalog.

Responsibility:
    Fetch a company's candidate rules from the catalog and delegate the
    choice to ``approval_engines.rule_resolver``.  Turns "no match" into
    ``RuleNotFoundError``.

Architecture position:
    Kernel > Services.  Holds no state besides the catalog reference, so a
    single instance may serve concurrent invoices.
"""

from __future__ import annotations

from decimal import Decimal

from approval_engines.rule_resolver import select_matching_rule, specificity_score
from approval_kernel.domain.directories import RuleCatalog
from approval_kernel.domain.workflow import InvoiceQuery, WorkflowRule, to_amount
from approval_kernel.exceptions import RuleNotFoundError
from approval_kernel.logging_config import get_logger

logger = get_logger("services.rule_resolver")


class RuleResolver:
    """Resolves an invoice to the single most specific workflow rule."""

    def __init__(self, catalog: RuleCatalog) -> None:
        self._catalog = catalog

    def resolve(
        self,
        company_id: int,
        amount: Decimal | int | str,
        department: str = "",
        manager_approval_required: bool = False,
    ) -> WorkflowRule:
        """Resolve the rule for the given invoice attributes.

        Raises:
            InvalidInvoiceError: If the amount is negative or not a number.
            RuleNotFoundError: If no rule of the company matches.
        """
        query = InvoiceQuery(
            company_id=company_id,
            amount=to_amount(amount),
            department=department or "",
            manager_approval_required=manager_approval_required,
        )
        return self.resolve_query(query)

    def resolve_query(self, query: InvoiceQuery) -> WorkflowRule:
        """Resolve the rule for a prepared query.

        Raises:
            RuleNotFoundError: If no rule of the company matches.
        """
        candidates = self._catalog.get_candidates(query.company_id)
        rule = select_matching_rule(candidates, query)
        if rule is None:
            logger.info(
                "workflow_rule_not_found",
                extra={
                    "company_id": query.company_id,
                    "amount": query.amount,
                    "candidates": len(candidates),
                },
            )
            raise RuleNotFoundError(
                query.company_id,
                str(query.amount),
                query.department,
                query.manager_approval_required,
            )

        logger.debug(
            "workflow_rule_resolved",
            extra={
                "rule_id": rule.id,
                "specificity": specificity_score(rule),
                "candidates": len(candidates),
            },
        )
        return rule
