"""
approval_engines.rule_resolver -- Pure workflow rule resolution engine.

Responsibility:
    Decide which of a company's workflow rules routes an invoice: filter
    the rules whose constraints all hold for the invoice, then pick the
    most specific one.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import approval_kernel/domain/ types.

Invariants enforced:
    - Amount ranges are half-open: ``min_amount`` inclusive, ``max_amount``
      exclusive, so adjacent ranges partition without overlap.
    - Department comparison is exact and case-sensitive.
    - Most specific wins: the score is the number of constrained fields
      (amount floor, amount ceiling, department, manager flag).
    - Ties on score go to the lowest rule id, independent of input order.
    - Purity: no clock access, no I/O, no database.  Safe to call from any
      number of threads.

Failure modes:
    - Returns ``None`` when no rule matches.  Raising ``RuleNotFoundError``
      is the caller's job (see ``approval_kernel.services.rule_resolver``).
"""

from __future__ import annotations

from collections.abc import Iterable
from decimal import Decimal

from approval_kernel.domain.workflow import InvoiceQuery, WorkflowRule

MAX_SPECIFICITY = 4


def rule_matches(rule: WorkflowRule, query: InvoiceQuery) -> bool:
    """Check whether every constraint of ``rule`` holds for ``query``.

    A rule of another company never matches.
    """
    if rule.company_id != query.company_id:
        return False
    if not amount_in_range(query.amount, rule.min_amount, rule.max_amount):
        return False
    if rule.department is not None and rule.department != query.department:
        return False
    return rule.manager_approval.matches(query.manager_approval_required)


def amount_in_range(
    amount: Decimal,
    min_amount: Decimal | None,
    max_amount: Decimal | None,
) -> bool:
    """Half-open range check ``[min_amount, max_amount)``; None is unbounded."""
    if min_amount is not None and amount < min_amount:
        return False
    if max_amount is not None and amount >= max_amount:
        return False
    return True


def specificity_score(rule: WorkflowRule) -> int:
    """Count the rule's constrained (non-wildcard) fields, 0 to 4."""
    return sum((
        rule.min_amount is not None,
        rule.max_amount is not None,
        rule.department is not None,
        rule.manager_approval.is_constrained,
    ))


def matching_rules(
    rules: Iterable[WorkflowRule],
    query: InvoiceQuery,
) -> list[WorkflowRule]:
    """Return the matching rules, best first (score desc, then id asc)."""
    matches = [rule for rule in rules if rule_matches(rule, query)]
    matches.sort(key=_precedence_key)
    return matches


def select_matching_rule(
    rules: Iterable[WorkflowRule],
    query: InvoiceQuery,
) -> WorkflowRule | None:
    """Select the single most specific rule matching ``query``.

    Args:
        rules: Candidate rules, in any order.
        query: The invoice attributes.

    Returns:
        The matching rule with the highest specificity score; among equal
        scores the one with the smallest id.  None if nothing matches.
    """
    best: WorkflowRule | None = None
    for rule in rules:
        if not rule_matches(rule, query):
            continue
        if best is None or _precedence_key(rule) < _precedence_key(best):
            best = rule
    return best


def _precedence_key(rule: WorkflowRule) -> tuple[int, int]:
    # Unsaved rules (id None) sort after every persisted rule of equal score.
    rule_id = rule.id if rule.id is not None else _UNSAVED_ID
    return (-specificity_score(rule), rule_id)


_UNSAVED_ID = 2**63 - 1
