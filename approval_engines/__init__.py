"""
Module: approval_engines
Responsibility:
    Package entrypoint that re-exports the public symbols of the pure
    calculation engines.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import approval_kernel/domain/ types.
    MUST NOT import approval_kernel services, models or db.

Invariants enforced:
    - Decimal-only arithmetic: all monetary amounts use ``Decimal``.
    - Determinism: identical inputs always produce identical outputs.
"""

from approval_engines.rule_resolver import (
    MAX_SPECIFICITY,
    amount_in_range,
    matching_rules,
    rule_matches,
    select_matching_rule,
    specificity_score,
)

__all__ = [
    "MAX_SPECIFICITY",
    "amount_in_range",
    "matching_rules",
    "rule_matches",
    "select_matching_rule",
    "specificity_score",
]
