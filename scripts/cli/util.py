"""CLI utilities: parsing, formatting, logging mute/restore."""

import logging
from decimal import Decimal

from approval_kernel.domain.approval import ApprovalResponse, Approver
from approval_kernel.domain.workflow import WorkflowRule


def fmt_amount(v) -> str:
    """Format amount for display (e.g. $1,234.50)."""
    d = Decimal(str(v))
    return f"${d:,.2f}"


def normalize_department(value, allowed):
    """
    Match ``value`` against the allowed departments, ignoring case.

    Returns the canonical spelling, "" for a blank value, or None when the
    value is not allowed.  An empty ``allowed`` list accepts any value as is.
    """
    value = (value or "").strip()
    if not value:
        return ""
    if not allowed:
        return value
    for dept in allowed:
        if dept.lower() == value.lower():
            return dept
    return None


def parse_yes_no(value):
    """'y'/'yes' -> True, 'n'/'no' -> False, anything else -> None."""
    value = (value or "").strip().lower()
    if value in ("y", "yes"):
        return True
    if value in ("n", "no"):
        return False
    return None


def format_approver(a: Approver) -> str:
    return (
        f"ID: {a.id} | Name: {a.name} | Role: {a.role or '-'} | "
        f"Email: {a.email or '-'} | Slack ID: {a.slack_id or '-'}"
    )


def format_rule(r: WorkflowRule) -> str:
    min_amount = fmt_amount(r.min_amount) if r.min_amount is not None else "-"
    max_amount = fmt_amount(r.max_amount) if r.max_amount is not None else "-"
    return (
        f"ID: {r.id} | Approver: {r.approver_id} | Channel: {r.channel.value} | "
        f"Min: {min_amount} | Max: {max_amount} | "
        f"Department: {r.department or '-'} | Manager approval: {r.manager_approval.value}"
    )


def format_response(resp: ApprovalResponse) -> list[str]:
    return [
        f"  Approver:   {resp.approver_name}",
        f"  Role:       {resp.approver_role or '-'}",
        f"  Channel:    {resp.channel}",
        f"  Contact ID: {resp.contact_id}",
    ]


def enable_quiet_logging():
    """Mute console handlers so CLI output stays clean. Returns list to pass to restore_logging."""
    ak_logger = logging.getLogger("approval_kernel")
    muted = []
    for h in ak_logger.handlers:
        if isinstance(h, logging.StreamHandler) and not isinstance(h, logging.FileHandler):
            muted.append((h, h.level))
            h.setLevel(logging.CRITICAL + 1)
    return muted


def restore_logging(muted):
    """Restore muted handlers after a quiet-logging section."""
    for h, orig_level in muted:
        h.setLevel(orig_level)
