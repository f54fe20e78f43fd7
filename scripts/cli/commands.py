"""CLI command handlers: invoice processing, seeding, approver and rule admin.

Each handler takes the parsed arguments and the resolved settings, prints
its result to stdout and returns the exit status.  Typed kernel errors are
left to ``main`` to report.
"""

from datetime import timedelta
from functools import partial

from approval_kernel.db.engine import session_scope
from approval_kernel.db.sample_data import seed_sample_data
from approval_kernel.domain.approval import InvoiceRequest
from approval_kernel.domain.clock import SystemClock
from approval_kernel.domain.workflow import (
    ApprovalChannel,
    ManagerApproval,
    WorkflowRule,
    to_amount,
)
from approval_kernel.exceptions import (
    InvalidInvoiceError,
    InvalidWorkflowRuleError,
)
from approval_kernel.services.invoice_processor import build_invoice_processor
from approval_kernel.services.management_service import ManagementService
from scripts.cli.bootstrap import build_notifiers, describe_settings
from scripts.cli.prompts import run_interactive
from scripts.cli.util import (
    format_approver,
    format_response,
    format_rule,
    normalize_department,
)


# ---------------------------------------------------------------------------
# Invoices
# ---------------------------------------------------------------------------


def process_request(settings, slack, email, request, deadline=None):
    """Route one invoice inside its own transaction."""
    with session_scope() as session:
        processor = build_invoice_processor(
            session,
            slack=slack,
            email=email,
            departments={settings.company_name: settings.departments},
        )
        return processor.process_invoice(request, deadline=deadline)


def cmd_process_invoice(args, settings):
    slack, email = build_notifiers(settings)
    if args.verbose:
        for line in describe_settings(settings):
            print(line)
        print()

    if args.amount is None:
        return run_interactive(settings, partial(process_request, settings, slack, email))

    department = normalize_department(args.department, settings.departments)
    if department is None:
        raise InvalidInvoiceError(
            f"department {args.department!r} is not one of "
            f"{', '.join(settings.departments)}"
        )
    request = InvoiceRequest(
        company_name=settings.company_name,
        amount=args.amount,
        department=department,
        manager_approval_required=args.manager_approval,
    )
    deadline = None
    if args.timeout is not None:
        deadline = SystemClock().now() + timedelta(seconds=args.timeout)

    response = process_request(settings, slack, email, request, deadline)
    print("Invoice sent for approval")
    for line in format_response(response):
        print(line)
    return 0


# ---------------------------------------------------------------------------
# Sample data
# ---------------------------------------------------------------------------


def cmd_seed(args, settings):
    with session_scope() as session:
        company = seed_sample_data(session, company_name=settings.company_name)
        mgmt = ManagementService(session, company.name)
        approvers = mgmt.list_approvers()
        rules = mgmt.list_workflow_rules()
    print(f"Sample data ready for company {company.name} (ID: {company.id}): "
          f"{len(approvers)} approver(s), {len(rules)} workflow rule(s)")
    return 0


# ---------------------------------------------------------------------------
# Approvers
# ---------------------------------------------------------------------------


def _management(session, settings):
    return ManagementService(session, settings.company_name, settings.departments)


def cmd_create_approver(args, settings):
    with session_scope() as session:
        approver = _management(session, settings).create_approver(
            name=args.name, role=args.role, email=args.email, slack_id=args.slack_id,
        )
    print("Approver created")
    print(format_approver(approver))
    return 0


def cmd_update_approver(args, settings):
    with session_scope() as session:
        approver = _management(session, settings).update_approver(
            args.id, name=args.name, role=args.role, email=args.email, slack_id=args.slack_id,
        )
    print("Approver updated")
    print(format_approver(approver))
    return 0


def cmd_delete_approver(args, settings):
    with session_scope() as session:
        _management(session, settings).delete_approver(args.id)
    print(f"Approver {args.id} deleted")
    return 0


def cmd_get_approver(args, settings):
    with session_scope() as session:
        approver = _management(session, settings).get_approver(args.id)
    print(format_approver(approver))
    return 0


def cmd_list_approvers(args, settings):
    with session_scope() as session:
        approvers = _management(session, settings).list_approvers()
    if not approvers:
        print(f"No approvers for company {settings.company_name}")
    for approver in approvers:
        print(format_approver(approver))
    return 0


# ---------------------------------------------------------------------------
# Workflow rules
# ---------------------------------------------------------------------------


def _rule_amount(value, name):
    if value is None:
        return None
    try:
        return to_amount(value)
    except InvalidInvoiceError:
        raise InvalidWorkflowRuleError(f"{name} {value!r} is not a number") from None


def _rule_from_args(args, settings, company_id, rule_id=None):
    department = normalize_department(args.department, settings.departments)
    if department is None:
        raise InvalidWorkflowRuleError(
            f"department {args.department!r} is not one of "
            f"{', '.join(settings.departments)}",
            rule_id,
        )
    return WorkflowRule(
        company_id=company_id,
        approver_id=args.approver_id,
        channel=ApprovalChannel.parse(args.channel),
        min_amount=_rule_amount(args.min_amount, "min_amount"),
        max_amount=_rule_amount(args.max_amount, "max_amount"),
        department=department or None,
        manager_approval=ManagerApproval(args.manager_approval),
        id=rule_id,
    )


def cmd_create_rule(args, settings):
    with session_scope() as session:
        mgmt = _management(session, settings)
        rule = mgmt.create_workflow_rule(_rule_from_args(args, settings, mgmt.company.id))
    print("Workflow rule created")
    print(format_rule(rule))
    return 0


def cmd_update_rule(args, settings):
    with session_scope() as session:
        mgmt = _management(session, settings)
        rule = mgmt.update_workflow_rule(
            _rule_from_args(args, settings, mgmt.company.id, rule_id=args.id)
        )
    print("Workflow rule updated")
    print(format_rule(rule))
    return 0


def cmd_delete_rule(args, settings):
    with session_scope() as session:
        _management(session, settings).delete_workflow_rule(args.id)
    print(f"Workflow rule {args.id} deleted")
    return 0


def cmd_get_rule(args, settings):
    with session_scope() as session:
        rule = _management(session, settings).get_workflow_rule(args.id)
    print(format_rule(rule))
    return 0


def cmd_list_rules(args, settings):
    with session_scope() as session:
        rules = _management(session, settings).list_workflow_rules()
    if not rules:
        print(f"No workflow rules for company {settings.company_name}")
    for rule in rules:
        print(format_rule(rule))
    return 0
