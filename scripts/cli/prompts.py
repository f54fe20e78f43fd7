"""CLI interactive invoice entry: amount, department and manager prompts."""

from approval_kernel.domain.approval import InvoiceRequest
from approval_kernel.domain.workflow import to_amount
from approval_kernel.exceptions import ApprovalKernelError, InvalidInvoiceError
from scripts.cli.util import (
    enable_quiet_logging,
    fmt_amount,
    format_response,
    normalize_department,
    parse_yes_no,
    restore_logging,
)


def prompt_amount(input_fn):
    """Ask until a non-negative number is entered."""
    while True:
        raw = input_fn("  Invoice amount (USD): $").strip().replace(",", "")
        try:
            amount = to_amount(raw)
        except InvalidInvoiceError:
            print("  Please enter a valid number.")
            continue
        if amount < 0:
            print("  Amount must not be negative.")
            continue
        return amount


def prompt_department(input_fn, allowed):
    """Ask for a department; Enter skips.  Returns the canonical name or ""."""
    choices = ", ".join(allowed) if allowed else "any"
    while True:
        raw = input_fn(f"  Department ({choices}) or Enter to skip: ")
        dept = normalize_department(raw, allowed)
        if dept is not None:
            return dept
        print(f"  Department must be one of: {choices}.")


def prompt_manager_approval(input_fn):
    """Ask y/n; Enter means no."""
    while True:
        raw = input_fn("  Manager approval required? (y/n, Enter for no): ")
        if not raw.strip():
            return False
        answer = parse_yes_no(raw)
        if answer is not None:
            return answer
        print("  Please answer 'y' or 'n'.")


def ask_to_continue(input_fn):
    while True:
        try:
            raw = input_fn("  Process another invoice? (y/n): ")
        except (EOFError, KeyboardInterrupt):
            print()
            return False
        answer = parse_yes_no(raw)
        if answer is not None:
            return answer
        print("  Please answer 'y' or 'n'.")


def run_interactive(settings, process, input_fn=None):
    """
    Prompt for invoices until the user stops.

    ``process`` takes an InvoiceRequest and returns an ApprovalResponse.
    A failed invoice is reported and the loop continues.
    """
    input_fn = input_fn or input
    W = 40
    print()
    print("=" * W)
    print("  INVOICE APPROVAL WORKFLOW".center(W))
    print("=" * W)
    print(f"  Company: {settings.company_name}")
    print()

    processed = 0
    while True:
        try:
            amount = prompt_amount(input_fn)
            department = prompt_department(input_fn, settings.departments)
            manager = prompt_manager_approval(input_fn)
        except (EOFError, KeyboardInterrupt):
            print()
            break

        request = InvoiceRequest(
            company_name=settings.company_name,
            amount=amount,
            department=department,
            manager_approval_required=manager,
        )
        print()
        print(f"  Amount: {fmt_amount(request.amount)}  Department: {request.department or '-'}"
              f"  Manager approval: {'yes' if manager else 'no'}")

        muted = enable_quiet_logging()
        try:
            response = process(request)
        except ApprovalKernelError as exc:
            restore_logging(muted)
            print(f"  error [{exc.code}]: {exc}")
        else:
            restore_logging(muted)
            processed += 1
            print("  Invoice sent for approval")
            for line in format_response(response):
                print(line)
        print()

        if not ask_to_continue(input_fn):
            break

    print(f"\n  Done: {processed} invoice(s) sent for approval.\n")
    return 0
