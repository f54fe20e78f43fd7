"""CLI main: argument parsing, bootstrap and command dispatch."""

import argparse
import sys

from sqlalchemy.exc import SQLAlchemyError

from approval_kernel.db.engine import reset_engine
from approval_kernel.exceptions import ApprovalKernelError
from approval_kernel.logging_config import LogContext
from scripts.cli import commands
from scripts.cli.bootstrap import init_database, init_logging, load_settings, logger


def _positive_int(value):
    number = int(value)
    if number <= 0:
        raise argparse.ArgumentTypeError(f"{value} is not a positive integer")
    return number


def _positive_float(value):
    number = float(value)
    if number <= 0:
        raise argparse.ArgumentTypeError(f"{value} is not a positive number")
    return number


def _add_rule_arguments(p):
    p.add_argument("--approver-id", type=_positive_int, required=True)
    p.add_argument("--channel", type=str.lower, choices=["slack", "email"], required=True)
    p.add_argument("--min-amount", help="inclusive lower bound (omit for no bound)")
    p.add_argument("--max-amount", help="exclusive upper bound (omit for no bound)")
    p.add_argument("--department", help="omit to match any department")
    p.add_argument(
        "--manager-approval",
        type=str.lower,
        choices=["any", "required", "not_required"],
        default="any",
    )


def build_parser():
    parser = argparse.ArgumentParser(
        prog="invoice-approval",
        description="Route invoices to approvers and manage approval workflow rules.",
    )
    parser.add_argument("--config", help="YAML settings file (default: $APPROVAL_CONFIG_FILE)")
    parser.add_argument("--company", "-c", help="company the command acts on")
    parser.add_argument("--departments", "-d", help="comma-separated allowed departments")
    parser.add_argument("--database-url", help="SQLAlchemy database URL")
    parser.add_argument("--slack-connection-string")
    parser.add_argument("--email-connection-string")
    parser.add_argument("--verbose", "-v", action="store_true", help="debug logging")

    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("process-invoice", aliases=["invoice"], help="route an invoice for approval")
    p.add_argument("--amount", help="invoice amount; prompts interactively when omitted")
    p.add_argument("--department", default="")
    p.add_argument("--manager-approval", action="store_true", help="invoice needs manager approval")
    p.add_argument("--timeout", type=_positive_float, help="seconds before processing gives up")
    p.set_defaults(handler=commands.cmd_process_invoice)

    p = sub.add_parser("seed", help="insert the reference approvers and rules")
    p.set_defaults(handler=commands.cmd_seed)

    p = sub.add_parser("create-approver", help="add an approver")
    p.add_argument("--name", required=True)
    p.add_argument("--role", default="")
    p.add_argument("--email")
    p.add_argument("--slack-id")
    p.set_defaults(handler=commands.cmd_create_approver)

    p = sub.add_parser("update-approver", help="change an approver (omitted fields unchanged)")
    p.add_argument("--id", type=_positive_int, required=True)
    p.add_argument("--name")
    p.add_argument("--role")
    p.add_argument("--email", help="empty string clears")
    p.add_argument("--slack-id", help="empty string clears")
    p.set_defaults(handler=commands.cmd_update_approver)

    for name, handler, text in (
        ("delete-approver", commands.cmd_delete_approver, "remove an approver"),
        ("get-approver", commands.cmd_get_approver, "show an approver"),
        ("delete-rule", commands.cmd_delete_rule, "remove a workflow rule"),
        ("get-rule", commands.cmd_get_rule, "show a workflow rule"),
    ):
        p = sub.add_parser(name, help=text)
        p.add_argument("--id", type=_positive_int, required=True)
        p.set_defaults(handler=handler)

    p = sub.add_parser("list-approvers", help="list the company's approvers")
    p.set_defaults(handler=commands.cmd_list_approvers)

    p = sub.add_parser("create-rule", help="add a workflow rule")
    _add_rule_arguments(p)
    p.set_defaults(handler=commands.cmd_create_rule)

    p = sub.add_parser("update-rule", help="replace a workflow rule's routing fields")
    p.add_argument("--id", type=_positive_int, required=True)
    _add_rule_arguments(p)
    p.set_defaults(handler=commands.cmd_update_rule)

    p = sub.add_parser("list-rules", help="list the company's workflow rules")
    p.set_defaults(handler=commands.cmd_list_rules)

    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    try:
        settings = load_settings(args)
        init_logging(settings)
        with LogContext.bind(command=args.command, company_name=settings.company_name):
            logger.debug("cli_command_started")
            init_database(settings)
            return args.handler(args, settings)
    except ApprovalKernelError as exc:
        print(f"error [{exc.code}]: {exc}", file=sys.stderr)
        return 1
    except SQLAlchemyError as exc:
        logger.error("cli_database_error", exc_info=True)
        print(f"error [DATABASE_ERROR]: {exc}", file=sys.stderr)
        return 1
    finally:
        reset_engine()
