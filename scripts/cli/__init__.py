"""
Invoice Approval CLI -- command-line front end for the approval kernel.

Process invoices (with flags or interactively), seed the reference data and
administer approvers and workflow rules of the configured company.

Entry point: ``invoice-approval`` or ``python -m scripts.cli``
"""

from scripts.cli.main import main

__all__ = ["main"]
