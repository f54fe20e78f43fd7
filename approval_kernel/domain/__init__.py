"""
Pure domain layer.

This module contains pure value objects and collaborator protocols
with NO dependencies on:
- ORM (SQLAlchemy)
- Database
- I/O

All domain objects are immutable and deterministic.
"""

from approval_kernel.domain.approval import (
    ApprovalRequest,
    ApprovalResponse,
    Approver,
    InvoiceRequest,
)
from approval_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from approval_kernel.domain.directories import (
    ApproverDirectory,
    CompanyDirectory,
    NotificationChannel,
    RuleCatalog,
)
from approval_kernel.domain.workflow import (
    ApprovalChannel,
    Company,
    InvoiceQuery,
    ManagerApproval,
    WorkflowRule,
    to_amount,
)

__all__ = [
    "ApprovalChannel",
    "ApprovalRequest",
    "ApprovalResponse",
    "Approver",
    "ApproverDirectory",
    "Clock",
    "Company",
    "CompanyDirectory",
    "DeterministicClock",
    "InvoiceQuery",
    "InvoiceRequest",
    "ManagerApproval",
    "NotificationChannel",
    "RuleCatalog",
    "SystemClock",
    "WorkflowRule",
    "to_amount",
]
