"""Services for the approval kernel (routing pipeline and administration)."""

from approval_kernel.services.approver_service import ApproverService
from approval_kernel.services.channel_dispatcher import ChannelDispatcher
from approval_kernel.services.company_service import CompanyService
from approval_kernel.services.invoice_processor import (
    InvoiceProcessor,
    build_invoice_processor,
)
from approval_kernel.services.management_service import ManagementService
from approval_kernel.services.rule_resolver import RuleResolver
from approval_kernel.services.workflow_rule_service import WorkflowRuleService

__all__ = [
    "ApproverService",
    "ChannelDispatcher",
    "CompanyService",
    "InvoiceProcessor",
    "ManagementService",
    "RuleResolver",
    "WorkflowRuleService",
    "build_invoice_processor",
]
