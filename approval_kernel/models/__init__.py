"""ORM models. Importing this package registers every table on Base.metadata."""

from approval_kernel.models.approver import Approver
from approval_kernel.models.company import Company
from approval_kernel.models.workflow_rule import WorkflowRule

__all__ = ["Approver", "Company", "WorkflowRule"]
