"""
Reference data for the "Light" company.

Four approvers and the five routing rules:

    R1  amount < 5000                           -> Finance Team via Slack
    R2  5000 <= amount < 10000                  -> Finance Team via Email
    R3  5000 <= amount < 10000, manager needed  -> Finance Manager via Email
    R4  amount >= 10000                         -> CFO via Slack
    R5  amount >= 10000, Marketing              -> CMO via Email

Seeding goes through the services so every record is validated exactly
as CLI writes are.  Nothing is committed here.
"""

from __future__ import annotations

from decimal import Decimal

from sqlalchemy.orm import Session

from approval_kernel.domain.workflow import (
    ApprovalChannel,
    Company,
    ManagerApproval,
    WorkflowRule,
)
from approval_kernel.logging_config import get_logger
from approval_kernel.services.approver_service import ApproverService
from approval_kernel.services.company_service import CompanyService
from approval_kernel.services.workflow_rule_service import WorkflowRuleService

logger = get_logger("db.sample_data")

SAMPLE_COMPANY = "Light"
SAMPLE_DEPARTMENTS = ("Marketing", "Finance")

# (key, name, role, email, slack_id)
SAMPLE_APPROVERS = (
    ("finance_team", "Finance Team", "Finance Team Member",
     "finance_team@light.com", "U123456"),
    ("finance_manager", "Vera Sander", "Finance Manager",
     "vera_sander@light.com", "U789012"),
    ("cfo", "Amanda Svensson", "CFO",
     "amanda_svensson@light.com", "U345678"),
    ("cmo", "Sarah Johnson", "CMO",
     "sarah_johnson@light.com", "U456789"),
)

# (approver key, channel, min, max, department, manager constraint)
SAMPLE_RULES = (
    ("finance_team", ApprovalChannel.SLACK, None, Decimal("5000"), None, ManagerApproval.ANY),
    ("finance_team", ApprovalChannel.EMAIL, Decimal("5000"), Decimal("10000"), None, ManagerApproval.ANY),
    ("finance_manager", ApprovalChannel.EMAIL, Decimal("5000"), Decimal("10000"), None, ManagerApproval.REQUIRED),
    ("cfo", ApprovalChannel.SLACK, Decimal("10000"), None, None, ManagerApproval.ANY),
    ("cmo", ApprovalChannel.EMAIL, Decimal("10000"), None, "Marketing", ManagerApproval.ANY),
)


def seed_sample_data(
    session: Session,
    company_name: str = SAMPLE_COMPANY,
) -> Company:
    """
    Insert the reference company, approvers and rules.

    Idempotent by company name: when the company already exists nothing is
    written and the existing company is returned.
    """
    companies = CompanyService(session, {company_name: SAMPLE_DEPARTMENTS})
    existing = companies.find_by_name(company_name)
    if existing is not None:
        logger.info("sample_data_already_present", extra={"company_id": existing.id})
        return existing

    company = companies.create_company(company_name)

    approvers = ApproverService(session)
    approver_ids: dict[str, int] = {}
    for key, name, role, email, slack_id in SAMPLE_APPROVERS:
        approver = approvers.create_approver(
            company_id=company.id,
            name=name,
            role=role,
            email=email,
            slack_id=slack_id,
        )
        approver_ids[key] = approver.id

    rules = WorkflowRuleService(session)
    for key, channel, min_amount, max_amount, department, manager in SAMPLE_RULES:
        rules.create_rule(
            WorkflowRule(
                company_id=company.id,
                approver_id=approver_ids[key],
                channel=channel,
                min_amount=min_amount,
                max_amount=max_amount,
                department=department,
                manager_approval=manager,
            )
        )

    logger.info(
        "sample_data_seeded",
        extra={
            "company_id": company.id,
            "approvers": len(SAMPLE_APPROVERS),
            "rules": len(SAMPLE_RULES),
        },
    )
    return company
