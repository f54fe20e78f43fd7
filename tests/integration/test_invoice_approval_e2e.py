"""
End-to-end invoice routing over the seeded SQLite database with the real
Slack and Email notifiers.
"""

from decimal import Decimal

import pytest

from approval_kernel.db.sample_data import SAMPLE_APPROVERS, SAMPLE_RULES, seed_sample_data
from approval_kernel.domain.approval import InvoiceRequest
from approval_kernel.exceptions import (
    CompanyNotFoundError,
    MissingContactError,
    RuleNotFoundError,
)
from approval_kernel.services.approver_service import ApproverService
from approval_kernel.services.invoice_processor import build_invoice_processor
from approval_kernel.services.workflow_rule_service import WorkflowRuleService
from approval_notifications import EmailConfig, EmailNotifier, SlackConfig, SlackNotifier


@pytest.fixture
def processor(session, seeded):
    return build_invoice_processor(
        session,
        slack=SlackNotifier(SlackConfig(connection_string="slack")),
        email=EmailNotifier(EmailConfig(connection_string="email")),
        departments={"Light": ("Marketing", "Finance")},
    )


def _invoice(amount, department="", manager=False, company="Light"):
    return InvoiceRequest(
        company_name=company,
        amount=Decimal(amount),
        department=department,
        manager_approval_required=manager,
    )


class TestSeededScenarios:
    @pytest.mark.parametrize(
        "amount, department, manager, name, role, channel, contact",
        [
            ("3000", "Finance", False, "Finance Team", "Finance Team Member", "slack", "U123456"),
            ("7500", "Finance", False, "Finance Team", "Finance Team Member", "email",
             "finance_team@light.com"),
            ("7500", "Finance", True, "Vera Sander", "Finance Manager", "email",
             "vera_sander@light.com"),
            ("15000", "Finance", False, "Amanda Svensson", "CFO", "slack", "U345678"),
            ("15000", "Marketing", False, "Sarah Johnson", "CMO", "email",
             "sarah_johnson@light.com"),
            ("15000", "Marketing", True, "Sarah Johnson", "CMO", "email",
             "sarah_johnson@light.com"),
        ],
    )
    def test_routing(self, processor, amount, department, manager, name, role, channel, contact):
        response = processor.process_invoice(_invoice(amount, department, manager))
        assert (response.approver_name, response.approver_role) == (name, role)
        assert (response.channel, response.contact_id) == (channel, contact)

    def test_lower_case_department_is_not_marketing(self, processor):
        response = processor.process_invoice(_invoice("15000", "marketing"))
        assert response.approver_name == "Amanda Svensson"

    def test_unknown_company(self, processor):
        with pytest.raises(CompanyNotFoundError):
            processor.process_invoice(_invoice("100", company="Dark"))


class TestCatalogChanges:
    def test_removed_contact_fails_without_fallback(self, session, processor, captured_logs):
        cfo_rule = WorkflowRuleService(session).get_by_id(4)
        ApproverService(session).update_approver(cfo_rule.approver_id, slack_id="")

        with pytest.raises(MissingContactError) as exc_info:
            processor.process_invoice(_invoice("15000", "Finance"))
        assert exc_info.value.contact_field == "slack_id"
        messages = [r["message"] for r in captured_logs()]
        assert "approval_request_sent" not in messages
        assert "approval_request_dispatched" not in messages

    def test_deleting_rules_leaves_gap(self, session, processor):
        WorkflowRuleService(session).delete_rule(1)
        with pytest.raises(RuleNotFoundError):
            processor.process_invoice(_invoice("3000"))


class TestSeeding:
    def test_counts(self, session, seeded):
        assert len(ApproverService(session).list_approvers(seeded.id)) == len(SAMPLE_APPROVERS)
        assert len(WorkflowRuleService(session).list_rules(seeded.id)) == len(SAMPLE_RULES)

    def test_idempotent(self, session, seeded):
        again = seed_sample_data(session)
        assert again.id == seeded.id
        assert len(WorkflowRuleService(session).list_rules(seeded.id)) == len(SAMPLE_RULES)

    def test_custom_company_name(self, session):
        company = seed_sample_data(session, company_name="Acme")
        assert company.name == "Acme"
        assert len(WorkflowRuleService(session).list_rules(company.id)) == len(SAMPLE_RULES)
