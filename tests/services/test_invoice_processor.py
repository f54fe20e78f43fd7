"""
Tests for the invoice approval pipeline with in-memory collaborators.

Covers stage ordering, the "no notification on failure" guarantee, strict
channel separation, deadlines and logging.
"""

from datetime import timedelta
from decimal import Decimal

import pytest

from approval_kernel.domain.approval import Approver, InvoiceRequest
from approval_kernel.domain.workflow import (
    ApprovalChannel,
    Company,
    ManagerApproval,
    WorkflowRule,
)
from approval_kernel.exceptions import (
    ApproverNotFoundError,
    CompanyNotFoundError,
    DeadlineExceededError,
    InvalidInvoiceError,
    MissingContactError,
    RuleNotFoundError,
    UnsupportedChannelError,
    UpstreamNotificationError,
)
from approval_kernel.services.channel_dispatcher import ChannelDispatcher
from approval_kernel.services.invoice_processor import InvoiceProcessor
from approval_kernel.services.rule_resolver import RuleResolver

from tests.fakes import (
    FIXED_NOW,
    FailingChannel,
    InMemoryApprovers,
    InMemoryCompanies,
    InMemoryRules,
    RecordingChannel,
)

LIGHT = Company(id=1, name="Light", departments=("Marketing", "Finance"))

FINANCE_TEAM = Approver(
    id=1, company_id=1, name="Finance Team", role="Finance Team Member",
    email="finance_team@light.com", slack_id="U123456",
)
FINANCE_MANAGER = Approver(
    id=2, company_id=1, name="Vera Sander", role="Finance Manager",
    email="vera_sander@light.com", slack_id="U789012",
)
CFO = Approver(
    id=3, company_id=1, name="Amanda Svensson", role="CFO",
    email="amanda_svensson@light.com", slack_id="U345678",
)
CMO = Approver(
    id=4, company_id=1, name="Sarah Johnson", role="CMO",
    email="sarah_johnson@light.com", slack_id="U456789",
)


def reference_rules() -> list[WorkflowRule]:
    return [
        WorkflowRule(id=1, company_id=1, approver_id=1, channel=ApprovalChannel.SLACK,
                     max_amount=Decimal("5000")),
        WorkflowRule(id=2, company_id=1, approver_id=1, channel=ApprovalChannel.EMAIL,
                     min_amount=Decimal("5000"), max_amount=Decimal("10000")),
        WorkflowRule(id=3, company_id=1, approver_id=2, channel=ApprovalChannel.EMAIL,
                     min_amount=Decimal("5000"), max_amount=Decimal("10000"),
                     manager_approval=ManagerApproval.REQUIRED),
        WorkflowRule(id=4, company_id=1, approver_id=3, channel=ApprovalChannel.SLACK,
                     min_amount=Decimal("10000")),
        WorkflowRule(id=5, company_id=1, approver_id=4, channel=ApprovalChannel.EMAIL,
                     min_amount=Decimal("10000"), department="Marketing"),
    ]


def build(
    slack=None,
    email=None,
    rules=None,
    approvers=(FINANCE_TEAM, FINANCE_MANAGER, CFO, CMO),
    clock=None,
):
    slack = slack or RecordingChannel("slack")
    email = email or RecordingChannel("email")
    catalog = InMemoryRules(*(reference_rules() if rules is None else rules))
    directory = InMemoryApprovers(*approvers)
    processor = InvoiceProcessor(
        companies=InMemoryCompanies(LIGHT),
        resolver=RuleResolver(catalog),
        approvers=directory,
        dispatcher=ChannelDispatcher(slack=slack, email=email),
        clock=clock,
    )
    return processor, slack, email, catalog, directory


def invoice(amount, department="", manager=False, company="Light") -> InvoiceRequest:
    return InvoiceRequest(
        company_name=company,
        amount=amount,
        department=department,
        manager_approval_required=manager,
    )


# =========================================================================
# Reference scenario
# =========================================================================


class TestReferenceScenario:
    @pytest.mark.parametrize(
        "amount, department, manager, name, channel, contact",
        [
            ("3000", "Finance", False, "Finance Team", "slack", "U123456"),
            ("7500", "Finance", False, "Finance Team", "email", "finance_team@light.com"),
            ("7500", "Finance", True, "Vera Sander", "email", "vera_sander@light.com"),
            ("15000", "Finance", False, "Amanda Svensson", "slack", "U345678"),
            ("15000", "Marketing", False, "Sarah Johnson", "email", "sarah_johnson@light.com"),
            ("15000", "Marketing", True, "Sarah Johnson", "email", "sarah_johnson@light.com"),
        ],
    )
    def test_routes_to_expected_approver(self, amount, department, manager, name, channel, contact):
        processor, slack, email, _, _ = build()
        response = processor.process_invoice(invoice(amount, department, manager))

        assert response.approver_name == name
        assert response.channel == channel
        assert response.contact_id == contact
        assert slack.calls + email.calls == 1

    def test_request_handed_to_channel(self):
        processor, slack, email, _, _ = build()
        processor.process_invoice(invoice("15000", "Finance"))

        assert email.calls == 0
        [request] = slack.requests
        assert request.approver == CFO
        assert request.amount == Decimal("15000")
        assert request.channel is ApprovalChannel.SLACK

    def test_deterministic(self):
        processor, _, _, _, _ = build()
        first = processor.process_invoice(invoice("7500", manager=True))
        second = processor.process_invoice(invoice("7500", manager=True))
        assert first == second


# =========================================================================
# Failures: typed errors, no notification
# =========================================================================


class TestFailures:
    def test_unknown_company(self):
        processor, slack, email, catalog, _ = build()
        with pytest.raises(CompanyNotFoundError) as exc_info:
            processor.process_invoice(invoice("100", company="Dark"))
        assert exc_info.value.company == "Dark"
        assert catalog.lookups == []
        assert slack.calls == email.calls == 0

    def test_no_matching_rule(self):
        processor, slack, email, _, directory = build(rules=[])
        with pytest.raises(RuleNotFoundError) as exc_info:
            processor.process_invoice(invoice("100", "Finance", True))
        assert exc_info.value.amount == "100"
        assert exc_info.value.department == "Finance"
        assert exc_info.value.manager_approval_required is True
        assert directory.lookups == []
        assert slack.calls == email.calls == 0

    def test_unknown_approver(self):
        processor, slack, email, _, _ = build(approvers=())
        with pytest.raises(ApproverNotFoundError) as exc_info:
            processor.process_invoice(invoice("100"))
        assert exc_info.value.approver_id == 1
        assert slack.calls == email.calls == 0

    def test_slack_rule_with_approver_lacking_slack_id(self):
        no_slack = Approver(id=1, company_id=1, name="Finance Team", email="finance_team@light.com")
        processor, slack, email, _, _ = build(approvers=(no_slack,))
        with pytest.raises(MissingContactError) as exc_info:
            processor.process_invoice(invoice("3000"))
        assert exc_info.value.channel == "slack"
        assert exc_info.value.contact_field == "slack_id"
        assert slack.calls == 0
        assert email.calls == 0

    def test_email_rule_with_approver_lacking_email(self):
        no_email = Approver(id=1, company_id=1, name="Finance Team", slack_id="U123456")
        processor, slack, email, _, _ = build(approvers=(no_email,))
        with pytest.raises(MissingContactError):
            processor.process_invoice(invoice("7500"))
        assert slack.calls == email.calls == 0

    def test_unsupported_channel(self):
        rule = WorkflowRule(id=1, company_id=1, approver_id=1, channel="fax")
        processor, slack, email, _, _ = build(rules=[rule])
        with pytest.raises(UnsupportedChannelError):
            processor.process_invoice(invoice("100"))
        assert slack.calls == email.calls == 0

    def test_upstream_failure_propagates(self):
        processor, slack, email, _, _ = build(slack=FailingChannel("slack"))
        with pytest.raises(UpstreamNotificationError, match="service unavailable"):
            processor.process_invoice(invoice("3000"))
        assert slack.calls == 1
        assert email.calls == 0

    def test_negative_amount_rejected_before_any_stage(self):
        processor, _, _, catalog, _ = build()
        with pytest.raises(InvalidInvoiceError):
            processor.process_invoice(invoice("-1"))
        assert catalog.lookups == []


# =========================================================================
# Deadline
# =========================================================================


class TestDeadline:
    def test_future_deadline(self, clock):
        processor, slack, _, _, _ = build(clock=clock)
        response = processor.process_invoice(
            invoice("3000"), deadline=FIXED_NOW + timedelta(seconds=5),
        )
        assert response.channel == "slack"
        assert slack.calls == 1

    def test_passed_deadline_sends_nothing(self, clock):
        processor, slack, email, catalog, _ = build(clock=clock)
        with pytest.raises(DeadlineExceededError) as exc_info:
            processor.process_invoice(invoice("3000"), deadline=FIXED_NOW)
        assert exc_info.value.stage == "resolve_company"
        assert catalog.lookups == []
        assert slack.calls == email.calls == 0

    def test_deadline_passing_mid_pipeline(self, clock):
        class SlowRules(InMemoryRules):
            def get_candidates(self, company_id):
                clock.advance(10)
                return super().get_candidates(company_id)

        slack = RecordingChannel("slack")
        processor = InvoiceProcessor(
            companies=InMemoryCompanies(LIGHT),
            resolver=RuleResolver(SlowRules(*reference_rules())),
            approvers=InMemoryApprovers(FINANCE_TEAM),
            dispatcher=ChannelDispatcher(slack=slack, email=RecordingChannel("email")),
            clock=clock,
        )
        with pytest.raises(DeadlineExceededError) as exc_info:
            processor.process_invoice(invoice("3000"), deadline=FIXED_NOW + timedelta(seconds=5))
        assert exc_info.value.stage == "resolve_approver"
        assert slack.calls == 0

    def test_naive_deadline_rejected(self):
        processor, _, _, _, _ = build()
        with pytest.raises(ValueError, match="timezone-aware"):
            processor.process_invoice(invoice("3000"), deadline=FIXED_NOW.replace(tzinfo=None))


# =========================================================================
# Logging
# =========================================================================


class TestLogging:
    def test_success_logs(self, captured_logs):
        processor, _, _, _, _ = build()
        processor.process_invoice(invoice("15000", "Marketing"))

        logs = captured_logs()
        messages = [r["message"] for r in logs]
        assert "invoice_processing_started" in messages
        assert "workflow_rule_selected" in messages
        completed = next(r for r in logs if r["message"] == "invoice_processing_completed")
        assert completed["approver_name"] == "Sarah Johnson"
        assert completed["company_name"] == "Light"
        assert completed["correlation_id"]

    def test_failure_logged_with_code(self, captured_logs):
        processor, _, _, _, _ = build(rules=[])
        with pytest.raises(RuleNotFoundError):
            processor.process_invoice(invoice("100"))

        failed = next(r for r in captured_logs() if r["message"] == "invoice_processing_failed")
        assert failed["error_code"] == "RULE_NOT_FOUND"
        assert failed["level"] == "WARNING"

    def test_context_restored_after_call(self):
        from approval_kernel.logging_config import LogContext

        processor, _, _, _, _ = build()
        processor.process_invoice(invoice("100"))
        assert LogContext.get_all() == {}
