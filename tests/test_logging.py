"""Tests for the structured logging system (approval_kernel/logging_config.py)."""

import json
import logging
from datetime import UTC, datetime
from decimal import Decimal
from io import StringIO

import pytest

from approval_kernel.domain.approval import Approver, InvoiceRequest
from approval_kernel.domain.workflow import (
    ApprovalChannel,
    Company,
    ManagerApproval,
    WorkflowRule,
)
from approval_kernel.exceptions import ApproverInUseError, RuleNotFoundError
from approval_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    get_logger,
    reset_logging,
)
from approval_kernel.services.channel_dispatcher import ChannelDispatcher
from approval_kernel.services.invoice_processor import InvoiceProcessor
from approval_kernel.services.rule_resolver import RuleResolver

from tests.fakes import (
    InMemoryApprovers,
    InMemoryCompanies,
    InMemoryRules,
    RecordingChannel,
)


@pytest.fixture(autouse=True)
def _clean_logging():
    """Reset logging state between tests; restore the suite configuration afterwards."""
    reset_logging()
    LogContext.clear()
    yield
    LogContext.clear()
    reset_logging()
    configure_logging(level=logging.DEBUG)


@pytest.fixture
def stream() -> StringIO:
    """JSON log output of the approval_kernel logger at DEBUG."""
    out = StringIO()
    configure_logging(handler=logging.StreamHandler(out), level=logging.DEBUG)
    return out


def _records(stream: StringIO) -> list[dict]:
    lines = stream.getvalue().strip().split("\n")
    return [json.loads(line) for line in lines if line]


def _record(stream: StringIO, message: str) -> dict:
    return next(r for r in _records(stream) if r["message"] == message)


def _processor(*rules: WorkflowRule) -> InvoiceProcessor:
    cfo = Approver(id=3, company_id=1, name="Amanda Svensson", role="CFO", slack_id="U345678")
    return InvoiceProcessor(
        companies=InMemoryCompanies(Company(id=1, name="Light")),
        resolver=RuleResolver(InMemoryRules(*rules)),
        approvers=InMemoryApprovers(cfo),
        dispatcher=ChannelDispatcher(
            slack=RecordingChannel("slack"), email=RecordingChannel("email"),
        ),
    )


CFO_RULE = WorkflowRule(
    id=4, company_id=1, approver_id=3, channel=ApprovalChannel.SLACK,
    min_amount=Decimal("10000"),
)


# ---------------------------------------------------------------------------
# StructuredFormatter
# ---------------------------------------------------------------------------


class TestStructuredFormatter:
    def test_line_shape(self, stream):
        get_logger("services.rule_resolver").info(
            "workflow_rule_selected", extra={"rule_id": 4, "approver_id": 3},
        )

        record = _record(stream, "workflow_rule_selected")
        assert record["level"] == "INFO"
        assert record["logger"] == "approval_kernel.services.rule_resolver"
        assert record["rule_id"] == 4
        assert record["approver_id"] == 3
        assert datetime.fromisoformat(record["ts"]).tzinfo is not None

    def test_domain_values_serialized(self, stream):
        get_logger("test").info(
            "with_values",
            extra={
                "amount": Decimal("7500.00"),
                "channel": ApprovalChannel.EMAIL,
                "manager_approval": ManagerApproval.NOT_REQUIRED,
                "at": datetime(2026, 6, 15, 12, 0, tzinfo=UTC),
            },
        )

        record = _record(stream, "with_values")
        assert record["amount"] == "7500.00"
        assert record["channel"] == "email"
        assert record["manager_approval"] == "not_required"
        assert record["at"] == "2026-06-15T12:00:00+00:00"

    def test_kernel_exception_fields(self, stream):
        try:
            raise ApproverInUseError(3, [4, 5])
        except ApproverInUseError:
            get_logger("test").error("approver_delete_failed", exc_info=True)

        record = _record(stream, "approver_delete_failed")
        assert record["exc_code"] == "APPROVER_IN_USE"
        assert record["exc_type"] == "ApproverInUseError"
        assert record["exc_approver_id"] == 3
        assert record["exc_rule_ids"] == [4, 5]
        assert "Traceback" in record["traceback"]

    def test_context_wins_over_extra(self, stream):
        with LogContext.bind(company_name="Light"):
            get_logger("test").info("clash", extra={"company_name": "Dark"})
        assert _record(stream, "clash")["company_name"] == "Light"


# ---------------------------------------------------------------------------
# Pipeline records
# ---------------------------------------------------------------------------


class TestPipelineRecords:
    def test_one_correlation_id_per_invoice(self, stream):
        processor = _processor(CFO_RULE)
        for _ in range(2):
            processor.process_invoice(InvoiceRequest(company_name="Light", amount="15000"))

        records = [r for r in _records(stream) if r["logger"].startswith("approval_kernel.services")]
        started = [r for r in records if r["message"] == "invoice_processing_started"]
        assert len(started) == 2
        assert started[0]["correlation_id"] != started[1]["correlation_id"]
        for first in started:
            same_run = [r for r in records if r.get("correlation_id") == first["correlation_id"]]
            assert [r["message"] for r in same_run][-1] == "invoice_processing_completed"

    def test_failure_record(self, stream):
        with pytest.raises(RuleNotFoundError):
            _processor(CFO_RULE).process_invoice(
                InvoiceRequest(company_name="Light", amount="250", department="Finance"),
            )

        started = _record(stream, "invoice_processing_started")
        failed = _record(stream, "invoice_processing_failed")
        assert failed["level"] == "WARNING"
        assert failed["error_code"] == "RULE_NOT_FOUND"
        assert "250" in failed["error"]
        assert failed["company_name"] == "Light"
        assert failed["correlation_id"] == started["correlation_id"]
        assert started["amount"] == "250"
        assert started["department"] == "Finance"


# ---------------------------------------------------------------------------
# LogContext
# ---------------------------------------------------------------------------


class TestLogContext:
    def test_command_binding_survives_invoice_run(self, stream):
        processor = _processor(CFO_RULE)
        with LogContext.bind(command="process-invoice", company_name="Light"):
            processor.process_invoice(InvoiceRequest(company_name="Light", amount="15000"))
            assert LogContext.get_all() == {
                "command": "process-invoice",
                "company_name": "Light",
            }
        assert LogContext.get_all() == {}

        completed = _record(stream, "invoice_processing_completed")
        assert completed["command"] == "process-invoice"
        assert completed["correlation_id"]

    def test_inner_binding_restores_outer_value(self):
        with LogContext.bind(company_name="Light"):
            with LogContext.bind(company_name="Dark", correlation_id="abc"):
                assert LogContext.get_all()["company_name"] == "Dark"
            assert LogContext.get_all() == {"company_name": "Light"}

    def test_bind_skips_unknown_and_none(self):
        with LogContext.bind(command="seed", actor=None, unknown="x"):
            assert LogContext.get_all() == {"command": "seed"}

    def test_set_rejects_unknown_field(self):
        with pytest.raises(TypeError, match="event_id"):
            LogContext.set(event_id="e-1")

    def test_set_none_keeps_value(self):
        LogContext.set(actor="cli")
        LogContext.set(actor=None, command="list-rules")
        assert LogContext.get_all() == {"actor": "cli", "command": "list-rules"}

    def test_clear(self):
        LogContext.set(correlation_id="x", company_name="Light")
        LogContext.clear()
        assert LogContext.get_all() == {}


# ---------------------------------------------------------------------------
# configure_logging
# ---------------------------------------------------------------------------


class TestConfigureLogging:
    def test_first_call_wins(self):
        first = logging.StreamHandler(StringIO())
        second = logging.StreamHandler(StringIO())
        configure_logging(handler=first, level=logging.ERROR)
        configure_logging(handler=second, level=logging.DEBUG)

        root = logging.getLogger("approval_kernel")
        assert first in root.handlers
        assert second not in root.handlers
        assert root.level == logging.ERROR

    def test_level_filters_records(self):
        out = StringIO()
        configure_logging(handler=logging.StreamHandler(out), level=logging.WARNING)
        logger = get_logger("services.invoice_processor")
        logger.info("invoice_processing_started")
        logger.warning("invoice_processing_failed")

        assert [r["message"] for r in _records(out)] == ["invoice_processing_failed"]

    def test_kept_out_of_root_logger(self):
        configure_logging(handler=logging.StreamHandler(StringIO()))
        assert logging.getLogger("approval_kernel").propagate is False

    def test_reset_allows_reconfiguration(self):
        first = logging.StreamHandler(StringIO())
        configure_logging(handler=first)
        reset_logging()
        second = logging.StreamHandler(StringIO())
        configure_logging(handler=second)

        root = logging.getLogger("approval_kernel")
        assert first not in root.handlers
        assert second in root.handlers
