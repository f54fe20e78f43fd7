"""
approval_kernel.services.invoice_processor -- The invoice approval pipeline.

Responsibility:
    Route one pending invoice to its approver: resolve the company, pick
    the most specific workflow rule, look up the approver, select and check
    the channel, and dispatch exactly one notification.

Architecture position:
    Kernel > Services -- thin, blocking orchestration over collaborators
    supplied at construction.  Holds no per-invoice state; concurrent
    callers may share one instance.

Pipeline (strictly ordered, first failure aborts):
    1. resolve_company    -> CompanyNotFoundError
    2. resolve_rule       -> RuleNotFoundError
    3. resolve_approver   -> ApproverNotFoundError
    4. select_channel     -> UnsupportedChannelError
    5. validate_contact   -> MissingContactError
    6. dispatch           -> UpstreamNotificationError

Invariants enforced:
    - Errors propagate unchanged; nothing is caught, retried or degraded.
    - A failure in stages 1-5 means zero notification calls.
    - Exactly one notification call per successful run.
    - When a deadline is given it is checked before every stage; stage 6 is
      the last check point and is never retried once started.
"""

from __future__ import annotations

from datetime import datetime
from uuid import uuid4

from sqlalchemy.orm import Session

from approval_kernel.domain.approval import ApprovalResponse, Approver, InvoiceRequest
from approval_kernel.domain.clock import Clock, SystemClock
from approval_kernel.domain.directories import (
    ApproverDirectory,
    CompanyDirectory,
    NotificationChannel,
)
from approval_kernel.domain.workflow import (
    ApprovalChannel,
    InvoiceQuery,
    WorkflowRule,
)
from approval_kernel.exceptions import ApprovalKernelError, DeadlineExceededError
from approval_kernel.logging_config import LogContext, get_logger
from approval_kernel.services.approver_service import ApproverService
from approval_kernel.services.channel_dispatcher import ChannelDispatcher
from approval_kernel.services.company_service import CompanyService
from approval_kernel.services.rule_resolver import RuleResolver
from approval_kernel.services.workflow_rule_service import WorkflowRuleService

logger = get_logger("services.invoice_processor")


class InvoiceProcessor:
    """Stateless invoice approval pipeline."""

    def __init__(
        self,
        companies: CompanyDirectory,
        resolver: RuleResolver,
        approvers: ApproverDirectory,
        dispatcher: ChannelDispatcher,
        clock: Clock | None = None,
    ) -> None:
        self._companies = companies
        self._resolver = resolver
        self._approvers = approvers
        self._dispatcher = dispatcher
        self._clock = clock or SystemClock()

    def process_invoice(
        self,
        request: InvoiceRequest,
        deadline: datetime | None = None,
    ) -> ApprovalResponse:
        """Route ``request`` and return the approval acknowledgment.

        Args:
            request: The invoice to route.
            deadline: Optional timezone-aware instant after which no further
                stage may start.

        Raises:
            InvalidInvoiceError: malformed request (before any stage).
            CompanyNotFoundError, RuleNotFoundError, ApproverNotFoundError,
            UnsupportedChannelError, MissingContactError,
            UpstreamNotificationError, DeadlineExceededError.
        """
        if deadline is not None and deadline.tzinfo is None:
            raise ValueError("deadline must be timezone-aware")
        request.validate()

        with LogContext.bind(
            correlation_id=uuid4().hex,
            company_name=request.company_name,
        ):
            logger.info(
                "invoice_processing_started",
                extra={
                    "amount": request.amount,
                    "department": request.department,
                    "manager_approval_required": request.manager_approval_required,
                },
            )
            try:
                response = self._run(request, deadline)
            except ApprovalKernelError as exc:
                logger.warning(
                    "invoice_processing_failed",
                    extra={"error_code": exc.code, "error": str(exc)},
                )
                raise
            logger.info(
                "invoice_processing_completed",
                extra={
                    "approver_name": response.approver_name,
                    "channel": response.channel,
                },
            )
            return response

    def _run(self, request: InvoiceRequest, deadline: datetime | None) -> ApprovalResponse:
        self._check_deadline("resolve_company", deadline)
        company = self._companies.get_by_name(request.company_name)

        self._check_deadline("resolve_rule", deadline)
        rule = self._resolve_rule(
            InvoiceQuery(
                company_id=company.id,
                amount=request.amount,
                department=request.department,
                manager_approval_required=request.manager_approval_required,
            )
        )

        self._check_deadline("resolve_approver", deadline)
        approver = self._approvers.get_by_id(rule.approver_id)

        self._check_deadline("select_channel", deadline)
        channel = self._dispatcher.select_channel(rule.channel)

        self._check_deadline("validate_contact", deadline)
        self._dispatcher.validate_contact(approver, channel)

        self._check_deadline("dispatch", deadline)
        return self._dispatch(approver, channel, request, rule)

    def _resolve_rule(self, query: InvoiceQuery) -> WorkflowRule:
        rule = self._resolver.resolve_query(query)
        logger.info(
            "workflow_rule_selected",
            extra={"rule_id": rule.id, "approver_id": rule.approver_id},
        )
        return rule

    def _dispatch(
        self,
        approver: Approver,
        channel: ApprovalChannel,
        request: InvoiceRequest,
        rule: WorkflowRule,
    ) -> ApprovalResponse:
        logger.debug(
            "dispatching_approval_request",
            extra={"rule_id": rule.id, "approver_id": approver.id, "channel": channel.value},
        )
        return self._dispatcher.dispatch(approver, channel, request.amount)

    def _check_deadline(self, stage: str, deadline: datetime | None) -> None:
        if deadline is not None and self._clock.now() >= deadline:
            raise DeadlineExceededError(stage, deadline.isoformat())


def build_invoice_processor(
    session: Session,
    slack: NotificationChannel,
    email: NotificationChannel,
    departments: dict[str, tuple[str, ...]] | None = None,
    clock: Clock | None = None,
) -> InvoiceProcessor:
    """Wire an InvoiceProcessor over the SQLAlchemy-backed directories."""
    return InvoiceProcessor(
        companies=CompanyService(session, departments),
        resolver=RuleResolver(WorkflowRuleService(session)),
        approvers=ApproverService(session),
        dispatcher=ChannelDispatcher(slack=slack, email=email),
        clock=clock,
    )
