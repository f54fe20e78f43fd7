"""
Typed Exception Hierarchy for the Approval Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Routing an invoice either produces exactly one approval notification or a
failure the caller can act on.  Callers (the CLI, an API layer, a batch job)
must be able to tell "no rule matched" from "approver has no Slack handle"
without parsing message strings.

Every exception therefore:
  1. Has its own class (catch by type, not by message)
  2. Has a ``code`` class attribute (machine-readable, API-safe)
  3. Carries the offending values as attributes (not only in the message)

Example:
    try:
        response = processor.process_invoice(request)
    except MissingContactError as e:
        notify_admin(f"approver {e.approver_id} has no {e.contact_field}")
    except ApprovalKernelError as e:
        api_response(code=e.code, message=str(e))

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    ApprovalKernelError (base)
    |
    +-- NotFoundError
    |   +-- CompanyNotFoundError
    |   +-- RuleNotFoundError
    |   +-- WorkflowRuleNotFoundError
    |   +-- ApproverNotFoundError
    |
    +-- ValidationError
    |   +-- InvalidWorkflowRuleError
    |   +-- InvalidApproverError
    |   +-- InvalidInvoiceError
    |
    +-- ConflictError
    |   +-- CompanyAlreadyExistsError
    |   +-- ApproverInUseError
    |
    +-- ChannelError
    |   +-- UnsupportedChannelError
    |   +-- MissingContactError
    |
    +-- UpstreamNotificationError
    +-- DeadlineExceededError
    +-- ConfigurationError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category      | Code                          | When Raised
--------------|-------------------------------|---------------------------------------
Not found     | COMPANY_NOT_FOUND             | Company name unknown to the directory
              | RULE_NOT_FOUND                | No workflow rule matches the invoice
              | WORKFLOW_RULE_NOT_FOUND       | Rule id unknown to the catalog
              | APPROVER_NOT_FOUND            | Approver id unknown to the directory
--------------|-------------------------------|---------------------------------------
Validation    | INVALID_WORKFLOW_RULE         | Rule fails WorkflowRule.validate()
              | INVALID_APPROVER              | Approver fails Approver.validate()
              | INVALID_INVOICE               | Negative amount, empty company name
--------------|-------------------------------|---------------------------------------
Conflict      | COMPANY_ALREADY_EXISTS        | Duplicate company name
              | APPROVER_IN_USE               | Deleting an approver a rule references
--------------|-------------------------------|---------------------------------------
Channel       | UNSUPPORTED_CHANNEL           | Channel selector has no collaborator
              | MISSING_CONTACT               | Approver lacks the selected channel's
              |                               | contact field
--------------|-------------------------------|---------------------------------------
Notification  | UPSTREAM_NOTIFICATION_FAILURE | Collaborator rejected the request
--------------|-------------------------------|---------------------------------------
Pipeline      | DEADLINE_EXCEEDED             | Caller deadline passed before a stage
--------------|-------------------------------|---------------------------------------
Config        | CONFIGURATION_ERROR           | Missing or malformed setting

===============================================================================
HANDLING PATTERNS
===============================================================================

1. The invoice pipeline never catches these.  The first failing stage raises
   and nothing after it runs, so a failure before dispatch means no
   notification was sent.

2. A missing contact method is never "fixed" by switching channel:

    except MissingContactError as e:
        # e.channel is the channel the rule designates; do not retry on
        # the other one.
        ...

3. Only the CLI formats errors for humans (``error [CODE]: message``).
"""


class ApprovalKernelError(Exception):
    """
    Base exception for all approval kernel errors.

    All subclasses must have a ``code`` class attribute for machine-readable
    error identification.
    """

    code: str = "APPROVAL_KERNEL_ERROR"


# Not-found exceptions


class NotFoundError(ApprovalKernelError):
    """Base exception for lookups that found nothing."""

    code: str = "NOT_FOUND"


class CompanyNotFoundError(NotFoundError):
    """Company with the given name (or id) does not exist."""

    code: str = "COMPANY_NOT_FOUND"

    def __init__(self, company: str):
        self.company = company
        super().__init__(f"Company not found: {company}")


class RuleNotFoundError(NotFoundError):
    """No workflow rule of the company matches the invoice."""

    code: str = "RULE_NOT_FOUND"

    def __init__(
        self,
        company_id: int,
        amount: str,
        department: str,
        manager_approval_required: bool,
    ):
        self.company_id = company_id
        self.amount = amount
        self.department = department
        self.manager_approval_required = manager_approval_required
        super().__init__(
            f"No workflow rule matches invoice for company {company_id}: "
            f"amount={amount}, department={department or '-'}, "
            f"manager_approval_required={manager_approval_required}"
        )


class WorkflowRuleNotFoundError(NotFoundError):
    """Workflow rule with the given id does not exist."""

    code: str = "WORKFLOW_RULE_NOT_FOUND"

    def __init__(self, rule_id: int):
        self.rule_id = rule_id
        super().__init__(f"Workflow rule not found: {rule_id}")


class ApproverNotFoundError(NotFoundError):
    """Approver with the given id does not exist."""

    code: str = "APPROVER_NOT_FOUND"

    def __init__(self, approver_id: int):
        self.approver_id = approver_id
        super().__init__(f"Approver not found: {approver_id}")


# Validation exceptions


class ValidationError(ApprovalKernelError):
    """Base exception for malformed records and requests."""

    code: str = "INVALID"


class InvalidWorkflowRuleError(ValidationError):
    """Workflow rule fails its structural checks."""

    code: str = "INVALID_WORKFLOW_RULE"

    def __init__(self, reason: str, rule_id: int | None = None):
        self.reason = reason
        self.rule_id = rule_id
        subject = f"workflow rule {rule_id}" if rule_id is not None else "workflow rule"
        super().__init__(f"Invalid {subject}: {reason}")


class InvalidApproverError(ValidationError):
    """Approver fails its structural checks."""

    code: str = "INVALID_APPROVER"

    def __init__(self, reason: str, approver_id: int | None = None):
        self.reason = reason
        self.approver_id = approver_id
        subject = f"approver {approver_id}" if approver_id is not None else "approver"
        super().__init__(f"Invalid {subject}: {reason}")


class InvalidInvoiceError(ValidationError):
    """Invoice request cannot be routed as submitted."""

    code: str = "INVALID_INVOICE"

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Invalid invoice: {reason}")


# Conflict exceptions


class ConflictError(ApprovalKernelError):
    """Base exception for writes that collide with existing data."""

    code: str = "CONFLICT"


class CompanyAlreadyExistsError(ConflictError):
    """A company with this name already exists."""

    code: str = "COMPANY_ALREADY_EXISTS"

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Company already exists: {name}")


class ApproverInUseError(ConflictError):
    """Approver is still referenced by one or more workflow rules."""

    code: str = "APPROVER_IN_USE"

    def __init__(self, approver_id: int, rule_ids: list[int]):
        self.approver_id = approver_id
        self.rule_ids = rule_ids
        super().__init__(
            f"Approver {approver_id} is referenced by workflow rules {rule_ids}"
        )


# Channel exceptions


class ChannelError(ApprovalKernelError):
    """Base exception for approval channel selection and contact checks."""

    code: str = "CHANNEL_ERROR"


class UnsupportedChannelError(ChannelError):
    """Channel selector does not map to a notification collaborator."""

    code: str = "UNSUPPORTED_CHANNEL"

    def __init__(self, channel: object):
        self.channel = str(channel)
        super().__init__(f"Unsupported approval channel: {channel!r}")


class MissingContactError(ChannelError):
    """Approver lacks the contact field the selected channel requires."""

    code: str = "MISSING_CONTACT"

    def __init__(self, approver_id: int | None, channel: str, contact_field: str):
        self.approver_id = approver_id
        self.channel = channel
        self.contact_field = contact_field
        super().__init__(
            f"Approver {approver_id} has no {contact_field} "
            f"required by the {channel} channel"
        )


# Pipeline exceptions


class UpstreamNotificationError(ApprovalKernelError):
    """Notification collaborator failed to accept the approval request."""

    code: str = "UPSTREAM_NOTIFICATION_FAILURE"

    def __init__(self, channel: str, reason: str):
        self.channel = channel
        self.reason = reason
        super().__init__(f"{channel} notification failed: {reason}")


class DeadlineExceededError(ApprovalKernelError):
    """Caller deadline passed before a pipeline stage could start."""

    code: str = "DEADLINE_EXCEEDED"

    def __init__(self, stage: str, deadline: str):
        self.stage = stage
        self.deadline = deadline
        super().__init__(f"Deadline {deadline} exceeded before stage '{stage}'")


class ConfigurationError(ApprovalKernelError):
    """A required setting is missing or malformed."""

    code: str = "CONFIGURATION_ERROR"

    def __init__(self, setting: str, reason: str):
        self.setting = setting
        self.reason = reason
        super().__init__(f"Invalid configuration for '{setting}': {reason}")
