"""
Typed exception hierarchy for the quotation kernel.

Every error has a typed class (catch by type, not message), a class-level
``code`` attribute (machine-readable, API-safe), and carries its context as
structured attributes rather than only a message string.

    QuotationKernelError (base)
    |
    +-- NotFoundError
    |   +-- QuotationNotFoundError
    |   +-- CommentNotFoundError
    |   +-- UserNotFoundError
    |
    +-- ValidationError
    |   +-- BlankClientError
    |   +-- NonPositiveAmountError
    |   +-- InvalidAmountError
    |   +-- EmptyTextError
    |   +-- CommentNotPermittedError
    |   +-- InvalidPageError
    |   +-- DuplicateQuotationError
    |   +-- UnknownRoleError
    |   +-- UnknownStatusError
    |
    +-- UnauthorizedError
    |   +-- UnauthorizedTransitionError
    |   +-- UnauthorizedEditError
    |
    +-- WorkflowError
    |   +-- InvalidTransitionError
    |
    +-- TransientFailureError
    |
    +-- AuthError
        +-- InvalidCredentialsError
        +-- UserAlreadyExistsError
        +-- InvalidTokenError

Propagation:
    ValidationError and UnauthorizedError are raised before any mutation is
    attempted.  NotFoundError and TransientFailureError surface from the
    repository; the optimistic coordinator turns them into a rollback plus a
    user-facing notice.  Nothing here is fatal to the process.
"""


class QuotationKernelError(Exception):
    """
    Base exception for all quotation kernel errors.

    All subclasses define a ``code`` class attribute.
    """

    code: str = "QUOTATION_KERNEL_ERROR"


# Not-found errors


class NotFoundError(QuotationKernelError):
    """Base exception for unknown identifiers."""

    code: str = "NOT_FOUND"


class QuotationNotFoundError(NotFoundError):
    """Quotation id does not exist."""

    code: str = "QUOTATION_NOT_FOUND"

    def __init__(self, quotation_id: str):
        self.quotation_id = quotation_id
        super().__init__(f"Quotation not found: {quotation_id}")


class CommentNotFoundError(NotFoundError):
    """Comment id does not exist on the quotation."""

    code: str = "COMMENT_NOT_FOUND"

    def __init__(self, quotation_id: str, comment_id: int):
        self.quotation_id = quotation_id
        self.comment_id = comment_id
        super().__init__(
            f"Comment {comment_id} not found on quotation {quotation_id}"
        )


class UserNotFoundError(NotFoundError):
    """No registered user with this email."""

    code: str = "USER_NOT_FOUND"

    def __init__(self, email: str):
        self.email = email
        super().__init__(f"User not found: {email}")


# Validation errors


class ValidationError(QuotationKernelError):
    """Base exception for rejected input."""

    code: str = "VALIDATION_ERROR"


class BlankClientError(ValidationError):
    """Client name is empty after trimming."""

    code: str = "BLANK_CLIENT"

    def __init__(self) -> None:
        super().__init__("Client name must not be blank")


class NonPositiveAmountError(ValidationError):
    """Quotation amount is zero or negative."""

    code: str = "NON_POSITIVE_AMOUNT"

    def __init__(self, amount):
        self.amount = str(amount)
        super().__init__(f"Amount must be positive, got {amount}")


class InvalidAmountError(ValidationError):
    """Amount is not a finite number."""

    code: str = "INVALID_AMOUNT"

    def __init__(self, amount):
        self.amount = str(amount)
        super().__init__(f"Amount must be a finite number, got {amount!r}")


class EmptyTextError(ValidationError):
    """Comment or reply text is empty after trimming."""

    code: str = "EMPTY_TEXT"

    def __init__(self, field: str):
        self.field = field
        super().__init__(f"{field} text must not be empty")


class CommentNotPermittedError(ValidationError):
    """Role may not post this kind of thread entry."""

    code: str = "COMMENT_NOT_PERMITTED"

    def __init__(self, role: str, action: str):
        self.role = role
        self.action = action
        super().__init__(f"Role '{role}' is not allowed to {action}")


class InvalidPageError(ValidationError):
    """Page number or page size out of range."""

    code: str = "INVALID_PAGE"

    def __init__(self, page: int, page_size: int):
        self.page = page
        self.page_size = page_size
        super().__init__(
            f"Invalid page request: page={page}, page_size={page_size}"
        )


class DuplicateQuotationError(ValidationError):
    """A quotation with this id already exists."""

    code: str = "DUPLICATE_QUOTATION"

    def __init__(self, quotation_id: str):
        self.quotation_id = quotation_id
        super().__init__(f"Quotation already exists: {quotation_id}")


class UnknownRoleError(ValidationError):
    """Value is not one of the known roles."""

    code: str = "UNKNOWN_ROLE"

    def __init__(self, value: str):
        self.value = value
        super().__init__(f"Unknown role: {value!r}")


class UnknownStatusError(ValidationError):
    """Value is not one of the known quotation statuses."""

    code: str = "UNKNOWN_STATUS"

    def __init__(self, value: str):
        self.value = value
        super().__init__(f"Unknown status: {value!r}")


# Authorization errors


class UnauthorizedError(QuotationKernelError):
    """Base exception for capability checks that failed."""

    code: str = "UNAUTHORIZED"


class UnauthorizedTransitionError(UnauthorizedError):
    """Role lacks the capability for this status transition."""

    code: str = "UNAUTHORIZED_TRANSITION"

    def __init__(self, role: str | None, from_status: str, to_status: str):
        self.role = role
        self.from_status = from_status
        self.to_status = to_status
        super().__init__(
            f"Role '{role}' may not move a quotation from {from_status} to {to_status}"
        )


class UnauthorizedEditError(UnauthorizedError):
    """Role may not edit quotation details."""

    code: str = "UNAUTHORIZED_EDIT"

    def __init__(self, role: str | None):
        self.role = role
        super().__init__(f"Role '{role}' may not edit quotations")


# Workflow errors


class WorkflowError(QuotationKernelError):
    """Base exception for state-machine violations."""

    code: str = "WORKFLOW_ERROR"


class InvalidTransitionError(WorkflowError):
    """Target status equals the current status."""

    code: str = "INVALID_TRANSITION"

    def __init__(self, status: str):
        self.status = status
        super().__init__(f"Quotation is already {status}")


# Backend errors


class TransientFailureError(QuotationKernelError):
    """Backend write failed; the caller may retry the action."""

    code: str = "TRANSIENT_FAILURE"

    def __init__(self, operation: str, quotation_id: str):
        self.operation = operation
        self.quotation_id = quotation_id
        super().__init__("Failed to update quotation")


# Authentication errors


class AuthError(QuotationKernelError):
    """Base exception for authentication failures."""

    code: str = "AUTH_ERROR"


class InvalidCredentialsError(AuthError):
    """Email/password pair does not match a registered user."""

    code: str = "INVALID_CREDENTIALS"

    def __init__(self) -> None:
        super().__init__("Invalid credentials")


class UserAlreadyExistsError(AuthError):
    """Sign-up with an email that is already registered."""

    code: str = "USER_ALREADY_EXISTS"

    def __init__(self, email: str):
        self.email = email
        super().__init__("User already exists")


class InvalidTokenError(AuthError):
    """Session token is malformed, forged, or expired."""

    code: str = "INVALID_TOKEN"

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Invalid session token: {reason}")
