"""API and infrastructure error classes.

APIError subclasses map directly to HTTP status codes in the exception
handlers registered by ``create_app``. The RuntimeError subclasses signal
infrastructure faults that are not meant for clients and end up as a
generic 500.
"""


class APIError(Exception):
    """Base class for API errors.

    All API errors have a code, message, and HTTP status.
    Subclasses set default status_code.

    Attributes:
        code: Machine-readable error code (e.g., "NOT_FOUND").
        message: Human-readable error message.
        status_code: HTTP status code to return.
        details: Optional list of additional error details.
    """

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = 500,
        details: list[dict] | None = None,
    ) -> None:
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details
        super().__init__(message)


class ValidationError(APIError):
    """Field validation failed (400)."""

    def __init__(
        self,
        message: str,
        details: list[dict] | None = None,
    ) -> None:
        super().__init__(
            code="VALIDATION_ERROR",
            message=message,
            status_code=400,
            details=details,
        )


class UnauthorizedError(APIError):
    """Authentication required or rejected (401).

    Credential failures pass their own code (e.g. "CODE_EXPIRED") so the
    client can show a specific message. Token failures keep the generic
    default and never say why a token was rejected.
    """

    def __init__(
        self,
        message: str = "Authentication required",
        code: str = "UNAUTHORIZED",
    ) -> None:
        super().__init__(
            code=code,
            message=message,
            status_code=401,
        )


class NotFoundError(APIError):
    """Resource not found (404).

    Use when requested resource doesn't exist in the caller's store.
    """

    def __init__(self, resource: str, resource_id: str | None = None) -> None:
        if resource_id:
            message = f"{resource} with id '{resource_id}' not found"
        else:
            message = f"{resource} not found"
        super().__init__(
            code="NOT_FOUND",
            message=message,
            status_code=404,
        )


class ConflictError(APIError):
    """Conflicting resource (409).

    Use when a write would collide with an existing row, e.g. moving a
    time entry onto a day its project already has an entry for.
    """

    def __init__(self, code: str, message: str) -> None:
        super().__init__(
            code=code,
            message=message,
            status_code=409,
        )


class InvalidStateError(APIError):
    """Business rule violation (422).

    Use when request is syntactically valid but violates business rules,
    e.g. a project ending before it starts.
    """

    def __init__(self, message: str) -> None:
        super().__init__(
            code="INVALID_STATE_TRANSITION",
            message=message,
            status_code=422,
        )


class UserStoreProvisioningError(APIError):
    """Per-user store could not be created during login (500).

    Raised after the newly created identity has been rolled back, so the
    caller holds neither an identity nor a session and must restart from
    requesting a new code.
    """

    def __init__(self) -> None:
        super().__init__(
            code="USER_STORE_CREATION_FAILED",
            message="could not create user store",
            status_code=500,
        )


class TokenConfigurationError(RuntimeError):
    """Signing secret is missing or too short.

    Raised on first use of the token issuer. Never caught by token
    verification, so a misconfigured server fails loudly instead of
    rejecting every token as invalid.
    """


class UserStoreError(RuntimeError):
    """Materializing a per-user store failed (I/O, schema, or timeout)."""
