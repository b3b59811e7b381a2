"""
Custom Exceptions.

Application-specific exception classes for consistent error handling.

Taxonomy:
    ValidationError     - local, raised before any network call
    ClassificationError - unrecognized type name (database, schedule, ...)
    TransportError      - connect, DNS, timeout, TLS or body read failure
    DecodeError         - response body is not the expected JSON
    RemoteError         - the service answered with status != "ok"
    ProtocolAnomaly     - response violates the envelope convention
    ConfigurationError  - unusable config file or BL_* environment
"""


class ApplicationError(Exception):
    """Base exception for all application errors."""

    def __init__(self, message: str, code: str = "SYS_INTERNAL_ERROR") -> None:
        self.message = message
        self.code = code
        self.context: list[str] = []
        super().__init__(self.message)

    def add_context(self, context: str) -> "ApplicationError":
        """Annotate the error with the operation it happened in."""
        self.context.append(context)
        return self

    def __str__(self) -> str:
        if not self.context:
            return self.message
        return ", ".join([self.message, *self.context])


class ValidationError(ApplicationError):
    """Raised when local validation fails."""

    def __init__(
        self,
        message: str = "Validation failed",
        details: dict | None = None,
        code: str = "VAL_VALIDATION_ERROR",
    ) -> None:
        self.details = details or {}
        super().__init__(message, code=code)


class ClassificationError(ValidationError):
    """Raised when a type name cannot be resolved to a known value."""

    def __init__(self, kind: str, value: str) -> None:
        self.kind = kind
        self.value = value
        super().__init__(
            f"{kind} type {value} not recognized",
            details={"kind": kind, "value": value},
            code="VAL_UNKNOWN_TYPE",
        )


class TransportError(ApplicationError):
    """Raised when a request cannot be sent or its response cannot be read."""

    def __init__(self, message: str = "Transport error") -> None:
        super().__init__(message, code="NET_TRANSPORT_ERROR")


class DecodeError(ApplicationError):
    """Raised when a response body cannot be decoded."""

    def __init__(self, message: str = "Could not decode response", body: str = "") -> None:
        self.body = body
        super().__init__(message, code="PROTO_DECODE_ERROR")


class RemoteError(ApplicationError):
    """Raised when the service reports a failure in its response envelope."""

    def __init__(self, message: str = "Remote error", status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message, code="REMOTE_ERROR")


class ProtocolAnomaly(ApplicationError):
    """Raised when a response does not follow the envelope convention."""

    def __init__(
        self,
        message: str = "Unexpected response",
        body: str = "",
        status_code: int | None = None,
    ) -> None:
        self.body = body
        self.status_code = status_code
        super().__init__(message, code="PROTO_ANOMALY")


class ConfigurationError(ApplicationError):
    """Raised when configuration is missing or invalid."""

    def __init__(self, message: str = "Invalid configuration") -> None:
        super().__init__(message, code="CFG_INVALID")
