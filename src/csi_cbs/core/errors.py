"""Error handling module for the CBS controller.

This module defines the CSI error taxonomy. Each error carries the
gRPC status code a transport layer must answer with.

Error Response Format:
{
    "error": {
        "code": "NOT_FOUND",
        "message": "disk not found"
    }
}

Usage:
    from csi_cbs.core.errors import InvalidArgumentError, NotFoundError

    # Raise with default message
    raise NotFoundError()

    # Raise with custom message
    raise InvalidArgumentError("volume name is empty")
"""

from enum import Enum

from pydantic import BaseModel


class ErrorCode(str, Enum):
    """Error codes (names match gRPC status codes)."""

    INVALID_ARGUMENT = "INVALID_ARGUMENT"
    DEADLINE_EXCEEDED = "DEADLINE_EXCEEDED"
    NOT_FOUND = "NOT_FOUND"
    FAILED_PRECONDITION = "FAILED_PRECONDITION"
    UNIMPLEMENTED = "UNIMPLEMENTED"
    INTERNAL = "INTERNAL"


class ErrorDetail(BaseModel):
    """Error detail containing code and message."""

    code: str
    message: str


class ErrorResponse(BaseModel):
    """Error response format."""

    error: ErrorDetail


class CsiError(Exception):
    """Base exception for lifecycle call failures.

    Every failure of a controller operation is raised as a subclass of
    this class, scoped to the single call.

    Attributes:
        code: The error code from ErrorCode enum
        message: Human-readable error message
        grpc_code: Numeric gRPC status code to return
    """

    def __init__(self, code: ErrorCode, message: str, grpc_code: int) -> None:
        self.code = code
        self.message = message
        self.grpc_code = grpc_code
        super().__init__(message)

    def to_response(self) -> ErrorResponse:
        """Convert exception to ErrorResponse model."""
        return ErrorResponse(
            error=ErrorDetail(code=self.code.value, message=self.message)
        )


class InvalidArgumentError(CsiError):
    """3 INVALID_ARGUMENT - Malformed or out-of-range request field."""

    def __init__(self, message: str = "Invalid argument") -> None:
        super().__init__(ErrorCode.INVALID_ARGUMENT, message, 3)


class DeadlineExceededError(CsiError):
    """4 DEADLINE_EXCEEDED - Disk did not become ready in time."""

    def __init__(self, message: str = "Deadline exceeded") -> None:
        super().__init__(ErrorCode.DEADLINE_EXCEEDED, message, 4)


class NotFoundError(CsiError):
    """5 NOT_FOUND - Referenced disk does not exist."""

    def __init__(self, message: str = "disk not found") -> None:
        super().__init__(ErrorCode.NOT_FOUND, message, 5)


class FailedPreconditionError(CsiError):
    """9 FAILED_PRECONDITION - Disk is attached to another instance."""

    def __init__(self, message: str = "Failed precondition") -> None:
        super().__init__(ErrorCode.FAILED_PRECONDITION, message, 9)


class UnimplementedError(CsiError):
    """12 UNIMPLEMENTED - Operation not supported by this driver."""

    def __init__(self, message: str = "") -> None:
        super().__init__(ErrorCode.UNIMPLEMENTED, message, 12)


class InternalError(CsiError):
    """13 INTERNAL - CBS API failure or attach/detach never converged."""

    def __init__(self, message: str = "Internal error") -> None:
        super().__init__(ErrorCode.INTERNAL, message, 13)
