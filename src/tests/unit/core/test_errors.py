"""Tests for CSI error classes."""

import pytest

from csi_cbs.core.errors import (
    CsiError,
    DeadlineExceededError,
    ErrorCode,
    FailedPreconditionError,
    InternalError,
    InvalidArgumentError,
    NotFoundError,
    UnimplementedError,
)


class TestErrorClasses:
    """Tests for the CsiError subclasses."""

    @pytest.mark.parametrize(
        ("error_cls", "code", "grpc_code"),
        [
            (InvalidArgumentError, ErrorCode.INVALID_ARGUMENT, 3),
            (DeadlineExceededError, ErrorCode.DEADLINE_EXCEEDED, 4),
            (NotFoundError, ErrorCode.NOT_FOUND, 5),
            (FailedPreconditionError, ErrorCode.FAILED_PRECONDITION, 9),
            (UnimplementedError, ErrorCode.UNIMPLEMENTED, 12),
            (InternalError, ErrorCode.INTERNAL, 13),
        ],
    )
    def test_codes(self, error_cls: type[CsiError], code: ErrorCode, grpc_code: int) -> None:
        """Each class maps to its gRPC status code."""
        exc = error_cls()
        assert isinstance(exc, CsiError)
        assert exc.code == code
        assert exc.grpc_code == grpc_code

    def test_default_message(self) -> None:
        assert NotFoundError().message == "disk not found"

    def test_custom_message(self) -> None:
        exc = InvalidArgumentError("volume name is empty")
        assert exc.message == "volume name is empty"
        assert str(exc) == "volume name is empty"

    def test_to_response(self) -> None:
        """to_response() should return ErrorResponse with correct fields."""
        resp = FailedPreconditionError("disk-1 is attached to ins-2").to_response()

        assert resp.error.code == "FAILED_PRECONDITION"
        assert resp.error.message == "disk-1 is attached to ins-2"

    def test_response_serializes(self) -> None:
        resp = InternalError("boom").to_response()
        assert resp.model_dump() == {"error": {"code": "INTERNAL", "message": "boom"}}


class TestErrorCodeEnum:
    def test_values_match_names(self) -> None:
        for code in ErrorCode:
            assert code.value == code.name

    def test_is_str(self) -> None:
        assert ErrorCode.NOT_FOUND == "NOT_FOUND"
