"""Centralized error codes and status mappings."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Final, Optional

import grpc

_ERROR_CODE_RE = re.compile(r"(ERR\d{4})")


class ErrorCode(str, Enum):
    """Stable error identifiers surfaced to observers and logs."""

    # configuration (ERR100x)
    CONFIG_INVALID = "ERR1001"
    CREDENTIALS_MISSING = "ERR1002"
    CREDENTIALS_INVALID = "ERR1003"
    LANGUAGE_REQUIRED = "ERR1004"
    SAMPLE_RATE_INVALID = "ERR1005"

    # stream (ERR200x)
    HANDSHAKE_FAILED = "ERR2001"
    SEND_FAILED = "ERR2002"
    STREAM_FAILED = "ERR2003"
    CHANNEL_CLOSED = "ERR2004"

    # detector (ERR300x)
    DETECTOR_CLOSED = "ERR3001"


@dataclass(frozen=True)
class ErrorSpec:
    """Maps an error code to a gRPC status and message."""

    code: ErrorCode
    status: grpc.StatusCode
    message: str


ERROR_SPECS: Final[dict[ErrorCode, ErrorSpec]] = {
    ErrorCode.CONFIG_INVALID: ErrorSpec(
        ErrorCode.CONFIG_INVALID,
        grpc.StatusCode.INVALID_ARGUMENT,
        "invalid detector configuration",
    ),
    ErrorCode.CREDENTIALS_MISSING: ErrorSpec(
        ErrorCode.CREDENTIALS_MISSING,
        grpc.StatusCode.UNAUTHENTICATED,
        "credentials file not found",
    ),
    ErrorCode.CREDENTIALS_INVALID: ErrorSpec(
        ErrorCode.CREDENTIALS_INVALID,
        grpc.StatusCode.UNAUTHENTICATED,
        "credentials file is malformed",
    ),
    ErrorCode.LANGUAGE_REQUIRED: ErrorSpec(
        ErrorCode.LANGUAGE_REQUIRED,
        grpc.StatusCode.INVALID_ARGUMENT,
        "language_code is required",
    ),
    ErrorCode.SAMPLE_RATE_INVALID: ErrorSpec(
        ErrorCode.SAMPLE_RATE_INVALID,
        grpc.StatusCode.INVALID_ARGUMENT,
        "sample_rate must be positive",
    ),
    ErrorCode.HANDSHAKE_FAILED: ErrorSpec(
        ErrorCode.HANDSHAKE_FAILED,
        grpc.StatusCode.UNAVAILABLE,
        "failed to open stream or send audio config",
    ),
    ErrorCode.SEND_FAILED: ErrorSpec(
        ErrorCode.SEND_FAILED,
        grpc.StatusCode.UNAVAILABLE,
        "failed to send audio frame",
    ),
    ErrorCode.STREAM_FAILED: ErrorSpec(
        ErrorCode.STREAM_FAILED,
        grpc.StatusCode.UNKNOWN,
        "streaming detect intent failed",
    ),
    ErrorCode.CHANNEL_CLOSED: ErrorSpec(
        ErrorCode.CHANNEL_CLOSED,
        grpc.StatusCode.FAILED_PRECONDITION,
        "channel send side already closed",
    ),
    ErrorCode.DETECTOR_CLOSED: ErrorSpec(
        ErrorCode.DETECTOR_CLOSED,
        grpc.StatusCode.FAILED_PRECONDITION,
        "detector is closed",
    ),
}


def spec_for(code: ErrorCode) -> ErrorSpec:
    """Return the ErrorSpec for a given error code."""
    return ERROR_SPECS[code]


def status_for(code: ErrorCode) -> grpc.StatusCode:
    """Return the gRPC status associated with an error code."""
    return ERROR_SPECS[code].status


def format_error(code: ErrorCode, detail: Optional[str] = None) -> str:
    """Format an error code and optional detail into a message."""
    spec = ERROR_SPECS[code]
    message = detail if detail else spec.message
    return f"{spec.code.value} {message}"


def parse_error_code(exc: grpc.RpcError) -> Optional[str]:
    """Extract ERR#### code from a gRPC error, if present."""
    details = ""
    try:
        details = exc.details() or ""
    except Exception:
        details = ""
    match = _ERROR_CODE_RE.search(details)
    return match.group(1) if match else None


class IntentDetectorError(RuntimeError):
    """Raised for application-defined errors with status metadata."""

    default_code: ErrorCode = ErrorCode.STREAM_FAILED

    def __init__(
        self, code: Optional[ErrorCode] = None, detail: Optional[str] = None
    ) -> None:
        code = code or self.default_code
        self.code = code
        self.status = status_for(code)
        self.detail = detail or ERROR_SPECS[code].message
        super().__init__(format_error(code, detail))


class ConfigurationError(IntentDetectorError):
    """Malformed configuration or credentials; raised at construction time."""

    default_code = ErrorCode.CONFIG_INVALID


class HandshakeFailure(IntentDetectorError):
    """Opening the stream or sending the audio config failed."""

    default_code = ErrorCode.HANDSHAKE_FAILED


class SendFailure(IntentDetectorError):
    """A single audio frame could not be sent."""

    default_code = ErrorCode.SEND_FAILED


class TransportError(IntentDetectorError):
    """The response stream terminated with an error."""

    default_code = ErrorCode.STREAM_FAILED

    def __init__(
        self,
        code: Optional[ErrorCode] = None,
        detail: Optional[str] = None,
        rpc_status: Optional[grpc.StatusCode] = None,
    ) -> None:
        super().__init__(code, detail)
        if rpc_status is not None:
            self.status = rpc_status


class DetectorClosedError(IntentDetectorError):
    """The detector was closed and cannot start new sessions."""

    default_code = ErrorCode.DETECTOR_CLOSED


def transport_error_from_rpc(exc: BaseException) -> TransportError:
    """Wrap an arbitrary stream failure into a TransportError."""
    if isinstance(exc, TransportError):
        return exc
    if isinstance(exc, grpc.RpcError):
        status = exc.code() if hasattr(exc, "code") else None
        try:
            details = exc.details() if hasattr(exc, "details") else None
        except Exception:
            details = None
        detail = f"{status.name if status else 'UNKNOWN'}: {details or exc}"
        return TransportError(ErrorCode.STREAM_FAILED, detail, rpc_status=status)
    return TransportError(ErrorCode.STREAM_FAILED, str(exc) or type(exc).__name__)


__all__ = [
    "ErrorCode",
    "ErrorSpec",
    "ERROR_SPECS",
    "ConfigurationError",
    "DetectorClosedError",
    "HandshakeFailure",
    "IntentDetectorError",
    "SendFailure",
    "TransportError",
    "format_error",
    "parse_error_code",
    "spec_for",
    "status_for",
    "transport_error_from_rpc",
]
