"""
Error taxonomy for the OCR gateway and its backends.

The gateway never raises these past its boundary; they travel inside a
``GatewayResult``. Backends raise the ``BackendError`` variants and the
gateway hands them back to the caller unchanged.
"""

from typing import Optional


class GatewayError(Exception):
    """Base class for every error a gateway call can report."""

    code = "gateway_error"

    def __init__(self, message: str = "", original_error: Optional[BaseException] = None):
        super().__init__(message or self.code)
        self.original_error = original_error

    def to_dict(self) -> dict:
        data = {"code": self.code, "message": str(self)}
        if self.original_error is not None:
            data["cause"] = repr(self.original_error)
        return data


class RateLimitExceeded(GatewayError):
    """Too many calls inside the current rate window. Backend not called."""

    code = "rate_limit_exceeded"


class CircuitOpen(GatewayError):
    """Circuit is open and still cooling down. Backend not called."""

    code = "circuit_open"


class ApiFailure(GatewayError):
    """The backend was called and faulted."""

    code = "api_failure"


class BackendError(ApiFailure):
    """Base class for failures reported by an OCR backend itself."""

    code = "backend_error"


class BackendUnavailable(BackendError):
    code = "backend_unavailable"


class BackendExecutionError(BackendError):
    code = "backend_execution_error"

    def __init__(self, detail: str, original_error: Optional[BaseException] = None):
        super().__init__(f"OCR engine failed: {detail}", original_error)
        self.detail = detail


class HttpError(BackendError):
    code = "http_error"

    def __init__(self, status: int, original_error: Optional[BaseException] = None):
        super().__init__(f"OCR provider returned HTTP {status}", original_error)
        self.status = status


class TransportError(BackendError):
    code = "transport_error"

    def __init__(self, reason: str, original_error: Optional[BaseException] = None):
        super().__init__(f"Transport failure: {reason}", original_error)
        self.reason = reason


class DecodeError(BackendError):
    code = "decode_error"

    def __init__(self, reason: str, original_error: Optional[BaseException] = None):
        super().__init__(f"Could not decode: {reason}", original_error)
        self.reason = reason


class NoTextFound(BackendError):
    code = "no_text_found"


class UnexpectedResponse(BackendError):
    code = "unexpected_response"
