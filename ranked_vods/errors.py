from typing import Optional


class APIError(Exception):
    """Unified error class for the ranked VOD pipeline."""

    code = "API_ERROR"
    http_status = 500

    def __init__(self, source: str, message: str, details: Optional[str] = None, code: Optional[str] = None):
        super().__init__(message)
        self.source = source
        self.message = message
        self.details = details
        if code is not None:
            self.code = code

    def to_dict(self) -> dict:
        return {
            "source": self.source,
            "code": self.code,
            "message": self.message,
            **({"details": self.details} if self.details else {}),
        }


class InvalidArgumentError(APIError):
    """Caller input rejected before any upstream call (e.g. season < 8)."""

    code = "INVALID_ARGUMENT"
    http_status = 400

    def __init__(self, message: str, details: Optional[str] = None):
        super().__init__("request", message, details)


class NotFoundError(APIError):
    """Upstream confirmed the referenced user does not exist."""

    code = "NOT_FOUND"
    http_status = 404


class UpstreamError(APIError):
    """The ranked API answered with an error envelope."""

    code = "UPSTREAM_ERROR"
    http_status = 502

    def __init__(
        self,
        source: str,
        message: str,
        details: Optional[str] = None,
        *,
        endpoint: Optional[str] = None,
        status_code: Optional[int] = None,
    ):
        super().__init__(source, message, details)
        self.endpoint = endpoint
        self.status_code = status_code


class NetworkError(UpstreamError):
    """Transport failure: connection error or a non-JSON error response."""

    code = "NETWORK_ERROR"


class ProtocolError(APIError):
    """A success response whose payload does not have the expected shape."""

    code = "PROTOCOL_ERROR"
    http_status = 502


class RequestTimeoutError(APIError):
    """The overall request deadline expired."""

    code = "TIMEOUT"
    http_status = 504
