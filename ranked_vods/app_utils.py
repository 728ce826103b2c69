from typing import Any, Dict, Optional, Tuple

from flask import jsonify

from .errors import APIError, InvalidArgumentError, NotFoundError, RequestTimeoutError

GENERIC_ERROR_MESSAGE = "Unexpected error"


def _build_success_payload(data: Optional[Any], message: str) -> Dict[str, Any]:
    return {
        "status": "ok",
        "message": message,
        "data": data,
    }


def _build_error_payload(error: Any, message: str) -> Dict[str, Any]:
    return {
        "status": "error",
        "message": message,
        "error": error,
    }


def make_ok(data: Optional[Any] = None, message: str = "success", status_code: int = 200):
    """Return a standardized success response."""
    payload = _build_success_payload(data, message)
    response = jsonify(payload)
    return response, status_code


def make_error(error: Any, message: str = "An error occurred", status_code: int = 400):
    """Return a standardized error response."""
    if isinstance(error, APIError):
        error = error.to_dict()

    payload = _build_error_payload(error, message)
    response = jsonify(payload)
    return response, status_code


def public_error(exc: BaseException) -> Tuple[int, str, bool]:
    """Map an exception to (status_code, user-facing message, should_log).

    Only caller mistakes (400) and unknown users (404) show their own message;
    everything else is reported generically and logged.
    """
    if isinstance(exc, (InvalidArgumentError, NotFoundError)):
        return exc.http_status, exc.message, False
    if isinstance(exc, RequestTimeoutError):
        return exc.http_status, GENERIC_ERROR_MESSAGE, True
    return 500, GENERIC_ERROR_MESSAGE, True
