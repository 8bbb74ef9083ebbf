"""
bunq client error types and the HTTP status classifier.
"""

import json
from typing import Any, Optional

import httpx


class BunqError(Exception):
    def __init__(self, code: str, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.code = code
        self.details = details


class CryptoError(BunqError):
    def __init__(self, message: str, code: str = "crypto_error"):
        super().__init__(code, message)


class SignatureInvalidError(BunqError):
    def __init__(self, message: str = "signature does not match"):
        super().__init__("signature_invalid", message)


class BootstrapError(BunqError):
    def __init__(self, message: str, step: Optional[str] = None):
        super().__init__("bootstrap_error", message, {"step": step} if step else None)
        self.step = step


class ResponseIntegrityError(BunqError):
    def __init__(self, message: str, response_id: Optional[str] = None):
        super().__init__("response_integrity_error", message, {"response_id": response_id})
        self.response_id = response_id


class DecodeError(BunqError):
    def __init__(self, message: str):
        super().__init__("decode_error", message)


class ConnectionError(BunqError):
    def __init__(self, message: str):
        super().__init__("connection_error", message)


class ApiError(BunqError):
    """Non-2xx answer from the API."""

    code = "api_error"

    def __init__(
        self,
        status_code: int,
        response_id: Optional[str] = None,
        messages: Optional[list[str]] = None,
        response: Optional[httpx.Response] = None,
    ):
        self.status_code = status_code
        self.response_id = response_id
        self.messages = messages or ["unknown error"]
        self.response = response
        message = (
            f"bunq API error {status_code} (response-id: {response_id or '-'}): "
            + "; ".join(self.messages)
        )
        super().__init__(type(self).code, message, {"status_code": status_code, "response_id": response_id})


class BadRequestError(ApiError):
    code = "bad_request"


class UnauthorizedError(ApiError):
    code = "unauthorized"


class ForbiddenError(ApiError):
    code = "forbidden"


class NotFoundError(ApiError):
    code = "not_found"


class MethodNotAllowedError(ApiError):
    code = "method_not_allowed"


class RateLimitedError(ApiError):
    """429 returned on every attempt; ``response`` is the last one seen."""

    code = "rate_limited"


class InternalServerError(ApiError):
    code = "internal_server_error"


_STATUS_ERRORS: dict[int, type[ApiError]] = {
    400: BadRequestError,
    401: UnauthorizedError,
    403: ForbiddenError,
    404: NotFoundError,
    405: MethodNotAllowedError,
    429: RateLimitedError,
    500: InternalServerError,
}


def error_messages(body: bytes) -> list[str]:
    """Pull ``error_description`` strings out of an ``{"Error": [...]}`` envelope."""
    try:
        payload = json.loads(body)
    except (ValueError, TypeError):
        return ["unknown error"]
    entries = payload.get("Error") if isinstance(payload, dict) else None
    if not isinstance(entries, list) or not entries:
        return ["unknown error"]
    return [
        str(entry.get("error_description", "")) if isinstance(entry, dict) else str(entry)
        for entry in entries
    ]


def classify_error(
    status_code: int,
    response_id: Optional[str],
    body: bytes,
    response: Optional[httpx.Response] = None,
) -> ApiError:
    error_cls = _STATUS_ERRORS.get(status_code, ApiError)
    return error_cls(status_code, response_id, error_messages(body), response=response)
