"""
bunq-client: bunq API client for Python.

Signed installation handshake, self-refreshing sessions, per-request RSA
signatures, rate-limit retries and lazy cursor pagination.
"""

import logging

from bunq_client.client import Bunq, AsyncBunq
from bunq_client.config import BunqConfig, Environment
from bunq_client.errors import (
    ApiError,
    BadRequestError,
    BootstrapError,
    BunqError,
    ConnectionError,
    CryptoError,
    DecodeError,
    ForbiddenError,
    InternalServerError,
    MethodNotAllowedError,
    NotFoundError,
    RateLimitedError,
    ResponseIntegrityError,
    SignatureInvalidError,
    UnauthorizedError,
)
from bunq_client.models.common import Amount, Pointer
from bunq_client.pagination import ListOptions
from bunq_client.sandbox import create_sandbox_api_key

logging.getLogger(__name__).addHandler(logging.NullHandler())

__version__ = "0.1.0"
__all__ = [
    "Bunq",
    "AsyncBunq",
    "BunqConfig",
    "Environment",
    "ListOptions",
    "Amount",
    "Pointer",
    "create_sandbox_api_key",
    "BunqError",
    "ApiError",
    "BadRequestError",
    "UnauthorizedError",
    "ForbiddenError",
    "NotFoundError",
    "MethodNotAllowedError",
    "RateLimitedError",
    "InternalServerError",
    "BootstrapError",
    "ConnectionError",
    "CryptoError",
    "DecodeError",
    "ResponseIntegrityError",
    "SignatureInvalidError",
]
