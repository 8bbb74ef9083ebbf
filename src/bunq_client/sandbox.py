"""
Sandbox helpers: create throwaway sandbox users for testing.
"""

import logging
from typing import Optional

import httpx

from bunq_client.config import Environment
from bunq_client.errors import ConnectionError, DecodeError, classify_error
from bunq_client.transport.envelope import extract
from bunq_client.transport.http import HEADER_RESPONSE_ID, base_headers

logger = logging.getLogger(__name__)

SUGAR_DADDY_EMAIL = "sugardaddy@bunq.com"


async def create_sandbox_api_key(
    base_url: str = Environment.SANDBOX.value,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> str:
    """Create a sandbox user and return its API key. Unauthenticated, unsigned."""
    async with httpx.AsyncClient(base_url=base_url.rstrip("/"), transport=transport, timeout=30.0) as client:
        try:
            resp = await client.post(
                "/sandbox-user-person", content=b"{}", headers=base_headers("sandbox-setup"),
            )
        except httpx.HTTPError as e:
            raise ConnectionError(f"Sandbox user creation failed: {e}") from e

    if not resp.is_success:
        raise classify_error(resp.status_code, resp.headers.get(HEADER_RESPONSE_ID), resp.content, resp)

    try:
        payload = resp.json()
    except ValueError as e:
        raise DecodeError("sandbox-user-person returned a non-JSON body") from e
    api_key = extract(payload, "ApiKey").get("api_key")
    if not api_key:
        raise DecodeError("No api_key in sandbox-user-person response")
    logger.info("Created sandbox user")
    return api_key
