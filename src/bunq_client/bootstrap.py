"""
Installation handshake.

installation -> device-server -> session-server -> primary monetary account.
Each step must succeed before the next runs; the Session only exists once all
four did, so a failure never leaves a half-initialised client behind.
"""

import logging
from datetime import timedelta
from typing import Any, Optional

from cryptography.hazmat.primitives.asymmetric import rsa

from bunq_client.config import BunqConfig
from bunq_client.errors import ApiError, BootstrapError, ConnectionError, CryptoError, DecodeError
from bunq_client.models.session import Credentials, Session, SessionGrant
from bunq_client.security import KeyPair, decode_public_key, encode_public_key, generate_key_pair
from bunq_client.session import utcnow
from bunq_client.transport.envelope import extract, extract_list, response_items
from bunq_client.transport.http import HttpClient

logger = logging.getLogger(__name__)

DEFAULT_SESSION_TIMEOUT_S = 1800

# Non-user objects that share the session-server response with the user.
_SESSION_META_KEYS = {"Id", "Token"}


def _field(payload: Any, key: str, field: str, step: str) -> Any:
    try:
        value = extract(payload, key).get(field)
    except (DecodeError, AttributeError) as e:
        raise BootstrapError(f"No {key} in {step} response", step=step) from e
    if not value:
        raise BootstrapError(f"Empty {key}.{field} in {step} response", step=step)
    return value


def parse_session_grant(payload: Any) -> SessionGrant:
    """Read token, user id and timeout from a session-server response.

    The user object arrives under a variant key (UserPerson, UserCompany,
    UserApiKey, ...), so any item that is neither Id nor Token is a candidate.
    """
    token = _field(payload, "Token", "token", "session-server")

    user_id = 0
    timeout = 0
    try:
        items = response_items(payload)
    except DecodeError as e:
        raise BootstrapError("Malformed session-server response", step="session-server") from e
    for item in items:
        for key, value in item.items():
            if key in _SESSION_META_KEYS or not isinstance(value, dict):
                continue
            try:
                candidate = int(value.get("id") or 0)
            except (TypeError, ValueError, OverflowError):
                continue
            if candidate > 0:
                user_id = candidate
                try:
                    timeout = int(value.get("session_timeout") or 0)
                except (TypeError, ValueError, OverflowError):
                    timeout = 0

    if user_id == 0:
        raise BootstrapError("No user id in session-server response", step="session-server")
    if timeout <= 0:
        timeout = DEFAULT_SESSION_TIMEOUT_S
    return SessionGrant(token=token, user_id=user_id, expires_at=utcnow() + timedelta(seconds=timeout))


def find_primary_account(payload: Any) -> int:
    """First ACTIVE monetary account with a positive id, whatever its variant."""
    try:
        accounts = extract_list(payload)
    except DecodeError as e:
        raise BootstrapError("Malformed monetary-account response", step="monetary-account") from e
    for account in accounts:
        if not isinstance(account, dict):
            continue
        if account.get("status") != "ACTIVE":
            continue
        try:
            account_id = int(account.get("id") or 0)
        except (TypeError, ValueError, OverflowError):
            continue
        if account_id > 0:
            return account_id
    raise BootstrapError("No active monetary account found", step="monetary-account")


class Bootstrapper:
    def __init__(self, http: HttpClient, config: BunqConfig, key_pair: Optional[KeyPair] = None):
        self._http = http
        self._config = config
        self._key_pair = key_pair

    @property
    def key_pair(self) -> KeyPair:
        if self._key_pair is None:
            raise CryptoError("Key pair not generated yet")
        return self._key_pair

    async def run(self) -> Session:
        if self._key_pair is None:
            logger.info("Generating RSA key pair")
            self._key_pair = generate_key_pair()

        installation_token, server_public_key = await self.install()
        credentials = Credentials(installation_token, self._key_pair.private_key, server_public_key)
        await self.register_device(credentials)
        try:
            grant = await self.open_session(credentials)
        except (ApiError, ConnectionError) as e:
            raise BootstrapError(f"session-server failed: {e}", step="session-server") from e
        account_id = await self.resolve_primary_account(
            Credentials(grant.token, self._key_pair.private_key, server_public_key), grant.user_id,
        )
        return Session(
            installation_token=installation_token,
            session_token=grant.token,
            server_public_key=server_public_key,
            user_id=grant.user_id,
            primary_monetary_account_id=account_id,
            expires_at=grant.expires_at,
        )

    async def _call(self, step: str, method: str, path: str, body: Any, credentials: Credentials) -> Any:
        try:
            response = await self._http.request(method, path, body, credentials=credentials)
        except (ApiError, ConnectionError) as e:
            raise BootstrapError(f"{step} failed: {e}", step=step) from e
        try:
            return response.json()
        except ValueError as e:
            raise BootstrapError(f"{step} returned a non-JSON body", step=step) from e

    async def install(self) -> tuple[str, rsa.RSAPublicKey]:
        """Step 1: register our public key, receive installation token + server key."""
        logger.info("POST /installation")
        payload = await self._call(
            "installation", "POST", "installation",
            {"client_public_key": encode_public_key(self.key_pair.public_key)},
            Credentials(),
        )
        token = _field(payload, "Token", "token", "installation")
        server_key_pem = _field(payload, "ServerPublicKey", "server_public_key", "installation")
        return token, decode_public_key(server_key_pem)

    async def register_device(self, credentials: Credentials) -> None:
        """Step 2: register this device with the API key as secret."""
        logger.info("POST /device-server (%s)", self._config.description)
        await self._call(
            "device-server", "POST", "device-server",
            {
                "description": self._config.description,
                "secret": self._config.api_key,
                "permitted_ips": self._config.permitted_ips,
            },
            credentials,
        )

    async def open_session(self, credentials: Credentials) -> SessionGrant:
        """Step 3, also used to refresh: trade the API key for a session token."""
        logger.info("POST /session-server")
        try:
            response = await self._http.request(
                "POST", "session-server", {"secret": self._config.api_key}, credentials=credentials,
            )
            payload = response.json()
        except ValueError as e:
            raise BootstrapError("session-server returned a non-JSON body", step="session-server") from e
        return parse_session_grant(payload)

    async def resolve_primary_account(self, credentials: Credentials, user_id: int) -> int:
        """Step 4: pick the first active monetary account."""
        logger.info("GET /user/%d/monetary-account", user_id)
        payload = await self._call(
            "monetary-account", "GET", f"user/{user_id}/monetary-account", None, credentials,
        )
        return find_primary_account(payload)
