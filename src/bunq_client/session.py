"""
Session guard: owns the live Session and keeps its token fresh.

Readers take an immutable snapshot. The refresh path is the only writer: it
re-opens the session with the installation token and swaps in a new Session
value. Refreshes are single-flight, so N callers that see an expiring session
share one re-authentication.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Awaitable, Callable, Optional

from bunq_client.models.session import Credentials, Session, SessionGrant
from bunq_client.security import KeyPair

logger = logging.getLogger(__name__)

DEFAULT_REFRESH_MARGIN_S = 30.0

SessionOpener = Callable[[Credentials], Awaitable[SessionGrant]]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _retrieve_exception(task: asyncio.Future) -> None:
    # every waiter may have been cancelled; mark the failure as seen
    if not task.cancelled():
        task.exception()


class SessionGuard:
    def __init__(
        self,
        session: Session,
        key_pair: KeyPair,
        open_session: SessionOpener,
        *,
        margin_s: float = DEFAULT_REFRESH_MARGIN_S,
        clock: Callable[[], datetime] = utcnow,
    ):
        self._session = session
        self._key_pair = key_pair
        self._open_session = open_session
        self._margin_s = margin_s
        self._clock = clock
        self._lock = asyncio.Lock()
        self._inflight: Optional[asyncio.Future[Session]] = None

    @property
    def session(self) -> Session:
        return self._session

    def snapshot(self) -> Credentials:
        """Credentials for a session-scoped request."""
        session = self._session
        return Credentials(session.session_token, self._key_pair.private_key, session.server_public_key)

    def installation_credentials(self) -> Credentials:
        session = self._session
        return Credentials(session.installation_token, self._key_pair.private_key, session.server_public_key)

    def remaining_s(self) -> float:
        return (self._session.expires_at - self._clock()).total_seconds()

    def expiring(self) -> bool:
        return self.remaining_s() < self._margin_s

    async def ensure_active(self) -> None:
        if not self.expiring():
            return
        await self.refresh()

    async def refresh(self) -> Session:
        """Re-open the session, joining a refresh already in progress if any."""
        if self._inflight is None or self._inflight.done():
            self._inflight = asyncio.ensure_future(self._refresh())
            self._inflight.add_done_callback(_retrieve_exception)
        # shield: a cancelled caller must not cancel the refresh other callers wait on
        return await asyncio.shield(self._inflight)

    async def _refresh(self) -> Session:
        async with self._lock:
            logger.info("Session expires in %.0fs, refreshing", self.remaining_s())
            grant = await self._open_session(self.installation_credentials())
            self._session = self._session.model_copy(
                update={"session_token": grant.token, "expires_at": grant.expires_at},
            )
            logger.info("Session refreshed, valid until %s", grant.expires_at.isoformat())
            return self._session
