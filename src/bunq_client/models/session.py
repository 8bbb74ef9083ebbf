"""
Session models: the credentials produced by the installation handshake.
"""

from datetime import datetime
from typing import NamedTuple, Optional

from cryptography.hazmat.primitives.asymmetric import rsa
from pydantic import BaseModel, ConfigDict, Field


class Session(BaseModel):
    """Fully bootstrapped session. Replaced wholesale on refresh, never edited."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    installation_token: str = Field(min_length=1)
    session_token: str = Field(min_length=1)
    server_public_key: rsa.RSAPublicKey
    user_id: int = Field(gt=0)
    primary_monetary_account_id: int = Field(gt=0)
    expires_at: datetime


class SessionGrant(BaseModel):
    """Result of POST /session-server."""
    token: str = Field(min_length=1)
    user_id: int = Field(gt=0)
    expires_at: datetime


class Credentials(NamedTuple):
    """What a single outbound request is signed and authenticated with."""
    token: Optional[str] = None
    private_key: Optional[rsa.RSAPrivateKey] = None
    server_public_key: Optional[rsa.RSAPublicKey] = None
