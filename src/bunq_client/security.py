"""
Key material and request/response signatures.

Every signed exchange uses RSA with PKCS#1 v1.5 padding over a SHA-256
digest of the raw body bytes. Signatures travel base64 encoded in headers.
"""

import base64
import binascii
from typing import NamedTuple

from cryptography.exceptions import InvalidSignature, UnsupportedAlgorithm
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import padding, rsa

from bunq_client.errors import CryptoError, SignatureInvalidError

MIN_KEY_SIZE = 2048


class KeyPair(NamedTuple):
    private_key: rsa.RSAPrivateKey
    public_key: rsa.RSAPublicKey


def generate_key_pair(key_size: int = MIN_KEY_SIZE) -> KeyPair:
    if key_size < MIN_KEY_SIZE:
        raise CryptoError(f"RSA key size must be at least {MIN_KEY_SIZE} bits, got {key_size}")
    try:
        private_key = rsa.generate_private_key(public_exponent=65537, key_size=key_size)
    except Exception as e:
        raise CryptoError(f"Failed to generate RSA key pair: {e}") from e
    return KeyPair(private_key, private_key.public_key())


def encode_public_key(key: rsa.RSAPublicKey) -> str:
    """PEM-encode a public key as SubjectPublicKeyInfo."""
    try:
        pem = key.public_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PublicFormat.SubjectPublicKeyInfo,
        )
    except (AttributeError, ValueError) as e:
        raise CryptoError(f"Failed to encode public key: {e}") from e
    return pem.decode("ascii")


def decode_public_key(pem: str) -> rsa.RSAPublicKey:
    """Load an RSA public key from PEM (SubjectPublicKeyInfo or PKCS#1)."""
    try:
        key = serialization.load_pem_public_key(pem.encode("ascii"))
    except (ValueError, TypeError, UnicodeEncodeError, UnsupportedAlgorithm) as e:
        raise CryptoError(f"Malformed public key: {e}") from e
    if not isinstance(key, rsa.RSAPublicKey):
        raise CryptoError(f"Expected an RSA public key, got {type(key).__name__}")
    return key


def sign(private_key: rsa.RSAPrivateKey, data: bytes) -> str:
    try:
        signature = private_key.sign(data, padding.PKCS1v15(), hashes.SHA256())
    except (TypeError, ValueError) as e:
        raise CryptoError(f"Failed to sign payload: {e}") from e
    return base64.b64encode(signature).decode("ascii")


def verify(public_key: rsa.RSAPublicKey, data: bytes, signature: str) -> None:
    """Raise SignatureInvalidError unless ``signature`` covers ``data``."""
    try:
        raw = base64.b64decode(signature, validate=True)
    except (binascii.Error, ValueError) as e:
        raise CryptoError(f"Signature is not valid base64: {e}") from e
    try:
        public_key.verify(raw, data, padding.PKCS1v15(), hashes.SHA256())
    except InvalidSignature as e:
        raise SignatureInvalidError() from e
