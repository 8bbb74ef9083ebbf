"""Key handling and PKCS#1 v1.5 / SHA-256 signatures."""

import base64

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec

from bunq_client.errors import CryptoError, SignatureInvalidError
from bunq_client.security import (
    decode_public_key,
    encode_public_key,
    generate_key_pair,
    sign,
    verify,
)

BODY = b'{"test":"data"}'


def test_generated_keys_are_2048_bit(client_keys):
    assert client_keys.private_key.key_size == 2048
    assert client_keys.public_key.public_numbers() == client_keys.private_key.public_key().public_numbers()


def test_rejects_weak_key_size():
    with pytest.raises(CryptoError):
        generate_key_pair(1024)


def test_public_key_pem_round_trip(client_keys):
    pem = encode_public_key(client_keys.public_key)
    assert pem.startswith("-----BEGIN PUBLIC KEY-----")
    decoded = decode_public_key(pem)
    assert decoded.public_numbers() == client_keys.public_key.public_numbers()


def test_decodes_pkcs1_pem(client_keys):
    pem = client_keys.public_key.public_bytes(
        serialization.Encoding.PEM, serialization.PublicFormat.PKCS1,
    ).decode()
    assert pem.startswith("-----BEGIN RSA PUBLIC KEY-----")
    assert decode_public_key(pem).public_numbers() == client_keys.public_key.public_numbers()


def test_decode_rejects_garbage():
    with pytest.raises(CryptoError):
        decode_public_key("-----BEGIN PUBLIC KEY-----\nnot base64\n-----END PUBLIC KEY-----\n")
    with pytest.raises(CryptoError):
        decode_public_key("")


def test_decode_rejects_non_rsa_key():
    ec_key = ec.generate_private_key(ec.SECP256R1()).public_key()
    pem = ec_key.public_bytes(
        serialization.Encoding.PEM, serialization.PublicFormat.SubjectPublicKeyInfo,
    ).decode()
    with pytest.raises(CryptoError):
        decode_public_key(pem)


@pytest.mark.parametrize("body", [b"", BODY, "ünïcödé €".encode("utf-8"), bytes(range(256))])
def test_sign_then_verify(client_keys, body):
    signature = sign(client_keys.private_key, body)
    verify(client_keys.public_key, body, signature)


def test_tampered_body_fails(client_keys):
    signature = sign(client_keys.private_key, BODY)
    for i in range(len(BODY)):
        tampered = bytearray(BODY)
        tampered[i] ^= 0x01
        with pytest.raises(SignatureInvalidError):
            verify(client_keys.public_key, bytes(tampered), signature)


def test_tampered_signature_fails(client_keys):
    raw = bytearray(base64.b64decode(sign(client_keys.private_key, BODY)))
    for i in (0, len(raw) // 2, len(raw) - 1):
        tampered = bytearray(raw)
        tampered[i] ^= 0x80
        with pytest.raises(SignatureInvalidError):
            verify(client_keys.public_key, BODY, base64.b64encode(bytes(tampered)).decode())


def test_wrong_key_fails(client_keys, server_keys):
    signature = sign(client_keys.private_key, BODY)
    with pytest.raises(SignatureInvalidError):
        verify(server_keys.public_key, BODY, signature)


def test_non_base64_signature_is_crypto_error(client_keys):
    with pytest.raises(CryptoError):
        verify(client_keys.public_key, BODY, "!!not-base64!!")
