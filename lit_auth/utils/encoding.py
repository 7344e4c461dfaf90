"""
Encoding helpers.

base64 / base64url conversions and unverified JWT payload decoding.
JWT signatures are never checked here; the signing network re-validates
every token it receives.
"""

import base64
import binascii
from typing import Any, Dict, Union

import jwt

from ..exceptions import CryptoDecodeError


def b64encode_str(value: str) -> str:
    """Standard base64 of a UTF-8 string."""
    return base64.b64encode(value.encode("utf-8")).decode("ascii")


def b64decode_str(value: str) -> str:
    """
    Decode standard base64 into a UTF-8 string.

    Raises:
        CryptoDecodeError: If value is not valid base64 text
    """
    try:
        return base64.b64decode(value, validate=True).decode("utf-8")
    except (binascii.Error, ValueError, UnicodeDecodeError) as e:
        raise CryptoDecodeError(f"Invalid base64 value: {type(e).__name__}") from e


def base64url_encode(data: Union[bytes, str]) -> str:
    """base64url without padding (WebAuthn JSON encoding)."""
    if isinstance(data, str):
        data = data.encode("utf-8")
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def base64url_decode(value: str) -> bytes:
    """
    Decode base64url (padding optional).

    Standard base64 characters are tolerated so that attestation objects
    encoded either way decode the same.

    Raises:
        CryptoDecodeError: If value cannot be decoded
    """
    if not isinstance(value, str):
        raise CryptoDecodeError(f"Expected base64url string, got {type(value).__name__}")
    normalized = value.replace("+", "-").replace("/", "_").rstrip("=")
    try:
        return base64.urlsafe_b64decode(normalized + "=" * (-len(normalized) % 4))
    except (binascii.Error, ValueError) as e:
        raise CryptoDecodeError(f"Invalid base64url value: {type(e).__name__}") from e


def decode_jwt_payload(token: str) -> Dict[str, Any]:
    """
    Decode a JWT payload without verifying its signature.

    Args:
        token: Compact-serialized JWT

    Returns:
        Payload claims

    Raises:
        CryptoDecodeError: If token does not have exactly three segments or
            the payload is not a JSON object
    """
    if not isinstance(token, str):
        raise CryptoDecodeError(f"JWT must be string, got {type(token).__name__}")

    # Checked before PyJWT so a 4-segment token is never partially parsed
    segments = token.split(".")
    if len(segments) != 3:
        raise CryptoDecodeError(f"Invalid token length: expected 3 segments, got {len(segments)}")

    try:
        payload = jwt.decode(token, options={"verify_signature": False})
    except jwt.exceptions.InvalidTokenError as e:
        raise CryptoDecodeError(f"Invalid JWT: {e}") from e

    if not isinstance(payload, dict):
        raise CryptoDecodeError("JWT payload is not a JSON object")

    return payload
