"""Utility modules for the auth client."""

from .encoding import base64url_decode, base64url_encode, decode_jwt_payload
from .validators import validate_address, validate_origin, expiration_from_duration

__all__ = [
    "base64url_decode",
    "base64url_encode",
    "decode_jwt_payload",
    "validate_address",
    "validate_origin",
    "expiration_from_duration",
]
