"""Tests for validators and encoding helpers."""

from datetime import datetime, timezone

import pytest

from ..exceptions import CryptoDecodeError, ValidationError
from ..utils.encoding import (
    b64decode_str,
    b64encode_str,
    base64url_decode,
    base64url_encode,
    decode_jwt_payload,
)
from ..utils.validators import (
    expiration_from_duration,
    to_iso_string,
    validate_address,
    validate_iso_timestamp,
    validate_origin,
)


def test_validate_address():
    """Test address validation."""
    checksummed = "0x5aAeb6053F3E94C9b9A09f33669435E7Ef1BeAed"
    assert validate_address(checksummed.lower()) == checksummed
    assert validate_address(checksummed[2:]) == checksummed

    with pytest.raises(ValidationError):
        validate_address("0x1234")  # Too short

    with pytest.raises(ValidationError):
        validate_address("0x" + "g" * 40)  # Not hex

    with pytest.raises(ValidationError):
        validate_address(None)


def test_validate_origin():
    """Test origin validation."""
    assert validate_origin("https://app.example/") == "https://app.example"
    assert validate_origin("http://localhost:3000") == "http://localhost:3000"

    with pytest.raises(ValidationError):
        validate_origin("app.example")  # No scheme

    with pytest.raises(ValidationError):
        validate_origin("")


def test_timestamps():
    """Test ISO 8601 handling."""
    moment = datetime(2024, 1, 1, 12, 30, 45, 123456, tzinfo=timezone.utc)
    assert to_iso_string(moment) == "2024-01-01T12:30:45.123Z"
    assert validate_iso_timestamp("2024-01-01T00:00:00.000Z") == "2024-01-01T00:00:00.000Z"

    with pytest.raises(ValidationError):
        validate_iso_timestamp("next tuesday")


def test_expiration_from_duration():
    """Test duration conversion."""
    now = datetime(2024, 1, 1, tzinfo=timezone.utc)

    assert expiration_from_duration(2, "days", now) == "2024-01-03T00:00:00.000Z"
    assert expiration_from_duration(90, "minutes", now) == "2024-01-01T01:30:00.000Z"
    assert expiration_from_duration(1, "weeks", now) == "2024-01-08T00:00:00.000Z"

    with pytest.raises(ValidationError):
        expiration_from_duration(1, "fortnights", now)

    with pytest.raises(ValidationError):
        expiration_from_duration(0, "hours", now)


def test_base64url():
    """Test base64url encoding."""
    assert base64url_encode(b"\xfb\xff") == "-_8"
    assert base64url_encode("user-1") == "dXNlci0x"
    assert base64url_decode("-_8") == b"\xfb\xff"
    assert base64url_decode("+/8=") == b"\xfb\xff"  # Standard alphabet tolerated

    with pytest.raises(CryptoDecodeError):
        base64url_decode(b"bytes")


def test_standard_base64():
    assert b64decode_str(b64encode_str("abc123")) == "abc123"

    with pytest.raises(CryptoDecodeError):
        b64decode_str("not base64!")


def test_decode_jwt_payload(make_jwt):
    """Payloads decode without a signing key."""
    claims = decode_jwt_payload(make_jwt({"sub": "s", "aud": "a", "exp": 1}))
    assert claims["sub"] == "s"

    with pytest.raises(CryptoDecodeError):
        decode_jwt_payload("a.b.c")

    with pytest.raises(CryptoDecodeError):
        decode_jwt_payload("a.b.c.d")

    with pytest.raises(CryptoDecodeError):
        decode_jwt_payload(12345)
