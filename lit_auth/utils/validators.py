"""
Input validation utilities.

Validates addresses, origins and timestamps before they are embedded in
sign-in messages or ceremony options.
"""

import re
from datetime import datetime, timedelta, timezone
from typing import Optional
from urllib.parse import urlsplit

from web3 import Web3

from ..exceptions import ValidationError


EXPIRATION_UNITS = {
    "seconds": 1,
    "minutes": 60,
    "hours": 60 * 60,
    "days": 60 * 60 * 24,
    "weeks": 60 * 60 * 24 * 7,
}


def validate_address(address: str) -> str:
    """
    Validate Ethereum address.

    Args:
        address: Ethereum address

    Returns:
        EIP-55 checksummed address

    Raises:
        ValidationError: If address is invalid
    """
    if not isinstance(address, str):
        raise ValidationError(f"Address must be string, got {type(address)}")

    # Remove 0x prefix if present
    addr = address[2:] if address.startswith(("0x", "0X")) else address

    # Validate hex format and length (20 bytes = 40 hex chars)
    if not re.match(r"^[0-9a-fA-F]{40}$", addr):
        raise ValidationError(f"Invalid Ethereum address: {address}")

    return Web3.to_checksum_address(f"0x{addr.lower()}")


def validate_origin(origin: str) -> str:
    """
    Validate a web origin (scheme://host[:port]).

    Args:
        origin: Origin string

    Returns:
        Origin without trailing slash

    Raises:
        ValidationError: If origin has no scheme or host
    """
    if not isinstance(origin, str) or not origin:
        raise ValidationError("Origin must be a non-empty string")

    parts = urlsplit(origin)
    if not parts.scheme or not parts.netloc:
        raise ValidationError(f"Invalid origin: {origin}")

    return origin.rstrip("/")


def validate_iso_timestamp(value: str) -> str:
    """
    Validate ISO 8601 timestamp.

    Args:
        value: Timestamp string (e.g., 2024-01-01T00:00:00.000Z)

    Returns:
        The timestamp, unchanged

    Raises:
        ValidationError: If value does not parse as ISO 8601
    """
    if not isinstance(value, str):
        raise ValidationError(f"Timestamp must be string, got {type(value)}")

    try:
        parse_iso_timestamp(value)
    except ValueError as e:
        raise ValidationError(f"Invalid ISO 8601 timestamp: {value}") from e

    return value


def parse_iso_timestamp(value: str) -> datetime:
    """Parse ISO 8601 (trailing Z accepted) into an aware datetime."""
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def to_iso_string(moment: datetime) -> str:
    """Format as ISO 8601 with millisecond precision and Z suffix."""
    moment = moment.astimezone(timezone.utc)
    return moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{moment.microsecond // 1000:03d}Z"


def expiration_from_duration(
    length: int,
    unit: str = "hours",
    now: Optional[datetime] = None
) -> str:
    """
    Convert a duration into an ISO expiration timestamp.

    Args:
        length: Number of units
        unit: seconds, minutes, hours, days or weeks
        now: Reference time (current UTC time if None)

    Returns:
        ISO 8601 expiration timestamp

    Raises:
        ValidationError: If unit is unknown or length is not positive
    """
    if unit not in EXPIRATION_UNITS:
        raise ValidationError(
            f"Expiration unit must be one of {sorted(EXPIRATION_UNITS)}, got {unit}"
        )
    if not isinstance(length, int) or length <= 0:
        raise ValidationError(f"Expiration length must be positive int, got {length}")

    if now is None:
        now = datetime.now(timezone.utc)

    return to_iso_string(now + timedelta(seconds=length * EXPIRATION_UNITS[unit]))
