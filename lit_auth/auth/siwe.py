"""
Sign-In with Ethereum (EIP-4361) messages.

Builds the canonical text a wallet signs to prove control of an address,
bound to a domain, origin, chain and expiry, and parses it back.
"""

import re
import secrets
import string
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional

from ..exceptions import ValidationError
from ..utils.validators import (
    parse_iso_timestamp,
    to_iso_string,
    validate_address,
    validate_iso_timestamp,
)

HEADER_SUFFIX = " wants you to sign in with your Ethereum account:"
NONCE_ALPHABET = string.ascii_letters + string.digits
NONCE_LENGTH = 17

_FIELD_PATTERN = re.compile(r"^(?P<label>[A-Za-z ]+): (?P<value>.*)$")
_FIELD_NAMES = {
    "URI": "uri",
    "Version": "version",
    "Chain ID": "chain_id",
    "Nonce": "nonce",
    "Issued At": "issued_at",
    "Expiration Time": "expiration_time",
    "Not Before": "not_before",
    "Request ID": "request_id",
}


def generate_nonce() -> str:
    """Random alphanumeric nonce (at least 8 characters per EIP-4361)."""
    return "".join(secrets.choice(NONCE_ALPHABET) for _ in range(NONCE_LENGTH))


@dataclass
class SiweMessage:
    """
    EIP-4361 message.

    address is checksummed on construction; nonce and issued_at default to
    fresh values.
    """
    domain: str
    address: str
    uri: str
    chain_id: int = 1
    version: str = "1"
    statement: Optional[str] = None
    nonce: str = field(default_factory=generate_nonce)
    issued_at: str = field(default_factory=lambda: to_iso_string(datetime.now(timezone.utc)))
    expiration_time: Optional[str] = None
    not_before: Optional[str] = None
    request_id: Optional[str] = None
    resources: list[str] = field(default_factory=list)

    def __post_init__(self):
        if not self.domain:
            raise ValidationError("SIWE domain cannot be empty")
        if not self.uri:
            raise ValidationError("SIWE uri cannot be empty")
        if self.statement is not None and "\n" in self.statement:
            raise ValidationError("SIWE statement cannot contain newlines")
        if not re.match(r"^[A-Za-z0-9]{8,}$", self.nonce):
            raise ValidationError("SIWE nonce must be at least 8 alphanumeric characters")
        self.address = validate_address(self.address)
        self.chain_id = int(self.chain_id)
        validate_iso_timestamp(self.issued_at)
        if self.expiration_time is not None:
            validate_iso_timestamp(self.expiration_time)
        if self.not_before is not None:
            validate_iso_timestamp(self.not_before)

    def prepare_message(self) -> str:
        """
        Serialize to the canonical EIP-4361 text.

        Returns:
            Message to pass to the wallet's personal_sign
        """
        header = f"{self.domain}{HEADER_SUFFIX}"
        prefix = "\n".join([header, self.address])
        # Statement line stays present (empty) when there is no statement
        prefix = "\n\n".join([prefix, self.statement or ""])
        if self.statement:
            prefix += "\n"

        suffix = [
            f"URI: {self.uri}",
            f"Version: {self.version}",
            f"Chain ID: {self.chain_id}",
            f"Nonce: {self.nonce}",
            f"Issued At: {self.issued_at}",
        ]
        if self.expiration_time:
            suffix.append(f"Expiration Time: {self.expiration_time}")
        if self.not_before:
            suffix.append(f"Not Before: {self.not_before}")
        if self.request_id:
            suffix.append(f"Request ID: {self.request_id}")
        if self.resources:
            suffix.append("\n".join(["Resources:"] + [f"- {r}" for r in self.resources]))

        return "\n".join([prefix, "\n".join(suffix)])

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        """True if expiration_time has passed."""
        if not self.expiration_time:
            return False
        if now is None:
            now = datetime.now(timezone.utc)
        return parse_iso_timestamp(self.expiration_time) <= now

    @classmethod
    def parse(cls, message: str) -> "SiweMessage":
        """
        Parse canonical EIP-4361 text.

        Args:
            message: Text produced by prepare_message()

        Returns:
            SiweMessage with the same fields

        Raises:
            ValidationError: If message is not in EIP-4361 format
        """
        if not isinstance(message, str):
            raise ValidationError(f"SIWE message must be string, got {type(message)}")

        lines = message.split("\n")
        if len(lines) < 4 or not lines[0].endswith(HEADER_SUFFIX):
            raise ValidationError("Not a SIWE message: missing header")

        domain = lines[0][: -len(HEADER_SUFFIX)]
        address = lines[1]
        if lines[2] != "":
            raise ValidationError("Not a SIWE message: expected blank line after address")

        statement = lines[3] or None
        index = 5 if statement is not None else 4
        if statement is not None and (len(lines) <= 4 or lines[4] != ""):
            raise ValidationError("Not a SIWE message: expected blank line after statement")

        fields: dict = {}
        resources: list[str] = []
        rest = lines[index:]
        i = 0
        while i < len(rest):
            line = rest[i]
            if line == "Resources:":
                resources = [r[2:] for r in rest[i + 1:] if r.startswith("- ")]
                break
            match = _FIELD_PATTERN.match(line)
            if not match or match.group("label") not in _FIELD_NAMES:
                raise ValidationError(f"Not a SIWE message: unexpected line {line!r}")
            fields[_FIELD_NAMES[match.group("label")]] = match.group("value")
            i += 1

        for required in ("uri", "version", "chain_id", "nonce", "issued_at"):
            if required not in fields:
                raise ValidationError(f"Not a SIWE message: missing {required}")

        try:
            chain_id = int(fields.pop("chain_id"))
        except ValueError as e:
            raise ValidationError("Not a SIWE message: invalid chain id") from e

        return cls(
            domain=domain,
            address=address,
            statement=statement,
            chain_id=chain_id,
            resources=resources,
            **fields,
        )
