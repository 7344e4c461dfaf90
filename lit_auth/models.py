"""
Type definitions for the auth client.

Uses Pydantic for runtime validation. Wire-facing models serialize with
camelCase keys so payloads match what the relay and signing network expect.
"""

from enum import Enum
from typing import Optional, Any

import orjson
from pydantic import BaseModel, Field, ConfigDict, field_validator
from pydantic.alias_generators import to_camel


class AuthMethodType(int, Enum):
    """
    Auth method type.

    Values match the on-chain registry's numeric identifiers.
    """
    EthWallet = 1
    WebAuthn = 3
    Discord = 4
    GoogleJwt = 6
    OTP = 7
    AppleJwt = 8


class WireModel(BaseModel):
    """Base for models exchanged with remote collaborators."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    def to_json(self) -> str:
        """Serialize with camelCase keys, compact separators."""
        return orjson.dumps(self.model_dump(mode="json", by_alias=True, exclude_none=True)).decode("utf-8")


class AuthMethod(WireModel):
    """
    Uniform output of every provider.

    access_token is an opaque, type-specific payload: a JSON-encoded AuthSig,
    a raw JWT, or a JSON-encoded WebAuthn assertion.
    """
    auth_method_type: AuthMethodType = Field(..., description="Auth method type")
    access_token: str = Field(..., min_length=1, description="Serialized credential")

    def __repr__(self) -> str:
        """Safe repr without the credential."""
        return f"AuthMethod(auth_method_type={self.auth_method_type.name})"


class AuthSig(WireModel):
    """Wallet signature over a sign-in message."""
    sig: str = Field(..., description="Signature over signed_message")
    derived_via: str = Field(default="web3.eth.personal.sign")
    signed_message: str = Field(..., description="Canonical sign-in message")
    address: str = Field(..., description="EIP-55 checksummed signer address")


class RelayerRequest(WireModel):
    """Request handed to the relay's minting and lookup endpoints."""
    auth_method_type: AuthMethodType
    auth_method_id: str
    auth_method_pub_key: Optional[str] = None


class MintResponse(WireModel):
    """Relay response to a mint request."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    request_id: Optional[str] = None
    error: Optional[str] = None


class LoginUrlParams(BaseModel):
    """Query parameters carried by an OAuth redirect callback."""
    provider: Optional[str] = None
    access_token: Optional[str] = None
    id_token: Optional[str] = None
    state: Optional[str] = None
    error: Optional[str] = None

    def has_any(self) -> bool:
        """True if at least one redirect parameter is present."""
        return any([self.provider, self.access_token, self.id_token, self.state, self.error])


class AuthenticationOptions(WireModel):
    """Options passed to a WebAuthn assertion ceremony."""
    challenge: str = Field(..., description="base64url-encoded challenge")
    timeout: int = Field(default=60000, gt=0, description="Ceremony timeout (ms)")
    user_verification: str = Field(default="required")
    rp_id: str = Field(..., min_length=1, description="Relying-party id")

    @field_validator("user_verification")
    @classmethod
    def validate_user_verification(cls, v: Any) -> str:
        """Restrict to WebAuthn user verification requirements."""
        if v not in ("required", "preferred", "discouraged"):
            raise ValueError(f"Invalid user verification requirement: {v}")
        return v


class EthWalletAuthenticateOptions(BaseModel):
    """Options for EthWalletProvider.authenticate()."""
    model_config = ConfigDict(arbitrary_types_allowed=True)

    address: Optional[str] = None
    sign_message: Optional[Any] = Field(None, description="Callable(message) -> signature")
    chain: str = Field(default="ethereum")
    expiration: Optional[str] = Field(None, description="ISO 8601 expiration")
    expiration_length: Optional[int] = Field(None, gt=0)
    expiration_unit: Optional[str] = None
    cache: bool = Field(default=False, description="Use cached-signature collaborator")
