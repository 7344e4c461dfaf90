"""
Auth method identifier derivation.

Turns the credential material inside an AuthMethod into the deterministic
identifier the on-chain registry is keyed by. Every rule except EthWallet
hashes a composed "<subject>:<namespace>" string with keccak256 so
identifiers share one shape regardless of provider.

Derivation is pure apart from the Discord rule, which needs the user id
from Discord's user-info endpoint.
"""

import logging
from typing import Any, Callable, Dict, Mapping, Optional, Union

import orjson
from eth_utils import keccak

from ..api.discord import DiscordClient
from ..config import LitAuthSettings, get_settings
from ..exceptions import (
    CryptoDecodeError,
    MissingClaimError,
    StateError,
    UnsupportedAuthMethodError,
)
from ..models import AuthMethod, AuthMethodType
from ..utils.encoding import decode_jwt_payload

logger = logging.getLogger(__name__)

WEBAUTHN_NAMESPACE = "lit"


def hash_identifier(composed: str) -> str:
    """
    Hash a composed identity string.

    Args:
        composed: e.g. "<sub>:<aud>"

    Returns:
        0x-prefixed lowercase hex keccak256 of the UTF-8 bytes
    """
    return "0x" + keccak(text=composed).hex()


def _load_json_object(access_token: str, label: str) -> Dict[str, Any]:
    try:
        data = orjson.loads(access_token)
    except (orjson.JSONDecodeError, TypeError) as e:
        raise CryptoDecodeError(f"{label} payload is not valid JSON") from e
    if not isinstance(data, dict):
        raise CryptoDecodeError(f"{label} payload is not a JSON object")
    return data


def _require_claim(claims: Mapping[str, Any], claim: str, label: str) -> str:
    value = claims.get(claim)
    if value is None or value == "":
        raise MissingClaimError(f"{label} payload missing '{claim}'", claim=claim)
    if not isinstance(value, (str, int)):
        raise CryptoDecodeError(f"{label} claim '{claim}' has unexpected type {type(value).__name__}")
    return str(value)


def eth_wallet_auth_method_id(access_token: str) -> str:
    """Identifier for a wallet signature: the signer address, verbatim."""
    auth_sig = _load_json_object(access_token, "AuthSig")
    return _require_claim(auth_sig, "address", "AuthSig")


def webauthn_auth_method_id(access_token: str) -> str:
    """Identifier for a WebAuthn assertion: hash of "<rawId>:lit"."""
    assertion = _load_json_object(access_token, "WebAuthn assertion")
    raw_id = _require_claim(assertion, "rawId", "WebAuthn assertion")
    return webauthn_credential_id_hash(raw_id)


def webauthn_credential_id_hash(raw_id: str) -> str:
    """Hash a base64url credential raw id in the WebAuthn namespace."""
    return hash_identifier(f"{raw_id}:{WEBAUTHN_NAMESPACE}")


def jwt_auth_method_id(access_token: str) -> str:
    """Identifier for Google / Apple ID tokens: hash of "<sub>:<aud>"."""
    claims = decode_jwt_payload(access_token)
    subject = _require_claim(claims, "sub", "JWT")
    audience = claims.get("aud")
    # a multi-audience token hashes its audiences comma-joined
    if isinstance(audience, list):
        audience = ",".join(str(item) for item in audience)
    audience = _require_claim({"aud": audience}, "aud", "JWT")
    return hash_identifier(f"{subject}:{audience}")


def otp_auth_method_id(access_token: str) -> str:
    """
    Identifier for OTP tokens: hash of "<userId>:<orgId lowercased>".

    userId is the first "|" segment of the extraData claim and keeps its case.
    """
    claims = decode_jwt_payload(access_token)
    org_id = _require_claim(claims, "orgId", "OTP JWT").lower()
    extra_data = _require_claim(claims, "extraData", "OTP JWT")
    user_id = extra_data.split("|", 1)[0]
    if not user_id:
        raise MissingClaimError("OTP JWT extraData has empty user id", claim="extraData")
    return hash_identifier(f"{user_id}:{org_id}")


class IdentityHasher:
    """
    Dispatches identifier derivation on AuthMethod.auth_method_type.

    The rule table covers every AuthMethodType member.
    """

    def __init__(
        self,
        discord_user_fetcher: Optional[Callable[[str], Mapping[str, Any]]] = None,
        discord_client_id: str = "1052874239658692668",
    ):
        """
        Args:
            discord_user_fetcher: Callable(access_token) -> Discord user dict;
                required only for Discord auth methods
            discord_client_id: Application id namespacing Discord identifiers
        """
        self.discord_user_fetcher = discord_user_fetcher
        self.discord_client_id = discord_client_id
        self._rules: Dict[AuthMethodType, Callable[[str], str]] = {
            AuthMethodType.EthWallet: eth_wallet_auth_method_id,
            AuthMethodType.WebAuthn: webauthn_auth_method_id,
            AuthMethodType.GoogleJwt: jwt_auth_method_id,
            AuthMethodType.AppleJwt: jwt_auth_method_id,
            AuthMethodType.Discord: self._discord_auth_method_id,
            AuthMethodType.OTP: otp_auth_method_id,
        }

    def _discord_auth_method_id(self, access_token: str) -> str:
        if self.discord_user_fetcher is None:
            raise StateError("Discord derivation needs a user-info fetcher")
        user = self.discord_user_fetcher(access_token)
        user_id = _require_claim(user, "id", "Discord user")
        return hash_identifier(f"{user_id}:{self.discord_client_id}")

    def supported_types(self) -> frozenset:
        return frozenset(self._rules)

    def derive(self, auth_method: Union[AuthMethod, Mapping[str, Any]]) -> str:
        """
        Derive the identifier for an auth method.

        Args:
            auth_method: AuthMethod, or its persisted camelCase dict form

        Returns:
            Identifier (0x-prefixed hash, or checksummed address for EthWallet)

        Raises:
            UnsupportedAuthMethodError: If the type has no rule
            CryptoDecodeError: If the access token is malformed
            StateError: If a Discord method arrives without a user-info fetcher
            RemoteFailure: If the Discord user-info fetch fails
        """
        raw_type, access_token = _unpack(auth_method)

        try:
            method_type = AuthMethodType(raw_type)
        except (ValueError, TypeError):
            raise UnsupportedAuthMethodError(
                f'Invalid auth method type "{raw_type}" passed',
                auth_method_type=raw_type,
            )

        rule = self._rules.get(method_type)
        if rule is None:
            raise UnsupportedAuthMethodError(
                f'No derivation rule for auth method type "{method_type.name}"',
                auth_method_type=method_type,
            )

        if not isinstance(access_token, str) or not access_token:
            raise CryptoDecodeError(f"{method_type.name} auth method has no access token")

        auth_method_id = rule(access_token)
        logger.debug(f"Derived auth method id for {method_type.name}")
        return auth_method_id


def _unpack(auth_method: Union[AuthMethod, Mapping[str, Any]]) -> tuple[Any, Any]:
    if isinstance(auth_method, AuthMethod):
        return auth_method.auth_method_type, auth_method.access_token
    if isinstance(auth_method, Mapping):
        raw_type = auth_method.get("authMethodType", auth_method.get("auth_method_type"))
        access_token = auth_method.get("accessToken", auth_method.get("access_token"))
        return raw_type, access_token
    raise CryptoDecodeError(f"Cannot derive identifier from {type(auth_method).__name__}")


def get_auth_method_id(
    auth_method: Union[AuthMethod, Mapping[str, Any]],
    discord_user_fetcher: Optional[Callable[[str], Mapping[str, Any]]] = None,
    settings: Optional[LitAuthSettings] = None,
) -> str:
    """
    Derive an identifier from a (possibly persisted) auth method.

    Convenience wrapper around IdentityHasher for callers that recompute
    identifiers after a restart. Discord tokens are resolved through a
    DiscordClient built from settings unless a fetcher is given.
    """
    settings = settings or get_settings()
    if discord_user_fetcher is None:
        def discord_user_fetcher(access_token: str) -> Mapping[str, Any]:
            return DiscordClient(settings).get_user_info(access_token)

    hasher = IdentityHasher(
        discord_user_fetcher=discord_user_fetcher,
        discord_client_id=settings.discord_client_id,
    )
    return hasher.derive(auth_method)
