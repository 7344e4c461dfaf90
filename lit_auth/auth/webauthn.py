"""
WebAuthn challenge / response helpers.

Builds assertion options from a fresh chain value, normalizes the
assertion the browser returns, and pulls the credential public key out of
a registration attestation object.
"""

import copy
import re
from typing import Any, Dict, Mapping

from fido2.webauthn import AttestationObject

from ..exceptions import AttestationParseError, InvalidCredentialError, ValidationError
from ..models import AuthenticationOptions
from ..utils.encoding import base64url_decode, base64url_encode

DEFAULT_TIMEOUT_MS = 60000

_SCHEME_PATTERN = re.compile(r"(^\w+:|^)//")
_PORT_PATTERN = re.compile(r":\d+$")


def get_rp_id_from_origin(origin: str) -> str:
    """
    Relying-party id for an origin: host only, no scheme, no port.

    Args:
        origin: e.g. https://app.example:8443

    Returns:
        e.g. app.example
    """
    return _PORT_PATTERN.sub("", _SCHEME_PATTERN.sub("", origin))


def build_authentication_options(
    challenge_source: bytes,
    origin: str,
    timeout_ms: int = DEFAULT_TIMEOUT_MS,
) -> AuthenticationOptions:
    """
    Build assertion ceremony options.

    Args:
        challenge_source: Recent unpredictable bytes (latest block hash)
        origin: Origin the ceremony runs under
        timeout_ms: Ceremony timeout

    Returns:
        AuthenticationOptions with user verification required

    Raises:
        ValidationError: If the challenge source is empty
    """
    if not challenge_source:
        raise ValidationError("Challenge source cannot be empty")

    return AuthenticationOptions(
        challenge=base64url_encode(bytes(challenge_source)),
        timeout=timeout_ms,
        user_verification="required",
        rp_id=get_rp_id_from_origin(origin),
    )


def normalize_assertion(assertion: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Copy an assertion response into its JSON form.

    response.userHandle is base64url-encoded, and so is any raw bytes value
    (rawId, signature, authenticatorData) a native ceremony hands back.

    Raises:
        InvalidCredentialError: If assertion lacks rawId or response
    """
    if not isinstance(assertion, Mapping):
        raise InvalidCredentialError(f"Assertion must be a mapping, got {type(assertion).__name__}")
    if not assertion.get("rawId"):
        raise InvalidCredentialError("Assertion response missing rawId")
    if not isinstance(assertion.get("response"), Mapping):
        raise InvalidCredentialError("Assertion response missing response object")

    normalized = copy.deepcopy(dict(assertion))
    normalized["response"] = dict(normalized["response"])

    user_handle = normalized["response"].get("userHandle")
    if user_handle:
        normalized["response"]["userHandle"] = base64url_encode(user_handle)

    return _encode_binary(normalized)


def _encode_binary(value: Any) -> Any:
    if isinstance(value, (bytes, bytearray, memoryview)):
        return base64url_encode(bytes(value))
    if isinstance(value, Mapping):
        return {key: _encode_binary(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_encode_binary(item) for item in value]
    return value


def extract_credential_public_key(attestation_object: str) -> str:
    """
    Extract the COSE credential public key from an attestation object.

    Args:
        attestation_object: base64 / base64url CBOR attestation object

    Returns:
        0x-prefixed hex of the COSE-encoded public key

    Raises:
        AttestationParseError: If the buffer does not decode to an
            attestation with attested credential data
    """
    try:
        attestation = AttestationObject(base64url_decode(attestation_object))
        credential_data = attestation.auth_data.credential_data
        if credential_data is None:
            raise AttestationParseError("Attestation has no attested credential data")
        # aaguid (16) + credential id length (2) + credential id, then the COSE key
        key_offset = 16 + 2 + len(credential_data.credential_id)
        public_key = bytes(credential_data)[key_offset:]
    except AttestationParseError:
        raise
    except Exception as e:
        raise AttestationParseError(
            "Error while decoding credential create response for public key retrieval. "
            f"Attestation response not encoded as expected: {type(e).__name__}"
        ) from e

    if not public_key:
        raise AttestationParseError("Attestation credential public key is empty")

    return "0x" + public_key.hex()
