"""
WebAuthn provider.

Registration mints a PKP bound to a new hardware credential; authentication
signs a fresh chain value with an existing one. The browser ceremonies are
run by a WebAuthnCeremony collaborator.
"""

from typing import Any, Dict, Mapping, Optional, Protocol, runtime_checkable
import logging

import orjson

from .base import BaseProvider
from ..api.chain import ChainReader, Web3ChainReader
from ..auth.identity import webauthn_credential_id_hash
from ..auth.webauthn import (
    build_authentication_options,
    extract_credential_public_key,
    normalize_assertion,
)
from ..exceptions import (
    AttestationParseError,
    CeremonyError,
    InvalidCredentialError,
    LitAuthError,
    StateError,
    UnsupportedOperation,
)
from ..models import AuthMethod, AuthMethodType, AuthenticationOptions, RelayerRequest
from ..utils.validators import validate_origin

logger = logging.getLogger(__name__)


@runtime_checkable
class WebAuthnCeremony(Protocol):
    """Runs browser credential ceremonies (create and get)."""

    def register(self, options: Dict[str, Any]) -> Dict[str, Any]:
        ...

    def get_assertion(self, options: AuthenticationOptions) -> Dict[str, Any]:
        ...


class WebAuthnProvider(BaseProvider):
    """
    Hardware-credential provider.

    verify() always refuses: the signing network re-validates the assertion
    when it issues session signatures.
    """

    auth_method_type = AuthMethodType.WebAuthn

    def __init__(
        self,
        origin: str,
        ceremony: WebAuthnCeremony,
        chain_reader: Optional[ChainReader] = None,
        **kwargs
    ):
        """
        Initialize WebAuthn provider.

        Args:
            origin: Origin the ceremonies run under
            ceremony: Browser ceremony collaborator
            chain_reader: Source of challenge material (web3 reader if None)
        """
        super().__init__(**kwargs)
        self.origin = validate_origin(origin)
        self.ceremony = ceremony
        if chain_reader is None:
            chain_reader = Web3ChainReader(self.settings)
        self.chain_reader = chain_reader
        self._assertion: Optional[Dict[str, Any]] = None

    def register(self, username: Optional[str] = None) -> Dict[str, Any]:
        """
        Get registration options to pass to the authenticator.

        Args:
            username: Username to register the credential with
        """
        return self._require_relay().generate_registration_options(username)

    def verify_and_mint_pkp_through_relayer(self, options: Dict[str, Any]) -> str:
        """
        Create a credential and mint a PKP for it.

        Args:
            options: Registration options from register()

        Returns:
            Relay request id for the mint

        Raises:
            CeremonyError: If the credential ceremony fails
            AttestationParseError: If the attestation does not decode
            RelayError: If the relay returns no request id
        """
        relay = self._require_relay()

        try:
            attestation = self.ceremony.register(options)
        except LitAuthError:
            raise
        except Exception as e:
            raise CeremonyError(f"Credential registration failed: {type(e).__name__}") from e

        if not isinstance(attestation, Mapping):
            raise AttestationParseError("Registration response is not an object")
        raw_id = attestation.get("rawId")
        response = attestation.get("response")
        if not raw_id or not isinstance(response, Mapping) or not response.get("attestationObject"):
            raise AttestationParseError("Registration response missing rawId or attestationObject")

        request = RelayerRequest(
            auth_method_type=AuthMethodType.WebAuthn,
            auth_method_id=webauthn_credential_id_hash(raw_id),
            auth_method_pub_key=extract_credential_public_key(response["attestationObject"]),
        )
        mint_response = relay.mint_pkp(AuthMethodType.WebAuthn, request.to_json())
        request_id = self._require_request_id(mint_response)
        logger.info(f"WebAuthn credential registered, mint request {request_id}")
        return request_id

    def mint_pkp_through_relayer(self, auth_method: AuthMethod) -> str:
        """Not applicable: minting needs the attestation from registration."""
        raise UnsupportedOperation(
            "Use verify_and_mint_pkp_through_relayer for WebAuthnProvider instead."
        )

    def authenticate(self, options: Any = None) -> AuthMethod:
        """
        Authenticate with an existing credential.

        Returns:
            AuthMethod whose access token is the JSON-encoded assertion

        Raises:
            RemoteFailure: If challenge material cannot be fetched
            CeremonyError: If the assertion ceremony fails
            InvalidCredentialError: If the assertion is malformed
        """
        return self._tracked(self._authenticate)

    def _authenticate(self) -> AuthMethod:
        block_hash = self.chain_reader.get_latest_block_hash()
        authentication_options = build_authentication_options(
            block_hash,
            self.origin,
            timeout_ms=self.settings.webauthn_timeout_ms,
        )

        try:
            assertion = self.ceremony.get_assertion(authentication_options)
        except LitAuthError:
            raise
        except Exception as e:
            raise CeremonyError(f"WebAuthn assertion failed: {type(e).__name__}") from e

        if assertion is None:
            raise CeremonyError("WebAuthn assertion was cancelled")

        normalized = normalize_assertion(assertion)
        try:
            access_token = orjson.dumps(normalized).decode("utf-8")
        except orjson.JSONEncodeError as e:
            raise InvalidCredentialError(f"WebAuthn assertion is not JSON serializable: {e}") from e

        self._assertion = normalized
        self._auth_method = AuthMethod(
            auth_method_type=AuthMethodType.WebAuthn,
            access_token=access_token,
        )
        return self._auth_method

    def verify(self) -> bool:
        """
        Raises:
            UnsupportedOperation: Always
        """
        raise UnsupportedOperation(
            "WebAuthn credentials are verified by the signing network when "
            "generating session signatures."
        )

    def get_auth_method_id(self) -> str:
        """
        Hash of "<rawId>:lit" for the asserted credential.

        Raises:
            StateError: If authenticate() has not succeeded
        """
        if self._assertion is None:
            raise StateError("Authentication data is not defined. Call authenticate first.")
        return webauthn_credential_id_hash(self._assertion["rawId"])

