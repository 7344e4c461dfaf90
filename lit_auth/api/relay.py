"""
Relay server client.

The relay mints PKPs on-chain for an auth method and looks up PKPs already
minted for one. Minting is asynchronous: the relay answers with a request
id whose status can be polled.
"""

import time
from typing import Any, Dict, List, Optional, Protocol, runtime_checkable
from urllib.parse import quote
import logging

from .base import BaseAPIClient
from ..config import LitAuthSettings, get_settings
from ..exceptions import RelayError, ValidationError
from ..metrics import track_time
from ..models import AuthMethodType, MintResponse

logger = logging.getLogger(__name__)

MINT_ROUTES = {
    AuthMethodType.EthWallet: "/auth/wallet",
    AuthMethodType.WebAuthn: "/auth/webauthn/verify-registration",
    AuthMethodType.Discord: "/auth/discord",
    AuthMethodType.GoogleJwt: "/auth/google",
    AuthMethodType.OTP: "/auth/otp",
    AuthMethodType.AppleJwt: "/auth/apple",
}

FETCH_ROUTES = {
    AuthMethodType.EthWallet: "/auth/wallet/userinfo",
    AuthMethodType.WebAuthn: "/auth/webauthn/userinfo",
    AuthMethodType.Discord: "/auth/discord/userinfo",
    AuthMethodType.GoogleJwt: "/auth/google/userinfo",
    AuthMethodType.OTP: "/auth/otp/userinfo",
    AuthMethodType.AppleJwt: "/auth/apple/userinfo",
}

TERMINAL_STATUSES = ("Succeeded", "Failed")


@runtime_checkable
class Relay(Protocol):
    """Relay contract consumed by providers."""

    def generate_registration_options(self, username: Optional[str] = None) -> Dict[str, Any]:
        ...

    def mint_pkp(self, auth_method_type: AuthMethodType, body: str) -> MintResponse:
        ...

    def fetch_pkps(self, auth_method_type: AuthMethodType, body: str) -> List[Dict[str, Any]]:
        ...


class RelayClient(BaseAPIClient):
    """
    HTTP implementation of the Relay contract.
    """

    def __init__(self, settings: Optional[LitAuthSettings] = None, **kwargs):
        """
        Initialize relay client.

        Args:
            settings: Client settings (loaded from environment if None)
        """
        settings = settings or get_settings()
        headers = {"api-key": settings.relay_api_key} if settings.relay_api_key else None
        super().__init__(settings.relay_url, settings, headers=headers, **kwargs)

    @staticmethod
    def _route(routes: Dict[AuthMethodType, str], auth_method_type: AuthMethodType) -> str:
        try:
            return routes[AuthMethodType(auth_method_type)]
        except (KeyError, ValueError):
            raise ValidationError(f"Auth method type {auth_method_type} is not supported by the relay")

    @track_time("generate_registration_options")
    def generate_registration_options(self, username: Optional[str] = None) -> Dict[str, Any]:
        """
        Get WebAuthn registration options.

        Args:
            username: Optional username to bind the credential to

        Returns:
            PublicKeyCredentialCreationOptions JSON
        """
        path = "/auth/webauthn/generate-registration-options"
        if username:
            path += f"?username={quote(username)}"
        return self.get(path)

    @track_time("mint_pkp")
    def mint_pkp(self, auth_method_type: AuthMethodType, body: str) -> MintResponse:
        """
        Request a PKP mint for an auth method.

        Args:
            auth_method_type: Type selecting the relay route
            body: Serialized RelayerRequest

        Returns:
            MintResponse carrying the relay request id

        Raises:
            RelayError: If the relay accepted no request id
        """
        response = self.post(self._route(MINT_ROUTES, auth_method_type), data=body)
        mint_response = MintResponse.model_validate(response if isinstance(response, dict) else {})
        if not mint_response.request_id:
            raise RelayError("Missing mint response or request ID from relay server")
        logger.info(f"Relay accepted mint request {mint_response.request_id}")
        return mint_response

    @track_time("fetch_pkps")
    def fetch_pkps(self, auth_method_type: AuthMethodType, body: str) -> List[Dict[str, Any]]:
        """
        Look up PKPs minted for an auth method.

        Raises:
            RelayError: If the response has no pkps list
        """
        response = self.post(self._route(FETCH_ROUTES, auth_method_type), data=body)
        pkps = response.get("pkps") if isinstance(response, dict) else None
        if not isinstance(pkps, list):
            raise RelayError("Missing PKPs in response from relay server")
        return pkps

    def get_request_status(self, request_id: str) -> Dict[str, Any]:
        """Get status of a mint request."""
        return self.get(f"/auth/status/{quote(request_id)}")

    def poll_request_until_terminal_state(self, request_id: str) -> Dict[str, Any]:
        """
        Poll a mint request until it succeeds or fails.

        Polls every relay_poll_interval seconds, at most relay_poll_attempts
        times.

        Returns:
            Final status payload (status "Succeeded")

        Raises:
            RelayError: If the mint failed or never reached a terminal state
        """
        for attempt in range(self.settings.relay_poll_attempts):
            status = self.get_request_status(request_id)
            state = status.get("status") if isinstance(status, dict) else None

            if state == "Succeeded":
                logger.info(f"Mint request {request_id} succeeded")
                return status
            if state == "Failed":
                raise RelayError(
                    f"Mint request failed: {status.get('error', 'unknown error')}",
                    request_id=request_id,
                )

            logger.debug(
                f"Mint request {request_id} status {state} "
                f"({attempt + 1}/{self.settings.relay_poll_attempts})"
            )
            time.sleep(self.settings.relay_poll_interval)

        raise RelayError("Polling for mint PKP transaction status timed out", request_id=request_id)
