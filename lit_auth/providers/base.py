"""
Provider contract.

Every provider runs one authentication protocol end to end and emits a
uniform AuthMethod. Credential material from the last successful
authenticate() stays on the instance so get_auth_method_id() can derive the
registry identifier from it.
"""

import time
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Optional, TypeVar
import logging

from ..api.relay import Relay
from ..auth.identity import IdentityHasher
from ..config import LitAuthSettings, get_settings
from ..exceptions import LitAuthError, RelayError, StateError, UnsupportedOperation
from ..metrics import Metrics, get_metrics
from ..models import AuthMethod, AuthMethodType, MintResponse, RelayerRequest

logger = logging.getLogger(__name__)

T = TypeVar("T")


class BaseProvider(ABC):
    """
    Base class for auth providers.

    Subclasses set auth_method_type and implement authenticate() and
    get_auth_method_id().
    """

    auth_method_type: AuthMethodType

    def __init__(
        self,
        relay: Optional[Relay] = None,
        settings: Optional[LitAuthSettings] = None,
        metrics: Optional[Metrics] = None
    ):
        """
        Initialize provider.

        Args:
            relay: Relay used for minting and PKP lookup (optional)
            settings: Client settings (loaded from environment if None)
            metrics: Metrics collector (process-wide instance if None)
        """
        self.settings = settings or get_settings()
        self.relay = relay
        self.metrics = metrics or get_metrics(enabled=self.settings.enable_metrics)
        self._auth_method: Optional[AuthMethod] = None

    @abstractmethod
    def authenticate(self, options: Any = None) -> AuthMethod:
        """
        Run the provider's authentication flow.

        Raises:
            AuthenticationError: If the flow fails, is cancelled, or returns
                data failing validation
        """

    @abstractmethod
    def get_auth_method_id(self) -> str:
        """
        Derive the registry identifier from the last authentication.

        Raises:
            StateError: If authenticate() has not succeeded on this instance
        """

    @property
    def auth_method(self) -> Optional[AuthMethod]:
        """AuthMethod from the last successful authenticate()."""
        return self._auth_method

    def verify(self) -> bool:
        """
        Verify the authentication data locally.

        Raises:
            UnsupportedOperation: Verification is left to the signing network,
                which re-validates the credential when issuing session
                signatures
        """
        raise UnsupportedOperation(
            f"{type(self).__name__} does not verify credentials locally. "
            "The signing network validates them when issuing session signatures."
        )

    def build_relayer_request(self) -> RelayerRequest:
        """
        Build the relay request for the last authentication.

        Raises:
            StateError: If authenticate() has not succeeded on this instance
        """
        if self._auth_method is None:
            raise StateError("Access token is not defined. Call authenticate first.")
        return RelayerRequest(
            auth_method_type=self.auth_method_type,
            auth_method_id=self.get_auth_method_id(),
        )

    def _identity_hasher(self) -> IdentityHasher:
        return IdentityHasher(discord_client_id=self.settings.discord_client_id)

    def _relayer_request_for(self, auth_method: AuthMethod) -> RelayerRequest:
        return RelayerRequest(
            auth_method_type=auth_method.auth_method_type,
            auth_method_id=self._identity_hasher().derive(auth_method),
        )

    def _require_relay(self) -> Relay:
        if self.relay is None:
            raise StateError(f"{type(self).__name__} was created without a relay")
        return self.relay

    def mint_pkp_through_relayer(self, auth_method: AuthMethod) -> str:
        """
        Mint a PKP for an auth method through the relay.

        Returns:
            Relay request id for polling

        Raises:
            RelayError: If the relay returns no request id
        """
        relay = self._require_relay()
        request = self._relayer_request_for(auth_method)
        mint_response = relay.mint_pkp(auth_method.auth_method_type, request.to_json())
        return self._require_request_id(mint_response)

    def _require_request_id(self, mint_response: Optional[MintResponse]) -> str:
        if mint_response is None or not mint_response.request_id:
            raise RelayError("Missing mint response or request ID from relay server")
        return mint_response.request_id

    def fetch_pkps_through_relayer(self, auth_method: AuthMethod) -> List[Dict[str, Any]]:
        """Look up PKPs minted for an auth method."""
        relay = self._require_relay()
        request = self._relayer_request_for(auth_method)
        return relay.fetch_pkps(auth_method.auth_method_type, request.to_json())

    def _tracked(self, flow: Callable[[], T]) -> T:
        """Run an authentication flow, recording outcome and latency."""
        method = self.auth_method_type.name
        start = time.time()
        try:
            result = flow()
        except LitAuthError as e:
            self.metrics.track_authentication(method, type(e).__name__, time.time() - start)
            logger.warning(f"{method} authentication failed: {type(e).__name__}")
            raise
        self.metrics.track_authentication(method, "success", time.time() - start)
        logger.info(f"{method} authentication succeeded")
        return result
