"""
OAuth redirect providers (Google, Discord, Apple).

sign_in() sends the user to the login gateway with a CSRF state token;
authenticate() validates the callback the gateway redirects back with.
ID token signatures are not checked locally; the signing network does that.
"""

from typing import Optional, Protocol, runtime_checkable
import logging

from .base import BaseProvider
from ..api.discord import DiscordClient
from ..auth.identity import IdentityHasher, jwt_auth_method_id
from ..auth.oauth import prepare_login_url, strip_query, validate_callback
from ..exceptions import MissingTokenError, StateError, ValidationError
from ..models import AuthMethod, AuthMethodType
from ..storage import SessionStore

logger = logging.getLogger(__name__)


@runtime_checkable
class Navigator(Protocol):
    """Host page navigation."""

    def current_url(self) -> str:
        ...

    def assign(self, url: str) -> None:
        ...

    def replace_state(self, url: str) -> None:
        ...


class OAuthProvider(BaseProvider):
    """
    Base for providers authenticated through the login gateway.

    Subclasses set provider_name, auth_method_type and token_param.
    """

    provider_name: str
    token_param: str = "id_token"

    def __init__(
        self,
        redirect_uri: str,
        session_store: SessionStore,
        navigator: Optional[Navigator] = None,
        **kwargs
    ):
        """
        Initialize OAuth provider.

        Args:
            redirect_uri: Where the gateway sends the user back
            session_store: Store holding the CSRF state token across the redirect
            navigator: Host navigation (optional; sign_in() also returns the URL)
        """
        super().__init__(**kwargs)
        if not redirect_uri:
            raise ValidationError("Redirect URI cannot be empty")
        self.redirect_uri = redirect_uri
        self.session_store = session_store
        self.navigator = navigator
        self._token: Optional[str] = None

    def sign_in(self) -> str:
        """
        Start the redirect flow.

        Returns:
            Gateway login URL (also passed to navigator.assign if configured)
        """
        login_url = prepare_login_url(
            self.provider_name,
            self.redirect_uri,
            self.session_store,
            base_url=self.settings.login_base_url,
            state_key=self.settings.state_param_key,
        )
        logger.info(f"Redirecting to {self.provider_name} login")
        if self.navigator is not None:
            self.navigator.assign(login_url)
        return login_url

    def authenticate(self, url: Optional[str] = None) -> AuthMethod:
        """
        Validate the gateway callback.

        Args:
            url: Callback URL (navigator.current_url() if None)

        Returns:
            AuthMethod carrying the provider token

        Raises:
            RedirectMismatchError: If url is not under redirect_uri
            ProviderError: If the gateway reported an error
            ProviderMismatchError: If the callback is for another provider
            CsrfError: If the state token does not match
            MissingTokenError: If the callback carries no token
        """
        if url is None:
            if self.navigator is None:
                raise ValidationError("No callback URL given and no navigator configured")
            url = self.navigator.current_url()

        return self._tracked(lambda: self._authenticate(url))

    def _authenticate(self, url: str) -> AuthMethod:
        params = validate_callback(
            url,
            self.redirect_uri,
            self.provider_name,
            self.session_store,
            state_key=self.settings.state_param_key,
        )

        if self.navigator is not None:
            self.navigator.replace_state(strip_query(url))

        token = getattr(params, self.token_param)
        if not token:
            raise MissingTokenError(
                f"Missing {self.token_param} in redirect callback URL for {self.provider_name} OAuth"
            )

        self._token = token
        self._auth_method = AuthMethod(auth_method_type=self.auth_method_type, access_token=token)
        return self._auth_method

    def _require_token(self) -> str:
        if self._token is None:
            raise StateError("Token is not defined. Call authenticate first.")
        return self._token

    def get_auth_method_id(self) -> str:
        """Hash of "<sub>:<aud>" from the ID token."""
        return jwt_auth_method_id(self._require_token())


class GoogleProvider(OAuthProvider):
    """Google sign-in; emits the Google ID token."""
    provider_name = "google"
    auth_method_type = AuthMethodType.GoogleJwt


class AppleProvider(OAuthProvider):
    """Apple sign-in; emits the Apple ID token."""
    provider_name = "apple"
    auth_method_type = AuthMethodType.AppleJwt


class DiscordProvider(OAuthProvider):
    """
    Discord sign-in.

    Discord has no ID token; the access token is emitted and the user id is
    fetched from Discord when deriving the auth method id.
    """
    provider_name = "discord"
    auth_method_type = AuthMethodType.Discord
    token_param = "access_token"

    def __init__(self, *args, discord_client: Optional[DiscordClient] = None, **kwargs):
        super().__init__(*args, **kwargs)
        self.discord_client = discord_client or DiscordClient(self.settings)

    def _identity_hasher(self) -> IdentityHasher:
        return IdentityHasher(
            discord_user_fetcher=self.discord_client.get_user_info,
            discord_client_id=self.settings.discord_client_id,
        )

    def get_auth_method_id(self) -> str:
        """Hash of "<user id>:<application id>"."""
        return self._identity_hasher().derive(
            AuthMethod(auth_method_type=AuthMethodType.Discord, access_token=self._require_token())
        )
