"""
OAuth redirect flow helpers.

Builds login-gateway URLs carrying a CSRF state token and validates the
callback the gateway redirects back with. The state token lives in an
injected SessionStore between the two halves of the round trip.
"""

import logging
import secrets
from typing import Optional
from urllib.parse import parse_qs, urlencode, urlsplit, urlunsplit

from ..exceptions import (
    CryptoDecodeError,
    CsrfError,
    ProviderError,
    ProviderMismatchError,
    RedirectMismatchError,
    ValidationError,
)
from ..models import LoginUrlParams
from ..storage import SessionStore
from ..utils.encoding import b64decode_str, b64encode_str

logger = logging.getLogger(__name__)

STATE_PARAM_KEY = "lit-state-param"
DEFAULT_LOGIN_BASE_URL = "https://login.litgateway.com"

LOGIN_ROUTES = {
    "google": "/auth/google",
    "discord": "/auth/discord",
    "apple": "/auth/apple",
}


def is_social_login_supported(provider: str) -> bool:
    """True if the login gateway has a route for provider."""
    return provider in LOGIN_ROUTES


def get_login_route(provider: str) -> str:
    """
    Get gateway route for provider.

    Raises:
        ValidationError: If provider has no login route
    """
    try:
        return LOGIN_ROUTES[provider]
    except KeyError:
        raise ValidationError(
            f'No login route available for the given provider "{provider}".'
        )


def generate_state_token() -> str:
    """Random URL-safe state token (16 characters, 96 bits)."""
    return secrets.token_urlsafe(12)


def set_state_param(store: SessionStore, key: str = STATE_PARAM_KEY) -> str:
    """Create a state token and persist it. Last write wins."""
    state = generate_state_token()
    store.set(key, state)
    return state


def get_state_param(store: SessionStore, key: str = STATE_PARAM_KEY) -> Optional[str]:
    """Read the persisted state token."""
    return store.get(key)


def remove_state_param(store: SessionStore, key: str = STATE_PARAM_KEY) -> None:
    """Erase the persisted state token if the store supports deletion."""
    delete = getattr(store, "delete", None)
    if callable(delete):
        delete(key)
    else:
        store.set(key, "")


def prepare_login_url(
    provider: str,
    redirect_uri: str,
    store: SessionStore,
    base_url: str = DEFAULT_LOGIN_BASE_URL,
    state_key: str = STATE_PARAM_KEY,
) -> str:
    """
    Build the gateway login URL and persist a fresh state token.

    Args:
        provider: google, discord or apple
        redirect_uri: Where the gateway sends the user back
        store: Session store for the state token
        base_url: Login gateway URL

    Returns:
        Login URL with app_redirect and base64-encoded state parameters
    """
    login_url = f"{base_url.rstrip('/')}{get_login_route(provider)}"
    state = set_state_param(store, state_key)
    query = urlencode({"app_redirect": redirect_uri, "state": b64encode_str(state)})
    return f"{login_url}?{query}"


def parse_login_params(search: str) -> LoginUrlParams:
    """
    Parse login parameters from a query string or full URL.

    Args:
        search: "?provider=...&id_token=..." or a URL containing it

    Returns:
        LoginUrlParams (missing parameters are None)
    """
    if "://" in search:
        search = urlsplit(search).query
    params = parse_qs(search.lstrip("?"), keep_blank_values=False)

    def first(name: str) -> Optional[str]:
        values = params.get(name)
        return values[0] if values else None

    return LoginUrlParams(
        provider=first("provider"),
        access_token=first("access_token"),
        id_token=first("id_token"),
        state=first("state"),
        error=first("error"),
    )


def is_sign_in_redirect(url: str, redirect_uri: str) -> bool:
    """True if url is the redirect URI carrying gateway parameters."""
    if not url.startswith(redirect_uri):
        return False
    return parse_login_params(url).has_any()


def get_provider_from_url(url: str) -> Optional[str]:
    """Provider name from a callback URL, if present."""
    return parse_login_params(url).provider


def strip_query(url: str) -> str:
    """Drop query string and fragment."""
    parts = urlsplit(url)
    return urlunsplit((parts.scheme, parts.netloc, parts.path, "", ""))


def validate_callback(
    url: str,
    redirect_uri: str,
    expected_provider: str,
    store: SessionStore,
    state_key: str = STATE_PARAM_KEY,
) -> LoginUrlParams:
    """
    Validate a gateway callback.

    Checks run in order and the first failure aborts: redirect URI prefix,
    gateway error, provider name, state token.

    Args:
        url: Current URL after the redirect
        redirect_uri: Configured redirect URI
        expected_provider: Provider this flow was started for
        store: Session store holding the state token

    Returns:
        Parsed callback parameters

    Raises:
        RedirectMismatchError: If url is not under redirect_uri
        ProviderError: If the gateway reported an error
        ProviderMismatchError: If the callback names another provider
        CsrfError: If the state does not match the stored token
    """
    if not url.startswith(redirect_uri):
        # callback query strings carry tokens
        current = strip_query(url)
        raise RedirectMismatchError(
            f'Current url "{current}" does not match provided redirect uri "{redirect_uri}"',
            url=current,
            redirect_uri=redirect_uri,
        )

    params = parse_login_params(url)

    if params.error:
        raise ProviderError(params.error)

    if params.provider != expected_provider:
        raise ProviderMismatchError(
            f'OAuth provider "{params.provider}" passed in redirect callback URL '
            f'does not match "{expected_provider}"',
            provider=params.provider,
            expected=expected_provider,
        )

    stored = get_state_param(store, state_key)
    if not params.state or not stored:
        raise CsrfError("Missing state parameter in redirect callback URL")

    try:
        returned = b64decode_str(params.state)
    except CryptoDecodeError:
        raise CsrfError(f'Invalid state parameter "{params.state}" passed in redirect callback URL')

    if not secrets.compare_digest(returned.encode("utf-8"), stored.encode("utf-8")):
        logger.warning(f"State mismatch on {expected_provider} callback")
        raise CsrfError(f'Invalid state parameter "{params.state}" passed in redirect callback URL')

    return params
