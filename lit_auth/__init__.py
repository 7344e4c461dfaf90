"""
Lit Auth Client

Authenticates users through wallet signatures, WebAuthn credentials, OAuth
redirects and one-time passwords, reducing each to a uniform AuthMethod and
a deterministic auth method id for on-chain registry lookups.
"""

from .models import (
    AuthMethodType,
    AuthMethod,
    AuthSig,
    RelayerRequest,
    LoginUrlParams,
    AuthenticationOptions,
    EthWalletAuthenticateOptions,
    MintResponse,
)
from .exceptions import (
    LitAuthError,
    ValidationError,
    UnsupportedAuthMethodError,
    AuthenticationError,
    MissingSignatureError,
    CeremonyError,
    RedirectMismatchError,
    ProviderError,
    ProviderMismatchError,
    CsrfError,
    MissingTokenError,
    CryptoDecodeError,
    AttestationParseError,
    MissingClaimError,
    InvalidCredentialError,
    RemoteFailure,
    APIError,
    TimeoutError,
    RelayError,
    StateError,
    UnsupportedOperation,
)
from .auth.identity import IdentityHasher, get_auth_method_id, hash_identifier
from .auth.siwe import SiweMessage
from .providers import (
    BaseProvider,
    EthWalletProvider,
    WebAuthnProvider,
    OAuthProvider,
    GoogleProvider,
    DiscordProvider,
    AppleProvider,
    OtpProvider,
    get_provider,
)
from .api import RelayClient, DiscordClient, OtpClient, Web3ChainReader
from .storage import SessionStore, InMemorySessionStore
from .config import LitAuthSettings, get_settings

__version__ = "0.1.0"

__all__ = [
    # Types
    "AuthMethodType",
    "AuthMethod",
    "AuthSig",
    "RelayerRequest",
    "LoginUrlParams",
    "AuthenticationOptions",
    "EthWalletAuthenticateOptions",
    "MintResponse",

    # Exceptions
    "LitAuthError",
    "ValidationError",
    "UnsupportedAuthMethodError",
    "AuthenticationError",
    "MissingSignatureError",
    "CeremonyError",
    "RedirectMismatchError",
    "ProviderError",
    "ProviderMismatchError",
    "CsrfError",
    "MissingTokenError",
    "CryptoDecodeError",
    "AttestationParseError",
    "MissingClaimError",
    "InvalidCredentialError",
    "RemoteFailure",
    "APIError",
    "TimeoutError",
    "RelayError",
    "StateError",
    "UnsupportedOperation",

    # Identity
    "IdentityHasher",
    "get_auth_method_id",
    "hash_identifier",
    "SiweMessage",

    # Providers
    "BaseProvider",
    "EthWalletProvider",
    "WebAuthnProvider",
    "OAuthProvider",
    "GoogleProvider",
    "DiscordProvider",
    "AppleProvider",
    "OtpProvider",
    "get_provider",

    # Collaborators
    "RelayClient",
    "DiscordClient",
    "OtpClient",
    "Web3ChainReader",
    "SessionStore",
    "InMemorySessionStore",

    # Config
    "LitAuthSettings",
    "get_settings",
]
