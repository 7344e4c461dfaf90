"""Auth provider variants."""

from .base import BaseProvider
from .eth_wallet import EthWalletProvider
from .factory import get_provider
from .oauth import AppleProvider, DiscordProvider, GoogleProvider, OAuthProvider
from .otp import OtpProvider
from .webauthn import WebAuthnProvider

__all__ = [
    "BaseProvider",
    "EthWalletProvider",
    "WebAuthnProvider",
    "OAuthProvider",
    "GoogleProvider",
    "DiscordProvider",
    "AppleProvider",
    "OtpProvider",
    "get_provider",
]
