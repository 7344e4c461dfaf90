"""
Provider factory.

Selects a provider variant from configuration rather than runtime type
inspection:

    get_provider(AuthMethodType.EthWallet, domain=..., origin=...)
    get_provider("google", redirect_uri=..., session_store=...)
"""

from typing import Dict, Type, Union

from .base import BaseProvider
from .eth_wallet import EthWalletProvider
from .oauth import AppleProvider, DiscordProvider, GoogleProvider
from .otp import OtpProvider
from .webauthn import WebAuthnProvider
from ..exceptions import UnsupportedAuthMethodError
from ..models import AuthMethodType

PROVIDERS: Dict[AuthMethodType, Type[BaseProvider]] = {
    AuthMethodType.EthWallet: EthWalletProvider,
    AuthMethodType.WebAuthn: WebAuthnProvider,
    AuthMethodType.GoogleJwt: GoogleProvider,
    AuthMethodType.AppleJwt: AppleProvider,
    AuthMethodType.Discord: DiscordProvider,
    AuthMethodType.OTP: OtpProvider,
}

PROVIDER_NAMES: Dict[str, AuthMethodType] = {
    "ethwallet": AuthMethodType.EthWallet,
    "wallet": AuthMethodType.EthWallet,
    "webauthn": AuthMethodType.WebAuthn,
    "google": AuthMethodType.GoogleJwt,
    "apple": AuthMethodType.AppleJwt,
    "discord": AuthMethodType.Discord,
    "otp": AuthMethodType.OTP,
}


def resolve_auth_method_type(selector: Union[AuthMethodType, int, str]) -> AuthMethodType:
    """
    Resolve a provider selector to an AuthMethodType.

    Raises:
        UnsupportedAuthMethodError: If selector names no provider
    """
    if isinstance(selector, str):
        try:
            return PROVIDER_NAMES[selector.lower()]
        except KeyError:
            raise UnsupportedAuthMethodError(
                f"Unknown provider '{selector}'. Supported values: {sorted(PROVIDER_NAMES)}",
                auth_method_type=selector,
            )
    try:
        return AuthMethodType(selector)
    except ValueError:
        raise UnsupportedAuthMethodError(
            f"Unknown auth method type {selector}",
            auth_method_type=selector,
        )


def get_provider(selector: Union[AuthMethodType, int, str], **options) -> BaseProvider:
    """
    Build the provider for an auth method type.

    Args:
        selector: AuthMethodType, its numeric value, or a provider name
        **options: Constructor arguments of the selected provider

    Returns:
        A ready-to-use provider
    """
    return PROVIDERS[resolve_auth_method_type(selector)](**options)
