"""
Ethereum wallet provider.

Authenticates by having the wallet sign a Sign-In with Ethereum message.
The wallet address is the auth method id.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Optional, Protocol
import logging

import orjson
from eth_account import Account
from eth_account.messages import encode_defunct
from pydantic import ValidationError as PydanticValidationError

from .base import BaseProvider
from ..chains import DEFAULT_CHAIN, resolve_chain_id
from ..exceptions import (
    CeremonyError,
    CryptoDecodeError,
    InvalidCredentialError,
    LitAuthError,
    MissingSignatureError,
    StateError,
    ValidationError,
)
from ..models import AuthMethod, AuthMethodType, AuthSig, EthWalletAuthenticateOptions
from ..auth.siwe import SiweMessage
from ..utils.validators import (
    expiration_from_duration,
    to_iso_string,
    validate_address,
    validate_iso_timestamp,
    validate_origin,
)

logger = logging.getLogger(__name__)

DERIVED_VIA = "web3.eth.personal.sign"


class CachedSigner(Protocol):
    """Signs a fresh message or returns a cached session signature."""

    def __call__(self, chain: str, expiration: Optional[str] = None) -> Optional[AuthSig]:
        ...


class EthWalletProvider(BaseProvider):
    """
    Wallet-signature provider.

    Two paths:
    - address + sign_message supplied: build and sign a SIWE message here
    - otherwise (or cache=True): delegate to the cached_signer collaborator
      and trust its AuthSig as-is
    """

    auth_method_type = AuthMethodType.EthWallet

    def __init__(
        self,
        domain: str,
        origin: str,
        cached_signer: Optional[CachedSigner] = None,
        **kwargs
    ):
        """
        Initialize wallet provider.

        Args:
            domain: Domain requesting the signature (e.g., app.example)
            origin: Origin requesting the signature (e.g., https://app.example)
            cached_signer: Collaborator that signs or returns a cached AuthSig
        """
        super().__init__(**kwargs)
        if not domain:
            raise ValidationError("Domain cannot be empty")
        self.domain = domain
        self.origin = validate_origin(origin)
        self.cached_signer = cached_signer
        self._auth_sig: Optional[AuthSig] = None

    def authenticate(
        self,
        options: Optional[EthWalletAuthenticateOptions] = None,
        **kwargs
    ) -> AuthMethod:
        """
        Generate a wallet signature to use as an auth method.

        Args:
            options: EthWalletAuthenticateOptions, or the same fields as
                keyword arguments (address, sign_message, chain, expiration,
                expiration_length, expiration_unit, cache)

        Returns:
            AuthMethod whose access token is the JSON-encoded AuthSig

        Raises:
            MissingSignatureError: If no path yields a signature
            CeremonyError: If the signing function raises
            ValidationError: If address or expiration is malformed
            InvalidCredentialError: If the cached signer returns a malformed AuthSig
        """
        if options is None:
            try:
                options = EthWalletAuthenticateOptions(**kwargs)
            except PydanticValidationError as e:
                raise ValidationError(f"Invalid authenticate options: {e.error_count()} errors") from e

        return self._tracked(lambda: self._authenticate(options))

    def _authenticate(self, options: EthWalletAuthenticateOptions) -> AuthMethod:
        chain = options.chain or DEFAULT_CHAIN

        if options.cache or not (options.address and options.sign_message):
            auth_sig = self._cached_auth_sig(options, chain)
        else:
            auth_sig = self._sign(options.address, options.sign_message, chain, self._expiration(options))

        if auth_sig is None:
            raise MissingSignatureError("Auth signature is undefined")

        self._auth_sig = auth_sig
        self._auth_method = AuthMethod(
            auth_method_type=AuthMethodType.EthWallet,
            access_token=auth_sig.to_json(),
        )
        return self._auth_method

    def _expiration(self, options: EthWalletAuthenticateOptions) -> str:
        if options.expiration:
            return validate_iso_timestamp(options.expiration)
        if options.expiration_length:
            return expiration_from_duration(options.expiration_length, options.expiration_unit or "hours")
        return to_iso_string(
            datetime.now(timezone.utc) + timedelta(hours=self.settings.default_expiration_hours)
        )

    def _cached_auth_sig(self, options: EthWalletAuthenticateOptions, chain: str) -> Optional[AuthSig]:
        if self.cached_signer is None:
            raise MissingSignatureError(
                "No address and signing function supplied, and no cached signer configured"
            )

        expiration = None
        if options.expiration or options.expiration_length:
            expiration = self._expiration(options)

        try:
            result = self.cached_signer(chain, expiration)
        except LitAuthError:
            raise
        except Exception as e:
            raise CeremonyError(f"Cached signer failed: {type(e).__name__}") from e

        if result is None or isinstance(result, AuthSig):
            return result
        try:
            if isinstance(result, str):
                return auth_sig_from_access_token(result)
            return AuthSig.model_validate(result)
        except CryptoDecodeError as e:
            raise InvalidCredentialError(f"Invalid cached AuthSig: {e.message}") from e
        except PydanticValidationError as e:
            raise InvalidCredentialError(f"Invalid cached AuthSig: {e.error_count()} errors") from e

    def _sign(
        self,
        address: str,
        sign_message: Callable[[str], Any],
        chain: str,
        expiration: str
    ) -> Optional[AuthSig]:
        checksum_address = validate_address(address)

        message = SiweMessage(
            domain=self.domain,
            address=checksum_address,
            uri=self.origin,
            version="1",
            chain_id=resolve_chain_id(chain),
            expiration_time=expiration,
        )
        to_sign = message.prepare_message()

        try:
            signature = sign_message(to_sign)
        except LitAuthError:
            raise
        except Exception as e:
            # Sanitized: signer errors can echo key material
            logger.error(f"Signing function failed: {type(e).__name__}")
            raise CeremonyError(f"Wallet signature failed: {type(e).__name__}") from e

        if not signature:
            return None

        return AuthSig(
            sig=signature,
            derived_via=DERIVED_VIA,
            signed_message=to_sign,
            address=checksum_address,
        )

    def get_auth_method_id(self) -> str:
        """
        Auth method id for a wallet: the signer address, verbatim.

        Raises:
            StateError: If authenticate() has not succeeded
        """
        if self._auth_sig is None:
            raise StateError("Auth signature is not defined. Call authenticate first.")
        return self._auth_sig.address

    def verify(self) -> bool:
        """
        Check that the stored signature recovers to the stored address.

        Returns:
            True if the signer of signed_message is address

        Raises:
            StateError: If authenticate() has not succeeded
        """
        if self._auth_sig is None:
            raise StateError("Auth signature is not defined. Call authenticate first.")
        try:
            recovered = Account.recover_message(
                encode_defunct(text=self._auth_sig.signed_message),
                signature=self._auth_sig.sig,
            )
        except Exception as e:
            logger.warning(f"Signature recovery failed: {type(e).__name__}")
            return False
        return recovered.lower() == self._auth_sig.address.lower()


def auth_sig_from_access_token(access_token: str) -> AuthSig:
    """Parse an EthWallet access token back into an AuthSig."""
    try:
        return AuthSig.model_validate(orjson.loads(access_token))
    except (orjson.JSONDecodeError, PydanticValidationError) as e:
        raise CryptoDecodeError(f"Invalid AuthSig payload: {type(e).__name__}") from e
