"""
Custom exceptions for the auth client.

Provides typed exceptions so callers can tell a retryable network failure
from a tampered credential or a flow that was simply started out of order.
"""

from typing import Optional, Any


class LitAuthError(Exception):
    """Base exception for all auth client errors."""

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


# Validation errors (user-recoverable by restarting the flow)
class ValidationError(LitAuthError):
    """Input validation failed."""
    pass


class UnsupportedAuthMethodError(ValidationError):
    """No derivation rule or provider exists for the auth method type."""

    def __init__(self, message: str, auth_method_type: Any = None):
        super().__init__(message, {"auth_method_type": auth_method_type})
        self.auth_method_type = auth_method_type


# Authentication errors
class AuthenticationError(LitAuthError):
    """Authentication failed."""
    pass


class MissingSignatureError(AuthenticationError):
    """Neither the signing function nor the cached signer produced a signature."""
    pass


class CeremonyError(AuthenticationError):
    """External ceremony (wallet signing, WebAuthn) raised or was cancelled."""
    pass


class RedirectMismatchError(ValidationError, AuthenticationError):
    """Callback URL does not start with the configured redirect URI."""

    def __init__(self, message: str, url: Optional[str] = None,
                 redirect_uri: Optional[str] = None):
        super().__init__(message, {"url": url, "redirect_uri": redirect_uri})
        self.url = url
        self.redirect_uri = redirect_uri


class ProviderError(ValidationError, AuthenticationError):
    """Login gateway reported an error in the callback."""

    def __init__(self, error: str):
        super().__init__(error, {"error": error})
        self.error = error


class ProviderMismatchError(ValidationError, AuthenticationError):
    """Callback names a different OAuth provider than expected."""

    def __init__(self, message: str, provider: Optional[str] = None,
                 expected: Optional[str] = None):
        super().__init__(message, {"provider": provider, "expected": expected})
        self.provider = provider
        self.expected = expected


class CsrfError(ValidationError, AuthenticationError):
    """Returned state parameter does not match the stored state token."""
    pass


class MissingTokenError(ValidationError, AuthenticationError):
    """Callback did not carry the token the provider needs."""
    pass


# Decoding errors (tampering or integration bug, never retryable)
class CryptoDecodeError(LitAuthError):
    """Credential payload could not be decoded."""
    pass


class AttestationParseError(CryptoDecodeError):
    """Attestation object does not decode to the expected structure."""
    pass


class MissingClaimError(CryptoDecodeError):
    """Decoded credential payload lacks a required claim."""

    def __init__(self, message: str, claim: Optional[str] = None):
        super().__init__(message, {"claim": claim})
        self.claim = claim


class InvalidCredentialError(CryptoDecodeError, AuthenticationError):
    """Credential returned by an authentication ceremony fails validation."""
    pass


# Remote failures (retryable by the caller, never retried here)
class RemoteFailure(LitAuthError):
    """Remote collaborator call failed."""
    pass


class APIError(RemoteFailure):
    """HTTP request failed."""

    def __init__(self, message: str, status_code: Optional[int] = None,
                 response: Optional[Any] = None):
        super().__init__(message, {"status_code": status_code, "response": response})
        self.status_code = status_code
        self.response = response


class TimeoutError(RemoteFailure):
    """Request timed out."""
    pass


class RelayError(RemoteFailure):
    """Relay accepted the call but returned no usable result."""

    def __init__(self, message: str, request_id: Optional[str] = None):
        super().__init__(message, {"request_id": request_id})
        self.request_id = request_id


# Lifecycle errors
class StateError(LitAuthError):
    """Method called out of lifecycle order."""
    pass


class UnsupportedOperation(LitAuthError):
    """Operation deliberately not performed by this provider."""
    pass
