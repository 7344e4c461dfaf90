"""
Email / SMS one-time-password provider.
"""

import uuid
from typing import Any, Dict, Optional
import logging

from .base import BaseProvider
from ..api.otp import OtpClient
from ..auth.identity import otp_auth_method_id
from ..exceptions import CryptoDecodeError, InvalidCredentialError, StateError, ValidationError
from ..models import AuthMethod, AuthMethodType

logger = logging.getLogger(__name__)


class OtpProvider(BaseProvider):
    """
    OTP provider.

    send_otp_code() starts a session for an email address or phone number;
    authenticate(code) exchanges the received code for a signed token.
    """

    auth_method_type = AuthMethodType.OTP

    def __init__(
        self,
        user_id: str,
        otp_client: Optional[OtpClient] = None,
        email_configuration: Optional[Dict[str, Any]] = None,
        **kwargs
    ):
        """
        Initialize OTP provider.

        Args:
            user_id: Email address or phone number receiving the code
            otp_client: OTP service client (built from settings if None)
            email_configuration: Optional email template settings
        """
        super().__init__(**kwargs)
        if not user_id:
            raise ValidationError("OTP user id cannot be empty")
        self.user_id = user_id
        self.otp_client = otp_client or OtpClient(self.settings)
        self.email_configuration = email_configuration
        self._request_id: Optional[str] = None
        self._token: Optional[str] = None

    def send_otp_code(self) -> str:
        """
        Send a code to the user.

        Returns:
            Request id tying the code to this session
        """
        request_id = uuid.uuid4().hex
        self.otp_client.start(self.user_id, request_id, self.email_configuration)
        self._request_id = request_id
        logger.info("OTP code sent")
        return request_id

    def authenticate(self, options: Any = None, code: Optional[str] = None) -> AuthMethod:
        """
        Exchange the received code for an OTP token.

        Args:
            options: The code (positional form), or None with code=...
            code: The code the user received

        Raises:
            StateError: If send_otp_code() was not called first
            ValidationError: If no code is given
            AuthenticationError: If the service returns no token
            InvalidCredentialError: If the token lacks the identity claims
        """
        code = code if code is not None else options
        if self._request_id is None:
            raise StateError("No OTP session. Call send_otp_code first.")
        if not code:
            raise ValidationError("OTP code cannot be empty")

        return self._tracked(lambda: self._authenticate(str(code)))

    def _authenticate(self, code: str) -> AuthMethod:
        token = self.otp_client.check(self.user_id, code, self._request_id)
        # Fail fast on a token the derivation rule cannot read
        try:
            otp_auth_method_id(token)
        except CryptoDecodeError as e:
            raise InvalidCredentialError(f"OTP service returned an unusable token: {e.message}", e.details) from e
        self._token = token
        self._auth_method = AuthMethod(auth_method_type=AuthMethodType.OTP, access_token=token)
        return self._auth_method

    def get_auth_method_id(self) -> str:
        """Hash of "<user id>:<org id lowercased>" from the OTP token."""
        if self._token is None:
            raise StateError("OTP token is not defined. Call authenticate first.")
        return otp_auth_method_id(self._token)
