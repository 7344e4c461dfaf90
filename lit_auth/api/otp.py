"""
OTP service client.

Starts an email / SMS one-time-password session and exchanges the code the
user received for a signed token.
"""

from typing import Any, Dict, Optional
import logging

from .base import BaseAPIClient
from ..config import LitAuthSettings, get_settings
from ..exceptions import AuthenticationError

logger = logging.getLogger(__name__)


class OtpClient(BaseAPIClient):
    """HTTP client for the OTP start / check endpoints."""

    def __init__(self, settings: Optional[LitAuthSettings] = None, **kwargs):
        settings = settings or get_settings()
        headers = {"api-key": settings.relay_api_key} if settings.relay_api_key else None
        super().__init__(settings.otp_url, settings, headers=headers, **kwargs)

    def start(self, user_id: str, request_id: str,
              email_configuration: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        Send a code to user_id (email address or phone number).

        Returns:
            Service response
        """
        body: Dict[str, Any] = {"otp": user_id, "request_id": request_id}
        if email_configuration:
            body["email_configuration"] = email_configuration
        return self.post("/api/otp/start", json_data=body)

    def check(self, user_id: str, code: str, request_id: str) -> str:
        """
        Exchange a code for a token.

        Returns:
            Signed OTP JWT

        Raises:
            AuthenticationError: If the service returned no token
        """
        response = self.post(
            "/api/otp/check",
            json_data={"otp": user_id, "code": code, "request_id": request_id},
        )
        token = response.get("token_jwt") if isinstance(response, dict) else None
        if not token:
            raise AuthenticationError("OTP check returned no token")
        return token
