"""
Discord user-info client.

Discord issues opaque access tokens rather than ID tokens, so the user id
behind a token has to be fetched.
"""

from typing import Any, Dict, Optional
import logging

from .base import BaseAPIClient
from ..config import LitAuthSettings, get_settings
from ..exceptions import APIError, RemoteFailure

logger = logging.getLogger(__name__)


class DiscordClient(BaseAPIClient):
    """Fetches the Discord user behind an access token."""

    def __init__(self, settings: Optional[LitAuthSettings] = None, **kwargs):
        settings = settings or get_settings()
        super().__init__(settings.discord_api_url, settings, **kwargs)

    def get_user_info(self, access_token: str) -> Dict[str, Any]:
        """
        Fetch /users/@me with the access token as bearer credential.

        Raises:
            RemoteFailure: If the user cannot be fetched
        """
        try:
            user = self.get("/users/@me", headers={"Authorization": f"Bearer {access_token}"})
        except APIError as e:
            logger.warning(f"Discord user info fetch failed: {e.status_code}")
            raise RemoteFailure("Unable to fetch Discord user info", {"status_code": e.status_code}) from e

        if not isinstance(user, dict):
            raise RemoteFailure("Unable to fetch Discord user info")
        return user
