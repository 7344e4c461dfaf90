"""
Base HTTP client with error handling.

Pooled session, timeouts, and mapping of transport failures onto the
client's exception hierarchy. Nothing is retried: every failure surfaces to
the caller once.

orjson is used for response parsing.
"""

import orjson
import requests
from typing import Optional, Any, Dict
from urllib.parse import urljoin
import logging

from requests.adapters import HTTPAdapter

from ..config import LitAuthSettings
from ..exceptions import APIError, TimeoutError

logger = logging.getLogger(__name__)


class BaseAPIClient:
    """
    Base HTTP client shared by the relay, OTP and Discord clients.
    """

    def __init__(
        self,
        base_url: str,
        settings: LitAuthSettings,
        headers: Optional[Dict[str, str]] = None,
        session: Optional[requests.Session] = None
    ):
        """
        Initialize base API client.

        Args:
            base_url: API base URL
            settings: Client settings
            headers: Extra default headers
            session: Pre-built session (tests inject mocks here)
        """
        self.base_url = base_url.rstrip("/") + "/"
        self.settings = settings

        if session is None:
            session = requests.Session()
            adapter = HTTPAdapter(
                pool_connections=settings.pool_connections,
                pool_maxsize=settings.pool_maxsize,
                max_retries=0,
                pool_block=False
            )
            session.mount('https://', adapter)
            session.mount('http://', adapter)
        self.session = session

        self.session.headers.update({
            "Content-Type": "application/json",
            "Accept": "application/json",
        })
        if headers:
            self.session.headers.update(headers)

        self.timeout = (settings.connect_timeout, settings.request_timeout)
        self._request_counter = 0

    def _make_request(
        self,
        method: str,
        path: str,
        headers: Optional[Dict[str, str]] = None,
        params: Optional[Dict[str, Any]] = None,
        json_data: Optional[Any] = None,
        data: Optional[str] = None
    ) -> Any:
        """
        Make HTTP request.

        Args:
            method: HTTP method
            path: Request path, relative to base_url
            headers: Additional headers
            params: Query parameters
            json_data: JSON body
            data: Pre-serialized body

        Returns:
            Parsed JSON response

        Raises:
            APIError: On HTTP or connection errors
            TimeoutError: On timeout
        """
        url = urljoin(self.base_url, path.lstrip("/"))

        self._request_counter += 1
        request_id = f"{method}:{path}:{self._request_counter}"

        if self.settings.log_requests:
            logger.debug(f"[{request_id}] {method} {url}")

        try:
            response = self.session.request(
                method=method,
                url=url,
                headers=headers,
                params=params,
                json=json_data,
                data=data,
                timeout=self.timeout
            )
        except requests.exceptions.Timeout as e:
            logger.error(f"Request timeout: {method} {url}")
            raise TimeoutError(f"Request timeout: {method} {path}") from e
        except requests.exceptions.ConnectionError as e:
            logger.error(f"Connection error: {method} {url}")
            raise APIError(f"Connection error: {method} {path}") from e
        except requests.exceptions.RequestException as e:
            logger.error(f"Request failed: {method} {url}: {type(e).__name__}")
            raise APIError(f"Request failed: {type(e).__name__}") from e

        if response.status_code >= 400:
            error_msg = f"{method} {path} failed with {response.status_code}"
            error_data = None
            try:
                error_data = orjson.loads(response.content)
                error_msg += f": {error_data}"
            except (ValueError, TypeError, orjson.JSONDecodeError):
                error_msg += f": {response.text[:200]}"
            raise APIError(error_msg, status_code=response.status_code, response=error_data)

        try:
            return orjson.loads(response.content)
        except (ValueError, TypeError, orjson.JSONDecodeError) as e:
            logger.error(f"Invalid JSON response from {method} {path}")
            raise APIError(f"Invalid JSON response: {e}", status_code=response.status_code)

    def get(
        self,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None
    ) -> Any:
        """Make GET request."""
        return self._make_request("GET", path, headers=headers, params=params)

    def post(
        self,
        path: str,
        json_data: Optional[Any] = None,
        headers: Optional[Dict[str, str]] = None,
        data: Optional[str] = None
    ) -> Any:
        """Make POST request."""
        return self._make_request("POST", path, headers=headers, json_data=json_data, data=data)

    def close(self) -> None:
        """Close session and cleanup resources."""
        self.session.close()
        logger.info("API client session closed")
