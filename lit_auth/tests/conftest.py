"""Shared fixtures."""

from unittest.mock import Mock

import jwt
import orjson
import pytest

from ..config import LitAuthSettings
from ..metrics import Metrics
from ..storage import InMemorySessionStore


@pytest.fixture
def settings():
    """Settings with metrics off and instant relay polling."""
    return LitAuthSettings(
        enable_metrics=False,
        relay_poll_interval=0.0,
        relay_poll_attempts=3,
        relay_api_key="test-relay-key",
    )


@pytest.fixture
def metrics():
    return Metrics(enabled=False)


@pytest.fixture
def store():
    return InMemorySessionStore()


@pytest.fixture
def make_jwt():
    """Build an HS256 JWT; signatures are never checked by the client."""
    def _make(claims):
        return jwt.encode(claims, "not-a-real-secret", algorithm="HS256")
    return _make


def json_response(payload, status_code=200):
    """Mocked requests.Response."""
    body = orjson.dumps(payload)
    return Mock(status_code=status_code, content=body, text=body.decode("utf-8"))


def mock_session(*responses):
    """Mocked requests.Session returning responses in order."""
    session = Mock()
    session.headers = {}
    session.request.side_effect = list(responses)
    return session
