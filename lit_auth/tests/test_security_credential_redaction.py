"""
Test credential redaction in logs.

ID tokens, wallet signatures and bearer tokens flow through every provider;
none of them may reach a log sink.
"""

import logging
from io import StringIO

import pytest

from ..logging_config import DEFAULT_LOGGING_CONFIG, get_logger, setup_logging
from ..models import AuthMethod, AuthMethodType
from ..config import LitAuthSettings
from ..utils.structured_logging import CredentialRedactionFilter

JWT = (
    "eyJhbGciOiJIUzI1NiIsInR5cCI6IkpXVCJ9"
    ".eyJzdWIiOiIxMjM0NTY3ODkwIiwiYXVkIjoiY2xpZW50In0"
    ".SflKxwRJSMeKKF2QT4fwpMeJf36POk6yJV_adQssw5c"
)


@pytest.fixture
def captured():
    """Logger whose output passes through the redaction filter."""
    logger = logging.getLogger("test_redaction")
    logger.setLevel(logging.DEBUG)
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(logging.Formatter('%(message)s'))
    handler.addFilter(CredentialRedactionFilter())
    logger.addHandler(handler)
    yield logger, stream
    logger.removeHandler(handler)


class TestCredentialRedactionFilter:
    """Test credential redaction in logging."""

    def test_redacts_jwt(self, captured):
        logger, stream = captured
        logger.info(f"Callback carried id_token {JWT}")

        output = stream.getvalue()
        assert JWT not in output
        assert "[REDACTED_JWT]" in output

    def test_redacts_wallet_signature(self, captured):
        logger, stream = captured
        signature = "0x" + "ab" * 65
        logger.info(f"Signed: {signature}")

        output = stream.getvalue()
        assert signature not in output
        assert "0x[REDACTED_SIG]" in output

    def test_redacts_private_key(self, captured):
        logger, stream = captured
        private_key = "0x" + "a" * 64
        logger.info(f"Loaded key {private_key}")

        output = stream.getvalue()
        assert private_key not in output
        assert "0x[REDACTED]" in output

    def test_redacts_bearer_and_query_tokens(self, captured):
        logger, stream = captured
        logger.info("GET /users/@me Authorization: Bearer discordtoken123")
        logger.info("callback ?provider=discord&access_token=opaque456&state=x")

        output = stream.getvalue()
        assert "discordtoken123" not in output
        assert "opaque456" not in output
        assert "Bearer [REDACTED]" in output
        assert "access_token=[REDACTED]" in output
        assert "provider=discord" in output

    def test_redacts_format_args(self, captured):
        logger, stream = captured
        logger.info("token %s", JWT)

        assert JWT not in stream.getvalue()

    def test_leaves_addresses_alone(self, captured):
        """20-byte addresses are identifiers, not secrets."""
        logger, stream = captured
        address = "0x5aAeb6053F3E94C9b9A09f33669435E7Ef1BeAed"
        logger.info(f"Authenticated {address}")

        assert address in stream.getvalue()


class TestSafeRepr:
    """Credentials stay out of reprs."""

    def test_auth_method_repr(self):
        auth_method = AuthMethod(auth_method_type=AuthMethodType.GoogleJwt, access_token=JWT)

        assert JWT not in repr(auth_method)
        assert "GoogleJwt" in repr(auth_method)

    def test_settings_repr(self):
        settings = LitAuthSettings(relay_api_key="super-secret-key")

        assert "super-secret-key" not in repr(settings)


class TestLoggingConfig:

    def test_default_config_filters_console(self):
        assert "redact" in DEFAULT_LOGGING_CONFIG["handlers"]["console"]["filters"]

    def test_setup_logging_level(self):
        setup_logging(level="debug")

        assert logging.getLogger("lit_auth").level == logging.DEBUG
        assert DEFAULT_LOGGING_CONFIG["loggers"]["lit_auth"]["level"] == "INFO"

        setup_logging()

    def test_get_logger_namespace(self):
        assert get_logger("providers").name == "lit_auth.providers"
