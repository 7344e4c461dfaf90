"""Tests for the relay, OTP and Discord HTTP clients."""

from unittest.mock import patch

import pytest
import requests

from .conftest import json_response, mock_session
from ..api.discord import DiscordClient
from ..api.otp import OtpClient
from ..api.relay import RelayClient
from ..exceptions import (
    APIError,
    AuthenticationError,
    RelayError,
    RemoteFailure,
    TimeoutError,
    ValidationError,
)
from ..models import AuthMethodType, RelayerRequest

BODY = RelayerRequest(auth_method_type=AuthMethodType.GoogleJwt, auth_method_id="0xabc").to_json()


def requested_url(session, call=-1):
    return session.request.call_args_list[call].kwargs["url"]


class TestRelayClient:
    """RelayClient against a mocked session."""

    def test_api_key_header(self, settings):
        session = mock_session()
        RelayClient(settings=settings, session=session)

        assert session.headers["api-key"] == "test-relay-key"
        assert session.headers["Content-Type"] == "application/json"

    def test_mint_pkp(self, settings):
        session = mock_session(json_response({"requestId": "req-1"}))
        relay = RelayClient(settings=settings, session=session)

        response = relay.mint_pkp(AuthMethodType.GoogleJwt, BODY)

        assert response.request_id == "req-1"
        assert requested_url(session) == f"{settings.relay_url}/auth/google"
        assert session.request.call_args.kwargs["method"] == "POST"
        assert session.request.call_args.kwargs["data"] == BODY

    def test_mint_pkp_routes(self, settings):
        session = mock_session(*[json_response({"requestId": "r"}) for _ in range(2)])
        relay = RelayClient(settings=settings, session=session)

        relay.mint_pkp(AuthMethodType.WebAuthn, BODY)
        relay.mint_pkp(AuthMethodType.OTP, BODY)

        assert requested_url(session, 0).endswith("/auth/webauthn/verify-registration")
        assert requested_url(session, 1).endswith("/auth/otp")

    def test_mint_pkp_without_request_id(self, settings):
        relay = RelayClient(settings=settings, session=mock_session(json_response({"error": "nope"})))

        with pytest.raises(RelayError):
            relay.mint_pkp(AuthMethodType.GoogleJwt, BODY)

    def test_fetch_pkps(self, settings):
        pkps = [{"tokenId": "0x1", "publicKey": "0x04ab", "ethAddress": "0xabc"}]
        session = mock_session(json_response({"pkps": pkps}))
        relay = RelayClient(settings=settings, session=session)

        assert relay.fetch_pkps(AuthMethodType.GoogleJwt, BODY) == pkps
        assert requested_url(session).endswith("/auth/google/userinfo")

    def test_fetch_pkps_missing_list(self, settings):
        relay = RelayClient(settings=settings, session=mock_session(json_response({})))

        with pytest.raises(RelayError):
            relay.fetch_pkps(AuthMethodType.GoogleJwt, BODY)

    def test_unsupported_route(self, settings):
        relay = RelayClient(settings=settings, session=mock_session())

        with pytest.raises(ValidationError):
            relay.mint_pkp(2, BODY)

    def test_registration_options(self, settings):
        session = mock_session(json_response({"challenge": "abc"}))
        relay = RelayClient(settings=settings, session=session)

        assert relay.generate_registration_options("alice@example.com") == {"challenge": "abc"}
        assert requested_url(session).endswith(
            "/auth/webauthn/generate-registration-options?username=alice%40example.com"
        )

    def test_http_error(self, settings):
        relay = RelayClient(
            settings=settings,
            session=mock_session(json_response({"error": "boom"}, status_code=500)),
        )

        with pytest.raises(APIError) as exc_info:
            relay.mint_pkp(AuthMethodType.GoogleJwt, BODY)

        assert exc_info.value.status_code == 500
        assert exc_info.value.response == {"error": "boom"}
        assert isinstance(exc_info.value, RemoteFailure)

    def test_timeout(self, settings):
        session = mock_session(requests.exceptions.Timeout("slow"))
        relay = RelayClient(settings=settings, session=session)

        with pytest.raises(TimeoutError):
            relay.mint_pkp(AuthMethodType.GoogleJwt, BODY)

        assert session.request.call_count == 1

    def test_connection_error_not_retried(self, settings):
        session = mock_session(requests.exceptions.ConnectionError("down"))
        relay = RelayClient(settings=settings, session=session)

        with pytest.raises(APIError):
            relay.fetch_pkps(AuthMethodType.GoogleJwt, BODY)

        assert session.request.call_count == 1


class TestPolling:
    """Mint status polling."""

    @patch("lit_auth.api.relay.time.sleep")
    def test_poll_until_succeeded(self, sleep, settings):
        session = mock_session(
            json_response({"status": "InProgress"}),
            json_response({"status": "Succeeded", "pkpTokenId": "0x1"}),
        )
        relay = RelayClient(settings=settings, session=session)

        status = relay.poll_request_until_terminal_state("req-1")

        assert status["pkpTokenId"] == "0x1"
        assert requested_url(session).endswith("/auth/status/req-1")
        assert sleep.call_count == 1

    @patch("lit_auth.api.relay.time.sleep")
    def test_poll_failed(self, sleep, settings):
        relay = RelayClient(
            settings=settings,
            session=mock_session(json_response({"status": "Failed", "error": "out of gas"})),
        )

        with pytest.raises(RelayError) as exc_info:
            relay.poll_request_until_terminal_state("req-1")

        assert exc_info.value.request_id == "req-1"

    @patch("lit_auth.api.relay.time.sleep")
    def test_poll_gives_up(self, sleep, settings):
        session = mock_session(*[json_response({"status": "InProgress"}) for _ in range(3)])
        relay = RelayClient(settings=settings, session=session)

        with pytest.raises(RelayError):
            relay.poll_request_until_terminal_state("req-1")

        assert session.request.call_count == settings.relay_poll_attempts


class TestOtpClient:

    def test_start(self, settings):
        session = mock_session(json_response({"status": "ok"}))
        client = OtpClient(settings=settings, session=session)

        client.start("alice@example.com", "req-1")

        assert requested_url(session) == f"{settings.otp_url}/api/otp/start"
        assert session.request.call_args.kwargs["json"] == {"otp": "alice@example.com", "request_id": "req-1"}

    def test_check(self, settings):
        session = mock_session(json_response({"token_jwt": "a.b.c"}))
        client = OtpClient(settings=settings, session=session)

        assert client.check("alice@example.com", "123456", "req-1") == "a.b.c"
        assert requested_url(session).endswith("/api/otp/check")

    def test_check_without_token(self, settings):
        client = OtpClient(settings=settings, session=mock_session(json_response({"status": "invalid"})))

        with pytest.raises(AuthenticationError):
            client.check("alice@example.com", "000000", "req-1")


class TestDiscordClient:

    def test_user_info(self, settings):
        session = mock_session(json_response({"id": "80351110224678912"}))
        client = DiscordClient(settings=settings, session=session)

        assert client.get_user_info("opaque")["id"] == "80351110224678912"
        assert requested_url(session) == "https://discord.com/api/users/@me"
        assert session.request.call_args.kwargs["headers"] == {"Authorization": "Bearer opaque"}

    def test_user_info_unauthorized(self, settings):
        client = DiscordClient(
            settings=settings,
            session=mock_session(json_response({"message": "401: Unauthorized"}, status_code=401)),
        )

        with pytest.raises(RemoteFailure):
            client.get_user_info("expired")
