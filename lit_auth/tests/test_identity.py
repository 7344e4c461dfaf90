"""Tests for auth method id derivation."""

from unittest.mock import Mock, patch

import orjson
import pytest
from eth_utils import keccak

from ..auth.identity import (
    IdentityHasher,
    get_auth_method_id,
    hash_identifier,
    jwt_auth_method_id,
    otp_auth_method_id,
)
from ..config import LitAuthSettings
from ..exceptions import (
    CryptoDecodeError,
    MissingClaimError,
    StateError,
    UnsupportedAuthMethodError,
    ValidationError,
)
from ..models import AuthMethod, AuthMethodType, AuthSig
from .conftest import json_response, mock_session


def test_hash_identifier_is_prefixed_keccak():
    """Identifier is 0x + keccak256 of the UTF-8 string."""
    expected = "0x" + keccak(b"user-42:orgabc").hex()
    assert hash_identifier("user-42:orgabc") == expected
    assert len(expected) == 66
    assert expected == expected.lower()


def test_every_auth_method_type_has_a_rule():
    """Dispatch table covers the whole enum."""
    hasher = IdentityHasher()
    assert hasher.supported_types() == frozenset(AuthMethodType)


def test_google_id_is_sub_colon_aud(make_jwt):
    token = make_jwt({"sub": "108345", "aud": "client-id.apps.example"})
    auth_method = AuthMethod(auth_method_type=AuthMethodType.GoogleJwt, access_token=token)

    assert IdentityHasher().derive(auth_method) == hash_identifier("108345:client-id.apps.example")


def test_apple_id_accepts_single_element_audience(make_jwt):
    token = make_jwt({"sub": "apple-user", "aud": ["com.example.app"]})
    auth_method = AuthMethod(auth_method_type=AuthMethodType.AppleJwt, access_token=token)

    assert IdentityHasher().derive(auth_method) == hash_identifier("apple-user:com.example.app")


def test_multi_audience_is_comma_joined(make_jwt):
    token = make_jwt({"sub": "apple-user", "aud": ["com.example.app", "com.example.web"]})

    assert jwt_auth_method_id(token) == hash_identifier("apple-user:com.example.app,com.example.web")


def test_jwt_missing_sub(make_jwt):
    token = make_jwt({"aud": "client"})

    with pytest.raises(MissingClaimError) as exc_info:
        jwt_auth_method_id(token)

    assert exc_info.value.claim == "sub"


def test_jwt_with_four_segments_is_rejected(make_jwt):
    """Tokens must split into exactly three segments."""
    token = make_jwt({"sub": "a", "aud": "b"}) + ".extra"

    with pytest.raises(CryptoDecodeError):
        jwt_auth_method_id(token)

    with pytest.raises(CryptoDecodeError):
        jwt_auth_method_id("only.two")


def test_otp_lowercases_org_but_not_user(make_jwt):
    """orgId is lowercased, userId keeps its case, extraData splits on first |."""
    token = make_jwt({"orgId": "OrgABC", "extraData": "user-42|extra-context"})

    assert otp_auth_method_id(token) == hash_identifier("user-42:orgabc")

    mixed_case = make_jwt({"orgId": "OrgABC", "extraData": "User-42|a|b"})
    assert otp_auth_method_id(mixed_case) == hash_identifier("User-42:orgabc")
    assert otp_auth_method_id(mixed_case) != otp_auth_method_id(token)


def test_otp_missing_org_id(make_jwt):
    token = make_jwt({"extraData": "user-42|x"})

    with pytest.raises(MissingClaimError) as exc_info:
        otp_auth_method_id(token)

    assert exc_info.value.claim == "orgId"


def test_eth_wallet_id_is_address_verbatim():
    auth_sig = AuthSig(
        sig="0xsig",
        signed_message="message",
        address="0x5aAeb6053F3E94C9b9A09f33669435E7Ef1BeAed",
    )
    auth_method = AuthMethod(auth_method_type=AuthMethodType.EthWallet, access_token=auth_sig.to_json())

    assert IdentityHasher().derive(auth_method) == "0x5aAeb6053F3E94C9b9A09f33669435E7Ef1BeAed"


def test_eth_wallet_malformed_json():
    auth_method = AuthMethod(auth_method_type=AuthMethodType.EthWallet, access_token="{not json")

    with pytest.raises(CryptoDecodeError):
        IdentityHasher().derive(auth_method)


def test_webauthn_id_hashes_raw_id():
    token = orjson.dumps({"rawId": "Y3JlZC0x", "response": {}}).decode("utf-8")
    auth_method = AuthMethod(auth_method_type=AuthMethodType.WebAuthn, access_token=token)

    assert IdentityHasher().derive(auth_method) == hash_identifier("Y3JlZC0x:lit")


def test_webauthn_missing_raw_id():
    auth_method = AuthMethod(auth_method_type=AuthMethodType.WebAuthn, access_token='{"response": {}}')

    with pytest.raises(MissingClaimError):
        IdentityHasher().derive(auth_method)


def test_discord_id_uses_fetched_user():
    fetcher = Mock(return_value={"id": "80351110224678912", "username": "nelly"})
    hasher = IdentityHasher(discord_user_fetcher=fetcher)
    auth_method = AuthMethod(auth_method_type=AuthMethodType.Discord, access_token="opaque-token")

    assert hasher.derive(auth_method) == hash_identifier("80351110224678912:1052874239658692668")
    fetcher.assert_called_once_with("opaque-token")


def test_discord_without_fetcher():
    """A hasher built without a fetcher cannot resolve the Discord user."""
    auth_method = AuthMethod(auth_method_type=AuthMethodType.Discord, access_token="opaque-token")

    with pytest.raises(StateError):
        IdentityHasher().derive(auth_method)


def test_standalone_discord_id_fetches_user(settings):
    session = mock_session(json_response({"id": "80351110224678912"}))
    auth_method = AuthMethod(auth_method_type=AuthMethodType.Discord, access_token="opaque-token")

    with patch("lit_auth.api.base.requests.Session", return_value=session):
        auth_method_id = get_auth_method_id(auth_method, settings=settings)

    assert auth_method_id == hash_identifier("80351110224678912:1052874239658692668")
    assert session.request.call_args.kwargs["headers"] == {"Authorization": "Bearer opaque-token"}


def test_standalone_discord_id_uses_configured_client_id():
    fetcher = Mock(return_value={"id": "42"})
    settings = LitAuthSettings(discord_client_id="999")
    auth_method = {"authMethodType": 4, "accessToken": "opaque-token"}

    assert get_auth_method_id(auth_method, fetcher, settings=settings) == hash_identifier("42:999")


def test_unknown_type_is_unsupported():
    """Persisted auth methods with an unknown type fail as validation errors."""
    with pytest.raises(UnsupportedAuthMethodError) as exc_info:
        get_auth_method_id({"authMethodType": 99, "accessToken": "x"})

    assert isinstance(exc_info.value, ValidationError)
    assert exc_info.value.auth_method_type == 99


def test_persisted_dict_form(make_jwt):
    token = make_jwt({"sub": "s", "aud": "a"})

    assert get_auth_method_id({"authMethodType": 6, "accessToken": token}) == hash_identifier("s:a")


def test_empty_access_token_in_dict_form():
    with pytest.raises(CryptoDecodeError):
        get_auth_method_id({"authMethodType": 6, "accessToken": ""})


def test_derivation_is_deterministic(make_jwt):
    token = make_jwt({"sub": "s", "aud": "a"})
    auth_method = AuthMethod(auth_method_type=AuthMethodType.GoogleJwt, access_token=token)

    assert IdentityHasher().derive(auth_method) == IdentityHasher().derive(auth_method)
