from datetime import UTC, datetime, timedelta

import pytest
from jose import jwt

from todo_app.config import settings
from todo_app.exceptions import TokenValidationError
from todo_app.utils.auth import (
    ALGORITHM,
    INVALID_SIGNATURE,
    INVALID_TOKEN,
    NAME_CLAIM,
    TOKEN_EXPIRED,
    create_access_token,
    extract_user_id,
    generate_refresh_token,
    get_password_hash,
    read_token_expiry,
    read_token_user_id,
    validate_access_token,
    verify_password,
)


def _token(**overrides) -> str:
    kwargs = {"now": datetime.now(UTC)}
    kwargs.update(overrides)
    return create_access_token(42, "alice", **kwargs)


def test_valid_token_round_trips_claims():
    claims = validate_access_token(_token())

    assert extract_user_id(claims) == 42
    assert claims[NAME_CLAIM] == "alice"
    assert claims["iss"] == settings.jwt_issuer
    assert claims["aud"] == settings.jwt_audience
    assert jwt.get_unverified_header(_token())["alg"] == ALGORITHM


def test_token_signed_with_another_key_has_invalid_signature():
    token = _token(secret_key="some-other-secret-that-is-also-long-enough")

    with pytest.raises(TokenValidationError) as exc_info:
        validate_access_token(token)

    assert exc_info.value.code == INVALID_SIGNATURE


def test_tampered_payload_has_invalid_signature():
    header, _, signature = _token().split(".")
    forged_payload = _token(now=datetime.now(UTC) + timedelta(days=365)).split(".")[1]

    with pytest.raises(TokenValidationError) as exc_info:
        validate_access_token(f"{header}.{forged_payload}.{signature}")

    assert exc_info.value.code == INVALID_SIGNATURE


@pytest.mark.parametrize(
    "overrides",
    [{"issuer": "SomeoneElse"}, {"audience": "OtherClients"}],
)
def test_wrong_issuer_or_audience_is_an_invalid_token(overrides):
    with pytest.raises(TokenValidationError) as exc_info:
        validate_access_token(_token(**overrides))

    assert exc_info.value.code == INVALID_TOKEN


def test_issuer_is_checked_before_signature():
    token = _token(issuer="SomeoneElse", secret_key="another-secret-entirely-for-this-test")

    with pytest.raises(TokenValidationError) as exc_info:
        validate_access_token(token)

    assert exc_info.value.code == INVALID_TOKEN


def test_token_expired_beyond_clock_skew():
    issued = datetime.now(UTC) - timedelta(hours=2)
    token = _token(now=issued, expires_delta=timedelta(hours=1))

    with pytest.raises(TokenValidationError) as exc_info:
        validate_access_token(token)

    assert exc_info.value.code == TOKEN_EXPIRED


def test_token_expired_within_clock_skew_is_still_valid():
    issued = datetime.now(UTC) - timedelta(hours=1, minutes=2)
    token = _token(now=issued, expires_delta=timedelta(hours=1))

    claims = validate_access_token(token)

    assert extract_user_id(claims) == 42


def test_expired_token_with_bad_signature_reports_signature():
    issued = datetime.now(UTC) - timedelta(days=3)
    token = _token(
        now=issued,
        expires_delta=timedelta(hours=1),
        secret_key="some-other-secret-that-is-also-long-enough",
    )

    with pytest.raises(TokenValidationError) as exc_info:
        validate_access_token(token)

    assert exc_info.value.code == INVALID_SIGNATURE


@pytest.mark.parametrize("token", ["", "not-a-jwt", "a.b.c"])
def test_malformed_token_is_invalid(token):
    with pytest.raises(TokenValidationError) as exc_info:
        validate_access_token(token)

    assert exc_info.value.code == INVALID_TOKEN


def test_non_ascii_header_segment_is_an_invalid_token():
    header, payload, signature = _token().split(".")

    with pytest.raises(TokenValidationError) as exc_info:
        validate_access_token(f"{header}é.{payload}.{signature}")

    assert exc_info.value.code == INVALID_TOKEN


def test_read_token_expiry_and_user_id_without_verification():
    issued = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)
    token = _token(now=issued, secret_key="a-key-this-process-does-not-trust-at-all")

    assert read_token_expiry(token) == issued + timedelta(
        minutes=settings.access_token_expire_minutes
    )
    assert read_token_user_id(token) == 42


def test_unreadable_token_has_no_expiry_or_user_id():
    assert read_token_expiry("garbage") is None
    assert read_token_user_id("garbage") is None


def test_refresh_tokens_are_44_characters_and_unique():
    tokens = {generate_refresh_token() for _ in range(20)}

    assert len(tokens) == 20
    assert all(len(token) == 44 for token in tokens)


def test_password_hashing():
    hashed = get_password_hash("s3cret")

    assert hashed != "s3cret"
    assert verify_password("s3cret", hashed)
    assert not verify_password("wrong", hashed)
    assert not verify_password("s3cret", "not-a-bcrypt-hash")
