"""
Authentication utilities: HS512 JWT access tokens, opaque refresh tokens and
bcrypt password hashing.

Validation is done in a fixed order (issuer, audience, signature, lifetime)
so that every rejection maps onto exactly one error code for the 401 body.
"""

import base64
import secrets
from datetime import UTC, datetime, timedelta
from typing import Any

import bcrypt
from jose import jwk, jwt
from jose.exceptions import ExpiredSignatureError, JOSEError, JWTError
from jose.utils import base64url_decode

from todo_app.config import settings
from todo_app.exceptions import TokenValidationError

ALGORITHM = "HS512"

# Short-form name and name-identifier claim types
NAME_CLAIM = "unique_name"
NAME_IDENTIFIER_CLAIM = "nameid"

REFRESH_TOKEN_BYTES = 32

# 401 error codes
TOKEN_EXPIRED = "TOKEN_EXPIRED"
INVALID_SIGNATURE = "INVALID_SIGNATURE"
INVALID_TOKEN = "INVALID_TOKEN"
AUTH_FAILED = "AUTH_FAILED"


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a plain text password against a hashed password."""
    try:
        return bcrypt.checkpw(
            plain_password.encode("utf-8"), hashed_password.encode("utf-8")
        )
    except ValueError:
        # Stored hash is not a bcrypt hash
        return False


def get_password_hash(password: str) -> str:
    """Hash a plain text password using bcrypt."""
    pwd_bytes = password.encode("utf-8")
    salt = bcrypt.gensalt()
    hashed_password = bcrypt.hashpw(password=pwd_bytes, salt=salt)
    return hashed_password.decode("utf-8")


def create_access_token(
    user_id: int,
    username: str,
    *,
    now: datetime | None = None,
    expires_delta: timedelta | None = None,
    secret_key: str | None = None,
    issuer: str | None = None,
    audience: str | None = None,
) -> str:
    """Create a signed access token carrying the user's name and id."""
    issued_at = now or datetime.now(UTC)
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.access_token_expire_minutes)

    to_encode = {
        NAME_CLAIM: username,
        NAME_IDENTIFIER_CLAIM: str(user_id),
        "iss": issuer or settings.jwt_issuer,
        "aud": audience or settings.jwt_audience,
        "iat": issued_at,
        "exp": issued_at + expires_delta,
    }
    return jwt.encode(
        to_encode, secret_key or settings.jwt_secret_key, algorithm=ALGORITHM
    )


def generate_refresh_token() -> str:
    """256 random bits, base64 encoded (44 characters)."""
    return base64.b64encode(secrets.token_bytes(REFRESH_TOKEN_BYTES)).decode("ascii")


def _audience_matches(claim: Any, audience: str) -> bool:
    if isinstance(claim, str):
        return claim == audience
    if isinstance(claim, list):
        return audience in claim
    return False


def _signature_matches(token: str, key: str) -> bool:
    """Check the HS512 signature on its own; jws.verify does not tell a bad
    signature apart from other JWS errors."""
    try:
        header = jwt.get_unverified_header(token)
    except JOSEError as e:
        raise TokenValidationError(INVALID_TOKEN, "The token header is malformed.") from e
    if header.get("alg") != ALGORITHM:
        raise TokenValidationError(INVALID_TOKEN, "The token algorithm is not allowed.")

    signing_input, _, encoded_signature = token.rpartition(".")
    try:
        message = signing_input.encode("ascii")
    except UnicodeEncodeError as e:
        raise TokenValidationError(INVALID_TOKEN, "The token is malformed.") from e
    try:
        signature = base64url_decode(encoded_signature.encode("ascii"))
    except (ValueError, TypeError):
        return False
    return jwk.construct(key, ALGORITHM).verify(message, signature)


def validate_access_token(
    token: str,
    *,
    secret_key: str | None = None,
    issuer: str | None = None,
    audience: str | None = None,
    clock_skew_seconds: int | None = None,
) -> dict[str, Any]:
    """
    Fully validate an access token and return its claims.

    Raises TokenValidationError carrying the code of the first failed check.
    """
    key = secret_key or settings.jwt_secret_key
    expected_issuer = issuer or settings.jwt_issuer
    expected_audience = audience or settings.jwt_audience
    leeway = (
        settings.token_clock_skew_seconds
        if clock_skew_seconds is None
        else clock_skew_seconds
    )

    try:
        unverified = jwt.get_unverified_claims(token)
    except JOSEError as e:
        raise TokenValidationError(INVALID_TOKEN, "The token is malformed.") from e

    if unverified.get("iss") != expected_issuer:
        raise TokenValidationError(INVALID_TOKEN, "The token issuer is invalid.")

    if not _audience_matches(unverified.get("aud"), expected_audience):
        raise TokenValidationError(INVALID_TOKEN, "The token audience is invalid.")

    if not _signature_matches(token, key):
        raise TokenValidationError(
            INVALID_SIGNATURE, "The token signature is invalid."
        )

    try:
        return jwt.decode(
            token,
            key,
            algorithms=[ALGORITHM],
            audience=expected_audience,
            issuer=expected_issuer,
            options={"leeway": leeway},
        )
    except ExpiredSignatureError as e:
        raise TokenValidationError(TOKEN_EXPIRED, "The token has expired.") from e
    except JWTError as e:
        raise TokenValidationError(INVALID_TOKEN, f"The token is invalid: {e}") from e


def read_token_expiry(token: str) -> datetime | None:
    """
    Read the ``exp`` claim without verifying the signature.

    Used by the web front end on tokens it stored itself. Returns None when
    the token cannot be parsed or carries no expiry.
    """
    try:
        claims = jwt.get_unverified_claims(token)
    except JOSEError:
        return None

    exp = claims.get("exp")
    if not isinstance(exp, int | float):
        return None
    return datetime.fromtimestamp(exp, UTC)


def extract_user_id(claims: dict[str, Any]) -> int | None:
    """Return the integer user id from the name-identifier claim."""
    raw_id = claims.get(NAME_IDENTIFIER_CLAIM)
    try:
        return int(raw_id)
    except (TypeError, ValueError):
        return None


def read_token_user_id(token: str) -> int | None:
    """Read the user id from a token without verifying it."""
    try:
        claims = jwt.get_unverified_claims(token)
    except JOSEError:
        return None
    return extract_user_id(claims)
