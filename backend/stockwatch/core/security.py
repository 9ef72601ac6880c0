from __future__ import annotations

import base64
import hashlib
import hmac
import json
import os
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any

PBKDF2_ALGORITHM = "pbkdf2_sha256"
PBKDF2_ITERATIONS = 390000
JWT_ALGORITHM = "HS256"
MIN_PASSWORD_LENGTH = 8


@dataclass(frozen=True, slots=True)
class TokenClaims:
    subject: str
    token_id: str
    expires_at: int

    def seconds_remaining(self, *, now: datetime | None = None) -> int:
        current = now or datetime.now(tz=timezone.utc)
        return max(0, self.expires_at - int(current.timestamp()))


def normalize_email(email: str) -> str:
    normalized = email.strip().lower()
    if "@" not in normalized or normalized.startswith("@") or normalized.endswith("@"):
        raise ValueError("Invalid email format")
    return normalized


def hash_password(password: str) -> str:
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValueError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")

    salt = os.urandom(16)
    digest = _pbkdf2(password, salt, PBKDF2_ITERATIONS)
    return f"{PBKDF2_ALGORITHM}${PBKDF2_ITERATIONS}${_b64url_encode(salt)}${_b64url_encode(digest)}"


def verify_password(password: str, password_hash: str) -> bool:
    try:
        algorithm, iterations_raw, salt_raw, expected_raw = password_hash.split("$", maxsplit=3)
        if algorithm != PBKDF2_ALGORITHM:
            return False
        iterations = int(iterations_raw)
        salt = _b64url_decode(salt_raw)
        expected = _b64url_decode(expected_raw)
    except (TypeError, ValueError):
        return False

    return hmac.compare_digest(_pbkdf2(password, salt, iterations), expected)


def create_access_token(
    *,
    subject: str,
    secret_key: str,
    expires_delta: timedelta,
    token_id: str | None = None,
) -> str:
    """Issue an HS256 token carrying `sub`, `jti`, `iat` and `exp` claims.

    The `jti` claim identifies the session so that sign-out can revoke it
    before it expires.
    """
    now = datetime.now(tz=timezone.utc)
    payload: dict[str, Any] = {
        "sub": subject,
        "jti": token_id or secrets.token_urlsafe(16),
        "iat": int(now.timestamp()),
        "exp": int((now + expires_delta).timestamp()),
    }
    header = {"alg": JWT_ALGORITHM, "typ": "JWT"}
    signing_input = f"{_json_b64url_encode(header)}.{_json_b64url_encode(payload)}"
    signature = _sign(signing_input, secret_key)
    return f"{signing_input}.{_b64url_encode(signature)}"


def decode_access_token(*, token: str, secret_key: str) -> TokenClaims:
    try:
        encoded_header, encoded_payload, encoded_signature = token.split(".", maxsplit=2)
        actual_signature = _b64url_decode(encoded_signature)
    except ValueError as exc:
        raise ValueError("Invalid token") from exc

    expected_signature = _sign(f"{encoded_header}.{encoded_payload}", secret_key)
    if not hmac.compare_digest(actual_signature, expected_signature):
        raise ValueError("Invalid token")

    if _json_b64url_decode(encoded_header).get("alg") != JWT_ALGORITHM:
        raise ValueError("Invalid token")

    payload = _json_b64url_decode(encoded_payload)
    exp = payload.get("exp")
    subject = payload.get("sub")
    token_id = payload.get("jti")
    if not isinstance(exp, int) or not isinstance(subject, str) or not isinstance(token_id, str):
        raise ValueError("Invalid token")

    if exp <= int(datetime.now(tz=timezone.utc).timestamp()):
        raise ValueError("Token expired")

    return TokenClaims(subject=subject, token_id=token_id, expires_at=exp)


def _pbkdf2(password: str, salt: bytes, iterations: int) -> bytes:
    return hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, iterations)


def _sign(signing_input: str, secret_key: str) -> bytes:
    return hmac.new(secret_key.encode("utf-8"), signing_input.encode("ascii"), hashlib.sha256).digest()


def _b64url_encode(value: bytes) -> str:
    return base64.urlsafe_b64encode(value).rstrip(b"=").decode("ascii")


def _b64url_decode(value: str) -> bytes:
    padding = "=" * (-len(value) % 4)
    return base64.urlsafe_b64decode(f"{value}{padding}".encode("ascii"))


def _json_b64url_encode(payload: dict[str, Any]) -> str:
    raw = json.dumps(payload, separators=(",", ":"), sort_keys=True).encode("utf-8")
    return _b64url_encode(raw)


def _json_b64url_decode(payload: str) -> dict[str, Any]:
    try:
        data = json.loads(_b64url_decode(payload).decode("utf-8"))
    except (ValueError, UnicodeDecodeError) as exc:
        raise ValueError("Invalid token") from exc
    if not isinstance(data, dict):
        raise ValueError("Invalid token")
    return data
