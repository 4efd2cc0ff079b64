"""
Admin API token generation, parsing and hashing.

Tokens look like ``chon_pat_<token_id>_<secret>``. Only the token id and a
PBKDF2-HMAC-SHA256 hash of the secret are persisted; verification is
constant time.
"""
from __future__ import annotations

import base64
import hashlib
import hmac
import secrets
import uuid
from dataclasses import dataclass
from typing import Optional, Tuple


TOKEN_PREFIX = "chon_pat_"
PBKDF2_ITERATIONS = 200_000


@dataclass(frozen=True)
class ParsedToken:
    token_id: str
    secret: str


def generate_token_id() -> str:
    # hex only, so the first '_' after the prefix always ends the id
    return uuid.uuid4().hex[:16]


def generate_secret(length: int = 32) -> str:
    return secrets.token_urlsafe(length)


def build_token_string(token_id: str, secret: str) -> str:
    return f"{TOKEN_PREFIX}{token_id}_{secret}"


def parse_token(token: str) -> Optional[ParsedToken]:
    """Split a token string into id and secret, or None if malformed."""
    if not token or not token.startswith(TOKEN_PREFIX):
        return None
    body = token[len(TOKEN_PREFIX):]
    idx = body.find("_")
    if idx <= 0:
        return None
    token_id = body[:idx]
    secret = body[idx + 1:]
    if not token_id or not secret:
        return None
    return ParsedToken(token_id=token_id, secret=secret)


def hash_secret(secret: str, *, iterations: int = PBKDF2_ITERATIONS, salt_bytes: int = 16) -> str:
    salt = secrets.token_bytes(salt_bytes)
    dk = hashlib.pbkdf2_hmac("sha256", secret.encode("utf-8"), salt, iterations)
    return "pbkdf2$sha256$%d$%s$%s" % (
        iterations,
        base64.urlsafe_b64encode(salt).decode("ascii"),
        base64.urlsafe_b64encode(dk).decode("ascii"),
    )


def verify_secret(secret: str, encoded_hash: str) -> bool:
    if not secret or not encoded_hash:
        return False
    try:
        scheme, algo, iter_str, b64_salt, b64_dk = encoded_hash.split("$")
    except ValueError:
        return False
    if scheme != "pbkdf2" or algo != "sha256":
        return False
    try:
        iterations = int(iter_str)
        salt = base64.urlsafe_b64decode(b64_salt)
        expected = base64.urlsafe_b64decode(b64_dk)
    except (ValueError, TypeError):
        return False
    dk = hashlib.pbkdf2_hmac("sha256", secret.encode("utf-8"), salt, iterations)
    return hmac.compare_digest(dk, expected)


def generate_token() -> Tuple[str, str, str]:
    """Generate a new token and return (token_id, secret, full_token)."""
    tid = generate_token_id()
    sec = generate_secret()
    return tid, sec, build_token_string(tid, sec)
