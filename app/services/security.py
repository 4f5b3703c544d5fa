"""Credential generation and verification."""

import hashlib
import uuid
from dataclasses import dataclass
from secrets import token_urlsafe

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerifyMismatchError

password_hasher = PasswordHasher()


@dataclass(frozen=True, slots=True)
class IssuedToken:
    """Freshly issued bearer token.

    Attributes
    ----------
    plaintext : str
        Token shown to the caller exactly once.
    token_hash : str
        Argon2 hash persisted for verification.
    token_lookup : str
        SHA-256 digest persisted for indexed lookup.
    """

    plaintext: str
    token_hash: str
    token_lookup: str


def lookup_hash(token: str) -> str:
    """Compute the non-secret digest used to find a token row.

    Parameters
    ----------
    token : str
        Raw token.

    Returns
    -------
    str
        Hex-encoded SHA-256 digest.
    """
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def issue_token(prefix: str = "usr") -> IssuedToken:
    """Generate a bearer token and its stored representations.

    Parameters
    ----------
    prefix : str, default="usr"
        Human-readable token prefix.

    Returns
    -------
    IssuedToken
        Plaintext token with its hash and lookup digest.
    """
    plaintext = f"{prefix}_{token_urlsafe(24)}"
    return IssuedToken(
        plaintext=plaintext,
        token_hash=password_hasher.hash(plaintext),
        token_lookup=lookup_hash(plaintext),
    )


def verify_token(token: str, token_hash: str) -> bool:
    """Verify a raw token against its stored argon2 hash."""
    try:
        return password_hasher.verify(token_hash, token)
    except (VerifyMismatchError, InvalidHashError):
        return False


def generate_thing_key() -> str:
    """Return a new primary thing key.

    Thing keys are exported in backups and re-imported verbatim, so they are
    stored as issued rather than hashed.
    """
    return str(uuid.uuid4())
