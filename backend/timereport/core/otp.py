"""One-time login code helpers.

Codes are six random digits. Only their SHA-256 digest is stored; the raw
code exists in memory just long enough to be emailed.
"""

import hashlib
import hmac
import secrets
from datetime import UTC, datetime, timedelta

OTP_LENGTH = 6
OTP_EXPIRY = timedelta(minutes=10)
OTP_MAX_ATTEMPTS = 5

_OTP_MIN = 10 ** (OTP_LENGTH - 1)
_OTP_MAX = 10**OTP_LENGTH - 1


def generate_code() -> str:
    """Generate a six-digit numeric code.

    Uniform over [100000, 999999] using the ``secrets`` CSPRNG. Collisions
    between unrelated requests are acceptable; security comes from hashing
    and per-email invalidation.
    """
    return str(_OTP_MIN + secrets.randbelow(_OTP_MAX - _OTP_MIN + 1))


def hash_code(code: str) -> str:
    """Return the SHA-256 hex digest of a code."""
    return hashlib.sha256(code.encode()).hexdigest()


def verify_code(code: str, code_hash: str) -> bool:
    """Check a submitted code against a stored digest in constant time."""
    return hmac.compare_digest(hash_code(code), code_hash)


def otp_expiry(now: datetime | None = None) -> datetime:
    """Expiry timestamp for a code issued at ``now``."""
    return (now or datetime.now(UTC)) + OTP_EXPIRY


def is_expired(expires_at: datetime, now: datetime | None = None) -> bool:
    """Whether a code with this expiry is no longer valid."""
    return (now or datetime.now(UTC)) > expires_at


def has_exceeded_max_attempts(attempts: int) -> bool:
    """Whether the wrong-guess budget for a code is spent."""
    return attempts >= OTP_MAX_ATTEMPTS
