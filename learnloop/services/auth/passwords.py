"""Password hashing and verification."""

from pwdlib import PasswordHash
from pwdlib.exceptions import UnknownHashError

from learnloop.config import settings

password_hash = PasswordHash.recommended()

# A real hash, so verifying an unknown user costs as much as a known one
DUMMY_HASH = password_hash.hash("dummy_password_for_timing_attack_prevention")


def hash_password(plain_password: str) -> str:
    """Hash a plain password for storage with pepper."""
    return password_hash.hash(plain_password + settings.PASSWORD_PEPPER)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a plain password against a stored hash."""
    try:
        return password_hash.verify(
            plain_password + settings.PASSWORD_PEPPER, hashed_password
        )
    except UnknownHashError:
        return False


def get_dummy_hash() -> str:
    return DUMMY_HASH
