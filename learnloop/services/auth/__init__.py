"""Accounts: password hashing and credential checks."""

from learnloop.services.auth.passwords import hash_password, verify_password
from learnloop.services.auth.service import AuthService

__all__ = ["AuthService", "hash_password", "verify_password"]
