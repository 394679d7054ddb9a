"""
Sakila Rentals Backend — Password Hashing
===========================================

What:  Hash and verify login passwords.
How:   argon2id via argon2-cffi. The stored value is one self-describing
       string ($argon2id$v=19$m=...,t=...,p=...$salt$hash), so the salt
       and cost parameters travel with the hash.

Legacy hashes:
    Accounts created by the previous backend store an unsalted SHA-256 hex
    digest. Those still verify, and `needs_rehash` reports True for them so
    signin can replace the digest with an argon2id hash on the next
    successful login.

Hashing is CPU-bound (tens of milliseconds by design); callers in async
code run it through `run_in_threadpool`.
"""

import hashlib
import hmac
import re

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError

_hasher = PasswordHasher()

_LEGACY_SHA256 = re.compile(r"^[0-9a-f]{64}$")


def hash_password(password: str) -> str:
    return _hasher.hash(password)


def _is_legacy(stored_hash: str) -> bool:
    return bool(_LEGACY_SHA256.match(stored_hash))


def verify_password(stored_hash: str, password: str) -> bool:
    """True if `password` matches `stored_hash` (argon2id or legacy SHA-256)."""
    if _is_legacy(stored_hash):
        digest = hashlib.sha256(password.encode("utf-8")).hexdigest()
        return hmac.compare_digest(digest, stored_hash)
    try:
        return _hasher.verify(stored_hash, password)
    except (VerificationError, InvalidHashError):
        return False


def needs_rehash(stored_hash: str) -> bool:
    """True for legacy digests and argon2 hashes made with outdated parameters."""
    if _is_legacy(stored_hash):
        return True
    try:
        return _hasher.check_needs_rehash(stored_hash)
    except InvalidHashError:
        return True
