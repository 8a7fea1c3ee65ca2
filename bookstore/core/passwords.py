"""Password Hashing - Argon2id via argon2-cffi.

Invariants:
    - Stored values are argon2 encoded hashes ("$argon2id$v=19$m=...")
    - verify_password never raises on a mismatch or a malformed stored value,
      it returns False
    - Cost parameters live in the encoded hash, so hashes made with other
      parameters still verify
"""

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError, VerifyMismatchError

_default_hasher = PasswordHasher()


def hash_password(password: str, hasher: PasswordHasher | None = None) -> str:
    return (hasher or _default_hasher).hash(password)


def verify_password(password: str, stored: str) -> bool:
    try:
        return _default_hasher.verify(stored, password)
    except (VerifyMismatchError, VerificationError, InvalidHashError):
        return False
