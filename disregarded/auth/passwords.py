"""
Password hashing with Argon2id.

Cost parameters come from configuration; hashes embed their own salt
and parameters so old hashes keep verifying after a cost change.
"""

from __future__ import annotations

import logging

from argon2 import PasswordHasher as Argon2Hasher
from argon2 import Type
from argon2.exceptions import InvalidHashError, VerificationError, VerifyMismatchError

logger = logging.getLogger(__name__)


class PasswordHasher:
    """Hash and verify passwords. Never logs or returns plaintext."""
    
    def __init__(self, memory_cost: int = 65536, time_cost: int = 2, parallelism: int = 1):
        self._hasher = Argon2Hasher(
            time_cost=time_cost,
            memory_cost=memory_cost,
            parallelism=parallelism,
            type=Type.ID,
        )
    
    def hash(self, password: str) -> str:
        return self._hasher.hash(password)
    
    def verify(self, password: str, password_hash: str) -> bool:
        """Verify a password against its hash."""
        try:
            return self._hasher.verify(password_hash, password)
        except VerifyMismatchError:
            return False
        except (VerificationError, InvalidHashError) as e:
            logger.warning(f"Unusable password hash: {type(e).__name__}")
            return False
    
    def needs_rehash(self, password_hash: str) -> bool:
        """True if the hash was made with different cost parameters."""
        return self._hasher.check_needs_rehash(password_hash)
