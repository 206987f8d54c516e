"""
Credential store - registration and password verification.

Sits on top of AccountStorage. Validation rules live here; name
uniqueness is left to the storage layer, which enforces it atomically.
"""

from __future__ import annotations

import logging
import re
import secrets

from disregarded.auth.passwords import PasswordHasher
from disregarded.core.errors import (
    AccountNotFoundError,
    InvalidNameError,
    MissingFieldsError,
    RegistrationDisabledError,
    WeakPasswordError,
    WrongPasswordError,
)
from disregarded.core.models import Account
from disregarded.core.utils import utc_now
from disregarded.storage.base import AccountStorage

logger = logging.getLogger(__name__)


NAME_PATTERN = re.compile(r"[A-Za-z0-9_]{3,20}")
MIN_PASSWORD_LENGTH = 6


def is_valid_name(name: str) -> bool:
    return NAME_PATTERN.fullmatch(name) is not None


def is_valid_password(password: str) -> bool:
    return len(password) >= MIN_PASSWORD_LENGTH


class CredentialStore:
    """
    Registers accounts and verifies passwords.

    Usage:
        store = CredentialStore(storage.accounts, PasswordHasher())
        account = store.register("alice", "secret1")
        account = store.verify("alice", "secret1")
    """

    def __init__(
        self,
        accounts: AccountStorage,
        hasher: PasswordHasher,
        registration_enabled: bool = True,
    ):
        self._accounts = accounts
        self._hasher = hasher
        self.registration_enabled = registration_enabled
        # Verified against when the name is unknown, so both login
        # failures cost one Argon2 verification
        self._dummy_hash = hasher.hash(secrets.token_urlsafe(16))

    def register(self, name: str | None, password: str | None) -> Account:
        """
        Create an account.

        Raises:
            RegistrationDisabledError: signups are switched off (checked first)
            MissingFieldsError: name or password is empty
            InvalidNameError: name doesn't match NAME_PATTERN
            WeakPasswordError: password shorter than MIN_PASSWORD_LENGTH
            DuplicateNameError: name already taken
        """
        if not self.registration_enabled:
            raise RegistrationDisabledError()

        if not name or not password:
            raise MissingFieldsError()
        if not is_valid_name(name):
            raise InvalidNameError()
        if not is_valid_password(password):
            raise WeakPasswordError()

        account = self._accounts.create(name, self._hasher.hash(password), utc_now())
        logger.info(f"Registered account {account.id} ({account.name})")
        return account

    def verify(self, name: str | None, password: str | None) -> Account:
        """
        Check a name/password pair.

        Raises:
            MissingFieldsError: name or password is empty
            AccountNotFoundError: no such account
            WrongPasswordError: password doesn't match
        """
        if not name or not password:
            raise MissingFieldsError()

        account = self._accounts.get_by_name(name)
        if account is None:
            self._hasher.verify(password, self._dummy_hash)
            logger.info(f"Login failed for unknown account {name!r}")
            raise AccountNotFoundError()

        if not self._hasher.verify(password, account.password_hash):
            logger.info(f"Login failed for account {account.id}: wrong password")
            raise WrongPasswordError()

        if self._hasher.needs_rehash(account.password_hash):
            new_hash = self._hasher.hash(password)
            self._accounts.update_password_hash(account.id, new_hash)
            account = account.model_copy(update={"password_hash": new_hash})
            logger.info(f"Re-hashed password for account {account.id}")

        return account

    def get_account(self, account_id: int) -> Account | None:
        return self._accounts.get_by_id(account_id)
