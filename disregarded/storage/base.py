"""
Storage abstraction layer.

All persistence goes through these interfaces so services never touch
SQL directly. Mutations that depend on ownership take the owner id and
apply it in the same statement as the write.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime

from pydantic import BaseModel

from disregarded.core.models import Account, AuthoredEssay, Essay, EssayStatus


class IdentifierCollision(Exception):
    """The generated essay identifier is already taken."""


# =============================================================================
# Storage Interfaces
# =============================================================================


class AccountStorage(ABC):
    """
    Storage for accounts.
    
    Name uniqueness is enforced here, not by callers.
    """
    
    @abstractmethod
    def create(self, name: str, password_hash: str, created_at: datetime) -> Account:
        """Insert an account. Raises DuplicateNameError if the name is taken."""
        pass
    
    @abstractmethod
    def get_by_name(self, name: str) -> Account | None:
        pass
    
    @abstractmethod
    def get_by_id(self, account_id: int) -> Account | None:
        pass
    
    @abstractmethod
    def update_password_hash(self, account_id: int, password_hash: str) -> bool:
        """Replace the stored verifier (used when re-hashing)."""
        pass


class EssayStorage(ABC):
    """
    Storage for essays.
    
    `*_owned` methods only touch rows whose owner matches and return
    None/False when nothing matched.
    """
    
    @abstractmethod
    def create(
        self,
        essay_id: str,
        owner_id: int,
        title: str,
        content: str,
        now: datetime,
    ) -> Essay:
        """Insert a draft. Raises IdentifierCollision if essay_id is taken."""
        pass
    
    @abstractmethod
    def get(self, essay_id: str) -> AuthoredEssay | None:
        """Get an essay with its author's name."""
        pass
    
    @abstractmethod
    def exists(self, essay_id: str) -> bool:
        pass
    
    @abstractmethod
    def list_by_owner(self, owner_id: int) -> list[Essay]:
        """All essays of one owner, most recently updated first."""
        pass
    
    @abstractmethod
    def list_published(self) -> list[AuthoredEssay]:
        """Published essays of every owner, most recently updated first."""
        pass
    
    @abstractmethod
    def update_owned(
        self,
        essay_id: str,
        owner_id: int,
        title: str | None,
        content: str | None,
        now: datetime,
    ) -> Essay | None:
        """Update title and/or content; None leaves a field unchanged."""
        pass
    
    @abstractmethod
    def set_status_owned(
        self,
        essay_id: str,
        owner_id: int,
        status: EssayStatus,
        now: datetime,
    ) -> Essay | None:
        pass
    
    @abstractmethod
    def delete_owned(self, essay_id: str, owner_id: int) -> bool:
        pass


# =============================================================================
# Storage Provider (dependency injection container)
# =============================================================================


class StorageProvider(BaseModel):
    """
    Container for all storage backends.
    
    Initialize once at app startup and hand it to the services.
    """
    
    model_config = {"arbitrary_types_allowed": True}
    
    accounts: AccountStorage
    essays: EssayStorage

