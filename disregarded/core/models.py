"""
Domain models.

Accounts own essays; essays move between draft and published.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel


class EssayStatus(str, Enum):
    """Lifecycle state of an essay."""
    
    DRAFT = "draft"          # Visible to the owner only
    PUBLISHED = "published"  # Visible to everyone


class Account(BaseModel):
    """Account as stored, including the password verifier."""
    
    id: int
    name: str
    password_hash: str
    created_at: datetime


class AccountResponse(BaseModel):
    """Account data returned to clients (no sensitive fields)."""
    
    id: int
    name: str
    
    @classmethod
    def from_account(cls, account: Account) -> AccountResponse:
        return cls(id=account.id, name=account.name)


class Essay(BaseModel):
    """A titled body of text owned by exactly one account."""
    
    id: str  # short alphanumeric code
    owner_id: int
    title: str
    content: str
    status: EssayStatus = EssayStatus.DRAFT
    created_at: datetime
    updated_at: datetime
    
    @property
    def is_published(self) -> bool:
        return self.status == EssayStatus.PUBLISHED
    
    def is_owned_by(self, account_id: int | None) -> bool:
        return account_id is not None and self.owner_id == account_id


class AuthoredEssay(Essay):
    """Essay annotated with its owner's display name."""
    
    author: str
