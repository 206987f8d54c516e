"""
Essay service - every essay operation with its authorization rules.

Rules:
- create: any authenticated account; new essays start as drafts
- read: published → anyone; draft → owner only; otherwise "not found"
- update / publish / unpublish / delete: owner only
    - someone else's essay → ForbiddenError
    - no such essay → NotFoundError
    - both take precedence over invalid input

Writes are conditional on ownership in a single storage call, so there
is no read-check-write window between two accounts.
"""

from __future__ import annotations

import logging

from tenacity import RetryError, Retrying, retry_if_exception_type, stop_after_attempt

from disregarded.auth.context import AuthContext
from disregarded.auth.policies import can_read
from disregarded.core.errors import (
    EssayNotFoundError,
    ForbiddenError,
    IdentifierExhaustedError,
    InvalidInputError,
    UnauthenticatedError,
)
from disregarded.core.models import AuthoredEssay, Essay, EssayStatus
from disregarded.core.utils import generate_short_id, utc_now
from disregarded.storage.base import EssayStorage, IdentifierCollision

logger = logging.getLogger(__name__)

# Literal paths under /documents that an essay ID must never shadow
RESERVED_IDS = frozenset({"public"})


class EssayService:
    """Owner-scoped essay operations."""

    def __init__(
        self,
        essays: EssayStorage,
        max_length: int = 500_000,
        id_length: int = 5,
        id_max_attempts: int = 100,
    ):
        self._essays = essays
        self.max_length = max_length
        self.id_length = id_length
        self.id_max_attempts = id_max_attempts

    # =========================================================================
    # Reads
    # =========================================================================

    def get(self, essay_id: str, ctx: AuthContext) -> AuthoredEssay:
        """Get an essay the caller is allowed to see."""
        essay = self._essays.get(essay_id)
        # Hidden drafts look exactly like missing essays
        if essay is None or not can_read(essay, ctx):
            raise EssayNotFoundError()
        return essay

    def list_mine(self, ctx: AuthContext) -> list[Essay]:
        """All of the caller's essays, drafts included."""
        account_id = self._require_account(ctx)
        return self._essays.list_by_owner(account_id)

    def list_public(self) -> list[AuthoredEssay]:
        return self._essays.list_published()

    # =========================================================================
    # Writes
    # =========================================================================

    def create(self, ctx: AuthContext, title: str | None, content: str | None) -> Essay:
        account_id = self._require_account(ctx)

        if title is None or not title.strip():
            raise InvalidInputError("Title is required")
        if not content:
            raise InvalidInputError("Content is required")
        self._check_length(content)

        try:
            for attempt in Retrying(
                stop=stop_after_attempt(self.id_max_attempts),
                retry=retry_if_exception_type(IdentifierCollision),
            ):
                with attempt:
                    essay_id = generate_short_id(self.id_length)
                    if essay_id in RESERVED_IDS:
                        raise IdentifierCollision(essay_id)
                    essay = self._essays.create(
                        essay_id, account_id, title.strip(), content, utc_now()
                    )
        except RetryError as e:
            logger.error(
                f"No free essay ID after {self.id_max_attempts} attempts "
                f"(length {self.id_length})"
            )
            raise IdentifierExhaustedError() from e

        logger.info(f"Account {account_id} created essay {essay.id}")
        return essay

    def update(
        self,
        essay_id: str,
        ctx: AuthContext,
        title: str | None = None,
        content: str | None = None,
    ) -> Essay:
        """Change title and/or content. Omitted fields are left as they are."""
        account_id = self._require_account(ctx)

        try:
            if title is not None:
                title = title.strip()
                if not title:
                    raise InvalidInputError("Title cannot be empty")
            if content is not None:
                self._check_length(content)
        except InvalidInputError:
            # Non-owners get 403/404 whatever they sent
            self._check_owner(essay_id, account_id)
            raise

        essay = self._essays.update_owned(essay_id, account_id, title, content, utc_now())
        if essay is None:
            self._raise_not_owned(essay_id)
        return essay

    def publish(self, essay_id: str, ctx: AuthContext) -> Essay:
        return self._set_status(essay_id, ctx, EssayStatus.PUBLISHED)

    def unpublish(self, essay_id: str, ctx: AuthContext) -> Essay:
        return self._set_status(essay_id, ctx, EssayStatus.DRAFT)

    def delete(self, essay_id: str, ctx: AuthContext) -> None:
        account_id = self._require_account(ctx)
        if not self._essays.delete_owned(essay_id, account_id):
            self._raise_not_owned(essay_id)
        logger.info(f"Account {account_id} deleted essay {essay_id}")

    # =========================================================================
    # Helpers
    # =========================================================================

    def _set_status(self, essay_id: str, ctx: AuthContext, status: EssayStatus) -> Essay:
        # Setting the current status again is allowed and simply succeeds
        account_id = self._require_account(ctx)
        essay = self._essays.set_status_owned(essay_id, account_id, status, utc_now())
        if essay is None:
            self._raise_not_owned(essay_id)
        return essay

    def _check_owner(self, essay_id: str, account_id: int) -> None:
        essay = self._essays.get(essay_id)
        if essay is None:
            raise EssayNotFoundError()
        if not essay.is_owned_by(account_id):
            raise ForbiddenError()

    def _raise_not_owned(self, essay_id: str) -> None:
        """Called after an owner-scoped write matched no row."""
        if self._essays.exists(essay_id):
            raise ForbiddenError()
        raise EssayNotFoundError()

    def _check_length(self, content: str) -> None:
        if len(content) > self.max_length:
            raise InvalidInputError(
                f"Essay content exceeds maximum length of {self.max_length} characters"
            )

    @staticmethod
    def _require_account(ctx: AuthContext) -> int:
        if ctx.account_id is None:
            raise UnauthenticatedError()
        return ctx.account_id
