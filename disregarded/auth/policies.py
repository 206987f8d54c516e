"""
Policies - request authentication and essay visibility.

Route handlers declare what they need:
    ctx: AuthContext = Depends(require_auth())    # 401 without a valid token
    ctx: AuthContext = Depends(optional_auth())   # anonymous if no valid token

Design:
- The bearer token comes from `Authorization: Bearer <token>`
- The TokenService lives on app.state and is shared by all requests
- Visibility rules for essays are plain functions over (essay, context)
"""

from __future__ import annotations

from typing import Callable

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from disregarded.auth.context import AuthContext
from disregarded.auth.jwt import TokenService
from disregarded.core.errors import InvalidTokenError, UnauthenticatedError
from disregarded.core.models import Essay


# Doesn't fail on a missing header; we decide per dependency
optional_bearer = HTTPBearer(auto_error=False)


def get_token_service(request: Request) -> TokenService:
    return request.app.state.tokens


# =============================================================================
# Authentication dependencies
# =============================================================================


def require_auth() -> Callable:
    """Require a valid bearer token."""
    return _create_dependency(required=True)


def optional_auth() -> Callable:
    """Attach identity when a valid token is present; never reject."""
    return _create_dependency(required=False)


def _create_dependency(required: bool) -> Callable:
    
    async def dependency(
        credentials: HTTPAuthorizationCredentials | None = Depends(optional_bearer),
        tokens: TokenService = Depends(get_token_service),
    ) -> AuthContext:
        if credentials is None:
            if required:
                raise UnauthenticatedError()
            return AuthContext.anonymous()
        
        claims = tokens.verify(credentials.credentials)
        if claims is None:
            if required:
                raise InvalidTokenError()
            return AuthContext.anonymous()
        
        return AuthContext.from_claims(claims)
    
    return dependency


# =============================================================================
# Essay policy
# =============================================================================


def can_read(essay: Essay, ctx: AuthContext) -> bool:
    """Published essays are public; drafts are visible to their owner only."""
    return essay.is_published or essay.is_owned_by(ctx.account_id)
