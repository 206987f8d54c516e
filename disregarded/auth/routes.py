# =============================================================================
# Auth API Routes
# =============================================================================
#
# Endpoints:
#   POST /auth/register - Create account, get a token
#   POST /auth/login    - Get a token
#   POST /auth/logout   - Client-side only (tokens are not revocable)
#   GET  /auth/me       - Get current account
#
# Handlers are plain `def`: password hashing is CPU-bound and runs in
# the threadpool instead of on the event loop.
#
# =============================================================================

from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter, Depends, Request
from pydantic import AliasChoices, BaseModel, Field

from disregarded.auth.context import AuthContext
from disregarded.auth.credentials import CredentialStore
from disregarded.auth.jwt import TokenResponse, TokenService
from disregarded.auth.policies import get_token_service, require_auth
from disregarded.core.errors import NotFoundError
from disregarded.core.models import Account, AccountResponse

router = APIRouter(prefix="/auth", tags=["auth"])


def get_credential_store(request: Request) -> CredentialStore:
    return request.app.state.credentials


# =============================================================================
# Request/Response Models
# =============================================================================


class CredentialsRequest(BaseModel):
    name: str | None = Field(
        default=None,
        validation_alias=AliasChoices("name", "username"),
    )
    password: str | None = None


class MeResponse(BaseModel):
    id: int
    name: str
    created_at: datetime


def _token_response(message: str, account: Account, tokens: TokenService) -> TokenResponse:
    return TokenResponse(
        message=message,
        token=tokens.issue(account.id, account.name),
        account=AccountResponse.from_account(account),
    )


# =============================================================================
# Public Endpoints
# =============================================================================


@router.post("/register", response_model=TokenResponse)
def register(
    data: CredentialsRequest,
    credentials: CredentialStore = Depends(get_credential_store),
    tokens: TokenService = Depends(get_token_service),
):
    """
    Create a new account.

    Returns a session token on success.
    """
    account = credentials.register(data.name, data.password)
    return _token_response("Registration successful", account, tokens)


@router.post("/login", response_model=TokenResponse)
def login(
    data: CredentialsRequest,
    credentials: CredentialStore = Depends(get_credential_store),
    tokens: TokenService = Depends(get_token_service),
):
    """Authenticate and get a token."""
    account = credentials.verify(data.name, data.password)
    return _token_response("Login successful", account, tokens)


@router.post("/logout")
async def logout():
    """
    Logout (client should discard its token).

    Tokens are stateless and stay valid until they expire.
    """
    return {"message": "Logged out successfully"}


# =============================================================================
# Protected Endpoints
# =============================================================================


@router.get("/me", response_model=MeResponse)
def get_current_account(
    ctx: AuthContext = Depends(require_auth()),
    credentials: CredentialStore = Depends(get_credential_store),
):
    """Get the current authenticated account."""
    account = credentials.get_account(ctx.account_id)
    if account is None:
        raise NotFoundError("Account not found")

    return MeResponse(id=account.id, name=account.name, created_at=account.created_at)
