"""
Auth context - who is making the request.

This is the lightweight object passed to route handlers and services.
An anonymous context has no account.
"""

from __future__ import annotations

from dataclasses import dataclass

from disregarded.auth.jwt import Claims


@dataclass(frozen=True)
class AuthContext:
    """
    Identity attached to a request.
    
    Usage in routes:
        async def my_route(ctx: AuthContext = Depends(require_auth())):
            print(f"Account {ctx.account_id} ({ctx.account_name})")
    """
    
    account_id: int | None = None
    account_name: str | None = None
    
    @property
    def is_authenticated(self) -> bool:
        return self.account_id is not None
    
    @property
    def is_anonymous(self) -> bool:
        return self.account_id is None
    
    @classmethod
    def anonymous(cls) -> AuthContext:
        """Create an anonymous context (no account)."""
        return cls()
    
    @classmethod
    def from_claims(cls, claims: Claims) -> AuthContext:
        return cls(account_id=claims.account_id, account_name=claims.account_name)
