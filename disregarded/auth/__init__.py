"""
Authentication and authorization.

- TokenService: issues/verifies stateless session tokens
- CredentialStore: registration and password checks
- require_auth / optional_auth: FastAPI dependencies resolving AuthContext
"""

from disregarded.auth.context import AuthContext
from disregarded.auth.credentials import CredentialStore
from disregarded.auth.jwt import Claims, TokenResponse, TokenService
from disregarded.auth.passwords import PasswordHasher
from disregarded.auth.policies import can_read, optional_auth, require_auth
from disregarded.auth.routes import router as auth_router

__all__ = [
    # Main interface
    "require_auth",
    "optional_auth",
    "can_read",
    "AuthContext",
    # Services
    "TokenService",
    "CredentialStore",
    "PasswordHasher",
    # Types
    "Claims",
    "TokenResponse",
    # Router
    "auth_router",
]
