# =============================================================================
# Session Tokens
# =============================================================================
#
# Stateless HS256 JWTs:
#   - header.payload.signature, each base64url-encoded
#   - payload carries sub (account id), name, iat, exp
#   - nothing is stored server-side, so there is no revocation: a token
#     stays valid until exp even after logout or a password change
#
# =============================================================================

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Callable

import jwt
from pydantic import BaseModel

from disregarded.core.models import AccountResponse
from disregarded.core.utils import utc_now

logger = logging.getLogger(__name__)


# =============================================================================
# Models
# =============================================================================


class Claims(BaseModel):
    """Verified identity carried by a token."""
    account_id: int
    account_name: str
    issued_at: datetime
    expires_at: datetime


class TokenResponse(BaseModel):
    """Returned by register and login."""
    message: str
    token: str
    account: AccountResponse


# =============================================================================
# Token Service
# =============================================================================


class TokenService:
    """
    Issues and verifies session tokens.

    Refuses to construct without a secret so a misconfigured process
    fails at startup rather than on the first request.
    """

    # Fixed; not configurable per deployment
    ALGORITHM = "HS256"

    def __init__(
        self,
        secret: str,
        lifetime_seconds: int = 86400,
        clock: Callable[[], datetime] = utc_now,
    ):
        if not secret:
            raise ValueError("JWT secret is required")
        if lifetime_seconds <= 0:
            raise ValueError("Token lifetime must be positive")

        self._secret = secret
        self._clock = clock
        self.lifetime_seconds = lifetime_seconds

    def issue(self, account_id: int, account_name: str) -> str:
        """Create a signed token for an account."""
        now = self._clock()
        payload = {
            "sub": str(account_id),
            "name": account_name,
            "iat": int(now.timestamp()),
            "exp": int((now + timedelta(seconds=self.lifetime_seconds)).timestamp()),
        }
        return jwt.encode(payload, self._secret, algorithm=self.ALGORITHM)

    def verify(self, token: str) -> Claims | None:
        """
        Verify a token and return its claims.

        Returns None for anything that is not a well-formed, correctly
        signed, unexpired token. Never raises.
        """
        if not isinstance(token, str) or token.count(".") != 2:
            return None

        try:
            # Signature is checked here; expiry is checked below against
            # our own clock
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self.ALGORITHM],
                options={
                    "require": ["sub", "iat", "exp"],
                    "verify_exp": False,
                    "verify_iat": False,
                },
            )
            claims = Claims(
                account_id=int(payload["sub"]),
                account_name=payload["name"],
                issued_at=datetime.fromtimestamp(payload["iat"], tz=timezone.utc),
                expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
            )
        except jwt.InvalidTokenError as e:
            logger.debug(f"Rejected token: {e}")
            return None
        except (KeyError, TypeError, ValueError, OverflowError) as e:
            logger.debug(f"Rejected token with malformed claims: {e}")
            return None

        if self._clock() >= claims.expires_at:
            return None

        return claims
