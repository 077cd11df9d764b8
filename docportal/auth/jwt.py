"""
Operator bearer tokens.

Tokens are signed JWTs carrying the operator name (`sub`) and a `scope`.
Document, tenant and analysis routes only accept the operator scope.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timedelta, timezone

from jose import ExpiredSignatureError, JWTError, jwt

from docportal.core import AppError, ErrorCode, ErrorReason
from docportal.core.config import settings

logger = logging.getLogger("docportal.auth")

OPERATOR_SCOPE = "portal:operator"


def create_access_token(
    *,
    subject: str,
    scope: str = OPERATOR_SCOPE,
    expires_minutes: int | None = None,
) -> str:
    issued_at = datetime.now(timezone.utc)
    ttl = timedelta(minutes=expires_minutes or settings.JWT_ACCESS_TOKEN_EXPIRES_MINUTES)
    claims = {
        "sub": subject,
        "scope": scope,
        "jti": uuid.uuid4().hex,
        "iat": issued_at,
        "exp": issued_at + ttl,
    }
    return jwt.encode(claims, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def _rejected(message: str) -> AppError:
    return AppError(
        code=ErrorCode.UNAUTHORIZED,
        reason=ErrorReason.AUTH_INVALID,
        message=message,
        status_code=401,
    )


def decode_access_token(token: str) -> dict:
    """Verify signature and expiry; returns the claims or raises a 401 AppError."""
    try:
        claims = jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except ExpiredSignatureError:
        raise _rejected("Token expired")
    except JWTError as e:
        logger.info("auth.token_rejected", extra={"error": str(e)})
        raise _rejected("Invalid token")

    if not claims.get("sub"):
        raise _rejected("Token has no subject")
    return claims
