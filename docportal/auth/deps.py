# docportal/auth/deps.py
import logging

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from docportal.auth.jwt import OPERATOR_SCOPE, decode_access_token
from docportal.core import AppError, ErrorCode, ErrorReason, forbidden
from docportal.core.config import settings

logger = logging.getLogger("docportal.auth")

bearer = HTTPBearer(auto_error=False)


def require_admin_token(
    creds: HTTPAuthorizationCredentials | None = Depends(bearer),
) -> dict:
    """Claims of the portal operator; anything else is a 401 or 403."""
    if creds is None or not creds.credentials:
        raise AppError(
            code=ErrorCode.UNAUTHORIZED,
            reason=ErrorReason.AUTH_REQUIRED,
            message="Missing Authorization: Bearer token",
            status_code=401,
        )

    claims = decode_access_token(creds.credentials)
    if claims["sub"] != settings.ADMIN_USERNAME or claims.get("scope") != OPERATOR_SCOPE:
        logger.warning("auth.forbidden", extra={"sub": claims["sub"], "scope": claims.get("scope")})
        raise forbidden(ErrorReason.AUTH_FORBIDDEN, message="Operator token required")
    return claims
