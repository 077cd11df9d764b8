# docportal/routers/auth.py
import hmac
import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from docportal.auth.deps import require_admin_token
from docportal.auth.jwt import create_access_token
from docportal.core import AppError, ErrorCode, ErrorReason
from docportal.core.config import settings

logger = logging.getLogger("docportal.auth")

router = APIRouter(prefix="/auth", tags=["auth"])


class LoginRequest(BaseModel):
    username: str
    password: str


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in_minutes: int


class OperatorRead(BaseModel):
    username: str
    scope: str
    expires_at: datetime


def _matches(given: str, expected: str) -> bool:
    return hmac.compare_digest(given.encode(), expected.encode())


@router.post("/login", response_model=TokenResponse)
def login(req: LoginRequest) -> TokenResponse:
    username_ok = _matches(req.username, settings.ADMIN_USERNAME)
    password_ok = _matches(req.password, settings.ADMIN_PASSWORD)
    if not (username_ok and password_ok):
        logger.warning("auth.login_failed", extra={"username": req.username})
        raise AppError(
            code=ErrorCode.UNAUTHORIZED,
            reason=ErrorReason.AUTH_INVALID,
            message="Invalid credentials",
            status_code=401,
        )

    return TokenResponse(
        access_token=create_access_token(subject=settings.ADMIN_USERNAME),
        expires_in_minutes=settings.JWT_ACCESS_TOKEN_EXPIRES_MINUTES,
    )


@router.get("/me", response_model=OperatorRead)
def whoami(claims: dict = Depends(require_admin_token)) -> OperatorRead:
    return OperatorRead(
        username=claims["sub"],
        scope=claims["scope"],
        expires_at=datetime.fromtimestamp(claims["exp"], tz=timezone.utc),
    )
