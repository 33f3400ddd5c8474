"""
Authentication dependencies shared by the routers

Tokens are issued by the platform auth service and signed with JWT_SECRET;
this API only verifies them.
"""
from datetime import datetime, timedelta, timezone
from typing import Optional
from uuid import UUID
import logging

from fastapi import Depends, HTTPException
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
from sqlalchemy.orm import Session

from career_hub.config import settings
from career_hub.database import get_db
from career_hub.models import User

logger = logging.getLogger(__name__)

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login")
optional_oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login", auto_error=False)


def create_access_token(user_id: UUID, role: str = "user", expires_delta: timedelta = timedelta(days=7)) -> str:
    """Sign a token the same way the auth service does"""
    payload = {
        "id": str(user_id),
        "role": role,
        "exp": datetime.now(timezone.utc) + expires_delta,
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def _user_from_token(token: str, db: Session) -> User:
    try:
        payload = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
        user_id = UUID(payload.get("id", ""))
    except (JWTError, ValueError, TypeError, AttributeError) as e:
        logger.warning(f"Rejected token: {str(e)}")
        raise HTTPException(status_code=401, detail="Not authorized, token failed")

    user = db.get(User, user_id)
    if not user or not user.is_active:
        raise HTTPException(status_code=401, detail="Not authorized, user not found or inactive")
    return user


async def get_current_user(
    token: str = Depends(oauth2_scheme),
    db: Session = Depends(get_db)
) -> User:
    return _user_from_token(token, db)


async def get_optional_user(
    token: Optional[str] = Depends(optional_oauth2_scheme),
    db: Session = Depends(get_db)
) -> Optional[User]:
    """Current user for public endpoints that show more to signed-in callers"""
    if not token:
        return None
    return _user_from_token(token, db)


async def require_admin(user: User = Depends(get_current_user)) -> User:
    if not user.is_admin:
        raise HTTPException(status_code=403, detail="Admin access required")
    return user
