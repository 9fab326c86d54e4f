"""FastAPI authentication dependencies.

Every authenticated request is also logged as a site visit.
"""

from __future__ import annotations

import jwt
import structlog
from fastapi import Depends, HTTPException, Request, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from matcha.auth.session_token import decode_session_token
from matcha.config import get_settings
from matcha.database import get_session
from matcha.db.models import User
from matcha.net import client_ip
from matcha.visits.service import record_visit

logger = structlog.get_logger()

_bearer = HTTPBearer(auto_error=False)


async def get_current_user(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Security(_bearer),
    db: AsyncSession = Depends(get_session),
) -> User:
    """
    Decode the bearer session token and return the User model.

    Raises 401 for a missing/invalid token or unknown user, 403 for
    unverified or banned accounts. Records a site visit on success.
    """
    if credentials is None or credentials.scheme.lower() != "bearer" or not credentials.credentials:
        raise HTTPException(status_code=401, detail="Missing or invalid Authorization header")

    try:
        payload = decode_session_token(credentials.credentials)
    except jwt.InvalidTokenError as e:
        logger.info("session_token_rejected", reason=str(e))
        raise HTTPException(status_code=401, detail="Invalid or expired session token") from e

    user = await db.get(User, payload["user_id"])
    if user is None:
        raise HTTPException(status_code=401, detail="Invalid user")
    if not user.is_email_verified:
        raise HTTPException(status_code=403, detail="Email not verified")
    if user.is_banned:
        raise HTTPException(status_code=403, detail="Account is banned")

    await record_visit(db, user.id, client_ip(request), request.headers.get("User-Agent"))
    await db.commit()
    return user


async def require_admin(user: User = Depends(get_current_user)) -> User:
    """Same as get_current_user but restricted to the configured admin account."""
    if user.username != get_settings().admin_username:
        raise HTTPException(status_code=403, detail="Admin access required")
    return user
