"""Session tracking endpoints, called by the client on login and logout."""

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession

from matcha.auth.dependencies import get_current_user
from matcha.database import get_session
from matcha.db.models import User
from matcha.net import client_ip
from matcha.schemas import DataResponse
from matcha.sessions.schemas import SessionResponse
from matcha.sessions.service import end_session, get_active_session, start_session

router = APIRouter(prefix="/sessions", tags=["Sessions"])


@router.post("/start", response_model=DataResponse[SessionResponse], status_code=201)
async def start(
    request: Request,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    """Open a session for the current user, closing any session left open."""
    active = await get_active_session(db, user.id)
    if active is not None:
        await end_session(db, active.id)
    session = await start_session(db, user.id, client_ip(request), request.headers.get("User-Agent"))
    await db.commit()
    return DataResponse(data=SessionResponse.model_validate(session))


@router.post("/end", response_model=DataResponse[SessionResponse])
async def end(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    """Close the current user's active session."""
    active = await get_active_session(db, user.id)
    if active is None:
        raise HTTPException(status_code=404, detail="No active session")
    session = await end_session(db, active.id)
    await db.commit()
    return DataResponse(data=SessionResponse.model_validate(session))
