from fastapi import APIRouter, Depends
from pulse.core.dependencies import get_current_user, get_session, get_session_registry
from pulse.core.sessions import SessionRegistry, UserSession
from pulse.modules.auth.schemas import CurrentUserResponse
from typing import Dict

router = APIRouter(prefix="/auth", tags=["auth"])


@router.get("/me", response_model=CurrentUserResponse)
async def get_me(
    current_user: Dict = Depends(get_current_user),
    session: UserSession = Depends(get_session),
):
    """Current authenticated user, opening their session if needed"""
    return CurrentUserResponse(
        user_id=current_user["id"],
        email=current_user.get("email"),
        session_active=True,
        unread_messages=session.inbox.total_unread,
    )


@router.delete("/session", status_code=204)
async def close_session(
    current_user: Dict = Depends(get_current_user),
    registry: SessionRegistry = Depends(get_session_registry),
):
    """Drop cached stores and the realtime subscription; the next request starts from a fresh fetch"""
    await registry.drop(current_user["id"])
    return None
