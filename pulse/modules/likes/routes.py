from fastapi import APIRouter, Depends
from pulse.core.dependencies import get_session
from pulse.core.sessions import UserSession
from pulse.modules.likes.schemas import LikeStatus, ToggleLikeResult

router = APIRouter(prefix="/likes", tags=["likes"])


async def _loaded(session: UserSession, refresh: bool = False):
    store = session.likes
    if refresh or store.loading:
        await store.fetch_likes()
    return store


@router.get("/posts/{post_id}", response_model=LikeStatus)
async def get_like_status(
    post_id: str,
    refresh: bool = False,
    session: UserSession = Depends(get_session),
):
    store = await _loaded(session, refresh)
    return LikeStatus(post_id=post_id, liked=store.is_liked(post_id), count=store.get_like_count(post_id))


@router.post("/posts/{post_id}/toggle", response_model=ToggleLikeResult)
async def toggle_like(
    post_id: str,
    session: UserSession = Depends(get_session),
):
    """Like or unlike, depending on whether the caller already likes the post"""
    store = await _loaded(session)
    return await store.toggle_like(post_id)
