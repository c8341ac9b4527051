from fastapi import APIRouter, Depends
from pulse.core.dependencies import get_session
from pulse.core.sessions import UserSession
from pulse.modules.follows.schemas import Follow, FollowLists, FollowStatus

router = APIRouter(prefix="/follows", tags=["follows"])


@router.get("", response_model=FollowLists)
async def get_follows(
    refresh: bool = False,
    session: UserSession = Depends(get_session),
):
    """Caller's followers and the users they follow"""
    store = session.follows
    if refresh or store.loading:
        return await store.fetch_follows()
    return FollowLists(followers=store.followers, following=store.following)


@router.get("/{user_id}", response_model=FollowStatus)
async def get_follow_status(
    user_id: str,
    session: UserSession = Depends(get_session),
):
    store = session.follows
    if store.loading:
        await store.fetch_follows()
    return FollowStatus(user_id=user_id, is_following=store.is_following(user_id))


@router.post("/{user_id}", response_model=Follow, status_code=201)
async def follow_user(
    user_id: str,
    session: UserSession = Depends(get_session),
):
    store = session.follows
    if store.loading:
        await store.fetch_follows()
    return await store.follow_user(user_id)


@router.delete("/{user_id}", status_code=204)
async def unfollow_user(
    user_id: str,
    session: UserSession = Depends(get_session),
):
    await session.follows.unfollow_user(user_id)
    return None
