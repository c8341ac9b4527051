from fastapi import APIRouter, Depends, UploadFile, File
from pulse.core.dependencies import get_session
from pulse.core.sessions import UserSession
from pulse.modules.media.schemas import MediaFile
from pulse.modules.profiles.schemas import Profile, ProfileSummary, ProfileUpdate
from pulse.modules.profiles.store import filter_profiles
from typing import List, Optional

router = APIRouter(prefix="/profiles", tags=["profiles"])


@router.get("", response_model=List[Profile])
async def list_profiles(
    q: Optional[str] = None,
    session: UserSession = Depends(get_session),
):
    """Explore: everyone except the caller, most followed first, optionally filtered by name or bio"""
    profiles = await session.profile.list_profiles()
    return filter_profiles(profiles, q) if q else profiles


@router.get("/search", response_model=List[ProfileSummary])
async def search_profiles(
    q: str,
    limit: int = 10,
    session: UserSession = Depends(get_session),
):
    """Username / display name lookup for tagging users"""
    return await session.profile.search_profiles(q, limit=limit)


@router.get("/me", response_model=Profile)
async def get_my_profile(
    refresh: bool = False,
    session: UserSession = Depends(get_session),
):
    store = session.profile
    if refresh or store.profile is None:
        return await store.fetch_profile()
    return store.profile


@router.put("/me", response_model=Profile)
async def update_my_profile(
    updates: ProfileUpdate,
    session: UserSession = Depends(get_session),
):
    return await session.profile.update_profile(updates)


@router.post("/me/avatar", response_model=Profile)
async def upload_my_avatar(
    file: UploadFile = File(...),
    session: UserSession = Depends(get_session),
):
    """Replace the caller's avatar image"""
    media = MediaFile(
        filename=file.filename or "avatar",
        content=await file.read(),
        content_type=file.content_type or "application/octet-stream",
    )
    await session.profile.upload_avatar(media)
    return session.profile.profile


@router.get("/by-username/{username}", response_model=Profile)
async def get_profile_by_username(
    username: str,
    session: UserSession = Depends(get_session),
):
    return await session.profile.fetch_profile_by_username(username)


@router.get("/{user_id}", response_model=Profile)
async def get_profile(
    user_id: str,
    session: UserSession = Depends(get_session),
):
    return await session.profile.fetch_profile(user_id)
