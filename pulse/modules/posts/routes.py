from fastapi import APIRouter, Depends, HTTPException, UploadFile, File, Form
from pydantic import ValidationError
from pulse.core.dependencies import get_session
from pulse.core.sessions import UserSession
from pulse.modules.media.schemas import MediaFile
from pulse.modules.posts.schemas import Post, PostCreate
from typing import List, Optional

router = APIRouter(prefix="/posts", tags=["posts"])


@router.get("", response_model=List[Post])
async def list_posts(
    personalized: bool = False,
    author_id: Optional[str] = None,
    refresh: bool = False,
    session: UserSession = Depends(get_session),
):
    """Feed, newest first; personalized re-sorts by the caller's interests"""
    store = session.posts
    if refresh or store.loading:
        await store.fetch_posts()
    if author_id:
        return store.posts_by_author(author_id)
    if personalized:
        profile = session.profile.profile or await session.profile.fetch_profile()
        return store.personalized_feed(profile.interests)
    return store.posts


@router.post("", response_model=Post, status_code=201)
async def create_post(
    caption: Optional[str] = Form(None),
    location: Optional[str] = Form(None),
    mood: Optional[str] = Form(None),
    is_disappearing: bool = Form(False),
    image_url: Optional[str] = Form(None),
    video_url: Optional[str] = Form(None),
    file: Optional[UploadFile] = File(None),
    session: UserSession = Depends(get_session),
):
    """Create a post from a caption, a media file, or both"""
    try:
        post_data = PostCreate(
            caption=caption,
            location=location,
            mood=mood,
            is_disappearing=is_disappearing,
            image_url=image_url,
            video_url=video_url,
        )
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=e.errors()[0]["msg"])

    media = None
    if file is not None and file.filename:
        media = MediaFile(
            filename=file.filename,
            content=await file.read(),
            content_type=file.content_type or "application/octet-stream",
        )
    return await session.posts.create_post(post_data, media)
