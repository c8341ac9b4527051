from fastapi import APIRouter, Depends
from pulse.core.dependencies import get_session
from pulse.core.sessions import UserSession
from pulse.modules.comments.schemas import Comment, CommentCreate
from typing import List

router = APIRouter(prefix="/posts/{post_id}/comments", tags=["comments"])


@router.get("", response_model=List[Comment])
async def list_comments(
    post_id: str,
    refresh: bool = False,
    session: UserSession = Depends(get_session),
):
    """Comments on a post, oldest first"""
    store = session.comments(post_id)
    if refresh or store.loading:
        await store.fetch_comments()
    return store.comments


@router.post("", response_model=Comment, status_code=201)
async def add_comment(
    post_id: str,
    comment: CommentCreate,
    session: UserSession = Depends(get_session),
):
    return await session.comments(post_id).add_comment(comment.content)
