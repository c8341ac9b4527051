"""Interest-based re-sort of an already fetched feed."""
from pulse.modules.posts.schemas import Post
from typing import Iterable, List, Optional


def interest_score(post: Post, interests: Iterable[str]) -> int:
    """Number of interests appearing in the caption or location (case-insensitive)"""
    haystacks = [(post.caption or "").lower(), (post.location or "").lower()]
    score = 0
    for interest in interests:
        needle = interest.strip().lower()
        if needle and any(needle in h for h in haystacks):
            score += 1
    return score


def rank_by_interests(posts: List[Post], interests: Optional[List[str]]) -> List[Post]:
    """Higher score first, newest first within a score. Returns a new list."""
    interests = [i for i in (interests or []) if i and i.strip()]
    newest_first = sorted(posts, key=lambda p: p.created_at, reverse=True)
    if not interests:
        return newest_first
    return sorted(newest_first, key=lambda p: interest_score(p, interests), reverse=True)
