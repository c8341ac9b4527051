"""Client-side joins of profile summaries onto rows from other tables."""
from supabase import AsyncClient
from pulse.modules.profiles.schemas import ProfileSummary
from typing import Dict, Iterable, Optional
import logging

logger = logging.getLogger(__name__)

PROFILE_SUMMARY_COLUMNS = "id, username, display_name, avatar_url"


async def fetch_profile_summaries(supabase: AsyncClient, user_ids: Iterable[str]) -> Dict[str, ProfileSummary]:
    """One batched lookup for the distinct ids. Skips the round trip when there is nothing to look up."""
    ids = list(dict.fromkeys(i for i in user_ids if i))
    if not ids:
        return {}
    result = await supabase.table("profiles")\
        .select(PROFILE_SUMMARY_COLUMNS)\
        .in_("id", ids)\
        .execute()
    return {p["id"]: ProfileSummary(**p) for p in (result.data or [])}


async def fetch_own_summary(supabase: AsyncClient, user_id: str) -> Optional[ProfileSummary]:
    """Viewer's own summary for locally appended rows. A failed lookup leaves the row without an author."""
    try:
        result = await supabase.table("profiles")\
            .select(PROFILE_SUMMARY_COLUMNS)\
            .eq("id", user_id)\
            .maybe_single()\
            .execute()
    except Exception as e:
        logger.warning(f"Could not load profile {user_id} for local append: {e}")
        return None
    if result is None or not result.data:
        return None
    return ProfileSummary(**result.data)
