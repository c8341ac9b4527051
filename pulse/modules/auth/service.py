import hashlib
import time
from supabase import AsyncClient
from pulse.config.settings import settings
from fastapi import HTTPException
from typing import Dict, Any

# In-memory cache for get_current_user to reduce Supabase auth calls (e.g. many parallel requests with same token)
_AUTH_USER_CACHE: Dict[str, tuple] = {}
_AUTH_CACHE_MAX_SIZE = 500


def clear_auth_cache() -> None:
    _AUTH_USER_CACHE.clear()


def _evict_expired(now: float) -> None:
    for key in [k for k, (_, expiry) in _AUTH_USER_CACHE.items() if now >= expiry]:
        del _AUTH_USER_CACHE[key]


class AuthService:
    """Verifies access tokens issued by Supabase Auth. Sign-up and sign-in stay with the platform."""

    def __init__(self, supabase: AsyncClient):
        self.supabase = supabase

    async def get_current_user(self, token: str) -> Dict[str, Any]:
        """Get current user details from Supabase Auth token. Uses short TTL cache to reduce auth API calls."""
        try:
            cache_key = hashlib.sha256(token.encode()).hexdigest()
            now = time.monotonic()
            if cache_key in _AUTH_USER_CACHE:
                user_data, expiry = _AUTH_USER_CACHE[cache_key]
                if now < expiry:
                    return user_data
                del _AUTH_USER_CACHE[cache_key]
            user_response = await self.supabase.auth.get_user(jwt=token)
            if not user_response or not user_response.user:
                raise HTTPException(status_code=401, detail="Invalid or expired token")
            user = user_response.user
            user_data = {
                "id": user.id,
                "email": user.email,
                "access_token": token,
                "user_metadata": user.user_metadata or {},
            }
            if len(_AUTH_USER_CACHE) >= _AUTH_CACHE_MAX_SIZE:
                _evict_expired(now)
            if len(_AUTH_USER_CACHE) < _AUTH_CACHE_MAX_SIZE:
                _AUTH_USER_CACHE[cache_key] = (user_data, now + settings.auth_cache_ttl_sec)
            return user_data
        except HTTPException:
            raise
        except Exception as e:
            error_msg = str(e)
            if "JWT" in error_msg or "expired" in error_msg.lower() or "invalid" in error_msg.lower():
                raise HTTPException(status_code=401, detail="Invalid or expired token")
            raise HTTPException(status_code=401, detail="Authentication failed")
