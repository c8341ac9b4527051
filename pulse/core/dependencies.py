"""
Core dependencies: bearer-token authentication and the per-user store session
"""

from fastapi import Depends, Security
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from supabase import AsyncClient
from pulse.core.sessions import SessionRegistry, UserSession
from pulse.database.supabase_client import SupabaseClient, get_supabase
from pulse.modules.auth.service import AuthService
from typing import Dict, Any
import logging

logger = logging.getLogger(__name__)

security = HTTPBearer()

session_registry = SessionRegistry(SupabaseClient.create_user_client)


def get_session_registry() -> SessionRegistry:
    return session_registry


def get_auth_service(supabase: AsyncClient = Depends(get_supabase)) -> AuthService:
    return AuthService(supabase)


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Security(security),
    auth_service: AuthService = Depends(get_auth_service)
) -> Dict[str, Any]:
    """Extract current user info from JWT token"""
    return await auth_service.get_current_user(credentials.credentials)


async def get_session(
    user_data: Dict[str, Any] = Depends(get_current_user),
    registry: SessionRegistry = Depends(get_session_registry),
) -> UserSession:
    """The caller's stores; local caches survive between requests until the session is dropped or evicted."""
    return await registry.get_or_create(user_data["id"], user_data["access_token"])
