import hashlib
from types import SimpleNamespace

import pytest
from fastapi import HTTPException

from conftest import VIEWER_ID
from pulse.database import supabase_client
from pulse.database.supabase_client import SupabaseClient
from pulse.modules.auth import service
from pulse.modules.auth.service import AuthService, clear_auth_cache


class _FakeAuth:
    def __init__(self, valid_tokens):
        self.valid_tokens = valid_tokens
        self.calls = 0

    async def get_user(self, jwt=None):
        self.calls += 1
        if jwt not in self.valid_tokens:
            raise Exception("invalid JWT: token is expired")
        user = SimpleNamespace(id=VIEWER_ID, email="viewer@example.com", user_metadata=None)
        return SimpleNamespace(user=user)


def _cache_key(token):
    return hashlib.sha256(token.encode()).hexdigest()


@pytest.fixture(autouse=True)
def empty_auth_cache():
    clear_auth_cache()
    yield
    clear_auth_cache()


@pytest.fixture
def fake_auth():
    return _FakeAuth({"token-a", "token-b"})


class TestAuthService:
    @pytest.mark.asyncio
    async def test_valid_token_is_cached(self, fake_auth):
        auth_service = AuthService(SimpleNamespace(auth=fake_auth))

        first = await auth_service.get_current_user("token-a")
        second = await auth_service.get_current_user("token-a")

        assert first["id"] == VIEWER_ID
        assert first["access_token"] == "token-a"
        assert first["user_metadata"] == {}
        assert second == first
        assert fake_auth.calls == 1

    @pytest.mark.asyncio
    async def test_invalid_token_is_unauthorized(self, fake_auth):
        auth_service = AuthService(SimpleNamespace(auth=fake_auth))

        with pytest.raises(HTTPException) as exc:
            await auth_service.get_current_user("forged")

        assert exc.value.status_code == 401
        assert _cache_key("forged") not in service._AUTH_USER_CACHE

    @pytest.mark.asyncio
    async def test_full_cache_drops_expired_entries_to_admit_new_token(self, fake_auth):
        for i in range(service._AUTH_CACHE_MAX_SIZE):
            service._AUTH_USER_CACHE[f"stale-{i}"] = ({}, 0.0)
        auth_service = AuthService(SimpleNamespace(auth=fake_auth))

        await auth_service.get_current_user("token-b")

        assert list(service._AUTH_USER_CACHE) == [_cache_key("token-b")]

    @pytest.mark.asyncio
    async def test_full_cache_of_live_entries_still_verifies(self, fake_auth):
        for i in range(service._AUTH_CACHE_MAX_SIZE):
            service._AUTH_USER_CACHE[f"live-{i}"] = ({}, float("inf"))
        auth_service = AuthService(SimpleNamespace(auth=fake_auth))

        user = await auth_service.get_current_user("token-b")

        assert user["id"] == VIEWER_ID
        assert _cache_key("token-b") not in service._AUTH_USER_CACHE


class _FakeRealtime:
    def __init__(self):
        self.tokens = []

    async def set_auth(self, token):
        self.tokens.append(token)


class TestSupabaseClient:
    @pytest.fixture(autouse=True)
    def fresh_shared_client(self, monkeypatch):
        created = []

        async def fake_acreate_client(url, key, options=None):
            client = SimpleNamespace(options=options, realtime=_FakeRealtime())
            created.append(client)
            return client

        monkeypatch.setattr(supabase_client, "acreate_client", fake_acreate_client)
        SupabaseClient.reset_client()
        yield created
        SupabaseClient.reset_client()

    @pytest.mark.asyncio
    async def test_shared_client_created_once_until_reset(self, fresh_shared_client):
        first = await SupabaseClient.get_client()
        again = await SupabaseClient.get_client()
        SupabaseClient.reset_client()
        rebuilt = await SupabaseClient.get_client()

        assert first is again
        assert rebuilt is not first
        assert len(fresh_shared_client) == 2

    @pytest.mark.asyncio
    async def test_user_client_carries_token(self):
        client = await SupabaseClient.create_user_client("token-a")

        assert client.options.headers["Authorization"] == "Bearer token-a"
        assert client.realtime.tokens == ["token-a"]
