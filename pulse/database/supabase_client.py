from supabase import acreate_client, AsyncClient, AsyncClientOptions
from pulse.config.settings import settings


class SupabaseClient:
    _client: AsyncClient = None

    @classmethod
    async def get_client(cls) -> AsyncClient:
        if cls._client is None:
            cls._client = await acreate_client(settings.supabase_url, settings.supabase_key)
        return cls._client

    @classmethod
    async def create_user_client(cls, access_token: str) -> AsyncClient:
        """Client acting as the signed-in user; row-level security applies to every call."""
        client = await acreate_client(
            settings.supabase_url,
            settings.supabase_key,
            options=AsyncClientOptions(headers={"Authorization": f"Bearer {access_token}"}),
        )
        await client.realtime.set_auth(access_token)
        return client

    @classmethod
    def reset_client(cls):
        cls._client = None


async def get_supabase() -> AsyncClient:
    return await SupabaseClient.get_client()
