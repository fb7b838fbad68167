from supabase import create_client, Client
from teamtodo.config.settings import settings
from typing import Optional


class SupabaseClient:
    _client: Client = None
    _service_client: Client = None

    @classmethod
    def get_client(cls) -> Client:
        """Shared anon client; used for Supabase Auth calls"""
        if cls._client is None:
            cls._client = create_client(settings.supabase_url, settings.supabase_key)
        return cls._client

    @classmethod
    def get_service_client(cls) -> Optional[Client]:
        """Client with service_role key; bypasses RLS. Only for lookups that must see every tenant."""
        if cls._service_client is None and settings.supabase_service_role_key:
            cls._service_client = create_client(
                settings.supabase_url, settings.supabase_service_role_key
            )
        return cls._service_client

    @classmethod
    def get_user_client(cls, token: str) -> Client:
        """Fresh anon client whose PostgREST requests carry the caller's JWT, so RLS sees auth.uid()."""
        client = create_client(settings.supabase_url, settings.supabase_key)
        client.postgrest.auth(token)
        return client


def get_supabase() -> Client:
    return SupabaseClient.get_client()


def get_service_supabase() -> Optional[Client]:
    """None when no service key is configured; callers then fall back to their own client"""
    return SupabaseClient.get_service_client()
