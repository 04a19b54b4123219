from typing import Optional

from supabase import create_client, Client
from habitflow.core.config import settings


# Supabase client, created on first use so imports never need credentials
_client: Optional[Client] = None

def get_client() -> Client:
    global _client
    if _client is None:
        if not settings.supabase_url or not settings.supabase_key:
            raise RuntimeError("SUPABASE_URL and SUPABASE_KEY must be configured")
        _client = create_client(settings.supabase_url, settings.supabase_key)
    return _client

# Dependency for getting database client
async def get_database() -> Client:
    return get_client()
