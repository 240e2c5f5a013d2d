# app/core/supabase_client.py
from supabase import AsyncClient, acreate_client

from app.core.config import Settings


async def supabase_public(settings: Settings) -> AsyncClient:
    """
    Create an async Supabase client with the anon/public key.

    This is the only client the storefront uses: every query runs with the
    signed-in user's session, so row-level security applies.
    """
    return await acreate_client(settings.SUPABASE_URL, settings.SUPABASE_KEY)
