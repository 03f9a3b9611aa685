# manages the shared connection to the remote store, internal to the store package
import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from supabase import AsyncClient, acreate_client

from store.errors import StoreNotConfiguredError
from utils.config import get_settings
from utils.logger import get_logger

_logger = get_logger(__name__)

_client: Optional[AsyncClient] = None
_init_lock = asyncio.Lock()


async def _create_client() -> AsyncClient:
    settings = get_settings()
    if not settings.store_configured:
        raise StoreNotConfiguredError(
            "Supabase URL or anon key missing; set SUPABASE_URL and SUPABASE_ANON_KEY."
        )
    _logger.info(f"Connecting to store at {settings.supabase_url}...")
    return await acreate_client(settings.supabase_url, settings.supabase_key)


@asynccontextmanager
async def connect() -> AsyncIterator[AsyncClient]:
    """Async context manager yielding the process-wide Supabase client.

    The client is created on first use and reused afterwards; the identity
    session it carries lives as long as the process does.
    """
    global _client
    if _client is None:
        async with _init_lock:
            if _client is None:
                _client = await _create_client()
    yield _client


def reset() -> None:
    """Forget the shared client so the next connect() builds a new one."""
    global _client
    _client = None
