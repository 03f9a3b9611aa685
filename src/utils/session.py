# durable, client-held session record with an absolute expiry
from __future__ import annotations

import dataclasses
import json
import os
from contextlib import asynccontextmanager
from datetime import datetime, timedelta
from typing import AsyncIterator, Optional, Tuple

import aiosqlite

from store.models import Seller
from utils.config import get_settings
from utils.logger import get_logger

_logger = get_logger(__name__)

SESSION_KEY = "current_user"

# identity service (access_token, refresh_token)
Tokens = Tuple[str, str]


class SessionStore:
    """
    Keeps one named record {user, expires_at, tokens} in a local SQLite file.

    load() treats an expired record and an unreadable one the same way: it
    deletes the record and reports no session.
    """

    def __init__(
        self,
        path: Optional[str] = None,
        ttl: Optional[timedelta] = None,
        key: str = SESSION_KEY,
    ) -> None:
        settings = get_settings()
        self.path = path or settings.session_db_path
        self.ttl = ttl if ttl is not None else settings.session_ttl
        self.key = key

    @asynccontextmanager
    async def _connect(self) -> AsyncIterator[aiosqlite.Connection]:
        folder = os.path.dirname(self.path)
        if folder:
            os.makedirs(folder, exist_ok=True)
        conn = await aiosqlite.connect(self.path)
        try:
            await conn.execute(
                """
                CREATE TABLE IF NOT EXISTS kv_store (
                    name  TEXT PRIMARY KEY,
                    value TEXT NOT NULL
                );
                """
            )
            yield conn
        finally:
            await conn.close()

    async def _read(self) -> Optional[dict]:
        async with self._connect() as conn:
            cur = await conn.execute(
                "SELECT value FROM kv_store WHERE name = ?;", (self.key,)
            )
            row = await cur.fetchone()
            await cur.close()
        if not row:
            return None
        try:
            data = json.loads(row[0])
        except ValueError:
            return {}
        return data if isinstance(data, dict) else {}

    async def save(
        self,
        user: Seller,
        when: Optional[datetime] = None,
        tokens: Optional[Tokens] = None,
    ) -> datetime:
        """
        Persist `user` until `when + ttl` and return that expiry.

        `tokens` are the identity service's (access, refresh) pair; when
        omitted, the pair already on record is kept.
        """
        when = when or datetime.now()
        expires_at = when + self.ttl
        user_fields = dataclasses.asdict(user)
        user_fields.pop("password", None)
        record = {"user": user_fields, "expires_at": expires_at.isoformat()}
        if tokens is None:
            tokens = await self.load_tokens()
        if tokens is not None:
            record["tokens"] = {"access_token": tokens[0], "refresh_token": tokens[1]}
        async with self._connect() as conn:
            await conn.execute(
                "INSERT OR REPLACE INTO kv_store(name, value) VALUES (?, ?);",
                (self.key, json.dumps(record)),
            )
            await conn.commit()
        return expires_at

    async def load(self, when: Optional[datetime] = None) -> Optional[Seller]:
        """Return the saved user while the session is still valid, else None."""
        when = when or datetime.now()
        data = await self._read()
        if data is None:
            return None

        try:
            expires_at = datetime.fromisoformat(data["expires_at"])
            user = Seller(**data["user"])
        except (ValueError, KeyError, TypeError) as e:
            _logger.warning(f"Discarding unreadable session record: {e}")
            await self.clear()
            return None

        if when >= expires_at:
            _logger.info(f"Session for {user.email} expired at {expires_at:%X}.")
            await self.clear()
            return None
        return user

    async def load_tokens(self) -> Optional[Tokens]:
        """The (access, refresh) pair on record, None if absent or unreadable."""
        data = await self._read()
        try:
            tokens = data["tokens"]
            return str(tokens["access_token"]), str(tokens["refresh_token"])
        except (KeyError, TypeError):
            return None

    async def clear(self) -> None:
        async with self._connect() as conn:
            await conn.execute("DELETE FROM kv_store WHERE name = ?;", (self.key,))
            await conn.commit()
