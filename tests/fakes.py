import itertools
from contextlib import asynccontextmanager
from types import SimpleNamespace
from typing import Any, Dict, List, Optional

from supabase import AuthInvalidCredentialsError

import store.auth as auth
import store.gateway as gateway


class FakeQuery:
    """Chainable stand-in for a table query builder, backed by FakeStore.tables."""

    def __init__(self, store: "FakeStore", table: str):
        self.store = store
        self.table = table
        self.op = "select"
        self.payload: Optional[Dict[str, Any]] = None
        self.filters: List[tuple] = []
        self._limit: Optional[int] = None

    def select(self, *columns):
        self.op = "select"
        return self

    def insert(self, row):
        self.op, self.payload = "insert", dict(row)
        return self

    def update(self, patch):
        self.op, self.payload = "update", dict(patch)
        return self

    def delete(self):
        self.op = "delete"
        return self

    def eq(self, column, value):
        self.filters.append((column, value))
        return self

    def limit(self, n):
        self._limit = n
        return self

    async def execute(self):
        self.store.calls.append((self.op, self.table, self.payload, list(self.filters)))
        if self.store.fail_with is not None:
            raise self.store.fail_with

        rows = self.store.tables.setdefault(self.table, [])
        matched = [r for r in rows if all(r.get(c) == v for c, v in self.filters)]

        if self.op == "select":
            data = [dict(r) for r in matched][: self._limit]
        elif self.op == "insert":
            new = dict(self.payload, id=str(next(self.store.ids)))
            rows.append(new)
            data = [dict(new)]
        elif self.op == "update":
            for r in matched:
                r.update(self.payload)
            data = [dict(r) for r in matched]
        else:
            for r in matched:
                rows.remove(r)
            data = [dict(r) for r in matched]
        return SimpleNamespace(data=data)


class FakeAuth:
    def __init__(self, store: "FakeStore"):
        self.store = store
        self.accounts: Dict[str, tuple] = {}  # email -> (password, uid)
        self.sign_outs = 0
        self.restored: List[tuple] = []
        self.revoked: set = set()

    async def sign_in_with_password(self, credentials):
        if self.store.auth_fail_with is not None:
            raise self.store.auth_fail_with
        account = self.accounts.get(credentials["email"])
        if account is None or account[0] != credentials["password"]:
            raise AuthInvalidCredentialsError("Invalid login credentials")
        uid = account[1]
        return SimpleNamespace(
            user=SimpleNamespace(id=uid),
            session=SimpleNamespace(access_token=f"at-{uid}", refresh_token=f"rt-{uid}"),
        )

    async def set_session(self, access_token, refresh_token):
        if self.store.auth_fail_with is not None:
            raise self.store.auth_fail_with
        if access_token in self.revoked:
            raise AuthInvalidCredentialsError("Invalid Refresh Token")
        self.restored.append((access_token, refresh_token))

    async def sign_out(self):
        self.sign_outs += 1


class FakeStore:
    """In-memory replacement for the Supabase client used by the store package."""

    def __init__(self):
        self.tables: Dict[str, List[Dict[str, Any]]] = {}
        self.calls: List[tuple] = []
        self.fail_with: Optional[BaseException] = None
        self.auth_fail_with: Optional[BaseException] = None
        self.ids = itertools.count(1)
        self.auth = FakeAuth(self)

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)


class FakeStoreMixin:
    """Routes store.gateway and store.auth to a fresh FakeStore per test."""

    def setUp(self):
        super().setUp()
        self.store = FakeStore()

        @asynccontextmanager
        async def fake_connect():
            yield self.store

        self._orig_connects = (gateway.connect, auth.connect)
        gateway.connect = fake_connect
        auth.connect = fake_connect

    def tearDown(self):
        gateway.connect, auth.connect = self._orig_connects
        super().tearDown()
