import os
import tempfile
import unittest
from datetime import timedelta

import httpx

import store.auth as auth
import store.client as store_client
from fakes import FakeStoreMixin
from store.errors import NetworkError
from store.models import Seller
from utils.config import Settings, set_settings
from utils.session import SessionStore

LUIS = {"id": "u1", "name": "Luis", "email": "luis@mw.com", "phone": "1", "active": True}


class AuthTestCase(FakeStoreMixin, unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        super().setUp()
        self.temp_dir = tempfile.TemporaryDirectory()
        self.sessions = SessionStore(
            path=os.path.join(self.temp_dir.name, "session.sqlite"),
            ttl=timedelta(minutes=120),
        )
        self.store.auth.accounts["luis@mw.com"] = ("pw", "u1")
        self.store.tables["sellers"] = [dict(LUIS)]

    def tearDown(self):
        self.temp_dir.cleanup()
        super().tearDown()

    async def test_login_saves_session(self):
        seller = await auth.login("  luis@mw.com ", "pw", self.sessions)
        self.assertEqual(seller, Seller("Luis", "luis@mw.com", "1", id="u1"))
        self.assertEqual(await self.sessions.load(), seller)

    async def test_login_keeps_identity_tokens(self):
        await auth.login("luis@mw.com", "pw", self.sessions)
        self.assertEqual(await self.sessions.load_tokens(), ("at-u1", "rt-u1"))

    async def test_resume_restores_identity_session(self):
        await auth.login("luis@mw.com", "pw", self.sessions)
        seller = await auth.resume(self.sessions)
        self.assertEqual(seller.email, "luis@mw.com")
        self.assertEqual(self.store.auth.restored, [("at-u1", "rt-u1")])

    async def test_resume_with_rejected_tokens_ends_session(self):
        await auth.login("luis@mw.com", "pw", self.sessions)
        self.store.auth.revoked.add("at-u1")
        self.assertIsNone(await auth.resume(self.sessions))
        self.assertIsNone(await self.sessions.load())

    async def test_resume_offline_keeps_session(self):
        await auth.login("luis@mw.com", "pw", self.sessions)
        self.store.auth_fail_with = httpx.ConnectError("offline")
        self.assertEqual((await auth.resume(self.sessions)).id, "u1")
        self.assertIsNotNone(await self.sessions.load())

    async def test_resume_without_session(self):
        self.assertIsNone(await auth.resume(self.sessions))
        self.assertEqual(self.store.auth.restored, [])

    async def test_bad_credentials(self):
        self.assertIsNone(await auth.login("luis@mw.com", "wrong", self.sessions))
        self.assertIsNone(await auth.login("nadie@mw.com", "pw", self.sessions))
        self.assertIsNone(await self.sessions.load())

    async def test_network_failure_raises(self):
        self.store.auth_fail_with = httpx.ConnectError("offline")
        with self.assertRaises(NetworkError):
            await auth.login("luis@mw.com", "pw", self.sessions)

    async def test_inactive_seller_is_signed_out(self):
        await self.sessions.save(Seller("Luis", "luis@mw.com", "1", id="u1"))
        self.store.tables["sellers"][0]["active"] = False

        self.assertIsNone(await auth.login("luis@mw.com", "pw", self.sessions))
        self.assertEqual(self.store.auth.sign_outs, 1)
        self.assertIsNone(await self.sessions.load())

    async def test_identity_without_seller_row(self):
        self.store.auth.accounts["eva@mw.com"] = ("pw", "u2")
        self.assertIsNone(await auth.login("eva@mw.com", "pw", self.sessions))
        self.assertEqual(self.store.auth.sign_outs, 1)

    async def test_logout_clears_session_and_identity(self):
        await auth.login("luis@mw.com", "pw", self.sessions)
        await auth.logout(self.sessions)
        self.assertIsNone(await self.sessions.load())
        self.assertEqual(self.store.auth.sign_outs, 1)


class UnconfiguredAuthTestCase(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        set_settings(Settings())
        store_client.reset()
        self.temp_dir = tempfile.TemporaryDirectory()
        self.sessions = SessionStore(path=os.path.join(self.temp_dir.name, "s.sqlite"))

    def tearDown(self):
        self.temp_dir.cleanup()
        set_settings(None)
        store_client.reset()

    async def test_unreachable_store_is_network_error(self):
        with self.assertRaises(NetworkError):
            await auth.login("luis@mw.com", "pw", self.sessions)


if __name__ == "__main__":
    unittest.main()
