import asyncio
import dataclasses
import io
import os
import tempfile
import unittest
from datetime import date, time, timedelta

from PIL import Image
from postgrest.exceptions import APIError

import store.gateway as gateway
from fakes import FakeStoreMixin
from store.models import Appointment, Client, Product, Sale
from utils.session import SessionStore
from utils.state import STORE_INQUIRY_PREFIX, AppState

APPT_ROWS = [
    {"id": "a1", "client_name": "Ana", "date": "2024-01-03", "time": "09:00:00",
     "service": "Corte", "status": "pending", "notes": None, "seller_id": "u1"},
    {"id": "a2", "client_name": "Beto", "date": "2024-01-05", "time": "10:00:00",
     "service": "Tinte", "status": "pending", "notes": None, "seller_id": None},
]


def api_error():
    return APIError({"message": "boom", "code": "500", "hint": None, "details": None})


class AppStateTestCase(FakeStoreMixin, unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        super().setUp()
        self.temp_dir = tempfile.TemporaryDirectory()
        self.state = AppState(
            sessions=SessionStore(
                path=os.path.join(self.temp_dir.name, "session.sqlite"),
                ttl=timedelta(minutes=120),
            )
        )
        self.store.tables["appointments"] = [dict(r) for r in APPT_ROWS]
        self.store.tables["sellers"] = [
            {"id": "u1", "name": "Luis", "email": "luis@mw.com", "phone": "1", "active": True},
        ]
        self.store.auth.accounts["luis@mw.com"] = ("pw", "u1")

    def tearDown(self):
        self.temp_dir.cleanup()
        super().tearDown()

    # ---------- Session ----------

    async def test_login_restore_logout(self):
        self.assertIsNone(await self.state.restore())
        seller = await self.state.login("luis@mw.com", "pw")
        self.assertEqual(seller.name, "Luis")

        fresh = AppState(sessions=self.state.sessions)
        self.assertEqual(await fresh.restore(), seller)
        self.assertEqual(self.store.auth.restored, [("at-u1", "rt-u1")])

        await self.state.load_all()
        await self.state.logout()
        self.assertIsNone(self.state.user)
        self.assertEqual(self.state.appointments, [])
        self.assertIsNone(await fresh.restore())

    async def test_load_all(self):
        await self.state.load_all()
        self.assertEqual([a.id for a in self.state.appointments], ["a1", "a2"])
        self.assertEqual(len(self.state.sellers), 1)
        self.assertEqual(self.state.products, [])

    async def test_load_all_failure_leaves_empty_collections(self):
        self.store.fail_with = api_error()
        await self.state.load_all()
        self.assertEqual(self.state.appointments, [])

    # ---------- Creates ----------

    async def test_create_failure_leaves_collection_untouched(self):
        await self.state.load_all()
        before = list(self.state.appointments)
        self.store.fail_with = api_error()
        created = await self.state.add_appointment(
            Appointment("Carla", date(2024, 1, 6), time(11, 0), "Corte")
        )
        self.assertIsNone(created)
        self.assertEqual(self.state.appointments, before)

    async def test_create_appends_stored_entity(self):
        created = await self.state.add_client(Client("Carla", "c@x.com", "3"))
        self.assertTrue(created.id)
        self.assertEqual(self.state.clients, [created])

    async def test_add_sale_computes_total(self):
        sale = Sale("p1", "c1", "u1", date(2024, 2, 1), "Cash", 100.0, extra_costs=15.25, total=0.0)
        created = await self.state.add_sale(sale)
        self.assertEqual(created.total, 115.25)
        self.assertEqual(self.store.tables["sales"][0]["total"], 115.25)

    async def test_add_product_with_images(self):
        buffer = io.BytesIO()
        Image.new("RGB", (1600, 800), "blue").save(buffer, format="PNG")
        created, failures = await self.state.add_product(
            Product("Mesa", 80.0, "Hogar"), [buffer.getvalue(), b"broken"]
        )
        self.assertEqual(len(failures), 1)
        self.assertEqual(len(created.images), 1)
        self.assertTrue(created.cover.startswith("data:image/jpeg;base64,"))
        self.assertEqual(self.state.products, [created])

    # ---------- Optimistic mutations ----------

    async def test_status_change_is_visible_during_call(self):
        await self.state.load_all()
        seen = {}

        async def slow_status(id, status):
            seen["status"] = next(a.status for a in self.state.appointments if a.id == id)
            seen["pending"] = set(self.state.pending)
            return True

        orig = gateway.set_appointment_status
        gateway.set_appointment_status = slow_status
        try:
            self.assertTrue(await self.state.change_appointment_status("a1", "completed"))
        finally:
            gateway.set_appointment_status = orig

        self.assertEqual(seen, {"status": "completed", "pending": {"a1"}})
        self.assertEqual(self.state.appointments[0].status, "completed")
        self.assertEqual(self.state.pending, set())

    async def test_status_change_reverted_on_failure(self):
        await self.state.load_all()
        self.store.fail_with = api_error()
        self.assertFalse(await self.state.change_appointment_status("a1", "completed"))
        self.assertEqual(self.state.appointments[0].status, "pending")
        self.assertEqual(self.state.pending, set())

    async def test_delete_reverted_on_failure(self):
        await self.state.load_all()
        seen = []

        async def failing_delete(id):
            seen.append([a.id for a in self.state.appointments])
            return False

        orig = gateway.delete_appointment
        gateway.delete_appointment = failing_delete
        try:
            self.assertFalse(await self.state.delete_appointment("a2"))
        finally:
            gateway.delete_appointment = orig

        self.assertEqual(seen, [["a1"]])
        self.assertEqual([a.id for a in self.state.appointments], ["a1", "a2"])

    async def test_cancelled_status_change_is_reverted(self):
        await self.state.load_all()
        started, release = asyncio.Event(), asyncio.Event()

        async def hanging_status(id, status):
            started.set()
            await release.wait()
            return True

        orig = gateway.set_appointment_status
        gateway.set_appointment_status = hanging_status
        try:
            task = asyncio.create_task(
                self.state.change_appointment_status("a1", "completed")
            )
            await started.wait()
            self.assertEqual(self.state.appointments[0].status, "completed")
            task.cancel()
            with self.assertRaises(asyncio.CancelledError):
                await task
        finally:
            gateway.set_appointment_status = orig

        self.assertEqual(self.state.appointments[0].status, "pending")
        self.assertEqual(self.store.tables["appointments"][0]["status"], "pending")
        self.assertEqual(self.state.pending, set())

    async def test_cancelled_delete_is_reverted(self):
        await self.state.load_all()
        started = asyncio.Event()

        async def hanging_delete(id):
            started.set()
            await asyncio.Event().wait()

        orig = gateway.delete_appointment
        gateway.delete_appointment = hanging_delete
        try:
            task = asyncio.create_task(self.state.delete_appointment("a1"))
            await started.wait()
            task.cancel()
            with self.assertRaises(asyncio.CancelledError):
                await task
        finally:
            gateway.delete_appointment = orig

        self.assertEqual([a.id for a in self.state.appointments], ["a1", "a2"])

    async def test_revert_keeps_concurrent_edits(self):
        await self.state.load_all()
        added = Appointment("Carla", date(2024, 1, 6), time(11, 0), "Corte", id="a3")

        async def failing_delete(id):
            # another change lands on the collection while the delete is in flight
            self.state.appointments = [
                dataclasses.replace(a, notes="movida") if a.id == "a2" else a
                for a in self.state.appointments
            ] + [added]
            return False

        orig = gateway.delete_appointment
        gateway.delete_appointment = failing_delete
        try:
            self.assertFalse(await self.state.delete_appointment("a1"))
        finally:
            gateway.delete_appointment = orig

        self.assertEqual([a.id for a in self.state.appointments], ["a1", "a2", "a3"])
        self.assertEqual(self.state.appointments[1].notes, "movida")

    async def test_failed_status_change_keeps_later_status(self):
        await self.state.load_all()

        async def failing_status(id, status):
            self.state.appointments = [
                dataclasses.replace(a, status="cancelled") if a.id == id else a
                for a in self.state.appointments
            ]
            return False

        orig = gateway.set_appointment_status
        gateway.set_appointment_status = failing_status
        try:
            self.assertFalse(await self.state.change_appointment_status("a1", "completed"))
        finally:
            gateway.set_appointment_status = orig

        self.assertEqual(self.state.appointments[0].status, "cancelled")

    async def test_delete_keeps_dependents_resolvable(self):
        await self.state.load_all()
        self.assertEqual(self.state.seller_name("u1"), "Luis")
        self.assertTrue(await self.state.delete_seller("u1"))
        self.assertEqual(self.state.sellers, [])
        self.assertEqual(self.state.appointments[0].seller_id, "u1")
        self.assertEqual(self.state.seller_name("u1"), "-")
        self.assertEqual(self.state.client_name("c9"), "Cliente Eliminado")
        self.assertEqual(self.state.product_name("p9"), "Producto Eliminado")

    # ---------- Profile / storefront ----------

    async def test_update_profile(self):
        await self.state.login("luis@mw.com", "pw")
        await self.state.load_all()

        updated = await self.state.update_profile(phone="555", password="")
        self.assertEqual(updated.phone, "555")
        self.assertEqual(self.store.calls[-1][2], {"phone": "555"})
        self.assertEqual(self.state.user.phone, "555")
        self.assertEqual(self.state.sellers[0].phone, "555")
        self.assertEqual((await self.state.sessions.load()).phone, "555")

    async def test_update_profile_logged_out(self):
        self.assertIsNone(await self.state.update_profile(phone="555"))

    async def test_store_inquiry(self):
        product = Product("Lámpara", 25.0, "Hogar", id="p1")
        client = await self.state.submit_store_inquiry("Carla", "c@x.com", "3", product)
        self.assertEqual(client.address, f"{STORE_INQUIRY_PREFIX}Lámpara")
        self.assertEqual(self.store.tables["clients"][0]["address"], "Interesado en: Lámpara")


if __name__ == "__main__":
    unittest.main()
