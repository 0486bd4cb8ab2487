import itertools
import unittest

from aiohttp.test_utils import TestClient, TestServer

from menutree import MemoryClient
from menutree.webhook import MENU_KEY, create_app

from .menu_util import build_menu, callback_for


def _start_update(user_id: int, language_code: str | None = None) -> dict:
    sender = {"id": user_id}
    if language_code is not None:
        sender["language_code"] = language_code
    return {
        "update_id": 1,
        "message": {"message_id": 1, "from": sender, "chat": {"id": user_id}, "text": "/start"},
    }


class WebhookTests(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self):
        clock = itertools.count(1000)
        self.bot = MemoryClient()
        self.menu = build_menu(self.bot, now_func=lambda: next(clock))
        self.menu.build_all()
        self.app = create_app(self.menu, start_text="Choose")
        self.server = TestServer(self.app)
        await self.server.start_server()
        self.client = TestClient(self.server)
        await self.client.start_server()

    async def asyncTearDown(self):
        await self.client.close()
        await self.server.close()

    async def test_healthz(self):
        resp = await self.client.get("/healthz")
        self.assertEqual(resp.status, 200)
        self.assertEqual(await resp.text(), "ok")

    async def test_start_creates_dialog(self):
        resp = await self.client.post("/v1/updates", json=_start_update(11, "fr"))

        self.assertEqual(resp.status, 200)
        session = self.menu.get_dialog(11)
        self.assertIsNotNone(session)
        self.assertEqual(session.locale, "fr")
        self.assertIs(session.position, self.menu.root)
        self.assertEqual(self.bot.sent[0].text, "Choose")
        self.assertIs(self.app[MENU_KEY], self.menu)

    async def test_start_with_unbuilt_language_uses_default(self):
        await self.client.post("/v1/updates", json=_start_update(12, "de"))

        self.assertEqual(self.menu.get_dialog(12).locale, "en")

    async def test_callback_query_is_dispatched(self):
        await self.client.post("/v1/updates", json=_start_update(13))
        alpha = self.menu.find("A")
        callback = callback_for(self.menu, 13, alpha, callback_id="q1")
        update = {
            "update_id": 2,
            "callback_query": {
                "id": callback.id,
                "from": {"id": 13},
                "data": callback.data,
                "message": {"message_id": callback.message.message_id, "chat": {"id": 13}, "text": "Choose"},
            },
        }

        resp = await self.client.post("/v1/updates", json=update)

        self.assertEqual(resp.status, 200)
        self.assertEqual(self.bot.responded, ["q1"])
        self.assertIs(self.menu.get_dialog(13).position, alpha)
        self.assertEqual(self.bot.edits[-1].markup, alpha.markup("en"))

    async def test_malformed_json_is_rejected(self):
        resp = await self.client.post("/v1/updates", data="{not json", headers={"Content-Type": "application/json"})

        self.assertEqual(resp.status, 400)
        self.assertEqual((await resp.json())["code"], "invalid_request")

    async def test_malformed_callback_query_is_rejected(self):
        for query in ({"id": "q", "data": "x"}, {"id": "q", "from": {"id": "nope"}, "data": "x"}):
            resp = await self.client.post("/v1/updates", json={"update_id": 4, "callback_query": query})

            self.assertEqual(resp.status, 400)
            self.assertEqual((await resp.json())["code"], "invalid_request")
        self.assertEqual(self.bot.responded, [])

    async def test_stop_ends_dialog(self):
        await self.client.post("/v1/updates", json=_start_update(14))
        update = _start_update(14)
        update["message"]["text"] = "/stop"

        resp = await self.client.post("/v1/updates", json=update)

        self.assertEqual(resp.status, 200)
        self.assertIsNone(self.menu.get_dialog(14))

    async def test_other_updates_are_accepted_and_ignored(self):
        resp = await self.client.post("/v1/updates", json={"update_id": 3, "message": {"text": "hello"}})

        self.assertEqual(resp.status, 200)
        self.assertEqual(self.bot.sent, [])


if __name__ == "__main__":
    unittest.main()
