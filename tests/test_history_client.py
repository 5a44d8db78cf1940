import asyncio
import unittest

import httpx

from client.history import HistoryClient, HistoryItem, HistoryView, history_form
from client.identity import HttpIdentityProvider
from client.results import parse_prediction
from client.session import IdentitySession

ROWS = [
    {
        "id": "b",
        "user_id": 5,
        "image_url": "https://cdn.example.com/5/2.jpg",
        "label": "Malignant",
        "confidence": 0.66,
        "created_at": "2026-10-19T10:00:00+00:00",
    },
    {
        "id": "a",
        "user_id": 5,
        "image_url": None,
        "label": "Benign",
        "confidence": None,
        "created_at": "2026-10-18T09:30:00",
    },
]


class TestHistoryClient(unittest.TestCase):
    def setUp(self):
        self.requests = []
        self.history_response = httpx.Response(200, json=ROWS)

    def handler(self, request):
        self.requests.append(request)
        if request.url.path == "/auth/login":
            return httpx.Response(200, json={"uid": 5, "email": "ana@example.com"})
        return self.history_response

    def load(self, login=True):
        async def scenario():
            transport = httpx.MockTransport(self.handler)
            provider = HttpIdentityProvider("http://testserver", transport=transport)
            async with IdentitySession(provider) as session:
                await session.wait_ready()
                if login:
                    await provider.login_with_email("ana@example.com", "pw123456")
                return await HistoryClient("http://testserver", transport=transport).load(session)

        return asyncio.run(scenario())

    def test_logged_out_state_without_network(self):
        view = self.load(login=False)

        self.assertEqual(view, HistoryView(logged_in=False))
        self.assertEqual(self.requests, [])

    def test_items_keep_server_order(self):
        view = self.load()

        self.assertTrue(view.logged_in)
        self.assertIsNone(view.error)
        self.assertEqual([item.id for item in view.items], ["b", "a"])
        self.assertEqual(view.items[0].confidence_percent, "66.0%")
        self.assertFalse(view.items[0].is_benign)
        self.assertIsNone(view.items[1].confidence_percent)
        self.assertTrue(view.items[1].is_benign)

        history_request = self.requests[-1]
        self.assertEqual(history_request.url.path, "/history")
        self.assertIn("authorization", history_request.headers)

    def test_empty_history_is_not_logged_out(self):
        self.history_response = httpx.Response(200, json=[])

        view = self.load()

        self.assertEqual(view, HistoryView(logged_in=True, items=[]))

    def test_failure_is_reported(self):
        self.history_response = httpx.Response(500, text="boom")

        view = self.load()

        self.assertTrue(view.logged_in)
        self.assertEqual(view.items, [])
        self.assertEqual(view.error, "Failed to load history.")

    def test_load_waits_for_first_auth_notification(self):
        async def scenario():
            transport = httpx.MockTransport(self.handler)
            provider = HttpIdentityProvider("http://testserver", transport=transport)
            await provider.login_with_email("ana@example.com", "pw123456")
            session = IdentitySession(provider)
            await session.start()
            try:
                still_loading = session.loading
                view = await HistoryClient("http://testserver", transport=transport).load(session)
            finally:
                session.stop()
            return still_loading, view

        still_loading, view = asyncio.run(scenario())

        self.assertTrue(still_loading)
        self.assertTrue(view.logged_in)
        self.assertEqual([item.id for item in view.items], ["b", "a"])

    def test_history_form_keeps_parsed_fields(self):
        self.assertEqual(
            history_form(parse_prediction({"label": "", "probability": 0.25})),
            {"label": "", "confidence": "0.25"},
        )
        self.assertEqual(
            history_form(parse_prediction({"prediction": "Benign"})),
            {"label": "Benign", "confidence": "0.0"},
        )

    def test_history_item_from_dict(self):
        item = HistoryItem.from_dict(ROWS[0])

        self.assertEqual(item.label, "Malignant")
        self.assertEqual(item.created_at.year, 2026)
        self.assertIsNotNone(item.created_at.tzinfo)


if __name__ == "__main__":
    unittest.main()
