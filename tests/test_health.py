import unittest
from unittest.mock import MagicMock
from fastapi.testclient import TestClient
from app import app
from database.db import get_db

class TestHealthEndpoint(unittest.TestCase):
    def setUp(self):
        self.client = TestClient(app)

    def tearDown(self):
        app.dependency_overrides = {}

    def test_health_status_ok(self):
        response = self.client.get("/health")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"status": "ok"})

    def test_ready_when_database_answers(self):
        mock_db = MagicMock()
        app.dependency_overrides[get_db] = lambda: mock_db

        response = self.client.get("/health/ready")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"status": "ok", "database": "ok"})
        mock_db.execute.assert_called_once()

    def test_not_ready_when_database_fails(self):
        mock_db = MagicMock()
        mock_db.execute.side_effect = RuntimeError("connection refused")
        app.dependency_overrides[get_db] = lambda: mock_db

        response = self.client.get("/health/ready")

        self.assertEqual(response.status_code, 503)
        self.assertEqual(response.json(), {"status": "unavailable", "database": "down"})

if __name__ == "__main__":
    unittest.main()
