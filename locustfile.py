from locust import HttpUser, task, between
import os
import random
import string
from requests.auth import HTTPBasicAuth

from client.history import history_form
from client.results import parse_prediction


def random_email() -> str:
    return "user_" + "".join(random.choice(string.ascii_lowercase) for _ in range(8)) + "@example.com"


class SafeSkinUser(HttpUser):
    wait_time = between(0.5, 1.5)

    def on_start(self):
        email = os.getenv("LOADTEST_USER") or random_email()
        password = os.getenv("LOADTEST_PASS") or "loadtest-password"
        # signup answers 409 for an existing account, which is fine here
        self.client.post("/auth/signup", json={"email": email, "password": password})
        self.auth = HTTPBasicAuth(email, password)

        self.sample_image_path = os.getenv("LOADTEST_IMAGE", "mole.jpg")
        self.sample_image = None
        if os.path.exists(self.sample_image_path):
            with open(self.sample_image_path, "rb") as f:
                self.sample_image = f.read()

    @task(2)
    def health(self):
        self.client.get("/health")

    @task(6)
    def predict_and_save(self):
        if self.sample_image is None:
            return
        files = {"file": (os.path.basename(self.sample_image_path), self.sample_image, "image/jpeg")}
        with self.client.post("/api/predict", files=files, catch_response=True) as resp:
            if resp.status_code != 200:
                resp.failure(f"predict failed: {resp.status_code}")
                return
            data = resp.json()
        self.client.post(
            "/history",
            files=files,
            data=history_form(parse_prediction(data)),
            auth=self.auth,
            name="/history [save]",
        )

    @task(3)
    def list_history(self):
        self.client.get("/history", auth=self.auth, name="/history [list]")
