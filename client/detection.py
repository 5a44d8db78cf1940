import mimetypes
import os
import tempfile
from pathlib import Path
from typing import Optional

import httpx

from client.history import HistoryClient, HistoryError, SelectedFile
from client.results import PredictionResult, parse_prediction
from client.session import IdentitySession


ANALYSIS_FAILED = "Analysis failed. Please try again."
GENERIC_FAILURE = "Something went wrong. Please try again."
NO_FILE = "Please upload a skin photo first."
LOGIN_TO_SAVE = "Please log in to save this result to your history."
DETECT_BEFORE_SAVE = "Run a detection before saving to history."
SAVED = "Saved to your history."


class DetectionWorkflow:
    """State behind the detection page.

    Every selection and every detection bumps ``_seq``; a proxy response
    that arrives after a newer request was issued is dropped.
    """

    def __init__(
        self,
        base_url: str = "http://localhost:8080",
        session: Optional[IdentitySession] = None,
        history: Optional[HistoryClient] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.session = session
        self.history = history or HistoryClient(base_url, transport=transport)
        self._transport = transport

        self.selected_file: Optional[SelectedFile] = None
        self.preview_url: Optional[str] = None
        self.result: Optional[PredictionResult] = None
        self.error: Optional[str] = None
        self.save_message: Optional[str] = None
        self.is_detecting = False
        self.is_saving = False

        self._preview_path: Optional[str] = None
        self._seq = 0

    @property
    def confidence_percent(self) -> Optional[str]:
        return self.result.confidence_percent if self.result else None

    @property
    def is_benign(self) -> bool:
        return bool(self.result and self.result.is_benign)

    def select_file(self, path: str) -> None:
        with open(path, "rb") as f:
            content = f.read()
        filename = os.path.basename(path)
        content_type = mimetypes.guess_type(filename)[0] or "image/jpeg"

        self._seq += 1
        self.selected_file = SelectedFile(filename=filename, content=content, content_type=content_type)
        self.result = None
        self.error = None
        self.save_message = None
        self._replace_preview(content, os.path.splitext(filename)[1])

    def _replace_preview(self, content: bytes, suffix: str) -> None:
        with tempfile.NamedTemporaryFile(prefix="safeskin-preview-", suffix=suffix, delete=False) as tmp:
            tmp.write(content)
            new_path = tmp.name
        self.release_preview()
        self._preview_path = new_path
        self.preview_url = Path(new_path).as_uri()

    def release_preview(self) -> None:
        if self._preview_path:
            try:
                os.remove(self._preview_path)
            except FileNotFoundError:
                pass
        self._preview_path = None
        self.preview_url = None

    def close(self) -> None:
        self.release_preview()

    async def run_detection(self) -> None:
        if self.selected_file is None:
            self.error = NO_FILE
            return
        if self.is_detecting:
            return

        self._seq += 1
        seq = self._seq
        selected = self.selected_file
        try:
            self.is_detecting = True
            self.error = None
            self.save_message = None

            files = {"file": (selected.filename, selected.content, selected.content_type)}
            async with httpx.AsyncClient(base_url=self.base_url, transport=self._transport) as client:
                res = await client.post("/api/predict", files=files)

            if seq != self._seq:
                return
            if not res.is_success:
                self.result = None
                self.error = ANALYSIS_FAILED
                return

            self.result = parse_prediction(res.json())
        except Exception as exc:
            print(f" [!] Detection failed: {exc!r}")
            if seq == self._seq:
                self.result = None
                self.error = str(exc) or GENERIC_FAILURE
        finally:
            self.is_detecting = False

    async def save_to_history(self) -> None:
        user = self.session.user if self.session else None
        if user is None:
            self.error = LOGIN_TO_SAVE
            return
        if self.selected_file is None or self.result is None:
            self.error = DETECT_BEFORE_SAVE
            return
        if self.is_saving:
            return

        try:
            self.is_saving = True
            self.error = None
            self.save_message = None
            await self.history.save(self.session.provider.auth, self.selected_file, self.result)
            self.save_message = SAVED
        except HistoryError as exc:
            self.error = str(exc) or "Could not save to history."
        finally:
            self.is_saving = False
