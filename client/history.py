from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

import httpx

from client.results import PredictionResult, format_confidence, is_benign_label
from client.session import IdentitySession


@dataclass(frozen=True)
class SelectedFile:
    filename: str
    content: bytes
    content_type: str = "image/jpeg"


@dataclass(frozen=True)
class HistoryItem:
    id: str
    user_id: int
    image_url: Optional[str]
    label: str
    confidence: Optional[float]
    created_at: datetime

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "HistoryItem":
        return cls(
            id=data["id"],
            user_id=data["user_id"],
            image_url=data.get("image_url"),
            label=data["label"],
            confidence=data.get("confidence"),
            created_at=datetime.fromisoformat(data["created_at"]),
        )

    @property
    def is_benign(self) -> bool:
        return is_benign_label(self.label)

    @property
    def confidence_percent(self) -> Optional[str]:
        if isinstance(self.confidence, bool) or not isinstance(self.confidence, (int, float)):
            return None
        return format_confidence(self.confidence)


@dataclass
class HistoryView:
    """What the history page renders.

    ``logged_in=False`` is the "please log in" state, distinct from a
    signed-in user with no saved screenings.
    """
    logged_in: bool
    items: List[HistoryItem] = field(default_factory=list)
    error: Optional[str] = None


class HistoryError(Exception):
    pass


def _detail(res: httpx.Response) -> Optional[str]:
    try:
        detail = res.json().get("detail")
    except (ValueError, AttributeError):
        return None
    return detail if isinstance(detail, str) else None


def history_form(result: PredictionResult) -> Dict[str, str]:
    """Form fields sent with a saved screening."""
    return {"label": result.label, "confidence": str(result.confidence)}


class HistoryClient:
    def __init__(self, base_url: str = "http://localhost:8080", transport: Optional[httpx.AsyncBaseTransport] = None) -> None:
        self.base_url = base_url.rstrip("/")
        self._transport = transport

    def _client(self, auth: Optional[httpx.BasicAuth]) -> httpx.AsyncClient:
        return httpx.AsyncClient(base_url=self.base_url, transport=self._transport, auth=auth)

    async def save(self, auth: httpx.BasicAuth, selected_file: SelectedFile, result: PredictionResult) -> HistoryItem:
        files = {"file": (selected_file.filename, selected_file.content, selected_file.content_type)}
        data = history_form(result)
        try:
            async with self._client(auth) as client:
                res = await client.post("/history", files=files, data=data)
        except httpx.HTTPError as exc:
            print(f" [!] Saving history failed: {exc!r}")
            raise HistoryError("Could not save to history.") from exc

        if not res.is_success:
            raise HistoryError(_detail(res) or "Could not save to history.")
        try:
            return HistoryItem.from_dict(res.json())
        except (ValueError, KeyError, TypeError) as exc:
            print(f" [!] Unexpected history save response: {exc!r}")
            raise HistoryError("Could not save to history.") from exc

    async def load(self, session: IdentitySession) -> HistoryView:
        # an unknown session is not the same as a signed-out one
        if session.loading:
            await session.wait_ready()
        if session.user is None:
            return HistoryView(logged_in=False)

        auth = session.provider.auth
        try:
            async with self._client(auth) as client:
                res = await client.get("/history")
            if not res.is_success:
                return HistoryView(logged_in=True, error=_detail(res) or "Failed to load history.")
            items = [HistoryItem.from_dict(row) for row in res.json()]
        except (httpx.HTTPError, ValueError, KeyError, TypeError) as exc:
            print(f" [!] Failed to load history: {exc!r}")
            return HistoryView(logged_in=True, error="Failed to load history.")
        return HistoryView(logged_in=True, items=items)
