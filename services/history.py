import os
import time
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.orm import Session

from models.models import HistoryItem
from queries.queries import save_history_item
from services.s3 import get_public_url, upload_bytes_to_s3_key


UPLOAD_FAILED = "Failed to upload image to history."
INSERT_FAILED = "Failed to save result to history."


class HistorySaveError(Exception):
    """A save aborted; ``str(exc)`` is safe to show to the user."""


def build_object_key(user_id: int, filename: Optional[str], now_ms: Optional[int] = None) -> str:
    """``<user_id>/<epoch millis>.<ext>``, falling back to ``jpg``."""
    ext = os.path.splitext(filename or "")[1].lstrip(".")
    if not ext:
        ext = "jpg"
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    return f"{user_id}/{now_ms}.{ext}"


def save_to_history(
    db: Session,
    user_id: int,
    content: bytes,
    filename: Optional[str],
    content_type: Optional[str],
    label: str,
    confidence: Optional[float],
) -> HistoryItem:
    """Upload the image, resolve its URL, then append the history row.

    Each step starts only after the previous one finished. If the insert
    fails the uploaded object stays in the bucket.
    """
    try:
        key = build_object_key(user_id, filename)
        upload_bytes_to_s3_key(content, key, content_type=content_type or "image/jpeg", upsert=False)
        image_url = get_public_url(key)
    except Exception as exc:
        print(f" [!] History upload failed for user {user_id}: {exc}")
        raise HistorySaveError(UPLOAD_FAILED) from exc

    try:
        return save_history_item(
            db=db,
            user_id=user_id,
            image_url=image_url,
            label=label,
            confidence=confidence,
            created_at=datetime.now(timezone.utc),
        )
    except Exception as exc:
        db.rollback()
        print(f" [!] History insert failed for user {user_id} (object {key} kept): {exc}")
        raise HistorySaveError(INSERT_FAILED) from exc
