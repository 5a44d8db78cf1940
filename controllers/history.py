from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from sqlalchemy.orm import Session

from database.db import get_db
from dependencies.auth import get_current_user_id
from queries.queries import query_history_by_user
from services.history import HistorySaveError, save_to_history

router = APIRouter()


@router.get("/history")
def get_history(
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """
    Saved screenings of the current user, newest first.
    """
    return [item.to_dict() for item in query_history_by_user(db, user_id)]


@router.post("/history", status_code=201)
def create_history_item(
    file: UploadFile = File(...),
    label: str = Form(...),
    confidence: Optional[float] = Form(None),
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    if not label.strip():
        raise HTTPException(status_code=400, detail="Label is required.")

    content = file.file.read()
    try:
        item = save_to_history(
            db=db,
            user_id=user_id,
            content=content,
            filename=file.filename,
            content_type=file.content_type,
            label=label,
            confidence=confidence,
        )
    except HistorySaveError as exc:
        raise HTTPException(status_code=500, detail=str(exc))

    return item.to_dict()
