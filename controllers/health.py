from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from database.db import get_db, ping_db

router = APIRouter()

@router.get("/health")
def health():
    """
    Liveness probe for the SafeSkin server
    """
    return {"status": "ok"}


@router.get("/health/ready")
def ready(db: Session = Depends(get_db)):
    """
    Readiness: the accounts/history database answers
    """
    if not ping_db(db):
        return JSONResponse({"status": "unavailable", "database": "down"}, status_code=503)
    return {"status": "ok", "database": "ok"}
