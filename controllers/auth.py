from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from database.db import get_db
from dependencies.auth import authenticate, get_current_user_id, hash_password
from queries.queries import create_user, query_user_by_email, query_user_by_id

router = APIRouter(prefix="/auth")


class Credentials(BaseModel):
    email: str = ""
    password: str = ""


def _user_payload(user):
    return {"uid": user.id, "email": user.email}


@router.post("/signup", status_code=201)
def sign_up(body: Credentials, db: Session = Depends(get_db)):
    email = body.email.strip()
    if not email or not body.password:
        raise HTTPException(status_code=400, detail="Please fill in email and password.")

    if query_user_by_email(db, email):
        raise HTTPException(status_code=409, detail="Email already in use.")

    try:
        user = create_user(db, email, hash_password(body.password))
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail="Email already in use.")
    return _user_payload(user)


@router.post("/login")
def login(body: Credentials, db: Session = Depends(get_db)):
    email = body.email.strip()
    if not email or not body.password:
        raise HTTPException(status_code=400, detail="Please fill in email and password.")
    return _user_payload(authenticate(db, email, body.password))


@router.get("/me")
def me(
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    user = query_user_by_id(db, user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return _user_payload(user)
