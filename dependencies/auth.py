# dependencies/auth.py

import hashlib
import hmac
import os
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBasic, HTTPBasicCredentials
from sqlalchemy.orm import Session

from database.db import get_db
from queries.queries import query_user_by_email

security = HTTPBasic(auto_error=False)

PBKDF2_ITERATIONS = 240_000


def hash_password(password: str, salt: Optional[bytes] = None) -> str:
    salt = salt or os.urandom(16)
    digest = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, PBKDF2_ITERATIONS)
    return f"{salt.hex()}${digest.hex()}"


def verify_password(password: str, password_hash: str) -> bool:
    try:
        salt_hex, digest_hex = password_hash.split("$", 1)
    except ValueError:
        return False
    expected = hash_password(password, bytes.fromhex(salt_hex)).split("$", 1)[1]
    return hmac.compare_digest(expected, digest_hex)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Basic"},
    )


def authenticate(db: Session, email: str, password: str):
    user = query_user_by_email(db, email)
    if not user:
        raise _unauthorized("Unknown user.")
    if not verify_password(password, user.password_hash):
        raise _unauthorized("Incorrect password.")
    return user


def get_current_user_id(
    credentials: Optional[HTTPBasicCredentials] = Depends(security),
    db: Session = Depends(get_db)
):
    if credentials is None or (not credentials.username and not credentials.password):
        raise _unauthorized("Not authenticated")

    if credentials.username and not credentials.password:
        raise _unauthorized("Password is required when username is provided.")

    user = authenticate(db, credentials.username, credentials.password)
    return user.id
