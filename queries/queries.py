from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy.orm import Session
from models.models import HistoryItem, User


def create_user(db: Session, email: str, password_hash: str) -> User:
    user = User(email=email, password_hash=password_hash)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def query_user_by_email(db: Session, email: str) -> Optional[User]:
    return db.query(User).filter(User.email == email).first()


def query_user_by_id(db: Session, user_id: int) -> Optional[User]:
    return db.query(User).filter(User.id == user_id).first()



def save_history_item(
    db: Session,
    user_id: int,
    image_url: Optional[str],
    label: str,
    confidence: Optional[float],
    created_at: Optional[datetime] = None,
) -> HistoryItem:
    item = HistoryItem(
        user_id=user_id,
        image_url=image_url,
        label=label,
        confidence=confidence,
        created_at=created_at or datetime.now(timezone.utc),
    )
    db.add(item)
    db.commit()
    db.refresh(item)
    return item


def query_history_by_user(db: Session, user_id: int) -> List[HistoryItem]:
    return (
        db.query(HistoryItem)
        .filter(HistoryItem.user_id == user_id)
        .order_by(HistoryItem.created_at.desc())
        .all()
    )
