"""Identity directory: the minimal user records the event core resolves IDs against."""
import logging
from typing import Iterable

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.config import settings
from app.errors import ConflictError, NotFoundError, store_guard
from app.models.user import User
from app.schemas.user import UserCreate
from app.services.search_service import escape_like

logger = logging.getLogger(__name__)


def create_user(db: Session, payload: UserCreate) -> User:
    email = str(payload.email).lower()
    with store_guard(db, "create user"):
        if db.query(User).filter(User.email == email).first():
            raise ConflictError("A user with this email already exists")
        user = User(name=payload.name, email=email)
        db.add(user)
        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            raise ConflictError("A user with this email already exists")
        db.refresh(user)
    logger.info("Created user %s (%s)", user.user_id, user.email)
    return user


def get_user(db: Session, user_id: str) -> User:
    with store_guard(db, "fetch user"):
        user = db.query(User).filter(User.user_id == user_id).first()
    if not user:
        raise NotFoundError("User not found")
    return user


def user_exists(db: Session, user_id: str) -> bool:
    with store_guard(db, "fetch user"):
        return db.query(User.user_id).filter(User.user_id == user_id).first() is not None


def get_users_by_ids(db: Session, user_ids: Iterable[str]) -> dict[str, User]:
    """Batch lookup; IDs with no matching user are simply absent from the result."""
    ids = list(dict.fromkeys(user_ids))
    if not ids:
        return {}
    with store_guard(db, "fetch users"):
        users = db.query(User).filter(User.user_id.in_(ids)).all()
    return {u.user_id: u for u in users}


def search_users(db: Session, query: str) -> list[User]:
    """Case-insensitive substring match on name or email, capped at USER_SEARCH_LIMIT."""
    pattern = f"%{escape_like(query)}%"
    with store_guard(db, "search users"):
        return (
            db.query(User)
            .filter(or_(User.name.ilike(pattern, escape="\\"), User.email.ilike(pattern, escape="\\")))
            .order_by(User.name)
            .limit(settings.USER_SEARCH_LIMIT)
            .all()
        )
