"""User API routes."""
import logging
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.auth import get_current_user_id
from app.database import get_db
from app.schemas.user import UserCreate, UserOut
from app.services import user_service

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/", response_model=UserOut, status_code=status.HTTP_201_CREATED)
def create_user(payload: UserCreate, db: Session = Depends(get_db)):
    """Register an identity (name + email)."""
    return user_service.create_user(db, payload)


@router.get("/search", response_model=list[UserOut])
def search_users(
    q: str = Query(..., min_length=1, description="Substring of name or email"),
    caller_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Find users to invite; capped result list."""
    return user_service.search_users(db, q)


@router.get("/me", response_model=UserOut)
def get_me(caller_id: str = Depends(get_current_user_id), db: Session = Depends(get_db)):
    return user_service.get_user(db, caller_id)


@router.get("/{user_id}", response_model=UserOut)
def get_user(user_id: str, db: Session = Depends(get_db)):
    """Fetch a single user by ID."""
    return user_service.get_user(db, user_id)
