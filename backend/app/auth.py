"""Caller identity.

Credentials are verified upstream; requests arrive with the authenticated
user's ID in the ``X-User-ID`` header. This module only checks that the
header is present and names a known user.
"""
import uuid
from typing import Optional

from fastapi import Depends, Header
from sqlalchemy.orm import Session

from app.database import get_db
from app.errors import UnauthenticatedError
from app.services import user_service

USER_HEADER = "X-User-ID"


def get_current_user_id(
    x_user_id: Optional[str] = Header(None, alias=USER_HEADER),
    db: Session = Depends(get_db),
) -> str:
    if not x_user_id:
        raise UnauthenticatedError(f"{USER_HEADER} header required")
    try:
        user_id = str(uuid.UUID(x_user_id))
    except ValueError:
        raise UnauthenticatedError("Invalid user ID format")
    if not user_service.user_exists(db, user_id):
        raise UnauthenticatedError("Unknown user")
    return user_id
