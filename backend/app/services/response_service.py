"""Response store — one attendance response per (event, user).

The upsert never reads before it writes: it issues a conditional UPDATE and
falls back to an INSERT inside a savepoint. The unique constraint on
(event_id, user_id) turns a lost insert race into an IntegrityError, after
which the UPDATE is retried.
"""
import logging
from typing import Optional

from sqlalchemy import delete, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.config import settings
from app.errors import ConflictError, InvalidInputError, store_guard
from app.models.event import utcnow
from app.models.response import AttendanceResponse, ResponseStatus
from app.services import event_service
from app.services.membership import Membership

logger = logging.getLogger(__name__)


def parse_status(value: str) -> ResponseStatus:
    try:
        return ResponseStatus(value)
    except ValueError:
        raise InvalidInputError("Invalid status. Must be: going, maybe, or not_going")


def _find(db: Session, event_id: str, user_id: str) -> Optional[AttendanceResponse]:
    return (
        db.query(AttendanceResponse)
        .filter(AttendanceResponse.event_id == event_id, AttendanceResponse.user_id == user_id)
        .first()
    )


def submit_response(db: Session, event_id: str, caller_id: str, status: ResponseStatus) -> tuple[AttendanceResponse, bool]:
    """Create or overwrite the caller's response.

    Returns the stored record and whether it was newly created. ``created_at``
    is only ever set by the insert.
    """
    status = parse_status(status)
    event = event_service.get_event(db, event_id)
    Membership.of(event).require_participant(caller_id, "respond")
    event_id = event.event_id

    with store_guard(db, "save response"):
        for attempt in range(1, settings.UPSERT_MAX_ATTEMPTS + 1):
            now = utcnow()
            result = db.execute(
                update(AttendanceResponse)
                .where(AttendanceResponse.event_id == event_id, AttendanceResponse.user_id == caller_id)
                .values(status=status, updated_at=now),
                execution_options={"synchronize_session": False},
            )
            if result.rowcount:
                created = False
                break
            try:
                with db.begin_nested():
                    db.add(AttendanceResponse(event_id=event_id, user_id=caller_id, status=status, created_at=now, updated_at=now))
            except IntegrityError:
                logger.info("Concurrent response for event %s user %s, retrying (attempt %d)", event_id, caller_id, attempt)
                continue
            created = True
            break
        else:
            db.rollback()
            raise ConflictError("Response is being changed concurrently, try again")
        db.commit()
        response = _find(db, event_id, caller_id)

    logger.info("User %s responded '%s' to event %s", caller_id, status.value, event_id)
    return response, created


def get_own_response(db: Session, event_id: str, caller_id: str) -> Optional[AttendanceResponse]:
    """The caller's response, or None when they have not answered yet."""
    event = event_service.get_event(db, event_id)
    Membership.of(event).require_participant(caller_id, "view a response")
    with store_guard(db, "fetch response"):
        return _find(db, event.event_id, caller_id)


def find_response(db: Session, event_id: str, user_id: str) -> Optional[AttendanceResponse]:
    """Unchecked lookup for callers that already authorized the read."""
    with store_guard(db, "fetch response"):
        return _find(db, event_id, user_id)


def responses_for_event(db: Session, event_id: str, status: Optional[ResponseStatus] = None) -> list[AttendanceResponse]:
    with store_guard(db, "fetch responses"):
        query = db.query(AttendanceResponse).filter(AttendanceResponse.event_id == event_id)
        if status is not None:
            query = query.filter(AttendanceResponse.status == status)
        return query.order_by(AttendanceResponse.created_at, AttendanceResponse.response_id).all()


def list_responses(db: Session, event_id: str, caller_id: str, status: Optional[str] = None) -> list[AttendanceResponse]:
    """All responses for an event in the order they were first submitted (organizer only)."""
    wanted = parse_status(status) if status else None
    event = event_service.get_event(db, event_id)
    Membership.of(event).require_organizer(caller_id, "view attendees")
    return responses_for_event(db, event.event_id, wanted)


def delete_responses_for_event(db: Session, event_id: str) -> int:
    """Cascade step of event deletion. Returns the number of rows removed."""
    with store_guard(db, "delete event responses"):
        result = db.execute(delete(AttendanceResponse).where(AttendanceResponse.event_id == event_id))
        db.commit()
    logger.info("Removed %d response(s) of deleted event %s", result.rowcount, event_id)
    return result.rowcount
