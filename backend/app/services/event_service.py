"""Event store — create, read, partial update, delete with cascade, invite.

Rules enforced here:
- the creator is seeded as the one and only organizer
- event dates may not be earlier than the reference "today"
- existence is checked before role, so NotFound wins over Forbidden
- update/delete/invite are organizer-only (see ``Membership``)
- deleting an event is final even when removing its responses fails
"""
import logging
import uuid
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Optional

import pytz
from sqlalchemy import update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.config import settings
from app.errors import ConflictError, InvalidInputError, NotFoundError, StoreFailureError, store_guard
from app.models.event import Event, EventParticipant, ParticipantRole, utcnow
from app.schemas.event import EventCreate
from app.schemas.search import EventSearch
from app.services import response_service, search_service
from app.services.membership import Membership

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = ("title", "description", "date", "time", "location")


@dataclass
class EventDeletion:
    event_id: str
    cascade_completed: bool
    responses_deleted: Optional[int] = None


def check_id(value: str, label: str) -> str:
    """Reject identifiers that are not UUID strings (the store never generates anything else)."""
    try:
        return str(uuid.UUID(str(value)))
    except ValueError:
        raise InvalidInputError(f"Invalid {label} ID")


def reference_today() -> date:
    """The calendar day event dates are checked against.

    Server local time unless REFERENCE_TIMEZONE names a zone. Compared at day
    granularity only; event dates themselves carry no timezone.
    """
    if settings.REFERENCE_TIMEZONE:
        return datetime.now(pytz.timezone(settings.REFERENCE_TIMEZONE)).date()
    return date.today()


def validate_event_date(value: str) -> str:
    """Parse a YYYY-MM-DD date, refuse past days and return the zero-padded form."""
    try:
        parsed = datetime.strptime(value.strip(), "%Y-%m-%d").date()
    except ValueError:
        raise InvalidInputError("Date must be in YYYY-MM-DD format")
    if parsed < reference_today():
        raise InvalidInputError("Event date cannot be in the past")
    return parsed.isoformat()


def create_event(db: Session, owner_id: str, payload: EventCreate) -> Event:
    """Create an event with the caller as its organizer."""
    event_date = validate_event_date(payload.date)
    now = utcnow()
    event = Event(
        title=payload.title,
        description=payload.description,
        date=event_date,
        time=payload.time,
        location=payload.location,
        created_at=now,
        updated_at=now,
    )
    event.participants.append(EventParticipant(user_id=owner_id, role=ParticipantRole.organizer, joined_at=now))

    with store_guard(db, "create event"):
        db.add(event)
        db.commit()
        db.refresh(event)
    logger.info("Created event '%s' (%s) by organizer %s", event.title, event.event_id, owner_id)
    return event


def get_event(db: Session, event_id: str) -> Event:
    event_id = check_id(event_id, "event")
    with store_guard(db, "fetch event"):
        event = db.query(Event).filter(Event.event_id == event_id).first()
    if not event:
        raise NotFoundError("Event not found")
    return event


def update_event(db: Session, event_id: str, caller_id: str, updates: dict[str, Any]) -> Event:
    """Apply only the fields present in ``updates``; absent fields stay untouched."""
    event = get_event(db, event_id)
    Membership.of(event).require_organizer(caller_id, "update events")

    values: dict[str, Any] = {}
    for field, value in updates.items():
        if field not in UPDATABLE_FIELDS:
            raise InvalidInputError(f"Field '{field}' cannot be updated")
        if value is None:
            raise InvalidInputError(f"Field '{field}' cannot be null")
        values[field] = value
    if "date" in values:
        values["date"] = validate_event_date(values["date"])
    values["updated_at"] = utcnow()

    with store_guard(db, "update event"):
        result = db.execute(
            update(Event).where(Event.event_id == event.event_id).values(**values),
            execution_options={"synchronize_session": False},
        )
        if result.rowcount == 0:
            db.rollback()
            raise NotFoundError("Event not found")
        db.commit()
        db.refresh(event)
    logger.info("Updated event %s fields %s", event.event_id, sorted(k for k in values if k != "updated_at"))
    return event


def delete_event(db: Session, event_id: str, caller_id: str) -> EventDeletion:
    """Delete the event, then its responses.

    The two steps are separate transactions. If the second fails the event
    stays deleted and the result reports the incomplete cascade.
    """
    event = get_event(db, event_id)
    Membership.of(event).require_organizer(caller_id, "delete events")
    event_id = event.event_id

    with store_guard(db, "delete event"):
        db.delete(event)
        db.commit()
    logger.info("Deleted event %s by organizer %s", event_id, caller_id)

    try:
        removed = response_service.delete_responses_for_event(db, event_id)
    except StoreFailureError:
        logger.error("Event %s was deleted but its responses could not be removed", event_id)
        return EventDeletion(event_id=event_id, cascade_completed=False)
    return EventDeletion(event_id=event_id, cascade_completed=True, responses_deleted=removed)


def invite_users(db: Session, event_id: str, caller_id: str, user_ids: list[str]) -> int:
    """Add each not-yet-participating user as an attendee; return how many were added."""
    if not user_ids:
        raise InvalidInputError("At least one user ID is required")
    candidates = [check_id(uid, "user") for uid in user_ids]

    event = get_event(db, event_id)
    membership = Membership.of(event)
    membership.require_organizer(caller_id, "invite users")

    invited = 0
    with store_guard(db, "invite users"):
        for uid in membership.not_yet_members(candidates):
            try:
                with db.begin_nested():
                    db.add(EventParticipant(event_id=event.event_id, user_id=uid, role=ParticipantRole.attendee))
            except IntegrityError:
                # Added by a concurrent invite after we read the participant list
                logger.info("User %s already joined event %s, skipping", uid, event.event_id)
                continue
            invited += 1

        if invited == 0:
            db.rollback()
            raise ConflictError("All users are already invited to this event")

        db.execute(
            update(Event).where(Event.event_id == event.event_id).values(updated_at=utcnow()),
            execution_options={"synchronize_session": False},
        )
        db.commit()
    logger.info("Invited %d user(s) to event %s", invited, event.event_id)
    return invited


def list_user_events(db: Session, caller_id: str, role: Optional[ParticipantRole] = None) -> list[Event]:
    """Events the caller participates in, optionally only those where they hold ``role``."""
    filters = EventSearch(user_role=role.value if role else None)
    return search_service.search_events(db, caller_id, filters)
