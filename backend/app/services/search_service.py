"""Event search: predicate builder plus the read path that runs it.

``build_event_criteria`` only assembles SQLAlchemy clauses; nothing touches the
database until ``search_events`` hands them to a query.

Date bounds are compared as text. That matches chronological order for the
zero-padded YYYY-MM-DD values the event store writes, and nothing else.
"""
import logging
from typing import Optional

from sqlalchemy import and_, or_
from sqlalchemy.orm import Session
from sqlalchemy.sql.elements import ColumnElement

from app.config import settings
from app.errors import InvalidInputError, store_guard
from app.models.event import Event, EventParticipant, ParticipantRole
from app.schemas.search import EventSearch

logger = logging.getLogger(__name__)


def escape_like(text: str) -> str:
    """Make LIKE wildcards in user input match literally (used with escape='\\')."""
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _contains(column, text: str) -> ColumnElement:
    return column.ilike(f"%{escape_like(text)}%", escape="\\")


def parse_role(value: str) -> ParticipantRole:
    try:
        return ParticipantRole(value)
    except ValueError:
        raise InvalidInputError("Invalid user_role. Must be: organizer or attendee")


def build_event_criteria(caller_id: str, filters: EventSearch) -> list[ColumnElement]:
    """Caller must participate; every other predicate applies only when its input is non-empty."""
    member = [EventParticipant.user_id == caller_id]
    if filters.user_role:
        member.append(EventParticipant.role == parse_role(filters.user_role))
    criteria = [Event.participants.any(and_(*member))]

    if filters.keyword:
        criteria.append(or_(_contains(Event.title, filters.keyword), _contains(Event.description, filters.keyword)))
    if filters.start_date:
        criteria.append(Event.date >= filters.start_date)
    if filters.end_date:
        criteria.append(Event.date <= filters.end_date)
    if filters.location:
        criteria.append(_contains(Event.location, filters.location))
    return criteria


def search_events(db: Session, caller_id: str, filters: EventSearch, limit: Optional[int] = None) -> list[Event]:
    criteria = build_event_criteria(caller_id, filters)
    with store_guard(db, "search events"):
        events = (
            db.query(Event)
            .filter(*criteria)
            .order_by(Event.date, Event.time, Event.created_at)
            .limit(limit or settings.SEARCH_RESULT_LIMIT)
            .all()
        )
    logger.debug("Search by %s with %s matched %d event(s)", caller_id, filters.model_dump(exclude_none=True), len(events))
    return events
