"""Attendance summary for an event's organizer.

Counts cover every attendee participant (the organizer is not counted), so
``going + maybe + not_going + no_response == total`` always holds. The
itemized list is enriched from the identity directory; attendees whose user
record cannot be found are left out of the list and counted in
``unresolved`` instead.
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from app.models.response import NO_RESPONSE, ResponseStatus
from app.services import event_service, response_service, user_service
from app.services.membership import Membership

logger = logging.getLogger(__name__)


@dataclass
class AttendeeStatus:
    user_id: str
    name: str
    email: str
    status: str
    updated_at: Optional[datetime] = None


@dataclass
class AttendanceSummary:
    event_id: str
    total: int = 0
    going: int = 0
    maybe: int = 0
    not_going: int = 0
    no_response: int = 0
    unresolved: int = 0
    attendees: list[AttendeeStatus] = field(default_factory=list)


def summarize_attendance(db: Session, event_id: str, caller_id: str) -> AttendanceSummary:
    event = event_service.get_event(db, event_id)
    membership = Membership.of(event)
    membership.require_organizer(caller_id, "view attendees")

    attendee_ids = membership.attendee_ids()
    # Responses from the organizer (or rows left behind by a partial cascade) are ignored
    responses = {r.user_id: r for r in response_service.responses_for_event(db, event.event_id)}
    users = user_service.get_users_by_ids(db, attendee_ids)

    summary = AttendanceSummary(event_id=event.event_id, total=len(attendee_ids))
    for uid in attendee_ids:
        response = responses.get(uid)
        if response is None:
            status, updated_at = NO_RESPONSE, None
        else:
            status, updated_at = ResponseStatus(response.status).value, response.updated_at
        setattr(summary, status, getattr(summary, status) + 1)

        user = users.get(uid)
        if user is None:
            summary.unresolved += 1
            continue
        summary.attendees.append(
            AttendeeStatus(user_id=uid, name=user.name, email=user.email, status=status, updated_at=updated_at)
        )

    if summary.unresolved:
        logger.info("Event %s summary: %d attendee(s) with no user record left out", event.event_id, summary.unresolved)
    return summary
