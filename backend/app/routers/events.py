"""Event API routes — delegates to event_service for invariant enforcement."""
import logging
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.auth import get_current_user_id
from app.database import get_db
from app.models.event import Event, ParticipantRole
from app.schemas.event import (
    EventCreate, EventUpdate, EventOut, EventDetailOut, EventDeletionOut, InviteRequest, InviteResult,
)
from app.services import event_service, response_service
from app.services.membership import Membership

logger = logging.getLogger(__name__)
router = APIRouter()


def _detail(db: Session, event: Event, caller_id: str) -> EventDetailOut:
    """Event plus the caller's role and, for participants, their response status."""
    membership = Membership.of(event)
    my_status = None
    if membership.is_member(caller_id):
        response = response_service.find_response(db, event.event_id, caller_id)
        my_status = response.status.value if response else "no_response"
    return EventDetailOut(
        **EventOut.model_validate(event).model_dump(),
        my_role=membership.role_of(caller_id).value,
        my_status=my_status,
    )


@router.post("/", response_model=EventOut, status_code=status.HTTP_201_CREATED)
def create_event(
    payload: EventCreate,
    caller_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Create an event; the caller becomes its organizer."""
    return event_service.create_event(db, caller_id, payload)


@router.get("/", response_model=list[EventOut])
def list_my_events(caller_id: str = Depends(get_current_user_id), db: Session = Depends(get_db)):
    """All events the caller organizes or is invited to."""
    return event_service.list_user_events(db, caller_id)


@router.get("/organized", response_model=list[EventOut])
def list_organized_events(caller_id: str = Depends(get_current_user_id), db: Session = Depends(get_db)):
    return event_service.list_user_events(db, caller_id, ParticipantRole.organizer)


@router.get("/invited", response_model=list[EventOut])
def list_invited_events(caller_id: str = Depends(get_current_user_id), db: Session = Depends(get_db)):
    return event_service.list_user_events(db, caller_id, ParticipantRole.attendee)


@router.get("/{event_id}", response_model=EventDetailOut)
def get_event(event_id: str, caller_id: str = Depends(get_current_user_id), db: Session = Depends(get_db)):
    """Fetch a single event by ID with its participants."""
    event = event_service.get_event(db, event_id)
    return _detail(db, event, caller_id)


@router.patch("/{event_id}", response_model=EventDetailOut)
@router.put("/{event_id}", response_model=EventDetailOut)
def update_event(
    event_id: str,
    payload: EventUpdate,
    caller_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Update an event (organizer only). Fields missing from the body are left as they are."""
    updates = payload.model_dump(exclude_unset=True)
    event = event_service.update_event(db, event_id, caller_id, updates)
    return _detail(db, event, caller_id)


@router.delete("/{event_id}", response_model=EventDeletionOut)
def delete_event(event_id: str, caller_id: str = Depends(get_current_user_id), db: Session = Depends(get_db)):
    """Delete an event and its responses (organizer only)."""
    deletion = event_service.delete_event(db, event_id, caller_id)
    return EventDeletionOut(
        event_id=deletion.event_id,
        cascade_completed=deletion.cascade_completed,
        responses_deleted=deletion.responses_deleted,
    )


@router.post("/{event_id}/invite", response_model=InviteResult)
def invite_users(
    event_id: str,
    payload: InviteRequest,
    caller_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Invite users as attendees (organizer only)."""
    invited = event_service.invite_users(db, event_id, caller_id, payload.user_ids)
    return InviteResult(invited_count=invited)
