"""Attendance response (RSVP) API routes."""
import logging
from typing import Optional, Union
from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from app.auth import get_current_user_id
from app.database import get_db
from app.schemas.response import ResponseSubmit, ResponseOut, NoResponseOut, AttendanceSummaryOut
from app.services import attendance_service, response_service

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/{event_id}/responses", response_model=ResponseOut, status_code=status.HTTP_200_OK)
def submit_response(
    event_id: str,
    payload: ResponseSubmit,
    response: Response,
    caller_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Set or change the caller's response. 201 on the first answer, 200 afterwards."""
    record, created = response_service.submit_response(db, event_id, caller_id, payload.status)
    if created:
        response.status_code = status.HTTP_201_CREATED
    return record


@router.get("/{event_id}/responses/me", response_model=Union[ResponseOut, NoResponseOut])
def get_own_response(event_id: str, caller_id: str = Depends(get_current_user_id), db: Session = Depends(get_db)):
    """The caller's response, or ``{"status": "no_response"}`` if they have not answered."""
    record = response_service.get_own_response(db, event_id, caller_id)
    if record is None:
        return NoResponseOut(event_id=event_id, user_id=caller_id)
    return ResponseOut.model_validate(record)


@router.get("/{event_id}/responses", response_model=list[ResponseOut])
def list_responses(
    event_id: str,
    status_filter: Optional[str] = Query(None, alias="status", description="going, maybe or not_going"),
    caller_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Responses for an event, in submission order (organizer only)."""
    return response_service.list_responses(db, event_id, caller_id, status_filter)


@router.get("/{event_id}/attendees", response_model=AttendanceSummaryOut)
def attendance_summary(event_id: str, caller_id: str = Depends(get_current_user_id), db: Session = Depends(get_db)):
    """Per-status counts plus each attendee's status (organizer only)."""
    summary = attendance_service.summarize_attendance(db, event_id, caller_id)
    return AttendanceSummaryOut.model_validate(summary, from_attributes=True)
