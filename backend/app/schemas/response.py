"""Pydantic schemas for attendance responses and summaries."""
from datetime import datetime
from typing import Optional
from pydantic import BaseModel

from app.models.response import ResponseStatus


class ResponseSubmit(BaseModel):
    status: ResponseStatus


class ResponseOut(BaseModel):
    response_id: str
    event_id: str
    user_id: str
    status: str
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class NoResponseOut(BaseModel):
    event_id: str
    user_id: str
    status: str = "no_response"


class AttendeeStatusOut(BaseModel):
    user_id: str
    name: str
    email: str
    status: str
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class AttendanceSummaryOut(BaseModel):
    event_id: str
    total: int
    going: int
    maybe: int
    not_going: int
    no_response: int
    unresolved: int
    attendees: list[AttendeeStatusOut] = []

    model_config = {"from_attributes": True}
