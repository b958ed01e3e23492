"""Pydantic schemas for Events."""
from __future__ import annotations
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field


class EventCreate(BaseModel):
    title: str = Field(min_length=3, max_length=200)
    description: str = Field(min_length=10, max_length=2000)
    date: str = Field(min_length=1, description="ISO 8601 date, YYYY-MM-DD")
    time: str = Field(min_length=1, max_length=20, description="HH:MM")
    location: str = Field(min_length=5, max_length=500)


class EventUpdate(BaseModel):
    """Partial update: only fields present in the request body are applied."""

    title: Optional[str] = Field(None, min_length=3, max_length=200)
    description: Optional[str] = Field(None, min_length=10, max_length=2000)
    date: Optional[str] = Field(None, min_length=1)
    time: Optional[str] = Field(None, min_length=1, max_length=20)
    location: Optional[str] = Field(None, min_length=5, max_length=500)


class ParticipantOut(BaseModel):
    user_id: str
    role: str

    model_config = {"from_attributes": True}


class EventOut(BaseModel):
    event_id: str
    title: str
    description: str
    date: str
    time: str
    location: str
    participants: list[ParticipantOut] = []
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class EventDetailOut(EventOut):
    """Event as seen by a specific caller."""

    my_role: str
    my_status: Optional[str] = None


class InviteRequest(BaseModel):
    user_ids: list[str] = Field(min_length=1)


class InviteResult(BaseModel):
    invited_count: int


class EventDeletionOut(BaseModel):
    event_id: str
    deleted: bool = True
    cascade_completed: bool
    responses_deleted: Optional[int] = None
