"""Pydantic schemas for event search."""
from typing import Optional
from pydantic import BaseModel

from app.schemas.event import EventOut


class EventSearch(BaseModel):
    """Every field is optional; an empty or missing value disables its predicate."""

    keyword: Optional[str] = None  # title or description
    start_date: Optional[str] = None  # YYYY-MM-DD, inclusive
    end_date: Optional[str] = None  # YYYY-MM-DD, inclusive
    user_role: Optional[str] = None  # organizer or attendee
    location: Optional[str] = None


class EventSearchResult(BaseModel):
    filters: EventSearch
    total_results: int
    events: list[EventOut] = []
