"""Event search and filtering routes. Results are limited to events the caller participates in."""
import logging
from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.auth import get_current_user_id
from app.database import get_db
from app.schemas.event import EventOut
from app.schemas.search import EventSearch, EventSearchResult
from app.services import search_service

logger = logging.getLogger(__name__)
router = APIRouter()


def _run(db: Session, caller_id: str, filters: EventSearch) -> EventSearchResult:
    events = search_service.search_events(db, caller_id, filters)
    return EventSearchResult(
        filters=filters,
        total_results=len(events),
        events=[EventOut.model_validate(e) for e in events],
    )


def _query_filters(
    keyword: Optional[str] = Query(None),
    start_date: Optional[str] = Query(None),
    end_date: Optional[str] = Query(None),
    user_role: Optional[str] = Query(None),
    location: Optional[str] = Query(None),
) -> EventSearch:
    return EventSearch(
        keyword=keyword, start_date=start_date, end_date=end_date, user_role=user_role, location=location,
    )


@router.post("/", response_model=EventSearchResult)
def search_events(payload: EventSearch, caller_id: str = Depends(get_current_user_id), db: Session = Depends(get_db)):
    """Combined search; every filter in the body is optional."""
    return _run(db, caller_id, payload)


@router.get("/advanced", response_model=EventSearchResult)
def advanced_search_get(
    filters: EventSearch = Depends(_query_filters),
    caller_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Combined search with filters taken from the query string."""
    return _run(db, caller_id, filters)


@router.post("/advanced", response_model=EventSearchResult)
def advanced_search_post(payload: EventSearch, caller_id: str = Depends(get_current_user_id), db: Session = Depends(get_db)):
    return _run(db, caller_id, payload)


@router.get("/keyword", response_model=list[EventOut])
def filter_by_keyword(
    q: str = Query(..., min_length=1, description="Matched against title and description"),
    caller_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    return search_service.search_events(db, caller_id, EventSearch(keyword=q))


@router.get("/date", response_model=list[EventOut])
def filter_by_date(
    start_date: Optional[str] = Query(None),
    end_date: Optional[str] = Query(None),
    caller_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    return search_service.search_events(db, caller_id, EventSearch(start_date=start_date, end_date=end_date))


@router.get("/role", response_model=list[EventOut])
def filter_by_role(
    role: str = Query(..., description="organizer or attendee"),
    caller_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    return search_service.search_events(db, caller_id, EventSearch(user_role=role))
