"""AttendanceResponse ORM model. One row per (event, user) that has answered.

``event_id`` has no foreign key: responses live independently of the event
row and are removed by an explicit cascade step when the event is deleted.
"""
import uuid
import enum
from sqlalchemy import Column, String, DateTime, UniqueConstraint, Enum as SAEnum
from app.database import Base
from app.models.event import utcnow


class ResponseStatus(str, enum.Enum):
    going = "going"
    maybe = "maybe"
    not_going = "not_going"


# Logical status for a participant with no stored response; never persisted.
NO_RESPONSE = "no_response"


class AttendanceResponse(Base):
    __tablename__ = "event_responses"
    __table_args__ = (UniqueConstraint("event_id", "user_id", name="uq_event_response"),)

    response_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    event_id = Column(String(36), nullable=False, index=True)
    user_id = Column(String(36), nullable=False, index=True)
    status = Column(SAEnum(ResponseStatus), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
