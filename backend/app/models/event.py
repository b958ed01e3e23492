"""Event and EventParticipant ORM models."""
import uuid
import enum
from datetime import datetime, timezone
from sqlalchemy import Column, String, Text, DateTime, Integer, ForeignKey, UniqueConstraint, Enum as SAEnum
from sqlalchemy.orm import relationship
from app.database import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ParticipantRole(str, enum.Enum):
    organizer = "organizer"
    attendee = "attendee"


class Event(Base):
    __tablename__ = "events"

    event_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=False)
    date = Column(String(10), nullable=False, index=True)  # YYYY-MM-DD, compared as text
    time = Column(String(20), nullable=False)  # HH:MM
    location = Column(String(500), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    participants = relationship(
        "EventParticipant",
        back_populates="event",
        cascade="all, delete-orphan",
        order_by="EventParticipant.participant_id",
    )


class EventParticipant(Base):
    __tablename__ = "event_participants"
    __table_args__ = (UniqueConstraint("event_id", "user_id", name="uq_event_participant"),)

    # Surrogate key doubles as the invitation order
    participant_id = Column(Integer, primary_key=True, autoincrement=True)
    event_id = Column(String(36), ForeignKey("events.event_id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(String(36), nullable=False, index=True)
    role = Column(SAEnum(ParticipantRole), nullable=False, default=ParticipantRole.attendee)
    joined_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    event = relationship("Event", back_populates="participants")
