"""Membership & authorization engine.

Pure logic over an event's participant list: no session, no I/O. Services load
the event, wrap its participants in a ``Membership`` and ask it who the caller
is before touching the store.
"""
import enum
import logging
from typing import Iterable, Optional

from app.errors import ForbiddenError
from app.models.event import Event, ParticipantRole

logger = logging.getLogger(__name__)


class Role(str, enum.Enum):
    organizer = "organizer"
    attendee = "attendee"
    non_member = "non_member"


class Membership:
    """Ordered ``user_id -> role`` view of an event's participants.

    Construction checks the participant invariants: every user ID appears
    once and exactly one participant is the organizer.
    """

    def __init__(self, event_id: str, participants: Iterable[tuple[str, ParticipantRole]]):
        self.event_id = event_id
        self._roles: dict[str, ParticipantRole] = {}
        organizer_id: Optional[str] = None
        for user_id, role in participants:
            if user_id in self._roles:
                raise ValueError(f"Event {event_id} lists user {user_id} more than once")
            role = ParticipantRole(role)
            if role == ParticipantRole.organizer:
                if organizer_id is not None:
                    raise ValueError(f"Event {event_id} has more than one organizer")
                organizer_id = user_id
            self._roles[user_id] = role
        if organizer_id is None:
            raise ValueError(f"Event {event_id} has no organizer")
        self.organizer_id = organizer_id

    @classmethod
    def of(cls, event: Event) -> "Membership":
        return cls(event.event_id, ((p.user_id, p.role) for p in event.participants))

    def __contains__(self, user_id: str) -> bool:
        return user_id in self._roles

    def __len__(self) -> int:
        return len(self._roles)

    def role_of(self, user_id: str) -> Role:
        role = self._roles.get(user_id)
        if role is None:
            return Role.non_member
        return Role(role.value)

    def is_member(self, user_id: str) -> bool:
        return user_id in self._roles

    def is_organizer(self, user_id: str) -> bool:
        return user_id == self.organizer_id

    def attendee_ids(self) -> list[str]:
        """Attendee user IDs in invitation order (organizer excluded)."""
        return [uid for uid, role in self._roles.items() if role == ParticipantRole.attendee]

    def require_organizer(self, user_id: str, action: str) -> None:
        if not self.is_organizer(user_id):
            logger.warning("User %s denied '%s' on event %s: not the organizer", user_id, action, self.event_id)
            raise ForbiddenError(f"Only event organizers can {action}")

    def require_participant(self, user_id: str, action: str) -> None:
        if not self.is_member(user_id):
            logger.warning("User %s denied '%s' on event %s: not a participant", user_id, action, self.event_id)
            raise ForbiddenError(f"User is not invited to this event and cannot {action}")

    def not_yet_members(self, candidate_ids: Iterable[str]) -> list[str]:
        """Candidates not already participating, de-duplicated, in first-seen order."""
        seen = set(self._roles)
        fresh = []
        for uid in candidate_ids:
            if uid in seen:
                continue
            seen.add(uid)
            fresh.append(uid)
        return fresh
