from college_events.models.user import User
from college_events.models.event import Event

__all__ = ["User", "Event"]
