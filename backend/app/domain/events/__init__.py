"""Events domain exports."""

from . import audit, policies  # noqa: F401
from .invitations import EventInvitationService  # noqa: F401
from .models import Event, EventInvitation, NotificationCounts, Participant  # noqa: F401
from .participants import ParticipantRegistry  # noqa: F401
from .service import EventsService  # noqa: F401
