"""Social domain exports."""

from . import audit, policy, service  # noqa: F401
from .models import FriendRequestOutcome, ResponseOutcome, UserProfile  # noqa: F401
from .schemas import FriendRow, InvitationSummary  # noqa: F401
