"""Gift lists and their sharing into events."""

from .models import Gift, ListEvent, ListGift  # noqa: F401
from .service import GiftService  # noqa: F401
