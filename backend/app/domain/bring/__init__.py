"""Items to bring for an event."""

from .models import BringItem, ReleaseResult, Take, TakeResult  # noqa: F401
from .policy import is_fully_covered  # noqa: F401
from .service import BringItemService  # noqa: F401
