"""Event role vocabulary."""

from .models import EventRole, RoleEvent  # noqa: F401
from .service import RoleDirectory  # noqa: F401
