"""Pure coverage rules for bring items."""

from __future__ import annotations

from datetime import datetime
from typing import Iterable, Optional

from app.domain.bring.models import BringItem
from app.domain.common.errors import InvalidRequestError

Coverage = tuple[bool, Optional[datetime]]


def is_fully_covered(pledges: Iterable[int], requested: int) -> bool:
	return sum(pledges) >= requested


def reconcile(item: BringItem, pledges: Iterable[int], *, now: datetime) -> Optional[Coverage]:
	"""Return the (is_taken, taken_at) pair to store, or None when the cached flag already matches."""
	covered = is_fully_covered(pledges, item.requested_quantity)
	if covered and not item.is_taken:
		return True, now
	if not covered and item.is_taken:
		return False, None
	return None


def ensure_positive_quantity(quantity: int, *, field: str = "quantity") -> int:
	if quantity < 1:
		raise InvalidRequestError(f"invalid_{field}")
	return quantity
