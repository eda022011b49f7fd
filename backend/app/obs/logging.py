"""JSON logging for the Evift API.

Request-scoped fields (request id, route, acting user, client address) live in
one context variable so every record emitted while serving a request carries
them without callers threading them through.
"""

from __future__ import annotations

import json
import logging
import random
from contextvars import ContextVar, Token
from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional

from app.settings import settings

_ROOT_LOGGER = "evift"

_FIELDS = ("request_id", "route", "user_id", "client_ip")
_OUTPUT_NAMES = {"client_ip": "ip"}

_context: ContextVar[Mapping[str, str]] = ContextVar("evift_log_context", default={})

# Invitee addresses and tokens must never reach the log stream.
_REDACT = ("token", "secret", "authorization", "password", "email", "invitee", "body")
_MAX_TEXT = 256
_MAX_ITEMS = 10

_RECORD_ATTRS = frozenset(logging.LogRecord("", 0, "", 0, "", (), None).__dict__) | {"message", "asctime"}


def bind_context(
	*,
	request_id: Optional[str] = None,
	route: Optional[str] = None,
	user_id: Optional[str] = None,
	client_ip: Optional[str] = None,
) -> Dict[str, Token]:
	"""Merge the given fields into the current context; returns a token for ``reset_context``."""
	given = {"request_id": request_id, "route": route, "user_id": user_id, "client_ip": client_ip}
	merged = dict(_context.get())
	merged.update({key: value for key, value in given.items() if value is not None})
	return {"context": _context.set(merged)}


def reset_context(tokens: Dict[str, Token]) -> None:
	token = tokens.get("context")
	if token is not None:
		_context.reset(token)


def clear_context() -> None:
	_context.set({})


def current_request_id() -> Optional[str]:
	return _context.get().get("request_id")


def _clip(value: Any) -> Any:
	if isinstance(value, str):
		return value if len(value) <= _MAX_TEXT else value[:_MAX_TEXT] + "..."
	if isinstance(value, Mapping):
		clipped = {key: _scrub(str(key), item) for key, item in list(value.items())[:_MAX_ITEMS]}
		if len(value) > _MAX_ITEMS:
			clipped["..."] = f"+{len(value) - _MAX_ITEMS} keys"
		return clipped
	if isinstance(value, (list, tuple, set)):
		items = [_clip(item) for item in list(value)[:_MAX_ITEMS]]
		if len(value) > _MAX_ITEMS:
			items.append(f"+{len(value) - _MAX_ITEMS} more")
		return items
	return value


def _scrub(key: str, value: Any) -> Any:
	if any(marker in key.lower() for marker in _REDACT):
		return "[redacted]"
	return _clip(value)


class JSONLogFormatter(logging.Formatter):
	"""One JSON object per line; ``extra=`` fields are scrubbed and appended."""

	def format(self, record: logging.LogRecord) -> str:  # noqa: A003
		entry: Dict[str, Any] = {
			"ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
			"level": record.levelname.lower(),
			"logger": record.name,
			"msg": record.getMessage(),
			"service": settings.service_name,
			"env": settings.environment,
			"commit": settings.git_commit,
		}
		context = _context.get()
		for field in _FIELDS:
			if context.get(field):
				entry[_OUTPUT_NAMES.get(field, field)] = context[field]
		for key, value in record.__dict__.items():
			if key not in _RECORD_ATTRS:
				entry[key] = _scrub(key, value)
		if record.exc_info:
			entry["exc_info"] = self.formatException(record.exc_info)
		return json.dumps(entry, separators=(",", ":"), default=str)


class InfoSamplingFilter(logging.Filter):
	"""Drops a share of INFO records; every other level passes."""

	def filter(self, record: logging.LogRecord) -> bool:  # noqa: A003
		if record.levelno != logging.INFO:
			return True
		rate = min(1.0, max(0.0, settings.obs_log_sampling_rate_info))
		return rate >= 1.0 or random.random() < rate


def configure_logging() -> logging.Logger:
	handler = logging.StreamHandler()
	handler.setFormatter(JSONLogFormatter())
	handler.addFilter(InfoSamplingFilter())
	root = logging.getLogger()
	root.handlers.clear()
	root.addHandler(handler)
	root.setLevel(settings.obs_log_level)
	return logging.getLogger(_ROOT_LOGGER)


def get_logger(name: Optional[str] = None) -> logging.Logger:
	return logging.getLogger(name or _ROOT_LOGGER)
