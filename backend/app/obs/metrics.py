"""Central registry for Prometheus metrics used across the backend."""

from __future__ import annotations

from prometheus_client import Counter, Gauge, Histogram, Summary


REQUEST_COUNTER = Counter(
	"evift_http_requests_total",
	"Total HTTP requests processed",
	["route", "method", "status"],
)

REQUEST_LATENCY = Histogram(
	"evift_http_request_duration_seconds",
	"HTTP request latency in seconds",
	["route", "method"],
	buckets=(0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.0, 5.0),
)

FRIEND_REQUESTS = Counter(
	"evift_friend_requests_total",
	"Friend request attempts by outcome",
	["result"],
)

FRIEND_RESPONSES = Counter(
	"evift_friend_responses_total",
	"Friend request responses",
	["action"],
)

FRIENDS_REMOVED = Counter(
	"evift_friends_removed_total",
	"Friendships removed",
)

EVENT_CREATED = Counter(
	"evift_events_created_total",
	"Events created",
)

EVENT_INVITES_SENT = Counter(
	"evift_event_invites_sent_total",
	"Event invitations persisted by bulk invite",
)

EVENT_INVITE_REJECTS = Counter(
	"evift_event_invite_rejects_total",
	"Bulk invite batches rejected",
	["reason"],
)

EVENT_INVITE_RESPONSES = Counter(
	"evift_event_invite_responses_total",
	"Event invitation responses",
	["action"],
)

PARTICIPANT_ROLE_UPDATES = Counter(
	"evift_participant_role_updates_total",
	"Participant role changes",
	["role"],
)

BRING_PLEDGES = Counter(
	"evift_bring_pledges_total",
	"Bring item pledge operations",
	["action"],
)

BRING_COVERAGE_FLIPS = Counter(
	"evift_bring_coverage_flips_total",
	"Bring item coverage flag transitions",
	["state"],
)

GIFT_LIST_LINKS = Counter(
	"evift_gift_list_links_total",
	"Gift list links into events",
	["action"],
)

GIFT_CHECKS = Counter(
	"evift_gift_checks_total",
	"Gift taken toggles",
	["state"],
)

EMAILS = Counter(
	"evift_emails_total",
	"Outbound notification emails",
	["template", "result"],
)

REDIS_UP = Gauge("evift_redis_up", "Redis availability (1=up,0=down)")
REDIS_LATENCY = Summary("evift_redis_latency_seconds", "Redis ping latency (seconds)")

POSTGRES_UP = Gauge("evift_postgres_up", "Postgres availability (1=up,0=down)")
POSTGRES_LATENCY = Summary("evift_postgres_latency_seconds", "Postgres ping latency (seconds)")


def observe_request(route: str, method: str, status: int, elapsed_seconds: float) -> None:
	REQUEST_COUNTER.labels(route=route, method=method, status=str(status)).inc()
	REQUEST_LATENCY.labels(route=route, method=method).observe(elapsed_seconds)


def inc_friend_request(result: str) -> None:
	FRIEND_REQUESTS.labels(result=result).inc()


def inc_friend_response(action: str) -> None:
	FRIEND_RESPONSES.labels(action=action).inc()


def inc_friend_removed() -> None:
	FRIENDS_REMOVED.inc()


def inc_event_created() -> None:
	EVENT_CREATED.inc()


def inc_event_invites_sent(count: int = 1) -> None:
	if count > 0:
		EVENT_INVITES_SENT.inc(count)


def inc_event_invite_reject(reason: str) -> None:
	EVENT_INVITE_REJECTS.labels(reason=reason).inc()


def inc_event_invite_response(action: str) -> None:
	EVENT_INVITE_RESPONSES.labels(action=action).inc()


def inc_participant_role_update(role: str) -> None:
	PARTICIPANT_ROLE_UPDATES.labels(role=role).inc()


def inc_bring_pledge(action: str) -> None:
	BRING_PLEDGES.labels(action=action).inc()


def inc_bring_coverage(state: str) -> None:
	BRING_COVERAGE_FLIPS.labels(state=state).inc()


def inc_gift_list_link(action: str) -> None:
	GIFT_LIST_LINKS.labels(action=action).inc()


def inc_gift_check(state: str) -> None:
	GIFT_CHECKS.labels(state=state).inc()


def inc_email(template: str, result: str) -> None:
	EMAILS.labels(template=template, result=result).inc()


def mark_redis(ok: bool, *, latency_seconds: float | None = None) -> None:
	REDIS_UP.set(1 if ok else 0)
	if latency_seconds is not None:
		REDIS_LATENCY.observe(latency_seconds)


def mark_postgres(ok: bool, *, latency_seconds: float | None = None) -> None:
	POSTGRES_UP.set(1 if ok else 0)
	if latency_seconds is not None:
		POSTGRES_LATENCY.observe(latency_seconds)
