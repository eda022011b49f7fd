"""REST API surface for events, participants and event invitations."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, BackgroundTasks, Depends, status

from app.api.errors import to_http_error
from app.domain.common.errors import EngineError
from app.domain.events.invitations import EventInvitationService
from app.domain.events.models import Event
from app.domain.events.participants import ParticipantRegistry
from app.domain.events.schemas import (
	BulkInviteRequest,
	BulkInviteResponse,
	EventCreateRequest,
	EventDetail,
	EventInvitationSummary,
	EventInviteRespondRequest,
	NotificationCountsResponse,
	ParticipantSummary,
	RespondResponse,
	RoleSummary,
	RoleUpdateRequest,
	RoleUpdateResponse,
)
from app.domain.events.service import EventsService
from app.domain.roles.service import RoleDirectory
from app.infra.auth import AuthenticatedUser, get_current_user

router = APIRouter(tags=["events"])
_events = EventsService()
_participants = ParticipantRegistry()
_invitations = EventInvitationService()
_roles = RoleDirectory()


@router.post("/events", response_model=Event, status_code=status.HTTP_201_CREATED)
async def create_event(
	payload: EventCreateRequest,
	auth_user: AuthenticatedUser = Depends(get_current_user),
) -> Event:
	try:
		return await _events.create_event(auth_user.uuid, payload)
	except EngineError as exc:
		raise to_http_error(exc) from exc


@router.get("/events", response_model=list[Event])
async def list_upcoming_events(auth_user: AuthenticatedUser = Depends(get_current_user)) -> list[Event]:
	return await _events.list_upcoming(auth_user.uuid)


@router.get("/events/{event_id}", response_model=EventDetail)
async def get_event(
	event_id: UUID,
	auth_user: AuthenticatedUser = Depends(get_current_user),
) -> EventDetail:
	try:
		participant = await _events.get_event(auth_user.uuid, event_id)
	except EngineError as exc:
		raise to_http_error(exc) from exc
	return EventDetail(**participant.event.model_dump(exclude={"created_at"}), role=participant.role_name)


@router.get("/events/{event_id}/participants", response_model=list[ParticipantSummary])
async def list_participants(
	event_id: UUID,
	auth_user: AuthenticatedUser = Depends(get_current_user),
) -> list[ParticipantSummary]:
	try:
		return await _participants.list_participants(event_id, auth_user.uuid)
	except EngineError as exc:
		raise to_http_error(exc) from exc


@router.patch("/events/{event_id}/participants/{user_id}/role", response_model=RoleUpdateResponse)
async def update_participant_role(
	event_id: UUID,
	user_id: UUID,
	payload: RoleUpdateRequest,
	auth_user: AuthenticatedUser = Depends(get_current_user),
) -> RoleUpdateResponse:
	try:
		participant = await _participants.update_participant_role(event_id, user_id, payload.role_id, auth_user.uuid)
	except EngineError as exc:
		raise to_http_error(exc) from exc
	return RoleUpdateResponse(participant_id=participant.id, user_id=participant.user_id, role_id=participant.role_id)


@router.get("/roles", response_model=list[RoleSummary])
async def list_roles(auth_user: AuthenticatedUser = Depends(get_current_user)) -> list[RoleSummary]:
	roles = await _roles.list_roles()
	return [RoleSummary(id=role.id, name=role.name) for role in roles]


@router.post("/events/{event_id}/invitations", response_model=BulkInviteResponse, status_code=status.HTTP_201_CREATED)
async def bulk_invite(
	event_id: UUID,
	payload: BulkInviteRequest,
	background: BackgroundTasks,
	auth_user: AuthenticatedUser = Depends(get_current_user),
) -> BulkInviteResponse:
	try:
		created = await _invitations.bulk_invite(payload.user_ids, auth_user.uuid, event_id, background=background)
	except EngineError as exc:
		raise to_http_error(exc) from exc
	return BulkInviteResponse(invited=len(created))


@router.get("/event-invitations", response_model=list[EventInvitationSummary])
async def list_event_invitations(
	auth_user: AuthenticatedUser = Depends(get_current_user),
) -> list[EventInvitationSummary]:
	return await _invitations.list_invitations(auth_user.uuid)


@router.post("/events/{event_id}/invitations/respond", response_model=RespondResponse)
async def respond_event_invitation(
	event_id: UUID,
	payload: EventInviteRespondRequest,
	auth_user: AuthenticatedUser = Depends(get_current_user),
) -> RespondResponse:
	try:
		outcome = await _invitations.respond(auth_user.uuid, event_id, payload.accept)
	except EngineError as exc:
		raise to_http_error(exc) from exc
	return RespondResponse(status=outcome.value)


@router.get("/notifications/counts", response_model=NotificationCountsResponse)
async def notification_counts(
	auth_user: AuthenticatedUser = Depends(get_current_user),
) -> NotificationCountsResponse:
	counts = await _invitations.notification_counts(auth_user.uuid)
	return NotificationCountsResponse(
		pending_friend_invitations=counts.pending_friend_invitations,
		pending_event_invitations=counts.pending_event_invitations,
	)


__all__ = ["router"]
