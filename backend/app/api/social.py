"""REST API surface for friend requests and friendships."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, BackgroundTasks, Depends, Query, status
from pydantic import EmailStr

from app.api.errors import to_http_error
from app.domain.common.errors import EngineError
from app.domain.social.schemas import (
	DeletedCount,
	FriendRequestPayload,
	FriendRequestResponse,
	FriendRow,
	InvitationRespondRequest,
	InvitationSummary,
	RespondResponse,
	UserPublic,
)
from app.domain.social.service import SocialService
from app.infra.auth import AuthenticatedUser, get_current_user

router = APIRouter(tags=["social"])
_service = SocialService()


@router.post("/invitations/request", response_model=FriendRequestResponse)
async def request_friend(
	payload: FriendRequestPayload,
	background: BackgroundTasks,
	auth_user: AuthenticatedUser = Depends(get_current_user),
) -> FriendRequestResponse:
	try:
		outcome = await _service.request_or_confirm(payload.target_id, auth_user.uuid, background=background)
	except EngineError as exc:
		raise to_http_error(exc) from exc
	return FriendRequestResponse(status=outcome.value)


@router.get("/invitations", response_model=list[InvitationSummary])
async def list_invitations(auth_user: AuthenticatedUser = Depends(get_current_user)) -> list[InvitationSummary]:
	return await _service.list_invitations(auth_user.uuid)


@router.post("/invitations/{invitation_id}/respond", response_model=RespondResponse)
async def respond_invitation(
	invitation_id: UUID,
	payload: InvitationRespondRequest,
	auth_user: AuthenticatedUser = Depends(get_current_user),
) -> RespondResponse:
	try:
		outcome = await _service.respond(invitation_id, auth_user.uuid, payload.accept)
	except EngineError as exc:
		raise to_http_error(exc) from exc
	return RespondResponse(status=outcome.value)


@router.delete("/invitations/inbox", response_model=DeletedCount)
async def decline_all_invitations(auth_user: AuthenticatedUser = Depends(get_current_user)) -> DeletedCount:
	deleted = await _service.delete_by_request_id(auth_user.uuid)
	return DeletedCount(deleted=deleted)


@router.get("/friends", response_model=list[FriendRow])
async def list_friends(auth_user: AuthenticatedUser = Depends(get_current_user)) -> list[FriendRow]:
	return await _service.list_friends(auth_user.uuid)


@router.delete("/friends/{friend_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_friend(
	friend_id: UUID,
	auth_user: AuthenticatedUser = Depends(get_current_user),
) -> None:
	try:
		await _service.remove_friend(auth_user.uuid, friend_id)
	except EngineError as exc:
		raise to_http_error(exc) from exc


@router.get("/users/lookup", response_model=UserPublic)
async def lookup_user(
	email: EmailStr = Query(...),
	auth_user: AuthenticatedUser = Depends(get_current_user),
) -> UserPublic:
	try:
		profile = await _service.find_user_by_email(str(email))
	except EngineError as exc:
		raise to_http_error(exc) from exc
	return UserPublic.model_validate(profile)


__all__ = ["router"]
