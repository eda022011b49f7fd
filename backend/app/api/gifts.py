"""REST API surface for gift lists and list sharing."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, status

from app.api.errors import to_http_error
from app.domain.common.errors import EngineError
from app.domain.gifts.models import Gift, ListEvent
from app.domain.gifts.schemas import (
	CheckGiftRequest,
	GiftListView,
	GiftsAddRequest,
	ListCreateRequest,
	ListEventDetail,
	ListEventLinkRequest,
	ListEventSummary,
)
from app.domain.gifts.service import GiftService
from app.infra.auth import AuthenticatedUser, get_current_user

router = APIRouter(prefix="/gifts", tags=["gifts"])
_service = GiftService()


@router.get("/lists", response_model=list[GiftListView])
async def list_lists(auth_user: AuthenticatedUser = Depends(get_current_user)) -> list[GiftListView]:
	return await _service.list_user_lists(auth_user.uuid)


@router.post("/lists", response_model=GiftListView, status_code=status.HTTP_201_CREATED)
async def create_list(
	payload: ListCreateRequest,
	auth_user: AuthenticatedUser = Depends(get_current_user),
) -> GiftListView:
	return await _service.create_list(auth_user.uuid, payload.name, payload.gifts)


@router.post("/lists/{list_id}/gifts", response_model=list[Gift], status_code=status.HTTP_201_CREATED)
async def add_gifts(
	list_id: UUID,
	payload: GiftsAddRequest,
	auth_user: AuthenticatedUser = Depends(get_current_user),
) -> list[Gift]:
	try:
		return await _service.add_gifts(auth_user.uuid, list_id, payload.gifts)
	except EngineError as exc:
		raise to_http_error(exc) from exc


@router.delete("/lists/{list_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_list(
	list_id: UUID,
	auth_user: AuthenticatedUser = Depends(get_current_user),
) -> None:
	try:
		await _service.delete_list(auth_user.uuid, list_id)
	except EngineError as exc:
		raise to_http_error(exc) from exc


@router.post("/list-events", response_model=ListEvent, status_code=status.HTTP_201_CREATED)
async def add_list_event(
	payload: ListEventLinkRequest,
	auth_user: AuthenticatedUser = Depends(get_current_user),
) -> ListEvent:
	try:
		return await _service.add_list_event(auth_user.uuid, payload.event_id, payload.list_id)
	except EngineError as exc:
		raise to_http_error(exc) from exc


@router.delete("/list-events", status_code=status.HTTP_204_NO_CONTENT)
async def remove_list_event(
	payload: ListEventLinkRequest,
	auth_user: AuthenticatedUser = Depends(get_current_user),
) -> None:
	try:
		await _service.remove_list_event(auth_user.uuid, payload.event_id, payload.list_id)
	except EngineError as exc:
		raise to_http_error(exc) from exc


@router.get("/list-events/item/{list_event_id}", response_model=ListEventDetail)
async def find_list(
	list_event_id: UUID,
	auth_user: AuthenticatedUser = Depends(get_current_user),
) -> ListEventDetail:
	try:
		return await _service.find_list(auth_user.uuid, list_event_id)
	except EngineError as exc:
		raise to_http_error(exc) from exc


@router.get("/list-events/{event_id}", response_model=list[ListEventSummary])
async def find_list_event(
	event_id: UUID,
	auth_user: AuthenticatedUser = Depends(get_current_user),
) -> list[ListEventSummary]:
	try:
		return await _service.find_list_event(auth_user.uuid, event_id)
	except EngineError as exc:
		raise to_http_error(exc) from exc


@router.delete("/items/{gift_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_gift(
	gift_id: UUID,
	auth_user: AuthenticatedUser = Depends(get_current_user),
) -> None:
	try:
		await _service.delete_gift(auth_user.uuid, gift_id)
	except EngineError as exc:
		raise to_http_error(exc) from exc


@router.post("/check", response_model=Gift)
async def check_gift(
	payload: CheckGiftRequest,
	auth_user: AuthenticatedUser = Depends(get_current_user),
) -> Gift:
	try:
		return await _service.check_gift(auth_user.uuid, payload.event_id, payload.gift_id, payload.checked)
	except EngineError as exc:
		raise to_http_error(exc) from exc


__all__ = ["router"]
