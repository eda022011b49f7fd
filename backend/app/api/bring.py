"""REST API surface for items to bring."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, status

from app.api.errors import to_http_error
from app.domain.bring.models import BringItem
from app.domain.bring.schemas import (
	BringItemCreateRequest,
	BringItemView,
	ReleaseResponse,
	TakeRequest,
	TakeResponse,
)
from app.domain.bring.service import BringItemService
from app.domain.common.errors import EngineError
from app.infra.auth import AuthenticatedUser, get_current_user

router = APIRouter(prefix="/bring", tags=["bring"])
_service = BringItemService()


@router.post("/items", response_model=BringItem, status_code=status.HTTP_201_CREATED)
async def create_item(
	payload: BringItemCreateRequest,
	auth_user: AuthenticatedUser = Depends(get_current_user),
) -> BringItem:
	try:
		return await _service.create(payload.event_id, auth_user.uuid, payload.name, payload.requested_quantity)
	except EngineError as exc:
		raise to_http_error(exc) from exc


@router.post("/items/{item_id}/take", response_model=TakeResponse)
async def take_item(
	item_id: UUID,
	payload: TakeRequest,
	auth_user: AuthenticatedUser = Depends(get_current_user),
) -> TakeResponse:
	try:
		result = await _service.take(item_id, auth_user.uuid, payload.quantity)
	except EngineError as exc:
		raise to_http_error(exc) from exc
	return TakeResponse(
		take_id=result.take.id,
		quantity=result.take.quantity,
		total_taken=result.total_taken,
		requested_quantity=result.requested_quantity,
		is_taken=result.is_taken,
	)


@router.delete("/items/{item_id}/take", response_model=ReleaseResponse)
async def release_take(
	item_id: UUID,
	auth_user: AuthenticatedUser = Depends(get_current_user),
) -> ReleaseResponse:
	try:
		result = await _service.release_take(item_id, auth_user.uuid)
	except EngineError as exc:
		raise to_http_error(exc) from exc
	return ReleaseResponse(
		total_taken=result.total_taken,
		requested_quantity=result.requested_quantity,
		is_taken=result.is_taken,
	)


@router.get("/events/{event_id}/items", response_model=list[BringItemView])
async def list_items(
	event_id: UUID,
	auth_user: AuthenticatedUser = Depends(get_current_user),
) -> list[BringItemView]:
	try:
		return await _service.list_items(event_id, auth_user.uuid)
	except EngineError as exc:
		raise to_http_error(exc) from exc


@router.delete("/items/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_item(
	item_id: UUID,
	auth_user: AuthenticatedUser = Depends(get_current_user),
) -> None:
	try:
		await _service.delete_bring_item(item_id, auth_user.uuid)
	except EngineError as exc:
		raise to_http_error(exc) from exc


__all__ = ["router"]
