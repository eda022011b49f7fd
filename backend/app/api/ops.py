"""Probes and the Prometheus scrape endpoint."""

from __future__ import annotations

import hmac
from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Response, status
from fastapi.responses import JSONResponse
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from app.obs import health
from app.settings import settings

router = APIRouter(tags=["ops"])


def _presented_token(admin_header: Optional[str], authorization: Optional[str]) -> Optional[str]:
	if admin_header:
		return admin_header
	scheme, _, credentials = (authorization or "").partition(" ")
	if scheme.lower() == "bearer" and credentials:
		return credentials
	return None


async def require_metrics_access(
	x_admin_token: Optional[str] = Header(default=None, alias="X-Admin-Token"),
	authorization: Optional[str] = Header(default=None),
) -> None:
	"""Scrapes need the configured admin token unless metrics are public; no token configured means no access."""
	if settings.obs_metrics_public:
		return
	expected = settings.obs_admin_token
	if not expected:
		raise HTTPException(status.HTTP_403_FORBIDDEN, detail="admin_token_not_configured")
	presented = _presented_token(x_admin_token, authorization) or ""
	if not hmac.compare_digest(presented.encode(), expected.encode()):
		raise HTTPException(status.HTTP_403_FORBIDDEN, detail="forbidden")


@router.get("/health/live")
async def health_live() -> dict[str, str]:
	return await health.liveness()


@router.get("/health/ready")
async def health_ready() -> Response:
	status_code, payload = await health.readiness()
	return JSONResponse(payload, status_code=status_code)


@router.get("/metrics", dependencies=[Depends(require_metrics_access)])
async def prometheus_metrics() -> Response:
	return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
