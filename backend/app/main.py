"""FastAPI application entrypoint."""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api import bring, events, gifts, ops, social
from app.api.errors import install_error_handlers
from app.api.middleware_request_id import RequestIdMiddleware
from app.domain.roles.service import RoleDirectory
from app.infra import postgres
from app.obs import init as obs_init
from app.settings import settings


@asynccontextmanager
async def lifespan(app: FastAPI):
	await postgres.init_pool()
	# Role lookups fail closed when the vocabulary is missing
	await RoleDirectory().seed_defaults()
	try:
		yield
	finally:
		await postgres.close_pool()


app = FastAPI(title="Evift API", lifespan=lifespan)
install_error_handlers(app)

allow_origins = list(getattr(settings, "cors_allow_origins", []))
if not allow_origins:
	allow_origins = [settings.public_app_url]

# Starlette disallows wildcard '*' with allow_credentials=True. Replace '*' with explicit origins.
if "*" in allow_origins:
	if settings.is_dev():
		allow_origins = [
			"http://localhost:3000",
			"http://127.0.0.1:3000",
			"http://localhost:5173",
			"http://127.0.0.1:5173",
		]
	else:
		allow_origins = [settings.public_app_url]

app.add_middleware(
	CORSMiddleware,
	allow_origins=allow_origins,
	allow_credentials=True,
	allow_methods=["*"],
	allow_headers=["*"],
)

obs_init(app)

# Ensure every request carries an X-Request-Id and make it available on request.state
app.add_middleware(RequestIdMiddleware)


app.include_router(ops.router, tags=["ops"])
app.include_router(social.router, tags=["social"])
app.include_router(events.router, tags=["events"])
app.include_router(bring.router, tags=["bring"])
app.include_router(gifts.router, tags=["gifts"])
