"""FastAPI application entrypoint for the rendezvous signaling service."""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi import Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

import rendezvous.runtime as runtime
from rendezvous.api.errors import handle_http_exception
from rendezvous.api.errors import handle_room_error
from rendezvous.api.routers.passages import router as passages_router
from rendezvous.api.routers.rooms import router as rooms_router
from rendezvous.core.logging_config import get_logger
from rendezvous.core.logging_config import setup_logging
from rendezvous.rooms.registry import RoomError
from rendezvous.ws.routers import router as ws_router
from rendezvous.ws.routers import ws_signaling

setup_logging(log_level=runtime.settings.rdv_log_level, log_file=runtime.settings.rdv_log_file)
logger = get_logger(__name__)


def startup() -> None:
    """Reset in-memory rooms, passages and connections before handling traffic."""
    runtime.startup()
    logger.info("Rendezvous service started (env=%s)", runtime.settings.rdv_app_env)


@asynccontextmanager
async def lifespan(_: FastAPI):
    startup()
    yield


app = FastAPI(title="Rendezvous", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=runtime.settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)


@app.exception_handler(StarletteHTTPException)
async def handle_http_exception_route(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Covers route-raised errors and router misses such as 404 and 405."""
    return await handle_http_exception(request, exc)


@app.exception_handler(RoomError)
async def handle_room_error_route(request: Request, exc: RoomError) -> JSONResponse:
    return await handle_room_error(request, exc)


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok"}


app.include_router(rooms_router)
app.include_router(passages_router)
app.include_router(ws_router)


__all__ = [
    "app",
    "handle_http_exception",
    "startup",
    "ws_signaling",
]


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=runtime.settings.rdv_app_host, port=runtime.settings.rdv_app_port)
