"""FastAPI app for the arena backend: players, headset bindings, game sessions."""
import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

import config
from arena.errors import ArenaError, InternalError
from arena.models.base import init_db
from web.api.auth_routes import router as auth_router
from web.api.player_routes import router as player_router
from web.api.session_routes import admin_router as admin_session_router, router as session_router
from web.api.team_routes import router as team_router
from web.api.utils import describe_validation_errors

logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("arena.http")


@asynccontextmanager
async def lifespan(app: FastAPI):
    await init_db()
    logger.info("Database ready")
    yield


app = FastAPI(title="Arena-Core API", lifespan=lifespan)


class RequestLogMiddleware(BaseHTTPMiddleware):
    """Log one line per request: method, path, status, elapsed time."""

    async def dispatch(self, request, call_next):
        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.info("%s %s -> %d (%.1f ms)", request.method, request.url.path, response.status_code, elapsed_ms)
        return response


app.add_middleware(RequestLogMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _error_response(request: Request, status_code: int, code: int, message: str) -> JSONResponse:
    """Session routes (/api/...) answer {success, error}; player/team/account routes answer {code, msg}."""
    if request.url.path.startswith("/api/"):
        body = {"success": False, "error": message}
    else:
        body = {"code": code, "msg": message}
    return JSONResponse(status_code=status_code, content=body)


@app.exception_handler(ArenaError)
async def arena_error_handler(request: Request, exc: ArenaError):
    if isinstance(exc, InternalError):
        logger.warning("%s %s failed: %s", request.method, request.url.path, exc.message)
    else:
        logger.info("%s %s rejected (%s): %s", request.method, request.url.path, type(exc).__name__, exc.message)
    return _error_response(request, exc.status_code, exc.code, exc.message)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    field, message = describe_validation_errors(list(exc.errors()))
    logger.info("%s %s rejected: %s", request.method, request.url.path, message)
    return _error_response(request, 400, 1, message)


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return _error_response(request, 500, 500, "Internal Server Error")


app.include_router(session_router)
app.include_router(admin_session_router)
app.include_router(player_router)
app.include_router(team_router)
app.include_router(auth_router)


@app.get("/health")
async def health():
    return {"status": "ok"}
