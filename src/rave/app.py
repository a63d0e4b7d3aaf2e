"""FastAPI application exposing a robot to the wave service.

Endpoints:
    GET  /_wave/capabilities.xml  events the robot wants to receive
    GET  /_wave/robot/profile     display name and avatar
    POST /_wave/robot/jsonrpc     inbound events; responds with operations
    GET  /health
"""

import json
import secrets

from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from rave.config import Settings, get_settings
from rave.exceptions import EventParseError, RobotLoadError
from rave.logging import configure_logging, logger, request_id_ctx
from rave.robot import Robot, load_robot


class LoggingMiddleware(BaseHTTPMiddleware):
    """Middleware to tag log lines with a per-request id."""

    async def dispatch(self, request: Request, call_next):
        token = request_id_ctx.set(secrets.token_hex(8))
        try:
            response = await call_next(request)
            logger.info(f"{request.method} {request.url.path} -> {response.status_code}")
            return response
        finally:
            request_id_ctx.reset(token)


async def event_parse_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Reject malformed event bundles."""
    logger.warning(f"Rejected event bundle on {request.url.path}: {exc}")
    return JSONResponse(status_code=400, content={"detail": str(exc)})


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Global handler for unhandled exceptions."""
    logger.opt(exception=exc).error(f"Unhandled exception on {request.url.path}")
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


def create_app(robot: Robot | None = None, settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        robot: Robot to serve. Loaded from ``settings.robot`` when omitted.
        settings: Settings to use instead of the environment.

    Raises:
        RobotLoadError: If no robot is given or configured.
    """
    settings = settings or get_settings()

    configure_logging(
        is_production=settings.is_production,
        log_level="DEBUG" if settings.debug else settings.log_level,
    )

    if robot is None:
        if not settings.robot:
            raise RobotLoadError("No robot configured. Set RAVE_ROBOT=module:attribute")
        robot = load_robot(settings.robot)

    app = FastAPI(
        title=robot.name,
        description=f"Wave robot {robot.id}",
        version=robot.version,
        docs_url=None if settings.is_production else "/docs",
        redoc_url=None,
    )
    app.state.robot = robot

    app.add_exception_handler(EventParseError, event_parse_error_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
    app.add_middleware(LoggingMiddleware)

    @app.get("/_wave/capabilities.xml")
    async def capabilities() -> Response:
        return Response(content=robot.capabilities_xml(), media_type="application/xml")

    @app.get("/_wave/robot/profile")
    async def profile() -> dict:
        return robot.profile()

    @app.post("/_wave/robot/jsonrpc")
    async def jsonrpc(request: Request) -> dict:
        body = await request.body()
        try:
            data = json.loads(body)
        except json.JSONDecodeError as e:
            raise EventParseError("$", f"body is not JSON: {e.msg}") from e
        return robot.handle_message(data)

    @app.get("/health")
    async def health_check() -> dict:
        return {"status": "healthy", "robot": robot.id}

    logger.info(f"Serving robot {robot.id} ({len(robot.handled_events)} event type(s))")
    return app
