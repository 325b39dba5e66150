# src/taskmaster/server/app.py
"""FastAPI application for the task persistence service."""

from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from ..config import get_settings
from .routes.tasks import router as tasks_router
from .storage import JsonTaskFile


async def _http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Errors are answered as {"message": ...}, the shape the client reads."""
    return JSONResponse({"message": str(exc.detail)}, status_code=exc.status_code)


async def _validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    first = exc.errors()[0] if exc.errors() else {}
    where = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
    detail = first.get("msg", "invalid value")
    message = f"Invalid task payload: {where} {detail}".strip() if where else "Invalid task payload."
    return JSONResponse({"message": message}, status_code=400)


def create_app(
    *,
    tasks_file: str | Path | None = None,
    cors_origins: list[str] | None = None,
) -> FastAPI:
    settings = get_settings()

    app = FastAPI(title="TaskMaster Task Service")
    app.state.storage = JsonTaskFile(tasks_file or settings.tasks_file)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins if cors_origins is not None else list(settings.cors_origins),
        allow_methods=["GET", "POST", "PUT", "DELETE"],
        allow_headers=["Content-Type"],
    )
    app.add_exception_handler(StarletteHTTPException, _http_error)
    app.add_exception_handler(RequestValidationError, _validation_error)

    app.include_router(tasks_router)

    @app.get("/api/health")
    def health_check():
        """Health check endpoint."""
        return {"status": "healthy", "service": "taskmaster-api"}

    return app
