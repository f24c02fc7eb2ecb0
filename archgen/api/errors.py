"""Map generation errors onto HTTP responses."""
import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from archgen.core.errors import (
    ArchgenError,
    GenerationCancelled,
    ProjectNotFoundError,
    RenderError,
    ValidationError,
    WriteError,
)

log = logging.getLogger(__name__)

STATUS_CODES = (
    (ValidationError, 400, "validation_error"),
    (ProjectNotFoundError, 404, "project_not_found"),
    (RenderError, 422, "render_error"),
    (GenerationCancelled, 409, "cancelled"),
    (WriteError, 500, "write_error"),
)


def error_status(exc: ArchgenError) -> tuple:
    """(status code, error type) for an engine error; unknown subclasses are 500."""
    for cls, status_code, error_type in STATUS_CODES:
        if isinstance(exc, cls):
            return status_code, error_type
    return 500, "generation_error"


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(ArchgenError)
    async def archgen_error_handler(request: Request, exc: ArchgenError) -> JSONResponse:
        status_code, error_type = error_status(exc)
        if status_code >= 500:
            log.error("%s %s failed: %s", request.method, request.url.path, exc)
        else:
            log.warning("%s %s rejected: %s", request.method, request.url.path, exc)
        content = {"detail": str(exc), "type": error_type}
        entity = getattr(exc, "entity", None)
        if entity:
            content["entity"] = entity
        return JSONResponse(status_code=status_code, content=content)
