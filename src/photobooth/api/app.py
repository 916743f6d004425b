"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import Body, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from photobooth.api.admin import router as admin_router
from photobooth.api.dependencies import client_address
from photobooth.app_logging import configure_logging
from photobooth.containers import AppContainer
from photobooth.domain.errors import (
    ErrorKind,
    InvalidArgumentError,
    PipelineError,
)
from photobooth.domain.transform import TransformRequest

ERROR_STATUS_CODES: dict[ErrorKind, int] = {
    ErrorKind.INVALID_ARGUMENT: 400,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.FAILED_PRECONDITION: 412,
    ErrorKind.RESOURCE_EXHAUSTED: 429,
    ErrorKind.PROCESSING_FAILED: 422,
    ErrorKind.UPSTREAM_ERROR: 502,
    ErrorKind.TIMEOUT: 504,
    ErrorKind.INTERNAL: 500,
}


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    app.include_router(admin_router)

    @app.exception_handler(PipelineError)
    async def pipeline_error_handler(
        request: Request, exc: PipelineError
    ) -> JSONResponse:
        if exc.kind is ErrorKind.INTERNAL:
            logger.error("Internal failure", extra={"path": request.url.path})
        return JSONResponse(
            status_code=ERROR_STATUS_CODES[exc.kind],
            content={"error": exc.to_payload()},
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        logger.info(
            "Rejected malformed request body",
            extra={"path": request.url.path, "errors": len(exc.errors())},
        )
        error = InvalidArgumentError("Request body must be a JSON object")
        if request.url.path.startswith("/admin/photos"):
            error = InvalidArgumentError("photoIds array is required")
        return JSONResponse(
            status_code=ERROR_STATUS_CODES[error.kind],
            content={"error": error.to_payload()},
        )

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.post("/transform")
    async def transform(
        request: Request, payload: dict[str, object] = Body(...)
    ) -> dict[str, str]:
        """Stylize a kiosk photo and return its public URL."""
        state_container: AppContainer = request.app.state.container
        client_ip = client_address(request)
        image_url = await state_container.transform_pipeline.transform(
            TransformRequest.from_payload(payload), client_ip
        )
        return {"imageUrl": image_url}

    return app
