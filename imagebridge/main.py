"""FastAPI entry point exposing the image bridge."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

import httpx
from fastapi import Body, Depends, FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, JSONResponse, PlainTextResponse
from starlette.concurrency import run_in_threadpool

from .config import get_settings
from .errors import BridgeError
from .frontend.formcontroller import FormController, render_page
from .schemas import (
    DEFAULT_ASPECT_RATIO,
    ErrorResponse,
    GenerateImageRequest,
    GenerateImageResponse,
    HealthResponse,
)
from .service import ImageBridgeService, get_imagebridge_service

logger = logging.getLogger(__name__)

INVALID_BODY_MESSAGE = "Invalid request body."


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    if settings.api_key_configured:
        logger.info("API Key Status: Loaded")
    else:
        logger.warning("API Key Status: NOT FOUND")
    yield


settings = get_settings()

app = FastAPI(title="Image Bridge", version="1.0.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.cors_origin],
    allow_credentials=True,
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)


@app.exception_handler(BridgeError)
async def bridge_error_handler(request: Request, exc: BridgeError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(error=exc.message).model_dump(),
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.warning("Rejected malformed request to %s: %s", request.url.path, exc.errors())
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=ErrorResponse(error=INVALID_BODY_MESSAGE).model_dump(),
    )


@app.get("/", response_class=PlainTextResponse, summary="Liveness check")
async def root() -> str:
    return "Backend is connected and running!"


@app.get("/health", response_model=HealthResponse, summary="Health Check Endpoint")
async def healthcheck(
    service: ImageBridgeService = Depends(get_imagebridge_service),
):
    return HealthResponse(
        status="ok",
        imageModel=service.image_model_id,
        apiKeyConfigured=service.settings.api_key_configured,
    )


@app.post(
    "/generate-image",
    response_model=GenerateImageResponse,
    responses={
        status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse},
        status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": ErrorResponse},
    },
    summary="Generate a single image from a prompt",
)
async def generate_image(
    payload: GenerateImageRequest | None = Body(None),
    service: ImageBridgeService = Depends(get_imagebridge_service),
):
    # An empty or null body is treated like {} so it reports the missing prompt.
    return await run_in_threadpool(service.generate_image, payload or GenerateImageRequest())


@app.get("/studio", response_class=HTMLResponse, summary="Browser form for generating images")
async def studio(
    request: Request,
    prompt: str | None = None,
    aspectRatio: str = DEFAULT_ASPECT_RATIO,
    negativePrompt: str = "",
):
    transport = httpx.ASGITransport(app=request.app)
    async with httpx.AsyncClient(transport=transport, base_url="http://imagebridge") as client:
        controller = FormController(
            client,
            prompt=prompt or "",
            negative_prompt=negativePrompt,
            aspect_ratio=aspectRatio,
        )
        if prompt is not None:
            await controller.submit()
    return HTMLResponse(render_page(controller, action=request.url.path))


__all__ = ["app"]


if __name__ == "__main__":  # pragma: no cover - convenience entry point
    import uvicorn

    logging.basicConfig(level=settings.log_level.upper())
    uvicorn.run("imagebridge.main:app", host=settings.host, port=settings.port)
