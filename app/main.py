from __future__ import annotations

import time
from contextlib import asynccontextmanager
from typing import Any, Mapping

from fastapi import FastAPI, HTTPException, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response

from app.api.ai import router as ai_router
from app.api.audio import router as audio_router
from app.api.images import router as images_router
from app.api.storybooks import router as storybooks_router
from app.core.config import get_settings
from app.core.errors import build_error
from app.services.generation_services import build_generation_services
from app.services.request_context import (
    configure_logging,
    generate_request_id,
    get_request_id,
    log_event,
    reset_request_id,
    set_request_id,
)
from generators.config import get_provider_settings
from generators.providers.adapters import ProviderAdapter
from generators.providers.errors import StoryParseError


def _json_safe_validation_errors(errors: Any) -> Any:
    return jsonable_encoder(
        errors,
        custom_encoder={
            BaseException: lambda value: str(value),
        },
    )


def _request_id_headers(request: Request) -> dict[str, str] | None:
    request_id = getattr(request.state, "request_id", None) or get_request_id()
    return {"X-Request-ID": request_id} if request_id else None


def create_app(
    environ: Mapping[str, str] | None = None,
    adapters: list[ProviderAdapter] | None = None,
) -> FastAPI:
    settings = get_settings()
    configure_logging()

    @asynccontextmanager
    async def lifespan(application: FastAPI):
        yield
        await application.state.services.aclose()

    application = FastAPI(
        title="StoryForge API",
        version="0.1.0",
        lifespan=lifespan,
    )
    application.state.services = build_generation_services(
        settings,
        get_provider_settings(),
        environ=environ,
        adapters=adapters,
    )
    application.include_router(ai_router)
    application.include_router(images_router)
    application.include_router(audio_router)
    application.include_router(storybooks_router)

    @application.middleware("http")
    async def request_context_middleware(
        request: Request,
        call_next,
    ) -> Response:
        request_id = (request.headers.get("X-Request-ID") or "").strip() or generate_request_id()
        request.state.request_id = request_id
        token = set_request_id(request_id)
        start = time.perf_counter()

        log_event(
            event="request.start",
            path=request.url.path,
            method=request.method,
        )

        response = None
        try:
            response = await call_next(request)
            return response
        finally:
            latency_ms = round((time.perf_counter() - start) * 1000, 2)
            status_code = response.status_code if response is not None else 500
            if response is not None:
                response.headers["X-Request-ID"] = request_id

            log_event(
                event="request.end",
                path=request.url.path,
                method=request.method,
                status_code=status_code,
                latency_ms=latency_ms,
            )
            reset_request_id(token)

    @application.get("/healthz")
    def healthz() -> dict[str, str]:
        return {"status": "ok"}

    @application.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
        detail = exc.detail
        if isinstance(detail, dict) and "error" in detail:
            payload: dict[str, Any] = detail
        else:
            payload = build_error(
                code=f"HTTP_{exc.status_code}",
                message=str(detail),
            )
        return JSONResponse(
            status_code=exc.status_code,
            content=payload,
            headers=_request_id_headers(request),
        )

    @application.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        safe_errors = _json_safe_validation_errors(exc.errors())
        return JSONResponse(
            status_code=422,
            content=build_error(
                code="VALIDATION_ERROR",
                message="request validation failed",
                detail={"errors": safe_errors},
            ),
            headers=_request_id_headers(request),
        )

    @application.exception_handler(StoryParseError)
    async def story_parse_exception_handler(
        request: Request, exc: StoryParseError
    ) -> JSONResponse:
        log_event(event="storybook.parse_failed", reason=str(exc))
        return JSONResponse(
            status_code=422,
            content=build_error(
                code="STORY_PARSE_ERROR",
                message="story text could not be split into scenes",
                detail={"reason": str(exc)},
            ),
            headers=_request_id_headers(request),
        )

    @application.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        return JSONResponse(
            status_code=500,
            content=build_error(
                code="INTERNAL_SERVER_ERROR",
                message="internal server error",
                detail={"reason": str(exc)},
            ),
            headers=_request_id_headers(request),
        )

    return application


app = create_app()
