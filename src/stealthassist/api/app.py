"""FastAPI app factory + CORS + exception mapping."""

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from stealthassist.api.routes import llm, preferences
from stealthassist.exceptions import (
    ProviderNotConfiguredError,
    QuotaExceededError,
    StealthAssistError,
    UnknownProviderError,
    UnsupportedCapabilityError,
    VendorTransportError,
)
from stealthassist.logging_config import setup_logging

logger = logging.getLogger(__name__)

_STATUS_CODES: dict[type[StealthAssistError], int] = {
    UnknownProviderError: 404,
    ProviderNotConfiguredError: 409,
    QuotaExceededError: 429,
    UnsupportedCapabilityError: 400,
    VendorTransportError: 502,
}


def create_app() -> FastAPI:
    setup_logging()
    app = FastAPI(title="stealth-assist", version="0.1.0")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(llm.router, prefix="/api/llm", tags=["llm"])
    app.include_router(preferences.router, prefix="/api", tags=["preferences"])

    @app.exception_handler(StealthAssistError)
    async def handle_stealthassist_error(request: Request, exc: StealthAssistError) -> JSONResponse:
        content = {"error": str(exc), "code": exc.code}
        if isinstance(exc, QuotaExceededError):
            content["scope"] = exc.scope
        status_code = _STATUS_CODES.get(type(exc), 500)
        logger.info("Request failed: %s %s -> %d", request.method, request.url.path, status_code)
        return JSONResponse(status_code=status_code, content=content)

    return app


app = create_app()
