"""FastAPI application for qrpay."""
from __future__ import annotations

import logging
from typing import Any

from fastapi import Body, Depends, FastAPI, Header, HTTPException, Request, status
from fastapi.responses import JSONResponse, Response

from .config import settings
from .logging_conf import configure_logging
from .middleware import RequestLoggingMiddleware
from .monitoring import metrics_payload, record_payload_generated, record_service_error, record_validation_failure
from .registry import DEFAULT_REGISTRY
from .renderer import render_png
from .schemas import (
    FieldErrorResponse,
    GeneratePayloadRequest,
    GeneratePayloadResponse,
    ParsePayloadRequest,
    ParsePayloadResponse,
    ValidatePayloadResponse,
)
from .services.errors import PayloadValidationError, ServiceError
from .services.generator import PayloadGenerator
from .services.parser import PayloadParser
from .services.validator import PayloadValidator

app = FastAPI(title="qrpay", version="0.1.0")
app.add_middleware(RequestLoggingMiddleware)

logger = logging.getLogger("qrpay.api")

validator = PayloadValidator(DEFAULT_REGISTRY)
generator = PayloadGenerator(DEFAULT_REGISTRY)
parser = PayloadParser(DEFAULT_REGISTRY)


def _warn_insecure_defaults() -> None:
    if settings.api_key == "dev-secret-key":
        logger.warning("api key is using the default value", extra={"config_key": "api_key"})


@app.on_event("startup")
async def on_startup() -> None:
    configure_logging()
    _warn_insecure_defaults()


async def require_api_key(x_api_key: str = Header(...)) -> None:
    if x_api_key != settings.api_key:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid API key")


def _route_path(request: Request) -> str:
    route = request.scope.get("route")
    return route.path if route else request.url.path


@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    route_path = _route_path(request)
    logger.warning(
        "service error",
        extra={"code": exc.code, "path": route_path, "method": request.method},
    )
    record_service_error(exc.code, route_path)
    content: dict[str, Any] = {"code": exc.code, "message": exc.message}
    if isinstance(exc, PayloadValidationError):
        content["errors"] = [FieldErrorResponse(field=e.field, path=e.path, reason=e.reason).model_dump() for e in exc.errors]
    return JSONResponse(status_code=exc.status_code, content=content)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(
        "unhandled exception",
        extra={"path": _route_path(request), "method": request.method},
    )
    return JSONResponse(status_code=500, content={"code": "ERR_INTERNAL", "message": "Internal server error"})


@app.get("/health", tags=["system"])
async def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/metrics", tags=["system"])
async def metrics() -> Response:
    payload, content_type = metrics_payload()
    return Response(content=payload, media_type=content_type)


@app.post("/v1/payloads", response_model=GeneratePayloadResponse, tags=["payloads"], dependencies=[Depends(require_api_key)])
async def generate_payload(body: GeneratePayloadRequest) -> GeneratePayloadResponse:
    try:
        payment = validator.validate(body.payment)
    except PayloadValidationError as exc:
        for error in exc.errors:
            record_validation_failure(error.path)
        raise

    payload = generator.generate(payment)
    poi = "dynamic" if payment.get("amount") else "static"
    record_payload_generated(poi)

    png = None
    if body.render:
        png = render_png(body.url if body.url is not None else settings.base_url, payload, size=body.size, level=body.level)

    return GeneratePayloadResponse(payload=payload, checksum=payload[-4:], qr_png_base64=png)


@app.post("/v1/payloads/validate", response_model=ValidatePayloadResponse, tags=["payloads"], dependencies=[Depends(require_api_key)])
async def validate_payload(payment: dict[str, Any] = Body(...)) -> ValidatePayloadResponse:
    errors = validator.collect_errors(payment)
    for error in errors:
        record_validation_failure(error.path)
    return ValidatePayloadResponse(
        valid=not errors,
        errors=[FieldErrorResponse(field=e.field, path=e.path, reason=e.reason) for e in errors],
    )


@app.post("/v1/payloads/parse", response_model=ParsePayloadResponse, tags=["payloads"], dependencies=[Depends(require_api_key)])
async def parse_payload(body: ParsePayloadRequest) -> ParsePayloadResponse:
    return ParsePayloadResponse(fields=parser.parse(body.payload))
