"""Map domain errors onto the uniform ``{code, msg, data}`` envelope."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError

from paymonitor.core.signature import InvalidSignatureError
from paymonitor.modules.merchants import UnknownMerchantError
from paymonitor.modules.monitor import InvalidPushPayloadError, MonitorError
from paymonitor.schemas import ApiResponse

logger = logging.getLogger(__name__)


def _envelope(code: int, msg: str) -> JSONResponse:
    return JSONResponse(status_code=code, content=ApiResponse.error(code, msg).model_dump())


async def _invalid_signature(request: Request, exc: InvalidSignatureError) -> JSONResponse:
    return _envelope(status.HTTP_401_UNAUTHORIZED, "Invalid signature")


async def _unknown_merchant(request: Request, exc: UnknownMerchantError) -> JSONResponse:
    return _envelope(status.HTTP_400_BAD_REQUEST, "Unknown merchant")


async def _invalid_payload(request: Request, exc: InvalidPushPayloadError) -> JSONResponse:
    return _envelope(status.HTTP_400_BAD_REQUEST, "Invalid push payload")


async def _bad_request(request: Request, exc: Exception) -> JSONResponse:
    return _envelope(status.HTTP_400_BAD_REQUEST, "Missing or invalid parameters")


async def _internal_error(request: Request, exc: Exception) -> JSONResponse:
    logger.error("请求 %s 处理失败: %r", request.url.path, exc)
    return _envelope(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal Server Error")


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(InvalidSignatureError, _invalid_signature)
    app.add_exception_handler(UnknownMerchantError, _unknown_merchant)
    app.add_exception_handler(InvalidPushPayloadError, _invalid_payload)
    app.add_exception_handler(ValidationError, _bad_request)
    app.add_exception_handler(RequestValidationError, _bad_request)
    app.add_exception_handler(MonitorError, _internal_error)
    app.add_exception_handler(SQLAlchemyError, _internal_error)
    app.add_exception_handler(Exception, _internal_error)


__all__ = ["register_exception_handlers"]
