# -*- coding: utf-8 -*-
# @Author: yaccii
# @Description:

from __future__ import annotations

import logging
import re
import traceback
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException as StarletteHTTPException

from campbook.common.errors import (
    ERROR_VARIANTS,
    AppError,
    AuthorizationError,
    NotFoundError,
    UnclassifiedError,
    ValidationError,
)
from campbook.common.pipeline import RequestState, get_lifecycle
from campbook.domain.schemas import ErrorBody
from campbook.domain.validation import ModelValidationError
from campbook.infra.config import Settings

logger = logging.getLogger(__name__)


# sqlite: "UNIQUE constraint failed: users.username, users.email"
_SQLITE_CONSTRAINT_RE = re.compile(r"(UNIQUE|NOT NULL) constraint failed: (.+)$", re.IGNORECASE)
# postgres: "Key (username)=(Demo) already exists."
_PG_UNIQUE_RE = re.compile(r"Key \(([^)]+)\)=\(.*\) already exists", re.IGNORECASE)
# mysql: "Duplicate entry 'Demo' for key 'users.ix_users_username'"
_MYSQL_DUP_RE = re.compile(r"Duplicate entry '.*' for key '(?:[\w]+\.)?(?:ix_\w+?_|uq_\w+?_)?([\w]+)'", re.IGNORECASE)
# mysql: "Column 'email' cannot be null"
_MYSQL_NULL_RE = re.compile(r"Column '(\w+)' cannot be null", re.IGNORECASE)


def resource_not_found() -> NotFoundError:
    """兜底：没有任何路由认领的请求"""
    return NotFoundError()


def _integrity_messages(exc: IntegrityError) -> List[str]:
    raw = str(getattr(exc, "orig", None) or exc).strip()

    m = _SQLITE_CONSTRAINT_RE.search(raw.splitlines()[0] if raw else "")
    if m:
        kind = m.group(1).upper()
        columns = [c.strip().split(".")[-1] for c in m.group(2).split(",") if c.strip()]
        suffix = "must be unique" if kind == "UNIQUE" else "cannot be null"
        return [f"{c} {suffix}" for c in columns]

    m = _PG_UNIQUE_RE.search(raw)
    if m:
        return [f"{c.strip()} must be unique" for c in m.group(1).split(",")]

    m = _MYSQL_DUP_RE.search(raw)
    if m:
        return [f"{m.group(1)} must be unique"]

    m = _MYSQL_NULL_RE.search(raw)
    if m:
        return [f"{m.group(1)} cannot be null"]

    return [raw.splitlines()[0] if raw else "constraint violation"]


def _request_validation_messages(exc: RequestValidationError) -> List[str]:
    items: List[str] = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        msg = str(err.get("msg") or "invalid value")
        items.append(f"{loc}: {msg}" if loc else msg)
    return items


def classify(exc: BaseException) -> AppError:
    """把任意异常归到四种错误之一；本身不抛异常"""

    if isinstance(exc, ERROR_VARIANTS):
        return exc

    if isinstance(exc, ModelValidationError):
        return ValidationError(fields=[v.message for v in exc.violations])

    if isinstance(exc, IntegrityError):
        return ValidationError(fields=_integrity_messages(exc))

    if isinstance(exc, RequestValidationError):
        return ValidationError(fields=_request_validation_messages(exc))

    if isinstance(exc, StarletteHTTPException):
        if exc.status_code == 404:
            return resource_not_found()
        return UnclassifiedError(message=str(exc.detail), status_code=exc.status_code)

    if isinstance(exc, AppError):
        return UnclassifiedError(message=exc.message, status_code=exc.status_code)

    return UnclassifiedError(message=str(exc) or type(exc).__name__)


def format_stack(exc: BaseException) -> str:
    return "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))


def error_body(err: AppError, stack: Optional[str]) -> Dict[str, Any]:
    match err:
        case NotFoundError() | AuthorizationError():
            errors = list(err.errors or [])
        case ValidationError():
            errors = err.fields
        case UnclassifiedError():
            errors = None
        case _:
            raise TypeError(f"unsupported error variant: {type(err).__name__}")

    return ErrorBody(
        title=err.title,
        message=err.message,
        errors=errors,
        stack=stack,
    ).model_dump()


def render_error(request: Request, exc: BaseException, settings: Settings) -> JSONResponse:
    """唯一的错误出口：记录原始异常 -> 分类 -> 生成固定结构的 JSON 响应"""

    lifecycle = get_lifecycle(request)
    lifecycle.fault()

    logger.error(
        "request failed: %s %s (%s)",
        request.method,
        request.url.path,
        type(exc).__name__,
        exc_info=(type(exc), exc, exc.__traceback__),
    )

    err = classify(exc)
    lifecycle.advance(RequestState.CLASSIFIED)

    stack = None if settings.is_production else format_stack(exc)
    # 405 的 Allow 等协议头原样带回
    headers = exc.headers if isinstance(exc, StarletteHTTPException) else None
    response = JSONResponse(status_code=err.status_code, content=error_body(err, stack), headers=headers)

    lifecycle.advance(RequestState.RESPONDED)
    return response


def register_error_handlers(app: FastAPI, settings: Settings) -> None:
    """路由层（ExceptionMiddleware 内）的错误也走同一个出口

    其余异常不在这里注册，直接冒泡到 ErrorBoundaryMiddleware。
    """

    async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return render_error(request, exc, settings)

    async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        return render_error(request, exc, settings)

    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
