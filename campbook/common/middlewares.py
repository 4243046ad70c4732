# -*- coding: utf-8 -*-
# @Author: yaccii
# @Description:

from __future__ import annotations

import logging
import time
from typing import Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from campbook.common.exception_handlers import render_error
from campbook.common.logging import trace_context
from campbook.common.pipeline import RequestLifecycle, RequestState, get_lifecycle
from campbook.infra.config import Settings

access_logger = logging.getLogger("campbook.access")
logger = logging.getLogger(__name__)


class TraceIdMiddleware(BaseHTTPMiddleware):
    """入口 stage：trace_id、请求状态机、访问日志"""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        with trace_context(request.headers.get("X-Request-Id")) as trace_id:
            lifecycle = RequestLifecycle()
            request.state.lifecycle = lifecycle
            lifecycle.advance(RequestState.NORMALIZED)

            started = time.perf_counter()
            response: Response = await call_next(request)
            elapsed_ms = (time.perf_counter() - started) * 1000

            response.headers["X-Trace-Id"] = trace_id
            access_logger.info(
                "%s %s %s %.3f ms - %s",
                request.method,
                request.url.path,
                response.status_code,
                elapsed_ms,
                response.headers.get("content-length", "-"),
            )
            return response


class ResourcePolicyMiddleware:
    """给所有响应加 Cross-Origin-Resource-Policy 头（含错误响应）"""

    def __init__(self, app: ASGIApp, *, policy: str = "same-origin") -> None:
        self.app = app
        self.policy = policy.encode("latin-1")

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        async def send_with_policy(message: Message) -> None:
            if message["type"] == "http.response.start":
                headers = [(k, v) for k, v in message.get("headers", []) if k.lower() != b"cross-origin-resource-policy"]
                headers.append((b"cross-origin-resource-policy", self.policy))
                message["headers"] = headers
            await send(message)

        await self.app(scope, receive, send_with_policy)


class ErrorBoundaryMiddleware:
    """内层 stage 或路由抛出的异常都在这里收口，每个请求只发一次响应"""

    def __init__(self, app: ASGIApp, *, settings: Settings) -> None:
        self.app = app
        self.settings = settings

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        response_started = False

        async def send_tracking(message: Message) -> None:
            nonlocal response_started
            if message["type"] == "http.response.start":
                response_started = True
            await send(message)

        try:
            await self.app(scope, receive, send_tracking)
        except Exception as exc:  # noqa: BLE001
            request = Request(scope, receive)
            lifecycle = get_lifecycle(request)
            if lifecycle.is_terminal and not response_started:
                raise
            if response_started:
                # 响应已经发出，只能记录
                logger.error(
                    "error after response was sent: %s %s (%s)",
                    request.method,
                    request.url.path,
                    lifecycle,
                    exc_info=(type(exc), exc, exc.__traceback__),
                )
                return
            response = render_error(request, exc, self.settings)
            await response(scope, receive, send)


class DispatchMiddleware(BaseHTTPMiddleware):
    """最内层 stage：交给路由，正常返回时进入 HandlerCompleted"""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        lifecycle = get_lifecycle(request)
        lifecycle.advance(RequestState.DISPATCHED)
        response: Response = await call_next(request)
        # 路由层错误处理已经走到 Responded 的不再推进
        if lifecycle.can_advance(RequestState.HANDLER_COMPLETED):
            lifecycle.advance(RequestState.HANDLER_COMPLETED)
        return response
