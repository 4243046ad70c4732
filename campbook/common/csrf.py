# -*- coding: utf-8 -*-
# @Author: yaccii
# @Description:

"""CSRF（double submit）

- secret 存在 HttpOnly cookie 里，首次访问时下发
- token = "<salt>-<digest>"，digest = urlsafe_b64(sha256("salt-secret"))，不带 padding
- 非 GET/HEAD/OPTIONS 请求必须在 header 或 query 里带上与 secret 匹配的 token
"""

from __future__ import annotations

import base64
import hashlib
import hmac
import secrets
from typing import Callable, Optional

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from campbook.common.errors import AuthorizationError
from campbook.common.exception_handlers import render_error
from campbook.common.pipeline import RequestState, get_lifecycle
from campbook.infra.config import Settings


SAFE_METHODS = frozenset({"GET", "HEAD", "OPTIONS"})

TOKEN_HEADERS = ("csrf-token", "xsrf-token", "x-csrf-token", "x-xsrf-token")
TOKEN_QUERY_PARAM = "_csrf"


class CsrfTokens:
    def new_secret(self) -> str:
        return secrets.token_urlsafe(18)

    def create(self, secret: str) -> str:
        salt = secrets.token_hex(4)
        return f"{salt}-{self._digest(salt, secret)}"

    def verify(self, secret: Optional[str], token: Optional[str]) -> bool:
        if not secret or not token or "-" not in token:
            return False
        salt = token.split("-", 1)[0]
        expected = f"{salt}-{self._digest(salt, secret)}"
        return hmac.compare_digest(expected.encode("utf-8"), token.encode("utf-8"))

    @staticmethod
    def _digest(salt: str, secret: str) -> str:
        raw = hashlib.sha256(f"{salt}-{secret}".encode("utf-8")).digest()
        return base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")


def read_token(request: Request) -> Optional[str]:
    for name in TOKEN_HEADERS:
        value = request.headers.get(name)
        if value:
            return value
    return request.query_params.get(TOKEN_QUERY_PARAM) or None


def cookie_options(settings: Settings, *, httponly: bool) -> dict:
    prod = settings.is_production
    return {
        "httponly": httponly,
        "secure": prod,
        # 非生产环境不带 SameSite
        "samesite": "lax" if prod else None,
        "path": "/",
    }


def issue_csrf_token(request: Request) -> str:
    """给当前请求的 secret 生成一个 token（供 /api/csrf/restore 使用）"""
    secret = getattr(request.state, "csrf_secret", None)
    tokens = getattr(request.state, "csrf_tokens", None)
    if not secret or tokens is None:
        raise RuntimeError("CsrfMiddleware is not installed")
    return tokens.create(secret)


class CsrfMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, *, settings: Settings, tokens: Optional[CsrfTokens] = None) -> None:  # noqa: ANN001
        super().__init__(app)
        self.settings = settings
        self.tokens = tokens or CsrfTokens()

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        cookie_name = self.settings.CSRF_COOKIE_NAME
        secret = request.cookies.get(cookie_name)
        issued: Optional[str] = None
        if not secret:
            secret = issued = self.tokens.new_secret()

        request.state.csrf_secret = secret
        request.state.csrf_tokens = self.tokens

        if request.method.upper() not in SAFE_METHODS and not self.tokens.verify(secret, read_token(request)):
            # 拒绝时也要下发 secret，客户端才能 restore 后重试
            response = render_error(request, AuthorizationError("invalid csrf token"), self.settings)
        else:
            get_lifecycle(request).advance(RequestState.POLICY_CHECKED)
            response = await call_next(request)

        if issued is not None:
            response.set_cookie(cookie_name, issued, **cookie_options(self.settings, httponly=True))
        return response
