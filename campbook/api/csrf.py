# -*- coding: utf-8 -*-
# @Author: yaccii
# @Description:

from __future__ import annotations

from fastapi import APIRouter, Depends, Request, Response

from campbook.api.deps import get_settings
from campbook.common.csrf import cookie_options, issue_csrf_token
from campbook.domain import schemas
from campbook.infra.config import Settings


router = APIRouter(prefix="/api/csrf", tags=["csrf"])


@router.get("/restore", response_model=schemas.CsrfTokenResponse)
def restore_csrf_token(
    request: Request,
    response: Response,
    settings: Settings = Depends(get_settings),
):
    token = issue_csrf_token(request)
    # 前端需要读到这个 cookie，不能 HttpOnly
    response.set_cookie(settings.XSRF_COOKIE_NAME, token, **cookie_options(settings, httponly=False))
    return schemas.CsrfTokenResponse(xsrf_token=token)
