# -*- coding: utf-8 -*-
# @Author: yaccii
# @Description:

from __future__ import annotations

from fastapi import Request

from campbook.application.bookings.usecase import BookingsUsecase
from campbook.infra.config import Settings
from campbook.infra.db import get_db  # noqa: F401


_bookings_uc_singleton = BookingsUsecase()


def get_bookings_usecase() -> BookingsUsecase:
    return _bookings_uc_singleton


def get_settings(request: Request) -> Settings:
    """create_app 时传入的配置，挂在 app.state 上"""
    return request.app.state.settings
