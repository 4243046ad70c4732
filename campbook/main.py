# -*- coding: utf-8 -*-
# @Author: yaccii
# @Description:

from __future__ import annotations

from typing import Optional

from fastapi import FastAPI

from campbook.api import bookings as bookings_api, csrf as csrf_api
from campbook.common.exception_handlers import register_error_handlers
from campbook.common.logging import setup_logging
from campbook.common.pipeline import build_pipeline
from campbook.infra.config import Settings, settings as default_settings


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """组装应用：管线 stage、错误出口、路由

    部署模式只从传入的 settings 读取，各 stage 不读全局状态。
    """
    settings = settings or default_settings
    setup_logging(settings.LOG_LEVEL)

    # ---------- pipeline（外层在前） ----------
    stages = build_pipeline(settings)

    app = FastAPI(
        title="campbook-api",
        version="1.0.0",
        docs_url=None if settings.is_production else "/docs",
        redoc_url=None,
        middleware=[mw for _, mw in stages],
    )
    app.state.settings = settings
    app.state.pipeline_stages = tuple(name for name, _ in stages)

    # ---------- handlers ----------
    register_error_handlers(app, settings)

    @app.get("/health")
    def health_check() -> dict:
        return {"status": "ok"}

    # csrf token
    app.include_router(csrf_api.router)

    # 预订
    app.include_router(bookings_api.router)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("campbook.main:app", host="0.0.0.0", port=8000)
