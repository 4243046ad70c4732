# -*- coding: utf-8 -*-
# @Author: yaccii
# @Description:

"""日志

- 每条日志带 trace=<id>，id 放在 ContextVar 里，按请求隔离
- 访问日志由 TraceIdMiddleware 写到 campbook.access，uvicorn 自带的访问日志关掉
"""

from __future__ import annotations

import logging
import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator, Optional


LOG_FORMAT = "[%(asctime)s - %(levelname)s - trace=%(trace_id)s - %(name)s - %(message)s]"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_NO_TRACE = "-"

_trace_id_ctx: ContextVar[str] = ContextVar("trace_id", default=_NO_TRACE)


def get_trace_id() -> str:
    return _trace_id_ctx.get() or _NO_TRACE


@contextmanager
def trace_context(incoming: Optional[str] = None) -> Iterator[str]:
    """请求范围内绑定 trace_id，退出时恢复上一个值"""
    trace_id = (incoming or "").strip() or uuid.uuid4().hex
    token = _trace_id_ctx.set(trace_id)
    try:
        yield trace_id
    finally:
        _trace_id_ctx.reset(token)


class TraceIdFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:  # noqa: A003
        if not hasattr(record, "trace_id"):
            record.trace_id = get_trace_id()
        return True


def _resolve_level(level: int | str) -> int:
    if isinstance(level, int):
        return level
    return getattr(logging, str(level).upper(), logging.INFO)


def setup_logging(level: int | str = logging.INFO) -> None:
    """初始化全局日志，可重复调用"""

    root = logging.getLogger()
    root.setLevel(_resolve_level(level))

    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT))
        root.addHandler(handler)

    for h in root.handlers:
        if not any(isinstance(f, TraceIdFilter) for f in h.filters):
            h.addFilter(TraceIdFilter())

    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
