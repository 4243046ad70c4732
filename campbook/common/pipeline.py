# -*- coding: utf-8 -*-
# @Author: yaccii
# @Description:

"""请求处理管线

两部分：

- RequestLifecycle：单个请求的显式状态机，挂在 scope["state"] 上，各 stage 推进
- build_pipeline：按固定顺序返回具名 stage 列表（外层在前），由 create_app 注册

状态流转：
    Received -> Normalized -> PolicyChecked -> Dispatched -> HandlerCompleted
    任一非终态 -> Faulted -> Classified -> Responded
"""

from __future__ import annotations

from enum import Enum
from typing import Dict, FrozenSet, List, Tuple

from starlette.middleware import Middleware
from starlette.middleware.cors import CORSMiddleware
from starlette.requests import HTTPConnection

from campbook.infra.config import Settings


class RequestState(str, Enum):
    RECEIVED = "received"
    NORMALIZED = "normalized"
    POLICY_CHECKED = "policy_checked"
    DISPATCHED = "dispatched"
    HANDLER_COMPLETED = "handler_completed"
    FAULTED = "faulted"
    CLASSIFIED = "classified"
    RESPONDED = "responded"


TERMINAL_STATES: FrozenSet[RequestState] = frozenset({RequestState.HANDLER_COMPLETED, RequestState.RESPONDED})

_TRANSITIONS: Dict[RequestState, FrozenSet[RequestState]] = {
    RequestState.RECEIVED: frozenset({RequestState.NORMALIZED, RequestState.FAULTED}),
    RequestState.NORMALIZED: frozenset({RequestState.POLICY_CHECKED, RequestState.FAULTED}),
    RequestState.POLICY_CHECKED: frozenset({RequestState.DISPATCHED, RequestState.FAULTED}),
    RequestState.DISPATCHED: frozenset({RequestState.HANDLER_COMPLETED, RequestState.FAULTED}),
    RequestState.FAULTED: frozenset({RequestState.CLASSIFIED}),
    RequestState.CLASSIFIED: frozenset({RequestState.RESPONDED}),
    RequestState.HANDLER_COMPLETED: frozenset(),
    RequestState.RESPONDED: frozenset(),
}


class LifecycleError(RuntimeError):
    """非法的状态迁移"""


class RequestLifecycle:
    def __init__(self) -> None:
        self._state = RequestState.RECEIVED
        self._history: List[RequestState] = [RequestState.RECEIVED]

    @property
    def state(self) -> RequestState:
        return self._state

    @property
    def history(self) -> Tuple[RequestState, ...]:
        return tuple(self._history)

    @property
    def is_terminal(self) -> bool:
        return self._state in TERMINAL_STATES

    @property
    def is_faulted(self) -> bool:
        return RequestState.FAULTED in self._history

    def can_advance(self, to: RequestState) -> bool:
        return to in _TRANSITIONS[self._state]

    def advance(self, to: RequestState) -> None:
        if not self.can_advance(to):
            raise LifecycleError(f"illegal transition {self._state.value} -> {to.value}")
        self._state = to
        self._history.append(to)

    def fault(self) -> None:
        self.advance(RequestState.FAULTED)

    def __repr__(self) -> str:
        path = " -> ".join(s.value for s in self._history)
        return f"RequestLifecycle({path})"


def get_lifecycle(conn: HTTPConnection) -> RequestLifecycle:
    """取当前请求的状态机；入口 stage 之外单独使用时按需创建"""
    lifecycle = getattr(conn.state, "lifecycle", None)
    if lifecycle is None:
        lifecycle = RequestLifecycle()
        conn.state.lifecycle = lifecycle
    return lifecycle


# 外层在前；cors 只在非生产环境注册
PIPELINE_STAGES: Tuple[str, ...] = (
    "trace",
    "cors",
    "resource_policy",
    "error_boundary",
    "csrf",
    "dispatch",
)


def build_pipeline(settings: Settings) -> List[Tuple[str, Middleware]]:
    """按 PIPELINE_STAGES 顺序构造 stage 列表，部署模式通过 settings 显式传入"""

    # 延迟导入，避免 middlewares -> exception_handlers -> pipeline 的循环
    from campbook.common.csrf import CsrfMiddleware
    from campbook.common.middlewares import (
        DispatchMiddleware,
        ErrorBoundaryMiddleware,
        ResourcePolicyMiddleware,
        TraceIdMiddleware,
    )

    factories = {
        "trace": lambda: Middleware(TraceIdMiddleware),
        "cors": lambda: Middleware(
            CORSMiddleware,
            allow_origins=settings.CORS_ALLOW_ORIGINS,
            allow_methods=["*"],
            allow_headers=["*"],
        ),
        "resource_policy": lambda: Middleware(ResourcePolicyMiddleware, policy="cross-origin"),
        "error_boundary": lambda: Middleware(ErrorBoundaryMiddleware, settings=settings),
        "csrf": lambda: Middleware(CsrfMiddleware, settings=settings),
        "dispatch": lambda: Middleware(DispatchMiddleware),
    }

    stages: List[Tuple[str, Middleware]] = []
    for name in PIPELINE_STAGES:
        if name == "cors" and settings.is_production:
            continue
        stages.append((name, factories[name]()))
    return stages
