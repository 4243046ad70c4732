# -*- coding: utf-8 -*-
# @Author: yaccii
# @Description:

"""通用基础设施（错误/日志/管线/csrf 等）

约定：
- Router 不写业务逻辑：错误统一抛出，由 ErrorBoundaryMiddleware / 全局异常处理转为标准响应
- 请求经过的 stage 顺序见 pipeline.PIPELINE_STAGES
- trace_id 通过 middleware 注入，并写入日志，便于线上排障
"""

from __future__ import annotations
