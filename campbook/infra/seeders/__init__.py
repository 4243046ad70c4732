# -*- coding: utf-8 -*-
# @Author: yaccii
# @Description:

"""演示/测试数据

SEEDERS 按执行顺序排列；回滚时倒序执行。
"""

from __future__ import annotations

from campbook.infra.seeders.demo_users import DemoUserSeeder

SEEDERS = (DemoUserSeeder,)

__all__ = ["DemoUserSeeder", "SEEDERS"]
