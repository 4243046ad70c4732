# -*- coding: utf-8 -*-
# @Author: yaccii
# @Description:

"""
领域层：

- models: ORM 实体（User / Booking）
- schemas: Pydantic 请求/响应模型
- validation: 实体字段校验
"""
from . import models, schemas, validation  # noqa: F401

__all__ = ["models", "schemas", "validation"]
