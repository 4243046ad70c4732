# -*- coding: utf-8 -*-
# @Author: yaccii
# @Description:

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Sequence


@dataclass(frozen=True)
class FieldViolation:
    path: str
    message: str


class ModelValidationError(Exception):
    """实体校验失败，携带全部字段错误（按字段顺序）"""

    def __init__(self, violations: Sequence[FieldViolation]) -> None:
        self.violations: List[FieldViolation] = list(violations)
        super().__init__("; ".join(v.message for v in self.violations) or "validation failed")


class ViolationCollector:
    """收集一次 validate() 中的所有字段错误，最后统一抛出"""

    def __init__(self) -> None:
        self._items: List[FieldViolation] = []

    def check(self, ok: bool, path: str, message: str) -> None:
        if not ok:
            self._items.append(FieldViolation(path=path, message=message))

    def raise_if_any(self) -> None:
        if self._items:
            raise ModelValidationError(self._items)
