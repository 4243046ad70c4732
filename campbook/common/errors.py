# -*- coding: utf-8 -*-
# @Author: yaccii
# @Description:

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence


DEFAULT_TITLE = "Server Error"

NOT_FOUND_MESSAGE = "The requested resource couldn't be found."


@dataclass
class AppError(Exception):
    """异常统一

    只通过下面四个子类抛出（封闭集合），响应层按子类逐一匹配。
    """
    message: str
    title: str = DEFAULT_TITLE
    status_code: int = 500
    errors: Optional[List[str]] = None

    def __str__(self) -> str:
        return self.message


class NotFoundError(AppError):
    def __init__(self, message: str = NOT_FOUND_MESSAGE) -> None:
        super().__init__(
            message=message,
            title="Resource Not Found",
            status_code=404,
            errors=[message.rstrip(".")],
        )


class ValidationError(AppError):
    def __init__(self, fields: Sequence[str], message: str = "Validation error") -> None:
        # errors 永远非空
        items = [f for f in fields if f] or [message]
        super().__init__(
            message=message,
            title="Validation error",
            status_code=400,
            errors=items,
        )

    @property
    def fields(self) -> List[str]:
        return list(self.errors or [])


class AuthorizationError(AppError):
    def __init__(self, message: str = "invalid csrf token") -> None:
        super().__init__(
            message=message,
            title="Authorization Error",
            status_code=403,
            errors=[message],
        )


class UnclassifiedError(AppError):
    def __init__(self, message: str, status_code: int = 500) -> None:
        super().__init__(
            message=message,
            title=DEFAULT_TITLE,
            status_code=status_code or 500,
            errors=None,
        )


ERROR_VARIANTS = (NotFoundError, ValidationError, AuthorizationError, UnclassifiedError)
