# -*- coding: utf-8 -*-
# @Author: yaccii
# @Description:

"""前端 store 的派生数据

store 形如 {"bookings": {id: booking}, "session": {"user": {"id": ...}}}。
id 在边界上统一成 int，"7" 和 7 视为同一个用户。
"""

from __future__ import annotations

from typing import Any, List, Mapping, Optional

from campbook.domain import schemas


def coerce_id(value: Any) -> Optional[int]:
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().lstrip("-").isdigit():
        return int(value.strip())
    return None


def session_user_id(state: Mapping[str, Any]) -> Optional[int]:
    session = state.get("session") or {}
    user = session.get("user") or {}
    return coerce_id(user.get("id"))


def select_user_bookings(state: Mapping[str, Any]) -> List[schemas.BookingOut]:
    """当前登录用户的预订，每一项就是一个子组件的 props"""
    user_id = session_user_id(state)
    if user_id is None:
        return []

    bookings = state.get("bookings") or {}
    items: List[schemas.BookingOut] = []
    for booking in bookings.values():
        if not booking or coerce_id(booking.get("userId")) != user_id:
            continue
        items.append(schemas.BookingOut.model_validate(booking))
    return items
