# -*- coding: utf-8 -*-
# @Author: yaccii
# @Description:

from __future__ import annotations

from datetime import date
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """接口字段统一 camelCase，同时允许按 python 字段名构造"""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# ---------- errors ----------

class ErrorBody(BaseModel):
    title: str
    message: str
    errors: Optional[List[str]] = None
    stack: Optional[str] = None


# ---------- csrf ----------

class CsrfTokenResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    xsrf_token: str = Field(..., alias="XSRF-Token")


# ---------- bookings ----------

class BookingOut(CamelModel):
    id: int
    user_id: int
    campsite_id: Optional[int] = None
    check_in: Optional[date] = None
    check_out: Optional[date] = None
    total_cost: Optional[int] = None
    total_guests: Optional[int] = None


class BookingCreateRequest(CamelModel):
    user_id: int
    campsite_id: int
    check_in: date
    check_out: date
    total_cost: int = 0
    total_guests: int = 1


class BookingsResponse(BaseModel):
    bookings: List[BookingOut] = Field(default_factory=list)
