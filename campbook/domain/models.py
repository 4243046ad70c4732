# -*- coding: utf-8 -*-
# @Author: yaccii
# @Description:

from __future__ import annotations

import re
import time
from datetime import date
from typing import List, Optional

from sqlalchemy import BigInteger, Date, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from campbook.domain.validation import ViolationCollector
from campbook.infra.db import Base


_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

BCRYPT_HASH_LENGTH = 60


def _ts() -> int:
    return int(time.time())


def is_email(value: str | None) -> bool:
    return bool(value) and _EMAIL_RE.match(value) is not None


class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    email: Mapped[str] = mapped_column(String(256), unique=True, nullable=False, index=True)
    username: Mapped[str] = mapped_column(String(30), unique=True, nullable=False, index=True)
    hashed_password: Mapped[str] = mapped_column(String(BCRYPT_HASH_LENGTH), nullable=False)

    created_at: Mapped[int] = mapped_column(BigInteger, nullable=False, default=_ts)
    updated_at: Mapped[Optional[int]] = mapped_column(
        BigInteger,
        nullable=True,
        default=None,
        onupdate=_ts,
    )

    bookings: Mapped[List["Booking"]] = relationship(
        "Booking",
        back_populates="user",
        cascade="all, delete-orphan",
    )

    def validate(self) -> None:
        v = ViolationCollector()
        username = self.username or ""
        email = self.email or ""
        v.check(4 <= len(username) <= 30, "username", "username must be between 4 and 30 characters")
        v.check(not is_email(username), "username", "username cannot be an email")
        v.check(3 <= len(email) <= 256, "email", "email must be between 3 and 256 characters")
        v.check(is_email(email), "email", "email must be a valid email address")
        v.check(
            len(self.hashed_password or "") == BCRYPT_HASH_LENGTH,
            "hashed_password",
            "hashedPassword must be a bcrypt digest",
        )
        v.raise_if_any()


class Booking(Base):
    __tablename__ = "bookings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id"),
        nullable=False,
        index=True,
    )
    # 营地表不在本服务内，这里只存 id
    campsite_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)

    check_in: Mapped[date] = mapped_column(Date, nullable=False)
    check_out: Mapped[date] = mapped_column(Date, nullable=False)
    total_cost: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_guests: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    created_at: Mapped[int] = mapped_column(BigInteger, nullable=False, default=_ts)
    updated_at: Mapped[Optional[int]] = mapped_column(
        BigInteger,
        nullable=True,
        default=None,
        onupdate=_ts,
    )

    user: Mapped["User"] = relationship("User", back_populates="bookings")

    def validate(self) -> None:
        v = ViolationCollector()
        v.check(
            self.check_in is not None and self.check_out is not None and self.check_out > self.check_in,
            "check_out",
            "checkOut must be after checkIn",
        )
        v.check((self.total_guests or 0) >= 1, "total_guests", "totalGuests must be at least 1")
        v.check((self.total_cost or 0) >= 0, "total_cost", "totalCost cannot be negative")
        v.raise_if_any()
