# -*- coding: utf-8 -*-
# @Author: yaccii
# @Description:

from __future__ import annotations

from typing import List

from sqlalchemy import select
from sqlalchemy.orm import Session

from campbook.common.errors import NotFoundError
from campbook.domain import models, schemas


class BookingsUsecase:
    def list_for_user(self, db: Session, *, user_id: int) -> List[schemas.BookingOut]:
        user = db.get(models.User, user_id)
        if user is None:
            raise NotFoundError("User couldn't be found.")

        stmt = (
            select(models.Booking)
            .where(models.Booking.user_id == user_id)
            .order_by(models.Booking.check_in.asc(), models.Booking.id.asc())
        )
        return [schemas.BookingOut.model_validate(b) for b in db.scalars(stmt).all()]

    def create(self, db: Session, *, req: schemas.BookingCreateRequest) -> schemas.BookingOut:
        if db.get(models.User, req.user_id) is None:
            raise NotFoundError("User couldn't be found.")

        booking = models.Booking(
            user_id=req.user_id,
            campsite_id=req.campsite_id,
            check_in=req.check_in,
            check_out=req.check_out,
            total_cost=req.total_cost,
            total_guests=req.total_guests,
        )
        booking.validate()

        db.add(booking)
        try:
            db.commit()
        except Exception:
            db.rollback()
            raise
        db.refresh(booking)
        return schemas.BookingOut.model_validate(booking)

    def delete(self, db: Session, *, booking_id: int) -> None:
        booking = db.get(models.Booking, booking_id)
        if booking is None:
            raise NotFoundError("Booking couldn't be found.")
        db.delete(booking)
        db.commit()
