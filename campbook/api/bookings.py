# -*- coding: utf-8 -*-
# @Author: yaccii
# @Description:

from __future__ import annotations

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from campbook.api.deps import get_bookings_usecase, get_db
from campbook.application.bookings.usecase import BookingsUsecase
from campbook.domain import schemas


router = APIRouter(prefix="/api", tags=["bookings"])


@router.get("/users/{user_id}/bookings", response_model=schemas.BookingsResponse)
def list_user_bookings(
    user_id: int,
    db: Session = Depends(get_db),
    uc: BookingsUsecase = Depends(get_bookings_usecase),
):
    return schemas.BookingsResponse(bookings=uc.list_for_user(db, user_id=user_id))


@router.post("/bookings", response_model=schemas.BookingOut, status_code=status.HTTP_201_CREATED)
def create_booking(
    req: schemas.BookingCreateRequest,
    db: Session = Depends(get_db),
    uc: BookingsUsecase = Depends(get_bookings_usecase),
):
    return uc.create(db, req=req)


@router.delete("/bookings/{booking_id}")
def delete_booking(
    booking_id: int,
    db: Session = Depends(get_db),
    uc: BookingsUsecase = Depends(get_bookings_usecase),
):
    uc.delete(db, booking_id=booking_id)
    return {"ok": True}
