"""Pydantic schemas for API serialisation."""

from datetime import date, datetime, time
from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, ConfigDict, EmailStr, Field, model_validator

# --- Turf ---


class TurfOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    owner_id: int | None
    turf_name: str
    location: str
    capacity: int
    price_per_hour: Decimal
    sport_type: str | None
    facilities: str | None
    description: str | None
    status: bool


# --- Booking ---


class BookingCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    turf_id: int
    booking_type: Literal["online", "offline"]
    booking_plan: Literal["single", "daily", "weekly", "monthly"] | None = None
    booking_date: date = Field(alias="date")
    start_time: time
    end_time: time
    customer_name: str | None = None
    customer_phone: str | None = None
    customer_email: EmailStr | None = None
    amount: Decimal = Field(ge=0)
    advance_amount: Decimal | None = Field(default=None, ge=0)
    plan_duration: int | None = Field(default=None, ge=1, le=366)
    recurring_days: list[int] | None = None
    notes: str | None = None

    @model_validator(mode="after")
    def _offline_customer_required(self):
        if self.booking_type == "offline":
            missing = [f for f in ("customer_name", "customer_phone") if not getattr(self, f)]
            if missing:
                raise ValueError(f"{', '.join(missing)} required for offline bookings")
        return self


class BookingStatusUpdate(BaseModel):
    status: Literal["pending", "confirmed", "cancelled"]


class BookingOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    turf_id: int
    user_id: int | None
    booking_type: str
    booking_plan: str
    booking_date: date = Field(serialization_alias="date")
    plan_start_date: date | None
    plan_end_date: date | None
    recurring_days: list[int] | None
    start_time: time
    end_time: time
    customer_name: str | None
    customer_phone: str | None
    customer_email: str | None
    amount: Decimal
    advance_amount: Decimal
    remaining_amount: Decimal
    notes: str | None
    status: str
    created_at: datetime


class BookingStatsOut(BaseModel):
    total_bookings: int
    today_bookings: int
    confirmed_bookings: int
    pending_bookings: int
    cancelled_bookings: int
    total_revenue: Decimal
    pending_amount: Decimal


# --- Availability ---


class SlotOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    start_time: str  # "HH:MM"
    end_time: str  # "HH:MM"
    display: str  # "6:00 AM - 7:00 AM"
    available: bool


class SlotGridOut(BaseModel):
    date: date
    slots: list[SlotOut]
    booked_count: int
