"""Booking model.

A booking reserves a turf for a time-of-day interval, either once (single)
or over a plan window (daily, weekly on given weekdays, monthly).
This is the core transactional entity in the system.
"""

import enum
from datetime import date, time
from decimal import Decimal

from sqlalchemy import Date, Enum, ForeignKey, Index, Integer, Numeric, String, Text, Time
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship

from turfbook.models.base import Base, TimestampMixin


class BookingStatus(enum.StrEnum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


class BookingType(enum.StrEnum):
    ONLINE = "online"  # Player self-service
    OFFLINE = "offline"  # Entered at the desk by owner or staff


class BookingPlan(enum.StrEnum):
    SINGLE = "single"
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


class Booking(TimestampMixin, Base):
    __tablename__ = "bookings"

    id: Mapped[int] = mapped_column(primary_key=True)
    turf_id: Mapped[int] = mapped_column(ForeignKey("turfs.id", ondelete="CASCADE"), nullable=False)
    user_id: Mapped[int | None] = mapped_column(Integer)
    player_id: Mapped[int | None] = mapped_column(Integer)

    booking_type: Mapped[BookingType] = mapped_column(
        Enum(BookingType, name="booking_type", values_callable=lambda e: [x.value for x in e]),
        default=BookingType.ONLINE,
        nullable=False,
    )
    booking_plan: Mapped[BookingPlan] = mapped_column(
        Enum(BookingPlan, name="booking_plan", values_callable=lambda e: [x.value for x in e]),
        default=BookingPlan.SINGLE,
        nullable=False,
    )

    # When
    booking_date: Mapped[date] = mapped_column("date", Date, nullable=False)
    plan_start_date: Mapped[date | None] = mapped_column(Date)
    plan_end_date: Mapped[date | None] = mapped_column(Date)
    recurring_days: Mapped[list | None] = mapped_column(JSONB)  # 0=Sun..6=Sat, weekly plans only
    start_time: Mapped[time] = mapped_column(Time, nullable=False)
    end_time: Mapped[time] = mapped_column(Time, nullable=False)

    # Walk-in customer (offline bookings)
    customer_name: Mapped[str | None] = mapped_column(String(200))
    customer_phone: Mapped[str | None] = mapped_column(String(50))
    customer_email: Mapped[str | None] = mapped_column(String(254))

    # Money
    amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    advance_amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), default=0, nullable=False)
    remaining_amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), default=0, nullable=False)

    notes: Mapped[str | None] = mapped_column(Text)
    status: Mapped[BookingStatus] = mapped_column(
        Enum(BookingStatus, name="booking_status", values_callable=lambda e: [x.value for x in e]),
        default=BookingStatus.PENDING,
        nullable=False,
    )

    # Relationships
    turf: Mapped["Turf"] = relationship(back_populates="bookings")

    __table_args__ = (
        # The slot grid: one turf, one date
        Index("ix_bookings_turf_date", "turf_id", "date"),
        # Recurring plans covering a date
        Index("ix_bookings_turf_plan", "turf_id", "plan_start_date", "plan_end_date"),
    )

    def __repr__(self) -> str:
        return f"<Booking {self.booking_date} {self.start_time}-{self.end_time} turf={self.turf_id} plan={self.booking_plan}>"


# Import for type hints
from turfbook.models.turf import Turf  # noqa: E402
