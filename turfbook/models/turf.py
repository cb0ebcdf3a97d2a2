"""Turf model.

Turf = a bookable sports ground owned by a turf owner. Owners, staff and
players live in the account service; only the owner id is kept here.
"""

from decimal import Decimal

from sqlalchemy import Boolean, Index, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from turfbook.models.base import Base, TimestampMixin


class Turf(TimestampMixin, Base):
    __tablename__ = "turfs"

    id: Mapped[int] = mapped_column(primary_key=True)
    owner_id: Mapped[int | None] = mapped_column(Integer)
    turf_name: Mapped[str] = mapped_column(String(200), nullable=False)
    location: Mapped[str] = mapped_column(String(255), nullable=False)
    capacity: Mapped[int] = mapped_column(Integer, default=10, nullable=False)
    price_per_hour: Mapped[Decimal] = mapped_column(Numeric(10, 2), default=0, nullable=False)
    sport_type: Mapped[str | None] = mapped_column(String(50))  # football, cricket, multi
    facilities: Mapped[str | None] = mapped_column(Text)
    description: Mapped[str | None] = mapped_column(Text)
    status: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    # Relationships
    bookings: Mapped[list["Booking"]] = relationship(back_populates="turf", lazy="raise")

    __table_args__ = (Index("ix_turfs_owner", "owner_id"),)

    def __repr__(self) -> str:
        return f"<Turf {self.turf_name}>"


from turfbook.models.booking import Booking  # noqa: E402
