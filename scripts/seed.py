"""Seed the database with demo turfs and bookings.

Run with: python -m scripts.seed
Creates three turfs and a spread of single and recurring bookings around today,
enough to see blocked slots in the availability grid.
"""

import asyncio
from datetime import date, time, timedelta
from decimal import Decimal

from sqlalchemy import select

from turfbook.core.database import async_session_factory, engine
from turfbook.models import Base, Booking, BookingPlan, BookingStatus, BookingType, Turf
from turfbook.services.booking_plans import calculate_plan_end_date

TURFS = [
    {
        "turf_name": "Green Arena",
        "location": "MG Road, Bengaluru",
        "capacity": 14,
        "price_per_hour": Decimal("1200.00"),
        "sport_type": "football",
        "facilities": "Floodlights, changing rooms, parking",
    },
    {
        "turf_name": "Boundary Box",
        "location": "Koramangala, Bengaluru",
        "capacity": 16,
        "price_per_hour": Decimal("1500.00"),
        "sport_type": "cricket",
        "facilities": "Floodlights, washrooms",
    },
    {
        "turf_name": "Kick Off Zone",
        "location": "Whitefield, Bengaluru",
        "capacity": 10,
        "price_per_hour": Decimal("900.00"),
        "sport_type": "multi",
        "facilities": "Parking, drinking water",
    },
]

# (turf index, plan, days from today, start hour, hours, duration, recurring days, customer)
BOOKINGS = [
    (0, BookingPlan.SINGLE, 0, 7, 1, 1, None, "Arjun"),
    (0, BookingPlan.SINGLE, 0, 18, 2, 1, None, "Weekend XI"),
    (0, BookingPlan.WEEKLY, -7, 20, 1, 8, [1, 3, 5], "Office League"),
    (1, BookingPlan.DAILY, 0, 6, 2, 10, None, "Academy Nets"),
    (1, BookingPlan.MONTHLY, -3, 21, 1, 1, None, "Night Riders"),
    (2, BookingPlan.SINGLE, 1, 16, 1, 1, None, "Priya"),
]


async def seed():
    # Create tables (in dev; production uses migrations)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with async_session_factory() as db:
        # Check if already seeded
        result = await db.execute(select(Turf).where(Turf.turf_name == TURFS[0]["turf_name"]))
        if result.scalar_one_or_none():
            print("Database already seeded, skipping.")
            return

        turfs = []
        for turf_data in TURFS:
            turf = Turf(**turf_data)
            db.add(turf)
            turfs.append(turf)
        await db.flush()

        today = date.today()
        for turf_idx, plan, offset, hour, hours, duration, days, customer in BOOKINGS:
            turf = turfs[turf_idx]
            start = today + timedelta(days=offset)
            amount = turf.price_per_hour * hours
            db.add(
                Booking(
                    turf_id=turf.id,
                    booking_type=BookingType.OFFLINE,
                    booking_plan=plan,
                    booking_date=start,
                    plan_start_date=start,
                    plan_end_date=calculate_plan_end_date(plan, start, duration),
                    recurring_days=days,
                    start_time=time(hour, 0),
                    end_time=time(hour + hours, 0),
                    customer_name=customer,
                    customer_phone="9800000000",
                    amount=amount,
                    advance_amount=amount / 2,
                    remaining_amount=amount / 2,
                    status=BookingStatus.CONFIRMED,
                )
            )

        await db.commit()

        print(f"Seeded: {len(TURFS)} turfs")
        print(f"  {len(BOOKINGS)} bookings")
        for turf in turfs:
            print(f"    turf {turf.id}: {turf.turf_name}")


if __name__ == "__main__":
    asyncio.run(seed())
