"""FastAPI dependencies for injection into route handlers."""

from fastapi import Depends, HTTPException, Path, status
from sqlalchemy.ext.asyncio import AsyncSession

from turfbook.core.config import settings
from turfbook.core.database import get_db
from turfbook.models.turf import Turf
from turfbook.services.booking_store import get_active_turf
from turfbook.services.slot_engine import EmptyRecurrencePolicy, SlotWindow


def get_slot_window() -> SlotWindow:
    """Operating window and slot length from settings."""
    return settings.slot_window()


def get_recurrence_policy() -> EmptyRecurrencePolicy:
    return settings.empty_recurrence_policy


async def get_turf(
    turf_id: int = Path(...),
    db: AsyncSession = Depends(get_db),
) -> Turf:
    """Resolve an active turf from the URL, or 404."""
    turf = await get_active_turf(db, turf_id)
    if turf is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Turf not found")
    return turf
