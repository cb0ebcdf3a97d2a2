"""Application configuration from environment variables."""

from pydantic import model_validator
from pydantic_settings import BaseSettings

from turfbook.services.slot_engine import EmptyRecurrencePolicy, SlotWindow


class Settings(BaseSettings):
    # App
    app_name: str = "TurfBook"
    debug: bool = True
    api_prefix: str = "/api/v1"
    log_level: str = "INFO"

    # Database
    database_url: str = "postgresql+asyncpg://turfbook:turfbook@db:5432/turfbook"
    database_echo: bool = False
    database_pool_size: int = 20
    database_max_overflow: int = 10

    # Slot grid (06:00-23:00 in one-hour slots)
    open_hour: int = 6
    close_hour: int = 23
    slot_duration_minutes: int = 60

    # Weekly plans saved without recurring days
    empty_recurrence_policy: EmptyRecurrencePolicy = EmptyRecurrencePolicy.BLOCKS_NOTHING

    # Booking list size
    max_list_results: int = 50

    model_config = {"env_prefix": "TB_", "env_file": ".env", "extra": "ignore"}

    @model_validator(mode="after")
    def _check_slot_window(self):
        # Fail at startup rather than on every availability request
        self.slot_window()
        return self

    def slot_window(self) -> SlotWindow:
        return SlotWindow(
            open_hour=self.open_hour,
            close_hour=self.close_hour,
            slot_duration_minutes=self.slot_duration_minutes,
        )


settings = Settings()
