from datetime import timedelta
from functools import lru_cache
import os
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator


load_dotenv()


class Settings(BaseModel):
    timezone: str = Field(default="UTC", alias="TIMEZONE")

    database_url: str = Field(default="sqlite+pysqlite:///./bookings.db", alias="DATABASE_URL")

    # gap that separates back-to-back bookings, in microseconds; overlaps
    # shorter than this are not reported, except that the step never
    # exceeds the candidate interval itself
    overlap_resolution_us: int = Field(default=1, alias="OVERLAP_RESOLUTION_US", gt=0)

    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    class Config:
        populate_by_name = True

    @field_validator("timezone")
    @classmethod
    def _known_timezone(cls, value: str) -> str:
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ValueError(f"Unknown timezone {value!r}") from exc
        return value

    @field_validator("log_level")
    @classmethod
    def _upper_log_level(cls, value: str) -> str:
        return value.strip().upper()

    @property
    def overlap_resolution(self) -> timedelta:
        return timedelta(microseconds=self.overlap_resolution_us)

    @property
    def zone(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings(**os.environ)
