from datetime import datetime

from sqlalchemy import DateTime
from sqlalchemy.types import TypeDecorator

from ..core.instants import as_utc, parse_instant


class UTCDateTime(TypeDecorator):
    """Timezone-aware datetime column that always stores UTC.

    SQLite keeps only the wall-clock part of a datetime, so values are
    converted before they are written. Naive values are read in the
    configured reference zone, like any other caller-supplied instant.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect) -> datetime | None:
        if value is None:
            return None
        return parse_instant(value)

    def process_result_value(self, value: datetime | None, dialect) -> datetime | None:
        return as_utc(value)
