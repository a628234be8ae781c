from datetime import datetime
from sqlalchemy import DateTime, Index, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column
from ..session import Base
from ..schemas.owner import OwnerRef
from ..types import UTCDateTime


class Booking(Base):
    __tablename__ = "bookings"
    __table_args__ = (
        Index("ix_bookings_bookable", "bookable_type", "bookable_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    bookable_type: Mapped[str] = mapped_column(String(64), nullable=False)
    bookable_id: Mapped[str] = mapped_column(String(64), nullable=False)
    starts_at: Mapped[datetime | None] = mapped_column(UTCDateTime, index=True)
    ends_at: Mapped[datetime | None] = mapped_column(UTCDateTime, index=True)
    canceled_at: Mapped[datetime | None] = mapped_column(UTCDateTime)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    @property
    def owner(self) -> OwnerRef:
        return OwnerRef(type=self.bookable_type, id=self.bookable_id)

    def __repr__(self) -> str:
        return (
            f"<Booking id={self.id} owner={self.bookable_type}:{self.bookable_id} "
            f"starts_at={self.starts_at} ends_at={self.ends_at} canceled_at={self.canceled_at}>"
        )
