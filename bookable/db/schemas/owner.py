from pydantic import BaseModel, ConfigDict, field_validator


class OwnerRef(BaseModel):
    """Reference to the bookable entity a booking belongs to."""

    model_config = ConfigDict(frozen=True)

    type: str
    id: str

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value):
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value

    def __str__(self) -> str:
        return f"{self.type}:{self.id}"
