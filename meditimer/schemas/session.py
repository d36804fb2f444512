import re
from datetime import date

from pydantic import BaseModel, Field, TypeAdapter, field_validator

ISO_DATE = re.compile(r"\d{4}-\d{2}-\d{2}")


class Session(BaseModel):
    """One completed meditation, as stored in the session log."""

    date: date
    duration_minutes: int = Field(alias="durationMinutes", gt=0, strict=True)

    model_config = {"frozen": True, "populate_by_name": True}

    @field_validator("date", mode="before")
    @classmethod
    def parse_iso_date(cls, value):
        # Stored dates are always YYYY-MM-DD strings; reject timestamps and datetimes
        if isinstance(value, str):
            if not ISO_DATE.fullmatch(value):
                raise ValueError("date must be a YYYY-MM-DD string")
            return date.fromisoformat(value)
        if isinstance(value, date) and not hasattr(value, "hour"):
            return value
        raise ValueError("date must be a YYYY-MM-DD string")

    def to_wire(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


SessionLog = TypeAdapter(list[Session])
