from datetime import date, datetime

from pydantic import field_validator

from cashcast.models.common import BaseModel


class Transaction(BaseModel):
    """A signed cash movement on a calendar day."""

    # Calendar day of the movement; timestamps are truncated to the day
    date: date
    # Positive for inflows, negative for outflows
    amount: float

    @field_validator("date", mode="before")
    @classmethod
    def coerce_calendar_day(cls, value):
        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, str) and len(value) > 10:
            return value[:10]
        return value


class TimeSeriesPoint(BaseModel):
    """Daily net flow for one day of the rolling window."""

    date: date
    net_flow: float
