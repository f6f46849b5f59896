"""Shared validation utilities"""

from datetime import datetime
from typing import Annotated, Optional

from pydantic import AfterValidator


def strip_timezone(value: Optional[datetime]) -> Optional[datetime]:
    """
    Treat an incoming datetime as naive local wall-clock time.

    Clients may send RFC3339 values such as 2030-01-15T13:00:00Z. Stored times
    carry no offset, so the offset is dropped and the wall-clock value kept.
    """
    if value is None or value.tzinfo is None:
        return value
    return value.replace(tzinfo=None)


# Datetime accepted at the HTTP boundary, always naive once validated
LocalDateTime = Annotated[datetime, AfterValidator(strip_timezone)]
