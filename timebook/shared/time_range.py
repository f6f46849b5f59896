"""Half-open time interval value type"""

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta

from ..errors import InvalidRange


@dataclass(frozen=True)
class TimeRange:
    """[start, end) interval; end must be strictly after start"""

    start: datetime
    end: datetime

    def __post_init__(self):
        if self.end <= self.start:
            raise InvalidRange(
                f"End time {self.end.isoformat()} must be after start time {self.start.isoformat()}"
            )

    @classmethod
    def starting_at(cls, start: datetime, minutes: int) -> "TimeRange":
        return cls(start, start + timedelta(minutes=minutes))

    @classmethod
    def for_day(cls, day: date) -> "TimeRange":
        start = datetime.combine(day, time.min)
        return cls(start, start + timedelta(days=1))

    @classmethod
    def hour_bucket(cls, day: date, hour: int) -> "TimeRange":
        start = datetime.combine(day, time.min) + timedelta(hours=hour)
        return cls(start, start + timedelta(hours=1))

    @property
    def duration(self) -> timedelta:
        return self.end - self.start

    @property
    def duration_minutes(self) -> int:
        return int(self.duration.total_seconds() // 60)

    def overlaps(self, other: "TimeRange") -> bool:
        # Touching ranges ([9,10) and [10,11)) do not overlap
        return self.start < other.end and other.start < self.end

    def contains(self, other: "TimeRange") -> bool:
        return self.start <= other.start and other.end <= self.end
