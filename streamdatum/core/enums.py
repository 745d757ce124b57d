# streamdatum/core/enums.py
from __future__ import annotations

from enum import Enum


class DatumStreamType(Enum):
    """The kind of object a datum stream belongs to."""

    NODE = "n"
    LOCATION = "l"

    @property
    def key(self) -> str:
        return self.value

    @classmethod
    def from_key(cls, key: object) -> "DatumStreamType | None":
        for member in cls:
            if member.value == key:
                return member
        return None


class DatumSamplesType(Enum):
    """Datum property categories. TAG only applies to datum values, never to metadata names."""

    INSTANTANEOUS = "i"
    ACCUMULATING = "a"
    STATUS = "s"
    TAG = "t"

    @property
    def key(self) -> str:
        return self.value

    @classmethod
    def from_key(cls, key: object) -> "DatumSamplesType | None":
        for member in cls:
            if member.value == key:
                return member
        return None


class Aggregation(Enum):
    """
    Named aggregate levels.

    Each member carries a `key` (the API name) and a `level`, the length of
    one aggregate period in seconds. Several members share a level (Hour and
    HourOfDay, for example) but remain distinct members; ordering compares
    levels only.
    """

    NONE = ("None", 0)
    MINUTE = ("Minute", 60)
    FIVE_MINUTE = ("FiveMinute", 60 * 5)
    TEN_MINUTE = ("TenMinute", 60 * 10)
    FIFTEEN_MINUTE = ("FifteenMinute", 60 * 15)
    THIRTY_MINUTE = ("ThirtyMinute", 60 * 30)
    HOUR = ("Hour", 3600)
    HOUR_OF_DAY = ("HourOfDay", 3600)
    SEASONAL_HOUR_OF_DAY = ("SeasonalHourOfDay", 3600)
    DAY = ("Day", 86400)
    DAY_OF_WEEK = ("DayOfWeek", 86400)
    SEASONAL_DAY_OF_WEEK = ("SeasonalDayOfWeek", 86400)
    WEEK = ("Week", 604800)
    WEEK_OF_YEAR = ("WeekOfYear", 604800)
    MONTH = ("Month", 2419200)
    YEAR = ("Year", 31536000)
    RUNNING_TOTAL = ("RunningTotal", 9007199254740991)

    def __init__(self, key: str, level: int) -> None:
        self.key = key
        self.level = level

    @classmethod
    def from_key(cls, key: object) -> "Aggregation | None":
        for member in cls:
            if member.key == key:
                return member
        return None

    def compare_to(self, other: "Aggregation") -> int:
        return (self.level > other.level) - (self.level < other.level)

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Aggregation):
            return NotImplemented
        return self.level < other.level

    def __le__(self, other: object) -> bool:
        if not isinstance(other, Aggregation):
            return NotImplemented
        return self.level <= other.level

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, Aggregation):
            return NotImplemented
        return self.level > other.level

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, Aggregation):
            return NotImplemented
        return self.level >= other.level
