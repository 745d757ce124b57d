# streamdatum/core/normalize.py
from __future__ import annotations

from datetime import timedelta
from typing import Any, MutableMapping

from .dates import datetime_to_epoch_millis
from .enums import Aggregation


def _period_millis(aggregate: Aggregation | int | float) -> int:
    if isinstance(aggregate, Aggregation):
        return aggregate.level * 1000
    return int(aggregate * 1000)


def time_normalize(
    data: list[MutableMapping[str, Any]],
    aggregate: Aggregation | int | float,
) -> list[MutableMapping[str, Any]]:
    """
    Fill time gaps in a date-sorted list of records, in place.

    Wherever two consecutive records are more than one aggregate period
    apart, filler records are inserted at each missing period boundary. A
    filler has the keys of the record before the gap, all set to None,
    except `date`.

        data = [{"date": 11:00, "watts": 357}, {"date": 12:00, "watts": 1023}]
        time_normalize(data, Aggregation.THIRTY_MINUTE)
        # [{11:00, 357}, {"date": 11:30, "watts": None}, {12:00, 1023}]

    `aggregate` is an Aggregation or a period in seconds. Non-list input,
    lists shorter than 2 and non-positive periods are returned unchanged.
    """
    if not isinstance(data, list) or len(data) < 2:
        return data
    period = _period_millis(aggregate)
    if period <= 0:
        return data

    i = 0
    while i < len(data) - 1:
        d = data[i]
        curr = datetime_to_epoch_millis(d["date"])
        nxt = datetime_to_epoch_millis(data[i + 1]["date"])
        if nxt > curr + period:
            fill = []
            offset = period
            while curr + offset < nxt:
                f = dict.fromkeys(d)
                f["date"] = d["date"] + timedelta(milliseconds=offset)
                fill.append(f)
                offset += period
            data[i + 1:i + 1] = fill
            i += len(fill)
        i += 1
    return data
