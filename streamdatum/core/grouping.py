# streamdatum/core/grouping.py
from __future__ import annotations

import logging
from collections import defaultdict
from datetime import datetime, timezone
from typing import Any, Callable, Hashable, Iterable, Mapping, Sequence

import numpy as np

from .dates import datum_date
from .layers import Layer, Record, align_layers

logger = logging.getLogger(__name__)

AggregateFunction = Callable[[list[Any]], Any]


def nan_sum(values: Sequence[Any]) -> float | int:
    """Sum ignoring NaN; an empty sequence sums to 0 and integers stay exact."""
    if not values:
        return 0
    if all(isinstance(v, int) and not isinstance(v, bool) for v in values):
        return sum(values)
    return float(np.nansum(np.asarray(values, dtype=float)))


def _group_label(row: Mapping[str, Any], source_id_map: Mapping[str, str] | None) -> Any:
    source_id = row.get("sourceId")
    if source_id_map is not None and source_id in source_id_map:
        return source_id_map[source_id]
    return source_id


def _row_date(row: Mapping[str, Any]) -> datetime | None:
    d = datum_date(row)
    if d is not None and d.tzinfo is None:
        return d.replace(tzinfo=timezone.utc)
    return d


def _time_key(row: Mapping[str, Any], date: datetime) -> Hashable:
    if "localDate" in row:
        return (row.get("localDate"), row.get("localTime"))
    return date


def grouped_by_source_metric(
    rows: Iterable[Mapping[str, Any]],
    metric_name: str,
    source_id_map: Mapping[str, str] | None = None,
    agg_fn: AggregateFunction | None = None,
) -> list[Record]:
    """
    Combine one metric from many sources into a single record per time slot.

    Rows are grouped by output label (`source_id_map[sourceId]`, or the
    source ID itself when unmapped), labels sorted ascending, then by
    (localDate, localTime) within each label. Each group reduces to
    `{"date": ..., label: agg_fn(metric values)}`; `agg_fn` receives the
    group's non-null metric values and defaults to a sum, so a group whose
    rows all lack the metric yields 0. Rows without a usable date are
    skipped; naive dates are taken as UTC.

    The per-label layers are then aligned, so a label with no rows at all
    for a time slot gets `None` there, and zipped into one list:

        rows = [
            {"localDate": "2018-05-05", "localTime": "11:00", "sourceId": "A", "watts": 123},
            {"localDate": "2018-05-05", "localTime": "11:00", "sourceId": "B", "watts": 234},
        ]
        grouped_by_source_metric(rows, "watts", {"A": "Generation", "B": "Consumption"})
        # [{"date": 2018-05-05 11:00 UTC, "Generation": 123, "Consumption": 234}]

    The base records come from the first label's layer, so a slot that
    layer was filled in for also carries the filler's `sourceId`.
    """
    reduce = agg_fn if agg_fn is not None else nan_sum

    by_label: dict[Any, dict[Hashable, list[tuple[datetime, Mapping[str, Any]]]]] = defaultdict(dict)
    for row in rows:
        label = _group_label(row, source_id_map)
        if label is None:
            continue
        date = _row_date(row)
        if date is None:
            logger.debug("Skipping %s row without a usable date", label)
            continue
        slots = by_label[label]
        slots.setdefault(_time_key(row, date), []).append((date, row))

    layers: list[Layer] = []
    for label in sorted(by_label):
        values: list[Record] = []
        for group in by_label[label].values():
            metric = [r[metric_name] for _, r in group if r.get(metric_name) is not None]
            values.append({"date": group[0][0], label: reduce(metric)})
        layers.append(Layer(key=label, values=values))

    def _null_metric(filler: Record, key: str, _prev: Record | None) -> None:
        filler[key] = None

    align_layers(layers, fill_fn=_null_metric)

    if not layers:
        return []
    combined = layers[0].values
    for layer in layers[1:]:
        for d, v in zip(combined, layer.values):
            d[layer.key] = v.get(layer.key)
    return combined
