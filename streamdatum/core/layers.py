# streamdatum/core/layers.py
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Iterable, Mapping, MutableMapping, Sequence

import numpy as np

from .dates import datetime_to_epoch_millis
from .exceptions import InvalidLayer

Record = MutableMapping[str, Any]
FillFunction = Callable[[Record, str, "Record | None"], None]


@dataclass(slots=True)
class Layer:
    """
    A named, date-ordered series of plain records, for example one source
    (or group of sources) of chart data.

    `values` is a list of mappings that each carry a `date` datetime and is
    assumed sorted by that date. Layers are mutated in place by the
    alignment helpers below.
    """

    key: str
    values: list[Record] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not isinstance(self.key, str):
            raise InvalidLayer("Layer.key must be a string.")
        if self.values is None:
            self.values = []
        elif not isinstance(self.values, list):
            self.values = list(self.values)

    def __len__(self) -> int:
        return len(self.values)

    def dates(self) -> list[datetime]:
        return [v["date"] for v in self.values]

    def to_numpy(self, prop: str) -> tuple[np.ndarray, np.ndarray]:
        """
        (epoch milliseconds, values) arrays for one property.

        Missing or null values become NaN.
        """
        t = np.array([datetime_to_epoch_millis(v["date"]) for v in self.values], dtype=np.int64)
        vals = [v.get(prop) for v in self.values]
        arr = np.array([np.nan if x is None else x for x in vals], dtype=float)
        return t, arr


def _merged_dates(layers: Sequence[Layer]) -> list[datetime]:
    """Sorted multiset union of all layer dates (each date as often as its largest per-layer count)."""
    counts: dict[datetime, int] = {}
    for layer in layers:
        local: dict[datetime, int] = {}
        for v in layer.values:
            d = v["date"]
            local[d] = local.get(d, 0) + 1
        for d, n in local.items():
            if n > counts.get(d, 0):
                counts[d] = n
    merged: list[datetime] = []
    for d in sorted(counts):
        merged.extend([d] * counts[d])
    return merged


def align_layers(
    layers: Sequence[Layer],
    fill_template: Mapping[str, Any] | None = None,
    fill_fn: FillFunction | None = None,
) -> None:
    """
    Insert filler records so every layer has a record for every date found
    in any layer.

    Layer values must already be sorted by date. A filler is
    `{"date": <date>, "sourceId": <layer key>}`, updated with
    `fill_template`, then passed to `fill_fn(filler, layer_key, previous)`
    where `previous` is the record just before the insertion point (or
    None at the start of the layer).

    For example, given layers A=[12:00, 12:10] and B=[12:00], B becomes
    [12:00, {date: 12:10, sourceId: "B"}]; A is unchanged.

    Fewer than two layers is a no-op.
    """
    if len(layers) < 2:
        return
    merged = _merged_dates(layers)
    for layer in layers:
        values = layer.values
        for i, d in enumerate(merged):
            if i < len(values) and values[i]["date"] == d:
                continue
            filler: Record = {"date": d, "sourceId": layer.key}
            if fill_template:
                filler.update(fill_template)
            if fill_fn is not None:
                fill_fn(filler, layer.key, values[i - 1] if i > 0 else None)
            values.insert(i, filler)


def combine_layers(
    layers: Sequence[Layer],
    result_key: str,
    copy_props: Iterable[str] | None = None,
    sum_props: Iterable[str] | None = None,
    static_props: Mapping[str, Any] | None = None,
) -> list[Layer]:
    """
    Combine aligned layers into a single layer.

    For each index, the output record holds `static_props`, the
    `copy_props` values of the first layer, and the `sum_props` values added
    up across all layers (missing or null values add nothing). All layers
    must have the same length, as `align_layers` leaves them.

    Empty input is returned unchanged.
    """
    if not layers or not layers[0].values:
        return list(layers)
    copy_props = list(copy_props or ())
    sum_props = list(sum_props or ())
    if any(len(layer.values) != len(layers[0].values) for layer in layers):
        raise InvalidLayer("combine_layers() requires layers of equal length; align them first.")

    combined: list[Record] = []
    for i, first in enumerate(layers[0].values):
        out: Record = dict(static_props or {})
        for p in copy_props:
            out[p] = first.get(p)
        for p in sum_props:
            total = 0
            for layer in layers:
                val = layer.values[i].get(p)
                if val is not None:
                    total += val
            out[p] = total
        combined.append(out)
    return [Layer(key=result_key, values=combined)]
