# streamdatum/core/datum.py
from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, ClassVar, Iterable, Sequence, Union

from .config import get_settings
from .dates import datetime_to_epoch_millis, epoch_millis_to_datetime
from .enums import DatumSamplesType
from .exceptions import InvalidDatum
from .metadata import DatumStreamMetadata
from .registry import DatumStreamMetadataRegistry

MetadataSource = Union[DatumStreamMetadata, DatumStreamMetadataRegistry]

_DATA_TYPES = (
    DatumSamplesType.INSTANTANEOUS,
    DatumSamplesType.ACCUMULATING,
    DatumSamplesType.STATUS,
)
_INSTANTANEOUS_SUFFIXES = ("_count", "_min", "_max")
_ACCUMULATING_SUFFIXES = ("_start", "_end")


class DatumShape(Enum):
    """Discriminant of the StreamedDatum union, fixed by the wire shape at decode time."""

    POINT = "point"
    AGGREGATE = "aggregate"


def _to_datetime(value: Any, label: str) -> datetime:
    if isinstance(value, datetime):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        try:
            return epoch_millis_to_datetime(value)
        except (OverflowError, ValueError) as e:
            raise InvalidDatum(f"{label} is not a representable timestamp: {value!r}") from e
    raise InvalidDatum(f"{label} must be a datetime or epoch milliseconds, got {value!r}.")


def _to_tuple(values: Iterable[Any] | None, label: str) -> tuple[Any, ...] | None:
    if values is None:
        return None
    if isinstance(values, (str, bytes)) or not isinstance(values, Iterable):
        raise InvalidDatum(f"{label} must be a sequence.")
    return tuple(values)


def _to_groups(values: Iterable[Any] | None, label: str) -> tuple[tuple[Any, ...], ...] | None:
    groups = _to_tuple(values, label)
    if groups is None:
        return None
    return tuple(_to_tuple(g, label) or () for g in groups)


def _to_tags(tags: Iterable[str] | None) -> frozenset[str] | None:
    if tags is None:
        return None
    if isinstance(tags, str):
        tags = (tags,)
    try:
        result = frozenset(tags)
    except TypeError as e:
        raise InvalidDatum(f"Datum tags must be hashable values: {e}") from e
    return result or None


def _resolve_meta(stream_id: str, meta: Any) -> DatumStreamMetadata | None:
    if isinstance(meta, DatumStreamMetadataRegistry):
        return meta.metadata_for_stream_id(stream_id)
    if isinstance(meta, DatumStreamMetadata):
        return meta
    return None


def _stream_ref(stream_id: str, registry: DatumStreamMetadataRegistry | None) -> str | int:
    if isinstance(registry, DatumStreamMetadataRegistry):
        return registry.index_of_metadata_stream_id(stream_id)
    return stream_id


def _object_identity(obj: dict[str, Any], meta: DatumStreamMetadata) -> None:
    if meta.node_id is not None:
        obj["nodeId"] = meta.node_id
    elif meta.location_id is not None:
        obj["locationId"] = meta.location_id
    obj["sourceId"] = meta.source_id


def _populate(obj: dict[str, Any], names: Sequence[str], values: Sequence[Any] | None) -> None:
    if not values:
        return
    for name, val in zip(names, values):
        if val is not None and name not in obj:
            obj[name] = val


def _populate_statistics(
    obj: dict[str, Any],
    names: Sequence[str],
    groups: Sequence[Sequence[Any]] | None,
    suffixes: tuple[str, ...],
    without_statistics: bool,
) -> None:
    if not groups:
        return
    for name, group in zip(names, groups):
        if not group or group[0] is None or name in obj:
            continue
        obj[name] = group[0]
        if without_statistics:
            continue
        for suffix, stat in zip(suffixes, group[1:]):
            if stat is not None:
                obj[name + suffix] = stat


def _value_at(values: Sequence[Any] | None, index: int) -> Any:
    if values is None or index < 0 or index >= len(values):
        return None
    return values[index]


@dataclass(frozen=True, slots=True)
class StreamDatum:
    """
    A point-in-time datum decoded from stream data.

    Property values are kept positionally (i_props, a_props, s_props); the
    bound DatumStreamMetadata gives them names. The metadata is shared, not
    copied, so many datum from one stream reference the same instance.
    """

    shape: ClassVar[DatumShape] = DatumShape.POINT

    stream_id: str
    ts: datetime
    i_props: tuple[Any, ...] | None = None
    a_props: tuple[Any, ...] | None = None
    s_props: tuple[Any, ...] | None = None
    tags: frozenset[str] | None = None
    meta: DatumStreamMetadata | None = field(default=None, repr=False)

    def __post_init__(self) -> None:
        if not isinstance(self.stream_id, str) or not self.stream_id:
            raise InvalidDatum("StreamDatum.stream_id must be a non-empty string.")
        object.__setattr__(self, "ts", _to_datetime(self.ts, "StreamDatum.ts"))
        object.__setattr__(self, "i_props", _to_tuple(self.i_props, "StreamDatum.i_props"))
        object.__setattr__(self, "a_props", _to_tuple(self.a_props, "StreamDatum.a_props"))
        object.__setattr__(self, "s_props", _to_tuple(self.s_props, "StreamDatum.s_props"))
        object.__setattr__(self, "tags", _to_tags(self.tags))
        object.__setattr__(self, "meta", _resolve_meta(self.stream_id, self.meta))

    @property
    def date(self) -> datetime:
        return self.ts

    @property
    def metadata(self) -> DatumStreamMetadata | None:
        return self.meta

    def property_values_for_type(self, samples_type: DatumSamplesType) -> Any:
        if samples_type is DatumSamplesType.INSTANTANEOUS:
            return self.i_props
        if samples_type is DatumSamplesType.ACCUMULATING:
            return self.a_props
        if samples_type is DatumSamplesType.STATUS:
            return self.s_props
        if samples_type is DatumSamplesType.TAG:
            return self.tags
        return None

    def property_value(self, name: str, samples_type: DatumSamplesType | None = None) -> Any:
        """Value of the named property, looked up through the bound metadata."""
        if self.meta is None:
            return None
        types = _DATA_TYPES if samples_type is None else (samples_type,)
        for t in types:
            idx = self.meta.index_of_property(name, t)
            if idx >= 0:
                return _value_at(self.property_values_for_type(t), idx)
        return None

    def to_object(self, meta: MetadataSource | None = None) -> dict[str, Any] | None:
        """
        Flatten to a plain record.

        Keys: streamId, date, nodeId or locationId, sourceId, one key per
        non-null property (first value wins on duplicate names), then tags
        as a sorted list when present. `meta` overrides the bound metadata.
        """
        m = _resolve_meta(self.stream_id, meta) or self.meta
        if m is None:
            return None
        obj: dict[str, Any] = {"streamId": self.stream_id, "date": self.ts}
        _object_identity(obj, m)
        _populate(obj, m.instantaneous_names, self.i_props)
        _populate(obj, m.accumulating_names, self.a_props)
        _populate(obj, m.status_names, self.s_props)
        if self.tags:
            obj["tags"] = sorted(self.tags, key=str)
        return obj

    def to_json_object(self, registry: DatumStreamMetadataRegistry | None = None) -> list[Any]:
        """
        Encode as a stream data array, for example:

            [0, 1650667326308, 12326, null, 230.19719, 50.19501, 6472722]

        Element 0 is the registry index when `registry` is given, otherwise the stream ID.
        """
        result: list[Any] = [_stream_ref(self.stream_id, registry), datetime_to_epoch_millis(self.ts)]
        result.extend(self.i_props or ())
        result.extend(self.a_props or ())
        result.extend(self.s_props or ())
        if self.tags:
            result.extend(sorted(self.tags, key=str))
        return result

    def to_json_encoding(self, registry: DatumStreamMetadataRegistry | None = None) -> str:
        return json.dumps(self.to_json_object(registry), separators=(",", ":"))


@dataclass(frozen=True, slots=True)
class StreamAggregateDatum:
    """
    A datum summarising a time range, decoded from stream data.

    Each instantaneous property is a 4-tuple of statistics:
    (average, count, minimum, maximum).
    Each accumulating property is a 3-tuple:
    (difference, starting value, ending value).
    Status values are plain, as for StreamDatum.
    """

    shape: ClassVar[DatumShape] = DatumShape.AGGREGATE

    stream_id: str
    ts: tuple[datetime, datetime]
    i_props: tuple[tuple[Any, ...], ...] | None = None
    a_props: tuple[tuple[Any, ...], ...] | None = None
    s_props: tuple[Any, ...] | None = None
    tags: frozenset[str] | None = None
    meta: DatumStreamMetadata | None = field(default=None, repr=False)

    def __post_init__(self) -> None:
        if not isinstance(self.stream_id, str) or not self.stream_id:
            raise InvalidDatum("StreamAggregateDatum.stream_id must be a non-empty string.")
        ts = self.ts
        if isinstance(ts, (str, bytes)) or not isinstance(ts, Sequence) or len(ts) != 2:
            raise InvalidDatum("StreamAggregateDatum.ts must be a (start, end) pair.")
        object.__setattr__(
            self,
            "ts",
            (
                _to_datetime(ts[0], "StreamAggregateDatum.ts[0]"),
                _to_datetime(ts[1], "StreamAggregateDatum.ts[1]"),
            ),
        )
        object.__setattr__(self, "i_props", _to_groups(self.i_props, "StreamAggregateDatum.i_props"))
        object.__setattr__(self, "a_props", _to_groups(self.a_props, "StreamAggregateDatum.a_props"))
        object.__setattr__(self, "s_props", _to_tuple(self.s_props, "StreamAggregateDatum.s_props"))
        object.__setattr__(self, "tags", _to_tags(self.tags))
        object.__setattr__(self, "meta", _resolve_meta(self.stream_id, self.meta))

    @property
    def date(self) -> datetime:
        return self.ts[0]

    @property
    def date_end(self) -> datetime:
        return self.ts[1]

    @property
    def metadata(self) -> DatumStreamMetadata | None:
        return self.meta

    def property_values_for_type(self, samples_type: DatumSamplesType) -> Any:
        """Primary value per property (average or difference), without statistics."""
        if samples_type is DatumSamplesType.INSTANTANEOUS:
            return None if self.i_props is None else tuple(_value_at(g, 0) for g in self.i_props)
        if samples_type is DatumSamplesType.ACCUMULATING:
            return None if self.a_props is None else tuple(_value_at(g, 0) for g in self.a_props)
        if samples_type is DatumSamplesType.STATUS:
            return self.s_props
        if samples_type is DatumSamplesType.TAG:
            return self.tags
        return None

    def property_statistics_for_type(self, samples_type: DatumSamplesType) -> Any:
        if samples_type is DatumSamplesType.INSTANTANEOUS:
            return self.i_props
        if samples_type is DatumSamplesType.ACCUMULATING:
            return self.a_props
        return self.property_values_for_type(samples_type)

    def property_value(self, name: str, samples_type: DatumSamplesType | None = None) -> Any:
        if self.meta is None:
            return None
        types = _DATA_TYPES if samples_type is None else (samples_type,)
        for t in types:
            idx = self.meta.index_of_property(name, t)
            if idx >= 0:
                return _value_at(self.property_values_for_type(t), idx)
        return None

    def to_object(
        self,
        meta: MetadataSource | None = None,
        without_statistics: bool | None = None,
    ) -> dict[str, Any] | None:
        """
        Flatten to a plain record.

        Like StreamDatum.to_object(), plus `date_end` and, unless
        `without_statistics`, per-property statistic keys suffixed
        `_count`/`_min`/`_max` (instantaneous) or `_start`/`_end` (accumulating).
        """
        m = _resolve_meta(self.stream_id, meta) or self.meta
        if m is None:
            return None
        if without_statistics is None:
            without_statistics = get_settings().without_statistics
        obj: dict[str, Any] = {"streamId": self.stream_id, "date": self.ts[0], "date_end": self.ts[1]}
        _object_identity(obj, m)
        _populate_statistics(obj, m.instantaneous_names, self.i_props, _INSTANTANEOUS_SUFFIXES, without_statistics)
        _populate_statistics(obj, m.accumulating_names, self.a_props, _ACCUMULATING_SUFFIXES, without_statistics)
        _populate(obj, m.status_names, self.s_props)
        if self.tags:
            obj["tags"] = sorted(self.tags, key=str)
        return obj

    def to_json_object(
        self,
        registry: DatumStreamMetadataRegistry | None = None,
        *,
        nested: bool = False,
    ) -> list[Any]:
        """
        Encode as a stream data array.

        Statistic groups are written as consecutive values by default, or as
        one array per property when `nested` is true:

            [0, [1650945600000, 1651032000000], [3.6, 2, 0, 7.2], [1.42, 1138.44, 1139.86]]
        """
        result: list[Any] = [
            _stream_ref(self.stream_id, registry),
            [datetime_to_epoch_millis(self.ts[0]), datetime_to_epoch_millis(self.ts[1])],
        ]
        for groups in (self.i_props or (), self.a_props or ()):
            for group in groups:
                if nested:
                    result.append(list(group))
                else:
                    result.extend(group)
        result.extend(self.s_props or ())
        if self.tags:
            result.extend(sorted(self.tags, key=str))
        return result

    def to_json_encoding(
        self,
        registry: DatumStreamMetadataRegistry | None = None,
        *,
        nested: bool = False,
    ) -> str:
        return json.dumps(self.to_json_object(registry, nested=nested), separators=(",", ":"))


StreamedDatum = Union[StreamDatum, StreamAggregateDatum]
