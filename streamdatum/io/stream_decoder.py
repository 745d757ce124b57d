# streamdatum/io/stream_decoder.py
from __future__ import annotations

import json
import logging
import math
from typing import Any

from streamdatum.core.config import get_settings
from streamdatum.core.datum import StreamAggregateDatum, StreamDatum, StreamedDatum
from streamdatum.core.exceptions import InvalidDatum
from streamdatum.core.metadata import DatumStreamMetadata
from streamdatum.core.registry import DatumStreamMetadataRegistry

logger = logging.getLogger(__name__)

INSTANTANEOUS_GROUP_WIDTH = 4  # average, count, min, max
ACCUMULATING_GROUP_WIDTH = 3   # difference, start, end


def _is_number(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, float):
        return math.isfinite(value)
    return isinstance(value, int)


def _resolve_metadata(ref: Any, meta: Any) -> DatumStreamMetadata | None:
    """
    Resolve the metadata for element 0 of a stream data array.

    A direct metadata instance is used as is. With a registry, a string
    reference is a stream ID and an integer reference is a stream index.
    """
    if isinstance(meta, DatumStreamMetadata):
        return meta
    if not isinstance(meta, DatumStreamMetadataRegistry):
        return None
    if isinstance(ref, str):
        return meta.metadata_for_stream_id(ref)
    if isinstance(ref, int) and not isinstance(ref, bool):
        return meta.metadata_at(ref)
    return None


class _Cursor:
    """Sequential reader over the positional values of one stream data array."""

    __slots__ = ("data", "pos", "strict", "short")

    def __init__(self, data: list[Any], strict: bool) -> None:
        self.data = data
        self.pos = 2
        self.strict = strict
        self.short = False

    def take(self, n: int) -> list[Any] | None:
        if n < 1:
            return None
        chunk = self.data[self.pos:self.pos + n]
        self.pos += n
        if len(chunk) < n:
            self.short = True
            chunk.extend([None] * (n - len(chunk)))
        return chunk

    def take_groups(self, count: int, width: int, nested: bool) -> list[list[Any]] | None:
        if count < 1:
            return None
        if nested:
            raw = self.take(count) or []
            groups = []
            for g in raw:
                if not isinstance(g, list):
                    self.short = True
                    g = []
                if len(g) != width:
                    self.short = True
                    g = (g + [None] * width)[:width]
                groups.append(g)
            return groups
        flat = self.take(count * width) or []
        return [flat[i:i + width] for i in range(0, len(flat), width)]

    def rest(self) -> list[Any] | None:
        if self.pos >= len(self.data):
            return None
        return self.data[self.pos:]


def _is_nested_aggregate(data: list[Any], meta: DatumStreamMetadata) -> bool:
    # The live API writes each statistic group as its own array; the compact
    # form writes the groups as consecutive values.
    if meta.instantaneous_length + meta.accumulating_length < 1 or len(data) < 3:
        return False
    return isinstance(data[2], list)


def _decode_point(data: list[Any], meta: DatumStreamMetadata, cursor: _Cursor) -> StreamDatum | None:
    if not _is_number(data[1]):
        return None
    i_props = cursor.take(meta.instantaneous_length)
    a_props = cursor.take(meta.accumulating_length)
    s_props = cursor.take(meta.status_length)
    if cursor.short and cursor.strict:
        return None
    stream_id = data[0] if isinstance(data[0], str) else meta.stream_id
    return StreamDatum(
        stream_id=stream_id,
        ts=data[1],
        i_props=i_props,
        a_props=a_props,
        s_props=s_props,
        tags=cursor.rest(),
        meta=meta,
    )


def _decode_aggregate(
    data: list[Any], meta: DatumStreamMetadata, cursor: _Cursor
) -> StreamAggregateDatum | None:
    ts = data[1]
    if len(ts) != 2 or not all(_is_number(t) for t in ts):
        return None
    nested = _is_nested_aggregate(data, meta)
    i_props = cursor.take_groups(meta.instantaneous_length, INSTANTANEOUS_GROUP_WIDTH, nested)
    a_props = cursor.take_groups(meta.accumulating_length, ACCUMULATING_GROUP_WIDTH, nested)
    s_props = cursor.take(meta.status_length)
    if cursor.short and cursor.strict:
        return None
    stream_id = data[0] if isinstance(data[0], str) else meta.stream_id
    return StreamAggregateDatum(
        stream_id=stream_id,
        ts=(ts[0], ts[1]),
        i_props=i_props,
        a_props=a_props,
        s_props=s_props,
        tags=cursor.rest(),
        meta=meta,
    )


def datum_for_stream_data(
    data: list[Any] | str,
    meta: DatumStreamMetadata | DatumStreamMetadataRegistry | None,
    *,
    strict: bool | None = None,
) -> StreamedDatum | None:
    """
    Decode one stream data array into a datum.

    Parameters
    ----------
    data:
        The array, or its JSON text. Invalid JSON raises json.JSONDecodeError.
    meta:
        The stream's metadata, or a registry to resolve it from element 0
        (stream ID or stream index).
    strict:
        When true, arrays too short for the metadata's property counts (or
        with malformed timestamps / statistic groups) are rejected; when
        false, missing values decode as None. Defaults to the
        `strict_decode` setting.

    Returns
    -------
    StreamAggregateDatum
        If element 1 is a [start, end] timestamp pair.
    StreamDatum
        Otherwise.
    None
        If the array cannot be decoded. Structural problems never raise.
    """
    if isinstance(data, str):
        data = json.loads(data)
    if not isinstance(data, list) or len(data) < 2:
        return None

    m = _resolve_metadata(data[0], meta)
    if m is None:
        logger.debug("No stream metadata for stream reference %r", data[0])
        return None

    if strict is None:
        strict = get_settings().strict_decode
    cursor = _Cursor(data, strict)
    try:
        if isinstance(data[1], list):
            return _decode_aggregate(data, m, cursor)
        return _decode_point(data, m, cursor)
    except InvalidDatum as e:
        logger.debug("Invalid stream data for %r: %s", data[0], e)
        return None


# Same contract as datum_for_stream_data; kept for callers using the stream-oriented name.
stream_datum_for_data = datum_for_stream_data
