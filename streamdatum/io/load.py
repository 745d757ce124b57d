# streamdatum/io/load.py
from __future__ import annotations

from typing import Any, Mapping

from streamdatum.io.stream_reader import StreamResultReader
from streamdatum.core import DatumStreamMetadataRegistry, StreamedDatum


def load_stream_result(
    payload: Mapping[str, Any] | str | bytes,
    *,
    strict: bool | None = None,
) -> tuple[DatumStreamMetadataRegistry, list[StreamedDatum]]:
    reader = StreamResultReader(payload, strict=strict)
    datum = reader.read_datum()
    return reader.registry, datum
