from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Iterator, List, Mapping, Protocol

from streamdatum.core.datum import DatumShape, StreamedDatum
from streamdatum.core.registry import DatumStreamMetadataRegistry
from streamdatum.io.stream_decoder import datum_for_stream_data

logger = logging.getLogger(__name__)


@dataclass
class RawStreamResult:
    """
    The two parts of a stream query response.

    Example payload:

        {"success": true,
         "meta": [{"streamId": "7714f762-...", "zone": "Pacific/Auckland", "kind": "n",
                   "objectId": 123, "sourceId": "/power/1", "i": ["watts"]}],
         "data": [[0, 1650667326308, 12326], [0, 1650667386308, 12400]]}
    """

    meta: list[Any]
    data: list[Any]


class StreamReader(Protocol):
    """Protocol for stream result readers.

    Implementations expose the decoding registry and the decoded datum.
    """

    @property
    def registry(self) -> DatumStreamMetadataRegistry:
        ...

    def read_datum(self) -> List[StreamedDatum]:
        ...


def _parse_payload(payload: Mapping[str, Any] | str | bytes) -> RawStreamResult:
    """Split a response payload (mapping or JSON text) into its meta and data lists.

    A missing or non-list part is treated as empty. Invalid JSON text raises
    json.JSONDecodeError.
    """
    if isinstance(payload, (str, bytes)):
        payload = json.loads(payload)
    if not isinstance(payload, Mapping):
        return RawStreamResult(meta=[], data=[])
    meta = payload.get("meta")
    data = payload.get("data")
    return RawStreamResult(
        meta=meta if isinstance(meta, list) else [],
        data=data if isinstance(data, list) else [],
    )


class StreamResultReader:
    """Concrete StreamReader over one query response.

    The response's `meta` list becomes a DatumStreamMetadataRegistry, in
    order, so the stream indexes used by the `data` records resolve against
    it. Records that fail to decode are logged and skipped; one bad record
    never stops the rest of the batch.
    """

    def __init__(self, payload: Mapping[str, Any] | str | bytes, *, strict: bool | None = None):
        self._raw = _parse_payload(payload)
        self._strict = strict
        self._registry = DatumStreamMetadataRegistry.from_json_object(self._raw.meta)
        self._failed = 0

    # ------------------------------------------------------------------
    # StreamReader protocol implementation
    # ------------------------------------------------------------------
    @property
    def registry(self) -> DatumStreamMetadataRegistry:
        # from_json_object only returns None for a non-list, which _parse_payload rules out
        return self._registry  # type: ignore[return-value]

    @property
    def failed(self) -> int:
        """Number of records skipped by the last full iteration."""
        return self._failed

    def __len__(self) -> int:
        return len(self._raw.data)

    def iter_datum(self) -> Iterator[StreamedDatum]:
        """Decode the data records lazily, skipping any that cannot be decoded."""
        self._failed = 0
        for i, record in enumerate(self._raw.data):
            try:
                d = datum_for_stream_data(record, self.registry, strict=self._strict)
            except json.JSONDecodeError as e:
                logger.warning("Skipping stream data record %d with invalid JSON: %s", i, e)
                self._failed += 1
                continue
            if d is None:
                self._failed += 1
                logger.warning("Skipping undecodable stream data record %d", i)
                continue
            yield d

    def read_datum(self) -> List[StreamedDatum]:
        return list(self.iter_datum())

    def read_objects(self, *, without_statistics: bool | None = None) -> List[dict[str, Any]]:
        """Decoded datum flattened with to_object(), ready for the layer helpers."""
        result: List[dict[str, Any]] = []
        for d in self.iter_datum():
            if d.shape is DatumShape.AGGREGATE:
                obj = d.to_object(without_statistics=without_statistics)  # type: ignore[call-arg]
            else:
                obj = d.to_object()
            if obj is not None:
                result.append(obj)
        return result
