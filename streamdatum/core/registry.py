# streamdatum/core/registry.py
from __future__ import annotations

import json
import logging
from typing import Any, Iterable, Iterator

from .enums import DatumStreamType
from .exceptions import MetadataNotFound
from .metadata import DatumStreamMetadata

logger = logging.getLogger(__name__)


class DatumStreamMetadataRegistry:
    """
    Ordered, stream-ID-indexed collection of DatumStreamMetadata.

    The insertion position of each metadata is its "stream index": compact
    stream data refers to a stream by that index instead of its stream ID.
    Entries are only ever appended, so an index stays valid for the lifetime
    of the registry (and of any registry decoded from its JSON encoding).

    Design goals:
    - dict-like access by stream ID: registry["7714f762-..."]
    - list-like access by index: registry.metadata_at(0)
    """

    def __init__(self, metas: Iterable[DatumStreamMetadata] | None = None) -> None:
        self._meta_list: list[DatumStreamMetadata] = []
        self._meta_map: dict[str, DatumStreamMetadata] = {}
        for meta in metas or ():
            self.add_metadata(meta)

    def add_metadata(self, meta: DatumStreamMetadata) -> "DatumStreamMetadataRegistry":
        """
        Append `meta` and index it by stream ID.

        Anything that is not a DatumStreamMetadata with a stream ID is ignored.
        """
        if not isinstance(meta, DatumStreamMetadata) or not meta.stream_id:
            logger.debug("Ignoring non-metadata registry entry %r", meta)
            return self
        self._meta_list.append(meta)
        self._meta_map[meta.stream_id] = meta
        return self

    # ---- dict-like API ----
    def __len__(self) -> int:
        return len(self._meta_list)

    def __iter__(self) -> Iterator[DatumStreamMetadata]:
        return iter(self._meta_list)

    def __contains__(self, stream_id: object) -> bool:
        return stream_id in self._meta_map

    def __getitem__(self, stream_id: str) -> DatumStreamMetadata:
        try:
            return self._meta_map[stream_id]
        except KeyError as e:
            raise MetadataNotFound(stream_id) from e

    def get(self, stream_id: str, default: DatumStreamMetadata | None = None) -> DatumStreamMetadata | None:
        return self._meta_map.get(stream_id, default)

    # ---- lookups ----
    def metadata_stream_ids(self) -> set[str]:
        return set(self._meta_map)

    def metadata_stream_ids_list(self) -> list[str]:
        """Stream IDs in insertion order (one entry per stream index)."""
        return [m.stream_id for m in self._meta_list]

    def metadata_at(self, index: int) -> DatumStreamMetadata | None:
        if isinstance(index, bool) or not isinstance(index, int):
            return None
        if 0 <= index < len(self._meta_list):
            return self._meta_list[index]
        return None

    def index_of_metadata_stream_id(self, stream_id: str) -> int:
        for i, meta in enumerate(self._meta_list):
            if meta.stream_id == stream_id:
                return i
        return -1

    def metadata_for_stream_id(self, stream_id: str) -> DatumStreamMetadata | None:
        return self._meta_map.get(stream_id)

    def metadata_for_object_source(
        self,
        object_id: int,
        source_id: str,
        kind: DatumStreamType | None = None,
    ) -> DatumStreamMetadata | None:
        """First metadata, in insertion order, matching the object and source (and kind, if given)."""
        for meta in self._meta_list:
            if meta.object_id != object_id or meta.source_id != source_id:
                continue
            if kind is None or meta.kind is kind:
                return meta
        return None

    # ---- JSON ----
    def to_json_object(self) -> list[dict[str, Any]]:
        return [m.to_json_object() for m in self._meta_list]

    def to_json_encoding(self) -> str:
        return json.dumps(self.to_json_object(), separators=(",", ":"))

    @classmethod
    def from_json_object(cls, data: Any) -> "DatumStreamMetadataRegistry | None":
        """
        Build a registry from a list of metadata JSON objects, preserving order.

        Returns None when `data` is not a list. Invalid entries are skipped.
        """
        if not isinstance(data, list):
            return None
        reg = cls()
        for i, obj in enumerate(data):
            meta = DatumStreamMetadata.from_json_object(obj)
            if meta is None:
                logger.warning("Skipping invalid stream metadata at index %d", i)
                continue
            reg.add_metadata(meta)
        return reg

    @classmethod
    def from_json_encoding(cls, text: str | None) -> "DatumStreamMetadataRegistry | None":
        if not text:
            return None
        return cls.from_json_object(json.loads(text))

    def __repr__(self) -> str:
        return f"DatumStreamMetadataRegistry(stream_ids={self.metadata_stream_ids_list()!r})"
