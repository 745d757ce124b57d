# streamdatum/core/metadata.py
from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping

from .enums import DatumSamplesType, DatumStreamType
from .exceptions import InvalidMetadata

logger = logging.getLogger(__name__)

_REQUIRED_JSON_KEYS = ("streamId", "zone", "objectId", "sourceId")


def _names(value: Iterable[str] | None, label: str) -> tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, (str, bytes)) or not isinstance(value, Iterable):
        raise InvalidMetadata(f"DatumStreamMetadata.{label} must be a sequence of strings.")
    names = tuple(value)
    for name in names:
        if not isinstance(name, str):
            raise InvalidMetadata(f"DatumStreamMetadata.{label} must contain only strings.")
    return names


@dataclass(frozen=True, slots=True)
class DatumStreamMetadata:
    """
    Layout of a single datum stream.

    Stream data carries property values by position only; the three ordered
    name lists here are the schema that gives those positions their names:
    - instantaneous_names: sampled values (watts, voltage, ...)
    - accumulating_names: meter-style readings (wattHours, ...)
    - status_names: string values (phase, state, ...)
    """
    stream_id: str
    zone: str
    kind: DatumStreamType
    object_id: int
    source_id: str
    instantaneous_names: tuple[str, ...] = field(default=())
    accumulating_names: tuple[str, ...] = field(default=())
    status_names: tuple[str, ...] = field(default=())

    def __post_init__(self) -> None:
        if not isinstance(self.stream_id, str) or not self.stream_id.strip():
            raise InvalidMetadata("DatumStreamMetadata.stream_id must be a non-empty string.")
        if not isinstance(self.zone, str):
            raise InvalidMetadata("DatumStreamMetadata.zone must be a string.")
        if not isinstance(self.kind, DatumStreamType):
            raise InvalidMetadata("DatumStreamMetadata.kind must be a DatumStreamType.")
        if isinstance(self.object_id, bool) or not isinstance(self.object_id, int):
            raise InvalidMetadata("DatumStreamMetadata.object_id must be an integer.")
        if not isinstance(self.source_id, str):
            raise InvalidMetadata("DatumStreamMetadata.source_id must be a string.")

        object.__setattr__(self, "instantaneous_names", _names(self.instantaneous_names, "instantaneous_names"))
        object.__setattr__(self, "accumulating_names", _names(self.accumulating_names, "accumulating_names"))
        object.__setattr__(self, "status_names", _names(self.status_names, "status_names"))

    # ---- factories ----
    @classmethod
    def node_metadata(
        cls,
        stream_id: str,
        zone: str,
        node_id: int,
        source_id: str,
        instantaneous_names: Iterable[str] | None = None,
        accumulating_names: Iterable[str] | None = None,
        status_names: Iterable[str] | None = None,
    ) -> "DatumStreamMetadata":
        return cls(
            stream_id=stream_id,
            zone=zone,
            kind=DatumStreamType.NODE,
            object_id=node_id,
            source_id=source_id,
            instantaneous_names=instantaneous_names,  # type: ignore[arg-type]
            accumulating_names=accumulating_names,  # type: ignore[arg-type]
            status_names=status_names,  # type: ignore[arg-type]
        )

    @classmethod
    def location_metadata(
        cls,
        stream_id: str,
        zone: str,
        location_id: int,
        source_id: str,
        instantaneous_names: Iterable[str] | None = None,
        accumulating_names: Iterable[str] | None = None,
        status_names: Iterable[str] | None = None,
    ) -> "DatumStreamMetadata":
        return cls(
            stream_id=stream_id,
            zone=zone,
            kind=DatumStreamType.LOCATION,
            object_id=location_id,
            source_id=source_id,
            instantaneous_names=instantaneous_names,  # type: ignore[arg-type]
            accumulating_names=accumulating_names,  # type: ignore[arg-type]
            status_names=status_names,  # type: ignore[arg-type]
        )

    # ---- derived ----
    @property
    def time_zone_id(self) -> str:
        return self.zone

    @property
    def node_id(self) -> int | None:
        return self.object_id if self.kind is DatumStreamType.NODE else None

    @property
    def location_id(self) -> int | None:
        return self.object_id if self.kind is DatumStreamType.LOCATION else None

    @property
    def instantaneous_length(self) -> int:
        return len(self.instantaneous_names)

    @property
    def accumulating_length(self) -> int:
        return len(self.accumulating_names)

    @property
    def status_length(self) -> int:
        return len(self.status_names)

    @property
    def property_names_length(self) -> int:
        return self.instantaneous_length + self.accumulating_length + self.status_length

    @property
    def property_names(self) -> tuple[str, ...] | None:
        """All property names: instantaneous, then accumulating, then status."""
        if self.property_names_length < 1:
            return None
        return self.instantaneous_names + self.accumulating_names + self.status_names

    def property_names_for_type(self, samples_type: DatumSamplesType) -> tuple[str, ...] | None:
        if samples_type is DatumSamplesType.INSTANTANEOUS:
            return self.instantaneous_names
        if samples_type is DatumSamplesType.ACCUMULATING:
            return self.accumulating_names
        if samples_type is DatumSamplesType.STATUS:
            return self.status_names
        return None

    def index_of_property(self, name: str, samples_type: DatumSamplesType) -> int:
        names = self.property_names_for_type(samples_type) or ()
        try:
            return names.index(name)
        except ValueError:
            return -1

    # ---- JSON ----
    def to_json_object(self) -> dict[str, Any]:
        """
        Compact JSON form, for example:

            {"streamId": "7714f762-...", "zone": "Pacific/Auckland", "kind": "n",
             "objectId": 123, "sourceId": "/power/1",
             "i": ["watts", "current"], "a": ["wattHours"]}

        Empty name lists are omitted.
        """
        result: dict[str, Any] = {
            "streamId": self.stream_id,
            "zone": self.zone,
            "kind": self.kind.key,
            "objectId": self.object_id,
            "sourceId": self.source_id,
        }
        if self.instantaneous_names:
            result["i"] = list(self.instantaneous_names)
        if self.accumulating_names:
            result["a"] = list(self.accumulating_names)
        if self.status_names:
            result["s"] = list(self.status_names)
        return result

    def to_json_encoding(self) -> str:
        return json.dumps(self.to_json_object(), separators=(",", ":"))

    @classmethod
    def from_json_object(cls, obj: Any) -> "DatumStreamMetadata | None":
        """
        Build metadata from an object shaped like `to_json_object()` output.

        Returns None instead of raising when `obj` is not such an object.
        """
        if not isinstance(obj, Mapping):
            return None
        if any(k not in obj for k in _REQUIRED_JSON_KEYS):
            return None
        kind = DatumStreamType.from_key(obj.get("kind")) or DatumStreamType.NODE
        i = obj.get("i")
        a = obj.get("a")
        s = obj.get("s")
        try:
            return cls(
                stream_id=obj["streamId"],
                zone=obj["zone"],
                kind=kind,
                object_id=obj["objectId"],
                source_id=obj["sourceId"],
                instantaneous_names=i if isinstance(i, list) else None,  # type: ignore[arg-type]
                accumulating_names=a if isinstance(a, list) else None,  # type: ignore[arg-type]
                status_names=s if isinstance(s, list) else None,  # type: ignore[arg-type]
            )
        except InvalidMetadata as e:
            logger.debug("Ignoring invalid stream metadata %r: %s", obj.get("streamId"), e)
            return None

    @classmethod
    def from_json_encoding(cls, text: str) -> "DatumStreamMetadata | None":
        """Parse JSON text; a json.JSONDecodeError propagates for invalid JSON."""
        return cls.from_json_object(json.loads(text))
