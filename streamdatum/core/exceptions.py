# streamdatum/core/exceptions.py
from __future__ import annotations


class CoreError(Exception):
    """Base error for streamdatum.

    Constructors raise it; the JSON and wire decoders catch it and return
    None instead.
    """


class InvalidMetadata(CoreError):
    """A DatumStreamMetadata field has the wrong type (for example a non-integer object ID)."""


class InvalidDatum(CoreError):
    """A datum timestamp, property array or tag set cannot be stored."""


class InvalidLayer(CoreError):
    """A Layer has a non-string key, or layers passed to combine_layers() are not aligned."""


class MetadataNotFound(CoreError, KeyError):
    """No metadata for a stream ID in a DatumStreamMetadataRegistry."""

    def __init__(self, stream_id: str) -> None:
        super().__init__(stream_id)
        self.stream_id = stream_id
