# streamdatum/core/__init__.py
"""
Core domain objects for streamdatum.

This module defines the format-agnostic data model:
- DatumStreamMetadata: property name layout of one datum stream
- DatumStreamMetadataRegistry: ordered, stream-ID-indexed metadata collection
- StreamDatum / StreamAggregateDatum: positional datum bound to metadata
- Layer: named, date-ordered records, with gap filling and grouping helpers

The core layer is independent from the stream data wire format, which lives in
streamdatum.io.
"""

from .enums import Aggregation, DatumSamplesType, DatumStreamType
from .metadata import DatumStreamMetadata
from .registry import DatumStreamMetadataRegistry
from .datum import DatumShape, StreamAggregateDatum, StreamDatum, StreamedDatum
from .dates import datum_date, datetime_to_epoch_millis, epoch_millis_to_datetime
from .layers import Layer, align_layers, combine_layers
from .normalize import time_normalize
from .grouping import grouped_by_source_metric, nan_sum
from .sources import filter_source_ids, wildcard_pattern_to_regex
from .config import Settings, get_settings
from .exceptions import (
    CoreError,
    InvalidMetadata,
    InvalidDatum,
    InvalidLayer,
    MetadataNotFound,
)


__all__ = [
    # enums
    "Aggregation",
    "DatumSamplesType",
    "DatumStreamType",

    # metadata
    "DatumStreamMetadata",
    "DatumStreamMetadataRegistry",

    # datum
    "DatumShape",
    "StreamDatum",
    "StreamAggregateDatum",
    "StreamedDatum",

    # dates
    "datum_date",
    "datetime_to_epoch_millis",
    "epoch_millis_to_datetime",

    # layers
    "Layer",
    "align_layers",
    "combine_layers",
    "time_normalize",
    "grouped_by_source_metric",
    "nan_sum",

    # source IDs
    "filter_source_ids",
    "wildcard_pattern_to_regex",

    # configuration
    "Settings",
    "get_settings",

    # exceptions
    "CoreError",
    "InvalidMetadata",
    "InvalidDatum",
    "InvalidLayer",
    "MetadataNotFound",
]
