# test/test_exceptions.py
import pytest

from streamdatum.core import (
    CoreError,
    DatumStreamMetadata,
    DatumStreamMetadataRegistry,
    InvalidDatum,
    Layer,
    MetadataNotFound,
    StreamDatum,
)
from streamdatum.io.stream_decoder import datum_for_stream_data

STREAM_ID = "7714f762-2361-4ec2-98ab-7e96807b32a6"


def _registry():
    return DatumStreamMetadataRegistry([DatumStreamMetadata.node_metadata(STREAM_ID, "UTC", 1, "s", ["watts"])])


def test_missing_stream_caught_as_keyerror_with_stream_id():
    with pytest.raises(KeyError) as info:
        _registry()["missing"]
    assert isinstance(info.value, MetadataNotFound)
    assert info.value.stream_id == "missing"


def test_construction_errors_share_core_base():
    with pytest.raises(CoreError):
        Layer(key=None)  # type: ignore[arg-type]
    with pytest.raises(CoreError):
        DatumStreamMetadata.node_metadata(STREAM_ID, "UTC", "1", "s")  # type: ignore[arg-type]
    with pytest.raises(InvalidDatum):
        StreamDatum(STREAM_ID, float("nan"))


def test_decoders_turn_construction_errors_into_none():
    assert DatumStreamMetadata.from_json_object(
        {"streamId": STREAM_ID, "zone": "UTC", "objectId": "1", "sourceId": "s"}
    ) is None
    assert datum_for_stream_data([0, 1650667326308, 1, ["unhashable tag"]], _registry()) is None
