# test/test_stream_decoder.py
import json
from datetime import datetime, timezone

import pytest

from streamdatum.core import (
    DatumStreamMetadata,
    DatumStreamMetadataRegistry,
    StreamAggregateDatum,
    StreamDatum,
    get_settings,
)
from streamdatum.io.stream_decoder import datum_for_stream_data, stream_datum_for_data

STREAM_ID = "7714f762-2361-4ec2-98ab-7e96807b32a6"
OTHER_ID = "a7ed2b2e-6ba2-4dbb-8f5d-8b6fa5d1f9b3"
TS = 1650667326308
TS_END = 1650753726308


def _meta():
    return DatumStreamMetadata.node_metadata(
        STREAM_ID, "Pacific/Auckland", 123, "test/source", ["a", "b", "c"], ["d", "e"], ["f"]
    )


def _agg_meta():
    return DatumStreamMetadata.node_metadata(
        STREAM_ID, "Pacific/Auckland", 123, "test/source", ["a", "b"], ["c"], ["d"]
    )


def _registry():
    return DatumStreamMetadataRegistry(
        [
            _meta(),
            DatumStreamMetadata.node_metadata(OTHER_ID, "UTC", 456, "other", ["watts"]),
        ]
    )


class TestPointDecoding:
    """Decoding of [stream, ts, i..., a..., s..., tags...] arrays."""

    def test_decode_with_metadata(self):
        d = datum_for_stream_data([STREAM_ID, TS, 1, 2, 3, 4, 5, "six", "foo"], _meta())
        assert isinstance(d, StreamDatum)
        assert d.stream_id == STREAM_ID
        assert d.date == datetime(2022, 4, 22, 22, 42, 6, 308000, tzinfo=timezone.utc)
        assert d.i_props == (1, 2, 3)
        assert d.a_props == (4, 5)
        assert d.s_props == ("six",)
        assert d.tags == frozenset({"foo"})
        assert d.meta == _meta()

    def test_decode_json_text(self):
        d = datum_for_stream_data(json.dumps([STREAM_ID, TS, 1, 2, 3, 4, 5, "six"]), _meta())
        assert d is not None
        assert d.tags is None

    def test_decode_by_registry_index_and_stream_id(self):
        reg = _registry()
        by_index = datum_for_stream_data([1, TS, 12326], reg)
        by_id = datum_for_stream_data([OTHER_ID, TS, 12326], reg)
        assert by_index == by_id
        assert by_index.stream_id == OTHER_ID
        assert by_index.to_object()["watts"] == 12326

    def test_index_reference_with_direct_metadata_uses_its_stream_id(self):
        d = datum_for_stream_data([0, TS, 1, 2, 3, 4, 5, "six"], _meta())
        assert d.stream_id == STREAM_ID

    def test_multiple_tags(self):
        d = datum_for_stream_data([STREAM_ID, TS, 1, 2, 3, 4, 5, "six", "foo", "bar"], _meta())
        assert d.tags == frozenset({"foo", "bar"})

    def test_null_values_kept_positionally(self):
        d = datum_for_stream_data([STREAM_ID, TS, 1, None, 3, None, 5, None], _meta())
        assert d.i_props == (1, None, 3)
        assert d.a_props == (None, 5)
        assert d.s_props == (None,)

    def test_short_array_rejected_when_strict(self):
        assert datum_for_stream_data([STREAM_ID, TS, 1, 2], _meta(), strict=True) is None

    def test_short_array_padded_when_lenient(self):
        d = datum_for_stream_data([STREAM_ID, TS, 1, 2], _meta(), strict=False)
        assert d.i_props == (1, 2, None)
        assert d.a_props == (None, None)
        assert d.s_props == (None,)
        assert d.tags is None

    def test_strict_default_follows_settings(self, monkeypatch):
        assert datum_for_stream_data([STREAM_ID, TS, 1, 2], _meta()) is None
        monkeypatch.setenv("STREAMDATUM_STRICT_DECODE", "false")
        get_settings.cache_clear()
        assert datum_for_stream_data([STREAM_ID, TS, 1, 2], _meta()) is not None

    def test_metadata_without_properties(self):
        meta = DatumStreamMetadata.node_metadata(STREAM_ID, "UTC", 1, "s")
        d = datum_for_stream_data([STREAM_ID, TS, "foo"], meta)
        assert d.i_props is None
        assert d.a_props is None
        assert d.s_props is None
        assert d.tags == frozenset({"foo"})


class TestAggregateDecoding:
    """Decoding of [stream, [start, end], statistics...] arrays."""

    def _expect(self, d):
        assert isinstance(d, StreamAggregateDatum)
        assert d.i_props == ((1, 2, 3, 4), (2, 3, 4, 5))
        assert d.a_props == ((4, 5, 6),)
        assert d.s_props == ("six",)
        assert d.tags == frozenset({"foo"})

    def test_decode_flat_groups(self):
        data = [STREAM_ID, [TS, TS_END], 1, 2, 3, 4, 2, 3, 4, 5, 4, 5, 6, "six", "foo"]
        self._expect(datum_for_stream_data(data, _agg_meta()))

    def test_decode_nested_groups(self):
        data = [STREAM_ID, [TS, TS_END], [1, 2, 3, 4], [2, 3, 4, 5], [4, 5, 6], "six", "foo"]
        self._expect(datum_for_stream_data(data, _agg_meta()))

    def test_flat_and_nested_decode_equal(self):
        flat = [STREAM_ID, [TS, TS_END], 1, 2, 3, 4, 2, 3, 4, 5, 4, 5, 6, "six", "foo"]
        nested = [STREAM_ID, [TS, TS_END], [1, 2, 3, 4], [2, 3, 4, 5], [4, 5, 6], "six", "foo"]
        assert datum_for_stream_data(flat, _agg_meta()) == datum_for_stream_data(nested, _agg_meta())

    def test_dates(self):
        data = [STREAM_ID, [TS, TS_END], 1, 2, 3, 4, 2, 3, 4, 5, 4, 5, 6, "six"]
        d = datum_for_stream_data(data, _agg_meta())
        assert d.date == datetime(2022, 4, 22, 22, 42, 6, 308000, tzinfo=timezone.utc)
        assert d.date_end == datetime(2022, 4, 23, 22, 42, 6, 308000, tzinfo=timezone.utc)

    def test_nested_group_wrong_width_rejected_when_strict(self):
        data = [STREAM_ID, [TS, TS_END], [1, 2, 3], [2, 3, 4, 5], [4, 5, 6], "six"]
        assert datum_for_stream_data(data, _agg_meta(), strict=True) is None

    def test_nested_group_wrong_width_padded_when_lenient(self):
        data = [STREAM_ID, [TS, TS_END], [1, 2, 3], [2, 3, 4, 5], [4, 5, 6], "six"]
        d = datum_for_stream_data(data, _agg_meta(), strict=False)
        assert d.i_props == ((1, 2, 3, None), (2, 3, 4, 5))

    @pytest.mark.parametrize("ts", [[TS], [TS, TS_END, TS], [TS, "later"], []])
    def test_bad_timestamp_pair(self, ts):
        assert datum_for_stream_data([STREAM_ID, ts, 1, 2, 3, 4, 2, 3, 4, 5, 4, 5, 6, "six"], _agg_meta()) is None


@pytest.mark.parametrize(
    "data",
    [
        None,
        {},
        [],
        [STREAM_ID],
        [STREAM_ID, "not a timestamp", 1, 2, 3, 4, 5, "six"],
        [STREAM_ID, True, 1, 2, 3, 4, 5, "six"],
    ],
)
def test_malformed_arrays_return_none(data):
    assert datum_for_stream_data(data, _meta()) is None


@pytest.mark.parametrize("ref", [5, -1, "missing", True, 1.5, None])
def test_unresolvable_stream_reference_returns_none(ref):
    assert datum_for_stream_data([ref, TS, 12326], _registry()) is None


def test_no_metadata_returns_none():
    assert datum_for_stream_data([STREAM_ID, TS, 1], None) is None


def test_invalid_json_text_raises():
    with pytest.raises(json.JSONDecodeError):
        datum_for_stream_data("[0, 1650667326308,", _registry())


def test_decoding_is_deterministic():
    data = [0, TS, 1, 2, 3, 4, 5, "six", "foo"]
    reg = _registry()
    assert datum_for_stream_data(data, reg) == datum_for_stream_data(list(data), reg)


def test_encode_then_decode_point_and_aggregate():
    reg = _registry()
    point = datum_for_stream_data([0, TS, 1, 2, 3, 4, 5, "six", "foo"], reg)
    assert datum_for_stream_data(point.to_json_object(reg), reg) == point

    agg_reg = DatumStreamMetadataRegistry([_agg_meta()])
    agg = datum_for_stream_data([0, [TS, TS_END], [1, 2, 3, 4], [2, 3, 4, 5], [4, 5, 6], "six"], agg_reg)
    assert datum_for_stream_data(agg.to_json_encoding(agg_reg), agg_reg) == agg


def test_stream_oriented_alias():
    assert stream_datum_for_data is datum_for_stream_data


@pytest.mark.parametrize(
    "data",
    [
        [STREAM_ID, 10**20, 1, 2, 3, 4, 5, "six"],
        [STREAM_ID, -(10**20), 1, 2, 3, 4, 5, "six"],
        [STREAM_ID, float("inf"), 1, 2, 3, 4, 5, "six"],
        '["7714f762-2361-4ec2-98ab-7e96807b32a6", NaN, 1, 2, 3, 4, 5, "six"]',
    ],
)
def test_unrepresentable_point_timestamp_returns_none(data):
    assert datum_for_stream_data(data, _meta()) is None


@pytest.mark.parametrize("ts", [[0, 10**20], [10**20, 0], [TS, float("nan")]])
def test_unrepresentable_aggregate_timestamp_returns_none(ts):
    data = [STREAM_ID, ts, 1, 2, 3, 4, 2, 3, 4, 5, 4, 5, 6, "six"]
    assert datum_for_stream_data(data, _agg_meta()) is None
