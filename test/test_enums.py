# test/test_enums.py
from streamdatum.core import Aggregation, DatumSamplesType, DatumStreamType


def test_stream_type_keys():
    assert DatumStreamType.NODE.key == "n"
    assert DatumStreamType.LOCATION.key == "l"
    assert DatumStreamType.from_key("l") is DatumStreamType.LOCATION
    assert DatumStreamType.from_key("x") is None


def test_samples_type_keys():
    assert [t.key for t in DatumSamplesType] == ["i", "a", "s", "t"]
    assert DatumSamplesType.from_key("s") is DatumSamplesType.STATUS
    assert DatumSamplesType.from_key(None) is None


def test_aggregation_levels_and_keys():
    assert Aggregation.THIRTY_MINUTE.level == 1800
    assert Aggregation.THIRTY_MINUTE.key == "ThirtyMinute"
    assert Aggregation.from_key("Hour") is Aggregation.HOUR
    assert Aggregation.from_key("Fortnight") is None


def test_aggregations_sharing_a_level_stay_distinct():
    assert Aggregation.HOUR is not Aggregation.HOUR_OF_DAY
    assert Aggregation.HOUR.level == Aggregation.HOUR_OF_DAY.level
    assert Aggregation.from_key("HourOfDay") is Aggregation.HOUR_OF_DAY
    assert len(list(Aggregation)) == 17


def test_aggregation_ordering_by_level():
    assert Aggregation.MINUTE < Aggregation.HOUR
    assert Aggregation.DAY > Aggregation.HOUR
    assert Aggregation.HOUR <= Aggregation.HOUR_OF_DAY
    assert Aggregation.HOUR.compare_to(Aggregation.HOUR_OF_DAY) == 0
    assert Aggregation.MINUTE.compare_to(Aggregation.DAY) == -1
    assert max([Aggregation.DAY, Aggregation.YEAR, Aggregation.MONTH]) is Aggregation.YEAR
