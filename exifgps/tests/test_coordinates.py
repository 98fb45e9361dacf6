import pytest

from exifgps.coordinates import (
    CoordinateParseError,
    dms_to_decimal,
    is_negative_hemisphere,
    longitude_sign,
    parse_altitude,
    round_coordinate,
    split_dms,
)

PITTSBURGH_LAT = "40 deg 26' 46.00\""
PITTSBURGH_LON = "79 deg 58' 36.00\""


def test_north_latitude():
    assert dms_to_decimal(PITTSBURGH_LAT, "N") == 40.446111


def test_west_longitude():
    assert dms_to_decimal(PITTSBURGH_LON, "W") == -79.976667


@pytest.mark.parametrize(
    "raw",
    [
        "0 deg 0' 0.00\"",
        "12 deg 30' 0.00\"",
        "89 deg 59' 59.99\"",
        "179 deg 59' 59.99\"",
        "1 deg 2' 3.456\"",
    ],
)
def test_negative_hemisphere_negates_positive(raw):
    degrees, minutes, seconds = (float(t) for t in split_dms(raw))
    expected = round(degrees + minutes / 60 + seconds / 3600, 6)

    north = dms_to_decimal(raw, "N")
    east = dms_to_decimal(raw, "E")
    assert north >= 0
    assert north == pytest.approx(expected, abs=1e-6)
    assert east == north
    assert dms_to_decimal(raw, "S") == -north
    assert dms_to_decimal(raw, "W") == -east


@pytest.mark.parametrize("reference", ["s", "S", "South", "south", "w", "West"])
def test_reference_is_case_insensitive(reference):
    assert is_negative_hemisphere(reference)
    assert dms_to_decimal(PITTSBURGH_LAT, reference) == -40.446111


@pytest.mark.parametrize("reference", ["", None, "N", "n", "North", "E", "East"])
def test_positive_references(reference):
    assert not is_negative_hemisphere(reference)
    assert dms_to_decimal(PITTSBURGH_LAT, reference) == 40.446111


@pytest.mark.parametrize("raw", ["", "40 deg", "40 deg 26'", "abc deg 26' 46.00\""])
def test_malformed_input_raises(raw):
    with pytest.raises(CoordinateParseError):
        dms_to_decimal(raw, "N")


def test_parse_error_is_a_value_error():
    with pytest.raises(ValueError):
        dms_to_decimal("40 deg", "N")


def test_embedded_hemisphere_letter_is_used_without_reference():
    assert dms_to_decimal(PITTSBURGH_LON + " W") == -79.976667
    assert dms_to_decimal(PITTSBURGH_LAT + " N") == 40.446111


def test_explicit_reference_wins_over_embedded_letter():
    assert dms_to_decimal("10 deg 0' 0.00\" W", "E") == 10.0
    assert dms_to_decimal("10 deg 0' 0.00\" E", "W") == -10.0


def test_no_double_negation():
    assert dms_to_decimal(PITTSBURGH_LON + " W", "W") == -79.976667
    assert dms_to_decimal("-79 deg 58' 36.00\"", "W") == -79.976667


def test_explicit_reference_wins_over_negative_degrees():
    assert dms_to_decimal("-79 deg 58' 36.00\"", "E") == 79.976667


def test_negative_degrees_without_reference():
    assert dms_to_decimal("-79 deg 58' 36.00\"") == -79.976667


def test_extra_tokens_are_ignored():
    assert dms_to_decimal("40 deg 26' 46.00\" N extra", "N") == 40.446111


def test_round_half_away_from_zero():
    assert round_coordinate(2.5, precision=0) == 3.0
    assert round_coordinate(-2.5, precision=0) == -3.0
    assert round_coordinate(1.23456749) == 1.234567


def test_longitude_sign():
    assert longitude_sign({"GPSLongitudeRef": "W"}) == -1
    assert longitude_sign({"GPSLongitudeRef": "w"}) == -1
    assert longitude_sign({"GPSLongitudeRef": "E"}) == 1
    assert longitude_sign({"GPSLongitudeRef": None}) == 1
    assert longitude_sign({}) == 1


class TestParseAltitude:
    def test_above_sea_level(self):
        assert parse_altitude("271.5 m", "Above Sea Level") == 271.5

    def test_below_sea_level(self):
        assert parse_altitude("28 m", "Below Sea Level") == -28.0
        assert parse_altitude("28 m", "1") == -28.0

    def test_missing_reference(self):
        assert parse_altitude("100 m") == 100.0

    def test_empty(self):
        assert parse_altitude("") is None
        assert parse_altitude("   ") is None

    def test_not_a_number(self):
        with pytest.raises(CoordinateParseError):
            parse_altitude("unknown", "Above Sea Level")


@pytest.mark.parametrize(
    "raw",
    [
        "nan deg 0' 0\"",
        "inf deg 0' 0\"",
        "40 deg infinity' 0\"",
        "40 deg 26' inf\"",
        "-inf deg 0' 0\"",
    ],
)
def test_non_finite_values_raise(raw):
    with pytest.raises(CoordinateParseError):
        dms_to_decimal(raw, "N")


def test_zero_has_no_negative_sign():
    value = dms_to_decimal("0 deg 0' 0\"", "W")
    assert value == 0.0
    assert str(value) == "0.0"
