"""Unit tests for the SRT time codec."""

import pytest

from srtchunker.exceptions import MalformedTimecode
from srtchunker.timecode import format_range, format_timecode, parse_timecode, to_milliseconds


# ---------------------------------------------------------------------------
# parse_timecode
# ---------------------------------------------------------------------------

class TestParseTimecode:
    def test_zero(self):
        assert parse_timecode("00:00:00,000") == 0.0

    def test_all_fields(self):
        assert parse_timecode("01:02:03,456") == 3723.456

    def test_surrounding_whitespace_is_ignored(self):
        assert parse_timecode("  00:00:05,000 ") == 5.0

    def test_hours_are_not_range_checked(self):
        assert parse_timecode("123:00:00,000") == 123 * 3600

    @pytest.mark.parametrize("value", [
        "badtime",
        "0:00:01,000",       # hours need two digits
        "00:0:01,000",
        "00:00:01.000",      # WebVTT separator
        "00:00:01,00",
        "00:00:01,0000",
        "",
        "00:00:01,000 extra",
    ])
    def test_rejects_bad_pattern(self, value):
        with pytest.raises(MalformedTimecode):
            parse_timecode(value)

    @pytest.mark.parametrize("value", [
        "٠٠:٠٠:٠١,٠٠٠",  # Arabic-Indic digits
        "00:00:0１,000",  # fullwidth one
    ])
    def test_rejects_non_ascii_digits(self, value):
        with pytest.raises(MalformedTimecode):
            parse_timecode(value)

    def test_rejects_minutes_out_of_range(self):
        with pytest.raises(MalformedTimecode, match="minutes"):
            parse_timecode("00:60:00,000")

    def test_rejects_seconds_out_of_range(self):
        with pytest.raises(MalformedTimecode, match="seconds"):
            parse_timecode("00:00:60,000")

    def test_malformed_timecode_is_a_value_error(self):
        with pytest.raises(ValueError):
            parse_timecode("nope")

    def test_error_keeps_offending_value(self):
        with pytest.raises(MalformedTimecode) as excinfo:
            parse_timecode("12:34")
        assert excinfo.value.value == "12:34"


# ---------------------------------------------------------------------------
# format_timecode
# ---------------------------------------------------------------------------

class TestFormatTimecode:
    def test_zero(self):
        assert format_timecode(0) == "00:00:00,000"

    def test_all_fields(self):
        assert format_timecode(3723.456) == "01:02:03,456"

    def test_hours_wider_than_two_digits(self):
        assert format_timecode(100 * 3600 + 1.5) == "100:00:01,500"

    def test_rounds_rather_than_truncates(self):
        assert format_timecode(1.0006) == "00:00:01,001"
        assert format_timecode(1.0004) == "00:00:01,000"

    def test_rounding_carry_rolls_into_seconds(self):
        assert format_timecode(59.9996) == "00:01:00,000"

    def test_rounding_carry_cascades_into_hours(self):
        assert format_timecode(3599.9999) == "01:00:00,000"

    def test_rejects_negative(self):
        with pytest.raises(ValueError):
            format_timecode(-0.001)

    def test_rejects_non_finite(self):
        with pytest.raises(ValueError):
            format_timecode(float("inf"))

    def test_sub_millisecond_value_from_spec_scenario(self):
        formatted = format_timecode(3661.9995)
        assert formatted in ("01:01:01,999", "01:01:02,000")
        assert abs(parse_timecode(formatted) - 3661.9995) <= 0.0005 + 1e-9

    def test_format_range(self):
        assert format_range(0, 5.25) == "00:00:00,000 --> 00:00:05,250"


# ---------------------------------------------------------------------------
# Round trip
# ---------------------------------------------------------------------------

class TestRoundTrip:
    @pytest.mark.parametrize("total_ms", [
        0, 1, 999, 1000, 59_999, 60_000, 3_599_999, 3_600_000,
        3_661_999, 86_399_999, 360_000_123,
    ])
    def test_millisecond_values_round_trip_exactly(self, total_ms):
        t = total_ms / 1000
        assert parse_timecode(format_timecode(t)) == t

    def test_every_millisecond_of_a_second_round_trips(self):
        for millis in range(1000):
            t = (7 * 3600 + 59 * 60 + 59) + millis / 1000
            assert to_milliseconds(parse_timecode(format_timecode(t))) == to_milliseconds(t)
