"""
Test text cleanup, timestamp normalization and geographic helpers.
"""
import math

import pytest

from incident_feeds.core.regions import NASHVILLE, PORTLAND
from incident_feeds.core.utils.formatting import (
    clean_text,
    strip_html,
    format_incident_type_name,
    to_iso,
)
from incident_feeds.core.utils.geo import haversine_distance, is_valid_coordinate, to_float


class TestToIso:

    def test_millisecond_epoch(self):
        assert to_iso(1755472800000) == "2025-08-17T23:20:00.000Z"

    def test_offset_string(self):
        assert to_iso("2025-08-17T16:20:00-07:00") == "2025-08-17T23:20:00.000Z"

    def test_naive_string_is_utc(self):
        assert to_iso("2025-08-17T16:25:00.000") == "2025-08-17T16:25:00.000Z"

    @pytest.mark.parametrize("value", [None, "", "   ", "not a date", True, {"a": 1}])
    def test_unparsable_is_none(self, value):
        assert to_iso(value) is None

    @pytest.mark.parametrize("value", ["Monday", "4:20 PM", "12", "August 17", "Aug 2025"])
    def test_partial_dates_are_none(self, value):
        assert to_iso(value) is None

    def test_date_without_time(self):
        assert to_iso("2025-08-17") == "2025-08-17T00:00:00.000Z"

    def test_weekday_with_full_date(self):
        assert to_iso("Sunday, August 17, 2025 4:20 PM") == "2025-08-17T16:20:00.000Z"


class TestText:

    def test_clean_text(self):
        assert clean_text("  CAD 123 ") == "CAD 123"
        assert clean_text(None) == ""
        assert clean_text(42) == "42"

    def test_strip_html_keeps_line_breaks(self):
        text = strip_html("Theft at <b>1 Main St</b><br/>Sunday &amp; more")
        assert text == "Theft at 1 Main St\nSunday & more"

    def test_strip_html_block_tags_end_lines(self):
        text = strip_html("<div>Assault at&nbsp;&nbsp;400 SE Oak St</div><p>Monday</p>")
        assert text == "Assault at 400 SE Oak St\nMonday"

    def test_strip_html_empty(self):
        assert strip_html(None) == ""
        assert strip_html("<p></p>") == ""

    def test_incident_type_name(self):
        assert format_incident_type_name("SHOTS FIRED/HEARD") == "Shots Fired/Heard"
        assert format_incident_type_name("BURGLARY - RESIDENCE") == "Burglary - Residence"
        assert format_incident_type_name(None) is None
        assert format_incident_type_name("") is None


class TestGeo:

    def test_haversine_known_distance(self):
        miles = haversine_distance(
            PORTLAND.center_lat, PORTLAND.center_lon, 47.6062, -122.3321, unit="miles"
        )
        assert 140 < miles < 150

    def test_haversine_zero(self):
        assert haversine_distance(*NASHVILLE.center, *NASHVILLE.center) == 0

    @pytest.mark.parametrize("value,expected", [
        ("45.52", 45.52),
        (45, 45.0),
        (" -122.6 ", -122.6),
    ])
    def test_to_float(self, value, expected):
        assert to_float(value) == expected

    @pytest.mark.parametrize("value", [None, "", "abc", True, "nan", float("inf"), [1]])
    def test_to_float_rejects(self, value):
        assert to_float(value) is None

    def test_valid_coordinate(self):
        assert is_valid_coordinate(45.5, -122.6)
        assert not is_valid_coordinate(91, 0)
        assert not is_valid_coordinate(0, 181)
        assert not is_valid_coordinate(math.nan, 0)
        assert not is_valid_coordinate(None, 0)
