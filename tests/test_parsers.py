"""
Test the KML, JSON and HTML-table feed parsers and format sniffing.
"""
import pytest

from incident_feeds.extract.description import parse_kml_description, parse_pacific_timestamp
from incident_feeds.parsers import parse_feed, sniff_format, parse_kml, parse_json, parse_html_table
from incident_feeds.parsers.html_table import classify_headers, coordinates_from_href

from conftest import load_fixture


class TestKmlDescription:

    def test_address_id_and_timestamp(self):
        parsed = parse_kml_description(
            "Theft at 123 Main St, Sunday, August 17, 2025 4:20 PM [Portland Police #PP1]"
        )
        assert parsed.address == "123 Main St"
        assert parsed.incident_id == "PP1"
        assert parsed.updated_at == "2025-08-17T23:20:00.000Z"

    def test_markup_and_trailing_port(self):
        parsed = parse_kml_description(
            "Assault at <b>400 SE OAK ST, PORT</b><br/>Monday, August 18, 2025 9:05 AM"
        )
        assert parsed.address == "400 SE OAK ST"
        assert parsed.incident_id is None
        assert parsed.updated_at == "2025-08-18T16:05:00.000Z"

    def test_no_at_keeps_whole_line(self):
        parsed = parse_kml_description("1200 SW 5th Ave [PPB #X-9]")
        assert parsed.address == "1200 SW 5th Ave"
        assert parsed.incident_id == "X-9"
        assert parsed.updated_at is None

    def test_empty(self):
        parsed = parse_kml_description(None)
        assert parsed.address == ""
        assert parsed.incident_id is None

    def test_pacific_timestamp_unparsable(self):
        assert parse_pacific_timestamp("Funday, Smarch 40, 2025 4:20 PM") is None


class TestKmlParser:

    def test_placemarks(self):
        rows = parse_kml(load_fixture("pdx.kml"))
        assert [r["id"] for r in rows] == ["pm-1", "pm-2", "pm-3", "pm-4"]

        first = rows[0]
        assert first["title"] == "Theft at 123 Main St"
        assert first["name"] == "Theft"
        assert first["address"] == "123 Main St"
        assert first["incidentId"] == "PP1"
        assert first["updatedAt"] == "2025-08-17T23:20:00.000Z"
        assert first["lat"] is None and first["lon"] is None
        assert "description" not in first

    def test_name_split_on_lowercase_at(self):
        rows = parse_kml(
            b"<kml><Placemark id=\"x\"><name>ASSAULT AT LARGE at 1 Main St</name></Placemark></kml>"
        )
        assert rows[0]["name"] == "ASSAULT AT LARGE"

    def test_point_coordinates(self):
        rows = parse_kml(load_fixture("pdx.kml"))
        assert (rows[1]["lat"], rows[1]["lon"]) == (45.52, -122.66)
        assert rows[2]["lat"] == 91.0

    def test_empty_document(self):
        assert parse_kml(b"") == []
        assert parse_kml(b"<kml></kml>") == []


class TestJsonParser:

    def test_geojson_features_flattened(self):
        rows = parse_json(load_fixture("pdx.json"))
        assert len(rows) == 5
        assert rows[0]["OBJECTID"] == 7
        assert rows[0]["geometry"]["coordinates"] == [-122.68, 45.52]
        assert "type" not in rows[0]
        assert rows[1]["type"] == "THEFT"

    def test_feature_keys_win(self):
        rows = parse_json(b'{"features": [{"id": "f", "properties": {"id": "p", "x": 1}}]}')
        assert rows == [{"id": "f", "x": 1, "properties": {"id": "p", "x": 1}}]

    def test_bare_array_and_envelope(self):
        assert parse_json(b'[{"a": 1}, 2, null]') == [{"a": 1}]
        assert parse_json(b'{"incidents": [{"a": 1}]}') == [{"a": 1}]

    def test_unrecognized_shapes(self):
        assert parse_json(b'{"data": []}') == []
        assert parse_json(b'"text"') == []
        assert parse_json(b"{not json") == []


class TestHtmlParser:

    def test_rows(self):
        rows = parse_html_table(load_fixture("pdx.html"))
        assert len(rows) == 3
        assert rows[0] == {
            "name": "THEFT",
            "address": "200 NW Couch St",
            "updatedAt": "2025-08-17T23:20:00.000Z",
            "lat": 45.5236,
            "lon": -122.675,
        }
        assert (rows[1]["lat"], rows[1]["lon"]) == (45.5215, -122.6731)
        assert rows[2]["updatedAt"] is None
        assert rows[2]["lat"] is None

    def test_header_classification(self):
        columns = classify_headers(["call type", "location", "updated"])
        assert columns == {"name": 0, "address": 1, "updatedAt": 2}

    def test_map_links(self):
        assert coordinates_from_href("https://maps.google.com/?q=45.5,-122.6") == (45.5, -122.6)
        assert coordinates_from_href("https://google.com/maps/@1,2/data=!3d45.1!4d-122.2") == (45.1, -122.2)
        assert coordinates_from_href("https://example.com/") == (None, None)

    def test_no_table(self):
        assert parse_html_table(b"<html><body><p>Down for maintenance</p></body></html>") == []


class TestSniffing:

    def test_formats(self):
        assert sniff_format(load_fixture("pdx.kml")) == "kml"
        assert sniff_format(load_fixture("pdx.json")) == "json"
        assert sniff_format(load_fixture("pdx.html")) == "html"
        assert sniff_format(b"plain text") is None
        assert sniff_format(b"") is None

    def test_content_type_is_only_a_hint(self):
        rows = parse_feed(load_fixture("pdx.kml"), "application/json")
        assert len(rows) == 4

    @pytest.mark.parametrize("payload", [
        b"",
        b"\x00\xff\xfe garbage",
        b"<kml><Placemark><name>x</name><Point><coordinates>oops",
        b"<html><table><tr><td>",
        b"{\"features\": [",
        b"[" * 5000,
        b"<kml>" + b"\xff" * 64,
        "café <table><tr><th>type</th></tr><tr><td>x</td></tr></table>".encode("utf-8"),
    ])
    def test_never_raises(self, payload):
        assert isinstance(parse_feed(payload), list)
        assert isinstance(parse_kml(payload), list)
        assert isinstance(parse_json(payload), list)
        assert isinstance(parse_html_table(payload), list)
