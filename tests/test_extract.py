"""
Test fallback-chain field extraction.
"""
import random

from incident_feeds.extract.fields import (
    FieldChain,
    RandomIdSource,
    extract_generic,
    key,
    keys,
    path,
)

from conftest import sequential_ids


class TestFieldChain:

    def test_first_defined_wins(self):
        chain = FieldChain("id", keys("GlobalID", "OBJECTID", "id"))
        assert chain.resolve({"OBJECTID": 0, "id": "x"}) == 0
        assert chain.resolve({"id": "x"}) == "x"

    def test_blank_strings(self):
        row = {"Address": "  ", "Location": "5th Ave"}
        assert FieldChain("a", keys("Address", "Location")).resolve(row) == "  "
        assert FieldChain("a", keys("Address", "Location"), skip_blank=True).resolve(row) == "5th Ave"

    def test_defaults(self):
        assert FieldChain("name", keys("Title"), default="Incident").resolve({}) == "Incident"
        ids = sequential_ids("r")
        chain = FieldChain("id", keys("id"), default_factory=ids)
        assert chain.resolve({}) == "r-1"
        assert chain.resolve({}) == "r-2"
        assert chain.resolve({"id": "keep"}) == "keep"

    def test_extractor_errors_are_undefined(self):
        def broken(row):
            raise KeyError("nope")

        chain = FieldChain("x", [("broken", broken), ("x", key("x"))])
        assert chain.resolve({"x": 1}) == 1

    def test_path(self):
        lat = path("geometry", "coordinates", 1)
        assert lat({"geometry": {"coordinates": [-122.6, 45.5]}}) == 45.5
        assert lat({"geometry": {"coordinates": [-122.6]}}) is None
        assert lat({"geometry": None}) is None
        assert lat({"geometry": "POINT"}) is None


class TestRandomIdSource:

    def test_seeded_is_reproducible(self):
        first = RandomIdSource(random.Random(7))
        second = RandomIdSource(random.Random(7))
        assert [first() for _ in range(3)] == [second() for _ in range(3)]

    def test_shape(self):
        value = RandomIdSource(length=8)()
        assert len(value) == 8
        assert value.isalnum() and value == value.lower()


class TestGenericFields:

    def test_geojson_row(self):
        row = {
            "OBJECTID": 7,
            "CallType": "ALARM",
            "Address": " 1 Native Way ",
            "LastUpdate": 1755472800000,
            "Priority": 3,
            "geometry": {"type": "Point", "coordinates": [-122.68, 45.52]},
        }
        fields = extract_generic(row, sequential_ids())
        assert fields["id"] == "7"
        assert fields["name"] == "ALARM"
        assert fields["address"] == "1 Native Way"
        assert (fields["lat"], fields["lon"]) == (45.52, -122.68)
        assert fields["updatedAt"] == "2025-08-17T23:20:00.000Z"
        assert fields["extras"]["priority"] == 3
        assert fields["extras"]["incidentTypeName"] == "ALARM"

    def test_flat_lat_lon_preferred(self):
        row = {"lat": "45.1", "lon": "-122.1", "geometry": {"coordinates": [0, 0]}}
        fields = extract_generic(row, sequential_ids())
        assert (fields["lat"], fields["lon"]) == (45.1, -122.1)

    def test_kml_row(self):
        row = {
            "id": "pm-1", "title": "Theft at 1 Main St", "name": "Theft",
            "address": "1 Main St", "incidentId": "PP1", "rawDescription": "Theft at 1 Main St",
        }
        fields = extract_generic(row, sequential_ids())
        assert fields["id"] == "pm-1"
        assert fields["name"] == "Theft"
        assert fields["extras"]["incidentId"] == "PP1"

    def test_empty_row_defaults(self):
        fields = extract_generic({}, sequential_ids("gen"))
        assert fields["id"] == "gen-1"
        assert fields["name"] == "Incident"
        assert fields["address"] is None
        assert fields["lat"] is None
        assert fields["updatedAt"] is None

    def test_blank_id_falls_back_to_random(self):
        fields = extract_generic({"id": "", "OBJECTID": "  "}, sequential_ids("gen"))
        assert fields["id"] == "gen-1"

    def test_blank_id_skips_to_next_key(self):
        fields = extract_generic({"id": "", "OBJECTID": 12}, sequential_ids())
        assert fields["id"] == "12"

    def test_unparsable_coordinates(self):
        fields = extract_generic({"latitude": "abc", "longitude": ""}, sequential_ids())
        assert fields["lat"] is None and fields["lon"] is None
