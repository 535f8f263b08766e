import pytest
from pydantic import ValidationError

from geofilter.models.models import BoundingBox, LatLon

NYC = (40.7128, -74.0060)


def test_generate_creates_users_inside_block(geofilter, codec, query_engine):
    cell = codec.encode(*NYC, 6)
    user_ids = geofilter.generate(cell, 50)
    geofilter.wait_for_writes(timeout=10)

    assert len(user_ids) == 50
    assert len(set(user_ids)) == 50
    block = set(query_engine.hashes_3x3(cell))
    box = query_engine.bbox_3x3(cell)
    for user_id in user_ids:
        record = geofilter.get(user_id)
        assert record.geonum in block
        assert box.contains(codec.decode(record.geonum))
        assert codec.encode(record.options["lat"], record.options["lon"], 6) == record.geonum
    assert sorted(geofilter.neighbors(cell)) == sorted(user_ids)


def test_generate_across_antimeridian(geofilter, codec, query_engine):
    cell = codec.encode(10.0, 179.99, 4)
    box = query_engine.bbox_3x3(cell)
    assert box.top_left.lon > box.bottom_right.lon

    user_ids = geofilter.generate(cell, 40)
    geofilter.wait_for_writes(timeout=10)

    block = set(query_engine.hashes_3x3(cell))
    for user_id in user_ids:
        record = geofilter.get(user_id)
        assert record.geonum in block
        assert box.contains(codec.decode(record.geonum))
        assert -180.0 <= record.options["lon"] < 180.0
    assert sorted(geofilter.neighbors(cell)) == sorted(user_ids)


def test_bbox_contains_wraps_across_antimeridian():
    box = BoundingBox(LatLon(11.0, 179.0), LatLon(9.0, -179.0))
    assert box.contains(LatLon(10.0, 179.5))
    assert box.contains(LatLon(10.0, -179.5))
    assert not box.contains(LatLon(10.0, 0.0))
    assert not box.contains(LatLon(12.0, 179.5))


def test_generated_records_carry_placeholder_fields(geofilter, codec):
    cell = codec.encode(*NYC, 5)
    [user_id] = geofilter.generate(cell, 1)
    geofilter.wait_for_writes(timeout=10)

    assert user_id.startswith("neighbor_")
    record = geofilter.get(user_id)
    assert list(record.options) == ["id", "lat", "lon", "first_name", "last_name"]
    assert record.options["id"] == user_id
    assert record.options["first_name"] == user_id
    assert record.options["last_name"] == "neighbor"


def test_generate_defaults_to_one_hundred(geofilter, codec):
    cell = codec.encode(*NYC, 4)
    assert len(geofilter.generate(cell)) == 100


def test_generate_zero(geofilter, codec):
    assert geofilter.generate(codec.encode(*NYC, 6), 0) == []


def test_run_validates_input(geofilter, codec):
    cell = codec.encode(*NYC, 6)
    out = geofilter.load_generator.run({"cell_id": cell, "count": 3})
    assert out["cell_id"] == cell
    assert len(out["user_ids"]) == 3
    with pytest.raises(ValidationError):
        geofilter.load_generator.run({"cell_id": cell, "count": -1})
