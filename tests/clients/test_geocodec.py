import pytest

from geofilter.clients.geocodec import GeoCodec
from geofilter.errors import CodecError
from geofilter.models.models import LatLon

POINTS = [
    (40.7128, -74.0060),
    (51.5074, -0.1278),
    (-33.8688, 151.2093),
    (0.0, 0.0),
    (-89.9, 179.9),
    (89.9, -179.9),
]


@pytest.fixture
def codec():
    return GeoCodec()


def test_encode_known_cell(codec):
    assert codec.encode(42.6, -5.6, 5) == "ezs42"


@pytest.mark.parametrize("lat,lon", POINTS)
@pytest.mark.parametrize("precision", [1, 4, 6, 9, 12])
def test_center_lies_in_bbox(codec, lat, lon, precision):
    cell = codec.encode(lat, lon, precision)
    assert len(cell) == precision
    box = codec.decode_bbox(cell)
    assert box.contains(codec.decode(cell))
    assert box.contains(LatLon(lat, lon))


def test_precision_is_cell_length(codec):
    assert codec.precision("ezs42") == 5
    assert codec.precision(codec.encode(1.0, 2.0, 11)) == 11


def test_neighbors_are_pinned_to_compass_order(codec):
    cell = codec.encode(40.7128, -74.0060, 6)
    box = codec.decode_bbox(cell)
    height = box.top_left.lat - box.bottom_right.lat
    width = box.bottom_right.lon - box.top_left.lon
    expected_offsets = [
        (1, 0),  # N
        (-1, 0),  # S
        (0, 1),  # E
        (0, -1),  # W
        (1, -1),  # NW
        (1, 1),  # NE
        (-1, -1),  # SW
        (-1, 1),  # SE
    ]
    center = codec.decode(cell)
    neighbors = codec.neighbors(cell)
    assert len(neighbors) == 8
    assert len(set(neighbors)) == 8
    assert cell not in neighbors
    for neighbor, (dlat, dlon) in zip(neighbors, expected_offsets):
        n_center = codec.decode(neighbor)
        assert n_center.lat == pytest.approx(center.lat + dlat * height)
        assert n_center.lon == pytest.approx(center.lon + dlon * width)


def test_neighbors_wrap_across_antimeridian(codec):
    cell = codec.encode(10.0, 179.999, 5)
    east = codec.neighbors(cell)[2]
    assert codec.decode(east).lon < 0


def test_neighbors_at_pole_repeat_the_cell(codec):
    cell = codec.encode(89.99, 10.0, 3)
    north = codec.neighbors(cell)[0]
    assert north == cell


@pytest.mark.parametrize(
    "lat,lon,precision",
    [
        (91.0, 0.0, 5),
        (-90.5, 0.0, 5),
        (0.0, 180.5, 5),
        (float("nan"), 0.0, 5),
        (0.0, 0.0, 0),
        (0.0, 0.0, 13),
        (0.0, 0.0, 5.5),
        (0.0, 0.0, True),
    ],
)
def test_encode_rejects_invalid_input(codec, lat, lon, precision):
    with pytest.raises(CodecError):
        codec.encode(lat, lon, precision)


@pytest.mark.parametrize("cell", ["", "ezs4a", "EZS42", "u" * 13, 12345])
def test_invalid_cells_are_rejected(codec, cell):
    with pytest.raises(CodecError):
        codec.decode(cell)
    with pytest.raises(CodecError):
        codec.neighbors(cell)
    with pytest.raises(CodecError):
        codec.precision(cell)
