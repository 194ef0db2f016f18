# conftest.py
import pytest
from geocell.index import GeocellIndex
from geocell.models import BoundingBox, Point


@pytest.fixture
def sf_point() -> Point:
    return Point(lat=37.0, lon=-122.0)


@pytest.fixture
def sf_box() -> BoundingBox:
    """Box around San Francisco, small enough for a 16-cell cover."""
    return BoundingBox(north=37.80, east=-122.30, south=37.70, west=-122.50)


@pytest.fixture
def antimeridian_box() -> BoundingBox:
    return BoundingBox(north=76.043611, east=64.576263, south=-54.505934, west=87.076263)


@pytest.fixture
def bay_index() -> GeocellIndex[str]:
    idx = GeocellIndex[str]()
    idx.bulk_insert([
        (37.0, -122.0, "origin"),
        (37.01, -122.0, "north_1km"),
        (37.0, -121.95, "east_4km"),
        (38.0, -122.0, "north_111km"),
        (-10.0, 50.0, "indian_ocean"),
    ])
    return idx


GPX_TEMPLATE = """<?xml version="1.0" encoding="UTF-8"?>
<gpx version="1.1" creator="geocell-tests" xmlns="http://www.topografix.com/GPX/1/1">
  <trk>
    <name>test track</name>
    <trkseg>
{points}
    </trkseg>
  </trk>
</gpx>
"""


@pytest.fixture
def write_gpx(tmp_path):
    """Return a helper writing ``[(lat, lon), ...]`` as a GPX track file."""
    def _write(points, name="track.gpx"):
        body = "\n".join(
            f'      <trkpt lat="{lat}" lon="{lon}"></trkpt>' for lat, lon in points
        )
        p = tmp_path / name
        p.write_text(GPX_TEMPLATE.format(points=body), encoding="utf-8")
        return str(p)
    return _write
