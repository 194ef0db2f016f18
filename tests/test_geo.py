import pytest
import gpxpy
from math import pi

from geocell.cell import EAST, NORTH, SOUTH, WEST, compute
from geocell.geo import (
    EARTH_RADIUS_M,
    bbox_of_points,
    distance,
    distance_sorted_edges,
    expand_bbox,
    extract_gpx_points,
    point_distance,
)
from geocell.models import BoundingBox, Point


# ---- distance ----

class TestDistance:
    def test_bna_to_lax(self):
        bna = Point(lat=36.12, lon=-86.67)
        lax = Point(lat=33.94, lon=-118.40)
        assert distance(bna, lax) == pytest.approx(2_889_677, abs=1.0)

    def test_symmetric(self):
        a = Point(lat=47.0, lon=10.0)
        b = Point(lat=46.0, lon=11.5)
        assert distance(a, b) == pytest.approx(distance(b, a))

    def test_same_point_is_zero(self):
        p = Point(lat=37.7749, lon=-122.4194)
        # law of cosines loses precision at very short range
        assert distance(p, p) == pytest.approx(0.0, abs=1.0)

    def test_half_circumference(self):
        a = Point(lat=0.0, lon=0.0)
        b = Point(lat=0.0, lon=180.0)
        assert distance(a, b) == pytest.approx(EARTH_RADIUS_M * pi)

    def test_one_degree_latitude(self):
        a = Point(lat=10.0, lon=20.0)
        b = Point(lat=11.0, lon=20.0)
        assert distance(a, b) == pytest.approx(EARTH_RADIUS_M * pi / 180, rel=1e-6)


# ---- point_distance ----

class TestPointDistance:
    CELL = "c"  # lat 0..45, lon 0..90

    def test_inside_nearest_edge(self):
        # 1 degree above the southern edge, far from the others
        p = Point(lat=1.0, lon=45.0)
        assert point_distance(self.CELL, p) == pytest.approx(
            distance(p, Point(lat=0.0, lon=45.0))
        )

    def test_on_edge_is_zero(self):
        assert point_distance(self.CELL, Point(lat=0.0, lon=45.0)) == pytest.approx(0.0, abs=1.0)

    def test_level_in_longitude(self):
        p = Point(lat=50.0, lon=45.0)
        assert point_distance(self.CELL, p) == pytest.approx(
            distance(p, Point(lat=45.0, lon=45.0))
        )

    def test_level_in_latitude(self):
        p = Point(lat=20.0, lon=-5.0)
        assert point_distance(self.CELL, p) == pytest.approx(
            distance(p, Point(lat=20.0, lon=0.0))
        )

    def test_corner(self):
        p = Point(lat=-3.0, lon=-4.0)
        assert point_distance(self.CELL, p) == pytest.approx(
            distance(p, Point(lat=0.0, lon=0.0))
        )

    def test_own_cell_is_small(self):
        p = Point(lat=37.0, lon=-122.0)
        # a resolution-10 cell is a few hundred meters across
        assert point_distance(compute(p, 10), p) < 500.0


# ---- distance_sorted_edges ----

class TestDistanceSortedEdges:
    def test_nearest_edge_first(self):
        # just inside the western edge of "c", a bit above the equator
        p = Point(lat=10.0, lon=0.5)
        edges, dists = distance_sorted_edges(["c"], p)
        assert edges[0] == WEST
        assert edges[1] == SOUTH
        assert set(edges) == {NORTH, SOUTH, EAST, WEST}
        assert dists == sorted(dists)

    def test_union_of_cells(self):
        p = Point(lat=10.0, lon=0.5)
        edges, _ = distance_sorted_edges(["c", "9"], p)
        # "9" extends the union west to -90, so the south edge is now nearest
        assert edges[0] == SOUTH


# ---- bbox helpers ----

class TestBboxOfPoints:
    def test_empty(self):
        assert bbox_of_points([]) is None

    def test_points(self):
        box = bbox_of_points([
            Point(lat=46.5, lon=7.5),
            Point(lat=46.9, lon=7.1),
            Point(lat=46.7, lon=8.0),
        ])
        assert box == BoundingBox(north=46.9, east=8.0, south=46.5, west=7.1)


class TestExpandBbox:
    def test_grows_every_side(self):
        box = BoundingBox(north=47.0, east=11.0, south=46.0, west=10.0)
        grown = expand_bbox(box, margin_km=1.0)
        assert grown.north == pytest.approx(47.0 + 1 / 111.0)
        assert grown.south == pytest.approx(46.0 - 1 / 111.0)
        assert grown.east > 11.0 + 1 / 111.0
        assert grown.west < 10.0 - 1 / 111.0

    def test_clamped_to_globe(self):
        box = BoundingBox(north=90.0, east=180.0, south=-90.0, west=-180.0)
        assert expand_bbox(box, margin_km=50.0) == box


# ---- GPX ----

class TestExtractGpxPoints:
    def test_routes_and_tracks(self):
        gpx = gpxpy.gpx.GPX()
        route = gpxpy.gpx.GPXRoute()
        route.points.append(gpxpy.gpx.GPXRoutePoint(46.5, 7.5))
        gpx.routes.append(route)

        track = gpxpy.gpx.GPXTrack()
        seg = gpxpy.gpx.GPXTrackSegment()
        seg.points.append(gpxpy.gpx.GPXTrackPoint(46.6, 7.6))
        seg.points.append(gpxpy.gpx.GPXTrackPoint(46.7, 7.7))
        track.segments.append(seg)
        gpx.tracks.append(track)

        assert extract_gpx_points(gpx) == [
            Point(lat=46.5, lon=7.5),
            Point(lat=46.6, lon=7.6),
            Point(lat=46.7, lon=7.7),
        ]

    def test_empty(self):
        assert extract_gpx_points(gpxpy.gpx.GPX()) == []
