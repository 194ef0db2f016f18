"""geo.py

Distance math and small geographic helpers used by the cover search, the
in-memory index and the GPX track helpers.
"""

from __future__ import annotations

from math import acos, cos, radians, sin
from typing import Iterable, List, Optional, Sequence, Tuple

import gpxpy

from .cell import EAST, NORTH, SOUTH, WEST, Direction, compute_box
from .models import (
    MAX_LATITUDE,
    MAX_LONGITUDE,
    MIN_LATITUDE,
    MIN_LONGITUDE,
    BoundingBox,
    Point,
)

EARTH_RADIUS_M = 6378135  # meters


def distance(p1: Point, p2: Point) -> float:
    """Great-circle distance in meters using the spherical law of cosines."""
    lat1, lon1 = radians(p1.lat), radians(p1.lon)
    lat2, lon2 = radians(p2.lat), radians(p2.lon)
    c = sin(lat1) * sin(lat2) + cos(lat1) * cos(lat2) * cos(lon2 - lon1)
    # rounding can push c just past 1.0 for coincident points
    return EARTH_RADIUS_M * acos(max(-1.0, min(1.0, c)))


def point_distance(cell: str, point: Point) -> float:
    """Return the shortest distance in meters between *point* and *cell*.

    Inside the cell the nearest feature is always an edge.  Outside it is
    either an edge (when the point is level with the cell in one dimension)
    or a corner.
    """
    bbox = compute_box(cell)

    between_w_e = bbox.west <= point.lon <= bbox.east
    between_n_s = bbox.south <= point.lat <= bbox.north

    to_south = Point(lat=bbox.south, lon=point.lon)
    to_north = Point(lat=bbox.north, lon=point.lon)
    to_east = Point(lat=point.lat, lon=bbox.east)
    to_west = Point(lat=point.lat, lon=bbox.west)

    if between_w_e:
        if between_n_s:
            candidates = [to_south, to_north, to_east, to_west]
        else:
            candidates = [to_south, to_north]
    elif between_n_s:
        candidates = [to_east, to_west]
    else:
        candidates = [
            bbox.north_east,
            bbox.south_west,
            Point(lat=bbox.south, lon=bbox.east),
            Point(lat=bbox.north, lon=bbox.west),
        ]

    return min(distance(point, p) for p in candidates)


def distance_sorted_edges(
    cells: Sequence[str], point: Point
) -> Tuple[List[Direction], List[float]]:
    """Return the edges of the cells' union box, nearest to *point* first.

    Each edge is named by its direction (``SOUTH``, ``NORTH``, ``WEST``,
    ``EAST``).  The distance to an edge is measured to the projection of
    *point* onto it.

    Returns:
        ``(directions, distances)``, both sorted by ascending distance.
    """
    boxes = [compute_box(cell) for cell in cells]
    north = max(b.north for b in boxes)
    east = max(b.east for b in boxes)
    south = min(b.south for b in boxes)
    west = min(b.west for b in boxes)

    edges = sorted(
        [
            (distance(Point(lat=south, lon=point.lon), point), SOUTH),
            (distance(Point(lat=north, lon=point.lon), point), NORTH),
            (distance(Point(lat=point.lat, lon=west), point), WEST),
            (distance(Point(lat=point.lat, lon=east), point), EAST),
        ],
        key=lambda e: e[0],
    )
    return [d for _dist, d in edges], [dist for dist, _d in edges]


def bbox_of_points(points: Iterable[Point]) -> Optional[BoundingBox]:
    """Return the smallest box containing all *points*, or None if empty."""
    min_lon = min_lat = float("inf")
    max_lon = max_lat = float("-inf")
    seen = False
    for p in points:
        seen = True
        if p.lon < min_lon:
            min_lon = p.lon
        if p.lat < min_lat:
            min_lat = p.lat
        if p.lon > max_lon:
            max_lon = p.lon
        if p.lat > max_lat:
            max_lat = p.lat
    if not seen:
        return None
    return BoundingBox(north=max_lat, east=max_lon, south=min_lat, west=min_lon)


def expand_bbox(b: BoundingBox, margin_km: float = 1.0) -> BoundingBox:
    """Expand bbox by ~margin_km (default 1 km), clamped to the valid ranges.

    Rough degrees conversion around the box's middle latitude.
    """
    mid_lat = (b.south + b.north) / 2.0
    # ~1 deg lat = 111 km; 1 deg lon = 111 km * cos(lat)
    deg_lat = margin_km / 111.0
    deg_lon = margin_km / (111.0 * max(0.1, cos(radians(abs(mid_lat)))))
    return BoundingBox(
        north=min(MAX_LATITUDE, b.north + deg_lat),
        east=min(MAX_LONGITUDE, b.east + deg_lon),
        south=max(MIN_LATITUDE, b.south - deg_lat),
        west=max(MIN_LONGITUDE, b.west - deg_lon),
    )


def extract_gpx_points(gpx: gpxpy.gpx.GPX) -> List[Point]:
    """Collect all route & track points."""
    pts: List[Point] = []

    for route in gpx.routes:
        for p in route.points:
            pts.append(Point(lat=p.latitude, lon=p.longitude))

    for track in gpx.tracks:
        for seg in track.segments:
            for p in seg.points:
                pts.append(Point(lat=p.latitude, lon=p.longitude))

    return pts
