"""track.py

GPX helpers on top of the cover search and the in-memory index.

The track's bounding box, grown by the search distance, is covered with
cells; the index resolves those cells to candidate items, and an exact
great-circle check against the track points keeps the nearby ones.

Usage::

    from geocell.index import load_index
    from geocell.track import items_near_track

    huts = items_near_track("track.gpx", load_index(Path("huts.jsonl")), 500)
"""

from __future__ import annotations

import logging
from typing import List, Sequence, TypeVar

import gpxpy

from .cover import track_search_cells
from .geo import distance, extract_gpx_points
from .index import GeocellIndex
from .models import Point

logger = logging.getLogger(__name__)

T = TypeVar("T")


def load_track_points(gpx_path: str) -> List[Point]:
    """Parse a GPX file and return all of its route and track points."""
    with open(gpx_path, "r", encoding="utf-8") as f:
        gpx = gpxpy.parse(f)
    return extract_gpx_points(gpx)


def _collect_nearby(
    points: Sequence[Point],
    index: GeocellIndex[T],
    distance_m: float,
) -> List[T]:
    """Return the items within *distance_m* of any of *points*, each once."""
    margin_km = distance_m / 1000.0
    cells = track_search_cells(points, margin_km=margin_km)
    candidates = index.query_cells(cells)
    logger.debug("track cover: %d cells, %d candidates", len(cells), len(candidates))

    kept: List[T] = []
    for point, item in candidates:
        if any(distance(point, p) <= distance_m for p in points):
            kept.append(item)
    return kept


def items_near_track(
    gpx_path: str, index: GeocellIndex[T], distance_m: float = 500.0
) -> List[T]:
    """Return the items of *index* within *distance_m* of a GPX track.

    Args:
        gpx_path: Path to a GPX file.
        index: Populated index to search.
        distance_m: Maximum distance in meters from any track point.

    Returns:
        The matching items; empty when the file holds no points.
    """
    points = load_track_points(gpx_path)
    if not points:
        return []
    return _collect_nearby(points, index, distance_m)
