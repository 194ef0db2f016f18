"""
index.py

In-memory geocell index for arbitrary items with a position.

Each item is stored under the cell of its position at *every* resolution
(see :func:`~geocell.cell.generate_geocells`), the same layout a datastore
would use with a multi-valued ``geocells`` column.  A set of cells of any
single resolution can then be resolved with plain dictionary lookups.

Two queries are offered:

- :meth:`GeocellIndex.bbox_fetch` resolves the cost-optimal cover of a box
  and keeps the candidates inside it.
- :meth:`GeocellIndex.proximity_fetch` expands outward from the cell of a
  center point until the K nearest items are known.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Generic, Iterable, List, Optional, Set, Tuple, TypeVar

from .cell import MAX_RESOLUTION, adjacent, compute, generate_geocells
from .cover import CostFunction, best_bbox_search_cells
from .geo import distance, distance_sorted_edges
from .models import BoundingBox, Point

logger = logging.getLogger(__name__)

T = TypeVar("T")

Entry = Tuple[Point, T]


@dataclass
class ProximityConfig:
    max_results: int = 10
    max_distance_m: float = 0.0  # 0 disables the distance limit


class GeocellIndex(Generic[T]):
    """Multi-resolution cell index.

    Example::

        idx = GeocellIndex[str]()
        idx.insert(37.7749, -122.4194, "San Francisco")
        hits = idx.proximity_fetch(Point(lat=37.8, lon=-122.4), max_results=5)
    """

    def __init__(self, config: Optional[ProximityConfig] = None):
        self.config = config or ProximityConfig()

        # maps cell (every resolution) -> [(Point, item), ...]
        self._cells: Dict[str, List[Entry]] = {}
        self._count = 0

    # --------------------------------------------------------

    def insert(self, lat: float, lon: float, item: T) -> str:
        """Insert an object at a geographic position.

        Returns:
            The full-resolution cell the object was placed in.
        """
        point = Point(lat=lat, lon=lon)
        entry = (point, item)
        cells = generate_geocells(point)
        for cell in cells:
            self._cells.setdefault(cell, []).append(entry)
        self._count += 1
        return cells[-1]

    def bulk_insert(self, rows: Iterable[Tuple[float, float, T]]) -> None:
        """Insert multiple ``(lat, lon, item)`` rows."""
        for lat, lon, item in rows:
            self.insert(lat, lon, item)

    # --------------------------------------------------------

    def query_cells(self, cells: Iterable[str]) -> List[Entry]:
        """Return the entries stored under any of *cells*, each once."""
        seen: Set[int] = set()
        out: List[Entry] = []
        for cell in cells:
            for entry in self._cells.get(cell.lower(), ()):
                if id(entry) in seen:
                    continue
                seen.add(id(entry))
                out.append(entry)
        return out

    def bbox_fetch(
        self, bbox: BoundingBox, cost_function: Optional[CostFunction] = None
    ) -> List[T]:
        """Return the items whose position lies inside *bbox*."""
        cells = best_bbox_search_cells(bbox, cost_function)
        candidates = self.query_cells(cells)
        logger.debug(
            "bbox fetch: %d cells, %d candidates", len(cells), len(candidates)
        )
        return [item for point, item in candidates if bbox.contains(point)]

    def proximity_fetch(
        self,
        center: Point,
        max_results: Optional[int] = None,
        max_distance_m: Optional[float] = None,
    ) -> List[Tuple[T, float]]:
        """Return up to *max_results* items nearest to *center*.

        The search starts at the full-resolution cell of *center*, then adds
        the neighbor across the nearest edge, then the two neighbors across
        the nearest perpendicular edge.  After that (or immediately when
        nothing has been found yet) it continues with the parents of the
        searched cells.  It stops once no unsearched area can be closer than
        the K-th result, or once the root is reached.

        Args:
            center: The query point.
            max_results: K.  Defaults to ``config.max_results``.
            max_distance_m: Ignore items at or beyond this distance; 0 means
                unlimited.  Defaults to ``config.max_distance_m``.

        Returns:
            ``(item, distance_m)`` pairs, nearest first.
        """
        if max_results is None:
            max_results = self.config.max_results
        if max_distance_m is None:
            max_distance_m = self.config.max_distance_m
        if max_results <= 0:
            return []

        results: List[Tuple[float, T]] = []
        seen: Set[int] = set()
        searched: Set[str] = set()

        cur_containing = compute(center, MAX_RESOLUTION)
        cur_cells = [cur_containing]
        sorted_edge_distances = [0.0]

        while cur_cells:
            closest_possible_next = sorted_edge_distances[0]
            if max_distance_m and closest_possible_next > max_distance_m:
                break

            unique = [c for c in dict.fromkeys(cur_cells) if c not in searched]
            for entry in self.query_cells(unique):
                if id(entry) in seen:
                    continue
                seen.add(id(entry))
                point, item = entry
                results.append((distance(center, point), item))
            results.sort(key=lambda r: r[0])
            del results[max_results:]
            searched.update(cur_cells)

            logger.debug(
                "proximity fetch: resolution %d, %d cells, %d results",
                len(cur_cells[0]), len(cur_cells), len(results),
            )

            sorted_edges, sorted_edge_distances = distance_sorted_edges(cur_cells, center)

            next_cells: List[Optional[str]] = []
            if results and len(cur_cells) == 1:
                next_cells = [adjacent(cur_cells[0], sorted_edges[0])]
            elif results and len(cur_cells) == 2:
                edges, _ = distance_sorted_edges([cur_containing], center)
                if edges[0][0] == 0:
                    # nearest edge is horizontal, look east/west
                    perpendicular = next(e for e in edges if e[0] != 0)
                else:
                    perpendicular = next(e for e in edges if e[0] == 0)
                next_cells = [adjacent(cell, perpendicular) for cell in cur_cells]

            neighbors = [cell for cell in next_cells if cell]
            if neighbors:
                cur_cells = cur_cells + neighbors
            else:
                # nothing found yet, or the block of cells is complete
                cur_containing = cur_containing[:-1]
                cur_cells = sorted({cell[:-1] for cell in cur_cells})
                if not cur_cells or not cur_cells[0]:
                    break

            if len(results) < max_results:
                continue
            if closest_possible_next >= results[max_results - 1][0]:
                break

        return [
            (item, dist)
            for dist, item in results[:max_results]
            if not max_distance_m or dist < max_distance_m
        ]

    # --------------------------------------------------------

    def buckets(self) -> int:
        """Number of distinct full-resolution cells."""
        return sum(1 for cell in self._cells if len(cell) == MAX_RESOLUTION)

    def __len__(self) -> int:
        """Total number of stored objects."""
        return self._count


# ------------------------------------------------------------
# Loading
# ------------------------------------------------------------

def load_index(
    data_path: Path, config: Optional[ProximityConfig] = None
) -> GeocellIndex[Dict[str, Any]]:
    """Build an index from a JSONL file.

    Every non-blank line must be a JSON object with numeric ``lat`` and
    ``lon`` keys; the whole row is stored as the item.
    """
    index: GeocellIndex[Dict[str, Any]] = GeocellIndex(config)
    with open(data_path, "r", encoding="utf-8") as f:
        for line in f:
            line = line.strip()
            if not line:
                continue
            row = json.loads(line)
            index.insert(float(row["lat"]), float(row["lon"]), row)

    logger.info("loaded %d rows into %d cells from %s", len(index), index.buckets(), data_path)
    return index
