"""cover.py

Bounding box search: pick the set of equal-resolution cells that covers a
box at the lowest cost.

A cost function takes ``(num_cells, resolution)`` and returns the cost of
querying that many cells of that resolution.  Lower is better; on equal
cost the finer resolution wins because its cover is tighter.
"""

from __future__ import annotations

import math
import sys
from typing import Callable, Iterable, List, Optional

from .cell import (
    GRID_SIZE,
    MAX_FEASIBLE_COVER_CELLS,
    MAX_RESOLUTION,
    compute,
    interpolate,
    interpolation_count,
)
from .geo import bbox_of_points, expand_bbox
from .models import BoundingBox, Point

CostFunction = Callable[[int, int], float]

# Practical infinity for cost functions.
MAX_COST = sys.float_info.max


def default_cost_function(num_cells: int, resolution: int) -> float:
    """Allow at most one 4x4 grid worth of cells, at any resolution."""
    return MAX_COST if num_cells > GRID_SIZE ** 2 else 0


def _common_prefix_length(a: str, b: str) -> int:
    n = 0
    for ca, cb in zip(a, b):
        if ca != cb:
            break
        n += 1
    return n


def best_bbox_search_cells(
    bbox: BoundingBox, cost_function: Optional[CostFunction] = None
) -> List[str]:
    """Return an efficient set of cells to search for a bounding box query.

    All returned cells share one resolution and together contain *bbox*.
    A box crossing the antimeridian (``west > east``) is searched as its two
    halves and the covers are concatenated.

    Args:
        bbox: The box being searched.
        cost_function: Cost policy, see the module docstring.  Defaults to
            :func:`default_cost_function`.

    Returns:
        Cell strings sorted lexically (per half for a crossing box).
    """
    if bbox.crosses_antimeridian:
        cells: List[str] = []
        for part in bbox.split_antimeridian():
            cells.extend(best_bbox_search_cells(part, cost_function))
        return cells

    if cost_function is None:
        cost_function = default_cost_function

    cell_ne = compute(bbox.north_east, MAX_RESOLUTION)
    cell_sw = compute(bbox.south_west, MAX_RESOLUTION)

    # Coarser than the common prefix every cover is the single shared
    # ancestor, so start there.
    min_resolution = max(1, _common_prefix_length(cell_ne, cell_sw))

    min_cost = math.inf
    min_cost_cells: List[str] = []

    for resolution in range(min_resolution, MAX_RESOLUTION + 1):
        cur_ne = cell_ne[:resolution]
        cur_sw = cell_sw[:resolution]

        if interpolation_count(cur_ne, cur_sw) > MAX_FEASIBLE_COVER_CELLS:
            continue

        cell_set = sorted(interpolate(cur_ne, cur_sw))
        cost = cost_function(len(cell_set), resolution)

        if cost <= min_cost:
            min_cost = cost
            min_cost_cells = cell_set
        else:
            if not min_cost_cells:
                min_cost_cells = cell_set
            # Once the cost starts rising it won't come back down.
            break

    return min_cost_cells


def track_search_cells(
    points: Iterable[Point],
    margin_km: float = 1.0,
    cost_function: Optional[CostFunction] = None,
) -> List[str]:
    """Return the cover of the bounding box of *points*, grown by *margin_km*.

    Returns an empty list when there are no points.
    """
    bbox = bbox_of_points(points)
    if bbox is None:
        return []
    return best_bbox_search_cells(expand_bbox(bbox, margin_km), cost_function)
