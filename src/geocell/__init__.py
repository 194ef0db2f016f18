"""Hierarchical geocells over the WGS-84 latitude/longitude plane."""

from .cell import (
    ALL_DIRECTIONS,
    EAST,
    GRID_SIZE,
    MAX_FEASIBLE_COVER_CELLS,
    MAX_RESOLUTION,
    NORTH,
    NORTHEAST,
    NORTHWEST,
    SOUTH,
    SOUTHEAST,
    SOUTHWEST,
    WEST,
    adjacent,
    all_adjacents,
    collinear,
    compute,
    compute_box,
    contains_point,
    generate_geocells,
    interpolate,
    interpolation_count,
    is_valid,
)
from .cover import best_bbox_search_cells, default_cost_function
from .geo import EARTH_RADIUS_M, distance, point_distance
from .index import GeocellIndex, ProximityConfig
from .models import BoundingBox, Point

__version__ = "0.1.0"
