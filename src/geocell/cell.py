"""
cell.py

Hierarchical geocells: hexadecimal strings naming rectangles of the WGS-84
latitude/longitude plane.

The global rectangle [-90,90] x [-180,180] is divided into a 4x4 grid, one
hex character per sub-rectangle:

                 +---+---+---+---+ (90, 180)
                 | a | b | e | f |
                 +---+---+---+---+
                 | 8 | 9 | c | d |
                 +---+---+---+---+
                 | 2 | 3 | 6 | 7 |
                 +---+---+---+---+
                 | 0 | 1 | 4 | 5 |
      (-90,-180) +---+---+---+---+

Each following character re-divides the previous sub-rectangle the same way.
A cell's *resolution* is its length, and every prefix of a cell is one of its
ancestors (``cell[:-1]`` is the immediate parent).

Properties:
- output cells are lowercase; comparisons are case-insensitive
- all functions are pure and safe to call from any thread
- neighbors wrap around the globe horizontally but stop at the poles
"""

from __future__ import annotations

from typing import List, Optional, Tuple

from .models import (
    MAX_LATITUDE,
    MAX_LONGITUDE,
    MIN_LATITUDE,
    MIN_LONGITUDE,
    BoundingBox,
    Point,
)

# ------------------------------------------------------------
# Constants
# ------------------------------------------------------------

GRID_SIZE = 4
ALPHABET = "0123456789abcdef"

# The maximum *practical* cell resolution.
MAX_RESOLUTION = 13

# Bounding box searches never materialize more candidate cells than this.
MAX_FEASIBLE_COVER_CELLS = 300

Direction = Tuple[int, int]

NORTHWEST: Direction = (-1, 1)
NORTH: Direction = (0, 1)
NORTHEAST: Direction = (1, 1)
EAST: Direction = (1, 0)
SOUTHEAST: Direction = (1, -1)
SOUTH: Direction = (0, -1)
SOUTHWEST: Direction = (-1, -1)
WEST: Direction = (-1, 0)

# Order of :func:`all_adjacents`.
ALL_DIRECTIONS: Tuple[Direction, ...] = (
    NORTHWEST,
    NORTH,
    NORTHEAST,
    EAST,
    SOUTHEAST,
    SOUTH,
    SOUTHWEST,
    WEST,
)


# ------------------------------------------------------------
# Alphabet codec (4x4 grid position <-> hex character)
# ------------------------------------------------------------

def subdiv_char(x: int, y: int) -> str:
    """Return the alphabet character at grid position ``(x, y)``.

    The index interleaves the bits of the two coordinates: bit 0 is the low
    bit of *x*, bit 1 the low bit of *y*, bit 2 the high bit of *x* and bit 3
    the high bit of *y*.  Only valid for a grid size of 4.
    """
    return ALPHABET[
        ((y & 2) << 2)
        | ((x & 2) << 1)
        | ((y & 1) << 1)
        | (x & 1)
    ]


def subdiv_xy(char: str) -> Tuple[int, int]:
    """Return the grid position ``(x, y)`` of an alphabet character.

    Inverse of :func:`subdiv_char`.

    Raises:
        ValueError: If *char* is not a hex digit.
    """
    i = ALPHABET.find(char.lower())
    if i < 0 or len(char) != 1:
        raise ValueError(f"invalid geocell character: {char!r}")
    return (((i & 4) >> 1) | (i & 1), ((i & 8) >> 2) | ((i & 2) >> 1))


# ------------------------------------------------------------
# Point <-> cell
# ------------------------------------------------------------

def compute(point: Point, resolution: int = MAX_RESOLUTION) -> str:
    """Compute the cell of the given resolution that contains *point*.

    This is a 16-tree lookup to an arbitrary depth.  A resolution of 0 (or
    less) yields the empty string.

    Args:
        point: The point to locate.
        resolution: Length of the returned cell.

    Returns:
        Lowercase cell string of length *resolution*.
    """
    north, south = MAX_LATITUDE, MIN_LATITUDE
    east, west = MAX_LONGITUDE, MIN_LONGITUDE

    chars = []
    while len(chars) < resolution:
        subcell_lon_span = (east - west) / GRID_SIZE
        subcell_lat_span = (north - south) / GRID_SIZE

        # clamp: a point on the upper seam belongs to the last row/column
        x = min(int(GRID_SIZE * (point.lon - west) / (east - west)), GRID_SIZE - 1)
        y = min(int(GRID_SIZE * (point.lat - south) / (north - south)), GRID_SIZE - 1)

        chars.append(subdiv_char(x, y))

        south += subcell_lat_span * y
        north = south + subcell_lat_span
        west += subcell_lon_span * x
        east = west + subcell_lon_span

    return "".join(chars)


def compute_box(cell: str) -> BoundingBox:
    """Compute the rectangular boundaries of *cell*.

    The empty string decodes to the global rectangle.

    Raises:
        ValueError: If *cell* contains a character outside the alphabet.
    """
    north, south = MAX_LATITUDE, MIN_LATITUDE
    east, west = MAX_LONGITUDE, MIN_LONGITUDE

    for char in cell:
        subcell_lon_span = (east - west) / GRID_SIZE
        subcell_lat_span = (north - south) / GRID_SIZE

        x, y = subdiv_xy(char)

        south += subcell_lat_span * y
        north = south + subcell_lat_span
        west += subcell_lon_span * x
        east = west + subcell_lon_span

    return BoundingBox(north=north, east=east, south=south, west=west)


def generate_geocells(point: Point) -> List[str]:
    """Return the cells containing *point* at every resolution 1..MAX_RESOLUTION.

    This is the series an indexer stores per record so that equality lookups
    at any resolution can answer membership.
    """
    cell = compute(point, MAX_RESOLUTION)
    return [cell[:resolution] for resolution in range(1, MAX_RESOLUTION + 1)]


def is_valid(cell: Optional[str]) -> bool:
    """Return True if *cell* is a non-empty string over the geocell alphabet."""
    if not cell:
        return False
    return all(c in ALPHABET for c in cell.lower())


def contains_point(cell: str, point: Point) -> bool:
    """Return True if *point* lies inside *cell*."""
    return compute(point, len(cell)) == cell.lower()


# ------------------------------------------------------------
# Neighbors
# ------------------------------------------------------------

def adjacent(cell: Optional[str], direction: Direction) -> Optional[str]:
    """Return the cell next to *cell* in the given direction.

    Args:
        cell: The cell whose neighbor is wanted.  ``None`` is passed through.
        direction: ``(dx, dy)`` with values in ``{-1, 0, 1}``; -1 is west
            for *dx* and south for *dy*.  See :data:`NORTH`, :data:`EAST` etc.

    Returns:
        The neighboring cell of the same resolution, or ``None`` if it would
        lie beyond a pole.  Stepping across the antimeridian wraps around.
    """
    if cell is None:
        return None

    dx, dy = direction
    chars = list(cell.lower())
    i = len(chars) - 1

    while i >= 0 and (dx != 0 or dy != 0):
        x, y = subdiv_xy(chars[i])

        # horizontal
        if dx == -1:
            if x == 0:
                x = GRID_SIZE - 1  # borrow from the parent on the left
            else:
                x -= 1
                dx = 0
        elif dx == 1:
            if x == GRID_SIZE - 1:
                x = 0
            else:
                x += 1
                dx = 0

        # vertical
        if dy == 1:
            if y == GRID_SIZE - 1:
                y = 0
            else:
                y += 1
                dy = 0
        elif dy == -1:
            if y == 0:
                y = GRID_SIZE - 1
            else:
                y -= 1
                dy = 0

        chars[i] = subdiv_char(x, y)
        i -= 1

    # a pending vertical step would cross a pole
    if dy != 0:
        return None

    return "".join(chars)


def all_adjacents(cell: str) -> List[Optional[str]]:
    """Return the 8 neighbors of *cell* in the order NW, N, NE, E, SE, S, SW, W.

    Entries blocked by a pole are ``None``.
    """
    return [adjacent(cell, d) for d in ALL_DIRECTIONS]


def collinear(cell1: str, cell2: str, column_test: bool) -> bool:
    """Return True if the two cells share a row or a column at every level.

    Args:
        cell1: First cell.
        cell2: Second cell.
        column_test: ``False`` tests for the same row (equal *y*), ``True``
            for the same column (equal *x*).
    """
    for c1, c2 in zip(cell1, cell2):
        x1, y1 = subdiv_xy(c1)
        x2, y2 = subdiv_xy(c2)
        if column_test:
            if x1 != x2:
                return False
        elif y1 != y2:
            return False
    return True


# ------------------------------------------------------------
# Interpolation
# ------------------------------------------------------------

def interpolate(cell_ne: str, cell_sw: str) -> List[str]:
    """Return the grid of cells between a north-east and a south-west cell.

    Both cells must have the same resolution and *cell_ne* must actually lie
    north-east of *cell_sw*.  The result includes both corners and is ordered
    row by row from south-west to north-east.
    """
    cell_ne = cell_ne.lower()
    first_row = [cell_sw.lower()]

    # walk east until we reach the column of the NE cell
    while not collinear(first_row[-1], cell_ne, True):
        cell = adjacent(first_row[-1], EAST)
        if cell is None:
            break
        first_row.append(cell)

    rows = [first_row]
    while rows[-1][-1] != cell_ne:
        row = [adjacent(cell, NORTH) for cell in rows[-1]]
        if row[0] is None:
            break
        rows.append(row)

    return [cell for row in rows for cell in row]


def interpolation_count(cell_ne: str, cell_sw: str) -> int:
    """Return the number of cells :func:`interpolate` would produce.

    Computed from the cell geometry without walking the grid.  The spans are
    taken from the south-west cell.
    """
    bbox_ne = compute_box(cell_ne)
    bbox_sw = compute_box(cell_sw)

    cell_lat_span = bbox_sw.north - bbox_sw.south
    cell_lon_span = bbox_sw.east - bbox_sw.west

    # both boxes sit on the same grid, so the ratios are whole numbers up to
    # rounding noise from the repeated subdivision
    num_cols = int(round((bbox_ne.east - bbox_sw.west) / cell_lon_span))
    num_rows = int(round((bbox_ne.north - bbox_sw.south) / cell_lat_span))

    return num_cols * num_rows
