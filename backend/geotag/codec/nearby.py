"""Ways to widen a token into a "search nearby" set.

`neighbors` is lexical: it swaps the final symbol for alphabet-adjacent ones
and never decodes anything, so its results are NOT guaranteed to be
geographically adjacent to the origin cell. `adjacent_tokens` is the
geographic variant and costs a decode plus eight encodes.
"""

from __future__ import annotations

from geotag.codec.alphabet import ALPHABET, index_of
from geotag.codec.grid import GridCodec
from geotag.codec.location import encode, parse
from geotag.codec.tokens import normalize


NEIGHBOR_COUNT = 8
MAX_NEIGHBOR_COUNT = len(ALPHABET) - 1

# (lat cells, lng cells): N, S, E, W, NE, NW, SE, SW
_COMPASS = (
    (1, 0),
    (-1, 0),
    (0, 1),
    (0, -1),
    (1, 1),
    (1, -1),
    (-1, 1),
    (-1, -1),
)


def neighbors(token: str, *, count: int = NEIGHBOR_COUNT) -> list[str]:
    """Return the token followed by `count` final-symbol variants.

    Variants are ordered by distance in the alphabet (+1, -1, +2, -2, ...),
    wrapping around its ends.
    """

    if not 0 <= count <= MAX_NEIGHBOR_COUNT:
        raise ValueError(f"count must be within [0, {MAX_NEIGHBOR_COUNT}]")

    origin = normalize(token)
    stem = origin[:-1]
    start = index_of(origin[-1])

    out = [origin]
    seen = {origin}
    step = 1
    while len(out) <= count:
        for sign in (1, -1):
            candidate = stem + ALPHABET[(start + sign * step) % len(ALPHABET)].lower()
            if candidate not in seen and len(out) <= count:
                seen.add(candidate)
                out.append(candidate)
        step += 1
    return out


def adjacent_tokens(token: str, *, grid: GridCodec | None = None) -> list[str]:
    """Return the token followed by its distinct geographic neighbours.

    Steps one cell in each compass direction from the cell center. Steps past
    a pole are dropped; longitude wraps at the antimeridian.
    """

    origin = normalize(token)
    area = parse(origin, grid=grid)
    height = area.north_east.lat - area.south_west.lat
    width = area.north_east.lng - area.south_west.lng

    out = [origin]
    for d_lat, d_lng in _COMPASS:
        lat = area.center.lat + d_lat * height
        if not -90.0 <= lat <= 90.0:
            continue
        lng = (area.center.lng + d_lng * width + 180.0) % 360.0 - 180.0
        candidate = encode(lat, lng, grid=grid).token
        if candidate not in out:
            out.append(candidate)
    return out
