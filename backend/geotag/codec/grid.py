"""Grid-reference primitive the codec is built on.

The codec never does grid arithmetic itself; it only truncates, pads and
re-decodes codes produced by a `GridCodec`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from openlocationcode import openlocationcode as olc


# Full plus code: 8 digits, separator, 2 refinement digits (~14m).
DEFAULT_CODE_LENGTH = 10


@dataclass(frozen=True)
class GridArea:
    south: float
    west: float
    north: float
    east: float


class GridCodec(Protocol):
    def encode(self, latitude: float, longitude: float) -> str: ...

    def decode(self, code: str) -> GridArea: ...


class OpenLocationCodeGrid:
    """`GridCodec` backed by the reference Open Location Code implementation."""

    def __init__(self, *, code_length: int = DEFAULT_CODE_LENGTH) -> None:
        self._code_length = code_length

    def encode(self, latitude: float, longitude: float) -> str:
        return olc.encode(latitude, longitude, self._code_length)

    def decode(self, code: str) -> GridArea:
        # Raises ValueError for anything that is not a full code.
        area = olc.decode(code)
        return GridArea(
            south=area.latitudeLo,
            west=area.longitudeLo,
            north=area.latitudeHi,
            east=area.longitudeHi,
        )


_default_grid = OpenLocationCodeGrid()


def default_grid() -> GridCodec:
    return _default_grid
