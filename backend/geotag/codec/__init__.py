"""Privacy location codec.

Pure, synchronous and stateless: safe to call from any thread.
"""

from __future__ import annotations

from geotag.codec.alphabet import ALPHABET, CODE_LENGTH, PRECISION_KM, PREFIX
from geotag.codec.errors import DecodeFailure, GeoTagError, InvalidCoordinate, InvalidToken
from geotag.codec.grid import GridArea, GridCodec, OpenLocationCodeGrid
from geotag.codec.location import (
    LatLng,
    LocationArea,
    PrivacyLocation,
    contains,
    describe_area,
    encode,
    is_location_in_area,
    parse,
    render,
)
from geotag.codec.nearby import adjacent_tokens, neighbors
from geotag.codec.tokens import extract, is_valid, normalize

__all__ = [
    "ALPHABET",
    "CODE_LENGTH",
    "DecodeFailure",
    "GeoTagError",
    "GridArea",
    "GridCodec",
    "InvalidCoordinate",
    "InvalidToken",
    "LatLng",
    "LocationArea",
    "OpenLocationCodeGrid",
    "PRECISION_KM",
    "PREFIX",
    "PrivacyLocation",
    "adjacent_tokens",
    "contains",
    "describe_area",
    "encode",
    "extract",
    "is_location_in_area",
    "is_valid",
    "neighbors",
    "normalize",
    "parse",
    "render",
]
