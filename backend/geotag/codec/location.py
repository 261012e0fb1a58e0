from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from decimal import Decimal
from numbers import Real

from geotag.codec.alphabet import CODE_LENGTH, PADDING, PRECISION_KM, PREFIX
from geotag.codec.errors import DecodeFailure, InvalidCoordinate, InvalidToken
from geotag.codec.grid import GridArea, GridCodec, default_grid
from geotag.codec.tokens import body_of, is_valid


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LatLng:
    lat: float
    lng: float


@dataclass(frozen=True)
class LocationArea:
    south_west: LatLng
    north_east: LatLng
    center: LatLng


@dataclass(frozen=True)
class PrivacyLocation:
    token: str
    full_code: str
    center_lat: float
    center_lng: float
    label: str | None = None
    precision_km: float = PRECISION_KM


def _check_coordinate(value: object, *, name: str, limit: float) -> float:
    # bool is a Real subclass; reject it explicitly.
    if isinstance(value, bool) or not isinstance(value, (Real, Decimal)):
        raise InvalidCoordinate(f"{name} must be a number, got {value!r}")
    try:
        value = float(value)
    except (OverflowError, ValueError) as e:
        raise InvalidCoordinate(f"{name} is not representable as a float: {value!r}") from e
    if not math.isfinite(value) or not -limit <= value <= limit:
        raise InvalidCoordinate(f"{name} out of range [-{limit:g}, {limit:g}]: {value!r}")
    return value


def _decode_body(body: str, grid: GridCodec) -> GridArea:
    padded = body.upper() + PADDING
    try:
        return grid.decode(padded)
    except ValueError as e:
        raise DecodeFailure(f"Grid codec rejected {padded!r}") from e


def _area_from_grid(cell: GridArea) -> LocationArea:
    return LocationArea(
        south_west=LatLng(cell.south, cell.west),
        north_east=LatLng(cell.north, cell.east),
        center=LatLng((cell.south + cell.north) / 2.0, (cell.west + cell.east) / 2.0),
    )


def significant_symbols(code: str) -> str:
    """Strip the separator and padding a grid codec puts into a full code."""

    return "".join(ch for ch in code if ch not in PADDING)


def encode(
    lat: float,
    lng: float,
    label: str | None = None,
    *,
    grid: GridCodec | None = None,
) -> PrivacyLocation:
    """Turn raw coordinates into a shareable privacy location.

    Only the first 6 symbols of the full code survive into the token. The
    reported center is the center of that truncated cell, so it is offset from
    the input by up to half a cell.

    Coordinates may be any real number or ``Decimal``; booleans are rejected.
    """

    lat = _check_coordinate(lat, name="latitude", limit=90.0)
    lng = _check_coordinate(lng, name="longitude", limit=180.0)
    grid = grid or default_grid()

    full_code = grid.encode(lat, lng)
    body = significant_symbols(full_code)[:CODE_LENGTH]
    if len(body) != CODE_LENGTH:
        raise DecodeFailure(f"Grid codec returned a short code: {full_code!r}")

    area = _area_from_grid(_decode_body(body, grid))
    return PrivacyLocation(
        token=f"{PREFIX}{body.lower()}",
        full_code=full_code,
        center_lat=area.center.lat,
        center_lng=area.center.lng,
        label=label,
    )


def parse(token: str, *, grid: GridCodec | None = None) -> LocationArea:
    """Recover the bounding rectangle a token stands for.

    Case-insensitive: every case variant of a token decodes to the same area.
    """

    if not is_valid(token):
        raise InvalidToken(f"Invalid geo hashtag: {token!r}")
    return _area_from_grid(_decode_body(body_of(token), grid or default_grid()))


def contains(area: LocationArea, lat: float, lng: float) -> bool:
    # Inclusive on all edges; no antimeridian wraparound.
    return (
        area.south_west.lat <= lat <= area.north_east.lat
        and area.south_west.lng <= lng <= area.north_east.lng
    )


def is_location_in_area(
    lat: float, lng: float, token: str, *, grid: GridCodec | None = None
) -> bool:
    try:
        area = parse(token, grid=grid)
    except (InvalidToken, DecodeFailure):
        logger.debug("Membership test against unparseable token %r", token)
        return False
    return contains(area, lat, lng)


def render(location: PrivacyLocation) -> str:
    """Display form used in issues and posts, e.g. `#geo9c3xgv (Soho) ~1km area`."""

    parts = [location.token]
    if location.label:
        parts.append(f"({location.label})")
    parts.append(f"~{location.precision_km:g}km area")
    return " ".join(parts)


def describe_area(token: str) -> str:
    # Static text; keeps the caller's spelling of the token.
    if not is_valid(token):
        return "Invalid location"
    return f"Approximate area: ~{PRECISION_KM:g}km radius ({token})"
