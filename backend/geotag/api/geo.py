from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from geotag.api.deps import get_description_cache
from geotag.codec import (
    GeoTagError,
    LocationArea,
    adjacent_tokens,
    contains,
    encode,
    extract,
    is_valid,
    neighbors,
    parse,
    render,
)
from geotag.codec.nearby import MAX_NEIGHBOR_COUNT, NEIGHBOR_COUNT
from geotag.core.errors import APIError
from geotag.services.describe import DescriptionCache, describe_location, tooltip_text


router = APIRouter(prefix="/v1/geo", tags=["geo"])


logger = logging.getLogger(__name__)


class EncodeRequest(BaseModel):
    # Range checks happen in the codec so they surface as GEO_INVALID_COORDINATE (not 422).
    latitude: float
    longitude: float
    label: str | None = None


class PrivacyLocationOut(BaseModel):
    token: str
    label: str | None
    full_code: str
    center_lat: float
    center_lng: float
    precision_km: float
    display: str


class LatLngOut(BaseModel):
    lat: float
    lng: float


class AreaResponse(BaseModel):
    token: str
    south_west: LatLngOut
    north_east: LatLngOut
    center: LatLngOut


class ValidateResponse(BaseModel):
    token: str
    valid: bool


class ExtractRequest(BaseModel):
    text: str


class ExtractResponse(BaseModel):
    tokens: list[str]


class NeighborsResponse(BaseModel):
    token: str
    neighbors: list[str]


class AdjacentResponse(BaseModel):
    token: str
    adjacent: list[str]


class ContainsResponse(BaseModel):
    token: str
    contains: bool


class DescriptionOut(BaseModel):
    formatted: str
    neighborhood: str | None = None
    city: str | None = None
    state: str | None = None
    country: str | None = None


class DescribeResponse(BaseModel):
    token: str
    description: DescriptionOut | None
    degraded: bool
    tooltip: str


def _parse_or_raise(token: str) -> LocationArea:
    try:
        return parse(token)
    except GeoTagError as e:
        raise APIError.from_codec(e) from e


def _point(lat: float, lng: float) -> LatLngOut:
    return LatLngOut(lat=lat, lng=lng)


@router.post("/encode", response_model=PrivacyLocationOut)
async def encode_location(payload: EncodeRequest) -> PrivacyLocationOut:
    try:
        location = encode(payload.latitude, payload.longitude, payload.label)
    except GeoTagError as e:
        raise APIError.from_codec(e) from e

    return PrivacyLocationOut(
        token=location.token,
        label=location.label,
        full_code=location.full_code,
        center_lat=location.center_lat,
        center_lng=location.center_lng,
        precision_km=location.precision_km,
        display=render(location),
    )


@router.get("/validate", response_model=ValidateResponse)
async def validate_token(token: str = Query(...)) -> ValidateResponse:
    return ValidateResponse(token=token, valid=is_valid(token))


@router.get("/parse", response_model=AreaResponse)
async def parse_token(token: str = Query(...)) -> AreaResponse:
    area = _parse_or_raise(token)
    return AreaResponse(
        token=token.lower(),
        south_west=_point(area.south_west.lat, area.south_west.lng),
        north_east=_point(area.north_east.lat, area.north_east.lng),
        center=_point(area.center.lat, area.center.lng),
    )


@router.post("/extract", response_model=ExtractResponse)
async def extract_tokens(payload: ExtractRequest) -> ExtractResponse:
    return ExtractResponse(tokens=extract(payload.text))


@router.get("/neighbors", response_model=NeighborsResponse)
async def lexical_neighbors(
    token: str = Query(...),
    count: int = Query(NEIGHBOR_COUNT, ge=0, le=MAX_NEIGHBOR_COUNT),
) -> NeighborsResponse:
    try:
        items = neighbors(token, count=count)
    except GeoTagError as e:
        raise APIError.from_codec(e) from e
    return NeighborsResponse(token=items[0], neighbors=items[1:])


@router.get("/adjacent", response_model=AdjacentResponse)
async def geographic_neighbors(token: str = Query(...)) -> AdjacentResponse:
    try:
        items = adjacent_tokens(token)
    except GeoTagError as e:
        raise APIError.from_codec(e) from e
    return AdjacentResponse(token=items[0], adjacent=items[1:])


@router.get("/contains", response_model=ContainsResponse)
async def area_contains(
    token: str = Query(...),
    latitude: float = Query(...),
    longitude: float = Query(...),
) -> ContainsResponse:
    area = _parse_or_raise(token)
    return ContainsResponse(token=token.lower(), contains=contains(area, latitude, longitude))


@router.get("/describe", response_model=DescribeResponse)
async def describe_token(
    token: str = Query(...),
    cache: DescriptionCache = Depends(get_description_cache),
) -> DescribeResponse:
    if not is_valid(token):
        raise APIError(
            code="GEO_INVALID_TOKEN",
            message=f"Invalid geo hashtag: {token!r}",
            status_code=400,
        )

    description, degraded = await describe_location(token, cache=cache)
    if degraded:
        logger.info("Serving %s without a description (provider degraded)", token)

    return DescribeResponse(
        token=token.lower(),
        description=(
            DescriptionOut(
                formatted=description.formatted,
                neighborhood=description.neighborhood,
                city=description.city,
                state=description.state,
                country=description.country,
            )
            if description is not None
            else None
        ),
        degraded=degraded,
        tooltip=tooltip_text(token, description),
    )
