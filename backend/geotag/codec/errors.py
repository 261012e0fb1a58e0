from __future__ import annotations


class GeoTagError(ValueError):
    """Base class for codec failures; `code` maps onto the API error envelope."""

    code = "GEO_ERROR"


class InvalidCoordinate(GeoTagError):
    code = "GEO_INVALID_COORDINATE"


class InvalidToken(GeoTagError):
    code = "GEO_INVALID_TOKEN"


class DecodeFailure(GeoTagError):
    """The grid codec rejected a padded code built from a well-formed token."""

    code = "GEO_DECODE_FAILURE"
