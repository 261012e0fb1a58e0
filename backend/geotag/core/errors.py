from __future__ import annotations

import dataclasses
from typing import Any

from geotag.codec.errors import DecodeFailure, GeoTagError


@dataclasses.dataclass(slots=True)
class APIError(Exception):
    """Business error that must map to the standard error envelope."""

    code: str
    message: str
    status_code: int = 400
    details: Any | None = None

    @classmethod
    def from_codec(cls, exc: GeoTagError) -> APIError:
        # A well-formed token the grid cannot place is unprocessable, not malformed.
        status_code = 422 if isinstance(exc, DecodeFailure) else 400
        return cls(code=exc.code, message=str(exc), status_code=status_code)


def make_error_payload(
    *, code: str, message: str, trace_id: str | None, details: Any | None
) -> dict[str, Any]:
    return {
        "code": code,
        "message": message,
        "details": details,
        "trace_id": trace_id,
    }
