from __future__ import annotations

from fastapi import Request

from geotag.services.describe import DescriptionCache


def get_description_cache(request: Request) -> DescriptionCache:
    # One cache per application instance; created in create_app().
    return request.app.state.description_cache
