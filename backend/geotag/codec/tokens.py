from __future__ import annotations

from typing import Any

from geotag.codec.alphabet import EXTRACT_RE, PREFIX, TOKEN_RE
from geotag.codec.errors import InvalidToken


def is_valid(token: Any) -> bool:
    """Return True when `token` is `#geo` + 6 alphabet symbols, in any case.

    Total: anything malformed (including non-strings) is simply invalid.
    """

    if not isinstance(token, str):
        return False
    return TOKEN_RE.fullmatch(token) is not None


def normalize(token: str) -> str:
    if not is_valid(token):
        raise InvalidToken(f"Invalid geo hashtag: {token!r}")
    return token.lower()


def body_of(token: str) -> str:
    """Grid-ready body (uppercase, prefix stripped) of a valid token."""

    return normalize(token)[len(PREFIX) :].upper()


def extract(text: Any) -> list[str]:
    """Return every token embedded in `text`, lowercased, in order of appearance.

    Duplicates are kept. A token directly preceded by another `#` is skipped.
    A longer alphabet run still yields its first 6 symbols.
    """

    if not isinstance(text, str):
        return []
    return [m.group(0).lower() for m in EXTRACT_RE.finditer(text)]
