"""Token alphabet and grammar.

The body alphabet is the Open Location Code digit set: no vowels, no 0/1 and
no visually ambiguous letters, so a token cannot spell words or be misread.
"""

from __future__ import annotations

import re

ALPHABET = "23456789CFGHJMPQRVWX"

PREFIX = "#geo"
CODE_LENGTH = 6

# Appended to a truncated body so the grid codec accepts it as a full code.
PADDING = "00+"

# Nominal side of a 6-symbol cell, a property of the scheme.
PRECISION_KM = 1.0

_BODY_CLASS = f"[{ALPHABET}]"

TOKEN_RE = re.compile(
    rf"{PREFIX}{_BODY_CLASS}{{{CODE_LENGTH}}}", re.IGNORECASE | re.ASCII
)

# Not anchored at the end: a longer alphabet run still yields its 6-symbol prefix.
EXTRACT_RE = re.compile(
    rf"(?<!#){PREFIX}{_BODY_CLASS}{{{CODE_LENGTH}}}", re.IGNORECASE | re.ASCII
)


def index_of(symbol: str) -> int:
    return ALPHABET.index(symbol.upper())
