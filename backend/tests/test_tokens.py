from __future__ import annotations

import random
import time

import pytest
from hypothesis import given
from hypothesis import strategies as st

from geotag.codec import ALPHABET, InvalidToken, extract, is_valid, normalize


_BODY = st.text(alphabet=ALPHABET + ALPHABET.lower(), min_size=6, max_size=6)
# ASCII letters/digits the alphabet excludes in either case.
_EXCLUDED = [
    c
    for c in "0123456789abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ"
    if c.upper() not in ALPHABET
]


@pytest.mark.parametrize(
    "token",
    ["#geo9c3xgp", "#GEO9C3XGP", "#Geo9C3xGp", "#gEO9c3XGP", "#geo222222", "#geoxxxxxx"],
)
def test_is_valid_accepts_any_case(token: str) -> None:
    assert is_valid(token) is True


@pytest.mark.parametrize(
    "token",
    [
        "",
        "#geo",
        "geo9c3xgp",
        "#ge9c3xgp",
        "#geo9c3xg",
        "#geo9c3xgp2",
        "#geo9c3xg1",
        "#geo9c3xga",
        "#geo9c3xg ",
        " #geo9c3xgp",
        "#geo9c3xgp\n",
        "##geo9c3xgp",
        "#géo9c3xgp",
        "#geo9c3xgр",
    ],
)
def test_is_valid_rejects_malformed(token: str) -> None:
    assert is_valid(token) is False


@pytest.mark.parametrize("value", [None, 123, b"#geo9c3xgp", ["#geo9c3xgp"]])
def test_is_valid_is_total_for_non_strings(value) -> None:
    assert is_valid(value) is False


@given(body=_BODY)
def test_is_valid_ignores_case(body: str) -> None:
    token = "#geo" + body
    assert is_valid(token)
    assert is_valid(token.upper()) == is_valid(token.lower()) == is_valid(token.swapcase())


@given(
    body=_BODY,
    position=st.integers(min_value=0, max_value=5),
    bad=st.sampled_from(_EXCLUDED),
)
def test_excluded_symbol_invalidates_every_case_variant(
    body: str, position: int, bad: str
) -> None:
    token = "#geo" + body[:position] + bad + body[position + 1 :]
    for variant in (token, token.upper(), token.lower(), token.swapcase()):
        assert is_valid(variant) is False


def test_normalize_lowercases_valid_tokens() -> None:
    assert normalize("#GEO9C3XGP") == "#geo9c3xgp"
    with pytest.raises(InvalidToken):
        normalize("#geo9c3xg1")


def test_extract_social_post_scenario() -> None:
    text = "Spotted a pothole at #GEO9C3XGP this morning! #infrastructure"
    assert extract(text) == ["#geo9c3xgp"]


def test_extract_keeps_order_and_duplicates() -> None:
    text = (
        "Multiple issues today: #geo9c3xgp has flooding, #GEO456CFG needs "
        "streetlight repair, and #Geo789hjm has graffiti. Again #GEO9C3XGP!"
    )
    assert extract(text) == ["#geo9c3xgp", "#geo456cfg", "#geo789hjm", "#geo9c3xgp"]


@pytest.mark.parametrize(
    "text",
    [
        "\U0001f6a8 Emergency at #GEO9C3XGP! \U0001f6a8",
        "Café near #geo9c3xgp serves great coffee ☕",
        "¿Problemas en #GEO9c3xGp? ¡Reporta aquí!",
        "בעיה ב-#geo9C3XGP היום",
        "路面坑洼#Geo9c3xgp附近",
    ],
)
def test_extract_ignores_surrounding_unicode(text: str) -> None:
    assert extract(text) == ["#geo9c3xgp"]


def test_extract_skips_doubled_hash() -> None:
    assert extract("broken markup ##geo9c3xgp here") == []
    assert extract("ok #geo9c3xgp, broken ##geo456cfg") == ["#geo9c3xgp"]


@pytest.mark.parametrize(
    "text", ["#geo9c3xgph", "#GEO9c3xgpHJMPQ", "see #geo9c3xgp2 there"]
)
def test_extract_returns_prefix_of_longer_alphabet_run(text: str) -> None:
    # Prefix matching is kept even though is_valid rejects the whole run.
    assert extract(text) == ["#geo9c3xgp"]


@pytest.mark.parametrize(
    "text",
    ["", "no tags here", "#geo9c3xg", "#geo9c3xg1", "#geo 9c3xgp", "#infrastructure #roads"],
)
def test_extract_returns_empty_when_nothing_matches(text: str) -> None:
    assert extract(text) == []


@pytest.mark.parametrize("value", [None, 42, b"#geo9c3xgp"])
def test_extract_is_total_for_non_strings(value) -> None:
    assert extract(value) == []


@given(st.lists(st.tuples(st.text(max_size=20), _BODY), max_size=10))
def test_extract_only_returns_lowercase_tokens(parts: list[tuple[str, str]]) -> None:
    text = "".join(f"{filler} #GeO{body} " for filler, body in parts)
    found = extract(text)
    assert all(tok == tok.lower() for tok in found)
    assert all(is_valid(tok) for tok in found)


def test_extract_thousand_tokens_under_100ms() -> None:
    rng = random.Random(1234)
    tokens = []
    chunks = []
    for _ in range(1000):
        body = "".join(rng.choice(ALPHABET) for _ in range(6))
        token = "".join(
            c.upper() if rng.random() < 0.5 else c.lower() for c in "#geo" + body
        )
        tokens.append(token.lower())
        chunks.append(f"reported near the old bridge é\U0001f6a7 {token} today.")
    text = " ".join(chunks)

    start = time.perf_counter()
    found = extract(text)
    elapsed = time.perf_counter() - start

    assert found == tokens
    assert elapsed < 0.1
