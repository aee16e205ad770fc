"""Text helpers for matching provider results and decoding payloads."""

import base64
import html
import re
from typing import Iterable

_WHITESPACE_RE = re.compile(r"\s+")

# Paired punctuation that differs between catalogs (half/full width)
_PUNCT_FOLD = str.maketrans({
    "(": "-",
    ")": "-",
    "（": "-",
    "）": "-",
    "：": "-",
})


def normalize_title(text: str) -> str:
    """Normalize a track/artist/album name for equality checks.

    Whitespace runs collapse to one space, half- and full-width parentheses
    and the full-width colon fold to ``-``, and the result is lowercased.
    """
    collapsed = _WHITESPACE_RE.sub(" ", text)
    return collapsed.translate(_PUNCT_FOLD).lower()


def names_match(left: str, right: str) -> bool:
    return normalize_title(left) == normalize_title(right)


def album_matches(wanted: str, found: str) -> bool:
    """Albums match when equal or when either contains the other."""
    wanted_norm = normalize_title(wanted)
    found_norm = normalize_title(found)
    return (
        wanted_norm == found_norm
        or found_norm in wanted_norm
        or wanted_norm in found_norm
    )


def any_name_matches(wanted: str, candidates: Iterable[str]) -> bool:
    return any(names_match(wanted, c) for c in candidates)


def collapse_spaces(text: str) -> str:
    return re.sub(r" {2,}", " ", text)


def fingerprint(name: str, artist: str, country_code: str = "cn") -> str:
    """Cache key for a (track, artist, storefront) lookup."""
    raw_key = f"{name.lower()}_{artist.lower()}_{country_code.lower()}"
    return base64.b64encode(raw_key.encode("utf-8")).decode("ascii")


def decode_xml_entities(text: str) -> str:
    """Decode ``&amp;``, ``&#64;``, ``&#x20ac;`` and friends."""
    return html.unescape(text)


def strip_jsonp(raw_text: str) -> str:
    """Return the JSON body of a ``callback({...})`` response."""
    start = raw_text.find("(")
    end = raw_text.rfind(")")
    if start < 0 or end <= start:
        raise ValueError("Response is not JSONP")
    return raw_text[start + 1:end]
