"""
Place identifiers and coordinates carried by Naver / Kakao map URLs.

All extractors are pure and never raise: a URL that cannot be parsed simply
contributes no metadata.
"""
from __future__ import annotations

import re
from typing import Dict, Optional
from urllib.parse import SplitResult, parse_qsl, urlsplit

from .models import PlaceInfo
from .utils import normalize_space, to_number

NAVER_ENTRY_RE = re.compile(r"/entry/place/([0-9]+)", re.I)
NAVER_MOBILE_RE = re.compile(r"m\.place\.naver\.com/place/([0-9]+)", re.I)
NAVER_SHORT_LINK_RE = re.compile(r"naver\.me/", re.I)
KAKAO_PLACE_RE = re.compile(r"place\.map\.kakao\.com/([0-9]+)", re.I)
_DIGITS_RE = re.compile(r"[0-9]+")


def try_parse_url(value: Optional[str]) -> Optional[SplitResult]:
    if not value:
        return None
    try:
        parsed = urlsplit(str(value).strip())
        # touching .port validates the netloc
        parsed.port
    except ValueError:
        return None
    if not parsed.scheme or not parsed.netloc:
        return None
    return parsed

def query_params(parsed: SplitResult) -> Dict[str, str]:
    """First value per key, like URLSearchParams.get."""
    out: Dict[str, str] = {}
    for key, value in parse_qsl(parsed.query, keep_blank_values=True):
        out.setdefault(key, value)
    return out

def _numeric_param(params: Dict[str, str], key: str) -> str:
    value = params.get(key) or ""
    return value if _DIGITS_RE.fullmatch(value) else ""

def is_naver_short_link(url: Optional[str]) -> bool:
    return bool(url) and NAVER_SHORT_LINK_RE.search(url) is not None

def extract_naver_place_id(url: Optional[str]) -> str:
    if not url:
        return ""
    m = NAVER_ENTRY_RE.search(url) or NAVER_MOBILE_RE.search(url)
    if m:
        return m.group(1)
    parsed = try_parse_url(url)
    if not parsed:
        return ""
    return _numeric_param(query_params(parsed), "pinId")

def extract_kakao_place_id(url: Optional[str]) -> str:
    if not url:
        return ""
    m = KAKAO_PLACE_RE.search(url)
    if m:
        return m.group(1)
    parsed = try_parse_url(url)
    if not parsed:
        return ""
    return _numeric_param(query_params(parsed), "itemId")

def naver_url_meta(url: Optional[str]) -> PlaceInfo:
    """Partial PlaceInfo from a Naver map URL (title, lat/lng pair, pinId or path id)."""
    parsed = try_parse_url(url)
    if not parsed:
        return PlaceInfo()
    params = query_params(parsed)

    lat = to_number(params.get("lat"))
    lng = to_number(params.get("lng"))
    if lat is None or lng is None:
        lat = lng = None

    place_id = _numeric_param(params, "pinId") or extract_naver_place_id(url)
    return PlaceInfo(
        id=place_id or None,
        name=normalize_space(params.get("title")),
        lat=lat,
        lng=lng,
    )

def merge_place_info(base: PlaceInfo, *partials: Optional[PlaceInfo]) -> PlaceInfo:
    """Fold partial infos into base; a field, once known, is never overwritten."""
    merged = base
    for part in partials:
        if part is None:
            continue
        merged = PlaceInfo(
            id=merged.id if merged.id else (part.id or None),
            name=merged.name or part.name,
            address=merged.address or part.address,
            lat=merged.lat if merged.lat is not None else part.lat,
            lng=merged.lng if merged.lng is not None else part.lng,
        )
    return merged
