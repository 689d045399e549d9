from __future__ import annotations
import math
import re
from typing import Any, Optional

EARTH_RADIUS_M = 6371000.0

_WS_RE = re.compile(r"\s+")
# 층/호 suffixes; the range form must run before the single-floor form
_FLOOR_RANGE_RE = re.compile(r"\s+[0-9]+\s*[~\-]\s*[0-9]+\s*층\b")
_FLOOR_RE = re.compile(r"\s+[0-9]+\s*층\b")
_UNIT_RE = re.compile(r"\s+[0-9]+\s*호\b")
_COMPARE_DROP_RE = re.compile(r"[^0-9a-z가-힣]")
_UNICODE_ESCAPE_RE = re.compile(r"\\u([0-9a-fA-F]{4})")


def normalize_space(value: Any) -> str:
    if value is None:
        return ""
    return _WS_RE.sub(" ", str(value)).strip()

def strip_address_detail(address: Any) -> str:
    """Drop trailing floor/unit clauses such as '1~3층', '2층', '101호'."""
    out = normalize_space(address)
    out = _FLOOR_RANGE_RE.sub("", out)
    out = _FLOOR_RE.sub("", out)
    out = _UNIT_RE.sub("", out)
    return normalize_space(out)

def normalize_compare_text(value: Any) -> str:
    """Lowercased ASCII alphanumerics and Hangul syllables only; for scoring, never display."""
    return _COMPARE_DROP_RE.sub("", normalize_space(value).lower())

def to_number(value: Any) -> Optional[float]:
    """Lenient numeric parse; blank, non-numeric and non-finite values map to None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        if not value.strip():
            return None
        try:
            n = float(value.strip())
        except ValueError:
            return None
    elif isinstance(value, (int, float)):
        n = float(value)
    else:
        return None
    return n if math.isfinite(n) else None

def _is_finite_number(value: Any) -> bool:
    return (
        isinstance(value, (int, float))
        and not isinstance(value, bool)
        and math.isfinite(value)
    )

def haversine_m(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    dphi = math.radians(lat2 - lat1)
    dl = math.radians(lon2 - lon1)
    a = math.sin(dphi/2)**2 + math.cos(phi1)*math.cos(phi2)*math.sin(dl/2)**2
    a = min(1.0, max(0.0, a))
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1-a))
    return EARTH_RADIUS_M * c

def distance_m(lat1: Any, lng1: Any, lat2: Any, lng2: Any) -> Optional[int]:
    """Great-circle distance in whole meters, or None when any coordinate is unusable."""
    if not all(_is_finite_number(v) for v in (lat1, lng1, lat2, lng2)):
        return None
    # half-up rounding; the value is never negative
    return int(math.floor(haversine_m(lat1, lng1, lat2, lng2) + 0.5))

def unescape_json_text(text: Optional[str]) -> str:
    """Decode \\uXXXX, \\/, \\" and \\\\ escapes left in JSON fragments scraped from HTML."""
    if not text:
        return ""
    out = _UNICODE_ESCAPE_RE.sub(lambda m: chr(int(m.group(1), 16)), text)
    out = out.replace("\\/", "/")
    out = out.replace('\\"', '"')
    out = out.replace("\\\\", "\\")
    return out.strip()
