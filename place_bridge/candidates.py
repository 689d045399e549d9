from __future__ import annotations
import json
import logging
import re
from typing import Any, Dict, List, Optional, Set
from urllib.parse import quote

from .errors import SearchFailure
from .models import PlaceInfo
from .transport import HttpClient
from .utils import normalize_space, to_number, unescape_json_text

logger = logging.getLogger(__name__)

NAVER_MAP_REFERER = "https://map.naver.com/"
KAKAO_MAP_REFERER = "https://map.kakao.com/"
NAVER_SEARCH_URL = "https://m.map.naver.com/search2/search.naver?query="
KAKAO_SEARCH_URL = "https://search.map.kakao.com/mapsearch/map.daum?output=json&q="
KAKAO_DETAIL_URL = "https://map.kakao.com/api/place/info?output=json&confirmId="

HTML_ACCEPT = "text/html,application/xhtml+xml,application/xml;q=0.9,image/avif,image/webp,*/*;q=0.8"
JSON_ACCEPT = "application/json,text/plain,*/*"

# Search result objects embedded in the mobile search page
NAVER_RICH_RE = re.compile(
    r'"id":([0-9]+),"name":"([^"]+)","category":"[^"]*","address":"([^"]*)","roadAddress":"([^"]*)"'
    r'[\s\S]*?"latitude":([0-9.\-]+),"longitude":([0-9.\-]+)'
)
NAVER_PERMALINK_RE = re.compile(r"https://m\.place\.naver\.com/place/([0-9]+)/home")


def encode_query(value: str) -> str:
    """Percent-encode with the encodeURIComponent safe set."""
    return quote(value, safe="!*'()")


def parse_naver_candidates(html: str) -> List[PlaceInfo]:
    """Extract candidates from a Naver mobile search page.

    The page inlines its result list as JSON fragments; when none are found we
    fall back to detail-page permalinks, which only carry the place id.
    """
    out: List[PlaceInfo] = []
    seen: Set[str] = set()

    for m in NAVER_RICH_RE.finditer(html or ""):
        place_id = m.group(1)
        if place_id in seen:
            continue
        seen.add(place_id)
        out.append(PlaceInfo(
            id=place_id,
            name=unescape_json_text(m.group(2)),
            address=normalize_space(unescape_json_text(m.group(4) or m.group(3) or "")),
            lat=to_number(m.group(5)),
            lng=to_number(m.group(6)),
        ))

    if not out:
        for m in NAVER_PERMALINK_RE.finditer(html or ""):
            place_id = m.group(1)
            if place_id in seen:
                continue
            seen.add(place_id)
            out.append(PlaceInfo(id=place_id))

    return out


class NaverSearchClient:
    provider = "naver"

    def __init__(self, http: HttpClient):
        self.http = http

    def search(self, query: str) -> List[PlaceInfo]:
        resp = self.http.get(
            NAVER_SEARCH_URL + encode_query(query),
            headers={"referer": NAVER_MAP_REFERER, "accept": HTML_ACCEPT},
        )
        if not resp.ok:
            raise SearchFailure(f"네이버 검색 요청 실패 ({resp.status})")
        results = parse_naver_candidates(resp.text())
        logger.debug("Naver search %r -> %d candidates", query, len(results))
        return results


def _kakao_place_to_info(place: Dict[str, Any]) -> PlaceInfo:
    return PlaceInfo(
        id=str(place.get("confirmid") or "") or None,
        name=normalize_space(place.get("name")),
        address=normalize_space(place.get("new_address") or place.get("address") or ""),
        lat=to_number(place.get("lat")),
        lng=to_number(place.get("lon")),
    )


class KakaoSearchClient:
    provider = "kakao"

    def __init__(self, http: HttpClient):
        self.http = http

    def _get(self, url: str):
        return self.http.get(
            url,
            headers={"referer": KAKAO_MAP_REFERER, "accept": JSON_ACCEPT},
        )

    def search(self, query: str) -> List[PlaceInfo]:
        resp = self._get(KAKAO_SEARCH_URL + encode_query(query))
        if not resp.ok:
            raise SearchFailure(f"카카오 검색 요청 실패 ({resp.status})")

        text = resp.text()
        if not text.strip():
            return []
        try:
            data = json.loads(text)
        except ValueError as exc:
            raise SearchFailure("카카오 검색 응답 파싱 실패") from exc

        places = data.get("place") if isinstance(data, dict) else None
        if not isinstance(places, list):
            places = []

        results = [
            info for info in (_kakao_place_to_info(p) for p in places if isinstance(p, dict))
            if info.id
        ]
        logger.debug("Kakao search %r -> %d candidates", query, len(results))
        return results

    def fetch_detail(self, place_id: str) -> Optional[PlaceInfo]:
        resp = self._get(KAKAO_DETAIL_URL + encode_query(place_id))
        if not resp.ok:
            raise SearchFailure(f"카카오 상세 요청 실패 ({resp.status})")

        text = resp.text()
        if not text.strip():
            return None
        try:
            data = json.loads(text)
        except ValueError:
            logger.warning("Kakao detail for %s is not JSON; ignoring", place_id)
            return None

        place = data.get("place") if isinstance(data, dict) else None
        if not isinstance(place, dict):
            return None

        region = place.get("region") or {}
        newaddr = place.get("newaddr") or {}
        parts = [
            region.get("fullname") if isinstance(region, dict) else None,
            newaddr.get("newaddrfull") if isinstance(newaddr, dict) else None,
            place.get("addrdetail"),
        ]
        return PlaceInfo(
            id=str(place.get("confirmid") or place_id),
            name=normalize_space(place.get("placename") or place.get("placenamefull") or ""),
            address=normalize_space(" ".join(str(p) for p in parts if p)),
            lat=to_number(place.get("wgs84y")),
            lng=to_number(place.get("wgs84x")),
        )
