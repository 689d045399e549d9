"""Canned upstream payloads shared by resolver / pipeline / API tests."""
import json
from typing import Dict, List, Optional
from urllib.parse import parse_qs, urlsplit

from place_bridge.transport import HttpResponse

from conftest import text_response

NAVER_SEARCH_PREFIX = "https://m.map.naver.com/search2/search.naver"
KAKAO_SEARCH_PREFIX = "https://search.map.kakao.com/mapsearch/map.daum"
KAKAO_DETAIL_PREFIX = "https://map.kakao.com/api/place/info"


def naver_item(place_id: int, name: str, road_address: str, lat: float, lng: float) -> str:
    return (
        f'{{"id":{place_id},"name":"{name}","category":"","address":"",'
        f'"roadAddress":"{road_address}","latitude":{lat},"longitude":{lng}}}'
    )


def naver_page(*items: str) -> str:
    return "<script>var state = [" + ",".join(items) + "];</script>"


def kakao_search_body(places: List[Dict]) -> str:
    return json.dumps({"place": places}, ensure_ascii=False)


def kakao_place(confirmid: str, name: str, address: str, lat: Optional[float], lng: Optional[float]) -> Dict:
    return {"confirmid": confirmid, "name": name, "new_address": address, "lat": lat, "lon": lng}


def kakao_detail_body(confirmid: str, name: str, region: str, road: str, lat: float, lng: float) -> str:
    return json.dumps({
        "place": {
            "confirmid": confirmid,
            "placename": name,
            "region": {"fullname": region},
            "newaddr": {"newaddrfull": road},
            "wgs84y": lat,
            "wgs84x": lng,
        }
    }, ensure_ascii=False)


def search_query(url: str) -> str:
    params = parse_qs(urlsplit(url).query)
    return (params.get("query") or params.get("q") or [""])[0]


class Upstream:
    """Routes fake GETs by endpoint and decoded query; unknown queries return no results."""

    def __init__(self,
                 naver: Optional[Dict[str, str]] = None,
                 kakao: Optional[Dict[str, str]] = None,
                 kakao_detail: Optional[Dict[str, str]] = None,
                 redirects: Optional[Dict[str, HttpResponse]] = None):
        self.naver = naver or {}
        self.kakao = kakao or {}
        self.kakao_detail = kakao_detail or {}
        self.redirects = redirects or {}

    def __call__(self, url: str) -> HttpResponse:
        if url in self.redirects:
            return self.redirects[url]
        if url.startswith(NAVER_SEARCH_PREFIX):
            return text_response(self.naver.get(search_query(url), "<html></html>"))
        if url.startswith(KAKAO_SEARCH_PREFIX):
            return text_response(self.kakao.get(search_query(url), kakao_search_body([])))
        if url.startswith(KAKAO_DETAIL_PREFIX):
            place_id = parse_qs(urlsplit(url).query)["confirmId"][0]
            return text_response(self.kakao_detail.get(place_id, "{}"))
        return text_response("not found", status=404)
