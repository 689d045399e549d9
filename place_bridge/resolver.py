from __future__ import annotations
import logging
from typing import List, Optional

from .candidates import KakaoSearchClient, NaverSearchClient, NAVER_MAP_REFERER
from .errors import UnresolvedSource
from .models import NAVER_TO_KAKAO, KAKAO_TO_NAVER, PlaceInfo, SourceEntry
from .scoring import Scorer
from .transport import HttpClient, resolve_redirect_chain
from .urls import (
    extract_kakao_place_id,
    extract_naver_place_id,
    is_naver_short_link,
    merge_place_info,
    naver_url_meta,
)
from .utils import strip_address_detail

logger = logging.getLogger(__name__)


def build_fallback_query(name: str, address: str) -> str:
    return " ".join(part for part in (name, strip_address_detail(address)) if part).strip()


class SourceInfoResolver:
    """Builds the best-effort description of the input place before searching the other provider.

    Sources are consulted in a fixed order (entry fields, URL metadata or the
    provider detail lookup, then a search on the source's own provider) and
    folded with merge_place_info, so earlier sources always win.
    """

    def __init__(self,
                 http: HttpClient,
                 naver: NaverSearchClient,
                 kakao: KakaoSearchClient,
                 scorer: Scorer,
                 redirect_max_hops: int = 6):
        self.http = http
        self.naver = naver
        self.kakao = kakao
        self.scorer = scorer
        self.redirect_max_hops = redirect_max_hops

    def resolve(self, direction: str, entry: SourceEntry) -> PlaceInfo:
        if direction == NAVER_TO_KAKAO:
            return self.resolve_naver(entry)
        if direction == KAKAO_TO_NAVER:
            return self.resolve_kakao(entry)
        raise ValueError(f"unknown direction: {direction!r}")

    def resolve_naver(self, entry: SourceEntry) -> PlaceInfo:
        info = PlaceInfo(
            id=extract_naver_place_id(entry.source_url) or None,
            name=entry.name,
            address=entry.address,
        )

        if entry.source_url:
            partials: List[PlaceInfo] = [naver_url_meta(entry.source_url)]
            if is_naver_short_link(entry.source_url):
                chain = resolve_redirect_chain(
                    self.http,
                    entry.source_url,
                    self.redirect_max_hops,
                    referer=NAVER_MAP_REFERER,
                )
                partials.extend(naver_url_meta(url) for url in chain)
            info = merge_place_info(info, *partials)

        info = self._fill_from_search(info, self.naver)
        if info.is_unresolved:
            raise UnresolvedSource("네이버 입력에서 상호/주소/URL 정보를 찾지 못했습니다.")
        return info

    def resolve_kakao(self, entry: SourceEntry) -> PlaceInfo:
        info = PlaceInfo(
            id=extract_kakao_place_id(entry.source_url) or None,
            name=entry.name,
            address=entry.address,
        )

        if info.id:
            info = merge_place_info(info, self.kakao.fetch_detail(info.id))

        info = self._fill_from_search(info, self.kakao)
        if info.is_unresolved:
            raise UnresolvedSource("카카오 입력에서 상호/주소/URL 정보를 찾지 못했습니다.")
        return info

    def _fill_from_search(self, info: PlaceInfo, client) -> PlaceInfo:
        if info.is_complete:
            return info
        query = build_fallback_query(info.name, info.address)
        if not query:
            return info

        picked: Optional[PlaceInfo] = self.scorer.pick(client.search(query), info)
        if picked is None:
            logger.debug("Source fallback search %r found nothing on %s", query, client.provider)
            return info
        return merge_place_info(info, picked)
