from __future__ import annotations
import logging
from typing import Any, List, Mapping, Optional

from .candidates import KakaoSearchClient, NaverSearchClient
from .config import Config
from .errors import (
    InvalidInput,
    NoCandidateSelected,
    NoSearchResults,
    PlaceBridgeError,
    error_message,
)
from .models import (
    DIRECTIONS,
    NAVER_TO_KAKAO,
    ConversionResult,
    PlaceInfo,
    SourceEntry,
)
from .resolver import SourceInfoResolver
from .scoring import Scorer
from .transport import HttpClient, UrllibHttpClient
from .utils import distance_m, normalize_space, strip_address_detail, to_number

logger = logging.getLogger(__name__)

KAKAO_PLACE_URL = "https://place.map.kakao.com/{}"
NAVER_PLACE_URL = "https://map.naver.com/p/entry/place/{}"


def build_query_cascade(info: PlaceInfo) -> List[str]:
    """Most to least specific: name+address, name, address; blanks dropped."""
    address = strip_address_detail(info.address)
    combined = " ".join(p for p in (info.name, address) if p).strip()
    return [q for q in (combined, info.name, address) if q]

def sanitize_entry(raw: Any, fallback_index: int) -> SourceEntry:
    data: Mapping[str, Any] = raw if isinstance(raw, Mapping) else {}
    index = to_number(data.get("index"))
    if index is None:
        index = fallback_index
    elif float(index).is_integer():
        index = int(index)
    raw_block = data.get("rawBlock")
    return SourceEntry(
        index=index,
        name=normalize_space(data.get("name")),
        address=normalize_space(data.get("address")),
        source_url=normalize_space(data.get("sourceUrl")),
        raw_block=raw_block if isinstance(raw_block, str) else "",
    )


class PlaceConversionPipeline:
    """Naver <-> Kakao place conversion: resolve source -> cascade search -> pick -> verdict."""

    def __init__(self, cfg: Config, http: Optional[HttpClient] = None):
        self.cfg = cfg
        self.http = http or UrllibHttpClient(cfg.user_agent, timeout=cfg.http_timeout_s)
        self.scorer = Scorer(cfg.weights, cfg.tie_epsilon, cfg.distance_decay_m)
        self.naver = NaverSearchClient(self.http)
        self.kakao = KakaoSearchClient(self.http)
        self.resolver = SourceInfoResolver(
            self.http, self.naver, self.kakao, self.scorer,
            redirect_max_hops=cfg.redirect_max_hops,
        )

    def resolve_max_distance(self, value: Any) -> float:
        n = to_number(value)
        return n if n is not None else self.cfg.default_max_distance_m

    def convert(self, direction: str, entry: SourceEntry, max_distance_m: float) -> ConversionResult:
        """Convert one entry; expected failures come back as ok=False results."""
        try:
            return self._convert(direction, entry, max_distance_m)
        except PlaceBridgeError as exc:
            logger.warning("Entry %s (%s) failed: %s", entry.index, direction, exc)
            return ConversionResult.failure(entry, error_message(exc))

    def _convert(self, direction: str, entry: SourceEntry, max_distance_m: float) -> ConversionResult:
        if direction == NAVER_TO_KAKAO:
            target, label, url_tpl = self.kakao, "카카오", KAKAO_PLACE_URL
        else:
            target, label, url_tpl = self.naver, "네이버", NAVER_PLACE_URL

        source_info = self.resolver.resolve(direction, entry)

        candidates: List[PlaceInfo] = []
        for query in build_query_cascade(source_info):
            candidates = target.search(query)
            if candidates:
                break
        if not candidates:
            raise NoSearchResults(f"{label} 검색 결과가 없습니다.")

        picked = self.scorer.pick(candidates, source_info)
        if picked is None:
            raise NoCandidateSelected(f"{label} 후보를 고르지 못했습니다.")

        dist = distance_m(source_info.lat, source_info.lng, picked.lat, picked.lng)
        return ConversionResult(
            ok=True,
            source=entry,
            target_url=url_tpl.format(picked.id),
            target_name=picked.name,
            target_address=picked.address,
            source_lat=source_info.lat,
            source_lng=source_info.lng,
            target_lat=picked.lat,
            target_lng=picked.lng,
            distance_m=dist,
            distance_pass=None if dist is None else dist <= max_distance_m,
        )

    def convert_batch(self,
                      direction: Any,
                      raw_entries: Any,
                      max_distance_m: Any = None) -> List[ConversionResult]:
        direction = normalize_space(direction)
        if direction not in DIRECTIONS:
            raise InvalidInput("direction 값이 올바르지 않습니다.")
        if not isinstance(raw_entries, list):
            raise InvalidInput("entries는 배열이어야 합니다.")

        threshold = self.resolve_max_distance(max_distance_m)
        entries = [
            sanitize_entry(raw, idx + 1)
            for idx, raw in enumerate(raw_entries[: self.cfg.max_entries])
        ]

        results: List[ConversionResult] = []
        for entry in entries:
            try:
                results.append(self.convert(direction, entry, threshold))
            except Exception as exc:
                logger.exception("Unexpected error converting entry %s", entry.index)
                results.append(ConversionResult.failure(entry, error_message(exc)))

        logger.info(
            "Converted %d/%d entries (%s, max_distance_m=%s)",
            sum(1 for r in results if r.ok), len(results), direction, threshold,
        )
        return results
