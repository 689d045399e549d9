from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Dict, Optional

NAVER_TO_KAKAO = "naver_to_kakao"
KAKAO_TO_NAVER = "kakao_to_naver"
DIRECTIONS = (NAVER_TO_KAKAO, KAKAO_TO_NAVER)

@dataclass(frozen=True)
class SourceEntry:
    index: Any
    name: str = ""
    address: str = ""
    source_url: str = ""
    raw_block: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "index": self.index,
            "name": self.name,
            "address": self.address,
            "sourceUrl": self.source_url,
            "rawBlock": self.raw_block,
        }

@dataclass(frozen=True)
class PlaceInfo:
    id: Optional[str] = None
    name: str = ""
    address: str = ""
    lat: Optional[float] = None
    lng: Optional[float] = None

    @property
    def is_unresolved(self) -> bool:
        return not self.name and not self.address and not self.id

    @property
    def is_complete(self) -> bool:
        return bool(self.name and self.address) and self.lat is not None and self.lng is not None

@dataclass(frozen=True)
class ScoredCandidate(PlaceInfo):
    score: float = 0.0
    distance_m: Optional[int] = None

@dataclass
class ConversionResult:
    ok: bool
    source: SourceEntry
    target_url: Optional[str] = None
    target_name: Optional[str] = None
    target_address: Optional[str] = None
    source_lat: Optional[float] = None
    source_lng: Optional[float] = None
    target_lat: Optional[float] = None
    target_lng: Optional[float] = None
    distance_m: Optional[int] = None
    distance_pass: Optional[bool] = None
    error: Optional[str] = None

    @classmethod
    def failure(cls, source: SourceEntry, error: str) -> "ConversionResult":
        return cls(ok=False, source=source, error=error)

    def to_dict(self) -> Dict[str, Any]:
        if not self.ok:
            return {"ok": False, "source": self.source.to_dict(), "error": self.error}
        return {
            "ok": True,
            "source": self.source.to_dict(),
            "targetUrl": self.target_url,
            "targetName": self.target_name,
            "targetAddress": self.target_address,
            "sourceLat": self.source_lat,
            "sourceLng": self.source_lng,
            "targetLat": self.target_lat,
            "targetLng": self.target_lng,
            "distanceMeters": self.distance_m,
            "distancePass": self.distance_pass,
        }
