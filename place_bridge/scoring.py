from __future__ import annotations
import logging
from typing import Dict, Optional, Sequence

from .models import PlaceInfo, ScoredCandidate
from .utils import distance_m, normalize_compare_text, strip_address_detail

logger = logging.getLogger(__name__)

DEFAULT_WEIGHTS: Dict[str, float] = {"name": 0.62, "address": 0.23, "distance": 0.15}
CONTAINMENT_SCORE = 0.86
MIN_SIMILARITY = 0.05


def similarity_score(a: str, b: str) -> float:
    """Cheap order-sensitive similarity over comparison-normalized text.

    Blends positional character agreement with a character-set Jaccard index.
    Containment short-circuits to a fixed 0.86; distinct non-empty strings
    never score below 0.05 so that address and distance can still break ties.
    """
    if not a or not b:
        return 0.0
    if a == b:
        return 1.0
    if a in b or b in a:
        return CONTAINMENT_SCORE

    max_len = max(len(a), len(b))
    same = sum(1 for ca, cb in zip(a, b) if ca == cb)
    prefix_score = same / max_len

    set_a, set_b = set(a), set(b)
    inter = len(set_a & set_b)
    jaccard = inter / max(len(set_a) + len(set_b) - inter, 1)

    return max(prefix_score * 0.55 + jaccard * 0.45, MIN_SIMILARITY)

def compare_distance(a: Optional[int], b: Optional[int]) -> float:
    # unknown distance sorts after every known one
    if a is None and b is None:
        return 0
    if a is None:
        return 1
    if b is None:
        return -1
    return a - b


class Scorer:
    def __init__(self,
                 weights: Optional[Dict[str, float]] = None,
                 tie_epsilon: float = 0.0001,
                 distance_decay_m: float = 3000.0):
        self.w = dict(DEFAULT_WEIGHTS)
        if weights:
            self.w.update(weights)
        self.tie_epsilon = tie_epsilon
        self.distance_decay_m = distance_decay_m

    def distance_score(self, dist: Optional[int]) -> float:
        if dist is None:
            return 0.0
        return max(0.0, 1 - min(dist, self.distance_decay_m) / self.distance_decay_m)

    def score_candidate(self, candidate: PlaceInfo, source: PlaceInfo) -> ScoredCandidate:
        name_score = similarity_score(
            normalize_compare_text(source.name),
            normalize_compare_text(candidate.name),
        )
        addr_score = similarity_score(
            normalize_compare_text(strip_address_detail(source.address)),
            normalize_compare_text(strip_address_detail(candidate.address)),
        )
        dist = distance_m(source.lat, source.lng, candidate.lat, candidate.lng)

        score = (
            name_score * self.w["name"]
            + addr_score * self.w["address"]
            + self.distance_score(dist) * self.w["distance"]
        )
        return ScoredCandidate(
            id=candidate.id,
            name=candidate.name,
            address=candidate.address,
            lat=candidate.lat,
            lng=candidate.lng,
            score=score,
            distance_m=dist,
        )

    def pick(self, candidates: Sequence[PlaceInfo], source: PlaceInfo) -> Optional[ScoredCandidate]:
        """Highest composite score wins; near-ties go to the closer candidate."""
        best: Optional[ScoredCandidate] = None
        for cand in candidates:
            scored = self.score_candidate(cand, source)
            if (
                best is None
                or scored.score > best.score
                or (
                    abs(scored.score - best.score) < self.tie_epsilon
                    and compare_distance(scored.distance_m, best.distance_m) < 0
                )
            ):
                best = scored

        if best is not None:
            logger.debug(
                "Picked %s (%s) score=%.4f distance_m=%s out of %d candidates",
                best.id, best.name, best.score, best.distance_m, len(candidates),
            )
        return best
