"""Heuristic ranking of worker responses.

Each qualifying response gets a composite score in [0, 1]:

- length (30%): ``min(len(output) / 500, 1)``
- confidence (40%): reported confidence, 0.5 when missing
- speed (30%): ``max(0, (5000 - processing_time_ms) / 5000)``

Scores are rounded to two decimals. Ranking is a stable descending sort, so
equal scores keep their original list order and the first-seen response wins.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence
import logging
import time

from hivemind.config import DEFAULT_WEIGHTS
from hivemind.models import MasterEvaluation, ModelResponse, RankingEntry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScoreBreakdown:
    length: float
    confidence: float
    speed: float
    composite: float


@dataclass
class RankingEngine:
    weights: Dict[str, float] = field(default_factory=lambda: dict(DEFAULT_WEIGHTS))
    length_saturation_chars: int = 500
    speed_ceiling_ms: int = 5000
    default_confidence: float = 0.5

    @classmethod
    def from_config(cls, config: Dict[str, Any], weights: Dict[str, float] | None = None) -> "RankingEngine":
        return cls(
            weights=dict(weights or DEFAULT_WEIGHTS),
            length_saturation_chars=max(1, int(config.get("length_saturation_chars", 500))),
            speed_ceiling_ms=max(1, int(config.get("speed_ceiling_ms", 5000))),
            default_confidence=float(config.get("default_confidence", 0.5)),
        )

    def length_score(self, output: str) -> float:
        return min(len(output) / self.length_saturation_chars, 1.0)

    def confidence_score(self, confidence: Optional[float]) -> float:
        if confidence is None:
            return self.default_confidence
        return max(0.0, min(1.0, float(confidence)))

    def speed_score(self, processing_time_ms: int) -> float:
        return max(0.0, (self.speed_ceiling_ms - processing_time_ms) / self.speed_ceiling_ms)

    def score(self, response: ModelResponse) -> ScoreBreakdown:
        length = self.length_score(response.output or "")
        confidence = self.confidence_score(response.confidence)
        speed = self.speed_score(response.processing_time_ms)
        composite = (
            length * self.weights.get("length", 0.0) +
            confidence * self.weights.get("confidence", 0.0) +
            speed * self.weights.get("speed", 0.0)
        )
        composite = round(min(1.0, max(0.0, composite)), 2)
        return ScoreBreakdown(length=length, confidence=confidence, speed=speed, composite=composite)

    def evaluate(self, responses: Sequence[ModelResponse]) -> MasterEvaluation | None:
        """Rank all qualifying responses; None when nothing qualifies."""
        start = time.perf_counter()
        scored: List[tuple[int, ModelResponse, ScoreBreakdown]] = [
            (index, response, self.score(response))
            for index, response in enumerate(responses)
            if response.qualifies
        ]
        if not scored:
            logger.info("No qualifying responses among %d; skipping evaluation", len(responses))
            return None

        # sorted() is stable: ties keep list order.
        scored = sorted(scored, key=lambda item: item[2].composite, reverse=True)
        rankings = tuple(
            RankingEntry(index=index, score=breakdown.composite, reasoning=score_reasoning(response, breakdown))
            for index, response, breakdown in scored
        )
        best_index, best_response, best_breakdown = scored[0]
        evaluation = MasterEvaluation(
            best_index=best_index,
            reasoning=evaluation_reasoning(best_response, best_breakdown),
            rankings=rankings,
            evaluation_time_ms=int((time.perf_counter() - start) * 1000),
        )
        logger.debug(
            "Ranked %d of %d responses; best=%s (%.2f)",
            len(rankings),
            len(responses),
            best_response.model,
            best_breakdown.composite,
        )
        return evaluation


def _quality_band(score: float) -> str:
    if score >= 0.8:
        return "excellent quality"
    if score >= 0.6:
        return "good quality"
    if score >= 0.4:
        return "fair quality"
    return "needs improvement"


def score_reasoning(response: ModelResponse, breakdown: ScoreBreakdown) -> str:
    reasons = [_quality_band(breakdown.composite)]
    if breakdown.confidence >= 0.8:
        reasons.append("high confidence")
    elif breakdown.confidence >= 0.6:
        reasons.append("moderate confidence")
    if breakdown.length >= 1.0:
        reasons.append("substantial length")
    elif breakdown.length < 0.2:
        reasons.append("too brief")
    if breakdown.speed >= 0.8:
        reasons.append("fast")
    elif breakdown.speed == 0.0:
        reasons.append("slow")
    return ", ".join(reasons)


def evaluation_reasoning(response: ModelResponse, breakdown: ScoreBreakdown) -> str:
    length = len(response.output or "")
    return (
        f"{response.model} provided the best response (score: {breakdown.composite:.2f}) "
        f"based on response length ({length} chars), confidence ({breakdown.confidence:.2f}) "
        f"and speed ({response.processing_time_ms} ms)."
    )
