"""Summary figures shown next to a set of worker responses."""
from __future__ import annotations

from typing import Any, Dict, Mapping, Optional, Sequence

from hivemind.errors import ResponseFormatError
from hivemind.models import ModelResponse

MODEL_DISPLAY_NAMES = {
    "gpt-4": "GPT-4",
    "claude-3-sonnet": "Claude 3 Sonnet",
    "llama-3.1": "LLaMA 3.1",
    "deepseek-coder": "DeepSeek Coder",
}

RATINGS = ("good", "bad")
NO_BEST_MODEL = "N/A"

# Best-model weighting: error-free share vs. share of "good" among rated answers.
SUCCESS_WEIGHT = 0.7
RATING_WEIGHT = 0.3

Ratings = Mapping[int, str]


def model_display_name(model: str) -> str:
    if model.startswith("Qwen-Worker-"):
        return model.replace("Qwen-Worker-", "Qwen W", 1)
    return MODEL_DISPLAY_NAMES.get(model, model)


def success_rate(responses: Sequence[ModelResponse]) -> int:
    """Percentage of responses without an error, rounded."""
    if not responses:
        return 0
    ok = sum(1 for response in responses if response.ok)
    return round(ok / len(responses) * 100)


def average_processing_time_ms(responses: Sequence[ModelResponse]) -> int:
    timed = [response.processing_time_ms for response in responses if response.processing_time_ms]
    if not timed:
        return 0
    return round(sum(timed) / len(timed))


def rate_response(ratings: Ratings, index: int, rating: str) -> Dict[int, str]:
    """Return a copy of ``ratings`` with ``rating`` toggled for response ``index``.

    Rating a response with the value it already has clears it.
    """
    if rating not in RATINGS:
        raise ValueError(f"rating must be one of {RATINGS}, got {rating!r}")
    updated = dict(ratings)
    if updated.get(index) == rating:
        del updated[index]
    else:
        updated[index] = rating
    return updated


def parse_ratings(data: Any) -> Dict[int, str]:
    """Ratings from JSON, where object keys are response indexes as strings."""
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ResponseFormatError("ratings must be an object of index -> 'good'|'bad'")
    ratings: Dict[int, str] = {}
    for key, value in data.items():
        try:
            index = int(key)
        except (TypeError, ValueError) as exc:
            raise ResponseFormatError(f"invalid rating index: {key!r}") from exc
        if value is None:
            continue
        if value not in RATINGS:
            raise ResponseFormatError(f"invalid rating for {index}: {value!r}")
        ratings[index] = value
    return ratings


def best_model(responses: Sequence[ModelResponse], ratings: Optional[Ratings] = None) -> str:
    """Model with the best mix of error-free answers and "good" ratings.

    Ties go to the model seen first. Returns ``"N/A"`` for no responses.
    """
    if not responses:
        return NO_BEST_MODEL
    ratings = ratings or {}
    tallies: Dict[str, Dict[str, int]] = {}
    for index, response in enumerate(responses):
        tally = tallies.setdefault(response.model, {"total": 0, "errors": 0, "good": 0, "bad": 0})
        tally["total"] += 1
        if not response.ok:
            tally["errors"] += 1
        rating = ratings.get(index)
        if rating in RATINGS:
            tally[rating] += 1

    best, best_score = NO_BEST_MODEL, -1.0
    for model, tally in tallies.items():
        success = (tally["total"] - tally["errors"]) / tally["total"]
        rated = tally["good"] / max(1, tally["good"] + tally["bad"])
        score = success * SUCCESS_WEIGHT + rated * RATING_WEIGHT
        if score > best_score:
            best, best_score = model, score
    return best


def summarize(responses: Sequence[ModelResponse], ratings: Optional[Ratings] = None) -> Dict[str, Any]:
    return {
        "total": len(responses),
        "successRate": success_rate(responses),
        "averageResponseTimeMs": average_processing_time_ms(responses),
        "bestModel": best_model(responses, ratings),
        "models": [model_display_name(response.model) for response in responses],
    }
