"""Data model shared by the ranking and rendering pipeline.

Worker responses arrive as loosely-typed JSON. ``ModelResponse.from_payload``
is the single place where that shape is closed: a response is either a
success carrying ``output`` or a failure carrying ``error``.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from hivemind.errors import ResponseFormatError

SYSTEM_MODEL = "System"


def _optional_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value)
    return text if text.strip() else None


@dataclass(frozen=True)
class WorkerParams:
    temperature: float
    top_k: int
    top_p: float
    worker_id: Optional[str] = None

    @classmethod
    def from_payload(cls, data: Dict[str, Any]) -> "WorkerParams":
        try:
            return cls(
                temperature=float(data.get("temperature", 0.0)),
                top_k=int(data.get("top_k", 0)),
                top_p=float(data.get("top_p", 0.0)),
                worker_id=data.get("worker_id") or None,
            )
        except (TypeError, ValueError) as exc:
            raise ResponseFormatError(f"invalid worker params: {exc}") from exc

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "temperature": self.temperature,
            "top_k": self.top_k,
            "top_p": self.top_p,
        }
        if self.worker_id:
            payload["worker_id"] = self.worker_id
        return payload


@dataclass(frozen=True)
class ModelResponse:
    model: str
    output: Optional[str] = None
    error: Optional[str] = None
    processing_time_ms: int = 0
    confidence: Optional[float] = None
    worker_params: Optional[WorkerParams] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def qualifies(self) -> bool:
        """True when the response can take part in ranking."""
        return self.error is None and bool(self.output and self.output.strip())

    @classmethod
    def success(cls, model: str, output: str, **kwargs: Any) -> "ModelResponse":
        return cls(model=model, output=output, error=None, **kwargs)

    @classmethod
    def failure(cls, model: str, error: str, processing_time_ms: int = 0) -> "ModelResponse":
        return cls(model=model, output=None, error=error, processing_time_ms=processing_time_ms)

    @classmethod
    def from_payload(cls, data: Dict[str, Any]) -> "ModelResponse":
        if not isinstance(data, dict):
            raise ResponseFormatError(f"response must be an object, got {type(data).__name__}")
        model = str(data.get("model") or "").strip()
        if not model:
            raise ResponseFormatError("response is missing 'model'")

        raw_time = data.get("processingTimeMs", data.get("processingTime", data.get("processing_time_ms", 0)))
        try:
            processing_time_ms = max(0, int(raw_time or 0))
        except (TypeError, ValueError) as exc:
            raise ResponseFormatError(f"invalid processing time for {model}: {raw_time!r}") from exc

        confidence = data.get("confidence")
        if confidence is not None:
            try:
                confidence = max(0.0, min(1.0, float(confidence)))
            except (TypeError, ValueError) as exc:
                raise ResponseFormatError(f"invalid confidence for {model}: {confidence!r}") from exc

        params_data = data.get("workerParams", data.get("worker_params"))
        worker_params = WorkerParams.from_payload(params_data) if isinstance(params_data, dict) else None

        error = _optional_text(data.get("error"))
        if error is not None:
            return cls(
                model=model,
                error=error,
                processing_time_ms=processing_time_ms,
                worker_params=worker_params,
            )
        output = data.get("output")
        return cls(
            model=model,
            output=None if output is None else str(output),
            processing_time_ms=processing_time_ms,
            confidence=confidence,
            worker_params=worker_params,
        )

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "model": self.model,
            "processingTime": self.processing_time_ms,
        }
        if self.error is not None:
            payload["error"] = self.error
        else:
            payload["output"] = self.output or ""
        if self.confidence is not None:
            payload["confidence"] = self.confidence
        if self.worker_params is not None:
            payload["workerParams"] = self.worker_params.to_dict()
        return payload


def parse_responses(items: List[Dict[str, Any]]) -> Tuple[ModelResponse, ...]:
    return tuple(ModelResponse.from_payload(item) for item in items)


@dataclass(frozen=True)
class RankingEntry:
    index: int
    score: float
    reasoning: str

    def to_dict(self) -> Dict[str, Any]:
        return {"index": self.index, "score": self.score, "reasoning": self.reasoning}


@dataclass(frozen=True)
class MasterEvaluation:
    best_index: int
    reasoning: str
    rankings: Tuple[RankingEntry, ...]
    evaluation_time_ms: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "bestResponseIndex": self.best_index,
            "reasoning": self.reasoning,
            "rankings": [entry.to_dict() for entry in self.rankings],
            "evaluationTime": self.evaluation_time_ms,
        }


@dataclass(frozen=True)
class NormalizedContent:
    cleaned_text: str
    rendered_html: str
    detected_language_tags: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "cleanedText": self.cleaned_text,
            "renderedHtml": self.rendered_html,
            "detectedLanguageTags": list(self.detected_language_tags),
        }


@dataclass(frozen=True)
class RenderedContent:
    """Display payload for one worker response."""
    index: int
    model: str
    raw_response: str
    rendered_html: str
    phase: str  # escaped, markdown
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "index": self.index,
            "model": self.model,
            "rawResponse": self.raw_response,
            "renderedHtml": self.rendered_html,
            "phase": self.phase,
        }
        if self.error is not None:
            payload["error"] = self.error
        return payload


@dataclass(frozen=True)
class QueryResult:
    query_id: str
    responses: Tuple[ModelResponse, ...] = ()
    transport_error: Optional[str] = None
    backend_evaluation: Optional[Dict[str, Any]] = None

    @property
    def ok(self) -> bool:
        return self.transport_error is None

    @classmethod
    def transport_failure(cls, query_id: str, message: str) -> "QueryResult":
        """A failed round-trip shown as one synthetic system response."""
        return cls(
            query_id=query_id,
            responses=(ModelResponse.failure(SYSTEM_MODEL, message),),
            transport_error=message,
        )


@dataclass
class PipelineResult:
    query_id: str
    evaluation: Optional[MasterEvaluation]
    contents: List[RenderedContent] = field(default_factory=list)
    stats: Dict[str, Any] = field(default_factory=dict)
    transport_error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "queryId": self.query_id,
            "transportError": self.transport_error,
            "masterEvaluation": self.evaluation.to_dict() if self.evaluation else None,
            "contents": [item.to_dict() for item in self.contents],
            "stats": self.stats,
        }
