"""Scoring and rendering pipeline for one query's worker responses."""
from __future__ import annotations

from typing import Any, Callable, List, Optional, Sequence
import logging

from hivemind.audit import AuditLog
from hivemind.client import Agent, HivemindClient
from hivemind.config import Config
from hivemind.highlight import HighlightReport, RenderCompletionCoordinator
from hivemind.models import (
    MasterEvaluation,
    ModelResponse,
    NormalizedContent,
    PipelineResult,
    QueryResult,
    RenderedContent,
)
from hivemind.ranking import RankingEngine
from hivemind.render import MarkdownRenderer
from hivemind.stats import Ratings, summarize

PlaceholderCallback = Callable[[List[RenderedContent]], None]


class HivemindPipeline:
    def __init__(
        self,
        config: Config,
        renderer: MarkdownRenderer | None = None,
        engine: RankingEngine | None = None,
        client: HivemindClient | None = None,
        coordinator: RenderCompletionCoordinator | None = None,
    ) -> None:
        self.config = config
        self.renderer = renderer or MarkdownRenderer(config.render)
        self.engine = engine or RankingEngine.from_config(config.ranking, config.ranking_weights)
        self.client = client or HivemindClient(config.backend_url, timeout=config.backend_timeout_seconds)
        self.coordinator = coordinator or RenderCompletionCoordinator.from_config(
            config, classifier=self.renderer.classifier
        )
        self._audit: AuditLog | None = AuditLog(config.audit_path) if config.audit_enabled else None
        self.logger = logging.getLogger(__name__)

    def _content(self, index: int, response: ModelResponse, html: str, phase: str) -> RenderedContent:
        return RenderedContent(
            index=index,
            model=response.model,
            raw_response=response.output or "",
            rendered_html=html,
            phase=phase,
            error=response.error,
        )

    def placeholders(self, responses: Sequence[ModelResponse]) -> List[RenderedContent]:
        """Phase one: escaped text for every response, safe to display at once."""
        return [
            self._content(index, response, self.renderer.placeholder(response.output), "escaped")
            for index, response in enumerate(responses)
        ]

    def evaluate(self, responses: Sequence[ModelResponse]) -> Optional[MasterEvaluation]:
        return self.engine.evaluate(responses)

    def normalize(self, output: Optional[str]) -> NormalizedContent:
        return self.renderer.normalize(output)

    def _render_final(self, placeholder: RenderedContent, response: ModelResponse) -> RenderedContent:
        if response.error is not None or not response.output:
            return placeholder
        try:
            html = self.renderer.render(response.output)
        except Exception:
            self.logger.warning("Markdown render failed for %s; keeping escaped text", response.model, exc_info=True)
            return placeholder
        return self._content(placeholder.index, response, html, "markdown")

    def process(
        self,
        result: QueryResult,
        on_placeholder: PlaceholderCallback | None = None,
        ratings: Ratings | None = None,
    ) -> PipelineResult:
        responses = tuple(result.responses)
        contents = self.placeholders(responses)
        if on_placeholder:
            on_placeholder(list(contents))

        evaluation: Optional[MasterEvaluation] = None
        if result.ok:
            evaluation = self.evaluate(responses)
        else:
            self.logger.warning("Query %s failed before ranking: %s", result.query_id, result.transport_error)

        contents = [self._render_final(item, response) for item, response in zip(contents, responses)]
        stats = summarize(responses, ratings)
        if self._audit:
            self._audit.log("evaluation", result.query_id, {
                "responses": len(responses),
                "transport_error": result.transport_error,
                "best_index": evaluation.best_index if evaluation else None,
                "evaluation_time_ms": evaluation.evaluation_time_ms if evaluation else None,
                "best_model": stats["bestModel"],
            })
        return PipelineResult(
            query_id=result.query_id,
            evaluation=evaluation,
            contents=contents,
            stats=stats,
            transport_error=result.transport_error,
        )

    async def run_query(
        self,
        query: str,
        agents: List[Agent] | None = None,
        on_placeholder: PlaceholderCallback | None = None,
    ) -> PipelineResult:
        result = await self.client.send_query(query, agents)
        return self.process(result, on_placeholder=on_placeholder)

    async def highlight(self, document: Any, query_id: Optional[str] = None) -> HighlightReport:
        report = await self.coordinator.run(document)
        if self._audit:
            self._audit.log("highlight", query_id, report.to_dict())
        return report
