"""Query backend client.

Posts one query (and optionally the agents that should answer it) to the
backend's ``/query`` endpoint and returns the worker responses. A failed
round-trip is reported as a ``QueryResult`` holding one synthetic system
response; it is never retried here.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional
import logging
import time

import httpx

from hivemind.errors import ResponseFormatError, TransportError
from hivemind.models import QueryResult, WorkerParams, parse_responses

logger = logging.getLogger(__name__)

RESPONSE_LENGTH_INSTRUCTIONS = {
    "brief": "Response Length: Provide a brief response (1-2 sentences) focusing only on the key points.",
    "detailed": "Response Length: Provide a detailed response (1-2 paragraphs) with explanation and context.",
    "comprehensive": (
        "Response Length: Provide a comprehensive response with full analysis, examples, "
        "and thorough explanation."
    ),
}
DEFAULT_LENGTH_INSTRUCTION = "Response Length: Provide a response of appropriate length for the query complexity."


@dataclass(frozen=True)
class Agent:
    name: str
    specialization: str = ""
    response_length: str = "unlimited"
    worker_params: Optional[WorkerParams] = None

    def to_dict(self) -> Dict[str, Any]:
        params = self.worker_params or WorkerParams(temperature=0.7, top_k=40, top_p=0.8)
        return {
            "name": self.name,
            "specialization": self.specialization,
            "responseLength": self.response_length,
            "workerParams": params.to_dict(),
        }


def response_length_instructions(response_length: str | None) -> str:
    return RESPONSE_LENGTH_INSTRUCTIONS.get((response_length or "").lower(), DEFAULT_LENGTH_INSTRUCTION)


def build_worker_prompt(query: str, agent: Agent) -> str:
    """The prompt a worker receives for ``agent``: role, length hint, query."""
    parts: List[str] = []
    if agent.specialization.strip():
        parts.append(f"Role: {agent.specialization}")
    parts.append(response_length_instructions(agent.response_length))
    parts.append(f"Query: {query}")
    return "\n\n".join(parts)


def _query_id() -> str:
    return f"query_{time.time_ns()}"


class HivemindClient:
    def __init__(
        self,
        base_url: str = "http://localhost:8080",
        timeout: float = 90.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    def _client(self, timeout: float | None = None) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=timeout or self.timeout, transport=self._transport)

    async def health(self) -> bool:
        try:
            async with self._client(timeout=5.0) as client:
                resp = await client.get(f"{self.base_url}/health")
                return resp.status_code == 200
        except httpx.HTTPError:
            return False

    async def _post_query(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        try:
            async with self._client() as client:
                resp = await client.post(f"{self.base_url}/query", json=payload)
                resp.raise_for_status()
                data = resp.json()
        except httpx.HTTPStatusError as exc:
            raise TransportError(f"backend returned {exc.response.status_code}") from exc
        except httpx.HTTPError as exc:
            raise TransportError(f"backend unreachable: {exc}") from exc
        except ValueError as exc:
            raise TransportError(f"backend returned invalid JSON: {exc}") from exc
        if not isinstance(data, dict):
            raise TransportError("backend returned an unexpected payload")
        return data

    async def send_query(self, query: str, agents: List[Agent] | None = None) -> QueryResult:
        payload: Dict[str, Any] = {"query": query}
        if agents:
            payload["agents"] = [agent.to_dict() for agent in agents]
        try:
            data = await self._post_query(payload)
            responses = parse_responses(data.get("results") or [])
        except (TransportError, ResponseFormatError) as exc:
            logger.warning("Query failed: %s", exc)
            return QueryResult.transport_failure(_query_id(), f"Failed to process query: {exc}")
        evaluation = data.get("masterEvaluation")
        return QueryResult(
            query_id=str(data.get("queryId") or _query_id()),
            responses=responses,
            backend_evaluation=evaluation if isinstance(evaluation, dict) else None,
        )
