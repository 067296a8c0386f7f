"""FastAPI server for Hivemind."""
from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from typing import Any, List

from hivemind import __version__
from hivemind.client import Agent
from hivemind.config import get_config
from hivemind.errors import ResponseFormatError
from hivemind.highlight import HtmlDocument
from hivemind.models import QueryResult, WorkerParams, parse_responses
from hivemind.pipeline import HivemindPipeline
from hivemind.stats import parse_ratings

app = FastAPI(title="Hivemind")


def _pipeline(request: Request) -> HivemindPipeline:
    pipeline = getattr(request.app.state, "pipeline", None)
    if pipeline is None:
        pipeline = HivemindPipeline(get_config())
        request.app.state.pipeline = pipeline
    return pipeline


def _parse_agents(items: Any) -> List[Agent]:
    agents: List[Agent] = []
    for item in items or []:
        if not isinstance(item, dict) or not str(item.get("name") or "").strip():
            continue
        params = item.get("workerParams")
        agents.append(Agent(
            name=str(item["name"]).strip(),
            specialization=str(item.get("specialization") or ""),
            response_length=str(item.get("responseLength") or "unlimited"),
            worker_params=WorkerParams.from_payload(params) if isinstance(params, dict) else None,
        ))
    return agents


@app.on_event("startup")
def _startup() -> None:
    app.state.pipeline = HivemindPipeline(get_config())


@app.get("/health")
async def health():
    """Health check endpoint for monitoring."""
    return {"status": "healthy", "service": "hivemind", "version": __version__}


@app.post("/api/evaluate")
async def evaluate_api(payload: dict, request: Request):
    items = payload.get("results")
    if not isinstance(items, list):
        return JSONResponse({"error": "results must be a list"}, status_code=400)
    try:
        responses = parse_responses(items)
        ratings = parse_ratings(payload.get("ratings"))
    except ResponseFormatError as exc:
        return JSONResponse({"error": str(exc)}, status_code=400)
    query_id = str(payload.get("queryId") or "adhoc")
    result = _pipeline(request).process(QueryResult(query_id=query_id, responses=responses), ratings=ratings)
    return result.to_dict()


@app.post("/api/render")
async def render_api(payload: dict, request: Request):
    output = payload.get("output")
    if output is not None and not isinstance(output, str):
        return JSONResponse({"error": "output must be a string"}, status_code=400)
    pipeline = _pipeline(request)
    content = pipeline.normalize(output)
    body = content.to_dict()
    if payload.get("highlight"):
        document = HtmlDocument(content.rendered_html)
        report = await pipeline.highlight(document)
        body["highlightedHtml"] = document.html
        body["highlight"] = report.to_dict()
    return body


@app.post("/api/query")
async def query_api(payload: dict, request: Request):
    query = str(payload.get("query") or "").strip()
    if not query:
        return JSONResponse({"error": "query required"}, status_code=400)
    try:
        agents = _parse_agents(payload.get("agents"))
    except ResponseFormatError as exc:
        return JSONResponse({"error": str(exc)}, status_code=400)
    result = await _pipeline(request).run_query(query, agents)
    return result.to_dict()


def main():
    import uvicorn
    config = get_config()
    host = config.server.get("host", "127.0.0.1")
    port = int(config.server.get("port", 8099))
    uvicorn.run("hivemind.server:app", host=host, port=port, reload=False)


if __name__ == "__main__":
    main()
