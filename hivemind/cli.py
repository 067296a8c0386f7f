"""Command line interface for Hivemind."""
from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any

from hivemind.client import Agent
from hivemind.config import get_config
from hivemind.errors import ResponseFormatError
from hivemind.highlight import HtmlDocument
from hivemind.models import QueryResult, parse_responses
from hivemind.pipeline import HivemindPipeline
from hivemind.stats import parse_ratings


def _print(obj: Any) -> None:
    print(json.dumps(obj, indent=2))


def _read_input(path: str) -> str:
    if path == "-":
        return sys.stdin.read()
    return Path(path).expanduser().read_text(encoding="utf-8")


def _load_results(path: str) -> tuple[str, list, dict]:
    data = json.loads(_read_input(path))
    if isinstance(data, dict):
        query_id = str(data.get("queryId") or Path(path).stem)
        return query_id, data.get("results") or [], parse_ratings(data.get("ratings"))
    if isinstance(data, list):
        return Path(path).stem, data, {}
    raise ResponseFormatError("expected a list of responses or an object with 'results'")


def cmd_evaluate(args: argparse.Namespace) -> int:
    pipeline = HivemindPipeline(get_config())
    try:
        query_id, items, ratings = _load_results(args.file)
        responses = parse_responses(items)
    except (ResponseFormatError, json.JSONDecodeError) as exc:
        print(f"[hivemind] invalid input: {exc}", file=sys.stderr)
        return 2
    result = pipeline.process(QueryResult(query_id=query_id, responses=responses), ratings=ratings)
    if args.summary:
        _print({
            "queryId": result.query_id,
            "masterEvaluation": result.evaluation.to_dict() if result.evaluation else None,
            "stats": result.stats,
        })
    else:
        _print(result.to_dict())
    return 0


def cmd_render(args: argparse.Namespace) -> int:
    pipeline = HivemindPipeline(get_config())
    content = pipeline.normalize(_read_input(args.file))
    if args.highlight:
        document = HtmlDocument(content.rendered_html)
        report = asyncio.run(pipeline.highlight(document))
        _print({**content.to_dict(), "highlightedHtml": document.html, "highlight": report.to_dict()})
    elif args.html:
        print(content.rendered_html)
    else:
        _print(content.to_dict())
    return 0


def cmd_query(args: argparse.Namespace) -> int:
    pipeline = HivemindPipeline(get_config())
    agents = [Agent(name=name) for name in (args.agent or [])]
    result = asyncio.run(pipeline.run_query(args.query, agents))
    _print(result.to_dict())
    return 1 if result.transport_error else 0


def cmd_serve(args: argparse.Namespace) -> int:
    import uvicorn
    config = get_config()
    host = args.host or config.server.get("host", "127.0.0.1")
    port = int(args.port or config.server.get("port", 8099))
    uvicorn.run("hivemind.server:app", host=host, port=port, reload=False)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="hivemind")
    parser.add_argument("--verbose", "-v", action="store_true")
    sub = parser.add_subparsers(dest="command")

    evaluate = sub.add_parser("evaluate", help="Rank and render a saved set of worker responses")
    evaluate.add_argument("file", help="JSON file ('-' for stdin)")
    evaluate.add_argument("--summary", action="store_true", help="Print only the evaluation and stats")

    render = sub.add_parser("render", help="Normalize and render one worker output")
    render.add_argument("file", help="Text file ('-' for stdin)")
    render.add_argument("--html", action="store_true", help="Print rendered HTML only")
    render.add_argument("--highlight", action="store_true", help="Run the highlight pass over the result")

    query = sub.add_parser("query", help="Send a query to the backend and process the answers")
    query.add_argument("query")
    query.add_argument("--agent", action="append", help="Agent name (repeatable)")

    serve = sub.add_parser("serve")
    serve.add_argument("--host")
    serve.add_argument("--port", type=int)
    return parser


def main() -> None:
    parser = build_parser()
    args = parser.parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
    if args.command == "evaluate":
        sys.exit(cmd_evaluate(args))
    elif args.command == "render":
        sys.exit(cmd_render(args))
    elif args.command == "query":
        sys.exit(cmd_query(args))
    elif args.command == "serve":
        sys.exit(cmd_serve(args))
    else:
        parser.print_help()


if __name__ == "__main__":
    main()
