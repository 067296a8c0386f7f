"""Per-query audit trail for Hivemind evaluations.

Each entry is one JSON line keyed by the query it belongs to, so a single
query's evaluation and highlight passes can be read back together.
"""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional
import json
import time

from hivemind import __version__


@dataclass
class AuditLog:
    path: Path

    def log(self, event: str, query_id: Optional[str] = None, data: Dict[str, Any] | None = None) -> None:
        entry = {
            "ts": time.strftime("%Y-%m-%dT%H:%M:%S"),
            "event": event,
            "query_id": query_id,
            "version": __version__,
            "data": data or {},
        }
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open("a", encoding="utf-8") as handle:
            handle.write(json.dumps(entry, sort_keys=True) + "\n")

    def events(self, event: str | None = None, query_id: str | None = None) -> List[Dict[str, Any]]:
        """Logged entries, filtered by event name and/or query id."""
        if not self.path.exists():
            return []
        entries = []
        for line in self.path.read_text(encoding="utf-8").splitlines():
            if not line.strip():
                continue
            entry = json.loads(line)
            if event is not None and entry.get("event") != event:
                continue
            if query_id is not None and entry.get("query_id") != query_id:
                continue
            entries.append(entry)
        return entries

    def for_query(self, query_id: str) -> List[Dict[str, Any]]:
        return self.events(query_id=query_id)
