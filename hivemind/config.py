"""Configuration loader for Hivemind."""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict
import os
import yaml

DEFAULT_CONFIG_PATH = Path(__file__).resolve().parent.parent / "config" / "default.yaml"
USER_CONFIG_PATH = Path.home() / ".config" / "hivemind" / "config.yaml"

DEFAULT_WEIGHTS = {"length": 0.30, "confidence": 0.40, "speed": 0.30}


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    result = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(result.get(key), dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _env_int(name: str) -> int | None:
    value = os.getenv(name)
    if not value:
        return None
    try:
        return int(value)
    except ValueError:
        return None


def load_config(path: Path | None = None) -> Dict[str, Any]:
    data: Dict[str, Any] = {}
    if DEFAULT_CONFIG_PATH.exists():
        data = yaml.safe_load(DEFAULT_CONFIG_PATH.read_text()) or {}
    user_path = path or USER_CONFIG_PATH
    if user_path.exists():
        override = yaml.safe_load(user_path.read_text()) or {}
        data = _deep_merge(data, override)

    # Environment overrides - Server
    host = os.getenv("HIVEMIND_HOST")
    if host:
        data.setdefault("server", {})["host"] = host
    port = _env_int("HIVEMIND_PORT")
    if port is not None:
        data.setdefault("server", {})["port"] = port

    # Environment overrides - Query backend
    backend_url = os.getenv("HIVEMIND_BACKEND_URL")
    if backend_url:
        data.setdefault("backend", {})["base_url"] = backend_url

    data_dir = os.getenv("HIVEMIND_DATA_DIR")
    if data_dir:
        data["data_dir"] = data_dir

    # Environment overrides - Highlight polling
    attempts = _env_int("HIVEMIND_HIGHLIGHT_ATTEMPTS")
    if attempts is not None:
        data.setdefault("highlight", {})["max_attempts"] = attempts
    delay = _env_int("HIVEMIND_HIGHLIGHT_DELAY_MS")
    if delay is not None:
        data.setdefault("highlight", {})["base_delay_ms"] = delay

    audit = os.getenv("HIVEMIND_AUDIT")
    if audit is not None:
        data.setdefault("audit", {})["enabled"] = audit.lower() in ("true", "1", "yes")

    return data


@dataclass
class Config:
    raw: Dict[str, Any]

    @property
    def server(self) -> Dict[str, Any]:
        return self.raw.get("server", {})

    @property
    def backend(self) -> Dict[str, Any]:
        return self.raw.get("backend", {})

    @property
    def backend_url(self) -> str:
        return str(self.backend.get("base_url", "http://localhost:8080")).rstrip("/")

    @property
    def backend_timeout_seconds(self) -> float:
        """Timeout for one query round-trip. Default 90 seconds."""
        return float(self.backend.get("timeout_seconds", 90))

    @property
    def data_dir(self) -> Path:
        default = str(Path.home() / ".hivemind")
        return Path(self.raw.get("data_dir", default)).expanduser()

    @property
    def ranking(self) -> Dict[str, Any]:
        return self.raw.get("ranking", {})

    @property
    def ranking_weights(self) -> Dict[str, float]:
        weights = dict(DEFAULT_WEIGHTS)
        for key, value in (self.ranking.get("weights") or {}).items():
            if key in weights:
                weights[key] = float(value)
        return weights

    @property
    def render(self) -> Dict[str, Any]:
        return self.raw.get("render", {})

    @property
    def highlight(self) -> Dict[str, Any]:
        return self.raw.get("highlight", {})

    @property
    def highlight_max_attempts(self) -> int:
        return max(1, int(self.highlight.get("max_attempts", 5)))

    @property
    def highlight_base_delay_ms(self) -> int:
        return max(0, int(self.highlight.get("base_delay_ms", 100)))

    @property
    def audit_enabled(self) -> bool:
        return bool((self.raw.get("audit") or {}).get("enabled", False))

    @property
    def audit_path(self) -> Path:
        path = (self.raw.get("audit") or {}).get("path")
        return Path(path).expanduser() if path else self.data_dir / "audit.jsonl"


def get_config() -> Config:
    return Config(load_config())
