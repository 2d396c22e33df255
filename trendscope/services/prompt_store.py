"""Prompt catalogue backed by ``trendscope/prompts/prompts.json``.

Entries are addressed with dotted keys (``research_mind.system``). A value is
either a string or a list of lines, joined with newlines so long prompts stay
readable in the JSON file. Placeholders use ``string.Template`` syntax
(``$name``), so JSON braces in prompt text need no escaping.
"""
from __future__ import annotations

import json
from pathlib import Path
from string import Template
from typing import Any


PROMPTS_PATH = Path(__file__).resolve().parents[1] / "prompts" / "prompts.json"


class PromptCatalog:
    """Prompt texts from one JSON file, re-read whenever the file changes."""

    def __init__(self, path: Path):
        self.path = Path(path)
        self._entries: dict[str, Any] | None = None
        self._mtime_ns: int | None = None

    def _current(self) -> dict[str, Any]:
        mtime_ns = self.path.stat().st_mtime_ns
        if self._entries is None or self._mtime_ns != mtime_ns:
            payload = json.loads(self.path.read_text(encoding="utf-8"))
            if not isinstance(payload, dict):
                raise ValueError(f"Prompt catalog must be a JSON object: {self.path}")
            self._entries = payload
            self._mtime_ns = mtime_ns
        return self._entries

    def get(self, key: str) -> str:
        """Raw (unrendered) text for ``key``."""
        node: Any = self._current()
        for part in key.split("."):
            if not isinstance(node, dict) or part not in node:
                raise KeyError(f"Prompt key not found: {key}")
            node = node[part]
        if isinstance(node, list) and all(isinstance(line, str) for line in node):
            return "\n".join(node)
        if not isinstance(node, str):
            raise TypeError(f"Prompt key must map to a string or list of strings: {key}")
        return node

    def render(self, key: str, **values: Any) -> str:
        template = Template(self.get(key))
        try:
            return template.substitute(**values)
        except KeyError as exc:
            raise KeyError(f"Missing template value '{exc.args[0]}' for prompt '{key}'") from exc


_catalog = PromptCatalog(PROMPTS_PATH)


def get_prompt(key: str) -> str:
    return _catalog.get(key)


def render_prompt(key: str, **values: Any) -> str:
    return _catalog.render(key, **values)
