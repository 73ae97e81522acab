"""
Document sources -- where the batch runner gets its articles from.

A source has a display name and an async load() returning one parsed
article. Decoding problems surface as ParseError; the batch runner records
them against the source and moves on.
"""

import asyncio
import json
import logging
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

from ..enforcement.errors import ParseError

logger = logging.getLogger(__name__)


@runtime_checkable
class DocumentSource(Protocol):
    """Interface the batch runner loads articles through.

    Example:
        class SanitySource:
            name = "vitamin-c"

            async def load(self): ...
    """

    @property
    def name(self) -> str: ...

    async def load(self) -> Any: ...


class InMemorySource:
    """An already-parsed article."""

    def __init__(self, document: Any, name: str | None = None):
        self._document = document
        self.name = name or _guess_name(document)

    async def load(self) -> Any:
        return self._document


class JsonFileSource:
    """One article stored as a JSON file. The read runs off the event loop."""

    def __init__(self, path: str | Path):
        self.path = Path(path)
        self.name = str(self.path)

    async def load(self) -> Any:
        try:
            text = await asyncio.to_thread(self.path.read_text, encoding="utf-8")
        except UnicodeDecodeError as e:
            raise ParseError(self.name, f"not UTF-8 text: {e.reason}") from e
        try:
            return json.loads(text)
        except json.JSONDecodeError as e:
            raise ParseError(self.name, f"invalid JSON at line {e.lineno}: {e.msg}") from e


def _guess_name(document: Any) -> str:
    if isinstance(document, dict):
        for key in ("slug", "name", "_id"):
            value = document.get(key)
            if isinstance(value, dict):
                value = value.get("current")
            if isinstance(value, str) and value:
                return value
    return "<document>"


def expand_paths(paths: list[str | Path]) -> list[JsonFileSource]:
    """File paths as-is, directories expanded to their *.json files (sorted)."""
    sources = []
    for raw in paths:
        path = Path(raw)
        if path.is_dir():
            found = sorted(path.glob("*.json"))
            if not found:
                logger.warning(f"[Sources] No .json files in {path}")
            sources.extend(JsonFileSource(p) for p in found)
        else:
            sources.append(JsonFileSource(path))
    return sources
