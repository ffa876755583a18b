"""Shared domain models."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True, slots=True)
class Document:
    """One corpus entry, split into lines at construction time."""

    doc_id: int
    path: str
    lines: tuple[str, ...]
    lines_lower: tuple[str, ...]

    @property
    def line_count(self) -> int:
        return len(self.lines)


@dataclass(frozen=True, slots=True)
class GrepResult:
    """A single matching line."""

    path: str
    line: int
    content: str


@dataclass(slots=True)
class ToolTrace:
    """Trace record for an executed tool call."""

    name: str
    input_payload: dict[str, Any]
    output_preview: str
    latency_ms: float
