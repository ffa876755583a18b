"""Facade bundling one store, its query engine and its tool table."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

from memexfs.agent.registry import ToolDefinition, ToolDispatch
from memexfs.agent.tools import build_tool_dispatch
from memexfs.config import LoaderConfig, StoreConfig
from memexfs.ingest.loader import collect_documents, parse_documents_json
from memexfs.obs.tracing import Timer
from memexfs.retrieval.query import QueryEngine
from memexfs.retrieval.store import DocumentStore
from memexfs.types import GrepResult

logger = logging.getLogger(__name__)


class MemexFS:
    """Grep/read/ls over a small in-memory corpus.

    Instances are immutable after construction and safe to share between
    threads. To scale out, build independent instances over the same corpus.
    """

    def __init__(
        self,
        docs: Iterable[tuple[str, str]],
        config: StoreConfig | None = None,
    ) -> None:
        with Timer() as timer:
            self.store = DocumentStore(docs, config)
            self.engine = QueryEngine(self.store)
            self.tools: ToolDispatch = build_tool_dispatch(self.store, self.engine)
        logger.info(
            "MemexFS ready: %d documents in %.1f ms",
            self.store.document_count(),
            timer.elapsed_ms,
        )

    @classmethod
    def from_documents(
        cls, docs: Iterable[tuple[str, str]], config: StoreConfig | None = None
    ) -> MemexFS:
        return cls(docs, config)

    @classmethod
    def from_json(cls, payload: str, config: StoreConfig | None = None) -> MemexFS:
        return cls(parse_documents_json(payload), config)

    @classmethod
    def from_directory(
        cls,
        root: str | Path,
        *,
        loader_config: LoaderConfig | None = None,
        config: StoreConfig | None = None,
    ) -> MemexFS:
        return cls(collect_documents(root, loader_config), config)

    def grep(self, pattern: str, glob: str | None = None) -> list[GrepResult]:
        return self.engine.grep(pattern, glob)

    def read(self, path: str, offset: int | None = None, limit: int | None = None) -> str:
        return self.store.read(path, offset, limit)

    def ls(self, path: str = "") -> list[str]:
        return self.store.ls(path)

    def tool_definitions(self) -> list[ToolDefinition]:
        return self.tools.tool_definitions()

    def call(self, name: str, payload: str | Mapping[str, Any]) -> str:
        return self.tools.call(name, payload)

    def document_count(self) -> int:
        return self.store.document_count()

    def token_count(self) -> int:
        return self.store.token_count()
