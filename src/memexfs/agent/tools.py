"""Built-in tool implementations: grep, read and ls over one store."""

from __future__ import annotations

import json
from dataclasses import asdict

from pydantic import BaseModel, Field

from memexfs.agent.registry import ToolDispatch, ToolName, ToolSpec
from memexfs.retrieval.query import QueryEngine
from memexfs.retrieval.store import DocumentStore


class GrepToolInput(BaseModel):
    pattern: str = Field(description="Search pattern (supports regex)")
    glob: str | None = Field(
        default=None,
        description="Optional file pattern filter, e.g. 'billing/**/*.md'",
    )


class ReadToolInput(BaseModel):
    path: str = Field(description="Document path relative to the knowledge base root")
    offset: int | None = Field(
        default=None,
        ge=0,
        description="Line number to start reading from (1-indexed)",
    )
    limit: int | None = Field(default=None, ge=0, description="Number of lines to return")


class LsToolInput(BaseModel):
    path: str = Field(
        description=(
            "Directory path to list, e.g. 'account' or 'billing/invoices'. "
            "Use empty string or '.' for root."
        )
    )


def build_tool_dispatch(store: DocumentStore, engine: QueryEngine) -> ToolDispatch:
    """Build the fixed tool table used by agents and the HTTP surface.

    Tools:
    - `grep`: case-insensitive line search, JSON array of matches.
    - `read`: line-numbered document text.
    - `ls`: JSON array of the immediate children of a directory.
    """

    def _grep(input_data: GrepToolInput) -> str:
        results = engine.grep(input_data.pattern, input_data.glob)
        return json.dumps([asdict(result) for result in results], ensure_ascii=False)

    def _read(input_data: ReadToolInput) -> str:
        return store.read(input_data.path, input_data.offset, input_data.limit)

    def _ls(input_data: LsToolInput) -> str:
        return json.dumps(store.ls(input_data.path), ensure_ascii=False)

    return ToolDispatch(
        [
            ToolSpec(
                name=ToolName.GREP,
                description=(
                    "Search for a pattern across all documents. Returns matching file "
                    "paths, line numbers, and content. Use this to find relevant "
                    "documents before reading them."
                ),
                args_schema=GrepToolInput,
                handler=_grep,
            ),
            ToolSpec(
                name=ToolName.READ,
                description=(
                    "Read the contents of a document. Returns the full document or a "
                    "specific line range. Use this after grep to get the full context "
                    "of a matching document."
                ),
                args_schema=ReadToolInput,
                handler=_read,
            ),
            ToolSpec(
                name=ToolName.LS,
                description=(
                    "List the contents of a directory. Returns immediate children: file "
                    "names and subdirectory names (with trailing '/'). Use this to "
                    "explore the document structure before grepping or reading."
                ),
                args_schema=LsToolInput,
                handler=_ls,
            ),
        ]
    )
