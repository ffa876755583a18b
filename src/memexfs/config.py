"""Configuration models for memexfs."""

from __future__ import annotations

from pydantic import BaseModel, Field


class StoreConfig(BaseModel):
    """Result and slice limits applied by the store and the query engine."""

    max_grep_results: int = Field(default=100, ge=1)
    max_read_lines: int = Field(default=2000, ge=1)


class LoaderConfig(BaseModel):
    """Controls which files are collected from a corpus directory."""

    extensions: tuple[str, ...] = Field(default=(".md",), min_length=1)
    encoding: str = "utf-8"
