"""Failure taxonomy shared by the store, the query engine and tool dispatch."""

from __future__ import annotations


class MemexError(Exception):
    """Base class for every error raised by memexfs."""


class EmptyCorpus(MemexError):
    def __init__(self) -> None:
        super().__init__("no documents provided")


class DocumentNotFound(MemexError):
    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"document not found: {path}")


class InvalidPattern(MemexError):
    def __init__(self, pattern: str, reason: str) -> None:
        self.pattern = pattern
        self.reason = reason
        super().__init__(f"invalid pattern {pattern!r}: {reason}")


class UnknownTool(MemexError):
    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"unknown tool: {name}")
