"""Grep over a document store: pattern classification, scoping, ordering."""

from __future__ import annotations

import logging
import re
from enum import Enum
from functools import lru_cache

import re2

from memexfs.errors import InvalidPattern
from memexfs.retrieval.index import tokenize
from memexfs.retrieval.store import DocumentStore
from memexfs.types import Document, GrepResult

logger = logging.getLogger(__name__)

_REGEX_METACHARACTERS = frozenset(".*+?[]{}()|^$\\")


class MatchMode(str, Enum):
    """How a pattern is matched, decided once per query."""

    TOKEN = "token"
    PHRASE = "phrase"
    REGEX = "regex"


def classify(pattern: str) -> MatchMode:
    if any(char in _REGEX_METACHARACTERS for char in pattern):
        return MatchMode.REGEX
    lowered = pattern.lower()
    if tokenize(lowered) == [lowered]:
        return MatchMode.TOKEN
    return MatchMode.PHRASE


@lru_cache(maxsize=256)
def compile_glob(glob: str) -> re.Pattern[str]:
    """Translate a path glob into an anchored regular expression.

    ``*`` stays within one path segment, ``**`` crosses segments, and a
    ``**/`` prefix may also match zero segments. Everything else is literal.
    """

    parts: list[str] = []
    i = 0
    while i < len(glob):
        if glob.startswith("**/", i):
            parts.append("(?:.*/)?")
            i += 3
        elif glob.startswith("**", i):
            parts.append(".*")
            i += 2
        elif glob[i] == "*":
            parts.append("[^/]*")
            i += 1
        else:
            parts.append(re.escape(glob[i]))
            i += 1
    return re.compile("".join(parts), flags=re.DOTALL)


def glob_match(glob: str, path: str) -> bool:
    return compile_glob(glob).fullmatch(path) is not None


class QueryEngine:
    """Stateless grep over an immutable :class:`DocumentStore`.

    Algorithm per call:
    1. Classify the pattern as ``TOKEN``, ``PHRASE`` or ``REGEX``.
    2. Restrict the candidate documents with the glob, if any.
    3. ``TOKEN`` resolves hits through the inverted index only; ``PHRASE``
       scans lowercased lines for the substring; ``REGEX`` compiles the
       pattern case-insensitively with RE2 and searches every candidate line,
       so matching time stays linear in the line length.
    4. Each matching line is reported once, results are ordered by
       ``(path, line)`` and the first ``max_grep_results`` are returned.

    Document ids follow path order, so ordering by ``(doc_id, line)`` is the
    same as ordering by ``(path, line)``.
    """

    def __init__(self, store: DocumentStore) -> None:
        self.store = store

    def grep(self, pattern: str, glob: str | None = None) -> list[GrepResult]:
        if not pattern:
            raise InvalidPattern(pattern, "empty search pattern")

        mode = classify(pattern)
        compiled = _compile_pattern(pattern) if mode is MatchMode.REGEX else None
        candidates = self._candidates(glob)
        if not candidates:
            return []

        if mode is MatchMode.TOKEN:
            hits = self._token_hits(pattern.lower(), candidates)
        elif mode is MatchMode.PHRASE:
            hits = self._phrase_hits(pattern.lower(), candidates)
        else:
            hits = self._regex_hits(compiled, candidates)

        ordered = sorted(set(hits))
        limit = self.store.config.max_grep_results
        logger.debug(
            "grep pattern=%r glob=%r mode=%s matches=%d",
            pattern,
            glob,
            mode.value,
            len(ordered),
        )
        results: list[GrepResult] = []
        for doc_id, line_number in ordered[:limit]:
            document = self.store.document_by_id(doc_id)
            results.append(
                GrepResult(
                    path=document.path,
                    line=line_number,
                    content=document.lines[line_number - 1],
                )
            )
        return results

    def _candidates(self, glob: str | None) -> dict[int, Document]:
        documents = self.store.documents
        if glob is None:
            return {doc.doc_id: doc for doc in documents}
        compiled = compile_glob(glob)
        return {
            doc.doc_id: doc for doc in documents if compiled.fullmatch(doc.path) is not None
        }

    def _token_hits(
        self, token: str, candidates: dict[int, Document]
    ) -> list[tuple[int, int]]:
        return [
            occurrence
            for occurrence in self.store.index.find_containing(token)
            if occurrence[0] in candidates
        ]

    @staticmethod
    def _phrase_hits(
        needle: str, candidates: dict[int, Document]
    ) -> list[tuple[int, int]]:
        hits: list[tuple[int, int]] = []
        for doc_id, document in candidates.items():
            for line_number, line in enumerate(document.lines_lower, start=1):
                if needle in line:
                    hits.append((doc_id, line_number))
        return hits

    @staticmethod
    def _regex_hits(
        compiled: re2._Regexp, candidates: dict[int, Document]
    ) -> list[tuple[int, int]]:
        hits: list[tuple[int, int]] = []
        for doc_id, document in candidates.items():
            for line_number, line in enumerate(document.lines, start=1):
                if compiled.search(line) is not None:
                    hits.append((doc_id, line_number))
        return hits


def _compile_pattern(pattern: str) -> re2._Regexp:
    """Compile a user pattern with RE2, which matches in linear time."""
    options = re2.Options()
    options.case_sensitive = False
    options.log_errors = False
    try:
        return re2.compile(pattern, options)
    except re2.error as exc:
        raise InvalidPattern(pattern, str(exc)) from exc
