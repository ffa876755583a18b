"""Inverted index over document lines."""

from __future__ import annotations

import re
from collections.abc import Iterable

from memexfs.types import Document

_TOKEN_PATTERN = re.compile(r"\w+", flags=re.UNICODE)

Occurrence = tuple[int, int]


def tokenize(text: str) -> list[str]:
    """Split text into case-folded runs of alphanumeric/underscore characters."""
    return _TOKEN_PATTERN.findall(text.lower())


class InvertedIndex:
    """Maps each token to the ordered ``(doc_id, line)`` pairs where it occurs.

    The index is built in one pass from the full document set and exposes no
    mutation API afterwards. Posting lists are tuples ordered by document id,
    then line number, and a line is recorded at most once per token even when
    the token repeats within it.
    """

    def __init__(self, documents: Iterable[Document]) -> None:
        postings: dict[str, list[Occurrence]] = {}
        for document in documents:
            for line_number, line in enumerate(document.lines_lower, start=1):
                for token in set(_TOKEN_PATTERN.findall(line)):
                    postings.setdefault(token, []).append((document.doc_id, line_number))
        # Documents arrive in id order, so each list is already sorted.
        self._postings: dict[str, tuple[Occurrence, ...]] = {
            token: tuple(occurrences) for token, occurrences in postings.items()
        }

    def lookup(self, token: str) -> tuple[Occurrence, ...]:
        return self._postings.get(token, ())

    def token_count(self) -> int:
        return len(self._postings)

    def tokens(self) -> frozenset[str]:
        return frozenset(self._postings)

    def find_containing(self, fragment: str) -> list[Occurrence]:
        """Return occurrences of every token that contains ``fragment``.

        ``fragment`` must already be lowercased. The exact token is resolved
        first; the remaining vocabulary is scanned so that a fragment embedded
        in a longer word (``arch`` in ``archive``) is found as well.
        """
        hits: set[Occurrence] = set(self.lookup(fragment))
        for token, occurrences in self._postings.items():
            if token != fragment and fragment in token:
                hits.update(occurrences)
        return sorted(hits)
