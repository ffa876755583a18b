"""Immutable in-memory document store."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from memexfs.config import StoreConfig
from memexfs.errors import DocumentNotFound, EmptyCorpus
from memexfs.retrieval.index import InvertedIndex
from memexfs.types import Document

logger = logging.getLogger(__name__)

_ROOT_ALIASES = frozenset({"", ".", "/"})


class DocumentStore:
    """Owns the corpus documents and the inverted index built over them.

    Construction is the only mutating step: documents are sorted by path,
    assigned ascending integer ids, split into lines and indexed. Every public
    method afterwards is a pure read, so one instance can serve any number of
    concurrent callers without locking.
    """

    def __init__(
        self,
        docs: Iterable[tuple[str, str]],
        config: StoreConfig | None = None,
    ) -> None:
        self.config = config or StoreConfig()

        contents: dict[str, str] = {}
        for path, content in docs:
            if path in contents:
                logger.warning("Duplicate document path %s; keeping the later content", path)
            contents[path] = content
        if not contents:
            raise EmptyCorpus()

        documents: list[Document] = []
        for doc_id, path in enumerate(sorted(contents)):
            lines = _split_lines(contents[path])
            documents.append(
                Document(
                    doc_id=doc_id,
                    path=path,
                    lines=lines,
                    lines_lower=tuple(line.lower() for line in lines),
                )
            )

        self._documents: tuple[Document, ...] = tuple(documents)
        self._by_path: dict[str, Document] = {doc.path: doc for doc in documents}
        self._index = InvertedIndex(self._documents)
        logger.info(
            "Built document store: %d documents, %d tokens",
            len(self._documents),
            self._index.token_count(),
        )

    @property
    def index(self) -> InvertedIndex:
        return self._index

    @property
    def documents(self) -> tuple[Document, ...]:
        """Documents in id order (ascending path)."""
        return self._documents

    def document_count(self) -> int:
        return len(self._documents)

    def token_count(self) -> int:
        return self._index.token_count()

    def paths(self) -> list[str]:
        return [doc.path for doc in self._documents]

    def get_document(self, path: str) -> Document | None:
        return self._by_path.get(path)

    def document_by_id(self, doc_id: int) -> Document:
        return self._documents[doc_id]

    def read(
        self,
        path: str,
        offset: int | None = None,
        limit: int | None = None,
    ) -> str:
        """Return a line-numbered slice of a document.

        Args:
            path: Document path as stored.
            offset: 1-indexed first line, defaults to 1.
            limit: Number of lines, defaults to the rest of the document.
                Always capped at ``config.max_read_lines``.

        Returns:
            Lines rendered as ``<number>  <text>``, numbers right-aligned to
            the widest number in the slice. An offset past the end yields an
            empty string.
        """

        document = self._by_path.get(path)
        if document is None:
            raise DocumentNotFound(path)

        start = max(offset or 1, 1) - 1
        if start >= document.line_count:
            return ""

        max_lines = self.config.max_read_lines
        count = max_lines if limit is None else min(max(limit, 0), max_lines)
        end = min(start + count, document.line_count)
        if end <= start:
            return ""

        width = len(str(end))
        return "\n".join(
            f"{line_number:>{width}}  {document.lines[line_number - 1]}"
            for line_number in range(start + 1, end + 1)
        )

    def ls(self, path: str) -> list[str]:
        """List the immediate children of a virtual directory.

        Subdirectories are reported once with a trailing ``/``. The listing is
        derived from document paths only; an unknown directory is empty.
        """

        prefix = "" if path in _ROOT_ALIASES else path.rstrip("/") + "/"
        entries: set[str] = set()
        for document in self._documents:
            if not document.path.startswith(prefix):
                continue
            rest = document.path[len(prefix) :]
            head, sep, _ = rest.partition("/")
            entries.add(f"{head}/" if sep else head)
        return sorted(entries)


def _split_lines(content: str) -> tuple[str, ...]:
    lines = content.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    return tuple(line[:-1] if line.endswith("\r") else line for line in lines)
