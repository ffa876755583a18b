"""Collect ``(path, content)`` pairs from disk or from their JSON form."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from memexfs.config import LoaderConfig

logger = logging.getLogger(__name__)


def collect_documents(
    root: str | Path,
    config: LoaderConfig | None = None,
) -> list[tuple[str, str]]:
    """Recursively read matching files under ``root``.

    Returns pairs of forward-slash relative path and file content, sorted by
    path, ready for :class:`~memexfs.retrieval.store.DocumentStore`.
    """

    config = config or LoaderConfig()
    root_path = Path(root)
    if not root_path.is_dir():
        raise FileNotFoundError(f"Corpus directory not found: {root_path}")

    extensions = {extension.lower() for extension in config.extensions}
    docs: list[tuple[str, str]] = []
    for file_path in root_path.rglob("*"):
        if not file_path.is_file() or file_path.suffix.lower() not in extensions:
            continue
        relative = file_path.relative_to(root_path).as_posix()
        docs.append((relative, file_path.read_text(encoding=config.encoding)))

    docs.sort(key=lambda pair: pair[0])
    logger.info("Collected %d documents from %s", len(docs), root_path)
    return docs


def parse_documents_json(payload: str) -> list[tuple[str, str]]:
    """Decode a JSON array of ``[path, content]`` pairs."""

    try:
        decoded: Any = json.loads(payload)
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid documents JSON: {exc}") from exc

    if not isinstance(decoded, list):
        raise ValueError("Documents JSON must be an array of [path, content] pairs")

    docs: list[tuple[str, str]] = []
    for position, item in enumerate(decoded):
        if (
            not isinstance(item, list)
            or len(item) != 2
            or not all(isinstance(part, str) for part in item)
        ):
            raise ValueError(f"Entry {position} is not a [path, content] string pair")
        docs.append((item[0], item[1]))
    return docs
