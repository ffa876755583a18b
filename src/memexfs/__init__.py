"""MemexFS package."""

from .config import LoaderConfig, StoreConfig
from .core import MemexFS
from .errors import DocumentNotFound, EmptyCorpus, InvalidPattern, MemexError, UnknownTool
from .types import GrepResult

__all__ = [
    "DocumentNotFound",
    "EmptyCorpus",
    "GrepResult",
    "InvalidPattern",
    "LoaderConfig",
    "MemexError",
    "MemexFS",
    "StoreConfig",
    "UnknownTool",
]
