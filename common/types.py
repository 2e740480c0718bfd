"""Shared data type definitions (ChunkDescriptor, SplitManifest)."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Tuple

from common.constants import MANIFEST_FORMAT_VERSION


@dataclass(frozen=True)
class ChunkDescriptor:
    """
    Metadata for a single stored part of a split file.
    """
    index: int
    stored_size: int
    original_size: int
    digest: str
    path: str


@dataclass(frozen=True)
class SplitManifest:
    """
    Everything needed to rebuild one original file from its parts.
    """
    original_filename: str
    original_size: int
    size_limit: int
    compressed: bool
    digest: str
    chunks: Tuple[ChunkDescriptor, ...]
    created_at: datetime
    format_version: int = field(default=MANIFEST_FORMAT_VERSION)

    @property
    def chunk_count(self) -> int:
        return len(self.chunks)

    @property
    def stored_size(self) -> int:
        """Total bytes occupied by the part files on disk."""
        return sum(chunk.stored_size for chunk in self.chunks)
