"""Custom exception classes for split and restore operations."""

from typing import Optional


class RedSplitError(Exception):
    """
    Base exception class for all RedSplit errors.
    """
    pass


class InvalidConfigError(RedSplitError):
    """
    Raised when a size limit or path is rejected before any I/O happens.
    """
    pass


class StorageIOError(RedSplitError):
    """
    Raised when reading, writing or creating a file fails.
    """

    def __init__(self, message: str, path=None):
        super().__init__(message)
        self.path = path


class InvalidManifestError(RedSplitError):
    """
    Raised when a manifest cannot be read or is not a valid manifest document.
    """

    def __init__(self, message: str, path=None):
        super().__init__(message)
        self.path = path


class CorruptManifestError(RedSplitError):
    """
    Raised when a manifest parses but is structurally inconsistent.
    """
    pass


class ChunkError(RedSplitError):
    """
    Base class for restoration problems tied to one chunk.
    """

    def __init__(self, index: int, message: str, path=None):
        super().__init__(f"Chunk {index}: {message}")
        self.index = index
        self.path = path


class MissingChunkError(ChunkError):
    """
    Raised when a chunk file named by the manifest does not exist.
    """
    pass


class ChunkIntegrityError(ChunkError):
    """
    Raised when a chunk's stored bytes do not match its recorded size or digest.
    """
    pass


class DecompressionError(ChunkError):
    """
    Raised when a compressed chunk cannot be decompressed.
    """
    pass


class IntegrityError(RedSplitError):
    """
    Raised when the rebuilt file's digest differs from the manifest.

    The rebuilt file is left on disk at ``path`` so the caller can inspect
    or discard it.
    """

    def __init__(self, message: str, path=None, expected: Optional[str] = None, actual: Optional[str] = None):
        super().__init__(message)
        self.path = path
        self.expected = expected
        self.actual = actual


class OperationCancelledError(RedSplitError):
    """
    Raised when a cancellation token is set between chunks.
    """
    pass
