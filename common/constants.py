"""Project-wide constants (size defaults, naming, manifest format)."""

DEFAULT_SIZE_LIMIT_BYTES: int = 100 * 1024 * 1024  # 100 MiB default part size

MANIFEST_FORMAT_VERSION: int = 1
MANIFEST_SUFFIX = ".json"

PARTS_DIR_SUFFIX = "_parts"
PARTIAL_SUFFIX = ".partial"
COMPRESSED_CHUNK_SUFFIX = ".gz"
CHUNK_NUMBER_WIDTH = 3

GZIP_COMPRESSION_LEVEL = 6

DEFAULT_MAX_WORKERS = 4
