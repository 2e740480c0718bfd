"""JSON manifest encoding/decoding backed by pydantic schemas."""

from datetime import datetime, timezone
from typing import List

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from common.constants import MANIFEST_FORMAT_VERSION
from common.exceptions import InvalidManifestError
from common.types import ChunkDescriptor, SplitManifest


class ChunkEntrySchema(BaseModel):
    """On-disk form of one chunk descriptor."""
    model_config = ConfigDict(extra="ignore", strict=True)

    index: int = Field(ge=0)
    stored_size: int = Field(ge=0)
    original_size: int = Field(ge=0)
    digest: str = Field(min_length=1)
    path: str = Field(min_length=1)


class ManifestSchema(BaseModel):
    """On-disk form of a split manifest."""
    model_config = ConfigDict(extra="ignore", strict=True)

    format_version: int = MANIFEST_FORMAT_VERSION
    original_filename: str = Field(min_length=1)
    original_size: int = Field(ge=0)
    size_limit: int
    compressed: bool
    digest: str = Field(min_length=1)
    created_at: datetime
    chunks: List[ChunkEntrySchema]


def encode_manifest(manifest: SplitManifest) -> bytes:
    """
    Serialize a manifest to pretty-printed UTF-8 JSON.

    Args:
        manifest: Manifest produced by a split pass

    Returns:
        JSON document as bytes
    """
    schema = ManifestSchema(
        format_version=manifest.format_version,
        original_filename=manifest.original_filename,
        original_size=manifest.original_size,
        size_limit=manifest.size_limit,
        compressed=manifest.compressed,
        digest=manifest.digest,
        created_at=manifest.created_at,
        chunks=[
            ChunkEntrySchema(
                index=chunk.index,
                stored_size=chunk.stored_size,
                original_size=chunk.original_size,
                digest=chunk.digest,
                path=chunk.path,
            )
            for chunk in manifest.chunks
        ],
    )
    return schema.model_dump_json(indent=2).encode('utf-8') + b"\n"


def decode_manifest(data: bytes) -> SplitManifest:
    """
    Parse manifest bytes into a SplitManifest.

    Unknown fields are ignored so that manifests written by newer builds with
    additional optional fields stay readable.

    Args:
        data: Raw manifest file content

    Returns:
        Decoded SplitManifest

    Raises:
        InvalidManifestError: If the bytes are not a valid manifest document
    """
    try:
        text = data.decode('utf-8')
    except UnicodeDecodeError as e:
        raise InvalidManifestError(f"Manifest is not valid UTF-8: {e}") from e

    try:
        schema = ManifestSchema.model_validate_json(text)
    except ValidationError as e:
        raise InvalidManifestError(f"Malformed manifest: {_summarize(e)}") from e

    if schema.format_version > MANIFEST_FORMAT_VERSION:
        raise InvalidManifestError(
            f"Unsupported manifest format version {schema.format_version} "
            f"(this build reads up to {MANIFEST_FORMAT_VERSION})"
        )

    created_at = schema.created_at
    if created_at.tzinfo is None:
        created_at = created_at.replace(tzinfo=timezone.utc)

    return SplitManifest(
        original_filename=schema.original_filename,
        original_size=schema.original_size,
        size_limit=schema.size_limit,
        compressed=schema.compressed,
        digest=schema.digest.lower(),
        chunks=tuple(
            ChunkDescriptor(
                index=entry.index,
                stored_size=entry.stored_size,
                original_size=entry.original_size,
                digest=entry.digest.lower(),
                path=entry.path,
            )
            for entry in schema.chunks
        ),
        created_at=created_at,
        format_version=schema.format_version,
    )


def _summarize(error: ValidationError) -> str:
    parts = []
    for item in error.errors():
        location = ".".join(str(p) for p in item.get("loc", ())) or "<root>"
        parts.append(f"{location}: {item.get('msg')}")
    return "; ".join(parts)
