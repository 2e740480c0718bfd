"""Tests for the split pipeline."""

import gzip
import hashlib
import json

import pytest

from common.exceptions import InvalidConfigError, OperationCancelledError, StorageIOError
from core.manifest_codec import decode_manifest
from core.progress import CancellationToken, CallbackProgressReporter
from core.splitter import manifest_path_for, split_file


class TestChunking:
    """Window partitioning and chunk bookkeeping."""

    def test_250_bytes_with_limit_100(self, sample_file, output_dir):
        manifest = split_file(sample_file, 100, output_dir)

        assert manifest.original_filename == "data.bin"
        assert manifest.original_size == 250
        assert manifest.size_limit == 100
        assert [c.index for c in manifest.chunks] == [0, 1, 2]
        assert [c.original_size for c in manifest.chunks] == [100, 100, 50]
        assert [c.stored_size for c in manifest.chunks] == [100, 100, 50]

    def test_chunk_files_hold_original_windows(self, sample_file, output_dir):
        manifest = split_file(sample_file, 100, output_dir)
        content = sample_file.read_bytes()

        for chunk in manifest.chunks:
            stored = (output_dir / chunk.path).read_bytes()
            assert stored == content[chunk.index * 100:(chunk.index + 1) * 100]
            assert chunk.digest == hashlib.sha256(stored).hexdigest()

    def test_chunk_naming(self, sample_file, output_dir):
        manifest = split_file(sample_file, 100, output_dir)

        assert [c.path for c in manifest.chunks] == [
            "data.bin_parts/data.bin-001",
            "data.bin_parts/data.bin-002",
            "data.bin_parts/data.bin-003",
        ]

    @pytest.mark.parametrize("size_limit,expected", [(1, 250), (7, 36), (125, 2), (249, 2), (250, 1)])
    def test_chunk_count_is_ceiling(self, sample_file, output_dir, size_limit, expected):
        manifest = split_file(sample_file, size_limit, output_dir)

        assert manifest.chunk_count == expected
        assert sum(c.original_size for c in manifest.chunks) == 250

    def test_limit_larger_than_file_gives_one_chunk(self, sample_file, output_dir):
        manifest = split_file(sample_file, 10 * 1024 * 1024, output_dir)

        assert manifest.chunk_count == 1
        assert manifest.chunks[0].original_size == 250

    def test_empty_file_gives_zero_chunks(self, empty_file, output_dir):
        manifest = split_file(empty_file, 100, output_dir)

        assert manifest.chunk_count == 0
        assert manifest.original_size == 0
        assert manifest.digest == hashlib.sha256(b"").hexdigest()
        assert manifest_path_for(output_dir, "empty.dat").exists()

    def test_whole_file_digest(self, random_file, output_dir):
        manifest = split_file(random_file, 999, output_dir)

        assert manifest.digest == hashlib.sha256(random_file.read_bytes()).hexdigest()


class TestCompression:
    """Gzip mode."""

    def test_compressed_chunks_are_gzip_members(self, compressible_file, output_dir):
        manifest = split_file(compressible_file, 4096, output_dir, compress=True)
        content = compressible_file.read_bytes()

        assert manifest.compressed is True
        restored = b"".join(gzip.decompress((output_dir / c.path).read_bytes()) for c in manifest.chunks)
        assert restored == content
        assert all(c.path.endswith(".gz") for c in manifest.chunks)

    def test_compressed_stored_sizes_smaller(self, compressible_file, output_dir):
        compressed = split_file(compressible_file, 4096, output_dir / "gz", compress=True)
        raw = split_file(compressible_file, 4096, output_dir / "raw", compress=False)

        assert compressed.stored_size < compressed.original_size
        assert raw.stored_size == raw.original_size

    def test_digest_covers_stored_bytes(self, compressible_file, output_dir):
        manifest = split_file(compressible_file, 4096, output_dir, compress=True)

        for chunk in manifest.chunks:
            stored = (output_dir / chunk.path).read_bytes()
            assert chunk.stored_size == len(stored)
            assert chunk.digest == hashlib.sha256(stored).hexdigest()

    def test_compression_is_deterministic(self, compressible_file, output_dir):
        first = split_file(compressible_file, 4096, output_dir / "a", compress=True)
        second = split_file(compressible_file, 4096, output_dir / "b", compress=True)

        assert [c.digest for c in first.chunks] == [c.digest for c in second.chunks]


class TestManifestFile:
    """The persisted manifest."""

    def test_manifest_written_next_to_chunks(self, sample_file, output_dir):
        manifest = split_file(sample_file, 100, output_dir)
        manifest_path = output_dir / "data.bin_parts" / "data.bin.json"

        assert manifest_path_for(output_dir, "data.bin") == manifest_path
        assert decode_manifest(manifest_path.read_bytes()) == manifest

    def test_manifest_is_json(self, sample_file, output_dir):
        split_file(sample_file, 100, output_dir)

        doc = json.loads(manifest_path_for(output_dir, "data.bin").read_text())
        assert doc["original_size"] == 250
        assert len(doc["chunks"]) == 3

    def test_creates_missing_output_directory(self, sample_file, tmp_path):
        nested = tmp_path / "a" / "b" / "c"

        split_file(sample_file, 100, nested)

        assert (nested / "data.bin_parts").is_dir()


class TestInvalidConfig:
    """Rejections before any side effect."""

    @pytest.mark.parametrize("size_limit", [0, -5, True, 1.5, "100"])
    def test_bad_size_limit(self, sample_file, output_dir, size_limit):
        with pytest.raises(InvalidConfigError):
            split_file(sample_file, size_limit, output_dir)

        assert not output_dir.exists()

    def test_missing_source(self, tmp_path, output_dir):
        with pytest.raises(InvalidConfigError, match="not found"):
            split_file(tmp_path / "nope.bin", 100, output_dir)

        assert not output_dir.exists()

    def test_source_is_directory(self, tmp_path, output_dir):
        with pytest.raises(InvalidConfigError):
            split_file(tmp_path, 100, output_dir)

    def test_output_dir_is_a_file(self, sample_file, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("x")

        with pytest.raises(InvalidConfigError):
            split_file(sample_file, 100, blocker)


class TestFailuresMidPass:
    """I/O errors and cancellation after work has started."""

    def test_unwritable_parts_directory(self, sample_file, output_dir):
        output_dir.mkdir()
        (output_dir / "data.bin_parts").write_text("in the way")

        with pytest.raises(StorageIOError) as exc_info:
            split_file(sample_file, 100, output_dir)

        assert exc_info.value.path == output_dir / "data.bin_parts"

    def test_source_growing_during_split(self, sample_file, output_dir):
        def grow(processed, total):
            if processed == 100:
                with open(sample_file, "ab") as f:
                    f.write(b"more")

        with pytest.raises(StorageIOError, match="size mismatch"):
            split_file(sample_file, 100, output_dir, progress=CallbackProgressReporter(grow))

        assert not manifest_path_for(output_dir, "data.bin").exists()

    def test_cancel_between_chunks_keeps_written_chunks(self, sample_file, output_dir):
        token = CancellationToken()

        def cancel_after_first(processed, total):
            token.cancel()

        with pytest.raises(OperationCancelledError):
            split_file(
                sample_file, 100, output_dir,
                progress=CallbackProgressReporter(cancel_after_first),
                cancel_token=token,
            )

        parts = output_dir / "data.bin_parts"
        assert (parts / "data.bin-001").exists()
        assert not (parts / "data.bin-002").exists()
        assert not (parts / "data.bin.json").exists()


class TestProgress:
    """Progress events."""

    def test_reports_cumulative_bytes_per_chunk(self, sample_file, output_dir, recorder):
        split_file(sample_file, 100, output_dir, progress=recorder)

        assert recorder.events == [(100, 250), (200, 250), (250, 250)]

    def test_compressed_progress_counts_source_bytes(self, compressible_file, output_dir, recorder):
        size = compressible_file.stat().st_size

        split_file(compressible_file, 4096, output_dir, compress=True, progress=recorder)

        assert recorder.events[-1] == (size, size)

    def test_empty_file_reports_completion(self, empty_file, output_dir, recorder):
        split_file(empty_file, 100, output_dir, progress=recorder)

        assert recorder.events == [(0, 0)]


class TestSharedTargets:
    """Pipelines that would write the same parts directory."""

    def test_second_split_of_same_name_is_refused_while_first_runs(self, tmp_path, output_dir):
        first = tmp_path / "a" / "x.bin"
        second = tmp_path / "b" / "x.bin"
        first.parent.mkdir()
        second.parent.mkdir()
        first.write_bytes(b"A" * 200)
        second.write_bytes(b"B" * 150)
        errors = []

        def split_other(processed, total):
            if processed == 100:
                try:
                    split_file(second, 100, output_dir)
                except InvalidConfigError as e:
                    errors.append(e)

        manifest = split_file(first, 100, output_dir, progress=CallbackProgressReporter(split_other))

        assert len(errors) == 1
        assert "already being written" in str(errors[0])
        chunks = [(output_dir / c.path).read_bytes() for c in manifest.chunks]
        assert chunks == [b"A" * 100, b"A" * 100]
        assert decode_manifest(manifest_path_for(output_dir, "x.bin").read_bytes()).digest == manifest.digest

    def test_name_is_free_again_after_split(self, sample_file, output_dir):
        split_file(sample_file, 100, output_dir)

        assert split_file(sample_file, 50, output_dir).chunk_count == 5

    def test_no_temporary_manifest_left_behind(self, sample_file, output_dir):
        split_file(sample_file, 100, output_dir)

        names = sorted(p.name for p in (output_dir / "data.bin_parts").iterdir())
        assert names == ["data.bin-001", "data.bin-002", "data.bin-003", "data.bin.json"]
