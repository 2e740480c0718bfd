"""Tests for checksum helpers."""

import hashlib

import pytest

from common.checksum import (
    IncrementalChecksumCalculator,
    compute_checksum,
    verify_checksum,
)


def test_compute_checksum_matches_sha256():
    assert compute_checksum(b"hello") == hashlib.sha256(b"hello").hexdigest()


def test_verify_checksum_accepts_uppercase_hex():
    expected = hashlib.sha256(b"payload").hexdigest().upper()
    assert verify_checksum(b"payload", expected)
    assert not verify_checksum(b"payload2", expected)


def test_incremental_equals_one_shot():
    calculator = IncrementalChecksumCalculator()
    for piece in (b"abc", b"", b"defgh", b"i" * 1000):
        calculator.update(piece)

    assert calculator.bytes_seen == 1008
    assert calculator.finalize() == compute_checksum(b"abcdefgh" + b"i" * 1000)


def test_incremental_rejects_update_after_finalize():
    calculator = IncrementalChecksumCalculator()
    calculator.update(b"x")
    calculator.finalize()

    with pytest.raises(ValueError):
        calculator.update(b"y")
