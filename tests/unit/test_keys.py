"""Tests for lockfile hashing and key derivation."""

import dataclasses
import hashlib

import pytest

from depcache.core import LockfileNotFoundError, stack_for


def test_hash_is_truncated_sha256_of_contents(service, lockfile):
    expected = hashlib.sha256(lockfile.read_bytes()).hexdigest()

    assert service.lockfile_hash(lockfile) == expected[:16]
    assert service.full_hash(lockfile) == expected


def test_hash_ignores_path_and_mtime(service, tmp_path):
    first = tmp_path / "a" / "Gemfile.lock"
    second = tmp_path / "b" / "other.lock"
    for path in (first, second):
        path.parent.mkdir()
        path.write_bytes(b"GEM\n  specs:\n    rack (3.0.8)\n")

    assert service.lockfile_hash(first) == service.lockfile_hash(second)


def test_hash_changes_when_one_byte_is_appended(service, lockfile):
    before = service.lockfile_hash(lockfile)
    with open(lockfile, "ab") as f:
        f.write(b"\n")

    assert service.lockfile_hash(lockfile) != before


def test_hash_of_missing_lockfile_raises(service, tmp_path):
    with pytest.raises(LockfileNotFoundError):
        service.lockfile_hash(tmp_path / "missing.lock")


@pytest.mark.parametrize(
    ("cache_type", "stack"),
    [("bundle", "ruby"), ("npm", "node"), ("pip", "python"), ("cargo", "rust"), ("gomod", "go"), ("yarn", "yarn")],
)
def test_stack_mapping(cache_type, stack):
    assert stack_for(cache_type) == stack


def test_key_format(service):
    key = service.cache_key("bundle", "abc123def4567890")

    assert key.full_key == "test-bucket/test-prefix/ruby/bundle-abc123def4567890.tar.gz"
    assert key.url == "s3://test-bucket/test-prefix/ruby/bundle-abc123def4567890.tar.gz"


def test_key_without_compression(make_service, config):
    service = make_service(dataclasses.replace(config, compression=False))

    assert service.cache_key("npm", "xyz789").full_key == "test-bucket/test-prefix/node/npm-xyz789.tar"


def test_key_is_deterministic(service):
    assert service.cache_key("npm", "0123456789abcdef") == service.cache_key("npm", "0123456789abcdef")
    assert service.cache_key("npm", "0123456789abcdef") != service.cache_key("bundle", "0123456789abcdef")
