"""Tests for the tar archive adapter."""

import io
import os
import tarfile

import pytest

from depcache.adapters import TarArchiveAdapter
from depcache.core import ArchiveError


@pytest.fixture()
def archiver():
    return TarArchiveAdapter()


def test_archive_root_is_single_dot_component(archiver, gem_tree, tmp_path):
    archive = tmp_path / "deps.tar.gz"

    archiver.create(gem_tree, archive, compress=True)

    with tarfile.open(archive, "r:gz") as tar:
        names = tar.getnames()
    assert all(name == "." or name.startswith("./") for name in names)
    assert "./gems/test.gem" in names
    assert not any("src_bundle" in name for name in names)


def test_extract_strips_leading_component(archiver, gem_tree, tmp_path):
    archive = tmp_path / "deps.tar"
    archiver.create(gem_tree, archive, compress=False)
    target = tmp_path / "any-name"
    target.mkdir()

    archiver.extract(archive, target)

    assert (target / "gems" / "test.gem").read_bytes() == b"gem payload \x00\x01"
    assert (target / "specifications" / "test.gemspec").exists()


def test_relative_symlinks_survive(archiver, tmp_path):
    source = tmp_path / "node_modules"
    (source / "pkg").mkdir(parents=True)
    (source / "pkg" / "cli.js").write_text("#!/usr/bin/env node\n")
    (source / ".bin").mkdir()
    os.symlink("../pkg/cli.js", source / ".bin" / "pkg")
    archive = tmp_path / "nm.tar.gz"
    archiver.create(source, archive, compress=True)
    target = tmp_path / "restored"
    target.mkdir()

    archiver.extract(archive, target)

    link = target / ".bin" / "pkg"
    assert link.is_symlink()
    assert os.readlink(link) == "../pkg/cli.js"
    assert link.read_text().startswith("#!")


def test_absolute_symlink_survives(archiver, tmp_path):
    source = tmp_path / ".venv"
    (source / "bin").mkdir(parents=True)
    os.symlink("/usr/bin/python3", source / "bin" / "python")
    archive = tmp_path / "venv.tar.gz"
    archiver.create(source, archive, compress=True)
    target = tmp_path / "restored"
    target.mkdir()

    archiver.extract(archive, target)

    link = target / "bin" / "python"
    assert link.is_symlink()
    assert os.readlink(link) == "/usr/bin/python3"


def test_symlink_out_of_tree_survives(archiver, tmp_path):
    (tmp_path / "packages" / "shared").mkdir(parents=True)
    (tmp_path / "packages" / "shared" / "index.js").write_text("module.exports = 1\n")
    source = tmp_path / "node_modules"
    source.mkdir()
    os.symlink("../packages/shared", source / "shared")
    archive = tmp_path / "nm.tar"
    archiver.create(source, archive, compress=False)
    target = tmp_path / "restored"
    target.mkdir()

    archiver.extract(archive, target)

    link = target / "shared"
    assert link.is_symlink()
    assert os.readlink(link) == "../packages/shared"
    assert (link / "index.js").read_text() == "module.exports = 1\n"


def test_extract_rejects_paths_outside_target(archiver, tmp_path):
    archive = tmp_path / "evil.tar"
    payload = b"owned"
    with tarfile.open(archive, "w") as tar:
        info = tarfile.TarInfo("./../escaped.txt")
        info.size = len(payload)
        tar.addfile(info, io.BytesIO(payload))
    target = tmp_path / "target"
    target.mkdir()

    with pytest.raises(ArchiveError):
        archiver.extract(archive, target)
    assert not (tmp_path / "escaped.txt").exists()


def test_extract_of_garbage_raises_archive_error(archiver, tmp_path):
    archive = tmp_path / "garbage.tar.gz"
    archive.write_bytes(b"not an archive")

    with pytest.raises(ArchiveError):
        archiver.extract(archive, tmp_path)
