# SPDX-FileCopyrightText: 2025 Blackcat Informatics® Inc.
# SPDX-License-Identifier: MIT

import io
import socket
import tarfile

import pytest

from kcov_pipeline.errors import FetchError, UploadError
from kcov_pipeline.fetch import download, unpack


def make_archive(path, names):
    with tarfile.open(path, "w:gz") as tar:
        for name in names:
            data = b"x\n"
            info = tarfile.TarInfo(name)
            info.size = len(data)
            tar.addfile(info, io.BytesIO(data))
    return path


def closed_port():
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]


def test_unpack_returns_source_dir(tmp_path):
    archive = make_archive(tmp_path / "master.tar.gz", ["kcov-master/CMakeLists.txt", "kcov-master/src/a.c"])

    source = unpack(archive, tmp_path)

    assert source == tmp_path / "kcov-master"
    assert (source / "src" / "a.c").read_text() == "x\n"


def test_unpack_replaces_stale_tree(tmp_path):
    archive = make_archive(tmp_path / "master.tar.gz", ["kcov-master/CMakeLists.txt"])
    stale = tmp_path / "kcov-master" / "build"
    stale.mkdir(parents=True)

    source = unpack(archive, tmp_path)

    assert not (source / "build").exists()


def test_unpack_rejects_multiple_roots(tmp_path):
    archive = make_archive(tmp_path / "odd.tar.gz", ["one/a", "two/b"])

    with pytest.raises(FetchError, match="one top-level directory"):
        unpack(archive, tmp_path)


def test_unpack_rejects_corrupt_archive(tmp_path):
    archive = tmp_path / "master.tar.gz"
    archive.write_bytes(b"<html>not a tarball</html>")

    with pytest.raises(FetchError, match="could not unpack"):
        unpack(archive, tmp_path)


def test_download_failure_leaves_nothing(tmp_path):
    dest = tmp_path / "master.tar.gz"

    with pytest.raises(FetchError, match="could not fetch"):
        download(f"http://127.0.0.1:{closed_port()}/master.tar.gz", dest, timeout=5)
    assert not dest.exists()


def test_download_error_kind_is_configurable(tmp_path):
    with pytest.raises(UploadError):
        download(f"http://127.0.0.1:{closed_port()}/bash", tmp_path / "up.sh", timeout=5, error=UploadError)


@pytest.mark.parametrize("member", ["/abs/file", "../sibling/file", "kcov-master/../../escape"])
def test_unsafe_members_are_rejected_before_anything_is_removed(tmp_path, member):
    work = tmp_path / "work"
    project = work / "native" / "src" / "lib.rs"
    project.parent.mkdir(parents=True)
    project.write_text("fn main() {}\n")
    sibling = tmp_path / "sibling" / "keep"
    sibling.parent.mkdir()
    sibling.write_text("keep\n")
    archive = make_archive(work / "master.tar.gz", [member])

    with pytest.raises(FetchError, match="absolute path|outside the archive"):
        unpack(archive, work)

    assert project.read_text() == "fn main() {}\n"
    assert sibling.exists()
    assert sorted(p.name for p in work.iterdir()) == ["master.tar.gz", "native"]


def test_failed_extraction_keeps_existing_tree(tmp_path):
    existing = tmp_path / "kcov-master" / "CMakeLists.txt"
    existing.parent.mkdir()
    existing.write_text("old\n")
    archive = make_archive(tmp_path / "odd.tar.gz", ["kcov-master/a", "other/b"])

    with pytest.raises(FetchError):
        unpack(archive, tmp_path)

    assert existing.read_text() == "old\n"


def test_unfiltered_extraction_is_reported(tmp_path, monkeypatch, capsys):
    monkeypatch.delattr(tarfile, "data_filter", raising=False)
    archive = make_archive(tmp_path / "master.tar.gz", ["kcov-master/CMakeLists.txt"])

    source = unpack(archive, tmp_path)

    assert (source / "CMakeLists.txt").exists()
    assert "extracting unfiltered" in capsys.readouterr().out
