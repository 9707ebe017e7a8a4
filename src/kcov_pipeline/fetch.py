# SPDX-FileCopyrightText: 2025 Blackcat Informatics® Inc.
# SPDX-License-Identifier: MIT

"""Download and unpack the kcov source release."""

from __future__ import annotations

import http.client
import shutil
import tarfile
import tempfile
import urllib.request
from pathlib import Path
from typing import Set, Type

from kcov_pipeline.errors import FetchError, PipelineError
from kcov_pipeline.shell import log

USER_AGENT = "kcov-pipeline"
CHUNK_SIZE = 64 * 1024


def download(url: str, dest: Path, timeout: float, error: Type[PipelineError] = FetchError) -> Path:
    """Stream ``url`` into ``dest``; nothing is left behind on failure."""
    log(f"fetching {url}")
    req = urllib.request.Request(url, headers={"User-Agent": USER_AGENT})
    try:
        with urllib.request.urlopen(req, timeout=timeout) as resp, dest.open("wb") as fh:
            shutil.copyfileobj(resp, fh, CHUNK_SIZE)
    except (OSError, http.client.HTTPException, ValueError) as exc:
        dest.unlink(missing_ok=True)
        reason = getattr(exc, "reason", None) or exc
        raise error(f"could not fetch {url}: {reason}") from None
    return dest


def _member_root(name: str) -> str:
    """Top-level directory of a member path; unsafe paths raise ``FetchError``."""
    if name.startswith("/"):
        raise FetchError(f"archive member {name!r} has an absolute path")
    parts = [part for part in name.split("/") if part not in ("", ".")]
    if ".." in parts:
        raise FetchError(f"archive member {name!r} points outside the archive")
    return parts[0] if parts else ""


def _top_level_dirs(tar: tarfile.TarFile) -> Set[str]:
    roots: Set[str] = set()
    for member in tar.getmembers():
        root = _member_root(member.name)
        if root:
            roots.add(root)
    return roots


def unpack(archive: Path, dest: Path) -> Path:
    """Extract ``archive`` under ``dest`` and return its source directory.

    The archive must hold exactly one top-level directory, as release
    tarballs do. It is extracted into a scratch directory first; a tree of
    the same name left by an earlier run is only replaced once extraction
    has succeeded.
    """
    log(f"unpacking {archive.name}")
    scratch = Path(tempfile.mkdtemp(prefix=".unpack-", dir=dest))
    try:
        with tarfile.open(archive, "r:*") as tar:
            roots = _top_level_dirs(tar)
            if len(roots) != 1:
                raise FetchError(
                    f"{archive.name} should contain one top-level directory, found {len(roots)}"
                )
            root = roots.pop()
            if hasattr(tarfile, "data_filter"):
                tar.extractall(scratch, filter="data")
            else:
                log("this Python has no tarfile extraction filters; extracting unfiltered")
                tar.extractall(scratch)
        extracted = scratch / root
        if not extracted.is_dir():
            raise FetchError(f"{archive.name} did not unpack to a directory")
        source = dest / root
        if source.exists():
            log(f"removing stale source tree {source.name}")
            shutil.rmtree(source)
        extracted.rename(source)
    except (tarfile.TarError, EOFError, OSError) as exc:
        raise FetchError(f"could not unpack {archive.name}: {exc}") from None
    finally:
        shutil.rmtree(scratch, ignore_errors=True)
    return source
