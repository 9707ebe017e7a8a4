# SPDX-FileCopyrightText: 2025 Blackcat Informatics® Inc.
# SPDX-License-Identifier: MIT

"""Compile kcov and install it into the staging directory."""

from __future__ import annotations

import re
import shutil
from pathlib import Path
from typing import List, Optional

from packaging.version import InvalidVersion, Version

from kcov_pipeline.config import PipelineConfig
from kcov_pipeline.errors import BuildError
from kcov_pipeline.shell import capture_command, log, run_command


def build_and_install(config: PipelineConfig, source: Path) -> Path:
    """Run cmake, make and ``make install DESTDIR=<staging>``.

    Returns the path of the installed kcov binary.
    """
    build_dir = source / "build"
    build_dir.mkdir(exist_ok=True)

    run_command([config.cmake_bin, ".."], BuildError, cwd=build_dir)

    make_cmd: List[str] = [config.make_bin]
    if config.make_jobs:
        make_cmd += ["-j", str(config.make_jobs)]
    run_command(make_cmd, BuildError, cwd=build_dir)

    run_command(
        [config.make_bin, "install", f"DESTDIR={config.staging_path}"],
        BuildError,
        cwd=build_dir,
    )

    kcov = config.kcov_path
    if not kcov.is_file():
        raise BuildError(f"install finished but {kcov} is missing")
    log(f"installed {kcov}")
    return kcov


def remove_sources(*paths: Path) -> None:
    for path in paths:
        if path.is_dir():
            shutil.rmtree(path)
        elif path.exists():
            path.unlink()


def normalize_version(text: str) -> Optional[str]:
    """Pull a version number out of ``kcov --version`` output (``kcov v42``)."""
    match = re.search(r"[vV]?(\d+(?:\.\d+)*)", text or "")
    if not match:
        return None
    return match.group(1)


def installed_version(kcov: Path) -> Optional[str]:
    output = capture_command([kcov, "--version"])
    if output is None:
        return None
    return normalize_version(output)


def reusable_tool(config: PipelineConfig) -> Optional[Path]:
    """Return the staged kcov when it may be used instead of rebuilding."""
    kcov = config.kcov_path
    if not kcov.is_file():
        return None
    if not config.min_tool_version:
        return kcov

    found = installed_version(kcov)
    if found is None:
        log(f"could not read the version of {kcov}; rebuilding")
        return None
    try:
        if Version(found) < Version(config.min_tool_version):
            log(f"staged kcov {found} is older than {config.min_tool_version}; rebuilding")
            return None
    except InvalidVersion:
        log(f"cannot compare kcov version {found!r} with {config.min_tool_version!r}; rebuilding")
        return None
    return kcov
