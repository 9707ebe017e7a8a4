# SPDX-FileCopyrightText: 2025 Blackcat Informatics® Inc.
# SPDX-License-Identifier: MIT

"""Locate the prebuilt test executable to run under kcov.

Patterns use ``find -wholename`` semantics: they are matched against
``./``-prefixed paths relative to the working directory and ``*`` may span
directory separators, so ``./native/target/debug/carta_schema-*`` and
``./target/debug/carta_schema-*`` both work.
"""

from __future__ import annotations

import fnmatch
import os
from pathlib import Path
from typing import Iterable, Iterator, List, Optional

from kcov_pipeline.errors import DiscoveryError

SKIP_DIRS = {".git"}


def normalize_pattern(pattern: str) -> str:
    pattern = pattern.strip()
    if pattern.startswith("/"):
        return pattern
    if not pattern.startswith("./"):
        pattern = "./" + pattern
    return pattern


def is_executable(path: Path) -> bool:
    return path.is_file() and os.access(path, os.X_OK)


def walk(root: Path, skip: Iterable[Path] = ()) -> Iterator[Path]:
    skipped = {p.resolve() for p in skip}
    for dirpath, dirnames, filenames in os.walk(root):
        current = Path(dirpath)
        dirnames[:] = sorted(
            d for d in dirnames
            if d not in SKIP_DIRS and (current / d).resolve() not in skipped
        )
        for name in sorted(filenames):
            yield current / name


def candidates(root: Path, pattern: str, skip: Iterable[Path] = ()) -> List[Path]:
    pattern = normalize_pattern(pattern)
    absolute = pattern.startswith("/")
    matches: List[Path] = []
    for path in walk(root, skip):
        if absolute:
            name = str(path.resolve())
        else:
            name = "./" + path.relative_to(root).as_posix()
        if fnmatch.fnmatchcase(name, pattern) and is_executable(path):
            matches.append(path)
    return matches


def find_test_binary(root: Path, pattern: str, skip: Optional[Iterable[Path]] = None) -> Path:
    """Return the single executable under ``root`` matching ``pattern``."""
    matches = candidates(root, pattern, skip or ())
    if not matches:
        raise DiscoveryError(f"no test executable matches {pattern!r} under {root}")
    if len(matches) > 1:
        listing = ", ".join(str(m.relative_to(root)) for m in matches)
        raise DiscoveryError(f"ambiguous pattern {pattern!r}: {listing}")
    return matches[0]
