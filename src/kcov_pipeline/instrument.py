# SPDX-FileCopyrightText: 2025 Blackcat Informatics® Inc.
# SPDX-License-Identifier: MIT

"""Run the test executable under kcov."""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional, Sequence

from kcov_pipeline.errors import InstrumentationError
from kcov_pipeline.shell import log, run_command


def kcov_command(
    kcov: Path,
    binary: Path,
    output_dir: Path,
    exclude_patterns: Sequence[str],
    verify: bool = True,
) -> List[str]:
    cmd = [str(kcov)]
    if exclude_patterns:
        cmd.append(f"--exclude-pattern={','.join(exclude_patterns)}")
    if verify:
        cmd.append("--verify")
    cmd += [str(output_dir), str(binary)]
    return cmd


def run_kcov(
    kcov: Path,
    binary: Path,
    output_dir: Path,
    exclude_patterns: Sequence[str],
    verify: bool = True,
    cwd: Optional[Path] = None,
) -> Path:
    output_dir.mkdir(parents=True, exist_ok=True)
    cmd = kcov_command(kcov, binary, output_dir, exclude_patterns, verify)
    run_command(cmd, InstrumentationError, cwd=cwd)
    if not any(output_dir.iterdir()):
        raise InstrumentationError(f"kcov produced no output in {output_dir}")
    log(f"coverage written to {output_dir}")
    return output_dir
