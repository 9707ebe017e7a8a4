# SPDX-FileCopyrightText: 2025 Blackcat Informatics® Inc.
# SPDX-License-Identifier: MIT

"""Progress output and external command execution."""

from __future__ import annotations

import subprocess
import sys
from pathlib import Path
from typing import List, Optional, Sequence, Type

from kcov_pipeline.errors import PipelineError

TAG = "[coverage]"


def log(message: str) -> None:
    print(f"{TAG} {message}", flush=True)


def log_error(message: str) -> None:
    print(f"{TAG} error: {message}", file=sys.stderr, flush=True)


def run_command(
    cmd: Sequence[str],
    error: Type[PipelineError],
    cwd: Optional[Path] = None,
) -> None:
    """Run ``cmd`` with inherited output streams.

    A missing program or a nonzero exit raises ``error`` carrying the
    command's return code.
    """
    args: List[str] = [str(part) for part in cmd]
    log(f"running {' '.join(args)}")
    try:
        subprocess.run(args, cwd=cwd, check=True)
    except FileNotFoundError:
        raise error(f"command not found: {args[0]}", returncode=127) from None
    except subprocess.CalledProcessError as exc:
        raise error(
            f"{' '.join(args)} exited with status {exc.returncode}",
            returncode=exc.returncode,
        ) from None


def capture_command(cmd: Sequence[str]) -> Optional[str]:
    """Return stdout of ``cmd``, or None when it cannot be run or fails."""
    try:
        result = subprocess.run(
            [str(part) for part in cmd],
            check=True,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
        )
    except (OSError, subprocess.CalledProcessError):
        return None
    return result.stdout.strip()
