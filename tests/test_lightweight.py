# SPDX-FileCopyrightText: 2025 Blackcat Informatics® Inc.
# SPDX-License-Identifier: MIT

import os
import subprocess
import sys
from pathlib import Path

from kcov_pipeline.errors import BuildError, ConfigError, InstrumentationError, PipelineError

ROOT = Path(__file__).resolve().parents[1]


def test_cli_help():
    env = os.environ.copy()
    env["PYTHONPATH"] = str(ROOT / "src")
    result = subprocess.run(
        [sys.executable, "-m", "kcov_pipeline", "--help"],
        cwd=ROOT,
        env=env,
        capture_output=True,
        text=True,
    )
    assert result.returncode == 0
    assert "usage: coverage-pipeline" in result.stdout
    assert "--binary-pattern" in result.stdout


def test_error_exit_codes():
    assert BuildError("make failed", returncode=2).exit_code == 2
    assert InstrumentationError("killed", returncode=-9).exit_code == 137
    assert PipelineError("boom").exit_code == 1
    assert ConfigError("bad", returncode=5).exit_code == 2
    assert str(BuildError("make failed")) == "build: make failed"
