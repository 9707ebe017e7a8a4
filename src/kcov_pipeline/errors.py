# SPDX-FileCopyrightText: 2025 Blackcat Informatics® Inc.
# SPDX-License-Identifier: MIT

"""Failure kinds raised by the coverage pipeline.

Every kind aborts the run the same way; the distinction only shapes the
message printed by the CLI and the exit status it returns.
"""

from __future__ import annotations

from typing import Optional


class PipelineError(Exception):
    step = "pipeline"

    def __init__(self, message: str, returncode: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.returncode = returncode

    @property
    def exit_code(self) -> int:
        if self.returncode is None or self.returncode == 0:
            return 1
        if self.returncode < 0:
            # killed by a signal; report it the way a shell would
            return 128 - self.returncode
        return self.returncode

    def __str__(self) -> str:
        return f"{self.step}: {self.message}"


class ConfigError(PipelineError):
    step = "config"

    @property
    def exit_code(self) -> int:
        return 2


class FetchError(PipelineError):
    step = "fetch"


class BuildError(PipelineError):
    step = "build"


class DiscoveryError(PipelineError):
    step = "discover"


class InstrumentationError(PipelineError):
    step = "instrument"


class ThresholdError(PipelineError):
    step = "summary"


class UploadError(PipelineError):
    step = "upload"
