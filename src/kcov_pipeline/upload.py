# SPDX-FileCopyrightText: 2025 Blackcat Informatics® Inc.
# SPDX-License-Identifier: MIT

"""Hand the coverage output to the hosted uploader bootstrap script."""

from __future__ import annotations

import tempfile
from pathlib import Path

from kcov_pipeline.config import PipelineConfig
from kcov_pipeline.errors import UploadError
from kcov_pipeline.fetch import download
from kcov_pipeline.shell import log, run_command


def upload(config: PipelineConfig) -> None:
    """Fetch the uploader script and run it from the working directory.

    The script inherits the process environment, so CI tokens reach it
    unchanged. It discovers the kcov output on its own.
    """
    with tempfile.TemporaryDirectory(prefix="coverage-upload-") as tmp:
        script = Path(tmp) / "uploader.sh"
        download(config.uploader_url, script, config.fetch_timeout, error=UploadError)
        try:
            run_command([config.bash_bin, script], UploadError, cwd=config.workdir)
        except UploadError as exc:
            raise UploadError(f"uploader failed: {exc.message}", returncode=exc.returncode) from None
    log("Uploaded code coverage")
