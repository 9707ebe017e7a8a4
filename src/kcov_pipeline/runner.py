# SPDX-FileCopyrightText: 2025 Blackcat Informatics® Inc.
# SPDX-License-Identifier: MIT

"""Coverage pipeline runner.

Steps run strictly in order and the first failure aborts the run:

1. fetch the kcov release archive
2. unpack it
3. configure and compile it
4. install it under the staging directory
5. delete the unpacked sources
6. find the prebuilt test executable
7. run it under kcov
8. upload the report

Steps 1-5 are skipped when ``reuse_tool`` is set and a suitable kcov is
already staged. A coverage summary is printed between steps 7 and 8 and may
stop the run when ``fail_under`` is set.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from kcov_pipeline import build, discover, fetch, instrument, summary, upload
from kcov_pipeline.config import PipelineConfig
from kcov_pipeline.shell import log
from kcov_pipeline.summary import CoverageSummary


@dataclass
class PipelineResult:
    kcov: Path
    binary: Path
    output_dir: Path
    summary: Optional[CoverageSummary] = None
    uploaded: bool = False


class CoveragePipeline:
    def __init__(self, config: PipelineConfig):
        self.config = config

    def install_tool(self) -> Path:
        cfg = self.config
        if cfg.reuse_tool:
            staged = build.reusable_tool(cfg)
            if staged is not None:
                log(f"reusing staged {staged}")
                return staged

        archive = cfg.workdir / cfg.archive_name
        fetch.download(cfg.archive_url, archive, cfg.fetch_timeout)
        source = fetch.unpack(archive, cfg.workdir)
        kcov = build.build_and_install(cfg, source)
        build.remove_sources(source, archive)
        return kcov

    def run(self) -> PipelineResult:
        cfg = self.config
        kcov = self.install_tool()

        skip = [cfg.staging_path]
        binary = discover.find_test_binary(cfg.workdir, cfg.binary_pattern, skip)
        log(f"test executable: {binary.relative_to(cfg.workdir)}")

        output_dir = instrument.run_kcov(
            kcov,
            binary,
            cfg.output_path,
            cfg.exclude_patterns,
            verify=cfg.verify,
            cwd=cfg.workdir,
        )
        result = PipelineResult(kcov=kcov, binary=binary, output_dir=output_dir)
        result.summary = summary.report(output_dir, cfg.fail_under)

        if cfg.skip_upload:
            log("upload skipped")
            return result
        upload.upload(cfg)
        result.uploaded = True
        return result
