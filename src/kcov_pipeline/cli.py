# SPDX-FileCopyrightText: 2025 Blackcat Informatics® Inc.
# SPDX-License-Identifier: MIT

"""Build kcov, run the test executable under it and upload the coverage."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List

from kcov_pipeline.config import load_config, split_patterns
from kcov_pipeline.errors import PipelineError
from kcov_pipeline.runner import CoveragePipeline
from kcov_pipeline.shell import log_error


def parse_args(argv: List[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="coverage-pipeline", description=__doc__)
    parser.add_argument("--workdir", type=Path, help="Directory to build and search in (default: cwd)")
    parser.add_argument("--env", type=Path, help="Env-style settings file (default: <workdir>/.env)")
    parser.add_argument("--archive-url", help="kcov source archive to build")
    parser.add_argument("--staging-dir", type=Path, help="DESTDIR for make install")
    parser.add_argument("--binary-pattern", help="find -wholename pattern for the test executable")
    parser.add_argument(
        "--exclude-pattern",
        action="append",
        dest="exclude_patterns",
        help="Path pattern kcov should not instrument; repeatable, comma lists allowed",
    )
    parser.add_argument("--output-dir", type=Path, help="Where kcov writes its report")
    parser.add_argument("--no-verify", action="store_false", dest="verify", default=None,
                        help="Do not pass --verify to kcov")
    parser.add_argument("--uploader-url", help="Coverage uploader bootstrap script")
    parser.add_argument("--skip-upload", action="store_true", default=None, help="Stop after the summary")
    parser.add_argument("--reuse-tool", action="store_true", default=None,
                        help="Use an already staged kcov instead of rebuilding")
    parser.add_argument("--min-tool-version", help="Rebuild a reused kcov older than this")
    parser.add_argument("--jobs", type=int, dest="make_jobs", help="Parallel make jobs")
    parser.add_argument("--fail-under", type=float, help="Fail when line coverage is below this percent")
    return parser.parse_args(argv)


def main(argv: List[str]) -> int:
    args = parse_args(argv)

    exclude = None
    if args.exclude_patterns is not None:
        exclude = [p for value in args.exclude_patterns for p in split_patterns(value)]

    try:
        config = load_config(args.workdir, args.env).with_overrides(
            archive_url=args.archive_url,
            staging_dir=args.staging_dir,
            binary_pattern=args.binary_pattern,
            exclude_patterns=exclude,
            output_dir=args.output_dir,
            verify=args.verify,
            uploader_url=args.uploader_url,
            skip_upload=args.skip_upload,
            reuse_tool=args.reuse_tool,
            min_tool_version=args.min_tool_version,
            make_jobs=args.make_jobs,
            fail_under=args.fail_under,
        )
        CoveragePipeline(config).run()
    except PipelineError as exc:
        log_error(str(exc))
        return exc.exit_code
    return 0


def run() -> None:  # pragma: no cover - console script entry point
    sys.exit(main(sys.argv[1:]))
