# SPDX-FileCopyrightText: 2025 Blackcat Informatics® Inc.
# SPDX-License-Identifier: MIT

"""Read the line-coverage totals kcov writes next to its HTML report."""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from kcov_pipeline.errors import ThresholdError
from kcov_pipeline.shell import log

REPORT_NAME = "coverage.json"
MERGED_DIR = "kcov-merged"


@dataclass
class CoverageSummary:
    percent: float
    covered_lines: int
    total_lines: int
    source: Path

    def describe(self) -> str:
        return f"line coverage: {self.percent:.2f}% ({self.covered_lines}/{self.total_lines})"


def find_report(output_dir: Path) -> Optional[Path]:
    merged = output_dir / MERGED_DIR / REPORT_NAME
    if merged.is_file():
        return merged
    reports = sorted(output_dir.glob(f"*/{REPORT_NAME}"))
    if reports:
        return reports[0]
    direct = output_dir / REPORT_NAME
    if direct.is_file():
        return direct
    return None


def load_summary(path: Path) -> CoverageSummary:
    """Parse a kcov ``coverage.json``.

    kcov writes the totals sometimes as numbers and sometimes as strings;
    both are accepted. When ``percent_covered`` is absent it is derived from
    the line counts.
    """
    data = json.loads(path.read_text())
    if not isinstance(data, dict):
        raise ValueError(f"{path} is not a kcov coverage report")
    try:
        covered = int(float(data.get("covered_lines", 0) or 0))
        total = int(float(data.get("total_lines", 0) or 0))
        raw_percent = data.get("percent_covered")
        if raw_percent in (None, ""):
            percent = (covered * 100.0 / total) if total else 0.0
        else:
            percent = float(raw_percent)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"{path} has malformed totals: {exc}") from None
    return CoverageSummary(percent=percent, covered_lines=covered, total_lines=total, source=path)


def check_threshold(summary: CoverageSummary, fail_under: Optional[float]) -> None:
    if fail_under is None:
        return
    if summary.percent < fail_under:
        raise ThresholdError(
            f"line coverage {summary.percent:.2f}% is below the required {fail_under:.2f}%"
        )


def report(output_dir: Path, fail_under: Optional[float] = None) -> Optional[CoverageSummary]:
    path = find_report(output_dir)
    if path is None:
        if fail_under is not None:
            raise ThresholdError(f"no {REPORT_NAME} under {output_dir} to check against {fail_under:.2f}%")
        log(f"no {REPORT_NAME} under {output_dir}; skipping summary")
        return None
    try:
        summary = load_summary(path)
    except ValueError as exc:
        if fail_under is not None:
            raise ThresholdError(str(exc)) from None
        log(f"unreadable {REPORT_NAME} ({exc}); skipping summary")
        return None
    log(summary.describe())
    check_threshold(summary, fail_under)
    return summary
