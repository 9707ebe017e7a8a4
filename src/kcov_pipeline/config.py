# SPDX-FileCopyrightText: 2025 Blackcat Informatics® Inc.
# SPDX-License-Identifier: MIT

"""Settings for the coverage pipeline.

Values come from built-in defaults, then an env-style file, then the
process environment; the CLI applies its flags on top of the result.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Dict, List, Mapping, Optional

from kcov_pipeline.errors import ConfigError

DEFAULT_ARCHIVE_URL = "https://github.com/SimonKagstrom/kcov/archive/master.tar.gz"
DEFAULT_UPLOADER_URL = "https://codecov.io/bash"
DEFAULT_BINARY_PATTERN = "./native/target/debug/carta_schema-*"
DEFAULT_EXCLUDE_PATTERNS = ("/.cargo", "/usr/lib")
DEFAULT_ENV_FILE = ".env"

TRUE_VALUES = {"1", "true", "yes", "on"}
FALSE_VALUES = {"0", "false", "no", "off"}


@dataclass
class PipelineConfig:
    workdir: Path = field(default_factory=Path.cwd)
    archive_url: str = DEFAULT_ARCHIVE_URL
    staging_dir: Path = Path("kcov-build")
    install_prefix: str = "/usr/local"
    binary_pattern: str = DEFAULT_BINARY_PATTERN
    exclude_patterns: List[str] = field(default_factory=lambda: list(DEFAULT_EXCLUDE_PATTERNS))
    output_dir: Path = Path("native/target/cov")
    verify: bool = True
    uploader_url: str = DEFAULT_UPLOADER_URL
    skip_upload: bool = False
    reuse_tool: bool = False
    min_tool_version: Optional[str] = None
    make_jobs: Optional[int] = None
    fail_under: Optional[float] = None
    fetch_timeout: float = 60.0
    cmake_bin: str = "cmake"
    make_bin: str = "make"
    bash_bin: str = "bash"

    def resolve(self, path: Path) -> Path:
        if path.is_absolute():
            return path
        return self.workdir / path

    @property
    def staging_path(self) -> Path:
        return self.resolve(self.staging_dir)

    @property
    def output_path(self) -> Path:
        return self.resolve(self.output_dir)

    @property
    def kcov_path(self) -> Path:
        prefix = self.install_prefix.strip("/")
        return self.staging_path / prefix / "bin" / "kcov"

    @property
    def archive_name(self) -> str:
        name = self.archive_url.rstrip("/").rsplit("/", 1)[-1]
        return name or "kcov.tar.gz"

    def with_overrides(self, **overrides) -> "PipelineConfig":
        known = {f.name for f in fields(self)}
        unknown = set(overrides) - known
        if unknown:
            raise ConfigError(f"unknown settings: {', '.join(sorted(unknown))}")
        values = {key: value for key, value in overrides.items() if value is not None}
        return replace(self, **values)


def load_env(path: Path) -> Dict[str, str]:
    env: Dict[str, str] = {}
    if not path.exists():
        return env
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigError(f"cannot read settings file {path}: {exc}") from None
    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        if "=" not in line:
            continue
        key, value = line.split("=", 1)
        value = value.strip()
        if len(value) >= 2 and value[0] == value[-1] and value[0] in "\"'":
            value = value[1:-1]
        env[key.strip()] = value
    return env


def parse_bool(key: str, value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in TRUE_VALUES:
        return True
    if lowered in FALSE_VALUES:
        return False
    raise ConfigError(f"{key} must be a boolean, got {value!r}")


def parse_int(key: str, value: str) -> int:
    try:
        return int(value)
    except ValueError:
        raise ConfigError(f"{key} must be an integer, got {value!r}") from None


def parse_float(key: str, value: str) -> float:
    try:
        return float(value)
    except ValueError:
        raise ConfigError(f"{key} must be a number, got {value!r}") from None


def split_patterns(value: str) -> List[str]:
    return [part.strip() for part in value.split(",") if part.strip()]


def _from_settings(settings: Mapping[str, str]) -> Dict[str, object]:
    values: Dict[str, object] = {}

    def text(key: str, attr: str) -> None:
        if settings.get(key):
            values[attr] = settings[key]

    text("KCOV_ARCHIVE_URL", "archive_url")
    text("KCOV_INSTALL_PREFIX", "install_prefix")
    text("COVERAGE_BINARY_PATTERN", "binary_pattern")
    text("CODECOV_UPLOADER_URL", "uploader_url")
    text("KCOV_MIN_VERSION", "min_tool_version")
    text("CMAKE", "cmake_bin")
    text("MAKE", "make_bin")
    text("BASH", "bash_bin")

    if settings.get("KCOV_STAGING_DIR"):
        values["staging_dir"] = Path(settings["KCOV_STAGING_DIR"])
    if settings.get("COVERAGE_OUTPUT_DIR"):
        values["output_dir"] = Path(settings["COVERAGE_OUTPUT_DIR"])
    if "KCOV_EXCLUDE_PATTERNS" in settings:
        values["exclude_patterns"] = split_patterns(settings["KCOV_EXCLUDE_PATTERNS"])
    if settings.get("KCOV_VERIFY"):
        values["verify"] = parse_bool("KCOV_VERIFY", settings["KCOV_VERIFY"])
    if settings.get("COVERAGE_SKIP_UPLOAD"):
        values["skip_upload"] = parse_bool("COVERAGE_SKIP_UPLOAD", settings["COVERAGE_SKIP_UPLOAD"])
    if settings.get("KCOV_REUSE"):
        values["reuse_tool"] = parse_bool("KCOV_REUSE", settings["KCOV_REUSE"])
    if settings.get("MAKE_JOBS"):
        values["make_jobs"] = parse_int("MAKE_JOBS", settings["MAKE_JOBS"])
    if settings.get("COVERAGE_FAIL_UNDER"):
        values["fail_under"] = parse_float("COVERAGE_FAIL_UNDER", settings["COVERAGE_FAIL_UNDER"])
    if settings.get("FETCH_TIMEOUT"):
        values["fetch_timeout"] = parse_float("FETCH_TIMEOUT", settings["FETCH_TIMEOUT"])
    return values


def load_config(
    workdir: Optional[Path] = None,
    env_file: Optional[Path] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> PipelineConfig:
    """Build a config from defaults, ``env_file`` and ``environ``.

    ``env_file`` defaults to ``<workdir>/.env``; a missing file is ignored.
    Non-empty keys in ``environ`` win over the same keys in the file.
    """
    workdir = (workdir or Path.cwd()).resolve()
    if environ is None:
        environ = os.environ
    if env_file is None:
        env_file = workdir / DEFAULT_ENV_FILE

    settings = load_env(env_file)
    settings.update({key: value for key, value in environ.items() if value})

    values = _from_settings(settings)
    return PipelineConfig(workdir=workdir, **values)  # type: ignore[arg-type]
