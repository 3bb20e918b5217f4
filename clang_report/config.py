"""Configuration loading and validation.

Usage:
    config = load("clang-report.yaml")                       # raises ConfigError on bad config
    config = load(None, {"project": "App.xcodeproj", "configuration": "Debug"})
    generate_template("clang-report.yaml")                   # writes example file to disk

Precedence, lowest first: defaults, YAML file, environment variables
(CLANG_REPORT_CLANG, CLANG_REPORT_XCODEBUILD, CLANG_REPORT_XCPRETTY),
then explicit overrides coming from the command line.
"""

import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any

import yaml

DEFAULT_CONFIG_PATH = "clang-report.yaml"


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------

class ConfigError(Exception):
    """Raised when the configuration is missing or invalid."""


# ---------------------------------------------------------------------------
# Config dataclass
# ---------------------------------------------------------------------------

@dataclass
class Config:
    project: str | None = None
    workspace: str | None = None
    scheme: str | None = None
    configuration: str | None = None
    output_format: str = "plist-html"
    output_dir: str = "./static_analysis"
    xcodebuild: str = "xcodebuild"
    xcpretty: str = "xcpretty"
    clang: str | None = None
    timeout: float | None = None
    summary_file: str = "clang_analyzer_summary.xml"

    @property
    def target(self) -> str | None:
        """The Xcode project or workspace, used as the report's project identifier."""
        return self.project or self.workspace


_ENV_OVERRIDES = {
    "clang":      "CLANG_REPORT_CLANG",
    "xcodebuild": "CLANG_REPORT_XCODEBUILD",
    "xcpretty":   "CLANG_REPORT_XCPRETTY",
}


# ---------------------------------------------------------------------------
# Loader
# ---------------------------------------------------------------------------

def load(
    config_path: str | None = None,
    overrides: dict[str, Any] | None = None,
    require_build: bool = True,
) -> Config:
    """Load and validate configuration.

    When *config_path* is ``None`` the default file is read if it exists;
    an explicit path must exist. Empty strings and ``None`` in *overrides*
    are ignored.

    Raises:
        ConfigError: if the file is missing or malformed, or the resulting
                     configuration is invalid.
    """
    values: dict[str, Any] = {}

    path = _resolve_path(config_path)
    if path is not None:
        values.update(_read_file(path))

    for key, env_name in _ENV_OVERRIDES.items():
        if os.environ.get(env_name):
            values[key] = os.environ[env_name]

    for key, value in (overrides or {}).items():
        if value is not None and value != "":
            values[key] = value

    known = {f.name for f in fields(Config)}
    unknown = sorted(set(values) - known)
    if unknown:
        raise ConfigError(f"Unknown configuration key(s): {', '.join(unknown)}")

    config = Config(**values)
    _validate(config, require_build)
    return config


def _resolve_path(config_path: str | None) -> Path | None:
    if config_path is None:
        default = Path(DEFAULT_CONFIG_PATH)
        return default if default.exists() else None

    path = Path(config_path)
    if not path.exists():
        raise ConfigError(
            f"Config file not found: '{config_path}'\n"
            "Run `python -m clang_report init` to generate a template."
        )
    return path


def _read_file(path: Path) -> dict[str, Any]:
    """Flatten the ``build`` / ``tools`` / ``output`` sections into Config fields."""
    try:
        with path.open(encoding="utf-8") as f:
            raw = yaml.safe_load(f)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse '{path}': {exc}") from exc

    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ConfigError(f"'{path}' must be a YAML mapping at the top level.")

    build = raw.get("build") or {}
    tools = raw.get("tools") or {}
    output = raw.get("output") or {}
    for name, section in (("build", build), ("tools", tools), ("output", output)):
        if not isinstance(section, dict):
            raise ConfigError(f"'{name}' in '{path}' must be a mapping.")

    values: dict[str, Any] = {}
    for key in ("project", "workspace", "scheme", "configuration"):
        values[key] = build.get(key)
    for key in ("xcodebuild", "xcpretty", "clang"):
        values[key] = tools.get(key)
    values["output_format"] = output.get("format")
    values["output_dir"] = output.get("dir")
    values["summary_file"] = output.get("summary_file")
    values["timeout"] = raw.get("timeout")

    return {k: v for k, v in values.items() if v is not None and v != ""}


def _validate(config: Config, require_build: bool) -> None:
    """Raise ConfigError listing every problem found."""
    errors: list[str] = []

    # Only the plist family can be summarized
    if "plist" not in str(config.output_format):
        errors.append(
            f"  - output format '{config.output_format}' is not supported (use 'plist' or 'plist-html')"
        )

    if config.timeout is not None:
        try:
            config.timeout = float(config.timeout)
        except (TypeError, ValueError):
            errors.append(f"  - 'timeout' must be a number of seconds, got '{config.timeout}'")
        else:
            if config.timeout <= 0:
                errors.append("  - 'timeout' must be greater than zero")

    if require_build:
        if not config.configuration:
            errors.append("  - 'build.configuration' is missing (e.g. Debug or Release)")
        if config.project and config.workspace:
            errors.append("  - 'build.project' and 'build.workspace' are mutually exclusive")
        elif not config.project and not config.workspace:
            errors.append("  - one of 'build.project' or 'build.workspace' is required")
        elif config.workspace and not config.scheme:
            errors.append("  - 'build.scheme' is required when building a workspace")

    if errors:
        raise ConfigError("Invalid configuration:\n" + "\n".join(errors))


# ---------------------------------------------------------------------------
# Template generator (used by `init` command)
# ---------------------------------------------------------------------------

TEMPLATE = """\
build:
  project: "App.xcodeproj"        # or use workspace + scheme
  # workspace: "App.xcworkspace"
  # scheme: "App"
  configuration: "Debug"

tools:
  xcodebuild: "xcodebuild"
  xcpretty: "xcpretty"
  # clang: "/usr/local/opt/llvm/bin/clang"   # defaults to the compiler of each compile command

output:
  format: "plist-html"            # plist or plist-html
  dir: "./static_analysis"

# timeout: 600                    # seconds per external command
"""


def generate_template(output_path: str = DEFAULT_CONFIG_PATH) -> None:
    """Write a template clang-report.yaml to *output_path*.

    Raises:
        ConfigError: if the file already exists.
    """
    path = Path(output_path)
    if path.exists():
        raise ConfigError(
            f"'{output_path}' already exists. Remove it first or choose a different path."
        )
    path.write_text(TEMPLATE, encoding="utf-8")
