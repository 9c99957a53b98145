"""Configuration loading and management for immutable-vet.

Configuration sources are merged in priority order:
    1. Defaults (defined in VetConfig)
    2. Global config (~/.immutable-vet.toml)
    3. Project config (./immutable-vet.toml)
    4. Explicit config file (--config)
    5. Environment variables (IMMVET_* prefix)
    6. CLI overrides (passed as kwargs)

The defaults describe the conventions of the immutableGen code generator:
template declarations are prefixed ``_Imm_``, generated wrappers keep the
template in a ``__tmpl`` field and files it writes are named
``gen_<name>_immutableGen.go``.

Example:
    >>> config = load_config(verbose=True)
    >>> config.verbosity
    'verbose'
    >>> config.range_method
    'Range'
"""

from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Literal, Optional, get_type_hints

from .exceptions import ConfigFileError, InvalidConfigError

Verbosity = Literal["quiet", "normal", "verbose"]
OutputFormat = Literal["text", "json", "github"]

GLOBAL_CONFIG_NAME = ".immutable-vet.toml"
PROJECT_CONFIG_NAME = "immutable-vet.toml"
ENV_PREFIX = "IMMVET_"


def _default_marker_methods() -> list[str]:
    return ["Mutable", "AsMutable", "AsImmutable"]


def _default_immutable_types() -> list[str]:
    return ["time.Time", "*time.Time"]


@dataclass(frozen=True)
class VetConfig:
    """Configuration for a vet run.

    Attributes:
        Code generation conventions:
            template_prefix: Name prefix marking a template type declaration
            template_field: Field of a generated wrapper holding its template
            marker_methods: Methods every generated wrapper pointer must have
            generator_name: Command name of the paired generator
            skip_file_comment: Comment opting a file out of the field-access rule

        Once-only iteration:
            range_method: Accessor returning the one-shot iteration handle
            append_method: Generated method accepting a spread handle
            append_builtin: Builtin accepting a spread handle

        Classification:
            immutable_types: Type strings always classified immutable

        Package loading:
            facts_filename: Facts document looked up in a package directory
            exporter: Command printing a facts document; "{dir}" is replaced
                by the package directory. Empty means read facts_filename.
            exporter_timeout_seconds: Timeout for one exporter run

        Output control:
            verbosity: Logging verbosity level
            output_format: Diagnostic rendering (text, json, github)
    """

    template_prefix: str = "_Imm_"
    template_field: str = "__tmpl"
    marker_methods: list[str] = field(default_factory=_default_marker_methods)
    generator_name: str = "immutableGen"
    skip_file_comment: str = "//immutableVet:skipFile"

    range_method: str = "Range"
    append_method: str = "Append"
    append_builtin: str = "append"

    immutable_types: list[str] = field(default_factory=_default_immutable_types)

    facts_filename: str = ".immutable-vet.json"
    exporter: list[str] = field(default_factory=list)
    exporter_timeout_seconds: int = 120

    verbosity: Verbosity = "normal"
    output_format: OutputFormat = "text"

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        for name in ("template_prefix", "template_field", "generator_name", "range_method"):
            if not getattr(self, name):
                raise InvalidConfigError(name, getattr(self, name), "must not be empty")

        if not self.skip_file_comment.startswith("//"):
            raise InvalidConfigError(
                "skip_file_comment", self.skip_file_comment, "must be a // line comment"
            )

        if not self.marker_methods:
            raise InvalidConfigError("marker_methods", self.marker_methods, "must not be empty")

        if not self.facts_filename.endswith(".json"):
            raise InvalidConfigError("facts_filename", self.facts_filename, "must be a .json file")

        if self.exporter_timeout_seconds < 1:
            raise InvalidConfigError(
                "exporter_timeout_seconds", self.exporter_timeout_seconds, "must be at least 1"
            )

        if self.verbosity not in ("quiet", "normal", "verbose"):
            raise InvalidConfigError("verbosity", self.verbosity, "expected quiet/normal/verbose")

        if self.output_format not in ("text", "json", "github"):
            raise InvalidConfigError(
                "output_format", self.output_format, "expected text/json/github"
            )

    @property
    def generated_file_header(self) -> str:
        """Header line the generator writes at the top of every file."""
        return f"// Code generated by {self.generator_name}. DO NOT EDIT."


# Default configuration (singleton)
DEFAULT_CONFIG = VetConfig()


def load_config(config_file: Optional[Path] = None, **overrides: Any) -> VetConfig:
    """Load configuration with auto-discovery and merging.

    Args:
        config_file: Optional explicit config file path
        **overrides: Direct overrides (typically from CLI flags)

    Returns:
        Validated VetConfig instance

    Raises:
        ConfigFileError: If a config file is invalid or missing
        InvalidConfigError: If a value fails validation

    Example:
        >>> config = load_config(config_file=Path("custom.toml"))
    """
    merged: dict[str, Any] = {}

    global_config = Path.home() / GLOBAL_CONFIG_NAME
    if global_config.exists():
        merged.update(_load_toml_file(global_config))

    project_config = Path.cwd() / PROJECT_CONFIG_NAME
    if project_config.exists():
        merged.update(_load_toml_file(project_config))

    if config_file is not None:
        if not config_file.exists():
            raise ConfigFileError(config_file, "file not found")
        merged.update(_load_toml_file(config_file))

    merged.update(_load_env_vars())

    # Verbosity flags become the verbosity field
    if "verbose" in overrides:
        if overrides["verbose"]:
            overrides["verbosity"] = "verbose"
        del overrides["verbose"]
    if "quiet" in overrides:
        if overrides["quiet"]:
            overrides["verbosity"] = "quiet"
        del overrides["quiet"]

    merged.update(overrides)

    unknown = set(merged) - set(VetConfig.__dataclass_fields__)
    if unknown:
        key = sorted(unknown)[0]
        raise InvalidConfigError(key, merged[key], "unknown configuration key")

    return VetConfig(**merged)


def _load_env_vars() -> dict[str, Any]:
    """Load configuration from IMMVET_* environment variables.

    List-valued fields (marker_methods, immutable_types, exporter) are not
    read from the environment.

    Returns:
        Dict of field_name -> parsed_value for any IMMVET_* vars found.
    """
    type_hints = get_type_hints(VetConfig)

    result: dict[str, Any] = {}

    for field_name in VetConfig.__dataclass_fields__:
        env_key = f"{ENV_PREFIX}{field_name.upper()}"
        env_value = os.environ.get(env_key)

        if env_value is None:
            continue

        type_hint = type_hints.get(field_name)
        if type_hint is None:
            continue

        try:
            parsed = _parse_env_value(env_value, type_hint)
        except ValueError as e:
            raise InvalidConfigError(env_key, env_value, str(e))
        if parsed is not None:
            result[field_name] = parsed

    return result


def _parse_env_value(value: str, type_hint: Any) -> Any:
    """Parse environment variable string to the correct type.

    Returns:
        Parsed value or None if the field type is not settable from the environment

    Raises:
        ValueError: If value can't be parsed to expected type
    """
    origin = getattr(type_hint, "__origin__", None)

    if origin is list or type_hint is list:
        return None

    if type_hint is bool:
        lower = value.lower()
        if lower in ("true", "1", "yes", "on"):
            return True
        elif lower in ("false", "0", "no", "off"):
            return False
        else:
            raise ValueError(f"expected true/false, got '{value}'")

    if type_hint is int:
        return int(value)

    if type_hint is str or origin is Literal:
        return value

    return None


def _load_toml_file(path: Path) -> dict[str, Any]:
    """Load TOML file and return the immutable-vet settings it holds.

    Both a top-level table and a ``[tool.immutable-vet]`` table are accepted.

    Raises:
        ConfigFileError: If TOML parsing fails
    """
    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        raise ConfigFileError(path, str(e))

    tool_section = data.get("tool", {}).get("immutable-vet")
    if isinstance(tool_section, dict):
        return dict(tool_section)
    data.pop("tool", None)
    return data
