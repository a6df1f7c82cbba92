"""
Configuration system for authormatch.

Describes which matching steps to run, in which order, and which record
fields each step compares. Uses Pydantic v2 for validation and immutable
config objects.

Configuration Hierarchy (highest priority first):
1. CLI arguments (passed to load_config)
2. Environment variables (AUTHORMATCH_*)
3. YAML configuration file
4. Pydantic field defaults
"""

import os
import re
from pathlib import Path
from typing import Any, Dict, List, Literal, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from authormatch.matching.base import Extractor, MatcherStep, build_step, list_steps
from authormatch.matching.matchers import get_exclusion_predicate

_TEMPLATE_FIELD_RE = re.compile(r"\{(\w+)\}")


def field_extractor(template: str) -> Extractor:
    """Build an extractor reading a string from a dict record.

    - "full_name" reads record["full_name"]
    - "{family_name} {given_name}" formats several fields

    A missing or null field makes the extractor return None.
    """
    keys = _TEMPLATE_FIELD_RE.findall(template)

    if not keys:
        def extract_field(record: dict) -> Optional[str]:
            value = record.get(template)
            return None if value is None else str(value)
        return extract_field

    def extract_template(record: dict) -> Optional[str]:
        values = {}
        for key in keys:
            value = record.get(key)
            if value is None:
                return None
            values[key] = value
        return template.format(**values)

    return extract_template


class StepConfig(BaseModel):
    """Configuration for one matching step."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(description="Step name reported on every match")
    type: str = Field(description="Registered step type, e.g. 'string_ignore_case'")
    base: str = Field(description="Field (or template) compared on base records")
    enriching: str = Field(description="Field (or template) compared on enriching records")
    exclusion: Optional[Literal["any_ambiguity", "tied_confidence"]] = Field(
        default=None,
        description="Discard candidate sets this predicate deems ambiguous",
    )

    @field_validator("type")
    @classmethod
    def validate_type(cls, v: str) -> str:
        valid = list_steps()
        if v not in valid:
            raise ValueError(f"Invalid step type: {v}. Valid: {valid}")
        return v

    def build(self) -> MatcherStep:
        """Build the MatcherStep this config describes."""
        return build_step(
            self.type,
            field_extractor(self.base),
            field_extractor(self.enriching),
            name=self.name,
            exclusion_predicate=get_exclusion_predicate(self.exclusion),
        )


def _default_steps() -> List[StepConfig]:
    """Publication authors vs ORCID records."""
    return [
        StepConfig(name="fullName", type="string_ignore_case",
                   base="full_name", enriching="{given_name} {family_name}"),
        StepConfig(name="invertedFullName", type="string_ignore_case",
                   base="full_name", enriching="{family_name} {given_name}"),
        StepConfig(name="orderedTokens", type="abbreviations",
                   base="full_name", enriching="{given_name} {family_name}"),
        StepConfig(name="creditName", type="string_ignore_case",
                   base="full_name", enriching="credit_name"),
    ]


class MatcherConfig(BaseModel):
    """Central configuration object for a matching run."""

    model_config = ConfigDict(frozen=True)

    steps: list[StepConfig] = Field(default_factory=_default_steps, description="Steps, in order")
    log_path: Optional[Path] = Field(default=None, description="Observability database path")

    @model_validator(mode="after")
    def validate_unique_names(self) -> "MatcherConfig":
        names = [s.name for s in self.steps]
        duplicates = {n for n in names if names.count(n) > 1}
        if duplicates:
            raise ValueError(f"Duplicate step names: {sorted(duplicates)}")
        return self

    @classmethod
    def from_yaml(cls, path: Path) -> "MatcherConfig":
        """Load configuration from YAML file."""
        return cls.from_dict(_read_yaml(path), base_path=path.parent)

    @classmethod
    def from_dict(cls, data: dict, base_path: Optional[Path] = None) -> "MatcherConfig":
        """Create from dictionary, resolving log_path against base_path."""
        base_path = base_path or Path(".")
        values = dict(data)

        log_path = values.get("log_path")
        # Anything else is left for pydantic to reject
        if log_path and isinstance(log_path, (str, os.PathLike)):
            log_path = Path(log_path)
            values["log_path"] = log_path if log_path.is_absolute() else base_path / log_path

        return cls.model_validate(values)

    def build_steps(self) -> List[MatcherStep]:
        return [s.build() for s in self.steps]


def load_config(
    path: Optional[Path] = None,
    env_prefix: str = "AUTHORMATCH_",
    cli_overrides: Optional[Dict[str, Any]] = None,
    use_env: bool = True,
) -> MatcherConfig:
    """Load configuration with hierarchy: defaults → YAML → env vars → CLI args.

    Args:
        path: Optional explicit path to YAML config file
        env_prefix: Prefix for environment variables (default: "AUTHORMATCH_")
        cli_overrides: Optional dictionary of CLI argument overrides
        use_env: Whether to load environment variables (default: True)

    Returns:
        Merged MatcherConfig

    Examples:
        # Environment variable: AUTHORMATCH_LOG_PATH=logs/match.db
        config = load_config()  # log_path will be logs/match.db
    """
    yaml_path = _find_config_file(path)
    base_path = yaml_path.parent if yaml_path else Path(".")

    config_dict = _read_yaml(yaml_path) if yaml_path else {}

    if use_env:
        _deep_merge(config_dict, _extract_env_config(env_prefix))

    if cli_overrides:
        _deep_merge(config_dict, cli_overrides)

    if not config_dict:
        return MatcherConfig()

    return MatcherConfig.from_dict(config_dict, base_path=base_path)


def _read_yaml(path: Path) -> Dict[str, Any]:
    """Read a YAML config file, which must hold a mapping at the top level."""
    with open(path) as f:
        data = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        raise ValueError(f"{path}: expected a mapping of settings, got {type(data).__name__}")
    return data


def _find_config_file(path: Optional[Path] = None) -> Optional[Path]:
    """Find configuration file.

    Searches in this order:
    1. Provided path
    2. ./authormatch.yaml
    3. ./authormatch.yml

    Returns:
        Path to config file or None if not found
    """
    if path and path.exists():
        return path

    for filename in ["authormatch.yaml", "authormatch.yml"]:
        config_path = Path(filename)
        if config_path.exists():
            return config_path

    return None


def _extract_env_config(prefix: str = "AUTHORMATCH_") -> Dict[str, Any]:
    """Extract top-level settings from environment variables.

    - AUTHORMATCH_LOG_PATH=logs/match.db → {"log_path": "logs/match.db"}

    Values are kept as strings; the only env-settable setting is a path.
    """
    config: Dict[str, Any] = {}

    for key, value in os.environ.items():
        if not key.startswith(prefix):
            continue

        config_key = key[len(prefix):].lower()
        if not config_key:
            continue

        config[config_key] = value

    return config


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> None:
    """Deep merge override into base dictionary (mutates base).

    Nested dicts are merged recursively; any other value replaces the base.
    """
    for key, value in override.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            _deep_merge(base[key], value)
        else:
            base[key] = value
