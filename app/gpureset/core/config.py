"""Configuration file loading and writing.

The optional /etc/gpureset/config.toml adjusts run settings and replaces
individual rule lists per profile:

    expected_release = "25.04"
    log_dir = "/var/log"

    [rules.userland]
    source_keywords = ["repo.radeon.com", "rocm", "kisak"]
"""

import tomllib
from pathlib import Path
from typing import Annotated, Any

import tomli_w
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from gpureset.core.paths import HostPaths, get_config_path
from gpureset.core.profiles import PROFILES, Profile, Scope, get_profile
from gpureset.core.rules import RuleOverrides, RuleSet


class ConfigError(Exception):
    """Base exception for configuration errors."""


class ConfigParseError(ConfigError):
    """Raised when the config file cannot be parsed."""


class ConfigValidationError(ConfigError):
    """Raised when config content is invalid."""


class ResetConfig(BaseModel):
    """Run settings and per-profile rule overrides.

    Attributes:
        expected_release: Distribution release the defaults were written for.
        log_dir: Directory receiving run transcripts.
        backup_dir: Directory receiving quarantined descriptors.
        rules: Partial rule overrides keyed by scope.
    """

    model_config = ConfigDict(extra="forbid")

    expected_release: Annotated[str, Field(description="Expected VERSION_ID")] = "25.04"
    log_dir: Annotated[str, Field(description="Transcript directory")] = "/var/log"
    backup_dir: Annotated[str, Field(description="Quarantine directory")] = "/var/backups"
    rules: Annotated[
        dict[Scope, RuleOverrides],
        Field(default_factory=dict, description="Rule overrides per scope"),
    ]

    def rules_for(self, scope: Scope) -> RuleSet:
        """Effective rules for a scope with overrides applied.

        Raises:
            ConfigValidationError: If an override produces an invalid rule set.
        """
        defaults = PROFILES[scope].rules
        overrides = self.rules.get(scope)
        if overrides is None:
            return defaults
        try:
            return overrides.apply(defaults)
        except ValidationError as e:
            raise ConfigValidationError(f"Invalid rules for {scope.value}: {e}") from e

    def profile_for(self, scope: Scope) -> Profile:
        """Profile for a scope with effective rules."""
        return get_profile(scope, self.rules_for(scope))

    def host_paths(self, root: Path = Path("/")) -> HostPaths:
        """Host layout using the configured log and backup directories."""
        return HostPaths(root=root, log_dir=self.log_dir, backup_dir=self.backup_dir)


def load_config(path: Path | None = None) -> ResetConfig:
    """Load and validate the configuration file.

    A missing file yields the defaults.

    Args:
        path: Path to the config file. If None, uses the default config path.

    Returns:
        Validated ResetConfig.

    Raises:
        ConfigParseError: If the TOML syntax is invalid.
        ConfigValidationError: If the content doesn't match the schema.
        ConfigError: If the file cannot be read.
    """
    config_path = path or get_config_path()

    if not config_path.exists():
        return ResetConfig()

    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigParseError(f"Invalid TOML syntax in {config_path}: {e}") from e
    except OSError as e:
        raise ConfigError(f"Failed to read config {config_path}: {e}") from e

    try:
        config = ResetConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigValidationError(f"Invalid config content in {config_path}: {e}") from e

    # Surface bad rule overrides at load time rather than mid-run
    for scope in config.rules:
        config.rules_for(scope)
    return config


def rules_to_dict(scope: Scope, rules: RuleSet) -> dict[str, Any]:
    """Convert a rule set to the config.toml shape for one scope.

    Fields left at None are omitted since TOML has no null.
    """
    body = {name: list(value) for name, value in rules.model_dump().items() if value is not None}
    return {"rules": {scope.value: body}}


def write_rules(scope: Scope, rules: RuleSet, path: Path) -> Path:
    """Write a rule set as a loadable config.toml fragment.

    Args:
        scope: Scope the rules belong to.
        rules: Rule set to write.
        path: Destination file.

    Returns:
        Path written.

    Raises:
        ConfigError: If the file cannot be written.
    """
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "wb") as f:
            tomli_w.dump(rules_to_dict(scope, rules), f)
    except OSError as e:
        raise ConfigError(f"Failed to write rules to {path}: {e}") from e
    return path
