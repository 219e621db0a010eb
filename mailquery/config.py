"""Configuration management for mailquery."""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import tomli_w

from mailquery.exceptions import (
    ConfigParseError,
    ConfigValidationError,
)
from mailquery.search.operators import DEFAULT_OPERATORS, OperatorDefinition, ValueKind
from mailquery.search.parser import DEFAULT_MAX_DEPTH, ParserOptions


def get_default_config_path() -> Path:
    """Get the default configuration file path."""
    return Path.home() / ".config" / "mailquery" / "config.toml"


@dataclass
class Config:
    """Application configuration.

    Attributes:
        operators: Custom operator definitions, consulted before the built-ins.
        operators_allowed: If non-empty, only these operators may be used.
        operators_disallowed: Operators that may not be used.
        case_sensitive: Match operator keys case-sensitively.
        max_depth: Deepest parenthesis nesting turned into groups.
        colored_output: Whether to use colored terminal output.
        config_path: Path where config was loaded from (None if defaults).
    """

    operators: list[OperatorDefinition] = field(default_factory=list)
    operators_allowed: list[str] = field(default_factory=list)
    operators_disallowed: list[str] = field(default_factory=list)
    case_sensitive: bool = False
    max_depth: int = DEFAULT_MAX_DEPTH
    colored_output: bool = True
    config_path: Path | None = None

    def validate(self) -> list[str]:
        """Validate configuration values.

        Returns:
            List of warning messages for non-fatal issues.

        Raises:
            ConfigValidationError: If a critical validation fails.
        """
        warnings: list[str] = []

        if self.max_depth < 1:
            raise ConfigValidationError("parser.max_depth", self.max_depth, "must be at least 1")

        known = {definition.name.lower() for definition in DEFAULT_OPERATORS}
        known.update(definition.name.lower() for definition in self.operators)
        for name in [*self.operators_allowed, *self.operators_disallowed]:
            if name.lower() not in known:
                warnings.append(f"Unknown operator in allow/deny list: {name}")

        overlap = {name.lower() for name in self.operators_allowed} & {
            name.lower() for name in self.operators_disallowed
        }
        if overlap:
            warnings.append(
                f"Operators both allowed and disallowed (disallow wins): {', '.join(sorted(overlap))}"
            )

        return warnings

    def parser_options(self) -> ParserOptions:
        """Build parser options from this configuration."""
        return ParserOptions(
            operators=list(self.operators),
            operators_allowed=list(self.operators_allowed) or None,
            operators_disallowed=list(self.operators_disallowed),
            case_sensitive=self.case_sensitive,
            max_depth=self.max_depth,
        )


def load_config(config_path: Path | None = None) -> tuple[Config, list[str]]:
    """Load configuration from file or use defaults.

    Args:
        config_path: Explicit config file path. If None, uses default location.

    Returns:
        Tuple of (Config object, list of warning messages).

    Raises:
        ConfigParseError: If config file exists but has invalid syntax.
        ConfigValidationError: If config values are invalid.
    """
    warnings: list[str] = []

    if config_path is None:
        config_path = get_default_config_path()

    config_path = config_path.expanduser().resolve()

    if not config_path.exists():
        # Use defaults
        config = Config()
        warnings.append(
            f"No config file found at {config_path}. Using defaults. "
            f"Create config with: mailquery init-config"
        )
        config_warnings = config.validate()
        return config, warnings + config_warnings

    # Load from file
    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigParseError(config_path, str(e)) from e

    config = _parse_config_dict(data, config_path)
    config_warnings = config.validate()

    return config, warnings + config_warnings


def _string_list(value: Any, key: str) -> list[str]:
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise ConfigValidationError(key, value, "must be a list of strings")
    return list(value)


def _parse_operator(data: Any, index: int) -> OperatorDefinition:
    """Parse one ``[[operators]]`` table."""
    prefix = f"operators[{index}]"
    if not isinstance(data, dict):
        raise ConfigValidationError(prefix, data, "must be a table")

    name = data.get("name")
    if not isinstance(name, str) or not name:
        raise ConfigValidationError(f"{prefix}.name", name, "must be a non-empty string")

    kind = data.get("kind", name)
    if not isinstance(kind, str) or not kind:
        raise ConfigValidationError(f"{prefix}.kind", kind, "must be a non-empty string")

    aliases = _string_list(data.get("aliases", []), f"{prefix}.aliases")

    value_type = data.get("value_type", ValueKind.STRING.value)
    try:
        value_kind = ValueKind(value_type)
    except ValueError as e:
        choices = ", ".join(member.value for member in ValueKind)
        raise ConfigValidationError(
            f"{prefix}.value_type", value_type, f"must be one of: {choices}"
        ) from e

    allow_negation = data.get("allow_negation", True)
    if not isinstance(allow_negation, bool):
        raise ConfigValidationError(f"{prefix}.allow_negation", allow_negation, "must be a boolean")

    return OperatorDefinition(
        name=name,
        kind=kind,
        aliases=frozenset(aliases),
        value_kind=value_kind,
        allow_negation=allow_negation,
    )


def _parse_config_dict(data: dict[str, Any], config_path: Path) -> Config:
    """Parse configuration dictionary into Config object."""
    config = Config(config_path=config_path)

    # Parse [parser] section
    parser = data.get("parser", {})
    if "operators_allowed" in parser:
        config.operators_allowed = _string_list(
            parser["operators_allowed"], "parser.operators_allowed"
        )

    if "operators_disallowed" in parser:
        config.operators_disallowed = _string_list(
            parser["operators_disallowed"], "parser.operators_disallowed"
        )

    if "case_sensitive" in parser:
        value = parser["case_sensitive"]
        if not isinstance(value, bool):
            raise ConfigValidationError("parser.case_sensitive", value, "must be a boolean")
        config.case_sensitive = value

    if "max_depth" in parser:
        value = parser["max_depth"]
        if not isinstance(value, int) or isinstance(value, bool):
            raise ConfigValidationError("parser.max_depth", value, "must be an integer")
        config.max_depth = value

    # Parse [display] section
    display = data.get("display", {})
    if "colored_output" in display:
        value = display["colored_output"]
        if not isinstance(value, bool):
            raise ConfigValidationError("display.colored_output", value, "must be a boolean")
        config.colored_output = value

    # Parse [[operators]] tables
    operators = data.get("operators", [])
    if not isinstance(operators, list):
        raise ConfigValidationError("operators", operators, "must be an array of tables")
    config.operators = [_parse_operator(item, index) for index, item in enumerate(operators)]

    return config


def save_config(config: Config, config_path: Path | None = None) -> None:
    """Save configuration to file.

    Args:
        config: Configuration to save.
        config_path: Path to save to. If None, uses config.config_path or default.
    """
    if config_path is None:
        config_path = config.config_path or get_default_config_path()

    config_path = config_path.expanduser().resolve()

    # Ensure directory exists
    config_path.parent.mkdir(parents=True, exist_ok=True)

    # Build TOML structure
    data: dict[str, Any] = {
        "parser": {
            "operators_allowed": list(config.operators_allowed),
            "operators_disallowed": list(config.operators_disallowed),
            "case_sensitive": config.case_sensitive,
            "max_depth": config.max_depth,
        },
        "display": {
            "colored_output": config.colored_output,
        },
    }

    if config.operators:
        data["operators"] = [
            {
                "name": definition.name,
                "kind": str(definition.kind),
                "aliases": sorted(definition.aliases),
                "value_type": definition.value_kind.value,
                "allow_negation": definition.allow_negation,
            }
            for definition in config.operators
        ]

    with open(config_path, "wb") as f:
        tomli_w.dump(data, f)
