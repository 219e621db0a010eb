"""Unit tests for configuration."""

from pathlib import Path

import pytest

from mailquery.config import Config, load_config, save_config
from mailquery.exceptions import (
    ConfigError,
    ConfigParseError,
    ConfigValidationError,
    MailQueryError,
    OperatorNotAllowedError,
)
from mailquery.search.operators import OperatorDefinition, ValueKind
from mailquery.search.parser import parse


def test_default_config() -> None:
    """Test that default config has sensible values."""
    config = Config()
    assert config.colored_output is True
    assert config.max_depth == 32
    assert config.case_sensitive is False
    assert config.operators == []
    assert config.validate() == []


def test_load_missing_config(temp_dir: Path) -> None:
    """Test loading when config file doesn't exist."""
    config_path = temp_dir / "nonexistent.toml"
    config, warnings = load_config(config_path)

    assert config.config_path is None
    assert any("No config file found" in warning for warning in warnings)


def test_load_valid_config(sample_config: Path) -> None:
    """Test loading a valid config file."""
    config, warnings = load_config(sample_config)

    assert warnings == []
    assert config.config_path == sample_config.resolve()
    assert config.operators_allowed == []
    assert config.operators_disallowed == ["body"]
    assert config.max_depth == 8
    assert config.colored_output is False


def test_load_custom_operators(sample_config: Path) -> None:
    """Test that [[operators]] tables become operator definitions."""
    config, _ = load_config(sample_config)

    priority, received = config.operators
    assert priority.name == "priority"
    assert priority.kind == "priority"
    assert priority.aliases == frozenset({"p", "prio"})
    assert priority.value_kind is ValueKind.STRING
    assert priority.allow_negation is True
    assert received.value_kind is ValueKind.DATE
    assert received.allow_negation is False


def test_parser_options_from_config(sample_config: Path) -> None:
    """Test that config settings reach the parser."""
    config, _ = load_config(sample_config)
    options = config.parser_options()

    assert parse("p:high", options)[0].kind == "priority"
    assert options.max_depth == 8
    with pytest.raises(OperatorNotAllowedError):
        parse("body:x", options)


def test_load_invalid_toml(temp_dir: Path) -> None:
    """Test loading invalid TOML raises error."""
    config_path = temp_dir / "invalid.toml"
    config_path.write_text("this is not valid [ toml")

    with pytest.raises(ConfigParseError):
        load_config(config_path)


@pytest.mark.parametrize(
    "content",
    [
        '[display]\ncolored_output = "not a boolean"\n',
        '[parser]\ncase_sensitive = "yes"\n',
        '[parser]\nmax_depth = "deep"\n',
        "[parser]\nmax_depth = true\n",
        '[parser]\noperators_allowed = "from"\n',
        "[parser]\noperators_disallowed = [1, 2]\n",
        '[[operators]]\naliases = ["x"]\n',
        '[[operators]]\nname = "x"\nvalue_type = "number"\n',
        '[[operators]]\nname = "x"\nallow_negation = "no"\n',
        '[[operators]]\nname = "x"\naliases = "y"\n',
        'operators = "nope"\n',
    ],
)
def test_config_validation_invalid_values(temp_dir: Path, content: str) -> None:
    """Test that invalid values raise validation error."""
    config_path = temp_dir / "bad_values.toml"
    config_path.write_text(content)

    with pytest.raises(ConfigValidationError):
        load_config(config_path)


def test_max_depth_must_be_positive(temp_dir: Path) -> None:
    config_path = temp_dir / "depth.toml"
    config_path.write_text("[parser]\nmax_depth = 0\n")

    with pytest.raises(ConfigValidationError, match="parser.max_depth"):
        load_config(config_path)


def test_unknown_operator_in_lists_warns(temp_dir: Path) -> None:
    config_path = temp_dir / "lists.toml"
    config_path.write_text('[parser]\noperators_allowed = ["from", "frm"]\n')

    _, warnings = load_config(config_path)
    assert warnings == ["Unknown operator in allow/deny list: frm"]


def test_custom_operator_names_are_known(temp_dir: Path) -> None:
    config_path = temp_dir / "custom.toml"
    config_path.write_text(
        '[parser]\noperators_disallowed = ["priority"]\n\n[[operators]]\nname = "priority"\n'
    )

    _, warnings = load_config(config_path)
    assert warnings == []


def test_allow_and_deny_overlap_warns() -> None:
    config = Config(operators_allowed=["from", "to"], operators_disallowed=["FROM"])
    assert config.validate() == ["Operators both allowed and disallowed (disallow wins): from"]


def test_save_and_reload(temp_dir: Path) -> None:
    config = Config(
        operators=[OperatorDefinition("seen", "seen", frozenset({"s2"}), ValueKind.DATE, False)],
        operators_disallowed=["size"],
        case_sensitive=True,
        max_depth=4,
        colored_output=False,
    )
    config_path = temp_dir / "nested" / "config.toml"
    save_config(config, config_path)

    loaded, warnings = load_config(config_path)
    assert warnings == []
    assert loaded.operators == config.operators
    assert loaded.operators_disallowed == ["size"]
    assert loaded.case_sensitive is True
    assert loaded.max_depth == 4
    assert loaded.colored_output is False


def test_exception_hierarchy() -> None:
    assert issubclass(ConfigValidationError, ConfigError)
    assert issubclass(ConfigError, MailQueryError)
    error = ConfigValidationError("parser.max_depth", 0, "must be at least 1")
    assert str(error) == "Invalid config value for 'parser.max_depth': must be at least 1"


def test_empty_allow_list_means_no_restriction() -> None:
    options = Config().parser_options()
    assert options.operators_allowed is None
    assert parse("to:jane", options)[0].kind == "to"


def test_allow_list_reaches_parser(temp_dir: Path) -> None:
    config_path = temp_dir / "config.toml"
    config_path.write_text('[parser]\noperators_allowed = ["from"]\n')
    config, _ = load_config(config_path)
    options = config.parser_options()
    assert options.operators_allowed == ["from"]
    with pytest.raises(OperatorNotAllowedError):
        parse("to:jane", options)
