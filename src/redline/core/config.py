"""Configuration loading and validation for Redline."""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

import yaml

from redline.diff.summary import RiskLevel

CONFIG_FILENAMES = (".redline.yaml", ".redline.yml")
VALID_FORMATS = {"text", "json", "markdown"}
VALID_VIEWS = {"unified", "split"}
MIN_WIDTH = 40


class ConfigError(Exception):
    """Error in configuration."""

    pass


@dataclass
class Config:
    """Full application configuration."""

    author: Optional[str] = None
    state_file: str = ".redline/review.json"
    view: str = "unified"
    width: int = 160
    show_comments: bool = True
    output_format: str = "text"
    fail_on: Optional[RiskLevel] = None

    def __post_init__(self) -> None:
        validate_config(self)


def validate_config(config: Config) -> None:
    """Validate configuration values.

    Raises:
        ConfigError: If any values are invalid.
    """
    if config.output_format not in VALID_FORMATS:
        raise ConfigError(
            f"output_format must be one of {sorted(VALID_FORMATS)}, got {config.output_format}"
        )

    if config.view not in VALID_VIEWS:
        raise ConfigError(f"view must be one of {sorted(VALID_VIEWS)}, got {config.view}")

    if not isinstance(config.width, int) or isinstance(config.width, bool) or config.width < MIN_WIDTH:
        raise ConfigError(f"width must be an integer of at least {MIN_WIDTH}, got {config.width}")

    if not config.state_file:
        raise ConfigError("state_file must not be empty")

    if config.author is not None and not str(config.author).strip():
        raise ConfigError("author must not be blank")


def find_config_file(start_path: Optional[str] = None) -> Optional[str]:
    """Find .redline.yaml in current directory or parents.

    Args:
        start_path: Starting directory (defaults to cwd).

    Returns:
        Path to config file if found, None otherwise.
    """
    if start_path:
        current = Path(start_path).resolve()
    else:
        current = Path.cwd()

    while True:
        for name in CONFIG_FILENAMES:
            config_path = current / name
            if config_path.exists():
                return str(config_path)

        # Stop at git root
        if (current / ".git").exists():
            break

        parent = current.parent
        if parent == current:
            break
        current = parent

    return None


def load_config(path: Optional[str] = None) -> Config:
    """Load configuration from file.

    Args:
        path: Path to config file. If None, searches for .redline.yaml.

    Returns:
        Config object with loaded or default values.

    Raises:
        ConfigError: If the config file is invalid.
    """
    if path is None:
        path = find_config_file()

    if path is None:
        return Config()

    try:
        with open(path, "r", encoding="utf-8") as f:
            raw = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in config file: {e}") from e
    except OSError as e:
        raise ConfigError(f"Cannot read config file: {e}") from e

    if raw is None:
        return Config()

    if not isinstance(raw, dict):
        raise ConfigError("Config file must contain a mapping")

    return _parse_config(raw)


def _section(raw: dict, name: str) -> dict:
    section = raw.get(name, {})
    if section is None:
        return {}
    if not isinstance(section, dict):
        raise ConfigError(f"'{name}' section must be a mapping")
    return section


def _parse_config(raw: dict) -> Config:
    """Parse raw YAML dict into Config object."""
    review = _section(raw, "review")
    display = _section(raw, "display")
    settings = _section(raw, "settings")

    fail_on = None
    if settings.get("fail_on") is not None:
        fail_on = parse_risk(settings["fail_on"])

    author = review.get("author")
    return Config(
        author=str(author) if author is not None else None,
        state_file=review.get("state_file", Config.state_file),
        view=display.get("view", Config.view),
        width=display.get("width", Config.width),
        show_comments=bool(display.get("show_comments", True)),
        output_format=settings.get("output_format", Config.output_format),
        fail_on=fail_on,
    )


def parse_risk(value: Any) -> RiskLevel:
    """Parse a risk level name.

    Raises:
        ConfigError: If the value is not low, medium or high.
    """
    try:
        return RiskLevel(str(value).lower())
    except ValueError:
        raise ConfigError(f"Invalid risk level: {value}")


def merge_cli_args(config: Config, **kwargs: Any) -> Config:
    """Merge CLI arguments into configuration.

    CLI args take precedence over config file values; None means unset.

    Args:
        config: Base configuration.
        **kwargs: CLI arguments (author, state_file, view, width,
            show_comments, output_format, fail_on).

    Returns:
        New Config with merged values.
    """
    values = {
        "author": config.author,
        "state_file": config.state_file,
        "view": config.view,
        "width": config.width,
        "show_comments": config.show_comments,
        "output_format": config.output_format,
        "fail_on": config.fail_on,
    }
    for name in values:
        if kwargs.get(name) is not None:
            values[name] = kwargs[name]

    return Config(**values)
