"""Configuration management for addon-mirror.

Handles loading and validation of YAML configuration files describing
the tracked upstream repositories and how their manifests are rendered.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List

import yaml

DEFAULT_CONFIG_PATH = "/etc/addonmirror/config.yaml"
DEFAULT_API_URL = "https://api.github.com"
DEFAULT_TEMPLATE_PATH = "addon.xml.tpl"
DEFAULT_PLACEHOLDER = "$VERSION"


@dataclass
class UpstreamConfig:
    """Configuration for the upstream release API."""

    api_url: str = DEFAULT_API_URL
    timeout: float = 10.0
    max_parallel_fetches: int = 4
    include_prereleases: bool = True
    user_agent: str = "addon-mirror"
    max_retries: int = 3


@dataclass
class TemplateConfig:
    """Configuration for manifest template rendering."""

    path: str = DEFAULT_TEMPLATE_PATH
    placeholder: str = DEFAULT_PLACEHOLDER
    line_separator: str = "\r\n"
    leading_separator: bool = True


@dataclass
class LoggingConfig:
    """Configuration for log output."""

    level: str = "INFO"
    log_dir: str = "/var/log/addonmirror"
    file_logging: bool = False


@dataclass
class MirrorConfig:
    """Top-level configuration for addon-mirror."""

    repositories: List[str] = field(default_factory=list)
    upstream: UpstreamConfig = field(default_factory=UpstreamConfig)
    template: TemplateConfig = field(default_factory=TemplateConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


_TRUE_STRINGS = {"true", "yes", "on", "1"}
_FALSE_STRINGS = {"false", "no", "off", "0", ""}


def parse_bool(value: Any, key: str) -> bool:
    """Parse a boolean option.

    YAML booleans pass through. Strings (as produced by ${VAR} expansion)
    accept the usual true/false spellings.

    Raises:
        ValueError: If the value is not a recognizable boolean
    """
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return value != 0
    if isinstance(value, str):
        normalized = value.strip().lower()
        if normalized in _TRUE_STRINGS:
            return True
        if normalized in _FALSE_STRINGS:
            return False
    raise ValueError(f"{key} must be a boolean, got {value!r}")


def parse_upstream_config(upstream_dict: Dict[str, Any]) -> UpstreamConfig:
    """Parse an upstream configuration dictionary.

    Args:
        upstream_dict: Upstream configuration dictionary

    Returns:
        UpstreamConfig instance
    """
    max_parallel = int(upstream_dict.get("max_parallel_fetches", 4))
    if max_parallel < 1:
        raise ValueError("upstream.max_parallel_fetches must be at least 1")

    return UpstreamConfig(
        api_url=str(upstream_dict.get("api_url", DEFAULT_API_URL)).rstrip("/"),
        timeout=float(upstream_dict.get("timeout", 10.0)),
        max_parallel_fetches=max_parallel,
        include_prereleases=parse_bool(
            upstream_dict.get("include_prereleases", True), "upstream.include_prereleases"
        ),
        user_agent=upstream_dict.get("user_agent", "addon-mirror"),
        max_retries=int(upstream_dict.get("max_retries", 3)),
    )


def parse_template_config(template_dict: Dict[str, Any]) -> TemplateConfig:
    """Parse a template configuration dictionary.

    Args:
        template_dict: Template configuration dictionary

    Returns:
        TemplateConfig instance
    """
    placeholder = template_dict.get("placeholder", DEFAULT_PLACEHOLDER)
    if not placeholder:
        raise ValueError("template.placeholder must not be empty")

    return TemplateConfig(
        path=template_dict.get("path", DEFAULT_TEMPLATE_PATH),
        placeholder=placeholder,
        line_separator=template_dict.get("line_separator", "\r\n"),
        leading_separator=parse_bool(
            template_dict.get("leading_separator", True), "template.leading_separator"
        ),
    )


def parse_logging_config(logging_dict: Dict[str, Any]) -> LoggingConfig:
    """Parse a logging configuration dictionary.

    Args:
        logging_dict: Logging configuration dictionary

    Returns:
        LoggingConfig instance
    """
    return LoggingConfig(
        level=logging_dict.get("level", "INFO"),
        log_dir=logging_dict.get("log_dir", "/var/log/addonmirror"),
        file_logging=parse_bool(logging_dict.get("file_logging", False), "logging.file_logging"),
    )


def parse_repositories(repositories: Any) -> List[str]:
    """Validate the tracked repository list.

    Entries must be "owner/name" strings. Duplicates are dropped while
    keeping the first occurrence, since configured order decides which
    repository keeps an addon id when two of them declare the same one.
    """
    if repositories is None:
        return []
    if not isinstance(repositories, list):
        raise TypeError(
            f"repositories must be a list, got {type(repositories).__name__}"
        )

    result: List[str] = []
    for entry in repositories:
        name = str(entry).strip()
        owner, sep, repo = name.partition("/")
        if not sep or not owner or not repo or "/" in repo:
            raise ValueError(f"Invalid repository name (expected owner/name): {entry!r}")
        if name not in result:
            result.append(name)
    return result


def parse_config(config_dict: Dict[str, Any]) -> MirrorConfig:
    """Parse the full configuration dictionary.

    Args:
        config_dict: Full configuration dictionary

    Returns:
        MirrorConfig instance
    """
    return MirrorConfig(
        repositories=parse_repositories(config_dict.get("repositories", [])),
        upstream=parse_upstream_config(config_dict.get("upstream") or {}),
        template=parse_template_config(config_dict.get("template") or {}),
        logging=parse_logging_config(config_dict.get("logging") or {}),
    )


def load_config(config_path: str = DEFAULT_CONFIG_PATH) -> Dict[str, Any]:
    """Load configuration from YAML file.

    Args:
        config_path: Path to configuration file

    Returns:
        Configuration dictionary

    Raises:
        FileNotFoundError: If config file doesn't exist
        yaml.YAMLError: If config file is invalid YAML
    """
    config_file = Path(config_path)

    if not config_file.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with config_file.open("r") as f:
        config = yaml.safe_load(f)

    if config is None:
        config = {}

    if not isinstance(config, dict):
        raise TypeError(
            f"Configuration root must be a mapping, got {type(config).__name__}"
        )

    # Template placeholders look like shell variables ("$VERSION")
    template = config.pop("template", None)
    config = _expand_env_vars(config)
    if template is not None:
        config["template"] = template

    return config


def _expand_env_vars(obj: Any) -> Any:
    """Recursively expand environment variables in configuration."""
    if isinstance(obj, dict):
        return {key: _expand_env_vars(value) for key, value in obj.items()}
    elif isinstance(obj, list):
        return [_expand_env_vars(item) for item in obj]
    elif isinstance(obj, str):
        return os.path.expandvars(obj)
    else:
        return obj


def load_typed_config(config_path: str = DEFAULT_CONFIG_PATH) -> MirrorConfig:
    """Load and parse configuration into typed dataclass.

    Args:
        config_path: Path to configuration file

    Returns:
        MirrorConfig instance

    Raises:
        FileNotFoundError: If config file doesn't exist
        yaml.YAMLError: If config file is invalid YAML
    """
    return parse_config(load_config(config_path))
