"""Configuration file loading using ruamel.yaml."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Optional

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from gitable.config.validator import validate_config
from gitable.providers import ProviderRegistry, default_registry
from gitable.utils.xdg import get_config_path

logger = logging.getLogger(__name__)


class ConfigLoadError(Exception):
    """Raised when config file cannot be loaded."""

    pass


class ConfigNotFoundError(ConfigLoadError):
    """Raised when config file does not exist."""

    pass


def load_config(config_path: Optional[Path] = None) -> dict[str, Any]:
    """Load configuration from YAML file.

    Args:
        config_path: Path to config file. If None, uses default XDG path.

    Returns:
        Parsed configuration dictionary.

    Raises:
        ConfigNotFoundError: If config file does not exist.
        ConfigLoadError: If config file cannot be parsed.
    """
    if config_path is None:
        config_path = get_config_path()

    if not config_path.exists():
        raise ConfigNotFoundError(f"Config file not found: {config_path}")

    yaml = YAML(typ="rt")

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = yaml.load(f)
    except YAMLError as e:
        raise ConfigLoadError(f"Invalid YAML in config file {config_path}: {e}") from e
    except OSError as e:
        raise ConfigLoadError(f"Cannot read config file {config_path}: {e}") from e

    if data is None:
        # Empty file or only comments
        return {}

    if not isinstance(data, dict):
        raise ConfigLoadError(
            f"Config file must contain a mapping, got {type(data).__name__}"
        )

    logger.debug("Loaded config from %s", config_path)
    return dict(data)


def load_registry(config_path: Optional[Path] = None) -> ProviderRegistry:
    """Load the hosting provider registry from a config file.

    A missing config file is not an error: the built-in providers are used.

    Args:
        config_path: Path to config file. If None, uses default XDG path.

    Returns:
        Provider registry described by the config.

    Raises:
        ConfigLoadError: If config file cannot be parsed.
        ConfigValidationError: If config content is invalid.
    """
    try:
        data = load_config(config_path)
    except ConfigNotFoundError as e:
        logger.debug("%s, using built-in providers", e)
        return default_registry()

    return validate_config(data).registry()


DEFAULT_CONFIG_TEMPLATE = """\
# gitable configuration
# =====================
#
# Location: {config_path}
#
# Hosting providers get special treatment when parsing and comparing
# repository URIs. A provider matches a URI when its predicate is true.
#
# Predicate functions:
#
#   host()               - Normalized host name ("" for local paths)
#   scheme()             - Normalized scheme ("" for scp-style URIs)
#   inferred_scheme()    - Scheme git will use ("ssh" for scp-style URIs)
#   user()               - Normalized user name ("" if none)
#   port()               - Port as a string ("" if none)
#   path(n)              - Path segment by index, ".git" stripped from the last
#                         Example: path(0) from "github.com/org/repo" -> "org"
#   uri()                - The whole URI as a string
#   is_scp()             - True for user@host:path URIs
#
# Provider options:
#
#   predicate            - Required expression, e.g. '"github.com" in host()'
#   org_project          - Compare repositories by org/project path only
#                          (default: false)
#   git_extension        - Append ".git" in heuristic parsing (default: true)
#   web_scheme           - Scheme replacing "http" in heuristic parsing

# Keep the built-in providers after the ones below.
include_defaults: true

providers:
  github:
    predicate: '"github.com" in host()'
    org_project: true
    git_extension: true
    web_scheme: https

  gitlab:
    predicate: '"gitlab.com" in host()'
    org_project: false
    git_extension: true
    web_scheme: https

  bitbucket:
    predicate: '"bitbucket.org" in host()'
    org_project: true
    git_extension: true
    web_scheme: https

#   self_hosted:
#     predicate: 'host() == "git.example.com" and path(0) != "mirrors"'
#     org_project: true
#     web_scheme: https
"""


def get_default_config(config_path: Optional[Path] = None) -> str:
    """Get default configuration file content.

    Args:
        config_path: Path where config will be saved (for documentation).

    Returns:
        Default configuration YAML content.
    """
    if config_path is None:
        config_path = get_config_path()
    return DEFAULT_CONFIG_TEMPLATE.format(config_path=config_path)
