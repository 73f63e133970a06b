"""Configuration validation."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

from gitable.providers import DEFAULT_PROVIDERS, HostingProvider, ProviderRegistry


class ConfigValidationError(Exception):
    """Raised when config validation fails."""

    pass


@dataclass
class Config:
    """Validated configuration.

    Attributes:
        providers: Named hosting providers from the config file.
        include_defaults: Whether the built-in providers are kept after the
            configured ones.
    """

    providers: dict[str, HostingProvider] = field(default_factory=dict)
    include_defaults: bool = True

    def registry(self) -> ProviderRegistry:
        """Build the provider registry.

        Configured providers come first and replace built-in providers of the
        same name.
        """
        base = ProviderRegistry(DEFAULT_PROVIDERS if self.include_defaults else ())
        return base.with_providers(*self.providers.values())


def _validate_string(value: Any, field_name: str) -> str:
    """Validate that value is a non-empty string.

    Args:
        value: Value to validate.
        field_name: Name of the field for error messages.

    Returns:
        Validated string.

    Raises:
        ConfigValidationError: If validation fails.
    """
    if not isinstance(value, str):
        raise ConfigValidationError(
            f"Field '{field_name}' must be a string, got {type(value).__name__}"
        )
    if not value.strip():
        raise ConfigValidationError(f"Field '{field_name}' cannot be empty")
    return value


def _validate_bool(value: Any, field_name: str) -> bool:
    if not isinstance(value, bool):
        raise ConfigValidationError(
            f"Field '{field_name}' must be a boolean, got {type(value).__name__}"
        )
    return value


def _validate_provider(name: str, data: Any) -> HostingProvider:
    """Validate and parse a hosting provider rule.

    Args:
        name: Provider name.
        data: Rule data from config.

    Returns:
        Validated HostingProvider object.

    Raises:
        ConfigValidationError: If validation fails.
    """
    if not isinstance(data, dict):
        raise ConfigValidationError(
            f"Provider '{name}' must be a mapping, got {type(data).__name__}"
        )

    if "predicate" not in data:
        raise ConfigValidationError(f"Provider '{name}' missing required 'predicate'")

    known = {"predicate", "org_project", "git_extension", "web_scheme"}
    unknown = sorted(str(key) for key in data if key not in known)
    if unknown:
        raise ConfigValidationError(
            f"Provider '{name}' has unknown field(s): {', '.join(unknown)}"
        )

    predicate = _validate_string(data["predicate"], f"providers.{name}.predicate")

    org_project = False
    if "org_project" in data:
        org_project = _validate_bool(data["org_project"], f"providers.{name}.org_project")

    git_extension = True
    if "git_extension" in data:
        git_extension = _validate_bool(
            data["git_extension"], f"providers.{name}.git_extension"
        )

    web_scheme: Optional[str] = None
    if data.get("web_scheme") is not None:
        web_scheme = _validate_string(data["web_scheme"], f"providers.{name}.web_scheme")

    return HostingProvider(
        name=name,
        predicate=predicate,
        org_project=org_project,
        git_extension=git_extension,
        web_scheme=web_scheme,
    )


def validate_config(data: dict[str, Any]) -> Config:
    """Validate and parse configuration data.

    Args:
        data: Raw configuration dictionary from YAML.

    Returns:
        Validated Config object.

    Raises:
        ConfigValidationError: If validation fails.
    """
    include_defaults = True
    if "include_defaults" in data:
        include_defaults = _validate_bool(data["include_defaults"], "include_defaults")

    providers: dict[str, HostingProvider] = {}
    if data.get("providers") is not None:
        providers_data = data["providers"]
        if not isinstance(providers_data, dict):
            raise ConfigValidationError(
                f"'providers' must be a mapping, got {type(providers_data).__name__}"
            )
        for name, rule_data in providers_data.items():
            name = _validate_string(name, "providers")
            providers[name] = _validate_provider(name, rule_data)

    return Config(providers=providers, include_defaults=include_defaults)
