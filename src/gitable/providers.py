"""Hosting providers that get special treatment.

A provider is a predicate over a URI plus the behavior that applies when it
matches: comparing repositories by org/project, forcing a ".git" basename in
heuristic parsing, and upgrading plain http.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterator, Optional

from gitable.predicate import PredicateError, evaluate_uri_predicate

if TYPE_CHECKING:
    from gitable.uri import URI


class ProviderError(Exception):
    """Raised when a provider predicate cannot be evaluated."""

    pass


@dataclass(frozen=True)
class HostingProvider:
    """A git hosting service.

    Attributes:
        name: Provider identifier.
        predicate: Expression evaluated against the URI functions, e.g.
            '"github.com" in host()'.
        org_project: Compare repositories by org/project path only, ignoring
            relative vs absolute scp paths and the login user.
        git_extension: Force a ".git" basename in heuristic parsing.
        web_scheme: Scheme that replaces "http" in heuristic parsing.
    """

    name: str
    predicate: str
    org_project: bool = False
    git_extension: bool = True
    web_scheme: Optional[str] = None

    def matches(self, uri: URI) -> bool:
        """Evaluate the predicate for uri.

        Raises:
            ProviderError: If the predicate cannot be evaluated.
        """
        try:
            return evaluate_uri_predicate(self.predicate, uri)
        except PredicateError as e:
            raise ProviderError(
                f"Error evaluating predicate for provider '{self.name}': {e}"
            ) from e


DEFAULT_PROVIDERS: tuple[HostingProvider, ...] = (
    HostingProvider(
        name="github",
        predicate='"github.com" in host()',
        org_project=True,
        web_scheme="https",
    ),
    HostingProvider(
        name="gitlab",
        predicate='"gitlab.com" in host()',
        web_scheme="https",
    ),
    HostingProvider(
        name="bitbucket",
        predicate='"bitbucket.org" in host()',
        org_project=True,
        web_scheme="https",
    ),
)


class ProviderRegistry:
    """Ordered, immutable collection of hosting providers.

    The first provider whose predicate matches wins.
    """

    def __init__(self, providers: tuple[HostingProvider, ...] = DEFAULT_PROVIDERS) -> None:
        names = [provider.name for provider in providers]
        duplicates = sorted({name for name in names if names.count(name) > 1})
        if duplicates:
            raise ValueError(f"Duplicate provider names: {', '.join(duplicates)}")
        self._providers = tuple(providers)

    @property
    def providers(self) -> tuple[HostingProvider, ...]:
        return self._providers

    def names(self) -> list[str]:
        return [provider.name for provider in self._providers]

    def get(self, name: str) -> Optional[HostingProvider]:
        for provider in self._providers:
            if provider.name == name:
                return provider
        return None

    def match(self, uri: URI) -> Optional[HostingProvider]:
        """Find the first provider matching uri.

        Args:
            uri: Parsed URI.

        Returns:
            Matching provider, or None.

        Raises:
            ProviderError: If a predicate cannot be evaluated.
        """
        for provider in self._providers:
            if provider.matches(uri):
                return provider
        return None

    def with_providers(self, *providers: HostingProvider) -> ProviderRegistry:
        """Return a registry with providers placed first.

        Existing providers with the same name are replaced.
        """
        replaced = {provider.name for provider in providers}
        kept = tuple(p for p in self._providers if p.name not in replaced)
        return ProviderRegistry(tuple(providers) + kept)

    def __iter__(self) -> Iterator[HostingProvider]:
        return iter(self._providers)

    def __len__(self) -> int:
        return len(self._providers)

    def __repr__(self) -> str:
        return f"ProviderRegistry({', '.join(self.names())})"


def default_registry() -> ProviderRegistry:
    """Registry with the built-in GitHub, GitLab and Bitbucket providers."""
    return ProviderRegistry(DEFAULT_PROVIDERS)
