"""Decide whether two git locations point at the same repository."""

from __future__ import annotations

from typing import Any, Optional

from gitable.parser import parse_when_valid
from gitable.providers import ProviderRegistry, default_registry
from gitable.uri import URI


def _compares_org_project(uri: URI, registry: ProviderRegistry) -> bool:
    provider = registry.match(uri)
    return provider is not None and provider.org_project


def is_equivalent(
    uri: Any,
    other: Any,
    registry: Optional[ProviderRegistry] = None,
) -> bool:
    """Check whether two locations probably indicate the same repository.

    Both sides are parsed leniently: anything unparseable is simply not
    equivalent. The normalized hosts must match. Then:

    - For providers that organize repositories as org/project (GitHub and
      Bitbucket by default), only the org/project paths are compared, so
      "git@github.com:org/repo.git" equals "https://github.com/org/repo".
    - Otherwise the normalized paths must match (ignoring a trailing slash)
      and either uri's path is absolute or both users match. A relative scp
      path is resolved against the login user's home directory.

    The second rule is a heuristic and not symmetric when only one side has
    an absolute path.

    Args:
        uri: Location to compare from.
        other: Location to compare with.
        registry: Hosting providers, defaults to GitHub, GitLab and Bitbucket.

    Returns:
        True if both locations probably indicate the same repository.

    Raises:
        ProviderError: If a provider predicate cannot be evaluated.
    """
    left = parse_when_valid(uri)
    right = parse_when_valid(other)
    if left is None or right is None:
        return False

    if (left.normalized_host or "") != (right.normalized_host or ""):
        return False

    if registry is None:
        registry = default_registry()

    if _compares_org_project(left, registry) or _compares_org_project(right, registry):
        return left.org_project == right.org_project

    return left.normalized_path.removesuffix("/") == right.normalized_path.removesuffix("/") and (
        left.path.startswith("/") or left.normalized_user == right.normalized_user
    )
