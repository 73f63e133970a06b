"""Entry points that turn location strings into git repository URIs."""

from __future__ import annotations

import logging
import os
from typing import Any, Optional
from urllib.parse import DefragResult, ParseResult, SplitResult

from gitable import components
from gitable.providers import ProviderRegistry, default_registry
from gitable.scp_uri import ScpURI
from gitable.uri import InvalidURIError, TypeConversionError, URI

logger = logging.getLogger(__name__)


def _to_str(value: Any) -> str:
    """Convert a string-like value to str.

    Accepts str, bytes (UTF-8), os.PathLike and urllib.parse results.

    Raises:
        TypeConversionError: If value is not string-like.
    """
    if isinstance(value, str):
        return value
    if isinstance(value, (SplitResult, ParseResult, DefragResult)):
        return value.geturl()
    if isinstance(value, os.PathLike):
        return _to_str(os.fspath(value))
    if isinstance(value, (bytes, bytearray)):
        try:
            return bytes(value).decode("utf-8")
        except UnicodeDecodeError as e:
            raise TypeConversionError(f"Can't decode {type(value).__name__} as UTF-8") from e
    raise TypeConversionError(f"Can't convert {type(value).__name__} into String.")


def parse(uri: Any) -> Optional[URI]:
    """Parse a git repository location.

    Standard URIs become URI instances; "[user@]host:path" strings, which
    have no host in the generic grammar, become ScpURI instances.

    Args:
        uri: String-like value, an existing URI, or None.

    Returns:
        A new URI, a copy of uri if it already is one, or None for None.

    Raises:
        TypeConversionError: If uri is not string-like.
        InvalidURIError: If uri breaks the rules of its grammar.
    """
    if uri is None:
        return None
    if isinstance(uri, URI):
        return uri.copy()
    return _parse_text(_to_str(uri))


def _parse_text(text: str) -> URI:
    parts = components.split_uri(text)

    host: Optional[str] = None
    if parts.authority is not None:
        host = components.split_authority(parts.authority)[1]

    if host is None:
        match = components.SCP_PATTERN.match(text)
        if match:
            logger.debug("Parsing %r as scp-style URI", text)
            return ScpURI(authority=match.group(1), path=match.group(2))

    return URI(
        scheme=parts.scheme,
        authority=parts.authority,
        path=parts.path,
        query=parts.query,
        fragment=parts.fragment,
    )


def parse_when_valid(uri: Any) -> Optional[URI]:
    """Parse a git repository location, returning None if it is not valid.

    Args:
        uri: String-like value, an existing URI, or None.

    Returns:
        The parsed URI, or None.
    """
    try:
        return parse(uri)
    except (TypeConversionError, InvalidURIError) as e:
        logger.debug("Ignoring unparseable URI %r: %s", uri, e)
        return None


def _needs_web_scheme(uri: URI) -> bool:
    """Check for a host that ended up in the scheme or path."""
    if uri.is_scp:
        return False
    if uri.scheme is not None:
        return "." in uri.scheme
    return uri.host is None and components.looks_like_host(uri.path)


def heuristic_parse(
    uri: Any,
    registry: Optional[ProviderRegistry] = None,
) -> Optional[URI]:
    """Turn a copied browser URL or hand-typed location into a git URI.

    - Obvious typos are repaired (see components.heuristic_upgrade)
    - "github.com/martinemde/gitable" gets an "http://" scheme
    - For known providers, "http" is upgraded to the provider's web scheme
      and the basename gets a ".git" extension

    Already valid git URIs come back unchanged.

    Args:
        uri: String-like value, an existing URI, or None.
        registry: Hosting providers, defaults to GitHub, GitLab and Bitbucket.

    Returns:
        The parsed URI, or None for None.

    Raises:
        TypeConversionError: If uri is not string-like.
        InvalidURIError: If even the repaired uri is invalid.
        ProviderError: If a provider predicate cannot be evaluated.
    """
    if uri is None:
        return None

    text = components.heuristic_upgrade(str(uri) if isinstance(uri, URI) else _to_str(uri))
    parsed = _parse_text(text)

    if _needs_web_scheme(parsed):
        logger.debug("Assuming http scheme for %r", text)
        parsed = _parse_text(f"http://{text}")

    if registry is None:
        registry = default_registry()

    provider = registry.match(parsed)
    if provider is not None:
        logger.debug("URI %s matches provider %s", parsed, provider.name)
        with parsed.defer_validation():
            if provider.web_scheme and parsed.normalized_scheme == "http":
                parsed.scheme = provider.web_scheme
            if provider.git_extension:
                parsed.set_git_extension()

    return parsed
