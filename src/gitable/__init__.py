"""Parse, compare and rewrite git repository URIs, including scp-style ones."""

from gitable.equivalence import is_equivalent
from gitable.parser import heuristic_parse, parse, parse_when_valid
from gitable.providers import DEFAULT_PROVIDERS, HostingProvider, ProviderRegistry
from gitable.scp_uri import ScpURI
from gitable.uri import URI, InvalidURIError, TypeConversionError

__version__ = "0.1.0"

__all__ = [
    "DEFAULT_PROVIDERS",
    "HostingProvider",
    "InvalidURIError",
    "ProviderRegistry",
    "ScpURI",
    "TypeConversionError",
    "URI",
    "heuristic_parse",
    "is_equivalent",
    "parse",
    "parse_when_valid",
]
