"""Generic URI decomposition and component normalization.

These helpers know nothing about git. They split a string with the RFC 3986
grammar, take an authority apart, and produce the normalized form of each
component that comparisons rely on. Percent-encoding is delegated to
:mod:`urllib.parse`.
"""

from __future__ import annotations

import re
import string
from dataclasses import dataclass
from typing import Optional
from urllib.parse import quote

# Regular expression from RFC 3986, appendix B.
URI_PATTERN = re.compile(
    r"^(([^:/?#]+):)?(//([^/?#]*))?([^?#]*)(\?([^#]*))?(#(.*))?\Z",
    re.DOTALL,
)

# Pattern for scp-like locations: [user@]host:path
SCP_PATTERN = re.compile(r"^([^:/?#]+):([^:?#]*)\Z")

USERINFO_PATTERN = re.compile(r"^([^\[\]]*)@")
PORT_PATTERN = re.compile(r":([^:@\[\]]*?)\Z")
PERCENT_ESCAPE_PATTERN = re.compile(r"%([0-9A-Fa-f]{2})")
TRAILING_DOT_PATTERN = re.compile(r"[^.]\.\Z")
BARE_HOST_PATTERN = re.compile(r"^[^/]+\.[^/]*")

UNRESERVED = frozenset(string.ascii_letters + string.digits + "-._~")
SUB_DELIMS = "!$&'()*+,;="

USER_SAFE = SUB_DELIMS
PASSWORD_SAFE = SUB_DELIMS + ":"
PATH_SAFE = SUB_DELIMS + ":@/"
QUERY_SAFE = SUB_DELIMS + ":@/?"
FRAGMENT_SAFE = QUERY_SAFE

DEFAULT_PORTS: dict[str, int] = {
    "ftp": 21,
    "ftps": 990,
    "git": 9418,
    "git+ssh": 22,
    "http": 80,
    "https": 443,
    "rsync": 873,
    "ssh": 22,
    "ssh+git": 22,
}

# Schemes whose normalized empty path is "/".
ROOTED_SCHEMES = frozenset({"http", "https", "ftp", "tftp"})

HEURISTIC_SCHEME_FIXES = (
    (re.compile(r"^http:/+", re.IGNORECASE), "http://"),
    (re.compile(r"^https:/+", re.IGNORECASE), "https://"),
    (re.compile(r"^file:/+", re.IGNORECASE), "file:///"),
)


@dataclass(frozen=True)
class URIParts:
    """Raw pieces of a URI string.

    Attributes:
        scheme: Scheme without the trailing colon, None if absent.
        authority: Text between "//" and the path, None if there is no "//".
        path: Path, possibly empty.
        query: Query without "?", None if absent.
        fragment: Fragment without "#", None if absent.
    """

    scheme: Optional[str]
    authority: Optional[str]
    path: str
    query: Optional[str]
    fragment: Optional[str]


def split_uri(uri: str) -> URIParts:
    """Split a string into its five RFC 3986 parts.

    Every string matches the grammar.

    Args:
        uri: String to split.

    Returns:
        URIParts with the raw captured text.
    """
    match = URI_PATTERN.match(uri)
    if match is None:
        raise ValueError(f"Invalid URI: {uri}")
    return URIParts(
        scheme=match.group(2),
        authority=match.group(4),
        path=match.group(5),
        query=match.group(7),
        fragment=match.group(9),
    )


def split_authority(authority: str) -> tuple[Optional[str], str, Optional[str]]:
    """Split an authority into userinfo, host and port.

    The userinfo runs up to the last "@" outside an IPv6 literal. A colon
    inside brackets never starts the port.

    Args:
        authority: Authority text, e.g. "user@host.xz:8888".

    Returns:
        Tuple of (userinfo, host, port). Userinfo and port are None when
        absent; an empty port is reported as None.
    """
    userinfo: Optional[str] = None
    hostport = authority
    userinfo_match = USERINFO_PATTERN.match(authority)
    if userinfo_match:
        userinfo = userinfo_match.group(1)
        hostport = authority[userinfo_match.end():]

    port: Optional[str] = None
    host = hostport
    port_match = PORT_PATTERN.search(hostport)
    if port_match:
        port = port_match.group(1) or None
        host = hostport[: port_match.start()]

    return userinfo, host, port


def split_userinfo(userinfo: Optional[str]) -> tuple[Optional[str], Optional[str]]:
    """Split userinfo into user and password at the first colon."""
    if userinfo is None:
        return None, None
    user, sep, password = userinfo.partition(":")
    return user, (password if sep else None)


def join_userinfo(user: Optional[str], password: Optional[str]) -> Optional[str]:
    if user is None:
        return None
    if password is None:
        return user
    return f"{user}:{password}"


def join_authority(
    userinfo: Optional[str],
    host: Optional[str],
    port: Optional[int],
) -> Optional[str]:
    """Assemble an authority; None when there is no host."""
    if host is None:
        return None
    authority = host
    if userinfo is not None:
        authority = f"{userinfo}@{authority}"
    if port is not None:
        authority = f"{authority}:{port}"
    return authority


def join_uri(
    scheme: Optional[str],
    authority: Optional[str],
    path: str,
    query: Optional[str],
    fragment: Optional[str],
) -> str:
    """Render URI parts back into a string, the inverse of split_uri."""
    result = ""
    if scheme is not None:
        result += f"{scheme}:"
    if authority is not None:
        result += f"//{authority}"
    result += path
    if query is not None:
        result += f"?{query}"
    if fragment is not None:
        result += f"#{fragment}"
    return result


def _normalize_escape(match: re.Match[str]) -> str:
    char = chr(int(match.group(1), 16))
    if char in UNRESERVED:
        return char
    return match.group(0).upper()


def normalize_component(value: Optional[str], safe: str) -> Optional[str]:
    """Normalize percent-encoding of a component.

    Escapes of unreserved characters are decoded, remaining escapes are
    uppercased, and characters outside the allowed set are encoded.

    Args:
        value: Raw component, or None.
        safe: Characters allowed unencoded besides the unreserved set.

    Returns:
        Normalized component, or None if value is None.
    """
    if value is None:
        return None
    value = PERCENT_ESCAPE_PATTERN.sub(_normalize_escape, value)
    return quote(value, safe=safe + "%")


def normalize_scheme(scheme: Optional[str]) -> Optional[str]:
    if scheme is None:
        return None
    return scheme.strip().lower()


def normalize_host(host: Optional[str]) -> Optional[str]:
    """Lowercase a host, drop a single trailing dot, IDNA-encode it.

    Args:
        host: Raw host, or None. The empty host stays empty.

    Returns:
        Normalized host.
    """
    if host is None or host == "":
        return host
    host = host.lower()
    if host.startswith("["):
        return host
    if TRAILING_DOT_PATTERN.search(host):
        host = host[:-1]
    if not host.isascii():
        try:
            host = host.encode("idna").decode("ascii")
        except UnicodeError:
            pass
    return normalize_component(host, SUB_DELIMS)


def normalize_port(port: Optional[int], scheme: Optional[str]) -> Optional[int]:
    """Drop a port that equals the default port of the scheme."""
    if port is None:
        return None
    if scheme is not None and DEFAULT_PORTS.get(scheme) == port:
        return None
    return port


def remove_dot_segments(path: str) -> str:
    """Resolve "." and ".." segments of an absolute path (RFC 3986 5.2.4)."""
    segments = path.split("/")
    resolved: list[str] = []
    for segment in segments:
        if segment == "..":
            if len(resolved) > 1:
                resolved.pop()
        elif segment != ".":
            resolved.append(segment)
    if segments[-1] in (".", ".."):
        resolved.append("")
    return "/".join(resolved)


def normalize_path(path: str, scheme: Optional[str]) -> str:
    """Normalize a path for comparison and rendering.

    Relative paths keep their dot segments, since scp-style paths such as
    "~user/../repo.git" are resolved by the remote shell, not by us.

    Args:
        path: Raw path.
        scheme: Normalized scheme, used to root empty web paths.

    Returns:
        Normalized path.
    """
    result = normalize_component(path, PATH_SAFE) or ""
    if result.startswith("/"):
        result = remove_dot_segments(result)
    if not result.strip() and scheme in ROOTED_SCHEMES:
        result = "/"
    return result


def extract_path_segments(path: str) -> list[str]:
    """Extract clean path segments from a path string.

    Removes:
    - Leading/trailing slashes
    - Empty segments
    - .git suffix from the last segment

    Args:
        path: Path string to parse.

    Returns:
        List of path segments.
    """
    segments = [s for s in path.strip("/").split("/") if s]

    if segments and segments[-1].endswith(".git"):
        segments[-1] = segments[-1][:-4]

    return segments


def heuristic_upgrade(uri: str) -> str:
    """Repair common damage in hand-typed or copy-pasted URIs.

    - Surrounding whitespace is stripped
    - "http:/host" and "http:///host" become "http://host" (same for https)
    - "file:/path" becomes "file:///path"
    - Backslashes in the authority become slashes, spaces become %20

    Args:
        uri: Raw user input.

    Returns:
        Repaired URI string. Nothing is validated here.
    """
    uri = uri.strip()
    for pattern, replacement in HEURISTIC_SCHEME_FIXES:
        if pattern.match(uri):
            uri = pattern.sub(replacement, uri, count=1)
            break

    authority = split_uri(uri).authority
    if authority:
        repaired = authority.replace("\\", "/").replace(" ", "%20")
        uri = uri.replace(authority, repaired, 1)

    return uri


def looks_like_host(text: Optional[str]) -> bool:
    """Check whether the start of text looks like a dotted host name."""
    return text is not None and BARE_HOST_PATTERN.match(text) is not None
