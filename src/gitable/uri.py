"""Git repository URIs in standard (scheme://authority/path) form."""

from __future__ import annotations

import posixpath
import re
from contextlib import contextmanager
from copy import copy as shallow_copy
from typing import TYPE_CHECKING, Any, Iterator, Optional, Union

from gitable import components

if TYPE_CHECKING:
    from gitable.providers import ProviderRegistry


class InvalidURIError(ValueError):
    """Raised when a URI violates the rules of its grammar."""

    pass


class TypeConversionError(TypeError):
    """Raised when a value cannot be treated as a URI string."""

    pass


SCHEME_PATTERN = re.compile(r"^[A-Za-z][A-Za-z0-9+.\-]*\Z")
INVALID_HOST_PATTERN = re.compile(r"[\t\n\v\f\r \"#%/<>?@\\\[\]^`{|}]")
GIT_EXTENSION_PATTERN = re.compile(r"\.git/?\Z")
PORT_PATTERN = re.compile(r"[0-9]+\Z")

# Transports that never carry a user name: local paths and the git daemon.
UNAUTHENTICATED_SCHEMES = frozenset({"file", "git"})


class URI:
    """A git repository location in standard URI form.

    Covers ``ssh://``, ``git://``, ``http[s]://``, ``ftp[s]://``, ``rsync://``,
    ``file://`` and bare filesystem paths. Raw fields are kept exactly as
    given so that ``str(uri)`` reproduces the parsed input; the
    ``normalized_*`` views are used for comparison.

    Fields are mutable through their properties. Each assignment re-validates
    the whole URI unless it happens inside :meth:`defer_validation`.
    """

    def __init__(
        self,
        scheme: Optional[str] = None,
        user: Optional[str] = None,
        password: Optional[str] = None,
        host: Optional[str] = None,
        port: Union[int, str, None] = None,
        path: Optional[str] = "",
        query: Optional[str] = None,
        fragment: Optional[str] = None,
        *,
        authority: Optional[str] = None,
        userinfo: Optional[str] = None,
    ) -> None:
        """Build a URI from its fields and validate it once.

        Args:
            scheme: Scheme without "://".
            user: User name.
            password: Password.
            host: Host name or address. "" is an empty authority (file:///).
            port: Port number.
            path: Path; prefixed with "/" when relative and a host is set.
            query: Query without "?".
            fragment: Fragment without "#".
            authority: "user:password@host:port" text, overrides the
                user/password/host/port arguments.
            userinfo: "user:password" text, overrides user/password.

        Raises:
            InvalidURIError: If the fields do not form a valid URI.
        """
        self._scheme: Optional[str] = None
        self._user: Optional[str] = None
        self._password: Optional[str] = None
        self._host: Optional[str] = None
        self._port: Optional[int] = None
        self._path = ""
        self._query: Optional[str] = None
        self._fragment: Optional[str] = None
        self._validation_deferred = False

        with self.defer_validation():
            self.scheme = scheme
            if authority is not None:
                self.authority = authority
            else:
                if userinfo is not None:
                    self.userinfo = userinfo
                else:
                    self.user = user
                    self.password = password
                self.host = host
                self.port = port
            self.path = path
            self.query = query
            self.fragment = fragment

    # --- Validation ---

    @contextmanager
    def defer_validation(self) -> Iterator[URI]:
        """Suspend validation while several fields change together.

        Validation runs once when the block exits normally. If the block
        raises, the exception propagates and the URI should be discarded.

        Example:
            with uri.defer_validation():
                uri.host = "github.com"
                uri.path = "/martinemde/gitable.git"

        Raises:
            InvalidURIError: If the URI is invalid when the block exits.
        """
        previous = self._validation_deferred
        self._validation_deferred = True
        try:
            yield self
        finally:
            self._validation_deferred = previous
        if not previous:
            self.validate()

    def _revalidate(self) -> None:
        if not self._validation_deferred:
            self.validate()

    def validate(self) -> None:
        """Check the URI against the standard URI rules.

        Raises:
            InvalidURIError: If a rule is violated.
        """
        if self._scheme is not None and not SCHEME_PATTERN.match(self._scheme):
            self._invalid("Invalid scheme format")

        if (
            self._scheme is not None
            and self.normalized_scheme != "file"
            and not self._host
            and not self._path
        ):
            self._invalid("Absolute URI missing hierarchical segment")

        if self._host is None:
            if self._port is not None or self._user is not None or self._password is not None:
                self._invalid("Hostname not supplied")
        elif not self._host.startswith("[") and INVALID_HOST_PATTERN.search(self._host):
            self._invalid("Invalid character in host")

        if self._port is not None and not 0 <= self._port <= 65535:
            self._invalid("Invalid port number")

        if self._path.startswith("//") and self._host is None:
            self._invalid(
                "Cannot have a path with two leading slashes without an authority set"
            )

        if self._user is not None and self.inferred_scheme in UNAUTHENTICATED_SCHEMES:
            self._invalid(
                f"User not supported with {self.inferred_scheme} scheme, "
                "authenticated URIs need ssh"
            )

    def _invalid(self, reason: str) -> None:
        raise InvalidURIError(f"{reason}: '{self}'")

    # --- Raw fields ---

    @property
    def scheme(self) -> Optional[str]:
        return self._scheme

    @scheme.setter
    def scheme(self, value: Optional[str]) -> None:
        self._scheme = value if value and value.strip() else None
        self._revalidate()

    @property
    def user(self) -> Optional[str]:
        return self._user

    @user.setter
    def user(self, value: Optional[str]) -> None:
        self._user = value
        self._revalidate()

    @property
    def password(self) -> Optional[str]:
        return self._password

    @password.setter
    def password(self, value: Optional[str]) -> None:
        self._password = value
        if value is not None and self._user is None:
            self._user = ""
        self._revalidate()

    @property
    def host(self) -> Optional[str]:
        return self._host

    @host.setter
    def host(self, value: Optional[str]) -> None:
        self._host = value
        self._revalidate()

    @property
    def port(self) -> Optional[int]:
        return self._port

    @port.setter
    def port(self, value: Union[int, str, None]) -> None:
        if value is None or value == "":
            self._port = None
        elif isinstance(value, int) and not isinstance(value, bool):
            self._port = value
        elif isinstance(value, str) and PORT_PATTERN.match(value):
            self._port = int(value)
        else:
            self._invalid(f"Invalid port number {value!r}")
        self._revalidate()

    @property
    def path(self) -> str:
        return self._path

    @path.setter
    def path(self, value: Optional[str]) -> None:
        path = value or ""
        if path and not path.startswith("/") and self._host is not None:
            path = f"/{path}"
        self._path = path
        self._revalidate()

    @property
    def query(self) -> Optional[str]:
        return self._query

    @query.setter
    def query(self, value: Optional[str]) -> None:
        self._query = value
        self._revalidate()

    @property
    def fragment(self) -> Optional[str]:
        return self._fragment

    @fragment.setter
    def fragment(self, value: Optional[str]) -> None:
        self._fragment = value
        self._revalidate()

    # --- Composite fields ---

    @property
    def userinfo(self) -> Optional[str]:
        return components.join_userinfo(self._user, self._password)

    @userinfo.setter
    def userinfo(self, value: Optional[str]) -> None:
        user, password = components.split_userinfo(value)
        with self.defer_validation():
            self.user = user
            self.password = password

    @property
    def authority(self) -> Optional[str]:
        return components.join_authority(self.userinfo, self._host, self._port)

    @authority.setter
    def authority(self, value: Optional[str]) -> None:
        with self.defer_validation():
            if value is None:
                self.userinfo = None
                self.host = None
                self.port = None
            else:
                userinfo, host, port = components.split_authority(value)
                self.userinfo = userinfo
                self.host = host
                self.port = port

    # --- Normalized views ---

    @property
    def normalized_scheme(self) -> Optional[str]:
        return components.normalize_scheme(self._scheme)

    @property
    def normalized_user(self) -> Optional[str]:
        return components.normalize_component(self._user, components.USER_SAFE)

    @property
    def normalized_password(self) -> Optional[str]:
        return components.normalize_component(self._password, components.PASSWORD_SAFE)

    @property
    def normalized_userinfo(self) -> Optional[str]:
        return components.join_userinfo(self.normalized_user, self.normalized_password)

    @property
    def normalized_host(self) -> Optional[str]:
        return components.normalize_host(self._host)

    @property
    def normalized_port(self) -> Optional[int]:
        return components.normalize_port(self._port, self.normalized_scheme)

    @property
    def normalized_authority(self) -> Optional[str]:
        return components.join_authority(
            self.normalized_userinfo, self.normalized_host, self.normalized_port
        )

    @property
    def normalized_path(self) -> str:
        return components.normalize_path(self._path, self.normalized_scheme)

    @property
    def normalized_query(self) -> Optional[str]:
        return components.normalize_component(self._query, components.QUERY_SAFE)

    @property
    def normalized_fragment(self) -> Optional[str]:
        return components.normalize_component(self._fragment, components.FRAGMENT_SAFE)

    # --- Path views and mutation ---

    @property
    def basename(self) -> str:
        """Final path segment, "" when the path has none.

        A trailing slash is ignored, so "/path/to/repo.git/" gives "repo.git",
        while "/" and "" give "" (never "/"). Segment parameters after ";" are
        dropped.
        """
        segment = self._path.rstrip("/").rpartition("/")[2]
        return segment.split(";", 1)[0]

    @property
    def extname(self) -> str:
        """Extension of the basename including the dot, "" if there is none."""
        return posixpath.splitext(self.basename)[1]

    @property
    def path_segments(self) -> list[str]:
        return components.extract_path_segments(self._path)

    def set_basename(self, new_basename: str) -> None:
        """Replace the basename, or append one when the path has none.

        The last occurrence of the current basename is replaced, so a path
        like "/gitable/gitable" only has its final segment changed.

        Args:
            new_basename: Replacement final segment.

        Raises:
            InvalidURIError: If the resulting URI is invalid.
        """
        base = self.basename
        if not base:
            self.path = self._path + new_basename
            return
        index = self._path.rfind(base)
        self.path = self._path[:index] + new_basename + self._path[index + len(base):]

    def set_extension(self, extension: str) -> None:
        """Replace the extension of the basename.

        Ignored when there is no basename, since appending an extension to a
        bare host or directory would point somewhere else entirely. Leading
        dots of the new extension are dropped, so "git" and ".git" both give
        ".git". A dot-file basename such as ".git" is all extension and is
        replaced as a whole.

        Args:
            extension: New extension.
        """
        base = self.basename
        if not base:
            return
        if not self.extname and base.startswith("."):
            stem = ""
        else:
            stem = base[: len(base) - len(self.extname)]
        self.set_basename(f"{stem}.{extension.lstrip('.')}")

    def set_git_extension(self) -> None:
        """Make the basename end in ".git" exactly once.

        Unlike set_extension("git") this keeps dotted repository names such
        as "socket.io" intact.
        """
        base = self.basename
        if not base:
            return
        self.set_basename(f"{base.removesuffix('.git')}.git")

    # --- Derived properties ---

    @property
    def project_name(self) -> str:
        """Best guess at the repository name: basename without ".git"."""
        return self.basename.removesuffix(".git")

    @property
    def org_project(self) -> str:
        """Path without surrounding slashes and ".git", e.g. "martinemde/gitable"."""
        return self.normalized_path.removeprefix("/").removesuffix("/").removesuffix(".git")

    @property
    def inferred_scheme(self) -> Optional[str]:
        """Scheme, or "file" for URIs with neither scheme nor host."""
        scheme = self.normalized_scheme
        if scheme == "file":
            return "file"
        if not scheme and not self.normalized_host:
            return "file"
        return scheme

    @property
    def is_local(self) -> bool:
        return self.inferred_scheme == "file"

    @property
    def is_ssh(self) -> bool:
        scheme = self.normalized_scheme
        return scheme is not None and "ssh" in scheme

    @property
    def is_scp(self) -> bool:
        return False

    @property
    def is_authenticated(self) -> bool:
        """True when connecting needs credentials: ssh, or a user without password."""
        return self.is_ssh or self.is_interactively_authenticated

    @property
    def is_interactively_authenticated(self) -> bool:
        """True when git will prompt for a password (user given, no password, no ssh)."""
        return (
            not self.is_ssh
            and self.normalized_user is not None
            and self.normalized_password is None
        )

    def host_match(self, fragment: str) -> bool:
        host = self.normalized_host
        return bool(host) and fragment in host

    @property
    def is_github(self) -> bool:
        return self.host_match("github.com")

    @property
    def is_gitlab(self) -> bool:
        return self.host_match("gitlab.com")

    @property
    def is_bitbucket(self) -> bool:
        return self.host_match("bitbucket.org")

    def to_web_uri(self, scheme: str = "https") -> Optional[URI]:
        """Build a browser link for hosts that follow the github layout.

        Not every git host serves repositories at https://host/path, so check
        is_github / is_gitlab / is_bitbucket before relying on the result.

        Args:
            scheme: Scheme of the web link.

        Returns:
            URI of scheme://host[:port]/path without ".git", or None when the
            URI has no host.
        """
        host = self.normalized_host
        if not host:
            return None
        return URI(
            scheme=scheme,
            host=host,
            port=self.normalized_port,
            path=GIT_EXTENSION_PATTERN.sub("", self.normalized_path),
        )

    def is_equivalent(self, other: Any, registry: Optional[ProviderRegistry] = None) -> bool:
        """Check whether other probably points at the same repository.

        See gitable.equivalence.is_equivalent for the rules.
        """
        from gitable.equivalence import is_equivalent

        return is_equivalent(self, other, registry=registry)

    # --- Object protocol ---

    def copy(self) -> URI:
        """Return an independent copy of this URI."""
        duplicate = shallow_copy(self)
        duplicate._validation_deferred = False
        return duplicate

    def __str__(self) -> str:
        return components.join_uri(
            self._scheme, self.authority, self._path, self._query, self._fragment
        )

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self}>"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, URI):
            return NotImplemented
        return type(self) is type(other) and str(self) == str(other)

    def __hash__(self) -> int:
        return hash((type(self).__name__, str(self)))
