"""scp-like git locations: [user@]host:path."""

from __future__ import annotations

from typing import Optional

from gitable.uri import URI


class ScpURI(URI):
    """A git location in the scp-like shorthand git accepts for ssh.

    The shorthand has no scheme and no port, and the path may be relative to
    the login directory (``git@github.com:martinemde/gitable.git``) or
    absolute (``git@host.com:/home/martinemde/gitable.git``). Fields are
    stored like any other URI, but rendering keeps the input form.
    """

    @URI.path.setter
    def path(self, value: Optional[str]) -> None:
        URI.path.fset(self, value)
        # Relative scp paths stay relative: "host:repo.git", not "host:/repo.git".
        if not (value or "").startswith("/"):
            self._path = self._path.removeprefix("/")
            self._revalidate()

    @property
    def inferred_scheme(self) -> str:
        return "ssh"

    @property
    def is_ssh(self) -> bool:
        return True

    @property
    def is_scp(self) -> bool:
        return True

    def validate(self) -> None:
        """Check the scp-style rules.

        Raises:
            InvalidURIError: If the host or path is missing, or a scheme or
                port is present.
        """
        if not self._host:
            self._invalid("Hostname segment missing")

        if self._scheme:
            self._invalid("Scp style URI must not have a scheme")

        if self._port is not None:
            self._invalid("Scp style URI cannot have a port")

        if not self._path:
            self._invalid("Absolute URI missing hierarchical segment")

    def __str__(self) -> str:
        return f"{self.normalized_authority or ''}:{self.normalized_path}"
