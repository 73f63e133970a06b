"""Predicate evaluation against URIs using simpleeval with strict type checking."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable

from simpleeval import EvalWithCompoundTypes, FunctionNotDefined, NameNotDefined

if TYPE_CHECKING:
    from gitable.uri import URI


class PredicateError(Exception):
    """Raised when a predicate cannot be evaluated."""

    pass


class StrictSimpleEval(EvalWithCompoundTypes):  # type: ignore[misc]
    """simpleeval evaluator limited to the functions and names it is given."""

    def __init__(
        self,
        functions: dict[str, Callable[..., Any]] | None = None,
        names: dict[str, Any] | None = None,
    ) -> None:
        """Initialize with custom functions and names.

        Args:
            functions: Dictionary of functions available during evaluation.
            names: Dictionary of variables available during evaluation.
        """
        super().__init__(functions=functions or {}, names=names or {})


class FunctionRegistry:
    """URI functions available to provider predicates.

    - host(): normalized host, "" if none
    - scheme(): normalized scheme, "" if none
    - inferred_scheme(): scheme git will actually use
    - user(): normalized user, "" if none
    - port(): port as string, "" if none
    - path(index): path segment by index (".git" stripped from the last)
    - uri(): the URI as a string
    - is_scp(): whether the URI uses the scp-like shorthand
    """

    def __init__(self, uri: URI) -> None:
        self._uri = uri
        self._functions: dict[str, Callable[..., Any]] = {
            "host": self._host,
            "scheme": self._scheme,
            "inferred_scheme": self._inferred_scheme,
            "user": self._user,
            "port": self._port,
            "path": self._path,
            "uri": self._uri_string,
            "is_scp": self._is_scp,
        }

    def get_functions(self) -> dict[str, Callable[..., Any]]:
        """Return dictionary of all registered functions.

        Returns:
            Dictionary mapping function names to callables.
        """
        return self._functions.copy()

    def _host(self) -> str:
        return self._uri.normalized_host or ""

    def _scheme(self) -> str:
        return self._uri.normalized_scheme or ""

    def _inferred_scheme(self) -> str:
        return self._uri.inferred_scheme or ""

    def _user(self) -> str:
        return self._uri.normalized_user or ""

    def _port(self) -> str:
        port = self._uri.port
        return "" if port is None else str(port)

    def _path(self, index: int) -> str:
        """Get URI path segment by index.

        Args:
            index: Path segment index (0-based, negative for reverse).
                   Example: path(-1) returns last segment, path(0) returns first.

        Returns:
            Path segment string at the specified index.

        Raises:
            ValueError: If index is out of range.
        """
        segments = self._uri.path_segments
        try:
            return segments[index]
        except IndexError:
            raise ValueError(
                f"Path segment index {index} out of range. "
                f"Available segments: {segments}"
            )

    def _uri_string(self) -> str:
        return str(self._uri)

    def _is_scp(self) -> bool:
        return self._uri.is_scp


def evaluate_predicate(
    predicate: str,
    functions: dict[str, Callable[..., Any]],
) -> bool:
    """Evaluate a predicate expression.

    Predicate syntax:
    - Comparison: host() == "github.com"
    - Contains: "github" in host()
    - Logical: is_scp() and path(0) == "martinemde"

    Args:
        predicate: Predicate expression string.
        functions: Functions available to the expression.

    Returns:
        Boolean result of predicate evaluation.

    Raises:
        PredicateError: If evaluation fails or result is not boolean.
    """
    evaluator = StrictSimpleEval(functions=functions)

    try:
        result = evaluator.eval(predicate)
    except FunctionNotDefined as e:
        raise PredicateError(f"Unknown function in predicate: {e}") from e
    except NameNotDefined as e:
        raise PredicateError(f"Unknown variable in predicate: {e}") from e
    except Exception as e:
        raise PredicateError(f"Predicate evaluation failed: {e}") from e

    if not isinstance(result, bool):
        raise PredicateError(
            f"Predicate must evaluate to boolean, got {type(result).__name__}: {predicate}"
        )

    return result


def evaluate_uri_predicate(predicate: str, uri: URI) -> bool:
    """Evaluate a predicate with the URI functions of uri."""
    return evaluate_predicate(predicate, FunctionRegistry(uri).get_functions())
