"""Domain-level exception hierarchy.

Purpose
-------
Expose the stable error taxonomy shared by the path engine, the merger, the
loaders and consuming applications. The hierarchy lives in the domain layer so
that every outer layer may raise it without creating import cycles.

Contents
--------
* :class:`YAMLConfigError` – umbrella base class carrying the offending path.
* :class:`NotFound` – a path segment has no counterpart in the tree.
* :class:`InvalidType` – a node has the wrong kind or cannot be coerced.
* :class:`AmbiguousPath` – a single-value query matched several nodes.
* :class:`MergeConflict` – a ``fail`` merge met a colliding key.
* :class:`MalformedConfig` – unparsable documents or unresolvable references.
* :class:`ResourceNotFound` – no resource name/glob resolved to a file.

System Role
-----------
Every failure is scoped to one query or one merge. Default-valued accessors
catch :class:`NotFound` and :class:`InvalidType`; everything else propagates.
"""

from __future__ import annotations


class YAMLConfigError(Exception):
    """Base type for all exceptions emitted by ``lib_yaml_config``.

    Why
    ----
    Provide a single catch-all type for consumers that do not need fine-grained
    handling.

    What
    ----
    Stores the optional ``path`` (query path, merge path or resource pattern)
    and appends it to the message so log lines stay self-explanatory.

    Examples
    --------
    >>> str(YAMLConfigError("Unable to resolve", path="a.b"))
    "Unable to resolve (path: 'a.b')"
    >>> YAMLConfigError("plain").path is None
    True
    """

    def __init__(self, message: str, *, path: str | None = None) -> None:
        self.message = message
        self.path = path
        super().__init__(message if path is None else f"{message} (path: {path!r})")


class NotFound(YAMLConfigError):
    """Raised when a path segment has no matching key, index or predicate element."""


class InvalidType(YAMLConfigError):
    """Raised when a node has the wrong kind for the requested operation.

    Typical Sources
    ---------------
    Descending into a scalar, list indices out of bounds, and typed accessors
    such as :meth:`lib_yaml_config.application.config.Config.get_integer` failing
    to coerce a scalar.
    """


class AmbiguousPath(InvalidType):
    """Raised when a single-value query containing wildcards matched several nodes.

    Why
    ----
    ``get`` promises exactly one value; callers wanting all matches use
    :meth:`lib_yaml_config.application.config.Config.get_multiple` instead.
    """


class MergeConflict(YAMLConfigError):
    """Raised by the ``fail`` merge action when base and extra collide."""


class MalformedConfig(YAMLConfigError):
    """Signifies an unusable configuration document or value.

    Current Usage
    -------------
    Raised for parse errors, documents whose root is not a mapping, and
    ``${...}`` references that cannot be resolved and have no fallback.
    """


class ResourceNotFound(YAMLConfigError):
    """Represents configuration resources that resolved to nothing.

    Why
    ----
    Loading with a typo in a glob should not silently yield an empty
    configuration.
    """
