"""Path expressions for querying configuration trees.

Purpose
-------
Turn a dotted query string such as ``servers[name=primary].ports[last]`` into
an immutable sequence of typed segments. The parser is total: text it cannot
interpret as a bracket expression is kept as a literal key instead of raising.

Syntax
------
``segment(.segment)*`` where a segment is one of

* ``key`` – mapping lookup (decimal keys also index sequences),
* ``'quoted.key'`` / ``"quoted.key"`` – literal key that may contain dots,
* ``*`` – every child of the current node,
* ``**`` – every descendant; trailing ``**`` yields all leaf scalars,
* ``key[N]`` / ``key[last]`` – positional access,
* ``key[]`` / ``key[*]`` – every element,
* ``key[field=value]`` / ``key[field!=value]`` – elements whose ``field``
  matches (or does not match) ``value``.

``key[N]`` is the canonical spelling; ``key.[N]`` parses to the same
expression. Several brackets may follow one key: ``matrix[1][0]``.

Contents
--------
* Segment types :class:`Key`, :class:`Index`, :class:`LastIndex`,
  :class:`Wildcard`, :class:`DoubleWildcard`, :class:`Predicate`.
* :class:`PathExpression` – parsed path plus helpers used by the engine.
* :func:`parse_path` – cached parser.
* :func:`join_path` – render a child path for error messages.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Iterator, Union

_QUOTES = ("'", '"')
_INDEX = re.compile(r"[0-9]+")
_PREDICATE = re.compile(r"\s*([^!=]+?)\s*(!=|=)\s*(.*)", re.DOTALL)


@dataclass(frozen=True, slots=True)
class Key:
    """Look up ``name`` in a mapping."""

    name: str

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True, slots=True)
class Index:
    """Select the element at ``position`` (zero based)."""

    position: int

    def __str__(self) -> str:
        return f"[{self.position}]"


@dataclass(frozen=True, slots=True)
class LastIndex:
    """Select the last element."""

    def __str__(self) -> str:
        return "[last]"


@dataclass(frozen=True, slots=True)
class Wildcard:
    """Fan out over every child."""

    def __str__(self) -> str:
        return "*"


@dataclass(frozen=True, slots=True)
class DoubleWildcard:
    """Fan out over every descendant."""

    def __str__(self) -> str:
        return "**"


@dataclass(frozen=True, slots=True)
class Predicate:
    """Keep elements whose ``field`` compares (``=``/``!=``) to ``value``."""

    field: str
    operator: str
    value: str

    def __str__(self) -> str:
        return f"[{self.field}{self.operator}{self.value}]"

    @property
    def negated(self) -> bool:
        return self.operator == "!="


PathSegment = Union[Key, Index, LastIndex, Wildcard, DoubleWildcard, Predicate]

_FAN_OUT = (Wildcard, DoubleWildcard, Predicate)


@dataclass(frozen=True, slots=True)
class PathExpression:
    """Immutable parsed path.

    Examples
    --------
    >>> expr = parse_path("a.'b.c'[0]")
    >>> expr.segments
    (Key(name='a'), Key(name='b.c'), Index(position=0))
    >>> expr.is_multi
    False
    """

    raw: str
    segments: tuple[PathSegment, ...]

    def __iter__(self) -> Iterator[PathSegment]:
        return iter(self.segments)

    def __len__(self) -> int:
        return len(self.segments)

    def __str__(self) -> str:
        return self.raw

    @property
    def is_empty(self) -> bool:
        return not self.segments

    @property
    def is_multi(self) -> bool:
        """``True`` when the path can legitimately match more than one node."""

        return any(isinstance(segment, (Wildcard, DoubleWildcard)) for segment in self.segments)

    def fan_out_index(self) -> int:
        """Return the index of the first segment that may select several nodes.

        Predicates count as fan-out segments here: in multi-value mode they
        keep every matching element. Returns ``len(self)`` for literal paths.
        """

        for index, segment in enumerate(self.segments):
            if isinstance(segment, _FAN_OUT):
                return index
        return len(self.segments)


@dataclass
class _Token:
    raw: list[str] = field(default_factory=list)
    key: list[str] = field(default_factory=list)
    brackets: list[str] = field(default_factory=list)
    quoted: bool = False
    malformed: bool = False


@lru_cache(maxsize=1024)
def parse_path(raw: str) -> PathExpression:
    """Parse *raw* into a :class:`PathExpression`.

    Leading dots and surrounding whitespace are ignored, as are empty segments
    produced by doubled dots.

    Examples
    --------
    >>> parse_path(".items[id=2].v").segments
    (Key(name='items'), Predicate(field='id', operator='=', value='2'), Key(name='v'))
    >>> parse_path("a.**").segments
    (Key(name='a'), DoubleWildcard())
    >>> parse_path("a[oops").segments
    (Key(name='a[oops'),)
    """

    text = raw.strip()
    while text.startswith("."):
        text = text[1:]
    segments: list[PathSegment] = []
    for token in _tokenize(text):
        segments.extend(_token_segments(token))
    return PathExpression(raw=raw, segments=tuple(segments))


def join_path(parent: str, key: object) -> str:
    """Append *key* to *parent*, quoting keys that contain dots.

    Examples
    --------
    >>> join_path("", "a"), join_path("a", "b.c")
    ('a', "a.'b.c'")
    """

    label = str(key)
    if "." in label:
        quote = '"' if "'" in label else "'"
        label = f"{quote}{label}{quote}"
    return f"{parent}.{label}" if parent else label


def _tokenize(text: str) -> list[_Token]:
    """Split *text* on dots that are neither quoted nor inside brackets."""

    tokens: list[_Token] = []
    token = _Token()
    index = 0
    while index < len(text):
        char = text[index]
        if char == ".":
            if token.raw:
                tokens.append(token)
            token = _Token()
            index += 1
            continue
        if char in _QUOTES:
            end = text.find(char, index + 1)
            if end >= 0:
                token.raw.append(text[index : end + 1])
                token.key.append(text[index + 1 : end])
                token.quoted = True
                token.malformed = token.malformed or bool(token.brackets)
                index = end + 1
                continue
        if char == "[":
            end = _closing_bracket(text, index)
            if end >= 0:
                token.raw.append(text[index : end + 1])
                token.brackets.append(text[index + 1 : end])
                index = end + 1
                continue
        token.raw.append(char)
        token.key.append(char)
        token.malformed = token.malformed or bool(token.brackets)
        index += 1
    if token.raw:
        tokens.append(token)
    return tokens


def _closing_bracket(text: str, start: int) -> int:
    """Return the index of the ``]`` closing the bracket at *start*, or ``-1``."""

    index = start + 1
    while index < len(text):
        char = text[index]
        if char in _QUOTES:
            end = text.find(char, index + 1)
            if end < 0:
                return -1
            index = end + 1
            continue
        if char == "]":
            return index
        index += 1
    return -1


def _token_segments(token: _Token) -> list[PathSegment]:
    literal = "".join(token.raw)
    if token.malformed:
        return [Key(literal)]
    tail: list[PathSegment] = []
    for expression in token.brackets:
        segment = _bracket_segment(expression)
        if segment is None:
            return [Key(literal)]
        tail.append(segment)

    key = "".join(token.key)
    head: list[PathSegment] = []
    if token.quoted:
        head.append(Key(key))
    elif key == "*":
        head.append(Wildcard())
    elif key == "**":
        head.append(DoubleWildcard())
    elif key:
        head.append(Key(key))
    return head + tail


def _bracket_segment(expression: str) -> PathSegment | None:
    """Interpret the text between ``[`` and ``]``; ``None`` means malformed."""

    stripped = expression.strip()
    if stripped in ("", "*"):
        return Wildcard()
    if stripped == "last":
        return LastIndex()
    if _INDEX.fullmatch(stripped):
        return Index(int(stripped))
    match = _PREDICATE.fullmatch(stripped)
    if match is None:
        return None
    return Predicate(field=match.group(1), operator=match.group(2), value=_unquote(match.group(3).strip()))


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in _QUOTES:
        return value[1:-1]
    return value
