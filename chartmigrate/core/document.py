"""Document model: an ordered, immutable key/value tree addressed by paths.

Paths are dotted strings parsed into segments:

- ``storage.tieredConfig`` - mapping keys
- ``statefulset.initContainers.*`` - ``*`` matches any mapping key
- ``listeners.kafka.external.*.tls`` - wildcards can sit anywhere
- ``extraVolumes[0]`` / ``extraVolumes[*]`` - sequence index / any element

Concrete paths (no wildcards) render as dotted paths for change reports and
as JSON pointers for validation reports.
"""

from __future__ import annotations

import copy
import datetime as dt
import re
from enum import Enum
from typing import Any, Iterator, Union


class Wildcard(str, Enum):
    """Wildcard path segments used by rule source patterns."""

    KEY = "*"
    INDEX = "[*]"


Segment = Union[str, int, Wildcard]
PathTuple = tuple  # tuple[Segment, ...]

MISSING: Any = type("Missing", (), {"__repr__": lambda self: "MISSING"})()

_SCALAR_TYPES = (str, int, float, bool, type(None), dt.date, dt.datetime)
_PART_RE = re.compile(r"^(?P<key>[^\[\]]*)(?P<indexes>(?:\[(?:\d+|\*)\])*)$")
_INDEX_RE = re.compile(r"\[(\d+|\*)\]")


def parse_path(path: str) -> PathTuple:
    """Parse a dotted path string into a tuple of segments.

    Args:
        path: Dotted path, optionally with ``*``, ``[N]`` and ``[*]`` segments.

    Returns:
        Tuple of segments (str keys, int indexes, Wildcard members).

    Raises:
        ValueError: If the path is empty or malformed.
    """
    if not path or not path.strip():
        raise ValueError("path must not be empty")

    segments: list[Segment] = []
    for part in path.split("."):
        match = _PART_RE.match(part)
        if match is None or (not match.group("key") and not match.group("indexes")):
            raise ValueError(f"malformed path segment '{part}' in '{path}'")
        key = match.group("key")
        if key == "*":
            segments.append(Wildcard.KEY)
        elif key:
            segments.append(key)
        for index in _INDEX_RE.findall(match.group("indexes")):
            segments.append(Wildcard.INDEX if index == "*" else int(index))
    return tuple(segments)


def format_path(segments: PathTuple) -> str:
    """Render segments back into a dotted path string."""
    out = ""
    for segment in segments:
        if segment is Wildcard.INDEX:
            out += segment.value
        elif isinstance(segment, int):
            out += f"[{segment}]"
        else:
            text = segment.value if isinstance(segment, Wildcard) else segment
            out = f"{out}.{text}" if out else text
    return out


def to_pointer(segments: PathTuple) -> str:
    """Render a concrete path as a JSON pointer (RFC 6901)."""
    if not segments:
        return ""
    escaped = [str(s).replace("~", "~0").replace("/", "~1") for s in segments]
    return "/" + "/".join(escaped)


def is_concrete(segments: PathTuple) -> bool:
    """Return True when the path has no wildcard segments."""
    return not any(isinstance(s, Wildcard) for s in segments)


def patterns_overlap(first: PathTuple, second: PathTuple) -> bool:
    """Return True when one pattern can address a node inside the other.

    Two patterns overlap when the shorter one is a prefix of the longer one,
    with wildcards unifying against any segment of the matching kind.
    """
    for a, b in zip(first, second):
        if not _segments_unify(a, b):
            return False
    return True


def _is_key(segment: Segment) -> bool:
    return isinstance(segment, str) and not isinstance(segment, Wildcard)


def _segments_unify(a: Segment, b: Segment) -> bool:
    if a == b:
        return True
    if a is Wildcard.KEY:
        return _is_key(b)
    if b is Wildcard.KEY:
        return _is_key(a)
    if a is Wildcard.INDEX:
        return isinstance(b, int)
    if b is Wildcard.INDEX:
        return isinstance(a, int)
    return False


def get_node(tree: Any, segments: PathTuple) -> Any:
    """Return the node at a concrete path, or MISSING."""
    current = tree
    for segment in segments:
        if isinstance(segment, str) and not isinstance(segment, Wildcard):
            if not isinstance(current, dict) or segment not in current:
                return MISSING
            current = current[segment]
        elif isinstance(segment, int):
            if not isinstance(current, list) or not -len(current) <= segment < len(current):
                return MISSING
            current = current[segment]
        else:
            raise ValueError(f"get_node needs a concrete path, got '{format_path(segments)}'")
    return current


def set_node(tree: dict, segments: PathTuple, value: Any) -> None:
    """Set the node at a concrete path, creating intermediate mappings.

    Raises:
        TypeError: If an intermediate node exists but is not a container
            that can hold the next segment.
    """
    if not segments:
        raise ValueError("cannot replace the document root")
    parent = tree
    for depth, segment in enumerate(segments[:-1]):
        nxt = get_node(parent, (segment,))
        if nxt is MISSING:
            if not isinstance(segment, str) or not isinstance(parent, dict):
                raise TypeError(
                    f"cannot create '{format_path(segments[: depth + 1])}'"
                )
            nxt = {}
            parent[segment] = nxt
        elif not isinstance(nxt, (dict, list)):
            raise TypeError(
                f"'{format_path(segments[: depth + 1])}' holds a scalar, not a container"
            )
        parent = nxt

    last = segments[-1]
    if isinstance(last, int):
        if not isinstance(parent, list) or not -len(parent) <= last < len(parent):
            raise TypeError(f"cannot set '{format_path(segments)}'")
    elif not isinstance(parent, dict):
        raise TypeError(f"cannot set key on non-mapping at '{format_path(segments[:-1])}'")
    parent[last] = value


def delete_node(tree: Any, segments: PathTuple) -> Any:
    """Delete and return the node at a concrete path (MISSING if absent)."""
    parent = get_node(tree, segments[:-1])
    last = segments[-1]
    if isinstance(last, int):
        if not isinstance(parent, list) or not -len(parent) <= last < len(parent):
            return MISSING
        return parent.pop(last)
    if not isinstance(parent, dict) or last not in parent:
        return MISSING
    return parent.pop(last)


def rename_key(mapping: dict, old: str, new: str) -> None:
    """Rename a key in place, keeping its position in insertion order."""
    items = list(mapping.items())
    mapping.clear()
    for key, value in items:
        mapping[new if key == old else key] = value


def iter_matches(tree: Any, pattern: PathTuple) -> Iterator[PathTuple]:
    """Yield every concrete path in ``tree`` matching ``pattern``.

    Matches are yielded in document order. Callers that mutate the tree
    should materialize the matches first.
    """
    yield from _walk(tree, pattern, ())


def _walk(node: Any, remaining: PathTuple, prefix: PathTuple) -> Iterator[PathTuple]:
    if not remaining:
        yield prefix
        return
    head, rest = remaining[0], remaining[1:]
    if head is Wildcard.KEY:
        if isinstance(node, dict):
            for key in list(node.keys()):
                yield from _walk(node[key], rest, prefix + (key,))
    elif head is Wildcard.INDEX:
        if isinstance(node, list):
            for index, item in enumerate(node):
                yield from _walk(item, rest, prefix + (index,))
    else:
        child = get_node(node, (head,))
        if child is not MISSING:
            yield from _walk(child, rest, prefix + (head,))


def is_empty(value: Any) -> bool:
    """Empty containers, None and empty strings count as empty."""
    return value is None or (isinstance(value, (dict, list, str)) and len(value) == 0)


def check_tree(node: Any, segments: PathTuple = ()) -> None:
    """Verify a tree only holds scalars, lists and string-keyed mappings.

    Raises:
        TypeError: On non-string mapping keys or unsupported value types.
    """
    if isinstance(node, dict):
        for key, value in node.items():
            if not isinstance(key, str):
                raise TypeError(
                    f"mapping key {key!r} at '{to_pointer(segments) or '/'}' is not a string"
                )
            check_tree(value, segments + (key,))
    elif isinstance(node, list):
        for index, item in enumerate(node):
            check_tree(item, segments + (index,))
    elif not isinstance(node, _SCALAR_TYPES):
        raise TypeError(
            f"unsupported value of type {type(node).__name__} at '{to_pointer(segments) or '/'}'"
        )


class ConfigDocument:
    """Immutable ordered configuration tree.

    The document keeps a private deep copy of the data it is built from and
    only ever hands out copies, so no stage can change another stage's view.
    """

    __slots__ = ("_root",)

    def __init__(self, data: Any):
        if not isinstance(data, dict):
            raise TypeError(
                f"document root must be a mapping, got {type(data).__name__}"
            )
        check_tree(data)
        self._root = copy.deepcopy(data)

    @property
    def data(self) -> dict[str, Any]:
        """A deep copy of the underlying tree."""
        return copy.deepcopy(self._root)

    def get(self, path: str | PathTuple, default: Any = None) -> Any:
        """Return a copy of the node at a concrete path, or ``default``."""
        segments = parse_path(path) if isinstance(path, str) else path
        value = get_node(self._root, segments)
        if value is MISSING:
            return default
        return copy.deepcopy(value)

    def __contains__(self, path: str | PathTuple) -> bool:
        segments = parse_path(path) if isinstance(path, str) else path
        return get_node(self._root, segments) is not MISSING

    def top_level_keys(self) -> list[str]:
        return list(self._root.keys())

    def matches(self, pattern: str) -> list[str]:
        """Concrete dotted paths matching a pattern."""
        return [format_path(p) for p in iter_matches(self._root, parse_path(pattern))]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ConfigDocument):
            return NotImplemented
        return self._root == other._root

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"ConfigDocument(keys={self.top_level_keys()!r})"
