# Copyright 2024-present Kensho Technologies, LLC.
"""Pointers from tabular columns into the JSON tree of a query result row."""
from dataclasses import dataclass
from typing import Any, Iterator, List, Optional, Sequence, Tuple


class _Missing(object):
    """Marker for a JSON node that does not exist, as opposed to an explicit JSON null."""

    _instance: Optional["_Missing"] = None

    def __new__(cls) -> "_Missing":
        if cls._instance is None:
            cls._instance = super(_Missing, cls).__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "MISSING"

    def __reduce__(self) -> str:
        return "MISSING"


MISSING = _Missing()


def is_container_node(node: Any) -> bool:
    """Return True if the JSON node has children, i.e. it is an object or an array."""
    return isinstance(node, (dict, list))


def _escape_token(key: str) -> str:
    return key.replace("~", "~0").replace("/", "~1")


def _unescape_token(token: str) -> str:
    return token.replace("~1", "/").replace("~0", "~")


def _step(node: Any, token: str) -> Any:
    """Descend one level into the node, or return MISSING if there is nothing there."""
    if isinstance(node, dict):
        return node.get(token, MISSING)
    elif isinstance(node, list):
        if not token.isdigit() or (len(token) > 1 and token.startswith("0")):
            return MISSING
        index = int(token)
        if index >= len(node):
            return MISSING
        return node[index]
    else:
        return MISSING


@dataclass(frozen=True)
class FieldPath:
    """A JSON pointer (RFC 6901) into a result row. The empty path designates the row itself."""

    tokens: Tuple[str, ...]

    @classmethod
    def parse(cls, pointer: str) -> "FieldPath":
        """Parse a JSON pointer string such as "/attributes/age"."""
        if pointer == "":
            return cls(())
        if not pointer.startswith("/"):
            raise AssertionError(f'Invalid JSON pointer, expected a leading "/": {pointer}')
        return cls(tuple(_unescape_token(token) for token in pointer[1:].split("/")))

    @classmethod
    def from_keys(cls, *keys: str) -> "FieldPath":
        """Build a path from raw (unescaped) object keys."""
        return cls(tuple(keys))

    def resolve(self, node: Any) -> Any:
        """Return the node this path points to, or MISSING if the path does not resolve."""
        current = node
        for token in self.tokens:
            current = _step(current, token)
            if current is MISSING:
                return MISSING
        return current

    def __str__(self) -> str:
        return "".join("/" + _escape_token(token) for token in self.tokens)


def _iter_members(node: Any) -> Iterator[Tuple[Optional[str], Any]]:
    """Yield (key, value) pairs of an object, or (None, element) pairs of an array."""
    if isinstance(node, dict):
        return iter(node.items())
    elif isinstance(node, list):
        return ((None, element) for element in node)
    else:
        return iter(())


def find_value(node: Any, key: str) -> Any:
    """Depth-first search of a JSON tree for the first member named key; MISSING if none.

    Object members are visited in document order, and each member's own key is checked
    before its value is descended into. The traversal uses an explicit stack, so it is bounded
    only by the size of the tree and not by the interpreter's recursion limit.
    """
    stack: List[Iterator[Tuple[Optional[str], Any]]] = [_iter_members(node)]
    while stack:
        member = next(stack[-1], None)
        if member is None:
            stack.pop()
            continue

        member_key, member_value = member
        if member_key == key:
            return member_value
        if is_container_node(member_value):
            stack.append(_iter_members(member_value))
    return MISSING


@dataclass(frozen=True)
class FieldPathEntry:
    """How to pull one column's value out of a JSON result row.

    Attributes:
        name: the column name, unique within its FieldPathTable.
        path: pointer to the column's value inside the row.
        recursive: if True and the path does not resolve, search the whole row for the first
                   member keyed by name. If False, a path that does not resolve yields None.
    """

    name: str
    path: FieldPath
    recursive: bool

    @classmethod
    def from_pointer(cls, name: str, pointer: str, recursive: bool) -> "FieldPathEntry":
        return cls(name, FieldPath.parse(pointer), recursive)


@dataclass(frozen=True)
class FieldPathTable:
    """Ordered, immutable list of FieldPathEntry objects, aligned with a tabular schema."""

    entries: Tuple[FieldPathEntry, ...]

    def __post_init__(self) -> None:
        """Validate fields."""
        names = [entry.name for entry in self.entries]
        if len(set(names)) != len(names):
            raise AssertionError(f"Expected unique field path names, but got {names}")

    @classmethod
    def from_entries(cls, entries: Sequence[FieldPathEntry]) -> "FieldPathTable":
        return cls(tuple(entries))

    @property
    def names(self) -> Tuple[str, ...]:
        return tuple(entry.name for entry in self.entries)

    def __iter__(self) -> Iterator[FieldPathEntry]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)
