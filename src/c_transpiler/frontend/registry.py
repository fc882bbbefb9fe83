"""
Type Registry
=============

The Type Registry answers one question for the parser: does this name
denote a type? C cannot be parsed without it, because

    (T) * x

is a cast of a dereference when T is a type and a multiplication when
T is a variable.

The registry is append-only and lives for one translation unit. It is
populated by the parser only when a declaration is complete:

- typedef names become visible after the typedef's ';'
- struct/union/enum tags become visible after the aggregate specifier

so a name is never visible to code that appears before its declaration.
A tag also counts as a type name on its own, so after

    struct Point { int x; };

both sizeof(Point) and (Point) p read as types.

Downstream consumers receive a RegistrySnapshot, an immutable copy taken
after parsing.
"""

import logging
from dataclasses import dataclass
from typing import Iterable

logger = logging.getLogger(__name__)


# Builtin type keywords. These always denote types.
BUILTIN_TYPE_NAMES = frozenset({
    "void",
    "char",
    "short",
    "int",
    "long",
    "float",
    "double",
    "signed",
    "unsigned",
    "_Bool",
})

AGGREGATE_KINDS = ("struct", "union", "enum")


@dataclass(frozen=True)
class RegistrySnapshot:
    """
    Immutable view of a Type Registry after parsing.

    Attributes:
        typedefs: Typedef names in declaration order
        tags: (kind, name) pairs in declaration order
        predefined: Names supplied by configuration
    """
    typedefs: tuple[str, ...] = ()
    tags: tuple[tuple[str, str], ...] = ()
    predefined: frozenset[str] = frozenset()

    def is_type_name(self, name: str) -> bool:
        return (
            name in BUILTIN_TYPE_NAMES
            or name in self.predefined
            or name in self.typedefs
            or any(name == tag for _, tag in self.tags)
        )

    def is_tag(self, kind: str, name: str) -> bool:
        return (kind, name) in self.tags


class TypeRegistry:
    """
    Append-only set of names known to denote types.

    Usage:
        registry = TypeRegistry(predefined=["size_t", "FILE"])
        registry.is_type_name("size_t")    # True
        registry.register_typedef("Node")
        registry.register_tag("struct", "Point")
        snapshot = registry.snapshot()

    Attributes:
        predefined: Names treated as typedefs from the start, for types
                    declared in headers that were not part of the input
    """

    def __init__(self, predefined: Iterable[str] = ()):
        self.predefined = frozenset(predefined)
        self._typedefs: list[str] = []
        self._typedef_set: set[str] = set()
        self._tags: list[tuple[str, str]] = []
        self._tag_set: set[tuple[str, str]] = set()
        self._tag_names: set[str] = set()

    def is_type_name(self, name: str) -> bool:
        """Return True if name is a builtin, predefined, typedef or tag name."""
        return (
            name in BUILTIN_TYPE_NAMES
            or name in self.predefined
            or name in self._typedef_set
            or name in self._tag_names
        )

    def is_tag(self, kind: str, name: str) -> bool:
        """Return True if 'kind name' (e.g. struct Point) has been declared."""
        return (kind, name) in self._tag_set

    def register_typedef(self, name: str) -> None:
        """
        Make name visible as a type.

        Re-declaring a typedef is allowed in C11 and is a no-op here.
        """
        if name in self._typedef_set:
            return
        self._typedefs.append(name)
        self._typedef_set.add(name)
        logger.debug(f"Registered typedef '{name}'")

    def register_tag(self, kind: str, name: str) -> None:
        """
        Record a struct/union/enum tag.

        Raises:
            ValueError: If kind is not an aggregate keyword
        """
        if kind not in AGGREGATE_KINDS:
            raise ValueError(f"unknown aggregate kind: {kind!r}")
        key = (kind, name)
        if key in self._tag_set:
            return
        self._tags.append(key)
        self._tag_set.add(key)
        self._tag_names.add(name)
        logger.debug(f"Registered tag '{kind} {name}'")

    @property
    def typedef_names(self) -> tuple[str, ...]:
        return tuple(self._typedefs)

    def snapshot(self) -> RegistrySnapshot:
        """Return an immutable copy of the current contents."""
        return RegistrySnapshot(
            typedefs=tuple(self._typedefs),
            tags=tuple(self._tags),
            predefined=self.predefined,
        )

    def __contains__(self, name: str) -> bool:
        return self.is_type_name(name)

    def __len__(self) -> int:
        return len(self._typedefs) + len(self._tags)
