"""
C Type Model
============

This module defines how the front end represents C types. Types are
built by the parser from declaration specifiers and declarators and are
carried on declarations, casts and sizeof expressions.

Type Representation
-------------------
A type is one of four frozen dataclasses:

- NamedType:    a builtin spelling ("int", "unsigned long"), a typedef
                name ("size_t"), or an aggregate tag (struct Point)
- PointerType:  pointer to another type
- ArrayType:    array of another type, with an optional size expression
- FunctionType: function returning a type, with ordered parameter types

Each type may carry qualifiers (const, volatile, restrict). Types are
immutable and hashable, so structurally identical types compare equal.

Examples:
    int                 : NamedType("int")
    const char *        : PointerType(NamedType("char", qualifiers={CONST}))
    char *const         : PointerType(NamedType("char"), qualifiers={CONST})
    int arr[10]         : ArrayType(NamedType("int"), IntegerLiteral(10))
    int (*p)[10]        : PointerType(ArrayType(NamedType("int"), ...))
    struct Point *      : PointerType(NamedType("Point", tag="struct"))
    int (*)(int, char *): PointerType(FunctionType(NamedType("int"), (...)))

Declarator order (pointer-to-array vs array-of-pointers) is kept by the
nesting; the renderer turns it back into C declarator syntax.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Union, Iterable, TYPE_CHECKING

if TYPE_CHECKING:
    from c_transpiler.frontend.ast import Expression


# =============================================================================
# Qualifiers
# =============================================================================

class Qualifier(Enum):
    """Type qualifiers. The value is the C keyword."""
    CONST = "const"
    VOLATILE = "volatile"
    RESTRICT = "restrict"


# Rendering order for qualifier sets
QUALIFIER_ORDER = (Qualifier.CONST, Qualifier.VOLATILE, Qualifier.RESTRICT)


def qualifier_keywords(qualifiers: Iterable[Qualifier]) -> list[str]:
    """Return qualifier keywords in canonical order."""
    present = set(qualifiers)
    return [q.value for q in QUALIFIER_ORDER if q in present]


# =============================================================================
# Builtin Type Spellings
# =============================================================================

# Canonical word order for multi-keyword builtins ("unsigned long long int")
BUILTIN_WORD_ORDER = (
    "signed",
    "unsigned",
    "short",
    "long",
    "char",
    "int",
    "_Bool",
    "float",
    "double",
    "void",
)


def canonical_builtin(words: Iterable[str]) -> str:
    """
    Join builtin type keywords into one canonical spelling.

    C allows the keywords of a builtin type in any order, so
    "long unsigned" and "unsigned long" are the same type. Words are
    sorted into BUILTIN_WORD_ORDER and duplicates ("long long") kept.

    >>> canonical_builtin(["int", "long", "unsigned"])
    'unsigned long int'
    """
    return " ".join(sorted(words, key=BUILTIN_WORD_ORDER.index))


# =============================================================================
# Type Nodes
# =============================================================================

@dataclass(frozen=True)
class NamedType:
    """
    A type referred to by name.

    Attributes:
        name: Builtin spelling, typedef name, or tag name ("" for an
              anonymous aggregate)
        tag: "struct", "union" or "enum" for aggregate types, else None
        qualifiers: const/volatile/restrict applied to this type
    """
    name: str = ""
    tag: Optional[str] = None
    qualifiers: frozenset[Qualifier] = frozenset()

    @property
    def is_void(self) -> bool:
        return self.tag is None and self.name == "void" and not self.qualifiers

    def __str__(self) -> str:
        return type_name(self)


@dataclass(frozen=True)
class PointerType:
    """
    Pointer to another type.

    Attributes:
        to: The pointed-to type
        qualifiers: Qualifiers on the pointer itself (char *const p)
    """
    to: "CType" = None
    qualifiers: frozenset[Qualifier] = frozenset()

    def __str__(self) -> str:
        return type_name(self)


@dataclass(frozen=True)
class ArrayType:
    """
    Array of another type.

    Attributes:
        of: The element type
        size: Size expression, or None for an unsized array (int a[])
        qualifiers: Qualifiers (only meaningful in parameter position)
    """
    of: "CType" = None
    size: Optional["Expression"] = None
    qualifiers: frozenset[Qualifier] = frozenset()

    def __str__(self) -> str:
        return type_name(self)


@dataclass(frozen=True)
class FunctionType:
    """
    Function type.

    Attributes:
        returns: The return type
        parameters: Ordered parameter types. "(void)" is kept as a single
                    void parameter so it renders as written.
        variadic: True when the parameter list ends with "..."
        parameter_names: Parameter names (None for unnamed). Not part of
                         the type's identity.
        qualifiers: Always empty; present so every type has the attribute
    """
    returns: "CType" = None
    parameters: tuple["CType", ...] = ()
    variadic: bool = False
    parameter_names: tuple[Optional[str], ...] = field(default=(), compare=False)
    qualifiers: frozenset[Qualifier] = frozenset()

    def __str__(self) -> str:
        return type_name(self)


CType = Union[NamedType, PointerType, ArrayType, FunctionType]


# =============================================================================
# Type Utilities
# =============================================================================

def type_name(ctype: CType) -> str:
    """Render a type as a C type name (abstract declarator), e.g. 'int (*)[10]'."""
    from c_transpiler.frontend.renderer import CRenderer

    return CRenderer().render_type(ctype)
