"""
viewbind/types.py
=================

Structured type names and the textual type resolver.

Binding descriptions, listener descriptors and field declarations name
their types as text (``"android.widget.TextView"``, ``"int"``,
``"android.widget.AdapterView<?>"``).  Synthesis needs a structured
representation to emit casts, callback signatures and imports, so this
module maps the text onto a small ``TypeName`` hierarchy:

* ``PrimitiveType``          – ``void boolean byte char double float int long short``
* ``ClassName``              – package plus one or more (nested) simple names
* ``ParameterizedTypeName``  – raw class with type arguments
* ``WildcardTypeName``       – unbounded ``?`` placeholder

Dotted names are parsed with a parsimonious PEG grammar.  Generic
arguments are deliberately *not* parsed: one unbounded wildcard is
recorded per ``<`` occurrence, which is all cast generation needs.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Tuple

from parsimonious.exceptions import ParseError
from parsimonious.grammar import Grammar
from parsimonious.nodes import NodeVisitor

from viewbind.errors import TypeResolutionError

__all__ = [
    "TypeName",
    "PrimitiveType",
    "ClassName",
    "ParameterizedTypeName",
    "WildcardTypeName",
    "VOID",
    "BOOLEAN",
    "BYTE",
    "CHAR",
    "DOUBLE",
    "FLOAT",
    "INT",
    "LONG",
    "SHORT",
    "OBJECT",
    "PRIMITIVES",
    "DEFAULT_VIEW_TYPE",
    "best_guess",
    "requires_cast",
]

logger = logging.getLogger(__name__)

DEFAULT_VIEW_TYPE = "android.view.View"


# ═══════════════════════════════════════════════════════════════════
#  Dotted-name grammar (Parsimonious PEG)
# ═══════════════════════════════════════════════════════════════════

DOTTED_NAME_GRAMMAR = Grammar(r'''
    dotted_name = segment ("." segment)*
    segment     = ~r"[A-Za-z_$][A-Za-z0-9_$]*"
''')


class _DottedNameVisitor(NodeVisitor):
    """Turns a ``dotted_name`` parse tree into its list of segments."""

    def visit_dotted_name(self, node, visited_children):
        first, rest = visited_children
        segments = [first]
        for _dot, segment in rest:
            segments.append(segment)
        return segments

    def visit_segment(self, node, visited_children):
        return node.text

    def generic_visit(self, node, visited_children):
        return visited_children


def _split_dotted(text: str) -> List[str]:
    try:
        tree = DOTTED_NAME_GRAMMAR.parse(text)
    except ParseError as exc:
        raise TypeResolutionError(text, "not a dotted name", cause=exc) from exc
    return _DottedNameVisitor().visit(tree)


# ═══════════════════════════════════════════════════════════════════
#  Type names
# ═══════════════════════════════════════════════════════════════════

class TypeName:
    """Base class of all structured type names."""

    @property
    def raw(self) -> "TypeName":
        """The erased type used for runtime checks."""
        return self

    @property
    def is_primitive(self) -> bool:
        return False


@dataclass(frozen=True)
class PrimitiveType(TypeName):
    keyword: str

    @property
    def is_primitive(self) -> bool:
        return True

    def __str__(self) -> str:
        return self.keyword


@dataclass(frozen=True)
class ClassName(TypeName):
    """A package-qualified, possibly nested, class name."""

    package: str
    simple_names: Tuple[str, ...]

    def __post_init__(self) -> None:
        if not self.simple_names:
            raise TypeResolutionError(self.package, "a class name needs a simple name")

    @classmethod
    def get(cls, package: str, simple_name: str, *nested: str) -> "ClassName":
        return cls(package, (simple_name,) + tuple(nested))

    @classmethod
    def best_guess(cls, text: str) -> "ClassName":
        """Guess package and simple names from a dotted name.

        Leading lowercase segments are the package; the first capitalised
        segment starts the chain of (nested) simple names.
        """
        segments = _split_dotted(text.strip())
        package: List[str] = []
        index = 0
        while index < len(segments) and segments[index][0].islower():
            package.append(segments[index])
            index += 1
        simple_names = tuple(segments[index:])
        if not simple_names:
            raise TypeResolutionError(text, "no capitalised simple name")
        for name in simple_names:
            if name[0].islower():
                raise TypeResolutionError(
                    text, f"nested name {name!r} must start with an uppercase letter"
                )
        return cls(".".join(package), simple_names)

    @property
    def simple_name(self) -> str:
        return self.simple_names[-1]

    @property
    def top_level(self) -> str:
        return self.simple_names[0]

    def nested(self, name: str) -> "ClassName":
        return ClassName(self.package, self.simple_names + (name,))

    def reflection_name(self) -> str:
        """Flattened name with ``$``-joined nesting (``pkg.Outer$Inner``)."""
        flat = "$".join(self.simple_names)
        return f"{self.package}.{flat}" if self.package else flat

    def __str__(self) -> str:
        dotted = ".".join(self.simple_names)
        return f"{self.package}.{dotted}" if self.package else dotted


OBJECT = ClassName("builtins", ("object",))


@dataclass(frozen=True)
class WildcardTypeName(TypeName):
    """``?`` or ``? extends Bound``."""

    upper_bound: TypeName = OBJECT

    @property
    def raw(self) -> TypeName:
        return self.upper_bound.raw

    def __str__(self) -> str:
        if self.upper_bound == OBJECT:
            return "?"
        return f"? extends {self.upper_bound}"


@dataclass(frozen=True)
class ParameterizedTypeName(TypeName):
    raw_type: ClassName
    type_arguments: Tuple[TypeName, ...]

    @property
    def raw(self) -> TypeName:
        return self.raw_type

    def __str__(self) -> str:
        args = ", ".join(str(arg) for arg in self.type_arguments)
        return f"{self.raw_type}<{args}>"


VOID = PrimitiveType("void")
BOOLEAN = PrimitiveType("boolean")
BYTE = PrimitiveType("byte")
CHAR = PrimitiveType("char")
DOUBLE = PrimitiveType("double")
FLOAT = PrimitiveType("float")
INT = PrimitiveType("int")
LONG = PrimitiveType("long")
SHORT = PrimitiveType("short")

PRIMITIVES: Dict[str, PrimitiveType] = {
    p.keyword: p for p in (VOID, BOOLEAN, BYTE, CHAR, DOUBLE, FLOAT, INT, LONG, SHORT)
}


# ═══════════════════════════════════════════════════════════════════
#  Resolver
# ═══════════════════════════════════════════════════════════════════

def best_guess(text: str) -> TypeName:
    """Resolve a textual type name to a structured ``TypeName``."""
    text = text.strip()
    if text in PRIMITIVES:
        return PRIMITIVES[text]
    left = text.find("<")
    if left != -1:
        raw = ClassName.best_guess(text[:left])
        arguments = tuple(WildcardTypeName() for _ in range(text.count("<")))
        logger.debug("Resolved %r as %s with %d wildcard(s)", text, raw, len(arguments))
        return ParameterizedTypeName(raw, arguments)
    return ClassName.best_guess(text)


def requires_cast(type_name: TypeName, view_type: str = DEFAULT_VIEW_TYPE) -> bool:
    """True unless *type_name* is exactly the base element type."""
    return str(type_name) != view_type
