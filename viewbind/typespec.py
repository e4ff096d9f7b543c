"""
viewbind/typespec.py
====================

Abstract description of a generated binder type.

Synthesis decides *what* a binder must contain (fields, constructor
statements, teardown statements, the root accessor); an emission backend
decides how that looks as source text.  This module is the contract
between the two:

* expression nodes – ``Name``, ``Literal``, ``Raw``, ``Attribute``,
  ``FieldRef``, ``Call``, ``SuperCall``, ``TypeRef``, ``Cast``,
  ``Compare``, ``AnonymousObject``
* statement nodes  – ``Assign``, ``ExprStmt``, ``If``, ``Raise``,
  ``Return``, ``LocalDecl``, ``Blank``
* declarations     – ``FieldSpec``, ``ParameterSpec``, ``MethodSpec``,
  ``CallbackSpec``, ``TypeSpec``, ``BinderFile``
* builders         – ``MethodBuilder``, ``TypeSpecBuilder``

Design invariants
-----------------
* Every node is a frozen dataclass; child sequences are tuples.
* Nodes dispatch to ``visit_<kind>`` on a visitor via ``accept``.
* ``FieldRef`` always means a field of the binder being generated;
  attributes of any other object go through ``Attribute``.
"""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum
from typing import Any, ClassVar, FrozenSet, Iterator, List, Optional, Tuple, Union

from viewbind.errors import CodeGenError, ErrorCodes
from viewbind.types import VOID, ClassName, TypeName

__all__ = [
    "Node",
    "Expr",
    "Name",
    "Literal",
    "Raw",
    "Attribute",
    "FieldRef",
    "Call",
    "SuperCall",
    "TypeRef",
    "Cast",
    "Compare",
    "AnonymousObject",
    "Stmt",
    "Assign",
    "ExprStmt",
    "If",
    "Raise",
    "Return",
    "LocalDecl",
    "Blank",
    "invoke",
    "Modifier",
    "FieldSpec",
    "ParameterSpec",
    "MethodSpec",
    "CallbackSpec",
    "TypeSpec",
    "BinderFile",
    "MethodBuilder",
    "TypeSpecBuilder",
]


class Node:
    """Base class for description nodes."""

    kind: ClassVar[str] = "node"

    def accept(self, visitor: Any) -> Any:
        method = getattr(visitor, f"visit_{self.kind}", None)
        if method is None:
            return visitor.generic_visit(self)
        return method(self)


# ═══════════════════════════════════════════════════════════════════════════
# EXPRESSIONS
# ═══════════════════════════════════════════════════════════════════════════

class Expr(Node):
    kind = "expr"


@dataclass(frozen=True)
class Name(Expr):
    """A local variable or parameter."""

    kind = "name"
    id: str


@dataclass(frozen=True)
class Literal(Expr):
    kind = "literal"
    value: Union[None, bool, int, float, str]


@dataclass(frozen=True)
class Raw(Expr):
    """An expression given verbatim in the target language."""

    kind = "raw"
    code: str


@dataclass(frozen=True)
class Attribute(Expr):
    kind = "attribute"
    value: Expr
    attr: str


@dataclass(frozen=True)
class FieldRef(Expr):
    """A field declared on the binder type itself."""

    kind = "field_ref"
    name: str


@dataclass(frozen=True)
class Call(Expr):
    kind = "call"
    func: Expr
    args: Tuple[Expr, ...] = ()


@dataclass(frozen=True)
class SuperCall(Expr):
    """Invoke the parent binder's implementation of *method*."""

    kind = "super_call"
    method: str
    args: Tuple[Expr, ...] = ()


@dataclass(frozen=True)
class TypeRef(Expr):
    kind = "type_ref"
    type: TypeName


@dataclass(frozen=True)
class Cast(Expr):
    kind = "cast"
    type: TypeName
    value: Expr


@dataclass(frozen=True)
class Compare(Expr):
    kind = "compare"
    left: Expr
    op: str
    right: Expr

    OPERATORS: ClassVar[FrozenSet[str]] = frozenset({"is", "is not", "==", "!="})

    def __post_init__(self) -> None:
        if self.op not in self.OPERATORS:
            raise CodeGenError(f"Unsupported comparison operator {self.op!r}")


@dataclass(frozen=True)
class AnonymousObject(Expr):
    """A fresh instance of an anonymous implementation of a callback type."""

    kind = "anonymous_object"
    callback: "CallbackSpec"


def invoke(receiver: Expr, method: str, *args: Expr) -> Call:
    """``receiver.method(*args)``."""
    return Call(Attribute(receiver, method), tuple(args))


# ═══════════════════════════════════════════════════════════════════════════
# STATEMENTS
# ═══════════════════════════════════════════════════════════════════════════

class Stmt(Node):
    kind = "stmt"


@dataclass(frozen=True)
class Assign(Stmt):
    kind = "assign"
    target: Expr
    value: Expr


@dataclass(frozen=True)
class ExprStmt(Stmt):
    kind = "expr_stmt"
    value: Expr


@dataclass(frozen=True)
class If(Stmt):
    kind = "if"
    condition: Expr
    body: Tuple[Stmt, ...]


@dataclass(frozen=True)
class Raise(Stmt):
    kind = "raise"
    exc_type: TypeName
    message: str


@dataclass(frozen=True)
class Return(Stmt):
    kind = "return"
    value: Optional[Expr] = None


@dataclass(frozen=True)
class LocalDecl(Stmt):
    """Declares a local that later statements assign and read."""

    kind = "local_decl"
    type: TypeName
    name: str


@dataclass(frozen=True)
class Blank(Stmt):
    """Visual separator between statement groups."""

    kind = "blank"


# ═══════════════════════════════════════════════════════════════════════════
# DECLARATIONS
# ═══════════════════════════════════════════════════════════════════════════

class Modifier(Enum):
    PUBLIC = "public"
    PRIVATE = "private"
    FINAL = "final"


@dataclass(frozen=True)
class FieldSpec:
    type: TypeName
    name: str
    visibility: Modifier = Modifier.PRIVATE


@dataclass(frozen=True)
class ParameterSpec:
    type: TypeName
    name: str
    default: Optional[Expr] = None


@dataclass(frozen=True)
class MethodSpec:
    CONSTRUCTOR: ClassVar[str] = "<init>"

    name: str
    parameters: Tuple[ParameterSpec, ...] = ()
    returns: TypeName = VOID
    body: Tuple[Stmt, ...] = ()

    @property
    def is_constructor(self) -> bool:
        return self.name == self.CONSTRUCTOR


@dataclass(frozen=True)
class CallbackSpec:
    """Anonymous implementation of a listener type."""

    supertype: TypeName
    methods: Tuple[MethodSpec, ...]


@dataclass(frozen=True)
class TypeSpec:
    name: ClassName
    modifiers: FrozenSet[Modifier] = frozenset({Modifier.PUBLIC})
    superclass: Optional[ClassName] = None
    interfaces: Tuple[ClassName, ...] = ()
    fields: Tuple[FieldSpec, ...] = ()
    methods: Tuple[MethodSpec, ...] = ()

    @property
    def is_final(self) -> bool:
        return Modifier.FINAL in self.modifiers

    def field(self, name: str) -> Optional[FieldSpec]:
        for spec in self.fields:
            if spec.name == name:
                return spec
        return None

    def method(self, name: str) -> Optional[MethodSpec]:
        for spec in self.methods:
            if spec.name == name:
                return spec
        return None


@dataclass(frozen=True)
class BinderFile:
    """A binder type placed in its package, ready for rendering."""

    package: str
    type_spec: TypeSpec
    file_comment: str = ""


# ═══════════════════════════════════════════════════════════════════════════
# BUILDERS
# ═══════════════════════════════════════════════════════════════════════════

class MethodBuilder:
    """Accumulates a method body, with nested control flow."""

    def __init__(self, name: str) -> None:
        self.name = name
        self._parameters: List[ParameterSpec] = []
        self._returns: TypeName = VOID
        self._body: List[Stmt] = []
        self._flow: List[Tuple[Expr, List[Stmt]]] = []

    @classmethod
    def constructor(cls) -> "MethodBuilder":
        return cls(MethodSpec.CONSTRUCTOR)

    def add_parameter(self, type_: TypeName, name: str,
                      default: Optional[Expr] = None) -> "MethodBuilder":
        self._parameters.append(ParameterSpec(type_, name, default))
        return self

    def returns(self, type_: TypeName) -> "MethodBuilder":
        self._returns = type_
        return self

    def _current(self) -> List[Stmt]:
        return self._flow[-1][1] if self._flow else self._body

    def add_statement(self, stmt: Stmt) -> "MethodBuilder":
        self._current().append(stmt)
        return self

    def add_blank(self) -> "MethodBuilder":
        return self.add_statement(Blank())

    def begin_control_flow(self, condition: Expr) -> "MethodBuilder":
        self._flow.append((condition, []))
        return self

    def end_control_flow(self) -> "MethodBuilder":
        if not self._flow:
            raise CodeGenError(
                f"end_control_flow() without begin in {self.name}",
                code=ErrorCodes.UNBALANCED_CONTROL_FLOW,
            )
        condition, body = self._flow.pop()
        self._current().append(If(condition, tuple(body)))
        return self

    @contextmanager
    def control_flow(self, condition: Optional[Expr]) -> Iterator["MethodBuilder"]:
        """Guard the statements added in the block; ``None`` means unguarded."""
        if condition is None:
            yield self
            return
        self.begin_control_flow(condition)
        yield self
        self.end_control_flow()

    def build(self) -> MethodSpec:
        if self._flow:
            raise CodeGenError(
                f"{len(self._flow)} unclosed control flow block(s) in {self.name}",
                code=ErrorCodes.UNBALANCED_CONTROL_FLOW,
            )
        return MethodSpec(self.name, tuple(self._parameters), self._returns,
                          tuple(self._body))


class TypeSpecBuilder:
    def __init__(self, name: ClassName) -> None:
        self.name = name
        self._modifiers = {Modifier.PUBLIC}
        self._superclass: Optional[ClassName] = None
        self._interfaces: List[ClassName] = []
        self._fields: List[FieldSpec] = []
        self._methods: List[MethodSpec] = []

    def add_modifiers(self, *modifiers: Modifier) -> "TypeSpecBuilder":
        self._modifiers.update(modifiers)
        return self

    def superclass(self, type_: ClassName) -> "TypeSpecBuilder":
        self._superclass = type_
        return self

    def add_superinterface(self, type_: ClassName) -> "TypeSpecBuilder":
        self._interfaces.append(type_)
        return self

    def add_field(self, type_: TypeName, name: str,
                  visibility: Modifier = Modifier.PRIVATE) -> "TypeSpecBuilder":
        if any(spec.name == name for spec in self._fields):
            raise CodeGenError(f"Duplicate field {name!r} on {self.name}")
        self._fields.append(FieldSpec(type_, name, visibility))
        return self

    def add_method(self, method: MethodSpec) -> "TypeSpecBuilder":
        self._methods.append(method)
        return self

    def build(self) -> TypeSpec:
        return TypeSpec(
            name=self.name,
            modifiers=frozenset(self._modifiers),
            superclass=self._superclass,
            interfaces=tuple(self._interfaces),
            fields=tuple(self._fields),
            methods=tuple(self._methods),
        )
