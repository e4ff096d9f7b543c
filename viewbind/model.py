"""
viewbind/model.py
=================

The binding model: what the front end asks a binder to wire.

* ``Id``                          – element identifier, or the ``Id.ROOT`` sentinel
* ``FieldViewBinding``            – a target field assigned from one element
* ``Parameter`` / ``MethodViewBinding`` – a target method fired by a listener callback
* ``FieldCollectionViewBinding``  – a target field holding several elements
* ``ViewBinding``                 – everything bound to one identifier
* ``ViewBindingBuilder``          – mutable accumulator behind ``ViewBinding``
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import ClassVar, Dict, List, Mapping, Optional, Tuple

from viewbind.describe import as_human_description
from viewbind.listeners import ListenerClass, ListenerMethod
from viewbind.types import ClassName, TypeName, requires_cast
from viewbind.typespec import Assign, Attribute, Call, Expr, Literal, Name, Stmt, TypeRef, invoke

__all__ = [
    "Id",
    "MemberViewBinding",
    "FieldViewBinding",
    "Parameter",
    "MethodViewBinding",
    "CollectionKind",
    "FieldCollectionViewBinding",
    "ViewBinding",
    "ViewBindingBuilder",
    "UTILS",
    "id_expr",
    "lookup_expr",
]

#: Runtime helper module called by generated binders.
UTILS = ClassName("viewbind", ("utils",))


@dataclass(frozen=True)
class Id:
    """An element identifier; ``Id.ROOT`` binds to the root element itself."""

    value: Optional[int]

    ROOT: ClassVar["Id"]

    @property
    def is_root(self) -> bool:
        return self.value is None

    def __str__(self) -> str:
        return "root" if self.value is None else str(self.value)


Id.ROOT = Id(None)


class MemberViewBinding(ABC):
    """Anything bound to an element that can describe itself in diagnostics."""

    @property
    @abstractmethod
    def description(self) -> str:
        ...


@dataclass(frozen=True)
class FieldViewBinding(MemberViewBinding):
    name: str
    type: TypeName
    required: bool = True
    parent_id: Optional[Id] = None
    raw_type: Optional[TypeName] = None

    def __post_init__(self) -> None:
        if self.raw_type is None:
            object.__setattr__(self, "raw_type", self.type.raw)

    @property
    def description(self) -> str:
        return f"field '{self.name}'"


@dataclass(frozen=True)
class Parameter:
    """Maps a target method parameter onto a listener callback argument."""

    listener_position: int
    type: TypeName

    def requires_cast(self, listener_type: str) -> bool:
        return str(self.type) != listener_type


@dataclass(frozen=True)
class MethodViewBinding(MemberViewBinding):
    name: str
    parameters: Tuple[Parameter, ...] = ()

    @property
    def description(self) -> str:
        return f"method '{self.name}'"


# ═══════════════════════════════════════════════════════════════════════════
# LOOKUP EXPRESSIONS
# ═══════════════════════════════════════════════════════════════════════════

def id_expr(view_id: Id) -> Expr:
    return Literal(view_id.value)


def _utils(helper: str) -> Expr:
    return Attribute(TypeRef(UTILS), helper)


def lookup_expr(source: Expr, view_id: Id, binding: MemberViewBinding,
                type_: TypeName, required: bool, view_type: str) -> Expr:
    """The expression resolving one element for a single consumer.

    Optional uncast lookups go straight to ``find_view_by_id``; anything
    required or needing a cast goes through a checking helper.
    """
    cast = requires_cast(type_, view_type)
    if not cast and not required:
        return invoke(source, "find_view_by_id", id_expr(view_id))
    helper = "find_required_view" if required else "find_optional_view"
    args: List[Expr] = [source, id_expr(view_id)]
    args.append(Literal(as_human_description([binding])))
    if cast:
        helper += "_as_type"
        args.append(TypeRef(type_.raw))
    return Call(_utils(helper), tuple(args))


class CollectionKind(Enum):
    LIST = "list_of"
    ARRAY = "array_of"


@dataclass(frozen=True)
class FieldCollectionViewBinding(MemberViewBinding):
    """One target field holding the elements of several identifiers."""

    name: str
    type: TypeName
    kind: CollectionKind
    ids: Tuple[Id, ...]
    required: bool = True

    @property
    def description(self) -> str:
        return f"field '{self.name}'"

    def render(self, view_type: str) -> Stmt:
        """A self-contained initialization statement for the field."""
        source = Name("source")
        lookups = tuple(
            lookup_expr(source, view_id, self, self.type, self.required, view_type)
            for view_id in self.ids
        )
        return Assign(Attribute(Name("target"), self.name),
                      Call(_utils(self.kind.value), lookups))


# ═══════════════════════════════════════════════════════════════════════════
# PER-IDENTIFIER AGGREGATE
# ═══════════════════════════════════════════════════════════════════════════

MethodBindings = Mapping[ListenerClass, Mapping[ListenerMethod, Tuple[MethodViewBinding, ...]]]


@dataclass(frozen=True, eq=False)
class ViewBinding:
    """Every binding requested for one identifier."""

    id: Id
    field_binding: Optional[FieldViewBinding] = None
    method_bindings: MethodBindings = field(default_factory=dict)

    @property
    def is_bound_to_root(self) -> bool:
        return self.id.is_root

    @property
    def is_single_field_binding(self) -> bool:
        return self.field_binding is not None and not self.method_bindings

    @property
    def required_bindings(self) -> List[MemberViewBinding]:
        """Bindings that fail when the element is absent.

        Listener bindings never count; only a required field does.
        """
        if self.field_binding is not None and self.field_binding.required:
            return [self.field_binding]
        return []

    def requires_local(self) -> bool:
        """True when the element is resolved into the shared temporary."""
        return not self.is_bound_to_root and not self.is_single_field_binding


class ViewBindingBuilder:
    def __init__(self, view_id: Id) -> None:
        self.id = view_id
        self._field_binding: Optional[FieldViewBinding] = None
        self._method_bindings: Dict[ListenerClass, Dict[ListenerMethod, Dict[MethodViewBinding, None]]] = {}

    def set_field_binding(self, binding: FieldViewBinding) -> None:
        self._field_binding = binding

    def has_method_binding(self, listener: ListenerClass, method: ListenerMethod) -> bool:
        methods = self._method_bindings.get(listener)
        return methods is not None and method in methods

    def add_method_binding(self, listener: ListenerClass, method: ListenerMethod,
                           binding: MethodViewBinding) -> None:
        methods = self._method_bindings.setdefault(listener, {})
        # Insertion-ordered set.
        methods.setdefault(method, {})[binding] = None

    def build(self) -> ViewBinding:
        frozen = {
            listener: {method: tuple(bindings) for method, bindings in methods.items()}
            for listener, methods in self._method_bindings.items()
        }
        return ViewBinding(self.id, self._field_binding, frozen)
