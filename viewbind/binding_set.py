"""
viewbind/binding_set.py
=======================

Binding set builder and binder synthesis.

The front end feeds one ``BindingSetBuilder`` per target type, then
freezes it into a ``BindingSet``.  ``BindingSet.create_type`` walks the
frozen model (and its parent chain) and decides what the generated
binder must contain:

* a ``target`` field when anything is bound, a ``source`` field unless the
  target owns its root
* a constructor that chains to the parent binder, obtains the root
  (inflating it unless an existing tree is passed as ``source``),
  resolves every identifier and wires fields and listeners
* ``unbind`` that clears fields, detaches listeners and chains to the
  parent last
* ``get_layout`` returning the root, or failing for root-owning targets

Statements are emitted as ``viewbind.typespec`` nodes; turning them into
source text is the renderer's job.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from viewbind.config import BinderConfig
from viewbind.describe import as_human_description
from viewbind.errors import CodeGenError
from viewbind.listeners import ListenerClass, ListenerMethod
from viewbind.model import (
    UTILS,
    FieldCollectionViewBinding,
    FieldViewBinding,
    Id,
    MethodViewBinding,
    ViewBinding,
    ViewBindingBuilder,
    id_expr,
    lookup_expr,
)
from viewbind.types import (
    INT,
    OBJECT,
    ClassName,
    ParameterizedTypeName,
    TypeName,
    best_guess,
    requires_cast,
)
from viewbind.typespec import (
    AnonymousObject,
    Assign,
    Attribute,
    BinderFile,
    Call,
    CallbackSpec,
    Cast,
    Compare,
    Expr,
    ExprStmt,
    FieldRef,
    Literal,
    LocalDecl,
    MethodBuilder,
    MethodSpec,
    Modifier,
    Name,
    ParameterSpec,
    Raise,
    Raw,
    Return,
    Stmt,
    SuperCall,
    TypeRef,
    TypeSpec,
    TypeSpecBuilder,
    invoke,
)

__all__ = [
    "BindingSet",
    "BindingSetBuilder",
    "binding_class_name",
    "UNBINDER",
    "BINDINGS_ALREADY_CLEARED",
    "LAYOUT_UNAVAILABLE",
]

logger = logging.getLogger(__name__)

UNBINDER = ClassName("viewbind.unbinder", ("Unbinder",))
BINDINGS_ALREADY_CLEARED = ClassName("viewbind.errors", ("BindingsAlreadyClearedError",))
LAYOUT_UNAVAILABLE = ClassName("viewbind.errors", ("LayoutUnavailableError",))

DEFAULT_SUFFIX = "_ViewBinding"


def binding_class_name(target_type: TypeName, suffix: str = DEFAULT_SUFFIX) -> ClassName:
    """``pkg.Outer.Inner`` -> ``pkg.Outer$Inner_ViewBinding``."""
    if isinstance(target_type, ParameterizedTypeName):
        target_type = target_type.raw_type
    if not isinstance(target_type, ClassName):
        raise CodeGenError(f"Cannot bind to non-class type {target_type}")
    return ClassName(target_type.package, ("$".join(target_type.simple_names) + suffix,))


def _is_none(expr: Expr) -> Compare:
    return Compare(expr, "is", Literal(None))


def _not_none(expr: Expr) -> Compare:
    return Compare(expr, "is not", Literal(None))


def _utils(helper: str) -> Expr:
    return Attribute(TypeRef(UTILS), helper)


def _view_field_name(binding: ViewBinding) -> str:
    return "viewSource" if binding.is_bound_to_root else f"view{binding.id.value}"


def _listener_field_name(field_name: str, listener: ListenerClass) -> str:
    return field_name + ClassName.best_guess(listener.type).simple_name


# ═══════════════════════════════════════════════════════════════════════════
# BINDING SET
# ═══════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True, eq=False)
class BindingSet:
    """Frozen per-target binding model plus the binder synthesis over it."""

    target_type_name: ClassName
    binding_class_name: ClassName
    is_final: bool
    is_activity: bool
    view_bindings: Tuple[ViewBinding, ...]
    collection_bindings: Tuple[FieldCollectionViewBinding, ...]
    parent_binding: Optional["BindingSet"] = None
    layout_id: int = 0

    @staticmethod
    def new_builder(target_type: TypeName, is_final: bool = False,
                    is_activity: bool = False,
                    binding_suffix: str = DEFAULT_SUFFIX) -> "BindingSetBuilder":
        if isinstance(target_type, ParameterizedTypeName):
            target_type = target_type.raw_type
        name = binding_class_name(target_type, binding_suffix)
        return BindingSetBuilder(target_type, name, is_final, is_activity)

    # -- model queries ---------------------------------------------------

    def has_view_bindings(self) -> bool:
        """True when this type's bindings require an element tree."""
        return bool(self.view_bindings) or bool(self.collection_bindings)

    def has_method_bindings(self) -> bool:
        return any(binding.method_bindings for binding in self.view_bindings)

    def has_field_bindings(self) -> bool:
        if any(binding.field_binding is not None for binding in self.view_bindings):
            return True
        return bool(self.collection_bindings)

    def has_target_field(self) -> bool:
        return self.has_field_bindings() or self.has_method_bindings()

    def has_view_local(self) -> bool:
        return any(binding.requires_local() for binding in self.view_bindings)

    def constructor_needs_view(self) -> bool:
        """True if this binder or any ancestor resolves elements."""
        if self.has_view_bindings():
            return True
        return self.parent_binding is not None and self.parent_binding.constructor_needs_view()

    def __str__(self) -> str:
        return str(self.binding_class_name)

    # -- synthesis -------------------------------------------------------

    def brew(self, config: Optional[BinderConfig] = None) -> BinderFile:
        config = config or BinderConfig()
        logger.debug("Synthesising %s for %s", self.binding_class_name, self.target_type_name)
        return BinderFile(self.binding_class_name.package, self.create_type(config),
                          config.file_comment)

    def create_type(self, config: Optional[BinderConfig] = None) -> TypeSpec:
        config = config or BinderConfig()
        view_type = best_guess(config.view_type)
        result = TypeSpecBuilder(self.binding_class_name)
        if self.is_final:
            result.add_modifiers(Modifier.FINAL)
        if self.parent_binding is not None:
            result.superclass(self.parent_binding.binding_class_name)
        else:
            result.add_superinterface(UNBINDER)

        if self.has_target_field():
            result.add_field(self.target_type_name, "target")
        if not self.is_activity:
            result.add_field(view_type, "source")
        for binding in self.view_bindings:
            if not binding.method_bindings:
                continue
            field_name = _view_field_name(binding)
            result.add_field(view_type, field_name)
            for listener in binding.method_bindings:
                if listener.requires_removal:
                    result.add_field(ClassName.best_guess(listener.type),
                                     _listener_field_name(field_name, listener))

        result.add_method(self._create_binding_constructor(config))
        result.add_method(self._create_unbind_method(config))
        result.add_method(self._create_get_layout_method())
        return result.build()

    def _layout_expr(self) -> Expr:
        return Literal(self.layout_id) if self.layout_id != 0 else Name("layout_id")

    def _dynamic_layout_guard(self) -> Optional[Expr]:
        if self.layout_id != 0:
            return None
        return Compare(Name("layout_id"), "!=", Literal(0))

    def _create_binding_constructor(self, config: BinderConfig) -> MethodSpec:
        view_type = best_guess(config.view_type)
        ctor = MethodBuilder.constructor()
        ctor.add_parameter(self.target_type_name, "target")
        if self.is_activity:
            default = None if self.constructor_needs_view() else Literal(None)
            ctor.add_parameter(view_type, "source", default)
        else:
            ctor.add_parameter(best_guess(config.layout_inflater_type), "inflater", Literal(None))
            ctor.add_parameter(best_guess(config.view_group_type), "container", Literal(None))
        ctor.add_parameter(INT, "layout_id", Literal(0))
        if not self.is_activity:
            # An already-inflated tree; no inflation happens when given.
            ctor.add_parameter(view_type, "source", Literal(None))

        layout = self._layout_expr()
        if self.parent_binding is not None:
            if self.is_activity:
                args: Tuple[Expr, ...] = (Name("target"), Name("source"), layout)
            else:
                args = (Name("target"), Name("inflater"), Name("container"), layout,
                        Name("source"))
            ctor.add_statement(ExprStmt(SuperCall(MethodSpec.CONSTRUCTOR, args)))
            ctor.add_blank()

        if self.has_target_field():
            ctor.add_statement(Assign(FieldRef("target"), Name("target")))
            ctor.add_blank()

        if self.is_activity:
            # A parent binder has already set the content.
            if self.parent_binding is None:
                with ctor.control_flow(self._dynamic_layout_guard()):
                    ctor.add_statement(ExprStmt(invoke(Name("target"), "set_content_view", layout)))
        else:
            if self.parent_binding is not None:
                ctor.add_statement(Assign(Name("source"), SuperCall("get_layout")))
            else:
                inflate = invoke(Name("inflater"), "inflate", layout, Name("container"),
                                 Literal(False))
                with ctor.control_flow(_is_none(Name("source"))):
                    with ctor.control_flow(self._dynamic_layout_guard()):
                        ctor.add_statement(Assign(Name("source"), inflate))
            ctor.add_statement(Assign(FieldRef("source"), Name("source")))
        ctor.add_blank()

        if self.has_view_bindings():
            if self.has_view_local():
                # Shared temporary for every general-path lookup.
                ctor.add_statement(LocalDecl(view_type, "view"))
            for binding in self.view_bindings:
                self._add_view_binding(ctor, binding, config)
            for collection in self.collection_bindings:
                ctor.add_statement(collection.render(config.view_type))
        return ctor.build()

    # -- per-identifier wiring -------------------------------------------

    def _add_view_binding(self, ctor: MethodBuilder, binding: ViewBinding,
                          config: BinderConfig) -> None:
        if binding.is_single_field_binding and not binding.is_bound_to_root:
            ctor.add_statement(self._single_field_statement(binding, config))
            return

        bind_name = "source" if binding.is_bound_to_root else "view"
        required = binding.required_bindings
        if not binding.is_bound_to_root:
            if not required:
                lookup: Expr = invoke(Name("source"), "find_view_by_id", id_expr(binding.id))
            else:
                lookup = Call(_utils("find_required_view"), (
                    Name("source"), id_expr(binding.id),
                    Literal(as_human_description(required)),
                ))
            ctor.add_statement(Assign(Name("view"), lookup))

        self._add_field_binding(ctor, binding, bind_name, config)
        self._add_method_bindings(ctor, binding, bind_name, config)

    def _single_field_statement(self, binding: ViewBinding, config: BinderConfig) -> Stmt:
        field_binding = binding.field_binding
        assert field_binding is not None
        source: Expr = Name("source")
        if field_binding.parent_id is not None:
            source = invoke(source, "find_view_by_id", id_expr(field_binding.parent_id))
        value = lookup_expr(source, binding.id, field_binding, field_binding.type,
                            field_binding.required, config.view_type)
        return Assign(Attribute(Name("target"), field_binding.name), value)

    def _add_field_binding(self, ctor: MethodBuilder, binding: ViewBinding,
                           bind_name: str, config: BinderConfig) -> None:
        field_binding = binding.field_binding
        if field_binding is None:
            return
        value: Expr = Name(bind_name)
        if requires_cast(field_binding.type, config.view_type):
            value = Call(_utils("cast_view"), (
                value, id_expr(binding.id),
                Literal(as_human_description([field_binding])),
                TypeRef(field_binding.raw_type),
            ))
        ctor.add_statement(Assign(Attribute(Name("target"), field_binding.name), value))

    def _add_method_bindings(self, ctor: MethodBuilder, binding: ViewBinding,
                             bind_name: str, config: BinderConfig) -> None:
        if not binding.method_bindings:
            return
        # Required field bindings already guarantee the element.
        guard = _not_none(Name(bind_name)) if not binding.required_bindings else None
        field_name = _view_field_name(binding)
        with ctor.control_flow(guard):
            ctor.add_statement(Assign(FieldRef(field_name), Name(bind_name)))
            for listener, methods in binding.method_bindings.items():
                callback = AnonymousObject(self._callback_spec(listener, methods))
                receiver: Expr = Name(bind_name)
                if listener.target_type != config.view_type:
                    receiver = Cast(best_guess(listener.target_type), receiver)
                if listener.requires_removal:
                    listener_field = _listener_field_name(field_name, listener)
                    ctor.add_statement(Assign(FieldRef(listener_field), callback))
                    ctor.add_statement(ExprStmt(
                        invoke(receiver, listener.setter, FieldRef(listener_field))))
                else:
                    ctor.add_statement(ExprStmt(invoke(receiver, listener.setter, callback)))

    def _callback_spec(self, listener: ListenerClass,
                       method_bindings: Dict[ListenerMethod, Tuple[MethodViewBinding, ...]]
                       ) -> CallbackSpec:
        """One implementation covering every callback the listener declares."""
        methods: List[MethodSpec] = []
        for method in listener.listener_methods():
            parameters = tuple(
                ParameterSpec(best_guess(type_name), f"p{index}")
                for index, type_name in enumerate(method.parameters)
            )
            body: List[Stmt] = []
            claimed = method_bindings.get(method, ())
            for method_binding in claimed:
                call = Call(Attribute(Name("target"), method_binding.name),
                            self._callback_arguments(method, method_binding))
                body.append(Return(call) if method.returns_value else ExprStmt(call))
            if not claimed and method.returns_value:
                body.append(Return(Raw(method.default_return)))
            methods.append(MethodSpec(method.name, parameters,
                                      best_guess(method.return_type), tuple(body)))
        return CallbackSpec(ClassName.best_guess(listener.type), tuple(methods))

    def _callback_arguments(self, method: ListenerMethod,
                            binding: MethodViewBinding) -> Tuple[Expr, ...]:
        arguments: List[Expr] = []
        for index, parameter in enumerate(binding.parameters):
            position = parameter.listener_position
            if not 0 <= position < len(method.parameters):
                raise CodeGenError(
                    f"{binding.description} maps parameter #{index + 1} to position "
                    f"{position}, but {method.name} takes {len(method.parameters)}"
                )
            value: Expr = Name(f"p{position}")
            if parameter.requires_cast(method.parameters[position]):
                value = Call(_utils("cast_param"), (
                    value, Literal(method.name), Literal(position),
                    Literal(binding.name), Literal(index), TypeRef(parameter.type.raw),
                ))
            arguments.append(value)
        return tuple(arguments)

    # -- teardown --------------------------------------------------------

    def _create_unbind_method(self, config: BinderConfig) -> MethodSpec:
        unbind = MethodBuilder("unbind")
        if self.has_target_field():
            if self.has_field_bindings():
                unbind.add_statement(Assign(Name("target"), FieldRef("target")))
                current: Expr = Name("target")
            else:
                current = FieldRef("target")
            with unbind.control_flow(_is_none(current)):
                unbind.add_statement(Raise(BINDINGS_ALREADY_CLEARED, "Bindings already cleared."))
            unbind.add_statement(Assign(FieldRef("target"), Literal(None)))
            unbind.add_blank()
            for binding in self.view_bindings:
                if binding.field_binding is not None:
                    unbind.add_statement(Assign(
                        Attribute(Name("target"), binding.field_binding.name), Literal(None)))
            for collection in self.collection_bindings:
                unbind.add_statement(Assign(Attribute(Name("target"), collection.name),
                                            Literal(None)))

        if self.has_method_bindings():
            unbind.add_blank()
            for binding in self.view_bindings:
                self._add_unbind_statements(unbind, binding, config)

        if self.parent_binding is not None:
            unbind.add_blank()
            unbind.add_statement(ExprStmt(SuperCall("unbind")))
        return unbind.build()

    def _add_unbind_statements(self, unbind: MethodBuilder, binding: ViewBinding,
                               config: BinderConfig) -> None:
        if not binding.method_bindings:
            return
        field_name = _view_field_name(binding)
        guard = _not_none(FieldRef(field_name)) if not binding.required_bindings else None
        with unbind.control_flow(guard):
            for listener in binding.method_bindings:
                receiver: Expr = FieldRef(field_name)
                if listener.target_type != config.view_type:
                    receiver = Cast(best_guess(listener.target_type), receiver)
                if listener.requires_removal:
                    listener_field = _listener_field_name(field_name, listener)
                    unbind.add_statement(ExprStmt(
                        invoke(receiver, listener.remover, FieldRef(listener_field))))
                    unbind.add_statement(Assign(FieldRef(listener_field), Literal(None)))
                else:
                    unbind.add_statement(ExprStmt(
                        invoke(receiver, listener.setter, Literal(None))))
            unbind.add_statement(Assign(FieldRef(field_name), Literal(None)))

    def _create_get_layout_method(self) -> MethodSpec:
        method = MethodBuilder("get_layout").returns(OBJECT)
        if self.is_activity:
            method.add_statement(Raise(LAYOUT_UNAVAILABLE,
                                       "Root-owning binders cannot hand out their layout."))
        else:
            method.add_statement(Return(FieldRef("source")))
        return method.build()


# ═══════════════════════════════════════════════════════════════════════════
# BUILDER
# ═══════════════════════════════════════════════════════════════════════════

class BindingSetBuilder:
    """Mutable accumulator for one target type's bindings."""

    def __init__(self, target_type_name: ClassName, binding_class_name: ClassName,
                 is_final: bool, is_activity: bool) -> None:
        self.target_type_name = target_type_name
        self.binding_class_name = binding_class_name
        self.is_final = is_final
        self.is_activity = is_activity
        self.layout_id = 0
        self.parent_binding: Optional[BindingSet] = None
        self._view_id_map: Dict[Id, ViewBindingBuilder] = {}
        self._collection_bindings: List[FieldCollectionViewBinding] = []

    def set_content_layout_id(self, layout_id: int) -> None:
        self.layout_id = layout_id

    def add_field(self, view_id: Id, binding: FieldViewBinding) -> None:
        self._get_or_create_view_bindings(view_id).set_field_binding(binding)

    def add_field_collection(self, binding: FieldCollectionViewBinding) -> None:
        self._collection_bindings.append(binding)

    def add_method(self, view_id: Id, listener: ListenerClass, method: ListenerMethod,
                   binding: MethodViewBinding) -> bool:
        """Claim a listener callback; False if a value-returning slot is taken."""
        view_binding = self._get_or_create_view_bindings(view_id)
        if view_binding.has_method_binding(listener, method) and method.returns_value:
            logger.debug("Rejected %s: %s.%s on id %s is already claimed",
                         binding.description, listener.name, method.name, view_id)
            return False
        view_binding.add_method_binding(listener, method, binding)
        return True

    def set_parent(self, parent: BindingSet) -> None:
        self.parent_binding = parent

    def _get_or_create_view_bindings(self, view_id: Id) -> ViewBindingBuilder:
        builder = self._view_id_map.get(view_id)
        if builder is None:
            builder = ViewBindingBuilder(view_id)
            self._view_id_map[view_id] = builder
        return builder

    def build(self) -> BindingSet:
        view_bindings = tuple(builder.build() for builder in self._view_id_map.values())
        logger.debug("Built binding set %s: %d id(s), %d collection(s)",
                     self.binding_class_name, len(view_bindings),
                     len(self._collection_bindings))
        return BindingSet(
            target_type_name=self.target_type_name,
            binding_class_name=self.binding_class_name,
            is_final=self.is_final,
            is_activity=self.is_activity,
            view_bindings=view_bindings,
            collection_bindings=tuple(self._collection_bindings),
            parent_binding=self.parent_binding,
            layout_id=self.layout_id,
        )
