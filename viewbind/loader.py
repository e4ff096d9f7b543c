"""
viewbind/loader.py
==================

JSON binding-description front end.

A description document lists target types and what to bind on each::

    {
      "targets": [
        {
          "type": "com.example.MainActivity",
          "activity": true,
          "layout": 2131296256,
          "parent": "com.example.BaseActivity",
          "fields": [
            {"name": "title", "id": 100, "type": "android.widget.TextView"},
            {"name": "footer", "id": 200, "required": false}
          ],
          "collections": [
            {"name": "tabs", "ids": [1, 2, 3], "kind": "list",
             "type": "android.widget.Button"}
          ],
          "methods": [
            {"name": "on_ok", "listener": "OnClick", "ids": [300],
             "parameters": [{"position": 0, "type": "android.widget.Button"}]}
          ]
        }
      ]
    }

Identifiers are integers or ``"root"``; ``parent_id`` and collection
``ids`` name child elements and take integers only.  Parents must be described in
the same document; binding sets come back parents-first.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Set, Union

from viewbind.binding_set import BindingSet, BindingSetBuilder
from viewbind.config import BinderConfig
from viewbind.errors import DescriptionError, ErrorCodes, TypeResolutionError
from viewbind.listeners import ListenerClass, ListenerMethod, ListenerRegistry, default_registry
from viewbind.model import (
    CollectionKind,
    FieldCollectionViewBinding,
    FieldViewBinding,
    Id,
    MethodViewBinding,
    Parameter,
)
from viewbind.types import TypeName, best_guess

__all__ = ["load_description", "parse_id"]

logger = logging.getLogger(__name__)


def parse_id(value: Any, target: str = "") -> Id:
    """``"root"`` -> ``Id.ROOT``; integers pass through."""
    if value == "root":
        return Id.ROOT
    if isinstance(value, bool) or not isinstance(value, int):
        raise DescriptionError(f"Invalid view id {value!r}", target=target)
    return Id(value)


def _require(entry: Mapping[str, Any], key: str, target: str) -> Any:
    if key not in entry:
        raise DescriptionError(f"Missing required key {key!r}", target=target)
    return entry[key]


def _require_str(entry: Mapping[str, Any], key: str, target: str) -> str:
    value = _require(entry, key, target)
    if not isinstance(value, str) or not value:
        raise DescriptionError(f"{key!r} must be a non-empty string, got {value!r}",
                               target=target)
    return value


def _expect_objects(entry: Mapping[str, Any], key: str,
                    target: str) -> List[Mapping[str, Any]]:
    """``entry[key]`` as a list of objects; absent means empty."""
    items = entry.get(key, [])
    if not isinstance(items, list):
        raise DescriptionError(f"{key!r} must be a list, got {items!r}", target=target)
    for item in items:
        if not isinstance(item, dict):
            raise DescriptionError(f"Entries of {key!r} must be objects, got {item!r}",
                                   target=target)
    return items


def _child_id(value: Any, target: str, what: str) -> Id:
    """A view id that names a child element; ``"root"`` is refused."""
    view_id = parse_id(value, target)
    if view_id.is_root:
        raise DescriptionError(f"{what} cannot refer to the root element", target=target)
    return view_id


def _resolve(text: Any, target: str) -> TypeName:
    if not isinstance(text, str):
        raise DescriptionError(f"Type name must be a string, got {text!r}", target=target)
    try:
        return best_guess(text)
    except TypeResolutionError as exc:
        raise DescriptionError(exc.message, target=target,
                               code=ErrorCodes.UNRESOLVABLE_TYPE, cause=exc) from exc


class _DescriptionLoader:
    def __init__(self, registry: ListenerRegistry, config: BinderConfig) -> None:
        self.registry = registry
        self.config = config
        self._entries: Dict[str, Mapping[str, Any]] = {}
        self._built: Dict[str, BindingSet] = {}
        self._order: List[BindingSet] = []

    def load(self, document: Mapping[str, Any]) -> List[BindingSet]:
        targets = document.get("targets")
        if not isinstance(targets, list):
            raise DescriptionError("Description must hold a 'targets' list")
        for entry in targets:
            if not isinstance(entry, dict):
                raise DescriptionError(f"Target entry must be an object, got {entry!r}")
            name = _require_str(entry, "type", "<target>")
            if name in self._entries:
                raise DescriptionError("Target described twice", target=name)
            self._entries[name] = entry
        for name in self._entries:
            self._build(name, set())
        return list(self._order)

    def _build(self, name: str, visiting: Set[str]) -> BindingSet:
        built = self._built.get(name)
        if built is not None:
            return built
        if name in visiting:
            raise DescriptionError("Parent chain loops back to this type", target=name,
                                   code=ErrorCodes.CYCLIC_PARENT)
        visiting.add(name)
        entry = self._entries[name]

        target_type = _resolve(name, name)
        builder = BindingSet.new_builder(
            target_type,
            is_final=bool(entry.get("final", False)),
            is_activity=bool(entry.get("activity", False)),
            binding_suffix=self.config.binding_suffix,
        )
        parent_name = entry.get("parent")
        if parent_name is not None:
            if not isinstance(parent_name, str):
                raise DescriptionError(f"Parent must be a type name, got {parent_name!r}",
                                       target=name)
            if parent_name not in self._entries:
                raise DescriptionError(f"Unknown parent type {parent_name!r}", target=name,
                                       code=ErrorCodes.UNKNOWN_PARENT)
            builder.set_parent(self._build(parent_name, visiting))
        layout = entry.get("layout", 0)
        if isinstance(layout, bool) or not isinstance(layout, int):
            raise DescriptionError(f"Layout id must be an integer, got {layout!r}", target=name)
        builder.set_content_layout_id(layout)

        for field_entry in _expect_objects(entry, "fields", name):
            self._add_field(builder, field_entry, name)
        for collection_entry in _expect_objects(entry, "collections", name):
            self._add_collection(builder, collection_entry, name)
        for method_entry in _expect_objects(entry, "methods", name):
            self._add_method(builder, method_entry, name)

        binding_set = builder.build()
        self._built[name] = binding_set
        self._order.append(binding_set)
        visiting.discard(name)
        logger.info("Loaded bindings for %s", name)
        return binding_set

    def _add_field(self, builder: BindingSetBuilder, entry: Mapping[str, Any],
                   target: str) -> None:
        parent_id = entry.get("parent_id")
        binding = FieldViewBinding(
            name=_require_str(entry, "name", target),
            type=_resolve(entry.get("type", self.config.view_type), target),
            required=bool(entry.get("required", True)),
            parent_id=(_child_id(parent_id, target, "A field's parent_id")
                       if parent_id is not None else None),
        )
        builder.add_field(parse_id(_require(entry, "id", target), target), binding)

    def _add_collection(self, builder: BindingSetBuilder, entry: Mapping[str, Any],
                        target: str) -> None:
        kind_name = str(entry.get("kind", "list")).upper()
        try:
            kind = CollectionKind[kind_name]
        except KeyError as exc:
            raise DescriptionError(f"Unknown collection kind {kind_name.lower()!r}",
                                   target=target, cause=exc) from exc
        ids = _require(entry, "ids", target)
        if not isinstance(ids, list) or not ids:
            raise DescriptionError("Collection needs a non-empty 'ids' list", target=target)
        builder.add_field_collection(FieldCollectionViewBinding(
            name=_require_str(entry, "name", target),
            type=_resolve(entry.get("type", self.config.view_type), target),
            kind=kind,
            ids=tuple(_child_id(value, target, "A collection id") for value in ids),
            required=bool(entry.get("required", True)),
        ))

    def _listener(self, entry: Mapping[str, Any], target: str) -> ListenerClass:
        listener_name = _require_str(entry, "listener", target)
        listener = self.registry.get(listener_name)
        if listener is None:
            raise DescriptionError(f"Unknown listener @{listener_name}", target=target,
                                   code=ErrorCodes.UNKNOWN_LISTENER)
        return listener

    def _callback(self, listener: ListenerClass, entry: Mapping[str, Any],
                  target: str) -> ListenerMethod:
        callback = entry.get("callback")
        method = listener.find_method(callback)
        if method is None:
            wanted = repr(callback) if callback else "a callback name"
            raise DescriptionError(
                f"@{listener.name} needs {wanted} from "
                f"{[m.name for m in listener.listener_methods()]}",
                target=target,
                code=ErrorCodes.UNKNOWN_CALLBACK,
            )
        return method

    def _add_method(self, builder: BindingSetBuilder, entry: Mapping[str, Any],
                    target: str) -> None:
        listener = self._listener(entry, target)
        method = self._callback(listener, entry, target)
        name = _require_str(entry, "name", target)
        parameters = []
        for parameter in _expect_objects(entry, "parameters", target):
            position = _require(parameter, "position", target)
            valid = isinstance(position, int) and not isinstance(position, bool)
            if not valid or not 0 <= position < len(method.parameters):
                raise DescriptionError(
                    f"Method '{name}' maps to position {position!r}, but "
                    f"{method.name} takes {len(method.parameters)} parameter(s)",
                    target=target,
                )
            type_text = parameter.get("type", method.parameters[position])
            parameters.append(Parameter(position, _resolve(type_text, target)))
        binding = MethodViewBinding(name, tuple(parameters))
        ids = _require(entry, "ids", target)
        if not isinstance(ids, list):
            raise DescriptionError(f"Method '{name}' needs an 'ids' list", target=target)
        for value in ids:
            view_id = parse_id(value, target)
            if not builder.add_method(view_id, listener, method, binding):
                raise DescriptionError(
                    f"Multiple listener methods with return value specified for ID {view_id}",
                    target=target,
                    code=ErrorCodes.DUPLICATE_LISTENER_CLAIM,
                )


def load_description(source: Union[str, Path, Mapping[str, Any]],
                     registry: Optional[ListenerRegistry] = None,
                     config: Optional[BinderConfig] = None) -> List[BindingSet]:
    """Build every binding set a description document asks for."""
    if isinstance(source, Mapping):
        document = source
    else:
        path = Path(source)
        try:
            document = json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            raise DescriptionError(f"{path} is not valid JSON: {exc}", cause=exc) from exc
        if not isinstance(document, dict):
            raise DescriptionError(f"{path} must contain a JSON object")
    loader = _DescriptionLoader(registry or default_registry(), config or BinderConfig())
    return loader.load(document)
