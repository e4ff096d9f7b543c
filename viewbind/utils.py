"""
viewbind/utils.py
=================

Runtime helpers called by generated binders.

Every helper takes the element identifier and a human-readable
description of the bindings involved, so that failures name exactly
what the binder was trying to wire.
"""

from __future__ import annotations

from typing import Any, List, Optional, Tuple, Type, TypeVar

from viewbind.errors import ParamCastError, ViewCastError, ViewNotFoundError

__all__ = [
    "find_required_view",
    "find_optional_view",
    "find_required_view_as_type",
    "find_optional_view_as_type",
    "cast_view",
    "cast_param",
    "list_of",
    "array_of",
]

T = TypeVar("T")


def find_required_view(source: Any, view_id: int, who: str) -> Any:
    view = source.find_view_by_id(view_id)
    if view is None:
        raise ViewNotFoundError(view_id, who)
    return view


def find_optional_view(source: Any, view_id: int, who: str) -> Any:
    return source.find_view_by_id(view_id)


def find_required_view_as_type(source: Any, view_id: int, who: str, cls: Type[T]) -> T:
    return cast_view(find_required_view(source, view_id, who), view_id, who, cls)


def find_optional_view_as_type(source: Any, view_id: int, who: str,
                               cls: Type[T]) -> Optional[T]:
    return cast_view(source.find_view_by_id(view_id), view_id, who, cls)


def cast_view(view: Any, view_id: int, who: str, cls: Type[T]) -> Optional[T]:
    """Check that *view* is a *cls*; ``None`` passes through."""
    if view is None or isinstance(view, cls):
        return view
    raise ViewCastError(view_id, who, cls, type(view))


def cast_param(value: Any, from_method: str, from_position: int,
               to_method: str, to_position: int, cls: Type[T]) -> Optional[T]:
    """Check a listener argument against the bound method's parameter type."""
    if value is None or isinstance(value, cls):
        return value
    raise ParamCastError(from_method, from_position, to_method, to_position,
                         cls, type(value))


def list_of(*views: Any) -> List[Any]:
    """Present elements, in order."""
    return [view for view in views if view is not None]


def array_of(*views: Any) -> Tuple[Any, ...]:
    return tuple(view for view in views if view is not None)
