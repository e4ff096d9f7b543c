"""
viewbind — compile-time view binder generator.

Describe which fields and listener methods of a target type are wired to
which UI elements, and viewbind synthesises a companion binder class that
performs the wiring (and its teardown) without reflection.

Quick start::

    from viewbind import BindingSet, FieldViewBinding, Id, best_guess, render_file

    builder = BindingSet.new_builder(best_guess("com.example.MainActivity"),
                                     is_activity=True)
    builder.add_field(Id(100), FieldViewBinding("title",
                                                best_guess("android.widget.TextView")))
    source = render_file(builder.build().brew())
"""

__version__ = "0.1.0"

from viewbind.binding_set import BindingSet, BindingSetBuilder, binding_class_name
from viewbind.config import BinderConfig
from viewbind.describe import as_human_description
from viewbind.errors import ViewBindError
from viewbind.listeners import ListenerClass, ListenerMethod, ListenerRegistry, default_registry
from viewbind.loader import load_description
from viewbind.model import (
    FieldCollectionViewBinding,
    FieldViewBinding,
    Id,
    MethodViewBinding,
    Parameter,
)
from viewbind.render import render_file, render_module, write_file
from viewbind.types import best_guess, requires_cast
from viewbind.unbinder import Unbinder

__all__ = [
    "__version__",
    "BindingSet",
    "BindingSetBuilder",
    "binding_class_name",
    "BinderConfig",
    "as_human_description",
    "ViewBindError",
    "ListenerClass",
    "ListenerMethod",
    "ListenerRegistry",
    "default_registry",
    "load_description",
    "FieldCollectionViewBinding",
    "FieldViewBinding",
    "Id",
    "MethodViewBinding",
    "Parameter",
    "render_file",
    "render_module",
    "write_file",
    "best_guess",
    "requires_cast",
    "Unbinder",
]
