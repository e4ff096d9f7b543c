"""
viewbind/listeners.py
=====================

Static catalog of listener shapes.

A ``ListenerClass`` describes one callback-bearing capability: the
listener type a binder must implement, the element type the setter and
remover are invoked on, and the callback methods the listener declares.
Single-method listeners list their method directly; multi-method
listeners enumerate their callbacks in declaration order, each carrying
its own ``ListenerMethod``.  Registries validate every entry when they
are built, so a defective catalog fails before any binder is synthesised.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from viewbind.errors import RegistryError
from viewbind.types import DEFAULT_VIEW_TYPE

__all__ = [
    "ListenerMethod",
    "ListenerCallback",
    "ListenerClass",
    "ListenerRegistry",
    "default_registry",
]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ListenerMethod:
    """One callback method of a listener type."""

    name: str
    parameters: Tuple[str, ...] = ()
    return_type: str = "void"
    default_return: str = "None"

    @property
    def returns_value(self) -> bool:
        return self.return_type != "void"


@dataclass(frozen=True)
class ListenerCallback:
    """An enumerated callback constant of a multi-method listener."""

    name: str
    method: Optional[ListenerMethod] = None


@dataclass(frozen=True)
class ListenerClass:
    """Shape of a listener capability."""

    name: str
    type: str
    setter: str
    target_type: str = DEFAULT_VIEW_TYPE
    remover: str = ""
    method: Tuple[ListenerMethod, ...] = ()
    callbacks: Tuple[ListenerCallback, ...] = ()

    @property
    def requires_removal(self) -> bool:
        return bool(self.remover)

    def listener_methods(self) -> List[ListenerMethod]:
        """Every callback method the listener type declares, in order."""
        if len(self.method) == 1:
            return list(self.method)
        if not self.callbacks:
            raise RegistryError(
                f"@{self.name} declares {len(self.method)} methods and no callbacks."
            )
        methods: List[ListenerMethod] = []
        for callback in self.callbacks:
            if callback.method is None:
                raise RegistryError(
                    f"@{self.name}'s callback {callback.name} has no listener method."
                )
            methods.append(callback.method)
        return methods

    def find_method(self, name: Optional[str] = None) -> Optional[ListenerMethod]:
        """Look up a callback method by name; ``None`` picks the only one."""
        methods = self.listener_methods()
        if name is None:
            return methods[0] if len(methods) == 1 else None
        for method in methods:
            if method.name == name:
                return method
        for callback in self.callbacks:
            if callback.name == name:
                return callback.method
        return None


class ListenerRegistry:
    """Name-keyed collection of validated ``ListenerClass`` entries."""

    def __init__(self, classes: Iterable[ListenerClass] = ()) -> None:
        self._classes: Dict[str, ListenerClass] = {}
        for listener in classes:
            self.register(listener)

    def register(self, listener: ListenerClass) -> None:
        if listener.name in self._classes:
            raise RegistryError(f"Listener @{listener.name} registered twice.")
        # Fails on a catalog defect.
        listener.listener_methods()
        self._classes[listener.name] = listener

    def get(self, name: str) -> Optional[ListenerClass]:
        return self._classes.get(name)

    def names(self) -> List[str]:
        return list(self._classes)

    def __contains__(self, name: object) -> bool:
        return name in self._classes

    def __iter__(self) -> Iterator[ListenerClass]:
        return iter(self._classes.values())

    def __len__(self) -> int:
        return len(self._classes)


# ═══════════════════════════════════════════════════════════════════
#  Default catalog
# ═══════════════════════════════════════════════════════════════════

_VIEW = DEFAULT_VIEW_TYPE
_ADAPTER_VIEW = "android.widget.AdapterView<?>"


def _single(name: str, type_: str, setter: str, method: ListenerMethod,
            target_type: str = _VIEW) -> ListenerClass:
    return ListenerClass(name=name, type=type_, setter=setter,
                         target_type=target_type, method=(method,))


def default_registry() -> ListenerRegistry:
    """The standard Android-style listener catalog."""
    text_params = ("java.lang.CharSequence", "int", "int", "int")
    classes = [
        _single("OnClick", "android.view.View.OnClickListener", "set_on_click_listener",
                ListenerMethod("on_click", (_VIEW,))),
        _single("OnLongClick", "android.view.View.OnLongClickListener",
                "set_on_long_click_listener",
                ListenerMethod("on_long_click", (_VIEW,), "boolean", "False")),
        _single("OnFocusChange", "android.view.View.OnFocusChangeListener",
                "set_on_focus_change_listener",
                ListenerMethod("on_focus_change", (_VIEW, "boolean"))),
        _single("OnTouch", "android.view.View.OnTouchListener", "set_on_touch_listener",
                ListenerMethod("on_touch", (_VIEW, "android.view.MotionEvent"),
                               "boolean", "False")),
        _single("OnCheckedChanged",
                "android.widget.CompoundButton.OnCheckedChangeListener",
                "set_on_checked_change_listener",
                ListenerMethod("on_checked_changed",
                               ("android.widget.CompoundButton", "boolean")),
                target_type="android.widget.CompoundButton"),
        _single("OnEditorAction", "android.widget.TextView.OnEditorActionListener",
                "set_on_editor_action_listener",
                ListenerMethod("on_editor_action",
                               ("android.widget.TextView", "int", "android.view.KeyEvent"),
                               "boolean", "False"),
                target_type="android.widget.TextView"),
        _single("OnItemClick", "android.widget.AdapterView.OnItemClickListener",
                "set_on_item_click_listener",
                ListenerMethod("on_item_click", (_ADAPTER_VIEW, _VIEW, "int", "long")),
                target_type=_ADAPTER_VIEW),
        _single("OnItemLongClick", "android.widget.AdapterView.OnItemLongClickListener",
                "set_on_item_long_click_listener",
                ListenerMethod("on_item_long_click", (_ADAPTER_VIEW, _VIEW, "int", "long"),
                               "boolean", "False"),
                target_type=_ADAPTER_VIEW),
        ListenerClass(
            name="OnItemSelected",
            type="android.widget.AdapterView.OnItemSelectedListener",
            setter="set_on_item_selected_listener",
            target_type=_ADAPTER_VIEW,
            callbacks=(
                ListenerCallback("ITEM_SELECTED", ListenerMethod(
                    "on_item_selected", (_ADAPTER_VIEW, _VIEW, "int", "long"))),
                ListenerCallback("NOTHING_SELECTED", ListenerMethod(
                    "on_nothing_selected", (_ADAPTER_VIEW,))),
            ),
        ),
        ListenerClass(
            name="OnTextChanged",
            type="android.text.TextWatcher",
            setter="add_text_changed_listener",
            remover="remove_text_changed_listener",
            target_type="android.widget.TextView",
            callbacks=(
                ListenerCallback("TEXT_CHANGED", ListenerMethod(
                    "on_text_changed", text_params)),
                ListenerCallback("BEFORE_TEXT_CHANGED", ListenerMethod(
                    "before_text_changed", text_params)),
                ListenerCallback("AFTER_TEXT_CHANGED", ListenerMethod(
                    "after_text_changed", ("android.text.Editable",))),
            ),
        ),
        ListenerClass(
            name="OnPageChange",
            type="android.support.v4.view.ViewPager.OnPageChangeListener",
            setter="add_on_page_change_listener",
            remover="remove_on_page_change_listener",
            target_type="android.support.v4.view.ViewPager",
            callbacks=(
                ListenerCallback("PAGE_SELECTED", ListenerMethod(
                    "on_page_selected", ("int",))),
                ListenerCallback("PAGE_SCROLLED", ListenerMethod(
                    "on_page_scrolled", ("int", "float", "int"))),
                ListenerCallback("PAGE_SCROLL_STATE_CHANGED", ListenerMethod(
                    "on_page_scroll_state_changed", ("int",))),
            ),
        ),
    ]
    registry = ListenerRegistry(classes)
    logger.debug("Default listener registry holds %d classes", len(registry))
    return registry
