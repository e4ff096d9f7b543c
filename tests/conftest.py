# tests/conftest.py
"""
Shared fixtures and helpers for the viewbind test-suite.

Generated binders are rendered against ``tests.fakeui`` so they can be
executed and driven in-process.
"""

import pytest

from viewbind.binding_set import BindingSet
from viewbind.config import BinderConfig
from viewbind.listeners import ListenerCallback, ListenerClass, ListenerMethod, ListenerRegistry
from viewbind.model import FieldViewBinding, MethodViewBinding, Parameter
from viewbind.render import render_module
from viewbind.types import best_guess

from tests import fakeui

# ─────────────────────────────────────────────────────────────────
#  Fake UI types
# ─────────────────────────────────────────────────────────────────

VIEW = "tests.fakeui.View"
TEXT_VIEW = "tests.fakeui.TextView"
BUTTON = "tests.fakeui.Button"
ADAPTER_VIEW = "tests.fakeui.AdapterView<?>"

TEST_CONFIG = BinderConfig(
    view_type=VIEW,
    layout_inflater_type="tests.fakeui.LayoutInflater",
    view_group_type="tests.fakeui.ViewGroup",
)

ON_CLICK = ListenerClass(
    name="OnClick",
    type="tests.fakeui.View.OnClickListener",
    setter="set_on_click_listener",
    target_type=VIEW,
    method=(ListenerMethod("on_click", (VIEW,)),),
)

ON_LONG_CLICK = ListenerClass(
    name="OnLongClick",
    type="tests.fakeui.View.OnLongClickListener",
    setter="set_on_long_click_listener",
    target_type=VIEW,
    method=(ListenerMethod("on_long_click", (VIEW,), "boolean", "False"),),
)

ON_ITEM_CLICK = ListenerClass(
    name="OnItemClick",
    type="tests.fakeui.AdapterView.OnItemClickListener",
    setter="set_on_item_click_listener",
    target_type=ADAPTER_VIEW,
    method=(ListenerMethod("on_item_click", (ADAPTER_VIEW, VIEW, "int", "long")),),
)

_TEXT_PARAMS = ("java.lang.CharSequence", "int", "int", "int")

ON_TEXT_CHANGED = ListenerClass(
    name="OnTextChanged",
    type="tests.fakeui.TextWatcher",
    setter="add_text_changed_listener",
    remover="remove_text_changed_listener",
    target_type=TEXT_VIEW,
    callbacks=(
        ListenerCallback("BEFORE_TEXT_CHANGED",
                         ListenerMethod("before_text_changed", _TEXT_PARAMS)),
        ListenerCallback("TEXT_CHANGED", ListenerMethod("on_text_changed", _TEXT_PARAMS)),
        ListenerCallback("AFTER_TEXT_CHANGED",
                         ListenerMethod("after_text_changed", ("android.text.Editable",))),
    ),
)


def make_registry() -> ListenerRegistry:
    return ListenerRegistry([ON_CLICK, ON_LONG_CLICK, ON_ITEM_CLICK, ON_TEXT_CHANGED])


# ─────────────────────────────────────────────────────────────────
#  Builders
# ─────────────────────────────────────────────────────────────────

def new_builder(type_name="tests.sample.Sample", **kwargs):
    return BindingSet.new_builder(best_guess(type_name), **kwargs)


def field(name, type_name=VIEW, required=True, parent_id=None):
    return FieldViewBinding(name, best_guess(type_name), required, parent_id)


def method(name, *parameters):
    """``method("on_ok", (0, BUTTON))`` maps listener position 0 to a Button."""
    return MethodViewBinding(name, tuple(Parameter(pos, best_guess(t)) for pos, t in parameters))


def render(*binding_sets, config=TEST_CONFIG):
    return render_module([bs.brew(config) for bs in binding_sets], config)


def load_binders(*binding_sets, config=TEST_CONFIG):
    """Render *binding_sets* into one module, execute it, return its namespace."""
    code = render(*binding_sets, config=config)
    ns = {"__name__": "generated_binders"}
    exec(compile(code, "<generated>", "exec"), ns)
    return ns


class Recorder:
    """Target object that records every bound-method invocation."""

    def __init__(self):
        self.calls = []

    def __getattr__(self, name):
        if name.startswith("on_") or name.startswith("handle_"):
            def record(*args):
                self.calls.append((name, args))
                return True
            return record
        raise AttributeError(name)


# ─────────────────────────────────────────────────────────────────
#  Fixtures
# ─────────────────────────────────────────────────────────────────

@pytest.fixture
def registry():
    return make_registry()


@pytest.fixture
def config():
    return TEST_CONFIG


@pytest.fixture
def layout():
    """Layout 7: TextView 100, View 200, Button 300, AdapterView 400, TextView 500."""
    def build():
        return fakeui.ViewGroup(
            1,
            fakeui.TextView(100),
            fakeui.View(200),
            fakeui.Button(300),
            fakeui.AdapterView(400),
            fakeui.TextView(500),
        )
    return build


@pytest.fixture
def inflater(layout):
    return fakeui.LayoutInflater({7: layout})

