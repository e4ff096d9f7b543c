# tests/test_render.py
"""
Tests for the Python emission backend.
"""

import ast
from dataclasses import replace

import pytest

from viewbind.errors import CodeGenError, ErrorCodes
from viewbind.model import Id
from viewbind.render import CodeEmitter, PythonRenderer, module_path, render_file, write_file
from viewbind.typespec import Node
from tests.conftest import (
    ON_CLICK,
    ON_TEXT_CHANGED,
    TEST_CONFIG,
    TEXT_VIEW,
    field,
    method,
    new_builder,
    render,
)


PRIVATE = "_tests_sample_Sample_ViewBinding__"


def _lines(code):
    return [line.strip() for line in code.splitlines()]


def _fast_path():
    builder = new_builder()
    builder.set_content_layout_id(7)
    builder.add_field(Id(100), field("title", TEXT_VIEW))
    builder.add_field(Id(200), field("icon", required=False))
    return builder.build()


class TestCodeEmitter:

    def test_block_indentation(self):
        out = CodeEmitter()
        with out.block("def f():"):
            out.emit("return 1")
        out.emit_blank()
        out.emit_comment("a\nb")
        assert out.get_code() == "def f():\n    return 1\n\n# a\n# b\n"

    def test_dedent_never_goes_negative(self):
        out = CodeEmitter("  ")
        out.dedent()
        out.indent()
        out.emit("x")
        assert out.get_code() == "  x\n"

    @pytest.mark.parametrize("name, expected", [
        ("Outer$Inner_ViewBinding", "Outer_Inner_ViewBinding"),
        ("my-view", "my_view"),
        ("9lives", "_9lives"),
        ("class", "class_"),
        ("$$$", "___"),
        ("", "_unnamed"),
    ])
    def test_make_identifier(self, name, expected):
        assert CodeEmitter.make_identifier(name) == expected


class TestFastPath:

    def test_module_is_valid_python(self):
        ast.parse(render(_fast_path()))

    def test_header_and_imports(self):
        code = render(_fast_path())
        lines = code.splitlines()
        assert lines[0] == "# Generated code from viewbind. Do not modify!"
        assert "from tests.fakeui import TextView" in lines
        assert "from viewbind import utils" in lines
        assert "from viewbind.errors import BindingsAlreadyClearedError" in lines
        assert "from viewbind.unbinder import Unbinder" in lines
        assert "class Sample_ViewBinding(Unbinder):" in lines

    def test_lookups(self):
        lines = _lines(render(_fast_path()))
        assert ("target.title = utils.find_required_view_as_type("
                "source, 100, \"field 'title'\", TextView)") in lines
        assert "target.icon = source.find_view_by_id(200)" in lines
        assert "source = inflater.inflate(7, container, False)" in lines

    def test_private_fields_carry_qualified_prefix(self):
        lines = _lines(render(_fast_path()))
        assert f"{PRIVATE}target = None" in lines
        assert f"{PRIVATE}source = None" in lines
        assert f"self.{PRIVATE}source = source" in lines
        assert f"return self.{PRIVATE}source" in lines
        assert "__target = None" not in lines

    def test_same_simple_name_binders_keep_separate_fields(self):
        first = new_builder("tests.base.Main")
        first.add_field(Id(100), field("title"))
        second = new_builder("tests.app.Main")
        second.set_parent(first.build())
        second.add_field(Id(200), field("icon"))
        lines = _lines(render_file(second.build().brew(TEST_CONFIG), TEST_CONFIG))
        assert "_tests_app_Main_ViewBinding__target = None" in lines
        assert "self._tests_app_Main_ViewBinding__target = target" in lines
        assert not any("_tests_base_Main_ViewBinding__" in line for line in lines)

    def test_teardown(self):
        lines = _lines(render(_fast_path()))
        start = lines.index("def unbind(self):")
        assert lines[start + 1:start + 4] == [
            f"target = self.{PRIVATE}target",
            "if target is None:",
            "raise BindingsAlreadyClearedError('Bindings already cleared.')",
        ]
        assert "target.title = None" in lines
        assert "target.icon = None" in lines

    def test_no_comment_when_disabled(self):
        config = replace(TEST_CONFIG, file_comment="")
        code = render(_fast_path(), config=config)
        assert not code.startswith("#")


class TestGeneralPath:

    def _listeners(self):
        builder = new_builder()
        builder.add_method(Id(200), ON_CLICK, ON_CLICK.find_method(), method("on_ok"))
        builder.add_method(Id(500), ON_TEXT_CHANGED,
                           ON_TEXT_CHANGED.find_method("on_text_changed"),
                           method("on_text", (0, "java.lang.CharSequence")))
        return builder.build()

    def test_callback_class_is_hoisted(self):
        lines = _lines(render(self._listeners()))
        decl = lines.index("class _OnClickListener1(View.OnClickListener):")
        assert lines[decl + 1] == "def on_click(self, p0):"
        assert lines[decl + 2] == "target.on_ok()"
        assert lines[decl + 3] == "view.set_on_click_listener(_OnClickListener1())"

    def test_optional_lookup_is_guarded(self):
        lines = _lines(render(self._listeners()))
        assert "view = None" in lines
        assert "view = source.find_view_by_id(200)" in lines
        assert "if view is not None:" in lines
        assert f"self.{PRIVATE}view200 = view" in lines

    def test_removable_listener(self):
        code = render(self._listeners())
        lines = _lines(code)
        assert "from typing import cast" in code.splitlines()
        watcher = f"self.{PRIVATE}view500TextWatcher"
        assert f"{watcher} = _TextWatcher2()" in lines
        assert f"cast(TextView, view).add_text_changed_listener({watcher})" in lines
        assert (f"cast(TextView, self.{PRIVATE}view500).remove_text_changed_listener("
                f"{watcher})") in lines
        assert f"{watcher} = None" in lines

    def test_unclaimed_callbacks_are_stubbed(self):
        lines = _lines(render(self._listeners()))
        decl = lines.index("class _TextWatcher2(TextWatcher):")
        assert lines[decl + 1] == "def before_text_changed(self, p0, p1, p2, p3):"
        assert lines[decl + 2] == "pass"
        assert "target.on_text(p0)" in lines

    def test_unbind_clears_listeners(self):
        lines = _lines(render(self._listeners()))
        assert f"if self.{PRIVATE}target is None:" in lines
        assert f"if self.{PRIVATE}view200 is not None:" in lines
        assert f"self.{PRIVATE}view200.set_on_click_listener(None)" in lines


class TestLayouts:

    def test_dynamic_layout(self):
        lines = _lines(render(new_builder().build()))
        assert ("def __init__(self, target, inflater=None, container=None, layout_id=0, "
                "source=None):") in lines
        guard = lines.index("if source is None:")
        assert lines[guard + 1:guard + 3] == [
            "if layout_id != 0:",
            "source = inflater.inflate(layout_id, container, False)",
        ]
        assert f"self.{PRIVATE}source = source" in lines

    def test_activity(self):
        builder = new_builder(is_activity=True, is_final=True)
        builder.set_content_layout_id(7)
        builder.add_field(Id(100), field("title"))
        code = render(builder.build())
        lines = code.splitlines()
        assert "from typing import final" in lines
        assert lines[lines.index("class Sample_ViewBinding(Unbinder):") - 1] == "@final"
        stripped = _lines(code)
        assert "def __init__(self, target, source, layout_id=0):" in stripped
        assert "target.set_content_view(7)" in stripped
        assert "raise LayoutUnavailableError('Root-owning binders cannot hand out their layout.')" \
            in stripped

    def test_nested_target_name(self):
        code = render(new_builder("tests.sample.Outer.Inner").build())
        assert "class Outer_Inner_ViewBinding(Unbinder):" in code.splitlines()


class TestModules:

    def _chain(self):
        base = new_builder("tests.sample.Base")
        base.add_field(Id(100), field("title"))
        parent = base.build()
        child = new_builder("tests.sample.Child")
        child.set_parent(parent)
        child.add_field(Id(200), field("icon"))
        return parent, child.build()

    def test_standalone_child_imports_parent(self):
        _, child = self._chain()
        code = render_file(child.brew(TEST_CONFIG), TEST_CONFIG)
        lines = code.splitlines()
        assert "from tests.sample.Base_ViewBinding import Base_ViewBinding" in lines
        assert "class Child_ViewBinding(Base_ViewBinding):" in lines
        assert "super().__init__(target, inflater, container, layout_id, source)" in _lines(code)
        assert "super().unbind()" in _lines(code)

    def test_shared_module_references_parent_locally(self):
        parent, child = self._chain()
        code = render(parent, child)
        assert "Base_ViewBinding import" not in code
        assert code.index("class Base_ViewBinding") < code.index("class Child_ViewBinding")

    def test_module_path(self, tmp_path):
        binder_file = _fast_path().brew(TEST_CONFIG)
        assert module_path(binder_file, tmp_path) == \
            tmp_path / "tests" / "sample" / "Sample_ViewBinding.py"

    def test_write_file(self, tmp_path):
        path = write_file(_fast_path().brew(TEST_CONFIG), tmp_path, TEST_CONFIG)
        assert path.is_file()
        assert "class Sample_ViewBinding" in path.read_text(encoding="utf-8")


class TestRendererErrors:

    def test_unknown_node(self):
        with pytest.raises(CodeGenError) as info:
            PythonRenderer(TEST_CONFIG).expr(Node())
        assert info.value.code == ErrorCodes.UNSUPPORTED_NODE

    def test_conflicting_imports(self):
        renderer = PythonRenderer(TEST_CONFIG)
        renderer.imports.add("tests.fakeui", "View")
        with pytest.raises(CodeGenError):
            renderer.imports.add("android.view", "View")
