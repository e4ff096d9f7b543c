# tests/test_loader.py
"""
Tests for the JSON description front end.
"""

import json
from dataclasses import replace

import pytest

from viewbind.errors import DescriptionError, ErrorCodes
from viewbind.loader import load_description, parse_id
from viewbind.model import CollectionKind, Id
from tests.conftest import BUTTON, TEST_CONFIG, TEXT_VIEW, load_binders


def _load(registry, *targets, config=TEST_CONFIG):
    return load_description({"targets": list(targets)}, registry, config)


def _error(registry, *targets):
    with pytest.raises(DescriptionError) as info:
        _load(registry, *targets)
    return info.value


MAIN = {
    "type": "tests.sample.Main",
    "layout": 7,
    "fields": [
        {"name": "title", "id": 100, "type": TEXT_VIEW},
        {"name": "icon", "id": 200, "required": False},
    ],
    "collections": [
        {"name": "texts", "ids": [100, 500], "kind": "array", "type": TEXT_VIEW},
    ],
    "methods": [
        {"name": "on_ok", "listener": "OnClick", "ids": [300],
         "parameters": [{"position": 0, "type": BUTTON}]},
    ],
}


class TestParseId:

    def test_values(self):
        assert parse_id(5) == Id(5)
        assert parse_id("root") is Id.ROOT

    @pytest.mark.parametrize("value", [True, "5", 1.5, None])
    def test_rejected(self, value):
        with pytest.raises(DescriptionError):
            parse_id(value)


class TestLoad:

    def test_full_target(self, registry):
        (binding_set,) = _load(registry, MAIN)
        assert str(binding_set.target_type_name) == "tests.sample.Main"
        assert binding_set.layout_id == 7
        assert [b.id for b in binding_set.view_bindings] == [Id(100), Id(200), Id(300)]
        title = binding_set.view_bindings[0].field_binding
        assert str(title.type) == TEXT_VIEW
        icon = binding_set.view_bindings[1].field_binding
        assert not icon.required
        assert str(icon.type) == TEST_CONFIG.view_type
        (collection,) = binding_set.collection_bindings
        assert collection.kind is CollectionKind.ARRAY
        assert collection.ids == (Id(100), Id(500))
        (methods,) = binding_set.view_bindings[2].method_bindings.values()
        (bindings,) = methods.values()
        assert bindings[0].parameters[0].listener_position == 0
        assert str(bindings[0].parameters[0].type) == BUTTON

    def test_loaded_binder_runs(self, registry, inflater):
        binding_sets = _load(registry, MAIN)
        binder_cls = load_binders(*binding_sets)["Main_ViewBinding"]

        class Main:
            def __init__(self):
                self.pressed = []

            def on_ok(self, button):
                self.pressed.append(button)

        target = Main()
        binder = binder_cls(target, inflater, None)
        binder.get_layout().find_view_by_id(300).perform_click()
        assert [b.id for b in target.pressed] == [300]
        assert [t.id for t in target.texts] == [100, 500]

    def test_parents_first(self, registry):
        child = {"type": "tests.sample.Child", "parent": "tests.sample.Base",
                 "fields": [{"name": "b", "id": 2}]}
        base = {"type": "tests.sample.Base", "layout": 7, "fields": [{"name": "a", "id": 1}]}
        base_set, child_set = _load(registry, child, base)
        assert str(base_set.target_type_name) == "tests.sample.Base"
        assert child_set.parent_binding is base_set

    def test_root_and_callback(self, registry):
        target = {
            "type": "tests.sample.Main",
            "fields": [{"name": "root", "id": "root"}],
            "methods": [{"name": "on_text", "listener": "OnTextChanged",
                         "callback": "AFTER_TEXT_CHANGED", "ids": ["root", 5]}],
        }
        (binding_set,) = _load(registry, target)
        assert [b.id for b in binding_set.view_bindings] == [Id.ROOT, Id(5)]

    def test_flags_and_suffix(self, registry):
        config = replace(TEST_CONFIG, binding_suffix="Binder")
        target = {"type": "tests.sample.Main", "activity": True, "final": True}
        (binding_set,) = _load(registry, target, config=config)
        assert binding_set.is_activity
        assert binding_set.is_final
        assert binding_set.binding_class_name.simple_name == "MainBinder"

    def test_value_callback_claimed_twice(self, registry):
        target = {
            "type": "tests.sample.Main",
            "methods": [
                {"name": "on_a", "listener": "OnLongClick", "ids": [1]},
                {"name": "on_b", "listener": "OnLongClick", "ids": [1]},
            ],
        }
        err = _error(registry, target)
        assert err.code == ErrorCodes.DUPLICATE_LISTENER_CLAIM
        assert "Multiple listener methods with return value specified for ID 1" in err.message

    def test_void_callback_claimed_twice(self, registry):
        target = {
            "type": "tests.sample.Main",
            "methods": [
                {"name": "on_a", "listener": "OnClick", "ids": [1]},
                {"name": "on_b", "listener": "OnClick", "ids": [1]},
            ],
        }
        (binding_set,) = _load(registry, target)
        (methods,) = binding_set.view_bindings[0].method_bindings.values()
        assert [b.name for b in next(iter(methods.values()))] == ["on_a", "on_b"]


class TestErrors:

    @pytest.mark.parametrize("target, code", [
        ({"type": "tests.sample.Main",
          "methods": [{"name": "m", "listener": "OnTap", "ids": [1]}]},
         ErrorCodes.UNKNOWN_LISTENER),
        ({"type": "tests.sample.Main",
          "methods": [{"name": "m", "listener": "OnTextChanged", "ids": [1]}]},
         ErrorCodes.UNKNOWN_CALLBACK),
        ({"type": "tests.sample.Main", "parent": "tests.sample.Missing"},
         ErrorCodes.UNKNOWN_PARENT),
        ({"type": "tests.sample.Main", "fields": [{"name": "a", "id": 1, "type": "bad..Type"}]},
         ErrorCodes.UNRESOLVABLE_TYPE),
        ({"type": "tests.sample.Main", "layout": "main"},
         ErrorCodes.MALFORMED_DESCRIPTION),
        ({"type": "tests.sample.Main", "fields": [{"name": "a"}]},
         ErrorCodes.MALFORMED_DESCRIPTION),
        ({"type": "tests.sample.Main",
          "collections": [{"name": "c", "ids": [1], "kind": "set"}]},
         ErrorCodes.MALFORMED_DESCRIPTION),
        ({"type": "tests.sample.Main", "collections": [{"name": "c", "ids": []}]},
         ErrorCodes.MALFORMED_DESCRIPTION),
        ({"type": "tests.sample.Main",
          "methods": [{"name": "m", "listener": "OnClick", "ids": [1],
                       "parameters": [{"position": 1}]}]},
         ErrorCodes.MALFORMED_DESCRIPTION),
        ({"type": "tests.sample.Main",
          "methods": [{"name": "m", "listener": "OnClick", "ids": 1}]},
         ErrorCodes.MALFORMED_DESCRIPTION),
    ])
    def test_rejected(self, registry, target, code):
        err = _error(registry, target)
        assert err.code == code
        assert err.target == "tests.sample.Main"

    @pytest.mark.parametrize("target", [
        {"type": "tests.sample.Main", "fields": ["oops"]},
        {"type": "tests.sample.Main", "fields": {"name": "a", "id": 1}},
        {"type": "tests.sample.Main", "collections": [["c", [1, 2]]]},
        {"type": "tests.sample.Main", "methods": [None]},
        {"type": "tests.sample.Main",
         "methods": [{"name": "m", "listener": "OnClick", "ids": [1], "parameters": [0]}]},
        {"type": "tests.sample.Main", "fields": [{"name": 5, "id": 1}]},
        {"type": "tests.sample.Main", "methods": [{"name": "m", "listener": ["OnClick"],
                                                   "ids": [1]}]},
        {"type": "tests.sample.Main", "parent": ["tests.sample.Base"]},
    ])
    def test_malformed_entries(self, registry, target):
        err = _error(registry, target)
        assert err.code == ErrorCodes.MALFORMED_DESCRIPTION
        assert err.target == "tests.sample.Main"

    def test_non_string_target_type(self, registry):
        err = _error(registry, {"type": ["tests.sample.Main"]})
        assert err.code == ErrorCodes.MALFORMED_DESCRIPTION

    def test_root_parent_id_refused(self, registry):
        target = {"type": "tests.sample.Main",
                  "fields": [{"name": "a", "id": 100, "parent_id": "root"}]}
        err = _error(registry, target)
        assert "parent_id cannot refer to the root element" in err.message

    def test_root_collection_member_refused(self, registry):
        target = {"type": "tests.sample.Main",
                  "collections": [{"name": "views", "ids": ["root", 100]}]}
        err = _error(registry, target)
        assert err.code == ErrorCodes.MALFORMED_DESCRIPTION
        assert "collection id cannot refer to the root element" in err.message

    def test_cyclic_parents(self, registry):
        a = {"type": "tests.sample.A", "parent": "tests.sample.B"}
        b = {"type": "tests.sample.B", "parent": "tests.sample.A"}
        assert _error(registry, a, b).code == ErrorCodes.CYCLIC_PARENT

    def test_duplicate_target(self, registry):
        target = {"type": "tests.sample.Main"}
        assert "described twice" in _error(registry, target, target).message

    def test_missing_targets_list(self, registry):
        with pytest.raises(DescriptionError):
            load_description({"bindings": []}, registry)


class TestFiles:

    def test_load_from_path(self, tmp_path, registry):
        path = tmp_path / "bindings.json"
        path.write_text(json.dumps({"targets": [MAIN]}), encoding="utf-8")
        (binding_set,) = load_description(path, registry, TEST_CONFIG)
        assert binding_set.layout_id == 7

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "bindings.json"
        path.write_text("{targets: ", encoding="utf-8")
        with pytest.raises(DescriptionError) as info:
            load_description(path)
        assert "not valid JSON" in info.value.message

    def test_non_object_document(self, tmp_path):
        path = tmp_path / "bindings.json"
        path.write_text("[]", encoding="utf-8")
        with pytest.raises(DescriptionError):
            load_description(str(path))
