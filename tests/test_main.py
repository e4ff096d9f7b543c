# tests/test_main.py
"""
Tests for the command line interface.
"""

import json

import pytest

from viewbind import __version__
from viewbind.main import EXIT_ERROR, EXIT_INFRA, EXIT_OK, main

DESCRIPTION = {
    "targets": [
        {"type": "com.example.Base", "layout": 17,
         "fields": [{"name": "title", "id": 1, "type": "android.widget.TextView"}]},
        {"type": "com.example.Main", "parent": "com.example.Base",
         "methods": [{"name": "on_ok", "listener": "OnClick", "ids": [2]}]},
    ],
}


@pytest.fixture
def description(tmp_path):
    path = tmp_path / "bindings.json"
    path.write_text(json.dumps(DESCRIPTION), encoding="utf-8")
    return path


class TestGenerate:

    def test_one_module_per_binder(self, description, tmp_path):
        out = tmp_path / "out"
        assert main(["generate", str(description), "-o", str(out)]) == EXIT_OK
        base = out / "com" / "example" / "Base_ViewBinding.py"
        child = out / "com" / "example" / "Main_ViewBinding.py"
        assert base.is_file()
        assert "from com.example.Base_ViewBinding import Base_ViewBinding" in \
            child.read_text(encoding="utf-8")

    def test_single_module(self, description, tmp_path):
        out = tmp_path / "out"
        code = main(["generate", str(description), "-o", str(out), "--single", "binders.py"])
        assert code == EXIT_OK
        text = (out / "binders.py").read_text(encoding="utf-8")
        assert text.index("class Base_ViewBinding") < text.index("class Main_ViewBinding")
        assert "from android.widget import TextView" in text

    def test_config(self, description, tmp_path):
        config = tmp_path / "viewbind.json"
        config.write_text(json.dumps({"binding_suffix": "Binder"}), encoding="utf-8")
        out = tmp_path / "out"
        assert main(["generate", str(description), "-o", str(out), "-c", str(config)]) == EXIT_OK
        assert (out / "com" / "example" / "MainBinder.py").is_file()

    def test_rejected_description(self, tmp_path, capsys):
        path = tmp_path / "bad.json"
        path.write_text(json.dumps({"targets": [
            {"type": "com.example.Main",
             "methods": [{"name": "m", "listener": "OnTap", "ids": [1]}]},
        ]}), encoding="utf-8")
        assert main(["generate", str(path), "-o", str(tmp_path)]) == EXIT_ERROR
        assert "error[VBND-1001]" in capsys.readouterr().err

    def test_malformed_entry_is_a_description_error(self, tmp_path, capsys):
        path = tmp_path / "bad.json"
        path.write_text(json.dumps({"targets": [
            {"type": "com.example.Main", "fields": ["oops"]},
        ]}), encoding="utf-8")
        assert main(["generate", str(path), "-o", str(tmp_path)]) == EXIT_ERROR
        assert "error[VBND-1000]" in capsys.readouterr().err

    def test_rejected_config(self, description, tmp_path, capsys):
        config = tmp_path / "viewbind.json"
        config.write_text(json.dumps({"colour": "red"}), encoding="utf-8")
        assert main(["generate", str(description), "-o", str(tmp_path),
                     "-c", str(config)]) == EXIT_ERROR
        assert "error[VBND-1006]" in capsys.readouterr().err

    def test_missing_description(self, tmp_path):
        assert main(["generate", str(tmp_path / "nope.json"), "-o", str(tmp_path)]) == EXIT_INFRA


class TestMisc:

    def test_listeners(self, capsys):
        assert main(["listeners"]) == EXIT_OK
        out = capsys.readouterr().out
        assert "@OnClick" in out
        assert "remover=remove_text_changed_listener" in out
        assert len(out.splitlines()) == 11

    def test_no_command(self, capsys):
        assert main([]) == EXIT_INFRA
        assert "usage:" in capsys.readouterr().err

    def test_version(self, capsys):
        with pytest.raises(SystemExit):
            main(["--version"])
        assert __version__ in capsys.readouterr().out
