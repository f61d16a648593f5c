from __future__ import annotations

import sys
from pathlib import Path

import pytest

import flowbundle.api
from flowbundle.errors import CodeLoadError
from flowbundle.program.code_context import (
    ProgramCodeContext,
    get_api_resources,
    split_symbol_ref,
)


def _write_program(root: Path, value: str) -> Path:
    package = root / "shared"
    package.mkdir(parents=True)
    (package / "__init__.py").write_text("", encoding="utf-8")
    (package / "settings.py").write_text(f"VALUE = {value!r}\n", encoding="utf-8")
    (package / "main.py").write_text(
        "from .settings import VALUE\n\n\nclass Outer:\n    class Inner:\n        tag = VALUE\n",
        encoding="utf-8",
    )
    return root


def test_same_module_name_isolated_between_contexts(tmp_path: Path) -> None:
    first = ProgramCodeContext(_write_program(tmp_path / "one", "first"))
    second = ProgramCodeContext(_write_program(tmp_path / "two", "second"))
    try:
        assert first.namespace != second.namespace
        assert first.load_symbol("shared.settings:VALUE") == "first"
        assert second.load_symbol("shared.settings.VALUE") == "second"
        assert first.load_symbol("shared.main:Outer.Inner").tag == "first"
        assert "shared" not in sys.modules
    finally:
        first.close()
        second.close()


def test_api_resources_resolve_from_host(tmp_path: Path) -> None:
    # a program shipping its own copy of the API must not shadow the host's
    fake_api = tmp_path / "program" / "flowbundle" / "api"
    fake_api.mkdir(parents=True)
    (fake_api.parent / "__init__.py").write_text("", encoding="utf-8")
    (fake_api / "__init__.py").write_text("SHADOWED = True\n", encoding="utf-8")

    with ProgramCodeContext(tmp_path / "program") as context:
        assert context.is_api_resource("flowbundle.api.flow")
        assert not context.is_api_resource("flowbundle.apiary")
        assert context.load_module("flowbundle.api") is flowbundle.api


def test_api_resources_are_shared_and_frozen() -> None:
    assert get_api_resources() is get_api_resources()
    assert isinstance(get_api_resources(), frozenset)
    assert "flowbundle.api" in get_api_resources()


def test_missing_directory_rejected(tmp_path: Path) -> None:
    with pytest.raises(CodeLoadError, match="does not exist"):
        ProgramCodeContext(tmp_path / "absent")


def test_missing_module_and_symbol(tmp_path: Path) -> None:
    with ProgramCodeContext(_write_program(tmp_path / "p", "x")) as context:
        with pytest.raises(CodeLoadError, match="not found in program directory"):
            context.load_module("nothing_here")
        with pytest.raises(CodeLoadError, match="symbol 'Missing' not found"):
            context.load_symbol("shared.main:Missing")


def test_module_raising_on_import_wrapped(tmp_path: Path) -> None:
    root = tmp_path / "p"
    root.mkdir()
    (root / "broken.py").write_text("raise RuntimeError('bad import')\n", encoding="utf-8")
    with ProgramCodeContext(root) as context:
        with pytest.raises(CodeLoadError, match="bad import"):
            context.load_module("broken")


def test_close_unloads_modules(tmp_path: Path) -> None:
    context = ProgramCodeContext(_write_program(tmp_path / "p", "x"))
    context.load_module("shared.main")
    prefix = context.namespace
    assert any(name.startswith(prefix) for name in sys.modules)

    context.close()
    assert context.closed
    assert not any(name == prefix or name.startswith(f"{prefix}.") for name in sys.modules)
    with pytest.raises(CodeLoadError, match="closed"):
        context.load_module("shared.main")


@pytest.mark.parametrize("ref", ["", "nomodule", ":attr", "module:"])
def test_split_symbol_ref_rejects_invalid(ref: str) -> None:
    with pytest.raises(CodeLoadError):
        split_symbol_ref(ref)


def test_split_symbol_ref_forms() -> None:
    assert split_symbol_ref("pkg.mod:Thing") == ("pkg.mod", "Thing")
    assert split_symbol_ref("pkg.mod.Thing") == ("pkg.mod", "Thing")
