"""
Python dialect: the generated module is executed against a recording runtime.
"""
from __future__ import annotations

import ast
import sys
import types

import pytest

from schemagen.core.generators import generate
from schemagen.core.schema import Model


def _make_model(**overrides) -> Model:
    defaults = dict(
        entities=[
            {
                "name": "User",
                "id": "1:1001",
                "lastPropertyId": "2:2002",
                "properties": [
                    {"name": "name", "type": "string", "id": "1:2001"},
                    {"name": "email", "type": "string", "id": "2:2002",
                     "flags": ["indexed", "not_null"], "indexId": "1:3001"},
                ],
            }
        ],
        lastEntityId="1:1001",
        lastIndexId="1:3001",
    )
    defaults.update(overrides)
    return Model.model_validate(defaults)


class _Runtime:
    """Records builder calls; declare_<fail_on> reports failure."""

    def __init__(self, fail_on=None, new_returns=True):
        self.calls = []
        self.released = 0
        self.frozen = 0
        self.fail_on = fail_on
        self.new_returns = new_returns

    def as_module(self, name="descriptor_runtime") -> types.ModuleType:
        mod = types.ModuleType(name)
        mod.new_descriptor = self.new_descriptor
        mod.release_descriptor = self.release_descriptor
        mod.freeze_descriptor = self.freeze_descriptor
        for fn in (
            "entity",
            "property",
            "property_flags",
            "property_index_id",
            "property_relation",
            "relation",
            "entity_last_property_id",
            "model_last_entity_id",
            "model_last_index_id",
            "model_last_relation_id",
        ):
            setattr(mod, f"declare_{fn}", self._declare(fn))
        return mod

    def new_descriptor(self):
        return {"steps": []} if self.new_returns else None

    def release_descriptor(self, model):
        self.released += 1

    def freeze_descriptor(self, model):
        self.frozen += 1
        return ("frozen", tuple(model["steps"]))

    def _declare(self, fn):
        def declare(model, *args):
            self.calls.append((fn, args))
            if fn == self.fail_on:
                return False
            model["steps"].append((fn, args))
            return True

        return declare


def _load(source: str, runtime: _Runtime, monkeypatch, module_name="descriptor_runtime"):
    monkeypatch.setitem(sys.modules, module_name, runtime.as_module(module_name))
    namespace = {"__name__": "generated_model"}
    exec(compile(source, "<generated>", "exec"), namespace)
    return namespace


def test_generated_module_is_valid_python():
    source = generate(_make_model(), "python")
    tree = ast.parse(source)
    funcs = [n.name for n in tree.body if isinstance(n, ast.FunctionDef)]
    assert funcs == ["create_model"]
    assert source.startswith("# Code generated by schemagen; DO NOT EDIT.\n")


def test_success_builds_and_freezes(monkeypatch):
    rt = _Runtime()
    ns = _load(generate(_make_model(), "python"), rt, monkeypatch)

    result = ns["create_model"]()

    assert rt.frozen == 1
    assert rt.released == 0
    assert result[0] == "frozen"
    assert [fn for fn, _ in rt.calls] == [
        "entity",
        "property",
        "property",
        "property_flags",
        "property_index_id",
        "entity_last_property_id",
        "model_last_entity_id",
        "model_last_index_id",
    ]
    assert rt.calls[0] == ("entity", ("User", 1, 1001))
    assert rt.calls[1] == ("property", ("name", 9, 1, 2001))
    assert rt.calls[3] == ("property_flags", (12,))


def test_failure_stops_and_releases_once(monkeypatch):
    rt = _Runtime(fail_on="property_flags")
    ns = _load(generate(_make_model(), "python"), rt, monkeypatch)

    assert ns["create_model"]() is None

    assert rt.released == 1
    assert rt.frozen == 0
    # nothing after the failing step ran
    assert [fn for fn, _ in rt.calls][-1] == "property_flags"
    assert "property_index_id" not in [fn for fn, _ in rt.calls]


@pytest.mark.parametrize("fail_on", ["entity", "entity_last_property_id", "model_last_index_id"])
def test_any_failing_step_releases(monkeypatch, fail_on):
    rt = _Runtime(fail_on=fail_on)
    ns = _load(generate(_make_model(), "python"), rt, monkeypatch)
    assert ns["create_model"]() is None
    assert rt.released == 1
    assert rt.frozen == 0


def test_no_descriptor_means_no_steps(monkeypatch):
    rt = _Runtime(new_returns=False)
    ns = _load(generate(_make_model(), "python"), rt, monkeypatch)
    assert ns["create_model"]() is None
    assert rt.calls == []
    assert rt.released == 0


def test_runtime_exception_releases_and_propagates(monkeypatch):
    rt = _Runtime()
    mod = rt.as_module()

    def boom(model, *args):
        raise RuntimeError("builder exploded")

    mod.declare_property_flags = boom
    monkeypatch.setitem(sys.modules, "descriptor_runtime", mod)
    ns = {"__name__": "generated_model"}
    exec(compile(generate(_make_model(), "python"), "<generated>", "exec"), ns)

    with pytest.raises(RuntimeError):
        ns["create_model"]()
    assert rt.released == 1
    assert rt.frozen == 0


def test_custom_runtime_and_function_name(monkeypatch):
    rt = _Runtime()
    source = generate(_make_model(), "python", {"runtime": "mydb.descriptor", "function_name": "build"})
    assert "import mydb.descriptor as _rt" in source
    assert '__all__ = ["build"]' in source

    pkg = types.ModuleType("mydb")
    pkg.descriptor = rt.as_module("mydb.descriptor")
    monkeypatch.setitem(sys.modules, "mydb", pkg)
    monkeypatch.setitem(sys.modules, "mydb.descriptor", pkg.descriptor)
    ns = {"__name__": "generated_model"}
    exec(compile(source, "<generated>", "exec"), ns)
    assert ns["build"]()[0] == "frozen"


def test_runtime_must_be_a_module_path():
    with pytest.raises(ValueError):
        generate(_make_model(), "python", {"runtime": "vendor/objectbox.h"})


def test_names_are_python_string_literals(monkeypatch):
    model = _make_model(
        entities=[
            {
                "name": 'Quote"d\\Name',
                "id": "1:1001",
                "lastPropertyId": "1:2001",
                "properties": [{"name": "naïve", "type": "string", "id": "1:2001"}],
            }
        ],
        lastIndexId=None,
    )
    rt = _Runtime()
    ns = _load(generate(model, "python"), rt, monkeypatch)
    ns["create_model"]()
    assert rt.calls[0] == ("entity", ('Quote"d\\Name', 1, 1001))
    assert rt.calls[1] == ("property", ("naïve", 9, 1, 2001))


def test_comments_carry_type_and_flag_names():
    source = generate(_make_model(), "python")
    assert "  # string\n" in source
    assert "  # not_null | indexed\n" in source
