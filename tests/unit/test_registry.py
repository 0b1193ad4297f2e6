"""
Unit tests for the parser registry (sheet_ingest.registry).

Each test runs against an empty registry (``fresh_registry`` fixture in
conftest) so registrations made here never leak into other tests.
"""

from __future__ import annotations

import importlib
import threading
import time
from dataclasses import replace

import pytest

from sheet_ingest.exceptions import UnknownFormatError
from sheet_ingest.parsers.base import BaseParser
from sheet_ingest.parsers.delimited import CsvParser
from sheet_ingest.parsers.fixed_width import FixedWidthParser
from sheet_ingest.registry import ParserRegistration

BUILTINS = {"csv", "fast_csv", "fixed_width", "excel"}


class _EchoParser(BaseParser):
    name = "echo"

    def parse(self, data, options=None):
        return [[str(data)]]


class TestBuiltins:

    def test_all_builtins_available(self, fresh_registry):
        assert fresh_registry.available_parsers() == BUILTINS

    def test_get_parser_types(self, fresh_registry):
        assert isinstance(fresh_registry.get_parser("csv"), CsvParser)
        assert isinstance(fresh_registry.get_parser("fixed_width"), FixedWidthParser)

    def test_parser_name_matches_identifier(self, fresh_registry):
        for name in fresh_registry.available_parsers():
            assert fresh_registry.get_parser(name).name == name

    def test_each_builtin_constructed_once(self, fresh_registry):
        first = fresh_registry.get_parser("fixed_width")
        fresh_registry.available_parsers()
        assert fresh_registry.get_parser("fixed_width") is first

    def test_returns_fresh_set(self, fresh_registry):
        names = fresh_registry.available_parsers()
        names.discard("csv")
        assert "csv" in fresh_registry.available_parsers()

    def test_unknown_format(self, fresh_registry):
        with pytest.raises(UnknownFormatError, match="Available"):
            fresh_registry.get_parser("parquet")


class TestMissingDependencies:

    def test_missing_pandas_hides_pandas_backends(self, fresh_registry, monkeypatch):
        real = fresh_registry._module_available
        monkeypatch.setattr(
            fresh_registry, "_module_available", lambda mod: mod != "pandas" and real(mod)
        )
        assert fresh_registry.available_parsers() == {"csv", "fixed_width"}
        with pytest.raises(UnknownFormatError):
            fresh_registry.get_parser("fast_csv")
        with pytest.raises(UnknownFormatError):
            fresh_registry.get_parser("excel")

    def test_excel_needs_one_engine(self, fresh_registry, monkeypatch):
        real = fresh_registry._module_available
        monkeypatch.setattr(
            fresh_registry, "_module_available", lambda mod: mod != "openpyxl" and real(mod)
        )
        assert "excel" in fresh_registry.available_parsers()

    def test_excel_without_any_engine(self, fresh_registry, monkeypatch):
        real = fresh_registry._module_available
        monkeypatch.setattr(
            fresh_registry,
            "_module_available",
            lambda mod: mod not in ("openpyxl", "xlrd") and real(mod),
        )
        assert "excel" not in fresh_registry.available_parsers()

    def test_factory_not_called_when_missing(self, fresh_registry):
        calls = []

        def factory():
            calls.append(1)
            return _EchoParser()

        reg = ParserRegistration("echo", factory, requires=("no_such_module_for_tests",))
        assert fresh_registry.register(reg) is False
        assert calls == []
        assert "echo" not in fresh_registry.available_parsers()

    def test_missing_dependencies_listed(self):
        reg = ParserRegistration(
            "echo", _EchoParser,
            requires=("no_such_module_for_tests",),
            requires_any=("also_missing_a", "also_missing_b"),
        )
        assert reg.missing_dependencies() == [
            "no_such_module_for_tests",
            "also_missing_a | also_missing_b",
        ]


class TestRegistration:

    def test_register_custom_parser(self, fresh_registry):
        assert fresh_registry.register(ParserRegistration("echo", _EchoParser)) is True
        assert fresh_registry.available_parsers() == BUILTINS | {"echo"}
        assert fresh_registry.get_parser("echo").parse("hi") == [["hi"]]

    def test_register_replaces(self, fresh_registry):
        fresh_registry.register(ParserRegistration("echo", _EchoParser))
        first = fresh_registry.get_parser("echo")
        fresh_registry.register(ParserRegistration("echo", _EchoParser))
        assert fresh_registry.get_parser("echo") is not first
        assert sorted(fresh_registry.available_parsers()).count("echo") == 1

    def test_unregister(self, fresh_registry):
        fresh_registry.unregister("csv")
        assert "csv" not in fresh_registry.available_parsers()
        with pytest.raises(UnknownFormatError):
            fresh_registry.get_parser("csv")

    def test_unregister_unknown_is_noop(self, fresh_registry):
        fresh_registry.unregister("nothing")
        assert fresh_registry.available_parsers() == BUILTINS

    def test_enumeration_reflects_current_entries(self, fresh_registry):
        before = fresh_registry.available_parsers()
        fresh_registry.register(ParserRegistration("echo", _EchoParser))
        after = fresh_registry.available_parsers()
        assert after - before == {"echo"}


class TestFactoryImportFailures:
    """A dependency can be located by find_spec yet still fail to import."""

    @pytest.fixture
    def broken_module(self, tmp_path, monkeypatch):
        name = "sheet_ingest_broken_dep"
        (tmp_path / f"{name}.py").write_text(
            'raise ImportError("ABI mismatch")\n', encoding="utf-8"
        )
        monkeypatch.syspath_prepend(str(tmp_path))
        return name

    def test_register_returns_false(self, fresh_registry, broken_module):
        def factory():
            importlib.import_module(broken_module)
            return _EchoParser()

        reg = ParserRegistration("echo", factory, requires=(broken_module,))
        assert reg.missing_dependencies() == []
        assert fresh_registry.register(reg) is False
        assert fresh_registry.available_parsers() == BUILTINS
        with pytest.raises(UnknownFormatError):
            fresh_registry.get_parser("echo")

    def test_broken_builtin_skipped_others_kept(self, fresh_registry, monkeypatch):
        def broken_fast_csv():
            raise ImportError("numpy C extension failed to load")

        regs = tuple(
            replace(reg, factory=broken_fast_csv) if reg.name == "fast_csv" else reg
            for reg in fresh_registry.BUILTIN_REGISTRATIONS
        )
        monkeypatch.setattr(fresh_registry, "BUILTIN_REGISTRATIONS", regs)

        expected = BUILTINS - {"fast_csv"}
        assert fresh_registry.available_parsers() == expected
        assert fresh_registry.available_parsers() == expected
        assert isinstance(fresh_registry.get_parser("csv"), CsvParser)

    def test_broken_first_builtin_does_not_block_rest(self, fresh_registry, monkeypatch):
        def broken():
            raise ImportError("boom")

        regs = (ParserRegistration("broken", broken),) + fresh_registry.BUILTIN_REGISTRATIONS
        monkeypatch.setattr(fresh_registry, "BUILTIN_REGISTRATIONS", regs)
        assert fresh_registry.available_parsers() == BUILTINS


class TestConcurrentFirstAccess:

    def test_second_caller_sees_full_registry(self, fresh_registry, monkeypatch):
        started = threading.Event()

        def slow_csv():
            started.set()
            time.sleep(0.2)
            return CsvParser()

        regs = tuple(
            replace(reg, factory=slow_csv) if reg.name == "csv" else reg
            for reg in fresh_registry.BUILTIN_REGISTRATIONS
        )
        monkeypatch.setattr(fresh_registry, "BUILTIN_REGISTRATIONS", regs)

        results = {}
        first = threading.Thread(
            target=lambda: results.setdefault("first", fresh_registry.available_parsers())
        )
        first.start()
        assert started.wait(timeout=5)
        results["second"] = fresh_registry.available_parsers()
        first.join(timeout=5)

        assert results["second"] == BUILTINS
        assert results["first"] == BUILTINS

    def test_get_parser_during_population(self, fresh_registry, monkeypatch):
        started = threading.Event()

        def slow_csv():
            started.set()
            time.sleep(0.2)
            return CsvParser()

        regs = tuple(
            replace(reg, factory=slow_csv) if reg.name == "csv" else reg
            for reg in fresh_registry.BUILTIN_REGISTRATIONS
        )
        monkeypatch.setattr(fresh_registry, "BUILTIN_REGISTRATIONS", regs)

        worker = threading.Thread(target=fresh_registry.available_parsers)
        worker.start()
        assert started.wait(timeout=5)
        assert isinstance(fresh_registry.get_parser("fixed_width"), FixedWidthParser)
        worker.join(timeout=5)
