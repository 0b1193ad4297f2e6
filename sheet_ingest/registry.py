"""
Parser registry for sheet-ingest.

Keeps one parser instance per format identifier. Backends are added by
explicit registration instead of being discovered by introspection:

    register(ParserRegistration("csv", _make_csv))

A registration may name the modules its backend depends on (``requires``).
Those are located once, at registration time, with
``importlib.util.find_spec``. If any is missing, or the factory's import of
it fails (a broken compiled extension is found but cannot load), the backend
is simply not registered: it never appears in available_parsers() and
get_parser() cannot hand it out. Absence is logged at DEBUG level, never
raised.

The built-in backends are registered lazily on first registry access, so
importing this module has no cost and no optional-dependency imports. All
reads and writes go through one module lock, so concurrent first access
sees either nothing or the fully populated registry.
"""

from __future__ import annotations

import importlib.util
import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass

from sheet_ingest.exceptions import UnknownFormatError
from sheet_ingest.parsers.base import BaseParser

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ParserRegistration:
    """Association between a format identifier and a parser factory.

    Attributes:
        name: Format identifier callers use to select the backend.
        factory: Zero-argument callable building the parser. Imports of
            optional dependencies belong inside the factory.
        requires: Top-level module names that must all be importable.
        requires_any: Alternatives, e.g. ``("openpyxl", "xlrd")``.
        description: Human-readable summary.
    """
    name: str
    factory: Callable[[], BaseParser]
    requires: tuple[str, ...] = ()
    requires_any: tuple[str, ...] = ()
    description: str = ""

    def missing_dependencies(self) -> list[str]:
        """Names of required modules that cannot be located."""
        missing = [mod for mod in self.requires if not _module_available(mod)]
        if self.requires_any and not any(_module_available(m) for m in self.requires_any):
            missing.append(" | ".join(self.requires_any))
        return missing


_PARSERS: dict[str, BaseParser] = {}
_BUILTINS_REGISTERED = False
# Reentrant: register() populates the built-ins, which registers again.
_LOCK = threading.RLock()


def _module_available(module: str) -> bool:
    try:
        return importlib.util.find_spec(module) is not None
    except (ImportError, ValueError):
        return False


def register(registration: ParserRegistration) -> bool:
    """Register a backend if its dependencies are present.

    Returns:
        True if the parser was constructed and stored, False if a
        dependency is missing or fails to import.
    """
    with _LOCK:
        _ensure_builtins()
        return _store(registration)


def _store(registration: ParserRegistration) -> bool:
    missing = registration.missing_dependencies()
    if missing:
        logger.debug(
            "Parser '%s' not registered, missing: %s", registration.name, missing
        )
        return False

    try:
        parser = registration.factory()
    except ImportError as exc:
        logger.debug(
            "Parser '%s' not registered, import failed: %s", registration.name, exc
        )
        return False

    if registration.name in _PARSERS:
        logger.warning("Replacing registered parser '%s'", registration.name)
    _PARSERS[registration.name] = parser
    logger.debug("Registered parser '%s' (%s)", registration.name, type(parser).__name__)
    return True


def unregister(name: str) -> None:
    """Remove a registered parser. Unknown names are ignored."""
    with _LOCK:
        _ensure_builtins()
        _PARSERS.pop(name, None)


def available_parsers() -> set[str]:
    """Return the identifiers of every currently registered parser."""
    with _LOCK:
        _ensure_builtins()
        return set(_PARSERS)


def get_parser(name: str) -> BaseParser:
    """Look up a registered parser by format identifier.

    Raises:
        UnknownFormatError: If no parser is registered under ``name``
            (including backends whose dependencies are missing).
    """
    with _LOCK:
        _ensure_builtins()
        try:
            return _PARSERS[name]
        except KeyError:
            raise UnknownFormatError(
                f"No parser registered for format '{name}'. "
                f"Available: {sorted(_PARSERS)}"
            ) from None

# ---------------------------------------------------------------------------
# Built-in backends
# ---------------------------------------------------------------------------

def _make_csv() -> BaseParser:
    from sheet_ingest.parsers.delimited import CsvParser
    return CsvParser()


def _make_fast_csv() -> BaseParser:
    from sheet_ingest.parsers.fast_csv import FastCsvParser
    return FastCsvParser()


def _make_fixed_width() -> BaseParser:
    from sheet_ingest.parsers.fixed_width import FixedWidthParser
    return FixedWidthParser()


def _make_excel() -> BaseParser:
    from sheet_ingest.parsers.excel import ExcelParser
    return ExcelParser()


BUILTIN_REGISTRATIONS: tuple[ParserRegistration, ...] = (
    ParserRegistration("csv", _make_csv, description="Delimited text (csv module)"),
    ParserRegistration(
        "fast_csv", _make_fast_csv,
        requires=("pandas",),
        description="Delimited text (pandas C tokenizer)",
    ),
    ParserRegistration(
        "fixed_width", _make_fixed_width, description="Fixed-width column text"
    ),
    ParserRegistration(
        "excel", _make_excel,
        requires=("pandas",),
        requires_any=("openpyxl", "xlrd"),
        description="Excel workbooks (.xlsx via openpyxl, .xls via xlrd)",
    ),
)


def _ensure_builtins() -> None:
    """Register the built-in backends once, on first registry access.

    Each backend stands alone: one that is missing or fails to import is
    skipped and the rest still register. The flag is set only after every
    backend has been tried, and always under the lock.
    """
    global _BUILTINS_REGISTERED
    if _BUILTINS_REGISTERED:
        return
    with _LOCK:
        if _BUILTINS_REGISTERED:
            return
        registered = [reg.name for reg in BUILTIN_REGISTRATIONS if _store(reg)]
        _BUILTINS_REGISTERED = True
    logger.info("Registered %d built-in parsers: %s", len(registered), registered)
