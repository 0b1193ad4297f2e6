"""
sheet-ingest: uniform row/column access to tabular files.

Reads delimited text, fixed-width text and Excel workbooks into the same
shape: a list of rows, each a list of ``str`` cells. No header detection,
no type coercion.

Public API surface:

- ``load(path, format=None, **options)`` -- **recommended entry point**.
  Reads a file with the named backend, or detects one from the file.

- ``parse(data, format, **options)`` -- Parses in-memory text (or workbook
  bytes) with the named backend.

- ``load_source(config_path)`` -- Loads the file described by a YAML
  source config (see ``sheet_ingest.config``).

- ``available_parsers()`` / ``get_parser(name)`` -- Registry access.
  Backends whose optional dependency is missing are not listed.

Example::

    import sheet_ingest

    rows = sheet_ingest.load("report.txt", format="fixed_width", widths=[10, 4, 8])
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from sheet_ingest.config import SourceConfig, load_config
from sheet_ingest.detect import default_options, detect_format
from sheet_ingest.exceptions import (
    ConfigValidationError,
    FormatError,
    InvalidArgumentError,
    SheetIngestError,
    UnknownFormatError,
    UnsupportedOperationError,
)
from sheet_ingest.parsers.base import BaseParser, Row, Table
from sheet_ingest.registry import (
    ParserRegistration,
    available_parsers,
    get_parser,
    register,
    unregister,
)

__all__ = [
    "load",
    "parse",
    "load_source",
    "available_parsers",
    "get_parser",
    "register",
    "unregister",
    "ParserRegistration",
    "BaseParser",
    "Row",
    "Table",
    "SourceConfig",
    "SheetIngestError",
    "InvalidArgumentError",
    "FormatError",
    "UnsupportedOperationError",
    "UnknownFormatError",
    "ConfigValidationError",
]

logger = logging.getLogger(__name__)


def load(path: str | Path, format: str | None = None, **options: Any) -> Table:
    """Load a tabular file into a list of rows of text cells.

    Args:
        path: Path to the input file.
        format: Registered format identifier (see ``available_parsers()``).
            If None, the format is detected from the file name or content,
            and options implied by the name (tab separator for ``.tsv``)
            are applied unless overridden.
        **options: Backend options, e.g. ``widths=[3, 2, 5]`` for
            ``fixed_width`` or ``worksheet=1`` for ``excel``.

    Returns:
        The table as ``list[list[str]]``.

    Raises:
        UnknownFormatError: If ``format`` is not registered or cannot be detected.
        InvalidArgumentError: If a required option is missing or malformed.
        FormatError: If the file content does not match the format.
        OSError: If the file cannot be read.
    """
    if format is None:
        format = detect_format(path)
        options = {**default_options(path), **options}
    return get_parser(format).load(path, options)


def parse(data: str | bytes, format: str, **options: Any) -> Table:
    """Parse in-memory data into a list of rows of text cells.

    Args:
        data: Text for the text formats; workbook bytes for ``excel``.
        format: Registered format identifier.
        **options: Backend options.

    Raises:
        UnknownFormatError: If ``format`` is not registered.
        InvalidArgumentError: If a required option is missing or malformed.
        FormatError: If ``data`` does not match the format.
        UnsupportedOperationError: If the backend cannot parse this input type.
    """
    rows = get_parser(format).parse(data, options)
    logger.info("Parsed %d rows with '%s'", len(rows), format)
    return rows


def load_source(config_path: str | Path) -> Table:
    """Load the file described by a YAML source config.

    A relative ``input_path`` is resolved against the config file's
    directory.

    Raises:
        FileNotFoundError: If the config or the input file is missing.
        ConfigValidationError: If the config is invalid.
    """
    config_path = Path(config_path)
    config = load_config(config_path)
    input_path = config.resolve_input_path(config_path.parent)
    logger.info("Loading source %s from config %s", input_path, config_path)
    return load(input_path, config.format, **config.options)
