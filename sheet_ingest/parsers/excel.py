"""
Workbook parser for sheet-ingest.

Reads one worksheet of an Excel workbook and converts every cell to text.
Decoding is delegated to ``pandas.ExcelFile``, which picks the engine from
the file signature: openpyxl for ``.xlsx`` (ZIP container), xlrd for legacy
``.xls`` (OLE2 compound document). Registered only when pandas and at least
one of those engines are importable.

Entry points:
- load(path) is the primary path: the workbook decoders need a real file.
- parse(bytes) materializes the buffer as a temporary file, loads it, and
  always deletes the file afterwards, whether loading succeeded or not.

Cell conversion:
- Empty cells become ``""``.
- Integral floats render without the trailing ``.0`` (xlrd reports every
  number as a float, so ``7`` would otherwise come back as ``"7.0"``).
- Everything else goes through ``str()``.

Errors: decode failures reported by pandas or an engine become
``FormatError`` (see workbook_errors()). ``OSError`` and anything
unexpected propagate unchanged.
"""

from __future__ import annotations

import logging
import os
import tempfile
import zipfile
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

import pandas as pd

from sheet_ingest.exceptions import FormatError, InvalidArgumentError, UnsupportedOperationError
from sheet_ingest.options import ExcelOptions
from sheet_ingest.parsers.base import BaseParser, Options, Row, Table

logger = logging.getLogger(__name__)


def cell_to_text(value: Any) -> str:
    """Convert a decoded cell value to its text representation."""
    if value is None:
        return ""
    if isinstance(value, float):
        if value != value:  # NaN marks an empty cell
            return ""
        if value.is_integer():
            return str(int(value))
    return str(value)


def workbook_errors() -> tuple[type[Exception], ...]:
    """Exceptions the installed engines raise for content they cannot decode.

    Anything else (``OSError`` included) propagates unchanged.
    """
    errors: list[type[Exception]] = [ValueError, zipfile.BadZipFile]
    try:
        from xlrd import XLRDError
    except ImportError:
        pass  # engine absent, so pandas never raises its errors
    else:
        errors.append(XLRDError)
    try:
        from openpyxl.utils.exceptions import InvalidFileException
    except ImportError:
        pass
    else:
        errors.append(InvalidFileException)
    return tuple(errors)


@contextmanager
def temporary_workbook(
    data: bytes,
    prefix: str,
    directory: str | None = None,
) -> Iterator[Path]:
    """Write ``data`` to a temporary file and yield its path.

    The file is removed when the block exits, on every exit path.
    """
    fd, name = tempfile.mkstemp(prefix=prefix, dir=directory)
    path = Path(name)
    logger.debug("Created temporary workbook %s", path)
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
        yield path
    finally:
        path.unlink(missing_ok=True)
        logger.debug("Removed temporary workbook %s", path)


class ExcelParser(BaseParser):
    """Parser for Excel workbooks (``.xls`` / ``.xlsx``).

    Accepts option ``worksheet`` (zero-based index, default 0) on load(),
    plus ``tempfile_name`` and ``tempfile_dir`` on parse().
    """

    name = "excel"
    options_model = ExcelOptions

    def load(self, path: str | Path, options: Options | None = None) -> Table:
        opts: ExcelOptions = self.options(options)
        path = Path(path)
        if not path.is_file():
            raise FileNotFoundError(f"Workbook not found: {path}")

        decode_errors = workbook_errors()

        try:
            workbook = pd.ExcelFile(path)
        except ImportError as exc:
            raise UnsupportedOperationError(
                f"No installed engine can read {path}: {exc}"
            ) from exc
        except decode_errors as exc:
            raise FormatError(f"Not a readable workbook: {path} ({exc})") from exc

        with workbook:
            sheet_names = workbook.sheet_names
            if opts.worksheet >= len(sheet_names):
                raise InvalidArgumentError(
                    f"Worksheet index {opts.worksheet} out of range: "
                    f"{path} has {len(sheet_names)} sheet(s)"
                )
            try:
                df = workbook.parse(
                    sheet_name=opts.worksheet,
                    header=None,
                    dtype=object,
                    na_filter=False,
                )
            except decode_errors as exc:
                raise FormatError(
                    f"Could not read worksheet {opts.worksheet} of {path}: {exc}"
                ) from exc

        rows: Table = []
        for values in df.itertuples(index=False, name=None):
            row: Row = [cell_to_text(v) for v in values]
            rows.append(row)

        logger.info(
            "Loaded %d rows from sheet '%s' of %s",
            len(rows), sheet_names[opts.worksheet], path,
        )
        return rows

    def parse(self, data: str | bytes, options: Options | None = None) -> Table:
        opts: ExcelOptions = self.options(options)
        if isinstance(data, str):
            raise UnsupportedOperationError(
                "ExcelParser cannot parse text; pass the workbook bytes or use load()"
            )
        if not isinstance(data, (bytes, bytearray, memoryview)):
            raise UnsupportedOperationError(
                f"ExcelParser parses workbook bytes, got {type(data).__name__}"
            )

        with temporary_workbook(bytes(data), opts.tempfile_name, opts.tempfile_dir) as path:
            return self.load(path, opts)
