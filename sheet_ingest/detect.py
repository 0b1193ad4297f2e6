"""
Format detection for sheet-ingest.

Picks a registered parser for a file when the caller does not name one.

Detection algorithm:
1. Known suffix: ``.xls``/``.xlsx``/``.xlsm`` -> ``excel``;
   ``.csv``/``.tsv`` -> ``fast_csv`` if registered, else ``csv``.
2. Otherwise sniff the first bytes: an OLE2 compound document (legacy
   ``.xls``) or a ZIP container (``.xlsx``) -> ``excel``.
3. Fallback: raise UnknownFormatError. Fixed-width text is never detected,
   since it cannot be parsed without ``widths``.

The chosen parser must be registered; a workbook found while no workbook
engine is installed is reported as UnknownFormatError too.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from sheet_ingest.exceptions import UnknownFormatError
from sheet_ingest.registry import available_parsers

logger = logging.getLogger(__name__)

_WORKBOOK_SUFFIXES = {".xls", ".xlsx", ".xlsm"}
_DELIMITED_SUFFIXES = {".csv", ".tsv"}

# Leading bytes of an OLE2 compound document and of a ZIP archive
_OLE2_SIGNATURE = b"\xd0\xcf\x11\xe0\xa1\xb1\x1a\xe1"
_ZIP_SIGNATURE = b"PK\x03\x04"


def _sniff(path: Path) -> str | None:
    """Guess a format from the file signature."""
    with open(path, "rb") as f:
        head = f.read(len(_OLE2_SIGNATURE))
    if head.startswith(_OLE2_SIGNATURE) or head.startswith(_ZIP_SIGNATURE):
        return "excel"
    return None


def _delimited_backend(available: set[str]) -> str:
    return "fast_csv" if "fast_csv" in available else "csv"


def detect_format(path: str | Path) -> str:
    """Detect the format identifier to use for a file.

    Args:
        path: Path to the input file.

    Returns:
        A registered format identifier.

    Raises:
        FileNotFoundError: If the file must be sniffed but does not exist.
        UnknownFormatError: If no registered parser matches the file.
    """
    path = Path(path)
    suffix = path.suffix.lower()
    available = available_parsers()

    if suffix in _WORKBOOK_SUFFIXES:
        fmt = "excel"
    elif suffix in _DELIMITED_SUFFIXES:
        fmt = _delimited_backend(available)
    else:
        fmt = _sniff(path)
        if fmt is None:
            raise UnknownFormatError(
                f"Could not detect format for: {path}. "
                f"Pass one of {sorted(available)} explicitly."
            )

    if fmt not in available:
        raise UnknownFormatError(
            f"Detected format '{fmt}' for {path}, but no such parser is "
            f"registered. Available: {sorted(available)}"
        )

    logger.info("Detected format '%s' for %s", fmt, path)
    return fmt


def default_options(path: str | Path) -> dict[str, Any]:
    """Options implied by a file's name (tab separator for ``.tsv``)."""
    if Path(path).suffix.lower() == ".tsv":
        return {"field_separator": "\t"}
    return {}
