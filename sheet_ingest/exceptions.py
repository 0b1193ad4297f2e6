"""
Custom exception hierarchy for sheet-ingest.

Why a custom hierarchy:
- Callers can catch specific exceptions (e.g., FormatError vs
  InvalidArgumentError) without knowing which external library a backend
  delegates to (csv, pandas, openpyxl, xlrd).
- Errors raised by those libraries are re-raised as one of these types,
  chained with ``from`` so the original traceback is kept.

Plain I/O failures (missing file, permission denied) are not wrapped; they
surface as the built-in ``OSError`` family.
"""


class SheetIngestError(Exception):
    """Base exception for all sheet-ingest errors."""


class InvalidArgumentError(SheetIngestError, ValueError):
    """Raised when a parse option is missing or malformed.

    For example, the fixed-width parser called without ``widths``, or a
    worksheet index past the last sheet of a workbook.
    """


class FormatError(SheetIngestError):
    """Raised when the input does not conform to the backend's format.

    Typical causes: malformed quoting in delimited text, bytes that are not
    a workbook, text that cannot be decoded with the requested encoding.
    """


class UnsupportedOperationError(SheetIngestError, NotImplementedError):
    """Raised when a backend cannot fulfil an operation for the given input.

    For example, asking the workbook backend to parse a ``str``: workbooks
    are binary and have no text representation to parse from.
    """


class UnknownFormatError(SheetIngestError):
    """Raised when a format identifier is not registered, or a file's
    format cannot be detected from its name or contents."""


class ConfigValidationError(SheetIngestError):
    """Raised when a source configuration YAML file fails validation.

    This can happen if:
    - The file is empty.
    - Required fields are missing or have wrong types.
    """
