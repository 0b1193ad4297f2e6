"""
Base parser ABC for sheet-ingest.

All format backends implement this interface. The contract is:
1. parse() takes raw data (text, or bytes for binary formats) plus an
   options mapping, and returns a Table.
2. load() takes a file path plus options and returns a Table. The default
   implementation reads the whole file as text and forwards to parse();
   backends whose format needs native file access override it.

A Table is a list of rows, each row a list of ``str`` cells. There is no
header detection: the first row is data like any other.

Why an ABC:
- Enforces a consistent interface across backends.
- Callers select a backend by its ``name`` through the registry, never by
  inspecting its type.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Mapping
from pathlib import Path
from typing import Any, ClassVar

from sheet_ingest.exceptions import FormatError, InvalidArgumentError
from sheet_ingest.options import ParseOptions, validate_options

logger = logging.getLogger(__name__)

Row = list[str]
Table = list[Row]
Options = Mapping[str, Any]


def split_records(data: str, row_separator: str) -> list[str]:
    """Split ``data`` into records on ``row_separator``.

    A terminating separator does not produce a trailing empty record; empty
    records in the middle of the data are kept.
    """
    records = data.split(row_separator)
    while records and records[-1] == "":
        records.pop()
    return records


class BaseParser(ABC):
    """Abstract base class for tabular format backends.

    Subclasses set ``name`` (the format identifier used by the registry)
    and ``options_model`` (the Pydantic model their options validate
    against), and implement parse().
    """

    name: ClassVar[str] = ""
    options_model: ClassVar[type[ParseOptions]] = ParseOptions

    def load(self, path: str | Path, options: Options | None = None) -> Table:
        """Read the whole file at ``path`` as text and parse it.

        Raises:
            OSError: If the file cannot be read.
            FormatError: If the content cannot be decoded or parsed.
        """
        opts = self.options(options)
        path = Path(path)
        raw = path.read_bytes()
        content = self._decode(raw, opts.encoding)
        rows = self.parse(content, opts)
        logger.info("Loaded %d rows from %s with '%s'", len(rows), path, self.name)
        return rows

    @abstractmethod
    def parse(self, data: str | bytes, options: Options | None = None) -> Table:
        """Parse in-memory data into a Table.

        Args:
            data: The raw content. Text backends also accept bytes, which
                are decoded with the ``encoding`` option.
            options: Backend-specific options; unrecognized keys are ignored.

        Returns:
            A freshly allocated list of rows of text cells.

        Raises:
            InvalidArgumentError: If a required option is missing or malformed.
            FormatError: If ``data`` is not valid for this format.
            UnsupportedOperationError: If this backend cannot parse the
                given input shape.
        """

    def options(self, options: Options | ParseOptions | None) -> Any:
        """Validate ``options`` into this backend's options model."""
        return validate_options(self.options_model, options, type(self).__name__)

    def _decode(self, data: str | bytes, encoding: str) -> str:
        if isinstance(data, str):
            return data
        try:
            return data.decode(encoding)
        except UnicodeDecodeError as exc:
            raise FormatError(
                f"{type(self).__name__} could not decode input as {encoding}: {exc}"
            ) from exc
        except LookupError as exc:
            raise InvalidArgumentError(f"Unknown text encoding: {encoding}") from exc

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"
