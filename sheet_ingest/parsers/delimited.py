"""
Reference delimited-text parser for sheet-ingest.

Delegates tokenization, quoting and escaping to the standard library
``csv`` module. This component only maps the generic option names onto the
reader's configuration:

  field_separator -> ``delimiter``
  row_separator   -> record splitting before tokenizing

The ``csv`` reader recognizes ``\\n``, ``\\r\\n`` and ``\\r`` as line ends on
its own. Any other ``row_separator`` is applied by splitting the text into
records first, so a quoted field may not contain that separator.

Blank lines produce no row, matching the pandas backend's
``skip_blank_lines``. A line holding only separators (``","``) is a row of
empty cells in both.

See ``fast_csv.py`` for the pandas-backed backend with the same contract.
"""

from __future__ import annotations

import csv
import io
import logging
from collections.abc import Iterable

from sheet_ingest.exceptions import FormatError, InvalidArgumentError
from sheet_ingest.options import DelimitedOptions
from sheet_ingest.parsers.base import BaseParser, Options, Table, split_records

logger = logging.getLogger(__name__)

# Line ends the csv reader splits on without help
NATIVE_LINE_ENDS = ("\n", "\r\n", "\r")


def check_field_separator(opts: DelimitedOptions, parser_name: str) -> str:
    """Return the field separator to use, defaulting to a comma.

    Both delimited backends tokenize on a single character.
    """
    sep = opts.field_separator or ","
    if len(sep) != 1:
        raise InvalidArgumentError(
            f"{parser_name} requires a single-character field_separator, got {sep!r}"
        )
    return sep


class CsvParser(BaseParser):
    """Delimited-text parser backed by the ``csv`` module.

    Accepts options ``field_separator`` and ``row_separator``.
    """

    name = "csv"
    options_model = DelimitedOptions

    def parse(self, data: str | bytes, options: Options | None = None) -> Table:
        opts: DelimitedOptions = self.options(options)
        text = self._decode(data, opts.encoding)
        delimiter = check_field_separator(opts, type(self).__name__)

        try:
            reader = csv.reader(self._records(text, opts.row_separator),
                                delimiter=delimiter, strict=True)
            # The reader yields [] for a blank line
            rows = [row for row in reader if row]
        except csv.Error as exc:
            raise FormatError(f"Malformed delimited text: {exc}") from exc

        logger.debug("Tokenized %d rows with csv", len(rows))
        return rows

    @staticmethod
    def _records(text: str, row_separator: str | None) -> Iterable[str]:
        if row_separator is None or row_separator in NATIVE_LINE_ENDS:
            return io.StringIO(text, newline="")
        return split_records(text, row_separator)
