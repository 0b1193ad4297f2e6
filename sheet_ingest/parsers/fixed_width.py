"""
Fixed-width text parser for sheet-ingest.

Splits each line of a text into columns of declared character widths.
This is the only backend with no external dependency.

Algorithm (per line):
  - Walk ``widths`` with a running offset starting at 0.
  - Each cell is ``line[offset:offset + width]`` with surrounding whitespace
    stripped; a line too short for the column yields ``""``.
  - The offset always advances by the declared width, so a short line never
    shifts later columns. Characters past the last column are dropped.

Example, ``widths=[3, 2, 5]``::

    "abcdexyz"  ->  ["abc", "de", "xyz"]
    "ab"        ->  ["ab", "", ""]

Short lines are accepted as-is rather than rejected.
"""

from __future__ import annotations

import logging

from sheet_ingest.options import FixedWidthOptions
from sheet_ingest.parsers.base import BaseParser, Options, Row, Table, split_records

logger = logging.getLogger(__name__)


def split_line(line: str, widths: list[int]) -> Row:
    """Split a single line into one stripped cell per width."""
    row: Row = []
    offset = 0
    for width in widths:
        row.append(line[offset:offset + width].strip())
        offset += width
    return row


class FixedWidthParser(BaseParser):
    """Parser for fixed-width column text.

    Requires the option ``widths``: a sequence of positive integers giving
    the number of characters of each column.
    """

    name = "fixed_width"
    options_model = FixedWidthOptions

    def parse(self, data: str | bytes, options: Options | None = None) -> Table:
        opts: FixedWidthOptions = self.options(options)
        text = self._decode(data, opts.encoding)

        rows = [split_line(line, opts.widths) for line in split_records(text, opts.row_separator)]

        logger.debug(
            "Split %d rows into %d fixed-width columns", len(rows), len(opts.widths)
        )
        return rows
