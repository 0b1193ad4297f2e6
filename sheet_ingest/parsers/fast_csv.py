"""
High-throughput delimited-text parser for sheet-ingest.

Same contract as ``CsvParser`` (see ``delimited.py``), but tokenizes with
the pandas C parser. Registered only when pandas is importable.

Every cell is read as text: ``header=None`` (no header detection),
``dtype=str`` and ``na_filter=False`` so that empty fields stay ``""``
instead of becoming NaN. Blank lines are skipped (``skip_blank_lines``),
as in ``CsvParser``.

The C tokenizer takes a single-character line terminator, so
``row_separator`` must be one character (``\\r\\n`` is accepted and
handled as the default line end).
"""

from __future__ import annotations

import io
import logging

import pandas as pd

from sheet_ingest.exceptions import FormatError, InvalidArgumentError
from sheet_ingest.options import DelimitedOptions
from sheet_ingest.parsers.base import BaseParser, Options, Table
from sheet_ingest.parsers.delimited import check_field_separator

logger = logging.getLogger(__name__)


class FastCsvParser(BaseParser):
    """Delimited-text parser backed by ``pandas.read_csv``.

    Accepts options ``field_separator`` and ``row_separator``.
    """

    name = "fast_csv"
    options_model = DelimitedOptions

    def parse(self, data: str | bytes, options: Options | None = None) -> Table:
        opts: DelimitedOptions = self.options(options)
        text = self._decode(data, opts.encoding)
        sep = check_field_separator(opts, type(self).__name__)

        read_kwargs = {}
        rs = opts.row_separator
        if rs is not None and rs not in ("\n", "\r\n"):
            if len(rs) != 1:
                raise InvalidArgumentError(
                    f"{type(self).__name__} requires a single-character "
                    f"row_separator, got {rs!r}"
                )
            read_kwargs["lineterminator"] = rs

        try:
            df = pd.read_csv(
                io.StringIO(text),
                sep=sep,
                header=None,
                dtype=str,
                na_filter=False,
                skip_blank_lines=True,
                engine="c",
                **read_kwargs,
            )
        except pd.errors.EmptyDataError:
            return []
        except pd.errors.ParserError as exc:
            raise FormatError(f"Malformed delimited text: {exc}") from exc

        df = df.fillna("")
        rows = [list(row) for row in df.itertuples(index=False, name=None)]

        logger.debug("Tokenized %d rows with pandas", len(rows))
        return rows
