"""
Parsers sub-package for sheet-ingest.

Contains the format backends that turn raw tabular data into a Table
(``list[list[str]]``).

Design: Strategy Pattern
- base.py defines the BaseParser ABC and the default file load.
- fixed_width.py implements FixedWidthParser (no external dependency).
- delimited.py implements CsvParser on the standard csv module.
- fast_csv.py implements FastCsvParser on the pandas C tokenizer.
- excel.py implements ExcelParser on pandas + openpyxl/xlrd.

Backends with optional dependencies are not imported here; the registry
(``sheet_ingest.registry``) imports each one only after its dependencies
are found.
"""
