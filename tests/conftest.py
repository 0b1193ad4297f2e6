"""
Shared test fixtures and sample data for sheet-ingest tests.

Sample inputs are defined here as module-level constants so every test
module reads the same data. Workbooks are generated with openpyxl into
``tmp_path``; no binary fixtures are checked in.
"""

from __future__ import annotations

import io
from pathlib import Path

import pytest
from openpyxl import Workbook

from sheet_ingest import registry

# ---------------------------------------------------------------------------
# Sample data -- edit here if expectations change
# ---------------------------------------------------------------------------
FIXED_WIDTH_SAMPLE = (
    "A005930   KRX  71000\n"
    "A000660   KRX 132000\n"
    "A035420   KQ  210000\n"
)
FIXED_WIDTH_WIDTHS = [10, 4, 6]
FIXED_WIDTH_ROWS = [
    ["A005930", "KRX", "71000"],
    ["A000660", "KRX", "132000"],
    ["A035420", "KQ", "210000"],
]

CSV_SAMPLE = 'code,name,price\nA005930,"Samsung, Elec",71000\nA000660,SK Hynix,\n'
CSV_ROWS = [
    ["code", "name", "price"],
    ["A005930", "Samsung, Elec", "71000"],
    ["A000660", "SK Hynix", ""],
]

SHEET_ROWS = [
    ["code", "name", "price"],
    ["A005930", "Samsung", 71000],
    ["A000660", None, 132000.5],
]
SHEET_TEXT_ROWS = [
    ["code", "name", "price"],
    ["A005930", "Samsung", "71000"],
    ["A000660", "", "132000.5"],
]


def build_workbook(sheets: dict[str, list[list[object]]]) -> bytes:
    """Build an .xlsx workbook in memory and return its bytes."""
    wb = Workbook()
    wb.remove(wb.active)
    for title, rows in sheets.items():
        ws = wb.create_sheet(title)
        for row in rows:
            ws.append(row)
    buf = io.BytesIO()
    wb.save(buf)
    return buf.getvalue()


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture()
def workbook_bytes() -> bytes:
    """Two-sheet workbook: 'prices' (SHEET_ROWS) and 'notes'."""
    return build_workbook({
        "prices": SHEET_ROWS,
        "notes": [["only", "row"]],
    })


@pytest.fixture()
def workbook_path(tmp_path, workbook_bytes) -> Path:
    path = tmp_path / "prices.xlsx"
    path.write_bytes(workbook_bytes)
    return path


@pytest.fixture()
def fresh_registry(monkeypatch):
    """Give the test an empty registry that re-registers built-ins on use."""
    monkeypatch.setattr(registry, "_PARSERS", {})
    monkeypatch.setattr(registry, "_BUILTINS_REGISTERED", False)
    return registry


# ---------------------------------------------------------------------------
# Pytest markers
# ---------------------------------------------------------------------------
def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line(
        "markers",
        "integration: end-to-end tests through the public API",
    )
