"""
Pytest configuration file.

This file is automatically loaded by pytest and provides global test configuration.
It ensures the project's source directory is added to the Python path so that
modules can be imported properly during test execution, and provides helpers
that build spreadsheet uploads in memory.
"""
import io
import os
import sys
from datetime import date

import pandas as pd
import pytest

# Add the current directory to the Python path
# This ensures imports work correctly when running tests
sys.path.insert(0, os.path.abspath(os.path.dirname(__file__)))

REFERENCE_DATE = date(2024, 6, 10)


def build_workbook(sheets):
    """
    Write {sheet name: list of row dicts} to .xlsx bytes.

    Args:
        sheets: Mapping of sheet name to rows; a sheet given as a list of
            column names is written with a header and no data rows

    Returns:
        bytes: The encoded workbook
    """
    buffer = io.BytesIO()
    with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
        for name, rows in sheets.items():
            if rows and all(isinstance(col, str) for col in rows):
                df = pd.DataFrame(columns=rows)
            else:
                df = pd.DataFrame(rows)
            df.to_excel(writer, sheet_name=name, index=False)
    return buffer.getvalue()


@pytest.fixture
def reference_date():
    """Fixed "today" used by the current-month rule in tests."""
    return REFERENCE_DATE


@pytest.fixture
def workbook_bytes():
    """Factory fixture returning build_workbook."""
    return build_workbook


@pytest.fixture
def sequential_ids():
    """Deterministic id factory: rec-1, rec-2, ..."""
    counter = iter(range(1, 1_000_000))
    return lambda: f"rec-{next(counter)}"
