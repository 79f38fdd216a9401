import io
from datetime import datetime

import openpyxl
import pytest


def build_workbook(sheets: dict[str, list[list]]) -> bytes:
    """Build an .xlsx file in memory; each sheet is a list of rows, header first."""
    workbook = openpyxl.Workbook()
    workbook.remove(workbook.active)
    for name, rows in sheets.items():
        sheet = workbook.create_sheet(title=name)
        for row in rows:
            sheet.append(row)
    buffer = io.BytesIO()
    workbook.save(buffer)
    workbook.close()
    return buffer.getvalue()


@pytest.fixture
def workbook_bytes():
    return build_workbook


@pytest.fixture
def people_csv() -> bytes:
    return (
        "Name,Age,Joined,E-mail\n"
        "Bob,30,2024-01-05,bob@example.com\n"
        "\n"
        "alice,,2023-12-31,alice@example.com\n"
        "Cy,8,,cy@example.com\n"
    ).encode("utf-8")


@pytest.fixture
def two_sheet_workbook() -> bytes:
    return build_workbook(
        {
            "sheet1": [["Name", "Score"], ["Bob", 10], ["Ann", None]],
            "sheet2": [["City", "Founded"], ["Oslo", datetime(2020, 5, 17)], ["Rome", None]],
        }
    )


@pytest.fixture
def one_sheet_workbook() -> bytes:
    return build_workbook({"people": [["Name", "Score"], ["Bob", 10], ["Ann", 7.5]]})
