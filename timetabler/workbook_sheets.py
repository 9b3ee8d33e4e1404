"""
Create the data-entry sheets of a timetable workbook.
TEACHERS, CLASSES, HOMEROOM_PINS and OPTIONS all live in the same .xlsx.
"""

from typing import List, Optional, Tuple

import openpyxl

TEACHERS_HEADERS = ["Name", "Pool", "HomeroomDisabled", "MaxHomerooms", "Unavailable", "Notes"]
CLASSES_HEADERS = ["Group", "Round", "ClassCount"]
PINS_HEADERS = ["Group", "ClassId", "Teacher"]
OPTIONS_HEADERS = ["Parameter", "Value", "Description"]


# ---------------------------------------------------------------------------
# Defaults for a fresh workbook
# ---------------------------------------------------------------------------
def default_teachers() -> List[Tuple[str, str, str, Optional[int], str, str]]:
    return [
        ("김선생", "LOCAL", "N", 2, "", ""),
        ("이선생", "LOCAL", "N", 2, "", ""),
        ("박선생", "LOCAL", "N", 2, "", ""),
        ("최선생", "LOCAL", "N", 2, "", ""),
        ("John",   "FOREIGN", "N", None, "", ""),
        ("Sarah",  "FOREIGN", "N", None, "", ""),
        ("Mike",   "FOREIGN", "N", None, "", "Unavailable example: Tue|4, Mon|EXAM"),
    ]


def default_class_counts() -> List[Tuple[str, int, int]]:
    return [
        ("A", 1, 2), ("A", 2, 2), ("A", 3, 2), ("A", 4, 2),
        ("B", 1, 3), ("B", 2, 3),
    ]


def default_options() -> List[Tuple[str, str, str]]:
    return [
        ("include_h_in_k", "Y", "Other classes' homeroom teachers may teach K"),
        ("prefer_other_h_for_k", "Y", "A class's own homeroom teacher is the last pick for its K slot"),
        ("disallow_own_h_as_k", "N", "A class's own homeroom teacher never teaches its K slot"),
    ]


def _fresh_sheet(wb, title: str, headers: List[str]):
    if title in wb.sheetnames:
        del wb[title]
    ws = wb.create_sheet(title)
    for c, h in enumerate(headers, 1):
        ws.cell(1, c, h)
    return ws


def ensure_teachers_sheet(wb, teachers=None):
    """Create/replace TEACHERS sheet."""
    ws = _fresh_sheet(wb, "TEACHERS", TEACHERS_HEADERS)
    for i, row in enumerate(teachers or default_teachers(), 2):
        for c, value in enumerate(row, 1):
            ws.cell(i, c, value)


def ensure_classes_sheet(wb, counts=None):
    """Create/replace CLASSES sheet (class count per day-group and round)."""
    ws = _fresh_sheet(wb, "CLASSES", CLASSES_HEADERS)
    for i, (group, round_no, count) in enumerate(counts or default_class_counts(), 2):
        ws.cell(i, 1, group)
        ws.cell(i, 2, round_no)
        ws.cell(i, 3, count)


def ensure_pins_sheet(wb, pins=None):
    """Create/replace HOMEROOM_PINS sheet with headers (and any pins given)."""
    ws = _fresh_sheet(wb, "HOMEROOM_PINS", PINS_HEADERS)
    for i, (group, cid, teacher) in enumerate(pins or [], 2):
        ws.cell(i, 1, group)
        ws.cell(i, 2, cid)
        ws.cell(i, 3, teacher)


def ensure_options_sheet(wb):
    """Create OPTIONS sheet; an existing one is kept to preserve user edits."""
    if "OPTIONS" in wb.sheetnames:
        return
    ws = _fresh_sheet(wb, "OPTIONS", OPTIONS_HEADERS)
    for i, (p, v, d) in enumerate(default_options(), 2):
        ws.cell(i, 1, p)
        ws.cell(i, 2, v)
        ws.cell(i, 3, d)


def setup_template(wb_path: str, overwrite: bool = False) -> str:
    """
    Open (or create) the workbook and add the data-entry sheets.
    Existing TEACHERS / CLASSES / HOMEROOM_PINS sheets are left alone unless
    overwrite is set. Returns the path to the saved workbook.
    """
    try:
        wb = openpyxl.load_workbook(wb_path)
    except FileNotFoundError:
        wb = openpyxl.Workbook()
        wb.remove(wb.active)

    if overwrite or "TEACHERS" not in wb.sheetnames:
        ensure_teachers_sheet(wb)
    if overwrite or "CLASSES" not in wb.sheetnames:
        ensure_classes_sheet(wb)
    if overwrite or "HOMEROOM_PINS" not in wb.sheetnames:
        ensure_pins_sheet(wb)
    ensure_options_sheet(wb)

    wb.save(wb_path)
    return wb_path
