"""
Parse a timetable workbook into a WeekConfig.
The workbook holds TEACHERS, CLASSES, HOMEROOM_PINS and OPTIONS sheets
(see workbook_sheets.setup_template).
"""

import re
from typing import Dict, List, Tuple

import openpyxl

from .exceptions import ConfigError
from .models import (
    DayGroup, GroupSettings, PolicyOptions, Pools, TeacherConstraint, WeekConfig,
    parse_unavailable,
)

_SPLIT = re.compile(r"[,;\n]+")


def _text(value) -> str:
    return str(value).strip() if value is not None else ""


def _flag(value, default: bool = False) -> bool:
    text = _text(value).upper()
    if not text:
        return default
    return text.startswith("Y") or text in ("TRUE", "1")


def _read_teachers(wb, problems: List[str]) -> Tuple[Pools, Dict[str, TeacherConstraint]]:
    """Read TEACHERS sheet."""
    if "TEACHERS" not in wb.sheetnames:
        problems.append("workbook has no TEACHERS sheet")
        return Pools(), {}
    ws = wb["TEACHERS"]
    pools = Pools()
    constraints: Dict[str, TeacherConstraint] = {}
    for row in range(2, ws.max_row + 1):
        name = _text(ws.cell(row, 1).value)
        if not name:
            continue
        pool = _text(ws.cell(row, 2).value).upper() or "LOCAL"
        if pool not in ("LOCAL", "FOREIGN", "BOTH"):
            problems.append(f"TEACHERS row {row}: pool {pool!r} must be LOCAL, FOREIGN or BOTH")
            continue
        if pool in ("LOCAL", "BOTH"):
            pools.local.append(name)
        if pool in ("FOREIGN", "BOTH"):
            pools.foreign.append(name)

        cap = ws.cell(row, 4).value
        max_homerooms = None
        if cap is not None and _text(cap):
            try:
                max_homerooms = int(cap)
            except (TypeError, ValueError):
                problems.append(f"TEACHERS row {row}: MaxHomerooms {cap!r} is not a number")

        unavailable = set()
        for token in _SPLIT.split(_text(ws.cell(row, 5).value)):
            if not token.strip():
                continue
            try:
                unavailable.add(parse_unavailable(token.strip()))
            except ValueError as exc:
                problems.append(f"TEACHERS row {row}: {exc}")

        constraints[name] = TeacherConstraint(
            unavailable=frozenset(unavailable),
            homeroom_disabled=_flag(ws.cell(row, 3).value),
            max_homerooms=max_homerooms,
        )
    return pools, constraints


def _read_classes(wb, groups: Dict[DayGroup, GroupSettings], problems: List[str]) -> None:
    """Read CLASSES sheet."""
    if "CLASSES" not in wb.sheetnames:
        return
    ws = wb["CLASSES"]
    for row in range(2, ws.max_row + 1):
        group_cell = ws.cell(row, 1).value
        if not _text(group_cell):
            continue
        try:
            group = DayGroup.parse(group_cell)
            round_no = int(ws.cell(row, 2).value)
            count = int(ws.cell(row, 3).value or 0)
        except (TypeError, ValueError) as exc:
            problems.append(f"CLASSES row {row}: {exc}")
            continue
        groups[group].round_class_counts[round_no] = count


def _read_pins(wb, groups: Dict[DayGroup, GroupSettings], problems: List[str]) -> None:
    """Read HOMEROOM_PINS sheet."""
    if "HOMEROOM_PINS" not in wb.sheetnames:
        return
    ws = wb["HOMEROOM_PINS"]
    for row in range(2, ws.max_row + 1):
        cid = _text(ws.cell(row, 2).value)
        teacher = _text(ws.cell(row, 3).value)
        if not cid or not teacher:
            continue
        try:
            group = DayGroup.parse(ws.cell(row, 1).value)
        except ValueError as exc:
            problems.append(f"HOMEROOM_PINS row {row}: {exc}")
            continue
        groups[group].fixed_homerooms[cid] = teacher


def _read_options(wb) -> PolicyOptions:
    """Read OPTIONS sheet."""
    options = PolicyOptions()
    if "OPTIONS" not in wb.sheetnames:
        return options
    ws = wb["OPTIONS"]
    rows = {}
    for row in range(2, ws.max_row + 1):
        p = ws.cell(row, 1).value
        if p:
            rows[_text(p)] = ws.cell(row, 2).value

    if "include_h_in_k" in rows: options.include_h_in_k = _flag(rows["include_h_in_k"], True)
    if "prefer_other_h_for_k" in rows: options.prefer_other_h_for_k = _flag(rows["prefer_other_h_for_k"], True)
    if "disallow_own_h_as_k" in rows: options.disallow_own_h_as_k = _flag(rows["disallow_own_h_as_k"])
    return options


def parse_workbook(wb_path: str) -> WeekConfig:
    """
    Parse the workbook into a WeekConfig.
    Raises ConfigError listing every unreadable row.
    """
    wb = openpyxl.load_workbook(wb_path, data_only=True)
    problems: List[str] = []

    pools, constraints = _read_teachers(wb, problems)
    groups = {group: GroupSettings() for group in DayGroup}
    _read_classes(wb, groups, problems)
    _read_pins(wb, groups, problems)
    options = _read_options(wb)

    if problems:
        raise ConfigError(problems)
    return WeekConfig(pools=pools, constraints=constraints, groups=groups, options=options)
