"""
Timetabler: weekly teacher timetable generator.
Greedy one-pass assignment of homeroom / local-language / foreign-language
teachers and exam proctors across two day-groups (Mon/Wed/Fri and Tue/Thu),
with a fairness ledger shared across the whole week.

Single-workbook workflow: the workbook holds the teacher pools and options.
"""

from .composer import generate_week
from .exceptions import ConfigError, TimetableError
from .validate import validate_assignments, validate_week

__version__ = "1.0.0"

__all__ = [
    "generate_week",
    "validate_assignments",
    "validate_week",
    "ConfigError",
    "TimetableError",
]
