"""Exceptions raised by the timetable engine."""

from typing import Iterable, List


class TimetableError(Exception):
    """Base class for all engine errors."""


class ConfigError(TimetableError):
    """Malformed or contradictory configuration. Aborts the whole generation."""

    def __init__(self, problems: Iterable[str]):
        if isinstance(problems, str):
            problems = [problems]
        self.problems: List[str] = list(problems)
        super().__init__("; ".join(self.problems) or "invalid configuration")
