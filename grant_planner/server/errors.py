# server/errors.py


class PlannerError(Exception):
    """Base class for schedule generation failures."""


class UnknownMechanismError(PlannerError, KeyError):
    def __init__(self, mechanism: str):
        super().__init__(mechanism)
        self.mechanism = mechanism

    def __str__(self) -> str:
        return f"Unknown funding mechanism: {self.mechanism}"


class InvalidDateRangeError(PlannerError, ValueError):
    """Raised when the end date does not leave room for every step."""


class CalendarDateError(PlannerError, ValueError):
    """Raised when an all-day event cannot end on the following day."""
