from __future__ import annotations


class RuleValidationError(ValueError):
    field: str = "rule"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    @property
    def code(self) -> str:
        return type(self).__name__


class UnsupportedRecurrenceType(RuleValidationError):
    field = "recurrence_type"


class InvalidInterval(RuleValidationError):
    field = "interval"


class EmptyWeekdaySet(RuleValidationError):
    field = "days_of_week"


class InvalidWeekday(RuleValidationError):
    field = "days_of_week"

    def __init__(self, message: str, *, field: str | None = None) -> None:
        super().__init__(message)
        if field is not None:
            self.field = field


class InvalidMonthDay(RuleValidationError):
    field = "month_day"


class InvalidOrdinal(RuleValidationError):
    field = "month_week"


class InvalidDateRange(RuleValidationError):
    field = "end_date"


class InvalidStartDate(RuleValidationError):
    field = "start_date"
