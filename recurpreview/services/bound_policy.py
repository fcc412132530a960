from __future__ import annotations

from dataclasses import dataclass
from datetime import date
import logging

logger = logging.getLogger(__name__)


class InvalidBound(ValueError):
    pass


class NonProgressingSequence(RuntimeError):
    def __init__(self, message: str, *, occurrences: list[date]) -> None:
        super().__init__(message)
        self.occurrences = occurrences


@dataclass(frozen=True)
class Bound:
    max_count: int | None = None
    hard_end_date: date | None = None

    def __post_init__(self) -> None:
        if self.max_count is not None and (isinstance(self.max_count, bool) or self.max_count < 1):
            raise InvalidBound(f"max_count must be greater than zero, got {self.max_count!r}")


@dataclass(frozen=True)
class BoundPolicy:
    max_count: int | None
    end_date: date | None

    @classmethod
    def for_rule(cls, bound: Bound, rule_end_date: date | None) -> BoundPolicy:
        end_dates = [value for value in (bound.hard_end_date, rule_end_date) if value is not None]
        end_date = min(end_dates) if end_dates else None
        if bound.max_count is None and end_date is None:
            raise InvalidBound("Generation needs a max_count or an end date")
        return cls(max_count=bound.max_count, end_date=end_date)

    def count_reached(self, produced: int) -> bool:
        return self.max_count is not None and produced >= self.max_count

    def past_end(self, candidate: date) -> bool:
        return self.end_date is not None and candidate > self.end_date

    def ensure_progress(self, *, previous: date, candidate: date, occurrences: list[date]) -> None:
        if candidate > previous:
            return
        logger.error(
            "Occurrence generation stalled previous=%s candidate=%s produced=%s",
            previous,
            candidate,
            len(occurrences),
        )
        raise NonProgressingSequence(
            f"Next occurrence {candidate.isoformat()} does not advance past {previous.isoformat()}",
            occurrences=list(occurrences),
        )
