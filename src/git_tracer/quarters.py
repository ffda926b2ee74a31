from __future__ import annotations

import dataclasses
import datetime as dt

from .errors import InvalidQuarterError

_QUARTER_BOUNDS = {
    1: ((1, 1), (3, 31)),
    2: ((4, 1), (6, 30)),
    3: ((7, 1), (9, 30)),
    4: ((10, 1), (12, 31)),
}


@dataclasses.dataclass(frozen=True)
class QuarterRange:
    year: int
    quarter: int
    start: dt.date  # inclusive
    end: dt.date  # inclusive
    warning: str | None = None

    @property
    def label(self) -> str:
        return f"Q{self.quarter} {self.year}"


def quarter_of(day: dt.date) -> int:
    return (day.month - 1) // 3 + 1


def quarter_bounds(year: int, quarter: int) -> tuple[dt.date, dt.date]:
    (sm, sd), (em, ed) = _QUARTER_BOUNDS[quarter]
    return dt.date(year, sm, sd), dt.date(year, em, ed)


def parse_q_number(value: str | int | None) -> int | None:
    if value is None:
        return None
    s = str(value).strip()
    if not s:
        return None
    try:
        q = int(s)
    except ValueError:
        raise InvalidQuarterError(value) from None
    if q < -4 or q > 4:
        raise InvalidQuarterError(value)
    return q


def resolve_quarter(q_number: int | None, today: dt.date | None = None) -> QuarterRange:
    """Map a quarter shortcut to an inclusive date range.

    0 or None is the current quarter, 1..4 a quarter of the current year (the
    previous year's, with a warning, if it has not started yet) and -1..-4
    counts back from the current quarter.
    """
    if q_number is not None and not -4 <= q_number <= 4:
        raise InvalidQuarterError(q_number)
    if today is None:
        today = dt.date.today()

    current_year = today.year
    current_quarter = quarter_of(today)
    warning = None

    if not q_number:
        year, quarter = current_year, current_quarter
    elif q_number > 0:
        quarter = q_number
        if q_number > current_quarter:
            year = current_year - 1
            warning = (
                f"Q{q_number} {current_year} hasn't occurred yet. "
                f"Scanning Q{q_number} {year} instead."
            )
        else:
            year = current_year
    else:
        target = current_year * 4 + (current_quarter - 1) + q_number
        year, quarter = target // 4, target % 4 + 1

    start, end = quarter_bounds(year, quarter)
    return QuarterRange(year=year, quarter=quarter, start=start, end=end, warning=warning)
