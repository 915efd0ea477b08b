"""
Opening-hours grammar.

A day is a comma-separated list of ranges, each range is `START-END` and each
side is either `H` or `H.M`:

    11-14,17-21
    7.30-15.30,19.30-28

Hours past midnight keep counting up instead of rolling over, so a shift that
closes at 2 AM ends at hour 26. Start hours are limited to [0, 24] and end
hours to [0, 48]; minutes are taken as written.

A week is seven such lines, Monday first.
"""

from __future__ import annotations

from dataclasses import dataclass

from core.errors import ContentError

DAYS = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")

MAX_START_HOUR = 24
MAX_END_HOUR = 48


class OpeningHoursError(ContentError):
    status_code = 422

    def __init__(self, message: str, *, token: str | None = None, day: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.token = token
        self.day = day

    def for_day(self, day: str) -> "OpeningHoursError":
        self.day = day
        return self

    def __str__(self) -> str:
        parts = [self.message]
        if self.token is not None:
            parts.append(f"(in {self.token!r})")
        if self.day is not None:
            parts.append(f"[{self.day}]")
        return " ".join(parts)


class MalformedRange(OpeningHoursError):
    pass


class InvalidNumber(OpeningHoursError):
    pass


class InvalidRange(OpeningHoursError):
    pass


class IncompleteWeek(OpeningHoursError):
    pass


@dataclass(frozen=True)
class TimeOfDay:
    hour: int
    minute: int = 0

    def as_list(self) -> list[int]:
        return [self.hour, self.minute]


@dataclass(frozen=True)
class OpeningRange:
    start: TimeOfDay
    end: TimeOfDay

    def as_dict(self) -> dict[str, list[int]]:
        """
        Front-matter shape: {"start": [hour, minute], "end": [hour, minute]}.
        """
        return {"start": self.start.as_list(), "end": self.end.as_list()}


def _to_int(token: str, context: str) -> int:
    # Plain ASCII digits only: no sign, no surrounding whitespace, no `_`.
    if not token or not (token.isascii() and token.isdigit()):
        raise InvalidNumber(f"'{token}' is not a valid number", token=context)
    return int(token, 10)


def _parse_time(side: str) -> TimeOfDay:
    tokens = side.split(".")
    hour = _to_int(tokens[0], side)
    minute = _to_int(tokens[1], side) if len(tokens) > 1 else 0
    return TimeOfDay(hour=hour, minute=minute)


def parse_opening_hour(text: str) -> OpeningRange:
    """
    Parse a single `START-END` range.

    Anything after a second `-` is ignored, e.g. "9-17-20" reads as 9-17.
    """
    tokens = text.split("-")
    if len(tokens) < 2:
        raise MalformedRange("Opening hour must be a range", token=text)

    start = _parse_time(tokens[0])
    end = _parse_time(tokens[1])

    if start.hour < 0 or start.hour > MAX_START_HOUR:
        raise InvalidRange("Invalid starting hour", token=text)
    if end.hour < 0 or end.hour > MAX_END_HOUR:
        raise InvalidRange("Invalid ending hour", token=text)
    if end.hour < start.hour:
        raise InvalidRange("Ending hour cannot be before starting hour", token=text)

    return OpeningRange(start=start, end=end)


def parse_day_schedule(text: str) -> list[OpeningRange]:
    """
    Parse one day's ranges, keeping them in the order they were written.
    """
    return [parse_opening_hour(token) for token in text.split(",")]


def parse_week_schedule(text: str) -> dict[str, list[OpeningRange]]:
    """
    Parse seven newline-separated day lines, Monday through Sunday.

    Lines after the seventh are ignored. The first bad line aborts the parse
    and the raised error names its day.
    """
    lines = text.split("\n")
    if len(lines) < len(DAYS):
        raise IncompleteWeek(f"Must provide opening hours for all {len(DAYS)} days, got {len(lines)}")

    week: dict[str, list[OpeningRange]] = {}
    for day, line in zip(DAYS, lines):
        try:
            week[day] = parse_day_schedule(line)
        except OpeningHoursError as e:
            raise e.for_day(day)
    return week


def parse_day_mapping(days: dict[str, str]) -> dict[str, list[OpeningRange]]:
    """
    Parse opening hours given as {"Monday": "9-17", ...}.

    Day names must be among `DAYS`; days that are missing are left out. The
    result is ordered Monday through Sunday.
    """
    unknown = sorted(set(days) - set(DAYS))
    if unknown:
        raise MalformedRange(f"Unknown day name(s): {', '.join(unknown)}")

    week: dict[str, list[OpeningRange]] = {}
    for day in DAYS:
        if day not in days:
            continue
        try:
            week[day] = parse_day_schedule(days[day])
        except OpeningHoursError as e:
            raise e.for_day(day)
    return week


def week_as_front_matter(week: dict[str, list[OpeningRange]]) -> dict[str, list[dict[str, list[int]]]]:
    return {day: [r.as_dict() for r in ranges] for day, ranges in week.items()}
