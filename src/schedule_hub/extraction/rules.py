"""Ordered date/time rules for Korean schedule phrases.

Each rule is a compiled pattern plus how to turn its groups into a datetime.
``DATE_TIME_RULES`` is tested top to bottom and the first rule that yields a
value wins, so order encodes precedence: explicit month/day forms first, then
bare clock times, then a bare meridiem hour.

Named groups used by the patterns: ``month``, ``day``, ``meridiem``, ``hour``,
``minute``. A rule without ``month``/``day`` resolves against a base date.
"""

import calendar
import re
from dataclasses import dataclass
from datetime import datetime

AM = "오전"
PM = "오후"

# Explicit month/day dates further back than this are assumed to mean next year
YEAR_ROLLOVER_MONTHS = 3

_WEEKDAY = r"(?:\s*\([가-힣]+\))?"
_MERIDIEM = rf"(?P<meridiem>{AM}|{PM})?"
_HOUR_MINUTE = r"(?P<hour>\d{1,2})시(?:\s*(?P<minute>\d{1,2})분)?"


def normalize_hour(hour: int, meridiem: str | None) -> int:
    """Apply 오전/오후 to a 12-hour value. Without a meridiem the hour is taken as 24-hour.

    오후 1..11 -> 13..23, 오후 12 -> 12, 오전 12 -> 0.
    """
    if meridiem == PM and hour < 12:
        return hour + 12
    if meridiem == AM and hour == 12:
        return 0
    return hour


def months_before(moment: datetime, months: int) -> datetime:
    """Same wall-clock time ``months`` calendar months earlier, clamping the day."""
    month_index = moment.year * 12 + (moment.month - 1) - months
    year, month = divmod(month_index, 12)
    month += 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


def infer_year(month: int, day: int, hour: int, minute: int, now: datetime) -> datetime:
    """Build the date in ``now``'s year, rolling forward a year if it is long past.

    Raises ValueError for impossible dates (e.g. 2월 30일).
    """
    candidate = now.replace(
        month=month, day=day, hour=hour, minute=minute, second=0, microsecond=0
    )
    if candidate < months_before(now, YEAR_ROLLOVER_MONTHS):
        candidate = candidate.replace(year=candidate.year + 1)
    return candidate


@dataclass(frozen=True)
class DateTimeRule:
    """One entry of the precedence table."""

    name: str
    pattern: re.Pattern

    @property
    def has_date(self) -> bool:
        return "month" in self.pattern.groupindex

    def match(self, text: str, now: datetime, base: datetime | None = None) -> datetime | None:
        """Resolve ``text`` with this rule, or return None if it does not apply.

        Args:
            text: The time phrase (already cut from the message).
            now: Reference instant for year inference; its tzinfo is used for the result.
            base: Date used by time-only rules. Defaults to ``now``.
        """
        found = self.pattern.search(text)
        if found is None:
            return None

        groups = found.groupdict()
        hour = normalize_hour(int(groups["hour"]), groups.get("meridiem"))
        minute = int(groups["minute"]) if groups.get("minute") else 0

        try:
            if self.has_date:
                return infer_year(int(groups["month"]), int(groups["day"]), hour, minute, now)
            anchor = base or now
            return anchor.replace(hour=hour, minute=minute, second=0, microsecond=0)
        except ValueError:
            # Out-of-range month/day/hour: let the next rule try
            return None


DATE_TIME_RULES: tuple[DateTimeRule, ...] = (
    # 11월 20일(목) 오후 2시 / 11월 20일 14시 30분
    DateTimeRule(
        "month_day",
        re.compile(
            rf"(?P<month>\d{{1,2}})월\s*(?P<day>\d{{1,2}})일{_WEEKDAY}\s*{_MERIDIEM}\s*{_HOUR_MINUTE}"
        ),
    ),
    # 11/20 (목) 오후 2시
    DateTimeRule(
        "slash",
        re.compile(
            rf"(?P<month>\d{{1,2}})/(?P<day>\d{{1,2}}){_WEEKDAY}\s*{_MERIDIEM}\s*{_HOUR_MINUTE}"
        ),
    ),
    # 11/20 목요일 오후 2시: any non-digit run between the date and the hour
    DateTimeRule(
        "slash_lenient",
        re.compile(
            rf"(?P<month>\d{{1,2}})/(?P<day>\d{{1,2}})[^\d]*?{_MERIDIEM}\s*(?P<hour>\d{{1,2}})시"
        ),
    ),
    # 14:00 (whole phrase only)
    DateTimeRule("clock", re.compile(r"^(?P<hour>\d{1,2}):(?P<minute>\d{2})$")),
    # 오후 2시
    DateTimeRule("meridiem_hour", re.compile(rf"(?P<meridiem>{AM}|{PM})\s*{_HOUR_MINUTE}")),
)


def resolve_datetime(
    text: str,
    now: datetime,
    base: datetime | None = None,
    rules: tuple[DateTimeRule, ...] = DATE_TIME_RULES,
) -> datetime | None:
    """Run the rules in order and return the first resolved datetime."""
    cleaned = text.strip()
    for rule in rules:
        resolved = rule.match(cleaned, now, base)
        if resolved is not None:
            return resolved
    return None
