"""Five-field cron expressions (minute hour day-of-month month day-of-week).

Supports ``*``, single values, ``a-b`` ranges, ``,`` lists, ``/n`` steps and
three-letter month/day names. Day-of-week accepts 0 or 7 for Sunday. When both
day fields are restricted a time matches if either matches (Vixie cron rule).
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

_MONTH_NAMES = {
    name: i
    for i, name in enumerate(
        ["JAN", "FEB", "MAR", "APR", "MAY", "JUN", "JUL", "AUG", "SEP", "OCT", "NOV", "DEC"],
        start=1,
    )
}
_DAY_NAMES = {name: i for i, name in enumerate(["SUN", "MON", "TUE", "WED", "THU", "FRI", "SAT"])}


class CronParseError(ValueError):
    """Raised for malformed cron expressions."""


@dataclass(frozen=True)
class _FieldSpec:
    name: str
    low: int
    high: int
    aliases: dict[str, int]


_FIELDS = (
    _FieldSpec("minute", 0, 59, {}),
    _FieldSpec("hour", 0, 23, {}),
    _FieldSpec("day_of_month", 1, 31, {}),
    _FieldSpec("month", 1, 12, _MONTH_NAMES),
    _FieldSpec("day_of_week", 0, 7, _DAY_NAMES),
)


def _parse_value(token: str, spec: _FieldSpec) -> int:
    alias = spec.aliases.get(token.upper())
    if alias is not None:
        return alias
    try:
        value = int(token)
    except ValueError:
        raise CronParseError(f"Invalid {spec.name} value: {token!r}") from None
    if not spec.low <= value <= spec.high:
        raise CronParseError(f"{spec.name} value {value} out of range {spec.low}-{spec.high}")
    return value


def _parse_field(text: str, spec: _FieldSpec) -> frozenset[int]:
    values: set[int] = set()
    for part in text.split(","):
        if not part:
            raise CronParseError(f"Empty list item in {spec.name}: {text!r}")
        base, _, step_text = part.partition("/")
        step = 1
        if step_text:
            if not step_text.isdigit() or int(step_text) == 0:
                raise CronParseError(f"Invalid step in {spec.name}: {part!r}")
            step = int(step_text)

        if base == "*":
            start, end = spec.low, spec.high
        elif "-" in base:
            start_text, end_text = base.split("-", 1)
            start, end = _parse_value(start_text, spec), _parse_value(end_text, spec)
            if start > end:
                raise CronParseError(f"Descending range in {spec.name}: {part!r}")
        else:
            start = _parse_value(base, spec)
            # "5/15" means "from 5 to the end of the range, every 15"
            end = spec.high if step_text else start

        values.update(range(start, end + 1, step))
    return frozenset(values)


@dataclass(frozen=True)
class CronExpression:
    """Parsed cron expression; use CronExpression.parse()."""

    expression: str
    minutes: frozenset[int]
    hours: frozenset[int]
    days_of_month: frozenset[int]
    months: frozenset[int]
    days_of_week: frozenset[int]
    day_of_month_restricted: bool
    day_of_week_restricted: bool

    @classmethod
    def parse(cls, expression: str) -> CronExpression:
        parts = expression.split()
        if len(parts) != len(_FIELDS):
            raise CronParseError(
                f"Cron expression must have {len(_FIELDS)} fields, got {len(parts)}: {expression!r}"
            )
        minute, hour, dom, month, dow = (
            _parse_field(part, spec) for part, spec in zip(parts, _FIELDS)
        )
        # 7 is an alias for Sunday
        dow = frozenset(0 if d == 7 else d for d in dow)
        return cls(
            expression=expression,
            minutes=minute,
            hours=hour,
            days_of_month=dom,
            months=month,
            days_of_week=dow,
            day_of_month_restricted=not parts[2].startswith("*"),
            day_of_week_restricted=not parts[4].startswith("*"),
        )

    def matches(self, moment: datetime) -> bool:
        """True if moment (already in the schedule's timezone) falls in a scheduled minute."""
        if (
            moment.minute not in self.minutes
            or moment.hour not in self.hours
            or moment.month not in self.months
        ):
            return False
        dom_ok = moment.day in self.days_of_month
        # datetime: Monday=0; cron: Sunday=0
        dow_ok = (moment.weekday() + 1) % 7 in self.days_of_week
        if self.day_of_month_restricted and self.day_of_week_restricted:
            return dom_ok or dow_ok
        return dom_ok and dow_ok
