"""
Time windows during which no pod is terminated.

Chaos is suppressed on excluded weekdays and during excluded hour ranges.
Hour ranges are stored as clock times and anchored to the calendar date of
the instant being checked, so a range configured once keeps applying on
every following day.
"""
from collections import namedtuple
from datetime import datetime, time, tzinfo
from dateutil import tz
from logzero import logger

from typing import Iterable, List, Tuple

WEEKDAYS = {
    'mon': 0,
    'tue': 1,
    'wed': 2,
    'thu': 3,
    'fri': 4,
    'sat': 5,
    'sun': 6,
}
WEEKDAY_NAMES = {v: k for k, v in WEEKDAYS.items()}

# Kitchen clock (3:04PM) first, then 24 hour clock (15:04)
CLOCK_FORMATS = ['%I:%M%p', '%H:%M']


class TimePeriod(namedtuple('TimePeriod', ['start', 'end'])):
    """
    A range of clock times, e.g. 8:00AM to 5:00PM.
    """
    __slots__ = ()

    def anchor(self, moment: datetime) -> Tuple[datetime, datetime]:
        """
        Return the start and end of this period on the calendar date of
        moment, in moment's time zone.
        """
        day = moment.date()
        return (datetime.combine(day, self.start, tzinfo=moment.tzinfo),
                datetime.combine(day, self.end, tzinfo=moment.tzinfo))

    def includes(self, moment: datetime) -> bool:
        # Open interval, the boundaries themselves are not included
        start, end = self.anchor(moment)
        return start < moment < end

    def __str__(self):
        return "{}-{}".format(self.start.strftime('%H:%M'),
                              self.end.strftime('%H:%M'))


def parse_weekdays(weekdays: str) -> List[int]:
    """
    Turn a comma separated list of abbreviated weekdays (e.g. sat,sun) into a
    list of weekday numbers (Monday is 0, Sunday is 6).

    Whitespace, letter case, unknown weekdays and duplicates are ignored.

    :param weekdays: The list of weekdays, e.g. "sat,sun".
        Required.
    :type weekdays: str
    :return: List[int]
    """
    parsed = []
    for weekday in (weekdays or '').split(','):
        day = WEEKDAYS.get(weekday.strip().lower())
        if day is None:
            if weekday.strip():
                logger.warning("Ignoring unknown weekday '%s'", weekday)
            continue
        if day not in parsed:
            parsed.append(day)
    return parsed


def parse_clock(clock: str) -> time:
    clock = clock.strip()
    for clock_format in CLOCK_FORMATS:
        try:
            return datetime.strptime(clock.upper(), clock_format).time()
        except ValueError:
            pass
    raise ValueError("invalid clock time: '{}', expected e.g. 3:04PM or "
                     "15:04".format(clock))


def parse_time_periods(hours: str) -> List[TimePeriod]:
    """
    Parse a comma separated list of hour ranges, e.g. "8:00AM-9:30AM,22:00-23:59"

    :param hours: The hour ranges.
        Required.
    :type hours: str
    :return: List[TimePeriod]
    """
    periods = []
    if not hours or not hours.strip():
        return periods
    for period in hours.split(','):
        bounds = period.split('-')
        if len(bounds) != 2:
            raise ValueError("invalid hour range: '{}', expected "
                             "<from>-<to>".format(period.strip()))
        start, end = parse_clock(bounds[0]), parse_clock(bounds[1])
        if start >= end:
            # Ranges do not wrap past midnight
            logger.warning("Hour range '%s' never matches: it must start "
                           "before it ends on the same day. Split overnight "
                           "ranges, e.g. 10:00PM-11:59PM,12:00AM-6:00AM",
                           period.strip())
        periods.append(TimePeriod(start, end))
    return periods


def resolve_timezone(name: str) -> tzinfo:
    """
    Resolve a time zone name such as UTC, Local or Europe/Berlin.

    :param name: The time zone name.
        Required.
    :type name: str
    :return: tzinfo
    """
    if name == 'UTC':
        return tz.UTC
    if name == 'Local':
        return tz.tzlocal()
    zone = tz.gettz(name) if name else None
    if zone is None:
        raise ValueError("unknown time zone: '{}'".format(name))
    return zone


class TimeWindowPolicy(object):
    """
    Decides whether chaos is suppressed at a given instant.
    """

    def __init__(self, excluded_weekdays: Iterable[int] = (),
                 excluded_hours: Iterable[TimePeriod] = (),
                 timezone=tz.UTC):
        self.excluded_weekdays = frozenset(excluded_weekdays)
        self.excluded_hours = tuple(excluded_hours)
        self.timezone = timezone

    def exclusion_reason(self, now: datetime):
        """
        Return a human readable reason why now is excluded, or None.

        Naive datetimes are taken to be UTC.
        """
        if now.tzinfo is None:
            now = now.replace(tzinfo=tz.UTC)
        local = now.astimezone(self.timezone)

        if local.weekday() in self.excluded_weekdays:
            return "{} is an excluded weekday".format(
                WEEKDAY_NAMES[local.weekday()])

        for period in self.excluded_hours:
            if period.includes(local):
                return "{} falls into excluded hours {}".format(
                    local.strftime('%H:%M'), period)
        return None

    def is_excluded(self, now: datetime) -> bool:
        return self.exclusion_reason(now) is not None
