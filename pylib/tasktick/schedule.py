'''
Schedule spec grammar. Parses spec strings into APScheduler triggers.

Accepted forms:
- 6-field cron: sec min hour dom month dow (dow 0-6 or SUN-SAT, 0 = Sunday)
- @every <duration>, Go duration notation (1h30m, 45s, 1.5h, 500ms)
- @yearly, @annually, @monthly, @weekly, @daily, @midnight, @hourly
- any of the above prefixed by CRON_TZ=<zone> or TZ=<zone> (cron fields only use the zone)
'''

import re
from datetime import datetime, timedelta, timezone, tzinfo
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from apscheduler.triggers.base import BaseTrigger
from apscheduler.triggers.combining import OrTrigger
from apscheduler.triggers.cron import CronTrigger
from apscheduler.triggers.interval import IntervalTrigger

from tasktick.errors import ScheduleParseError

EVERY = '@every '

DESCRIPTORS = {
    '@yearly': '0 0 0 1 1 *',
    '@annually': '0 0 0 1 1 *',
    '@monthly': '0 0 0 1 * *',
    '@weekly': '0 0 0 * * 0',
    '@daily': '0 0 0 * * *',
    '@midnight': '0 0 0 * * *',
    '@hourly': '0 0 * * * *',
}

WEEKDAYS = ('sun', 'mon', 'tue', 'wed', 'thu', 'fri', 'sat')

_NANOS = {
    'ns': 1,
    'us': 1_000,
    'µs': 1_000,  # U+00B5
    'μs': 1_000,  # U+03BC
    'ms': 1_000_000,
    's': 1_000_000_000,
    'm': 60_000_000_000,
    'h': 3_600_000_000_000,
}
_DURATION_PART = re.compile(r'([0-9]*)(?:\.([0-9]*))?(ns|us|µs|μs|ms|s|m|h)')


def parse_duration(text: str) -> timedelta:
    '''
    Parse Go duration notation: optional sign, then one or more <number><unit>
    groups, e.g. 300ms, -1.5h, 2h45m. "0" alone is zero. Precision below a
    microsecond is truncated.
    '''
    orig = text
    sign = 1
    if text[:1] in ('-', '+'):
        sign = -1 if text[0] == '-' else 1
        text = text[1:]
    if text == '0':
        return timedelta(0)
    if not text:
        raise ScheduleParseError(f'invalid duration {orig!r}')
    nanos = 0
    pos = 0
    while pos < len(text):
        m = _DURATION_PART.match(text, pos)
        if not m:
            raise ScheduleParseError(f'invalid duration {orig!r}')
        whole, frac, unit = m.groups()
        if not whole and not frac:
            raise ScheduleParseError(f'invalid duration {orig!r}')
        scale = _NANOS[unit]
        nanos += int(whole or '0') * scale
        if frac:
            nanos += int(frac) * scale // 10 ** len(frac)
        pos = m.end()
    try:
        return sign * timedelta(microseconds=nanos // 1_000)
    except OverflowError:
        raise ScheduleParseError(f'invalid duration {orig!r}: out of range') from None


def _load_zone(name: str, spec: str) -> ZoneInfo:
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise ScheduleParseError(f'provided bad location {name}: {spec}') from e


def _is_star(field: str) -> bool:
    base, _, step = field.partition('/')
    return base in ('*', '?') and step in ('', '1')


def _weekday(token: str, spec: str) -> int:
    low = token.lower()
    if low in WEEKDAYS:
        return WEEKDAYS.index(low)
    try:
        value = int(token)
    except ValueError:
        raise ScheduleParseError(f'failed to parse day of week {token!r}: {spec}') from None
    if not 0 <= value <= 6:
        raise ScheduleParseError(f'day of week {value} out of range 0-6: {spec}')
    return value


def _translate_weekdays(field: str, spec: str) -> str:
    '''
    Rewrite a day-of-week field (0 = Sunday) as explicit APScheduler weekday
    names, which count from Monday.
    '''
    if _is_star(field):
        return '*'
    days: set[int] = set()
    for term in field.split(','):
        rng, _, step_text = term.partition('/')
        step = 1
        if step_text:
            if not step_text.isdigit() or int(step_text) == 0:
                raise ScheduleParseError(f'bad step {step_text!r} in day of week: {spec}')
            step = int(step_text)
        if rng in ('*', '?'):
            low, high = 0, 6
        elif '-' in rng:
            first, last = rng.split('-', 1)
            low, high = _weekday(first, spec), _weekday(last, spec)
        else:
            low = _weekday(rng, spec)
            high = 6 if step_text else low  # N/step means N-max/step
        if low > high:
            raise ScheduleParseError(f'beginning of range ({low}) beyond end of range ({high}): {spec}')
        days.update(range(low, high + 1, step))
    return ','.join(WEEKDAYS[d] for d in sorted(days))


def _cron_trigger(expr: str, tz: tzinfo | None, spec: str) -> BaseTrigger:
    fields = expr.split()
    if len(fields) != 6:
        raise ScheduleParseError(f'expected exactly 6 fields, found {len(fields)}: {spec}')
    second, minute, hour, dom, month, dow = fields
    common = {'second': second, 'minute': minute, 'hour': hour, 'month': month.lower(), 'timezone': tz}
    day = dom.replace('?', '*')
    day_of_week = _translate_weekdays(dow, spec)
    try:
        # Both day fields restricted: a day matching either one fires
        if not _is_star(dom) and not _is_star(dow):
            return OrTrigger([
                CronTrigger(day=day, day_of_week='*', **common),
                CronTrigger(day='*', day_of_week=day_of_week, **common),
            ])
        return CronTrigger(day=day, day_of_week=day_of_week, **common)
    except ValueError as e:
        raise ScheduleParseError(f'{e}: {spec}') from e


def _every_trigger(text: str, tz: tzinfo | None) -> IntervalTrigger:
    try:
        delay = parse_duration(text)
    except ScheduleParseError as e:
        raise ScheduleParseError(f'failed to parse duration {EVERY}{text}: {e}') from e
    # Sub-second delays round up to one second; fractions of a second are dropped
    seconds = max(delay // timedelta(seconds=1), 1)
    try:
        return IntervalTrigger(seconds=seconds, timezone=tz)
    except OverflowError:
        # the first fire time lands past datetime.max
        raise ScheduleParseError(f'invalid duration {EVERY}{text}: out of range') from None


def parse_spec(spec: str, default_tz: tzinfo | None = None) -> BaseTrigger:
    '''
    Parse a schedule spec into an APScheduler trigger. Raises ScheduleParseError.
    default_tz: zone for cron fields when the spec has no CRON_TZ= prefix
    (None means the local zone).
    '''
    text = spec.strip()
    if not text:
        raise ScheduleParseError('empty spec string')
    tz = default_tz
    if text.startswith(('TZ=', 'CRON_TZ=')):
        prefix, _, text = text.partition(' ')
        tz = _load_zone(prefix.split('=', 1)[1], spec)
        text = text.strip()
    if text.startswith(EVERY):
        return _every_trigger(text[len(EVERY):].strip(), tz)
    if text.startswith('@'):
        expr = DESCRIPTORS.get(text.lower())
        if expr is None:
            raise ScheduleParseError(f'unrecognized descriptor: {spec}')
        return _cron_trigger(expr, tz, spec)
    return _cron_trigger(text, tz, spec)


def next_fire_times(trigger: BaseTrigger, count: int = 5, now: datetime | None = None) -> list[datetime]:
    '''Upcoming fire times for trigger, starting after now (default: current time).'''
    now = now or datetime.now(timezone.utc)
    times: list[datetime] = []
    fire_time = trigger.get_next_fire_time(None, now)
    while fire_time is not None and len(times) < count:
        times.append(fire_time)
        fire_time = trigger.get_next_fire_time(fire_time, fire_time)
    return times
