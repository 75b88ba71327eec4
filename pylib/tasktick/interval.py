'''
Interval normalization: turn whatever the caller passed as an interval into the
schedule spec string the engine understands.
'''

import numbers
from dataclasses import dataclass
from datetime import timedelta
from typing import Any

import structlog

from tasktick.errors import IntervalTypeError

EVERY_PREFIX = '@every '
DEFAULT_SPEC = EVERY_PREFIX + '1m'

# Types whose str() is not a duration, even though Python can print them
_NO_DURATION_TEXT = (bool, float, complex, type(None))


@dataclass(frozen=True)
class Cron:
    '''A 6-field cron expression (or descriptor), passed through verbatim.'''

    expr: str


@dataclass(frozen=True)
class Every:
    '''Fire every `duration`.'''

    duration: timedelta


@dataclass(frozen=True)
class EverySeconds:
    '''Fire every `seconds` whole seconds.'''

    seconds: int


def format_seconds(seconds: int) -> str:
    '''
    Canonical duration text for whole seconds: hours if evenly divisible,
    else minutes if evenly divisible, else seconds. 3600 -> 1h, 90 -> 90s.
    '''
    if seconds >= 3600 and seconds % 3600 == 0:
        return f'{seconds // 3600}h'
    if seconds >= 60 and seconds % 60 == 0:
        return f'{seconds // 60}m'
    return f'{seconds}s'


def _with_fraction(whole: int, frac: int, width: int) -> str:
    if not frac:
        return str(whole)
    return f'{whole}.{frac:0{width}d}'.rstrip('0')


def format_duration(duration: timedelta) -> str:
    '''
    Render a timedelta in Go duration notation, e.g. 1h0m0s, 1m30s, 1.5s, 250ms.
    The result round-trips through tasktick.schedule.parse_duration.
    '''
    micros = duration // timedelta(microseconds=1)
    if micros == 0:
        return '0s'
    sign = '-' if micros < 0 else ''
    micros = abs(micros)
    if micros < 1_000:
        return f'{sign}{micros}µs'
    if micros < 1_000_000:
        return f'{sign}{_with_fraction(micros // 1_000, micros % 1_000, 3)}ms'
    hours, micros = divmod(micros, 3_600_000_000)
    minutes, micros = divmod(micros, 60_000_000)
    seconds = _with_fraction(micros // 1_000_000, micros % 1_000_000, 6) + 's'
    if hours:
        return f'{sign}{hours}h{minutes}m{seconds}'
    if minutes:
        return f'{sign}{minutes}m{seconds}'
    return sign + seconds


def _type_name(value: Any) -> str:
    cls = type(value)
    if cls.__module__ == 'builtins':
        return cls.__qualname__
    return f'{cls.__module__}.{cls.__qualname__}'


def normalize_interval(
    interval: Any,
    *,
    task: str | None = None,
    logger: Any = None,
    strict: bool = False,
) -> str:
    '''
    Map an interval to a schedule spec string.

    str and Cron pass through; integers are whole seconds; timedelta and Every
    use Go duration notation; any other value whose type defines __str__ is
    used as @every <text>. Anything else falls back to @every 1m with a
    warning, or raises IntervalTypeError if strict.

    Only the shape of the value is examined. Whether the result is a valid
    schedule is for the engine to decide.
    '''
    if isinstance(interval, str):
        return interval
    if isinstance(interval, Cron):
        return interval.expr
    if isinstance(interval, Every):
        return EVERY_PREFIX + format_duration(interval.duration)
    if isinstance(interval, EverySeconds):
        return EVERY_PREFIX + format_seconds(int(interval.seconds))
    if isinstance(interval, numbers.Integral) and not isinstance(interval, bool):
        return EVERY_PREFIX + format_seconds(int(interval))
    if isinstance(interval, timedelta):
        return EVERY_PREFIX + format_duration(interval)
    if not isinstance(interval, _NO_DURATION_TEXT) and type(interval).__str__ is not object.__str__:
        return EVERY_PREFIX + str(interval)

    type_name = _type_name(interval)
    if strict:
        raise IntervalTypeError(f'unsupported interval type {type_name} for task {task!r}')
    log = logger or structlog.get_logger()
    log.warning('Unknown interval type, using default 1m', task=task, type=type_name)
    return DEFAULT_SPEC
