from datetime import datetime, timedelta
from zoneinfo import ZoneInfo

import pytest
from apscheduler.triggers.interval import IntervalTrigger

from tasktick.errors import ScheduleParseError
from tasktick.schedule import next_fire_times, parse_duration, parse_spec

UTC = ZoneInfo('UTC')
# 2024-01-01 is a Monday
MONDAY = datetime(2024, 1, 1, 0, 0, 1, tzinfo=UTC)


def at(*args):
    return datetime(*args, tzinfo=UTC)


def upcoming(spec, count=3, now=MONDAY):
    return next_fire_times(parse_spec(spec, UTC), count, now=now)


@pytest.mark.parametrize('text, expected', [
    ('0', timedelta(0)),
    ('45s', timedelta(seconds=45)),
    ('1h30m', timedelta(hours=1, minutes=30)),
    ('1.5h', timedelta(minutes=90)),
    ('2h45m30.5s', timedelta(hours=2, minutes=45, seconds=30.5)),
    ('300ms', timedelta(milliseconds=300)),
    ('.5s', timedelta(milliseconds=500)),
    ('1µs', timedelta(microseconds=1)),
    ('10us', timedelta(microseconds=10)),
    ('1500ns', timedelta(microseconds=1)),
    ('-2m', timedelta(minutes=-2)),
    ('+3s', timedelta(seconds=3)),
])
def test_parse_duration(text, expected):
    assert parse_duration(text) == expected


@pytest.mark.parametrize('text', ['', '-', '5', 'abc', '1d', '1h 30m', '.s', 's', '277777777777h', '-277777777777h'])
def test_parse_duration_invalid(text):
    with pytest.raises(ScheduleParseError):
        parse_duration(text)


def test_every():
    trigger = parse_spec('@every 90s')
    assert isinstance(trigger, IntervalTrigger)
    assert trigger.interval == timedelta(seconds=90)


@pytest.mark.parametrize('spec', ['@every 500ms', '@every 0s', '@every -5s'])
def test_every_rounds_up_to_one_second(spec):
    assert parse_spec(spec).interval == timedelta(seconds=1)


def test_every_truncates_fraction():
    assert parse_spec('@every 2.7s').interval == timedelta(seconds=2)


def test_cron_seconds_field():
    assert upcoming('*/5 * * * * *') == [at(2024, 1, 1, 0, 0, 5), at(2024, 1, 1, 0, 0, 10), at(2024, 1, 1, 0, 0, 15)]


def test_weekday_zero_is_sunday():
    assert upcoming('0 0 12 * * 0', count=1) == [at(2024, 1, 7, 12)]
    assert upcoming('0 0 12 * * SUN', count=1) == [at(2024, 1, 7, 12)]


def test_weekday_names_range():
    saturday = at(2024, 1, 6, 10)
    assert upcoming('0 0 9 * * MON-FRI', count=2, now=saturday) == [at(2024, 1, 8, 9), at(2024, 1, 9, 9)]


def test_weekday_range_with_step():
    assert upcoming('0 0 0 * * 1-5/2') == [at(2024, 1, 3), at(2024, 1, 5), at(2024, 1, 8)]


def test_question_mark_is_wildcard():
    assert upcoming('0 0 6 ? * ?', count=2) == [at(2024, 1, 1, 6), at(2024, 1, 2, 6)]


def test_day_of_month_or_day_of_week():
    # both restricted: the 15th, and every Sunday
    assert upcoming('0 0 0 15 * SUN', count=4) == [at(2024, 1, 7), at(2024, 1, 14), at(2024, 1, 15), at(2024, 1, 21)]


def test_month_names():
    assert upcoming('0 0 0 1 MAR *', count=1) == [at(2024, 3, 1)]


@pytest.mark.parametrize('spec, first', [
    ('@hourly', at(2024, 1, 1, 1)),
    ('@daily', at(2024, 1, 2)),
    ('@midnight', at(2024, 1, 2)),
    ('@weekly', at(2024, 1, 7)),
    ('@monthly', at(2024, 2, 1)),
    ('@yearly', at(2025, 1, 1)),
    ('@annually', at(2025, 1, 1)),
])
def test_descriptors(spec, first):
    assert upcoming(spec, count=1) == [first]


@pytest.mark.parametrize('prefix', ['CRON_TZ', 'TZ'])
def test_zone_prefix(prefix):
    first = upcoming(f'{prefix}=America/New_York 0 0 9 * * *', count=1)[0]
    assert first == at(2024, 1, 1, 14)


@pytest.mark.parametrize('spec', [
    '',
    '   ',
    'not-a-cron',
    '* * * * *',
    '* * * * * * *',
    '60 * * * * *',
    '0 0 25 * * *',
    '0 0 0 * * 7',
    '0 0 0 * * 5-1',
    '0 0 0 * * FUNDAY',
    '0 0 0 * * */0',
    '@fortnightly',
    '@every soon',
    '@every 5',
    '@every 277777777777h',
    '@every 2000000000h',
    'TZ=Mars/Olympus 0 0 0 * * *',
])
def test_parse_errors(spec):
    with pytest.raises(ScheduleParseError):
        parse_spec(spec)


def test_parse_error_is_value_error():
    with pytest.raises(ValueError):
        parse_spec('not-a-cron')


def test_next_fire_times_interval():
    trigger = parse_spec('@every 1h')
    times = next_fire_times(trigger, 3)
    assert times[1] - times[0] == timedelta(hours=1)
    assert times[2] - times[1] == timedelta(hours=1)
