'''CLI for checking schedules before handing them to a scheduler.'''

import sys
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import fire
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from tasktick.errors import SchedulerError
from tasktick.interval import normalize_interval
from tasktick.logs import configure_logging
from tasktick.schedule import next_fire_times, parse_spec


def main() -> None:
    '''tasktick: named periodic-task scheduler tools.'''
    fire.Fire({
        'check': check,
    })


def check(interval, count: int = 5, timezone: str = '', log_level: str = 'info') -> None:
    '''
    Normalize and parse an interval, then show when it would next fire.
    interval: cron spec ("0 */5 * * * *", "@every 90s", "@daily") or whole seconds (300)
    count: number of upcoming fire times to list
    timezone: IANA zone for cron specs (default: local zone)
    log_level: debug | info | warn | error
    '''
    configure_logging(log_level)
    console = Console()
    try:
        tz = ZoneInfo(timezone) if timezone else None
        spec = normalize_interval(interval, task='check')
        trigger = parse_spec(spec, tz)
    except (SchedulerError, ValueError, ZoneInfoNotFoundError) as e:
        console.print(Panel(str(e), title='Invalid schedule', border_style='red'))
        sys.exit(1)

    table = Table(title=f'Next {count} firings')
    table.add_column('#', justify='right')
    table.add_column('Fire time')
    for i, when in enumerate(next_fire_times(trigger, count), start=1):
        table.add_row(str(i), when.isoformat())
    console.print(Panel(spec, title='Schedule spec'))
    console.print(table)
