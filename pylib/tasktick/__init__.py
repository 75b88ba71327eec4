'''tasktick: run named tasks on cron or interval schedules, in process.'''

from tasktick.config import SchedulerConfig
from tasktick.errors import (
    DuplicateTaskError,
    IntervalTypeError,
    ScheduleParseError,
    SchedulerError,
    SchedulerStoppedError,
)
from tasktick.interval import Cron, Every, EverySeconds
from tasktick.scheduler import Entry, PeriodicScheduler, Scheduler, TaskContext, new

__all__ = [
    'Cron',
    'DuplicateTaskError',
    'Entry',
    'Every',
    'EverySeconds',
    'IntervalTypeError',
    'PeriodicScheduler',
    'ScheduleParseError',
    'Scheduler',
    'SchedulerConfig',
    'SchedulerError',
    'SchedulerStoppedError',
    'TaskContext',
    'new',
]
