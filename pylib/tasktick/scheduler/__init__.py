'''Scheduler implementations. New schedulers come from new().'''

from typing import Any

from tasktick.config import SchedulerConfig
from tasktick.scheduler.apscheduler_impl import CronEngine
from tasktick.scheduler.base import Entry, Scheduler, State, Task, TaskContext
from tasktick.scheduler.periodic import PeriodicScheduler

__all__ = [
    'CronEngine',
    'Entry',
    'PeriodicScheduler',
    'Scheduler',
    'State',
    'Task',
    'TaskContext',
    'new',
]


def new(config: SchedulerConfig | None = None, logger: Any = None) -> PeriodicScheduler:
    '''
    Create a scheduler in the created state. Tasks may be registered before start().
    logger: structlog-style logger; default structlog.get_logger().
    '''
    return PeriodicScheduler(config=config, logger=logger)
