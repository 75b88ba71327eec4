'''Named periodic tasks on top of CronEngine.'''

import asyncio
import inspect
import threading
from collections.abc import Awaitable, Callable
from datetime import datetime, timezone
from typing import Any

import structlog

from tasktick.config import SchedulerConfig
from tasktick.errors import DuplicateTaskError, SchedulerError, SchedulerStoppedError
from tasktick.interval import normalize_interval
from tasktick.scheduler.apscheduler_impl import CronEngine
from tasktick.scheduler.base import Entry, Scheduler, State, Task, TaskContext
from tasktick.scheduler.rwlock import RWLock


async def _await(awaitable: Awaitable[Any]) -> Any:
    return await awaitable


class PeriodicScheduler(Scheduler):
    '''
    Runs registered tasks by name, each on its own schedule.

    Registry and engine are changed together under one write lock, so a
    registered name always has a live engine entry. Tasks run on the engine's
    worker threads, never under the lock.
    '''

    def __init__(self, config: SchedulerConfig | None = None, logger: Any = None) -> None:
        self.config = config or SchedulerConfig()
        self._log = logger or structlog.get_logger()
        self._engine = CronEngine(timezone=self.config.timezone, max_workers=self.config.max_workers)
        self._tasks: dict[str, int] = {}
        self._lock = RWLock()
        self._state = State.CREATED
        self._drained = threading.Event()

    @property
    def state(self) -> State:
        return self._state

    def register(self, name: str, interval: Any, task: Task) -> None:
        '''
        Register task under name, firing on interval (cron spec, seconds,
        timedelta, or an interval.Cron/Every/EverySeconds value).

        Raises ValueError for an empty name, TypeError if task is not callable,
        DuplicateTaskError if name is taken, SchedulerStoppedError after stop(),
        and ScheduleParseError if the engine rejects the schedule.
        '''
        if not isinstance(name, str) or not name:
            raise ValueError('task name must be a non-empty string')
        if not callable(task):
            raise TypeError(f'task for {name!r} is not callable')

        with self._lock.write():
            if self._state is State.STOPPED:
                raise SchedulerStoppedError(f'cannot register {name!r}: scheduler is stopped')
            if name in self._tasks:
                raise DuplicateTaskError(f'task {name!r} is already registered')
            spec = normalize_interval(
                interval, task=name, logger=self._log, strict=self.config.strict_intervals,
            )
            entry_id = self._engine.add_func(spec, self._make_job(name, task), name=name)
            self._tasks[name] = entry_id
            self._log.info('Registered scheduled task', task=name, schedule=spec)

    def _make_job(self, name: str, task: Task) -> Callable[[], None]:
        def run() -> None:
            ctx = TaskContext(task=name, fired_at=datetime.now(timezone.utc), log=self._log.bind(task=name))
            self._log.debug('Running scheduled task', task=name)
            try:
                result = task(ctx)
                if inspect.isawaitable(result):
                    asyncio.run(_await(result))
            except Exception as e:
                self._log.error('Scheduled task failed', task=name, error=str(e), exc_info=True)
            except BaseException as e:
                # SystemExit and the like: record it here, then let the engine's executor handle it
                self._log.error('Scheduled task failed', task=name, error=repr(e), exc_info=True)
                raise

        return run

    def remove(self, name: str) -> None:
        with self._lock.write():
            entry_id = self._tasks.pop(name, None)
            if entry_id is None:
                return
            self._engine.remove(entry_id)
            self._log.info('Removed scheduled task', task=name)

    def get_tasks(self) -> list[str]:
        with self._lock.read():
            return list(self._tasks)

    def entries(self) -> list[Entry]:
        '''Snapshot of registered tasks with their specs and next run times.'''
        with self._lock.read():
            handles = set(self._tasks.values())
            return [e for e in self._engine.entries() if e.id in handles]

    def start(self) -> None:
        with self._lock.write():
            if self._state is State.STOPPED:
                raise SchedulerStoppedError('scheduler cannot be restarted after stop')
            if self._state is State.RUNNING:
                return
            self._engine.start()
            self._state = State.RUNNING
        self._log.info('Scheduler started')

    def stop(self) -> None:
        '''
        Stop firing and wait for running tasks to return. Running tasks are not
        interrupted. Registered names remain listed; the scheduler cannot be
        started again. Concurrent callers all return once the drain completes.

        Raises SchedulerError when called from inside a task, since the drain
        would have to wait for the caller itself.
        '''
        if self._engine.in_worker():
            raise SchedulerError('stop() cannot be called from a scheduled task')
        with self._lock.write():
            already_stopped = self._state is State.STOPPED
            self._state = State.STOPPED
        if already_stopped:
            # Another caller may still be draining
            self._drained.wait()
            return
        try:
            # Drain outside the lock: a running task may call remove() or get_tasks()
            self._engine.stop()
        finally:
            self._drained.set()
        self._log.info('Scheduler stopped')
