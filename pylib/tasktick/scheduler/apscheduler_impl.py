'''APScheduler-backed timer engine: schedule specs in, integer entry handles out.'''

import threading
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import tzinfo
from zoneinfo import ZoneInfo

from apscheduler.executors.pool import ThreadPoolExecutor
from apscheduler.jobstores.base import JobLookupError
from apscheduler.schedulers.background import BackgroundScheduler

from tasktick.errors import SchedulerError
from tasktick.schedule import parse_spec
from tasktick.scheduler.base import Entry


@dataclass
class _EngineEntry:
    id: int
    spec: str
    name: str | None
    fn: Callable[[], None]
    cancelled: threading.Event = field(default_factory=threading.Event)


class CronEngine:
    '''
    Thin adapter over APScheduler's BackgroundScheduler.

    Each entry is a job with id str(handle). Firings of one entry never overlap
    (max_instances=1), and a late firing runs once rather than being replayed
    (coalesce, no misfire grace limit). Entries can be added before start().
    '''

    def __init__(self, timezone: str | tzinfo | None = None, max_workers: int = 10) -> None:
        self._tz = ZoneInfo(timezone) if isinstance(timezone, str) else timezone
        options = {'timezone': self._tz} if self._tz else {}
        self._scheduler = BackgroundScheduler(
            executors={'default': ThreadPoolExecutor(max_workers)},
            job_defaults={'max_instances': 1, 'coalesce': True, 'misfire_grace_time': None},
            **options,
        )
        self._entries: dict[int, _EngineEntry] = {}
        self._last_id = 0
        self._lock = threading.Lock()
        self._stopping = threading.Event()
        self._worker = threading.local()

    @property
    def running(self) -> bool:
        return self._scheduler.running

    def add_func(self, spec: str, fn: Callable[[], None], name: str | None = None) -> int:
        '''
        Parse spec and install fn. Returns the new entry handle.
        Raises ScheduleParseError; nothing is installed in that case.
        '''
        trigger = parse_spec(spec, self._tz)
        with self._lock:
            self._last_id += 1
            entry = _EngineEntry(id=self._last_id, spec=spec, name=name, fn=fn)
            self._scheduler.add_job(
                self._dispatch,
                trigger=trigger,
                args=(entry,),
                id=str(entry.id),
                name=name or spec,
            )
            self._entries[entry.id] = entry
        return entry.id

    def remove(self, entry_id: int) -> None:
        '''Forget an entry. A firing already under way finishes; no new one starts.'''
        with self._lock:
            entry = self._entries.pop(entry_id, None)
            if entry is None:
                return
            entry.cancelled.set()
            try:
                self._scheduler.remove_job(str(entry_id))
            except JobLookupError:
                pass  # after shutdown the job store is no longer searched

    def entries(self) -> list[Entry]:
        with self._lock:
            current = list(self._entries.values())
        views = []
        for entry in current:
            next_run = None
            if self.running:
                job = self._scheduler.get_job(str(entry.id))
                next_run = job.next_run_time if job else None
            views.append(Entry(id=entry.id, name=entry.name, spec=entry.spec, next_run=next_run))
        return views

    def in_worker(self) -> bool:
        '''True when called from inside a callback this engine is running.'''
        return getattr(self._worker, 'active', False)

    def start(self) -> None:
        self._scheduler.start()

    def stop(self) -> None:
        '''
        Cease firing and block until every running callback has returned.
        Raises SchedulerError if called from one of those callbacks, which could never be joined.
        '''
        if self.in_worker():
            raise SchedulerError('cannot stop the engine from inside a running task')
        self._stopping.set()
        if self._scheduler.running:
            self._scheduler.shutdown(wait=True)

    def _dispatch(self, entry: _EngineEntry) -> None:
        # A firing queued just before remove() or stop() must not begin afterwards
        if self._stopping.is_set() or entry.cancelled.is_set():
            return
        self._worker.active = True
        try:
            entry.fn()
        finally:
            self._worker.active = False
