'''Named-task scheduler abstraction. Implementations decide how schedules are dispatched.'''

from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


@dataclass(frozen=True)
class TaskContext:
    '''
    Handed to a task on each firing. Fresh every time, with no deadline, and not
    cancelled when the scheduler stops; tasks that need a time bound set their own.
    '''

    task: str
    fired_at: datetime
    log: Any = field(repr=False, compare=False)
    deadline: datetime | None = None


# A task raises to signal failure. Coroutine functions are awaited on the worker thread.
Task = Callable[[TaskContext], Awaitable[None] | None]


@dataclass(frozen=True)
class Entry:
    '''Read-only view of one registered task.'''

    id: int  # engine handle
    name: str | None
    spec: str
    next_run: datetime | None = None


class State(Enum):
    CREATED = 'created'
    RUNNING = 'running'
    STOPPED = 'stopped'


class Scheduler(ABC):
    '''Abstract scheduler. Runs named tasks, each on its own schedule.'''

    @abstractmethod
    def register(self, name: str, interval: Any, task: Task) -> None:
        '''Register task to run on interval under name.'''

    @abstractmethod
    def remove(self, name: str) -> None:
        '''Stop future firings of the named task. Unknown names are ignored.'''

    @abstractmethod
    def get_tasks(self) -> list[str]:
        '''Names of the registered tasks, in no particular order.'''

    @abstractmethod
    def start(self) -> None:
        '''Start dispatching.'''

    @abstractmethod
    def stop(self) -> None:
        '''Stop dispatching and wait for running tasks to finish.'''
