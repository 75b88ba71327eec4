'''Exceptions raised at the tasktick API boundary.'''


class SchedulerError(Exception):
    '''Base class for scheduler errors.'''


class ScheduleParseError(SchedulerError, ValueError):
    '''Raised when a schedule spec (cron expression, descriptor, duration or zone) cannot be parsed.'''


class IntervalTypeError(SchedulerError, TypeError):
    '''Raised for an interval of unsupported type when strict intervals are enabled.'''


class DuplicateTaskError(SchedulerError):
    '''Raised when registering a name that is already registered.'''


class SchedulerStoppedError(SchedulerError):
    '''Raised when registering or starting after the scheduler was stopped.'''
