'''structlog setup for hosts and the CLI.'''

import logging

import structlog
from structlog.contextvars import merge_contextvars
from structlog.dev import ConsoleRenderer, plain_traceback, set_exc_info
from structlog.processors import JSONRenderer, StackInfoRenderer, TimeStamper, add_log_level, format_exc_info

LEVELS = {
    'debug': logging.DEBUG,
    'info': logging.INFO,
    'warn': logging.WARNING,
    'warning': logging.WARNING,
    'error': logging.ERROR,
}


def configure_logging(level: str = 'info', json: bool = False) -> None:
    '''
    Configure structlog: level filter, timestamps, and console output with plain
    Python tracebacks (or one JSON object per line if json).
    '''
    try:
        min_level = LEVELS[level.lower()]
    except KeyError:
        raise ValueError(f'unknown log level {level!r}; use one of {", ".join(LEVELS)}') from None

    processors = [
        merge_contextvars,
        add_log_level,
        StackInfoRenderer(),
        set_exc_info,
        TimeStamper(fmt='%Y-%m-%d %H:%M:%S', utc=False),
    ]
    if json:
        processors += [format_exc_info, JSONRenderer()]
    else:
        processors.append(ConsoleRenderer(exception_formatter=plain_traceback))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(min_level),
    )
