'''Scheduler configuration, from defaults, env vars, or a .env file.'''

from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from datetime import timedelta
from pathlib import Path
from typing import Any

from dotenv import dotenv_values

from tasktick.schedule import parse_duration

ENV_PREFIX = 'SCHEDULER_'

_DURATION_FIELDS = ('metrics_interval', 'drs_interval', 'rebalance_interval', 'event_poll_interval')
_TRUE = {'1', 'true', 'yes', 'on'}
_FALSE = {'0', 'false', 'no', 'off', ''}


@dataclass(frozen=True)
class SchedulerConfig:
    '''Fixed at scheduler construction.'''

    # Intervals for the host's standard tasks, e.g. register('metrics', cfg.metrics_interval, ...)
    metrics_interval: timedelta = field(default=timedelta(minutes=1))
    drs_interval: timedelta = field(default=timedelta(minutes=5))
    rebalance_interval: timedelta = field(default=timedelta(minutes=15))
    event_poll_interval: timedelta = field(default=timedelta(seconds=30))
    timezone: str | None = None  # IANA zone for cron specs; None = local zone
    max_workers: int = 10  # worker threads shared by all tasks
    strict_intervals: bool = False  # raise on unknown interval types instead of using 1m

    def __post_init__(self) -> None:
        if self.max_workers < 1:
            raise ValueError(f'max_workers must be at least 1, got {self.max_workers}')

    @classmethod
    def from_env(cls, env_file: str | Path | None = None, **overrides: Any) -> SchedulerConfig:
        '''
        Build config from SCHEDULER_* env vars, e.g. SCHEDULER_DRS_INTERVAL=10m,
        SCHEDULER_TIMEZONE=Europe/Paris, SCHEDULER_MAX_WORKERS=4,
        SCHEDULER_STRICT_INTERVALS=true.
        env_file: optional .env file; process env vars take precedence over it.
        overrides: field values that take precedence over both.
        '''
        env: dict[str, str] = {}
        if env_file is not None and Path(env_file).exists():
            env.update({k: v for k, v in dotenv_values(env_file).items() if v is not None})
        env.update(os.environ)

        values: dict[str, Any] = {}
        for name in _DURATION_FIELDS:
            raw = env.get(ENV_PREFIX + name.upper())
            if raw:
                values[name] = parse_duration(raw.strip())
        if env.get(ENV_PREFIX + 'TIMEZONE'):
            values['timezone'] = env[ENV_PREFIX + 'TIMEZONE'].strip()
        raw = env.get(ENV_PREFIX + 'MAX_WORKERS')
        if raw:
            try:
                values['max_workers'] = int(raw)
            except ValueError:
                raise ValueError(f'{ENV_PREFIX}MAX_WORKERS must be an integer, got {raw!r}') from None
        raw = env.get(ENV_PREFIX + 'STRICT_INTERVALS')
        if raw is not None:
            values['strict_intervals'] = _parse_bool(raw, ENV_PREFIX + 'STRICT_INTERVALS')
        return replace(cls(**values), **overrides)


def _parse_bool(raw: str, key: str) -> bool:
    low = raw.strip().lower()
    if low in _TRUE:
        return True
    if low in _FALSE:
        return False
    raise ValueError(f'{key} must be a boolean, got {raw!r}')
