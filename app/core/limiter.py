"""Rate limiter instance for SlowAPI.

Shared so both main (app.state.limiter) and route modules can use the same
instance without circular imports. Limit strings are read from settings at
request time, so tests can change them without re-importing routes.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

from app.core.config import get_settings

limiter = Limiter(key_func=get_remote_address)


def _write_limit() -> str:
    return get_settings().rate_limit_writes


# Applied to every endpoint that writes (status changes, workflow and task edits).
limit_writes = limiter.limit(_write_limit)
