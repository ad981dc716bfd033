"""Status-time read use cases."""

from app.application.use_cases.status_time.status_time_queries import (
    StatusTimeQueryService,
)

__all__ = ["StatusTimeQueryService"]
