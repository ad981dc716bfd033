"""Application services: transition validation, schedule projection, status-time accounting."""

from app.application.services.schedule_projector import ScheduleProjector
from app.application.services.status_time_tracker import StatusTimeTracker
from app.application.services.transition_validator import TransitionValidator

__all__ = [
    "ScheduleProjector",
    "StatusTimeTracker",
    "TransitionValidator",
]
