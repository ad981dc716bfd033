"""StatusTimeLog ORM model. Append-only ledger of status intervals per task."""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String, text
from sqlalchemy.orm import Mapped, mapped_column

from app.infrastructure.persistence.database import Base
from app.infrastructure.persistence.models.mixins import CuidMixin


class StatusTimeLog(CuidMixin, Base):
    """Status interval. Table: status_time_log. At most one open row (exited_at NULL) per task."""

    __tablename__ = "status_time_log"

    task_id: Mapped[str] = mapped_column(
        String, ForeignKey("task.id", ondelete="CASCADE"), nullable=False
    )
    from_status: Mapped[str | None] = mapped_column(String(64), nullable=True)
    to_status: Mapped[str] = mapped_column(String(64), nullable=False)
    entered_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )
    exited_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    duration_seconds: Mapped[int | None] = mapped_column(Integer, nullable=True)
    actor_id: Mapped[str | None] = mapped_column(String, nullable=True)

    __table_args__ = (
        Index("ix_status_time_log_task_entered", "task_id", "entered_at"),
        Index(
            "uq_status_time_log_open_per_task",
            "task_id",
            unique=True,
            postgresql_where=text("exited_at IS NULL"),
        ),
    )
