"""WorkflowDefinition ORM model. The status graph a task moves through."""

from typing import Any

from sqlalchemy import Boolean, Index, String, Text, text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from app.infrastructure.persistence.database import Base
from app.infrastructure.persistence.models.mixins import MultiTenantModel


class WorkflowDefinitionModel(MultiTenantModel, Base):
    """Workflow definition. Table: workflow_definition. At most one default per tenant.

    statuses: [{"id", "name", "order", "color"}]
    transitions: [{"from", "to": [...]}]
    role_restrictions: {"from->to": [roles]}
    """

    __tablename__ = "workflow_definition"

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_default: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=text("false")
    )
    statuses: Mapped[list[dict[str, Any]]] = mapped_column(JSONB, nullable=False)
    transitions: Mapped[list[dict[str, Any]]] = mapped_column(
        JSONB, nullable=False, default=list
    )
    role_restrictions: Mapped[dict[str, list[str]]] = mapped_column(
        JSONB, nullable=False, default=dict
    )

    __table_args__ = (
        Index(
            "uq_workflow_definition_tenant_default",
            "tenant_id",
            unique=True,
            postgresql_where=text("is_default"),
        ),
    )
