"""Workflow definition use cases."""

from app.application.use_cases.workflows.workflow_operations import (
    WorkflowDefinitionService,
)

__all__ = ["WorkflowDefinitionService"]
