"""Workflow definition API: thin routes delegating to WorkflowDefinitionService."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request, Response

from app.api.v1.dependencies import (
    CurrentActor,
    WorkflowAdmin,
    get_workflow_service,
)
from app.application.use_cases.workflows import WorkflowDefinitionService
from app.core.limiter import limit_writes
from app.schemas.workflow import (
    AllowedTransitionsResponse,
    ValidateTransitionRequest,
    ValidateTransitionResponse,
    WorkflowDefinitionRequest,
    WorkflowDefinitionResponse,
    WorkflowReplaceRequest,
)

router = APIRouter()

WorkflowServiceDep = Annotated[WorkflowDefinitionService, Depends(get_workflow_service)]


@router.get("", response_model=list[WorkflowDefinitionResponse])
async def list_workflows(
    actor: CurrentActor,
    service: WorkflowServiceDep,
):
    """List the tenant's workflow definitions."""
    definitions = await service.list_definitions(actor.tenant_id)
    return [WorkflowDefinitionResponse.from_entity(d) for d in definitions]


@router.get("/default", response_model=WorkflowDefinitionResponse)
async def get_default_workflow(
    actor: CurrentActor,
    service: WorkflowServiceDep,
):
    """The definition new tasks bind to when no workflow_id is given."""
    definition = await service.get_default(actor.tenant_id)
    return WorkflowDefinitionResponse.from_entity(definition)


@router.get("/{workflow_id}", response_model=WorkflowDefinitionResponse)
async def get_workflow(
    workflow_id: str,
    actor: CurrentActor,
    service: WorkflowServiceDep,
):
    definition = await service.get(actor.tenant_id, workflow_id)
    return WorkflowDefinitionResponse.from_entity(definition)


@router.post("", response_model=WorkflowDefinitionResponse, status_code=201)
@limit_writes
async def create_workflow(
    request: Request,
    body: WorkflowDefinitionRequest,
    actor: WorkflowAdmin,
    service: WorkflowServiceDep,
):
    """Create a workflow definition (admin roles only)."""
    definition = await service.create(actor.tenant_id, body.to_command())
    return WorkflowDefinitionResponse.from_entity(definition)


@router.put("/{workflow_id}", response_model=WorkflowDefinitionResponse)
@limit_writes
async def replace_workflow(
    request: Request,
    workflow_id: str,
    body: WorkflowReplaceRequest,
    actor: WorkflowAdmin,
    service: WorkflowServiceDep,
):
    """Replace a definition wholesale (version + 1).

    Tasks in statuses the new graph drops are moved per status_remap; a
    dropped status without a remap fails with 409 UNKNOWN_STATUS.
    """
    definition = await service.replace(
        actor.tenant_id,
        workflow_id,
        body.to_command(),
        actor_id=actor.actor_id,
        status_remap=body.status_remap,
    )
    return WorkflowDefinitionResponse.from_entity(definition)


@router.delete("/{workflow_id}", status_code=204)
@limit_writes
async def delete_workflow(
    request: Request,
    workflow_id: str,
    actor: WorkflowAdmin,
    service: WorkflowServiceDep,
):
    """Delete a definition that is not the default and has no tasks."""
    await service.delete(actor.tenant_id, workflow_id)
    return Response(status_code=204)


@router.post("/{workflow_id}/validate-transition", response_model=ValidateTransitionResponse)
async def validate_transition(
    workflow_id: str,
    body: ValidateTransitionRequest,
    actor: CurrentActor,
    service: WorkflowServiceDep,
):
    """Would from_status -> to_status be admitted for the role? Writes nothing."""
    check = await service.validate_transition(
        actor.tenant_id,
        workflow_id,
        body.from_status,
        body.to_status,
        body.role or actor.role,
    )
    return ValidateTransitionResponse.from_check(check)


@router.get("/{workflow_id}/allowed-transitions", response_model=AllowedTransitionsResponse)
async def allowed_transitions(
    workflow_id: str,
    actor: CurrentActor,
    service: WorkflowServiceDep,
    from_status: str = Query(..., min_length=1),
):
    """Statuses the caller's role may move a task to from from_status."""
    targets = await service.allowed_targets(
        actor.tenant_id, workflow_id, from_status, actor.role
    )
    return AllowedTransitionsResponse(
        from_status=from_status, role=actor.role, to_statuses=targets
    )
