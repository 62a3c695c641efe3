"""
Orchestrator Endpoints - Agent registry and task queue.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from chimera.core.dependencies import get_orchestrator
from chimera.models.requests import (
    AgentMemoryRequest,
    AgentStatusRequest,
    AssignTaskRequest,
    CompleteTaskRequest,
    FailTaskRequest,
    QueueTaskRequest,
    RegisterAgentRequest,
)
from chimera.models.responses import AgentRecord, ErrorResponse, TaskRecord
from chimera.services.orchestrator import AgentOrchestrator


router = APIRouter(tags=["Orchestrator"])

_NOT_FOUND = {404: {"model": ErrorResponse, "description": "Not found"}}
_CONFLICT = {409: {"model": ErrorResponse, "description": "Invalid state transition"}}


# =============================================================================
# AGENTS
# =============================================================================


@router.get("/agents", response_model=List[AgentRecord], summary="List Agents")
async def list_agents(
    status: Optional[str] = Query(None),
    type: Optional[str] = Query(None),
    orchestrator: AgentOrchestrator = Depends(get_orchestrator),
) -> List[AgentRecord]:
    return [AgentRecord.model_validate(a) for a in orchestrator.list_agents(status=status, type=type)]


@router.post("/agents", response_model=AgentRecord, status_code=201, summary="Register Agent")
async def register_agent(
    request: RegisterAgentRequest,
    orchestrator: AgentOrchestrator = Depends(get_orchestrator),
) -> AgentRecord:
    agent = orchestrator.register_agent(
        name=request.name,
        type=request.type,
        capabilities=request.capabilities,
        configuration=request.configuration,
        description=request.description,
    )
    return AgentRecord.model_validate(agent)


@router.get("/agents/{agent_id}", response_model=AgentRecord, responses=_NOT_FOUND, summary="Get Agent")
async def get_agent(
    agent_id: str,
    orchestrator: AgentOrchestrator = Depends(get_orchestrator),
) -> AgentRecord:
    return AgentRecord.model_validate(orchestrator.get_agent(agent_id))


@router.delete(
    "/agents/{agent_id}",
    response_model=AgentRecord,
    responses=_NOT_FOUND,
    summary="Unregister Agent",
    description="Cancel the agent's in-flight tasks and mark it stopped"
)
async def unregister_agent(
    agent_id: str,
    orchestrator: AgentOrchestrator = Depends(get_orchestrator),
) -> AgentRecord:
    return AgentRecord.model_validate(orchestrator.unregister_agent(agent_id))


@router.patch("/agents/{agent_id}/status", response_model=AgentRecord, responses=_NOT_FOUND, summary="Set Agent Status")
async def update_agent_status(
    agent_id: str,
    request: AgentStatusRequest,
    orchestrator: AgentOrchestrator = Depends(get_orchestrator),
) -> AgentRecord:
    agent = orchestrator.update_agent_status(agent_id, request.status)
    if request.status == "idle":
        orchestrator.process_queue()
        agent = orchestrator.get_agent(agent_id)
    return AgentRecord.model_validate(agent)


@router.patch("/agents/{agent_id}/memory", response_model=AgentRecord, responses=_NOT_FOUND, summary="Merge Agent Memory")
async def update_agent_memory(
    agent_id: str,
    request: AgentMemoryRequest,
    orchestrator: AgentOrchestrator = Depends(get_orchestrator),
) -> AgentRecord:
    return AgentRecord.model_validate(orchestrator.update_agent_memory(agent_id, request.memory))


# =============================================================================
# TASKS
# =============================================================================


@router.get("/tasks", response_model=List[TaskRecord], summary="List Tasks")
async def list_tasks(
    status: Optional[str] = Query(None),
    agent_id: Optional[str] = Query(None),
    limit: int = Query(100, ge=1, le=1000),
    orchestrator: AgentOrchestrator = Depends(get_orchestrator),
) -> List[TaskRecord]:
    tasks = orchestrator.list_tasks(status=status, agent_id=agent_id, limit=limit)
    return [TaskRecord.model_validate(t) for t in tasks]


@router.post(
    "/tasks",
    response_model=TaskRecord,
    status_code=201,
    summary="Queue Task",
    description="Queue a task; it is dispatched immediately when an idle agent is available"
)
async def queue_task(
    request: QueueTaskRequest,
    orchestrator: AgentOrchestrator = Depends(get_orchestrator),
) -> TaskRecord:
    task = orchestrator.queue_task(
        name=request.name,
        type=request.type,
        description=request.description,
        priority=request.priority,
        dependencies=request.dependencies,
        input_data=request.input_data,
    )
    return TaskRecord.model_validate(task)


@router.get("/tasks/queue", response_model=List[TaskRecord], summary="Pending Queue")
async def get_queue(
    orchestrator: AgentOrchestrator = Depends(get_orchestrator),
) -> List[TaskRecord]:
    return [TaskRecord.model_validate(t) for t in orchestrator.get_queue()]


@router.post("/tasks/process", response_model=List[TaskRecord], summary="Process Queue")
async def process_queue(
    orchestrator: AgentOrchestrator = Depends(get_orchestrator),
) -> List[TaskRecord]:
    """Run one dispatch pass and return the tasks it started."""
    return [TaskRecord.model_validate(t) for t in orchestrator.process_queue()]


@router.get("/tasks/{task_id}", response_model=TaskRecord, responses=_NOT_FOUND, summary="Get Task")
async def get_task(
    task_id: str,
    orchestrator: AgentOrchestrator = Depends(get_orchestrator),
) -> TaskRecord:
    return TaskRecord.model_validate(orchestrator.get_task(task_id))


@router.post("/tasks/{task_id}/assign", response_model=TaskRecord, responses={**_NOT_FOUND, **_CONFLICT}, summary="Assign Task")
async def assign_task(
    task_id: str,
    request: AssignTaskRequest,
    orchestrator: AgentOrchestrator = Depends(get_orchestrator),
) -> TaskRecord:
    orchestrator.assign_task(task_id, request.agent_id)
    return TaskRecord.model_validate(orchestrator.start_task(task_id))


@router.post("/tasks/{task_id}/complete", response_model=TaskRecord, responses={**_NOT_FOUND, **_CONFLICT}, summary="Complete Task")
async def complete_task(
    task_id: str,
    request: CompleteTaskRequest,
    orchestrator: AgentOrchestrator = Depends(get_orchestrator),
) -> TaskRecord:
    return TaskRecord.model_validate(orchestrator.complete_task(task_id, request.output_data))


@router.post("/tasks/{task_id}/fail", response_model=TaskRecord, responses={**_NOT_FOUND, **_CONFLICT}, summary="Fail Task")
async def fail_task(
    task_id: str,
    request: FailTaskRequest,
    orchestrator: AgentOrchestrator = Depends(get_orchestrator),
) -> TaskRecord:
    return TaskRecord.model_validate(orchestrator.fail_task(task_id, request.error_message))


@router.post("/tasks/{task_id}/cancel", response_model=TaskRecord, responses={**_NOT_FOUND, **_CONFLICT}, summary="Cancel Task")
async def cancel_task(
    task_id: str,
    orchestrator: AgentOrchestrator = Depends(get_orchestrator),
) -> TaskRecord:
    return TaskRecord.model_validate(orchestrator.cancel_task(task_id))
