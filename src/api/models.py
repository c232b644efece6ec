"""Request and response models for REST API."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from models.state import Task, TaskMetrics, WorkflowResult, WorkflowState
from services.results_summary import ResultsSummary
from services.templates import WorkflowTemplate


class TaskSpec(BaseModel):
    """Task definition supplied by a client."""

    model_config = ConfigDict(extra="forbid")

    id: str | None = None
    name: str = ""
    type: str
    agent: str | None = None
    description: str | None = None

    @field_validator("type")
    @classmethod
    def type_not_empty(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("type is required")
        return v


class WorkflowCreateRequest(BaseModel):
    """Request to create a workflow."""

    model_config = ConfigDict(extra="forbid")

    name: str
    description: str | None = None
    tasks: list[TaskSpec] = []
    file_ids: list[str] = []

    @field_validator("name")
    @classmethod
    def name_not_empty(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("name is required")
        return v


class WorkflowUpdateRequest(BaseModel):
    """Partial workflow update; omitted fields are left unchanged."""

    model_config = ConfigDict(extra="forbid")

    name: str | None = None
    description: str | None = None
    tasks: list[TaskSpec] | None = None
    file_ids: list[str] | None = None

    @field_validator("name", "file_ids")
    @classmethod
    def not_null(cls, v: Any) -> Any:
        # Only runs for supplied values; omitting the field keeps the default
        if v is None:
            raise ValueError("may be omitted but not null")
        return v


class TaskExecuteRequest(BaseModel):
    """Request to execute one task."""

    model_config = ConfigDict(extra="forbid")

    task_type: str | None = None
    input_data: Any = None
    config: dict[str, Any] = {}


class TemplateInstantiateRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str | None = None
    file_ids: list[str] = []


class WorkflowResponse(BaseModel):
    """Workflow with its task list."""

    model_config = ConfigDict(frozen=True)

    workflow_id: str
    name: str
    description: str | None = None
    tasks: list[Task]
    file_ids: list[str]
    status: str
    created_at: datetime
    updated_at: datetime
    error: str | None = None

    @classmethod
    def from_state(cls, state: WorkflowState) -> "WorkflowResponse":
        return cls(
            workflow_id=state.workflow_id,
            name=state.name,
            description=state.description,
            tasks=state.tasks,
            file_ids=state.file_ids,
            status=state.status.value,
            created_at=state.created_at,
            updated_at=state.updated_at,
            error=state.error,
        )


class WorkflowListResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    workflows: list[WorkflowResponse]


class TaskExecuteResponse(BaseModel):
    """Outcome of one task execution."""

    model_config = ConfigDict(frozen=True)

    message: str
    task_status: str
    task_progress: int
    result_id: str
    output: Any = None
    metrics: TaskMetrics


class WorkflowRunResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    workflow_id: str
    status: str
    executions: list[TaskExecuteResponse]


class ResultListResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    workflow_id: str
    results: list[WorkflowResult]


class SummaryResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    workflow_id: str
    summary: ResultsSummary


class TemplateListResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    templates: list[WorkflowTemplate] = Field(default_factory=list)


class ErrorResponse(BaseModel):
    """Error response."""

    model_config = ConfigDict(frozen=True)

    detail: str


class HealthResponse(BaseModel):
    """Health check response."""

    model_config = ConfigDict(frozen=True)

    status: str
