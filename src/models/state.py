"""State models for workflow, task and result tracking."""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class WorkflowStatus(str, Enum):
    """Workflow execution status."""

    DRAFT = "draft"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


class TaskStatus(str, Enum):
    """Task execution status."""

    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (TaskStatus.COMPLETED, TaskStatus.FAILED)


class StageType(str, Enum):
    """Task types with a stage implementation behind them."""

    ANALYZE = "analyze"
    CLEAN = "clean"
    MERGE = "merge"
    VALIDATE = "validate"
    REPORT = "report"


class Task(BaseModel):
    """One configured stage invocation within a workflow."""

    id: str = Field(min_length=1)
    name: str = ""
    type: str
    agent: str | None = None
    description: str | None = None
    status: TaskStatus = TaskStatus.PENDING
    progress: int = Field(default=0, ge=0, le=100)


class WorkflowState(BaseModel):
    """Persistent state of a workflow."""

    workflow_id: str
    owner_id: str | None = None
    name: str = ""
    description: str | None = None
    tasks: list[Task] = []
    file_ids: list[str] = []
    status: WorkflowStatus = WorkflowStatus.DRAFT
    created_at: datetime
    updated_at: datetime
    error: str | None = None

    def find_task(self, task_id: str) -> Task | None:
        for task in self.tasks:
            if task.id == task_id:
                return task
        return None


class TaskMetrics(BaseModel):
    """Counts derived from a stage run."""

    records_processed: int = 0
    errors_found: list[str] | None = None


class WorkflowResult(BaseModel):
    """Record of one task execution. Never mutated after creation."""

    result_id: str
    workflow_id: str
    task_id: str
    status: TaskStatus
    output: Any = None
    error: list[str] | None = None
    metrics: TaskMetrics
    started_at: datetime
    completed_at: datetime


class TaskExecution(BaseModel):
    """What a caller gets back from executing one task."""

    workflow_id: str
    task_id: str
    result_id: str
    status: TaskStatus
    progress: int
    output: Any = None
    metrics: TaskMetrics
