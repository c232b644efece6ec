"""Redis-based store for workflows, their task lists and task results."""

import logging
from datetime import datetime, timezone
from typing import Any

from redis import Redis

from models.state import Task, WorkflowResult, WorkflowState, WorkflowStatus

logger = logging.getLogger(__name__)


class WorkflowNotFoundError(Exception):
    """Raised when workflow is not found."""

    def __init__(self, workflow_id: str):
        self.workflow_id = workflow_id
        super().__init__(f"Workflow not found: {workflow_id}")


class TaskNotFoundError(Exception):
    """Raised when task is not found."""

    def __init__(self, workflow_id: str, task_id: str):
        self.workflow_id = workflow_id
        self.task_id = task_id
        super().__init__(f"Task not found: {workflow_id}/{task_id}")


class RedisWorkflowStore:
    """Manages workflow state and result history in Redis."""

    def __init__(self, redis_client: Redis):
        if redis_client is None:
            raise ValueError("redis_client is required")
        self._redis = redis_client

    def _workflow_key(self, workflow_id: str) -> str:
        return f"workflow:{workflow_id}"

    def _results_key(self, workflow_id: str) -> str:
        return f"workflow:{workflow_id}:results"

    def _index_key(self) -> str:
        return "workflows"

    def _utc_now(self) -> datetime:
        return datetime.now(timezone.utc)

    def create_workflow(
        self,
        workflow_id: str,
        name: str = "",
        owner_id: str | None = None,
        tasks: list[Task] | None = None,
        file_ids: list[str] | None = None,
        description: str | None = None,
    ) -> WorkflowState:
        """Create a new workflow in draft state."""
        if not workflow_id:
            raise ValueError("workflow_id is required")

        key = self._workflow_key(workflow_id)
        if self._redis.exists(key):
            raise ValueError(f"Workflow already exists: {workflow_id}")

        now = self._utc_now()
        state = WorkflowState(
            workflow_id=workflow_id,
            owner_id=owner_id,
            name=name,
            description=description,
            tasks=tasks or [],
            file_ids=file_ids or [],
            status=WorkflowStatus.DRAFT,
            created_at=now,
            updated_at=now,
        )
        self._redis.set(key, state.model_dump_json())
        self._redis.sadd(self._index_key(), workflow_id)
        return state

    def get_workflow(self, workflow_id: str, owner_id: str | None = None) -> WorkflowState:
        """Get workflow state by ID, scoped to an owner when one is given."""
        if not workflow_id:
            raise ValueError("workflow_id is required")

        data = self._redis.get(self._workflow_key(workflow_id))
        if data is None:
            raise WorkflowNotFoundError(workflow_id)

        state = WorkflowState.model_validate_json(data)
        if owner_id is not None and state.owner_id not in (None, owner_id):
            raise WorkflowNotFoundError(workflow_id)
        return state

    def list_workflows(self, owner_id: str | None = None) -> list[WorkflowState]:
        """All workflows visible to the owner, newest first."""
        workflows = []
        for workflow_id in self._redis.smembers(self._index_key()):
            if isinstance(workflow_id, bytes):
                workflow_id = workflow_id.decode("utf-8")
            try:
                workflows.append(self.get_workflow(workflow_id, owner_id))
            except WorkflowNotFoundError:
                continue
        return sorted(workflows, key=lambda w: w.created_at, reverse=True)

    def update_workflow(self, workflow_id: str, **changes: Any) -> WorkflowState:
        """Apply field changes atomically (optimistic WATCH/MULTI)."""
        if not workflow_id:
            raise ValueError("workflow_id is required")

        key = self._workflow_key(workflow_id)

        def apply(pipe) -> WorkflowState:
            data = pipe.get(key)
            if data is None:
                raise WorkflowNotFoundError(workflow_id)
            state = WorkflowState.model_validate_json(data)
            updated = WorkflowState.model_validate(
                {
                    **state.model_dump(),
                    **changes,
                    "updated_at": self._utc_now(),
                }
            )
            pipe.multi()
            pipe.set(key, updated.model_dump_json())
            return updated

        return self._redis.transaction(apply, key, value_from_callable=True)

    def save_tasks(self, workflow_id: str, tasks: list[Task]) -> WorkflowState:
        """Replace the workflow's task list."""
        return self.update_workflow(workflow_id, tasks=[t.model_dump() for t in tasks])

    def set_workflow_status(
        self,
        workflow_id: str,
        status: WorkflowStatus,
        error: str | None = None,
    ) -> WorkflowState:
        """Update workflow status."""
        return self.update_workflow(workflow_id, status=status, error=error)

    def append_result(self, result: WorkflowResult) -> None:
        """Append a task result to the workflow's history."""
        self._redis.rpush(self._results_key(result.workflow_id), result.model_dump_json())

    def list_results(self, workflow_id: str) -> list[WorkflowResult]:
        """Results for a workflow in the order they were recorded."""
        if not workflow_id:
            raise ValueError("workflow_id is required")

        items = self._redis.lrange(self._results_key(workflow_id), 0, -1)
        return [WorkflowResult.model_validate_json(item) for item in items]

    def delete_workflow(self, workflow_id: str) -> None:
        """Delete workflow and its results."""
        if not workflow_id:
            raise ValueError("workflow_id is required")

        self._redis.delete(self._results_key(workflow_id))
        self._redis.delete(self._workflow_key(workflow_id))
        self._redis.srem(self._index_key(), workflow_id)
