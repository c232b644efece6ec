"""Workflow engine for orchestrating task execution."""

import logging
import time
import uuid
from collections.abc import Mapping
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ValidationError
from pydantic_core import to_jsonable_python

from models.dataset import Dataset, FileReference
from models.state import (
    StageType,
    Task,
    TaskExecution,
    TaskMetrics,
    TaskStatus,
    WorkflowResult,
    WorkflowState,
    WorkflowStatus,
)
from services.file_store import RedisFileStore
from services.state_store import RedisWorkflowStore, TaskNotFoundError
from stages.analyzer import DatasetAnalyzer
from stages.base import StageResult
from stages.cleaner import DatasetCleaner
from stages.harmonizer import SchemaHarmonizer
from stages.merger import DatasetMerger
from stages.reporter import DatasetReporter
from stages.validator import DatasetValidator

logger = logging.getLogger(__name__)

PROGRESS_STEPS = (0, 20, 40, 60, 80, 100)


class TaskExecutionError(Exception):
    """Raised when a task cannot be executed; the task is marked failed."""

    def __init__(self, workflow_id: str, task_id: str, message: str):
        self.workflow_id = workflow_id
        self.task_id = task_id
        super().__init__(f"Task {workflow_id}/{task_id} failed: {message}")


class InputResolutionError(TaskExecutionError):
    """Raised when none of a task's referenced files could be resolved."""


class WorkflowEngine:
    """Runs workflow tasks one at a time against the stage implementations."""

    def __init__(
        self,
        workflow_store: RedisWorkflowStore,
        file_store: RedisFileStore,
        progress_delay: float = 0.0,
        fetch_workers: int = 4,
    ):
        if workflow_store is None:
            raise ValueError("workflow_store is required")
        if file_store is None:
            raise ValueError("file_store is required")
        if progress_delay < 0:
            raise ValueError("progress_delay must be non-negative")
        if fetch_workers <= 0:
            raise ValueError("fetch_workers must be positive")

        self._store = workflow_store
        self._file_store = file_store
        self._progress_delay = progress_delay
        self._fetch_workers = fetch_workers

        self._harmonizer = SchemaHarmonizer()
        self._merger = DatasetMerger(self._harmonizer)
        self._analyzer = DatasetAnalyzer()
        self._cleaner = DatasetCleaner()
        self._validator = DatasetValidator()
        self._reporter = DatasetReporter()

    def _utc_now(self) -> datetime:
        return datetime.now(timezone.utc)

    def start_workflow(self, workflow_id: str, owner_id: str | None = None) -> WorkflowState:
        """Mark a workflow as running; tasks are then executed by the caller."""
        if not workflow_id:
            raise ValueError("workflow_id is required")

        self._store.get_workflow(workflow_id, owner_id)
        logger.info(f"Workflow {workflow_id} started")
        return self._store.set_workflow_status(workflow_id, WorkflowStatus.RUNNING)

    def get_workflow_status(self, workflow_id: str, owner_id: str | None = None) -> WorkflowState:
        """Get current workflow state."""
        if not workflow_id:
            raise ValueError("workflow_id is required")
        return self._store.get_workflow(workflow_id, owner_id)

    def execute_task(
        self,
        workflow_id: str,
        task_id: str,
        task_type: str | None = None,
        input_data: Any = None,
        config: dict[str, Any] | None = None,
        owner_id: str | None = None,
    ) -> TaskExecution:
        """Resolve input, run the task's stage, persist progress and the result."""
        if not workflow_id:
            raise ValueError("workflow_id is required")
        if not task_id:
            raise ValueError("task_id is required")

        workflow = self._store.get_workflow(workflow_id, owner_id)
        task = workflow.find_task(task_id)
        if task is None:
            raise TaskNotFoundError(workflow_id, task_id)

        task_type = task_type or task.type
        agent = (config or {}).get("agent") or task.agent
        # Terminal tasks keep their state; re-running only appends a new result
        terminal = task.status.is_terminal
        started_at = self._utc_now()
        logger.info(
            f"Executing task {task_id} ({task_type}, agent={agent}) of workflow {workflow_id}"
        )

        try:
            if workflow.status == WorkflowStatus.DRAFT:
                self._store.set_workflow_status(workflow_id, WorkflowStatus.RUNNING)
            if not terminal:
                self._set_task_state(workflow_id, task_id, TaskStatus.RUNNING, 0)

            data = self._resolve_input(input_data, workflow_id, task_id, owner_id)
            stage_result = self._dispatch(task_type, data)
            output = to_jsonable_python(stage_result.output)

            if not terminal:
                for progress in PROGRESS_STEPS[1:]:
                    self._set_task_state(workflow_id, task_id, TaskStatus.RUNNING, progress)
                    if self._progress_delay:
                        time.sleep(self._progress_delay)
                self._set_task_state(workflow_id, task_id, TaskStatus.COMPLETED, 100)

            errors = list(stage_result.errors_found)
            result = WorkflowResult(
                result_id=uuid.uuid4().hex,
                workflow_id=workflow_id,
                task_id=task_id,
                status=TaskStatus.COMPLETED,
                output=output,
                error=errors or None,
                metrics=TaskMetrics(
                    records_processed=stage_result.records_processed,
                    errors_found=errors or None,
                ),
                started_at=started_at,
                completed_at=self._utc_now(),
            )
            self._store.append_result(result)

            if not terminal:
                self._complete_workflow_if_done(workflow_id)
        except TaskExecutionError as e:
            logger.error(f"Task {task_id} of workflow {workflow_id} failed: {e}")
            self._fail_task(workflow_id, task_id, str(e), terminal)
            raise
        except Exception as e:
            logger.error(f"Task {task_id} of workflow {workflow_id} failed: {e}")
            self._fail_task(workflow_id, task_id, str(e), terminal)
            raise TaskExecutionError(workflow_id, task_id, str(e)) from e

        logger.info(
            f"Task {task_id} of workflow {workflow_id} completed: "
            f"{result.metrics.records_processed} records, {len(errors)} issues"
        )
        return TaskExecution(
            workflow_id=workflow_id,
            task_id=task_id,
            result_id=result.result_id,
            status=TaskStatus.COMPLETED,
            progress=100,
            output=output,
            metrics=result.metrics,
        )

    def run_workflow(self, workflow_id: str, owner_id: str | None = None) -> list[TaskExecution]:
        """Execute every outstanding task in order, chaining outputs to inputs.

        The first task receives the workflow's files. Completed tasks are not
        re-run; their latest result output feeds the next task instead. A failed
        task stops the run.
        """
        workflow = self.start_workflow(workflow_id, owner_id)
        data: Any = [{"id": file_id} for file_id in workflow.file_ids]
        latest_outputs = self._latest_outputs(workflow_id)
        executions = []

        for task in workflow.tasks:
            if task.status == TaskStatus.FAILED:
                error = TaskExecutionError(workflow_id, task.id, "task already failed")
                self._store.set_workflow_status(
                    workflow_id, WorkflowStatus.FAILED, error=str(error)
                )
                raise error
            if task.status == TaskStatus.COMPLETED:
                output = latest_outputs.get(task.id)
            else:
                execution = self.execute_task(
                    workflow_id,
                    task.id,
                    task.type,
                    data,
                    {"agent": task.agent, "description": task.description},
                    owner_id,
                )
                executions.append(execution)
                output = execution.output

            if output:
                data = output
            else:
                logger.warning(
                    f"Task {task.id} produced no output, next task reuses previous input"
                )

        self._complete_workflow_if_done(workflow_id)
        return executions

    def _latest_outputs(self, workflow_id: str) -> dict[str, Any]:
        outputs: dict[str, Any] = {}
        for result in sorted(self._store.list_results(workflow_id), key=lambda r: r.completed_at):
            outputs[result.task_id] = result.output
        return outputs

    def _resolve_input(
        self,
        input_data: Any,
        workflow_id: str,
        task_id: str,
        owner_id: str | None,
    ) -> Any:
        """Fetch referenced files; pass materialized data through unchanged."""
        if not self._is_file_references(input_data):
            return input_data

        refs = []
        for item in input_data:
            try:
                refs.append(FileReference.model_validate(item))
            except ValidationError:
                logger.warning(f"Task {task_id}: dropping malformed file reference {item!r}")
        if not refs:
            raise InputResolutionError(
                workflow_id, task_id, "none of the referenced files could be resolved"
            )

        logger.info(f"Task {task_id}: fetching {len(refs)} referenced files")

        workers = min(self._fetch_workers, len(refs))
        with ThreadPoolExecutor(max_workers=workers) as executor:
            # map() yields in submission order regardless of completion order
            fetched = list(
                executor.map(
                    lambda ref: self._file_store.fetch_dataset(ref.id, owner_id), refs
                )
            )

        datasets = []
        for ref, dataset in zip(refs, fetched):
            if dataset is None:
                logger.warning(f"Task {task_id}: dropping unresolved file {ref.id}")
                continue
            if dataset.name is None and ref.model_extra:
                name = ref.model_extra.get("original_name") or ref.model_extra.get("name")
                if name:
                    dataset = dataset.model_copy(update={"name": str(name)})
            datasets.append(dataset)

        if not datasets:
            raise InputResolutionError(
                workflow_id, task_id, "none of the referenced files could be resolved"
            )
        logger.info(f"Task {task_id}: resolved {len(datasets)} of {len(refs)} files")
        return datasets

    def _is_file_references(self, input_data: Any) -> bool:
        if not isinstance(input_data, list) or not input_data:
            return False
        return all(
            isinstance(item, Mapping)
            and "id" in item
            and "headers" not in item
            and "rows" not in item
            for item in input_data
        )

    def _dispatch(self, task_type: str, data: Any) -> StageResult:
        try:
            stage = StageType(task_type)
        except ValueError:
            logger.warning(f"Unknown task type '{task_type}', echoing input")
            return self._echo(task_type, data)

        if stage == StageType.ANALYZE:
            return self._analyzer.run(self._as_datasets(data))
        if stage == StageType.CLEAN:
            return self._cleaner.run(self._as_datasets(data))
        if stage == StageType.MERGE:
            return self._merger.run(self._as_datasets(data))
        if stage == StageType.VALIDATE:
            return self._validator.run(self._as_single_dataset(data))
        return self._reporter.run(self._as_single_dataset(data), self._utc_now())

    def _echo(self, task_type: str, data: Any) -> StageResult:
        size = len(data) if isinstance(data, (list, tuple)) else 0
        return StageResult(
            output={
                "message": f"Task {task_type} executed (simulated). Input size: {size}",
                "received_input": to_jsonable_python(data),
                "metadata": {"row_count": 0},
            },
            records_processed=size,
        )

    def _as_dataset(self, item: Any) -> Dataset:
        if isinstance(item, BaseModel):
            item = item.model_dump()
        return Dataset.model_validate(item)

    def _as_datasets(self, data: Any) -> list[Dataset]:
        if data is None:
            return []
        if isinstance(data, (list, tuple)):
            return [self._as_dataset(item) for item in data]
        return [self._as_dataset(data)]

    def _as_single_dataset(self, data: Any) -> Dataset:
        """Unwrap a single dataset; harmonize and merge several."""
        datasets = self._as_datasets(data)
        if not datasets:
            return Dataset()
        if len(datasets) == 1:
            return datasets[0]
        return self._merger.merge(self._harmonizer.harmonize(datasets))

    def _set_task_state(
        self,
        workflow_id: str,
        task_id: str,
        status: TaskStatus,
        progress: int,
    ) -> None:
        workflow = self._store.get_workflow(workflow_id)
        tasks: list[Task] = []
        for task in workflow.tasks:
            if task.id == task_id:
                task = task.model_copy(update={"status": status, "progress": progress})
            tasks.append(task)
        self._store.save_tasks(workflow_id, tasks)
        logger.debug(f"Workflow {workflow_id} - task {task_id}: {status.value} {progress}%")

    def _fail_task(self, workflow_id: str, task_id: str, error: str, terminal: bool) -> None:
        """Best-effort failure bookkeeping; never masks the original error."""
        try:
            if not terminal:
                self._set_task_state(workflow_id, task_id, TaskStatus.FAILED, 0)
            self._store.set_workflow_status(
                workflow_id, WorkflowStatus.FAILED, error=f"Task {task_id} failed: {error}"
            )
        except Exception as e:
            logger.error(
                f"Failed to record failure of task {task_id} in workflow {workflow_id}: {e}"
            )

    def _complete_workflow_if_done(self, workflow_id: str) -> None:
        workflow = self._store.get_workflow(workflow_id)
        if workflow.tasks and all(t.status == TaskStatus.COMPLETED for t in workflow.tasks):
            self._store.set_workflow_status(workflow_id, WorkflowStatus.COMPLETED)
            logger.info(f"Workflow {workflow_id} completed")
