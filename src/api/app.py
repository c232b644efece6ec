"""FastAPI REST API for the workflow engine."""

import logging
import uuid

from fastapi import FastAPI, Header, HTTPException

from api.models import (
    ErrorResponse,
    HealthResponse,
    ResultListResponse,
    SummaryResponse,
    TaskExecuteRequest,
    TaskExecuteResponse,
    TaskSpec,
    TemplateInstantiateRequest,
    TemplateListResponse,
    WorkflowCreateRequest,
    WorkflowListResponse,
    WorkflowResponse,
    WorkflowRunResponse,
    WorkflowUpdateRequest,
)
from models.state import Task, TaskExecution
from services.results_summary import summarize_results
from services.state_store import (
    RedisWorkflowStore,
    TaskNotFoundError,
    WorkflowNotFoundError,
)
from services.templates import BUILTIN_TEMPLATES, get_template
from services.workflow_engine import (
    InputResolutionError,
    TaskExecutionError,
    WorkflowEngine,
)

logger = logging.getLogger(__name__)

OWNER_HEADER = "X-Owner-Id"


def _new_workflow_id() -> str:
    return f"wf-{uuid.uuid4().hex[:12]}"


def _to_task(task_spec: TaskSpec) -> Task:
    return Task(
        id=task_spec.id or f"task-{uuid.uuid4().hex[:12]}",
        name=task_spec.name or task_spec.type,
        type=task_spec.type,
        agent=task_spec.agent,
        description=task_spec.description,
    )


def _execution_response(execution: TaskExecution) -> TaskExecuteResponse:
    return TaskExecuteResponse(
        message=f"Task {execution.task_id} executed successfully",
        task_status=execution.status.value,
        task_progress=execution.progress,
        result_id=execution.result_id,
        output=execution.output,
        metrics=execution.metrics,
    )


class OrchestratorAPI:
    """REST API for workflow management and task execution."""

    def __init__(self, engine: WorkflowEngine, workflow_store: RedisWorkflowStore):
        """Initialize API with dependencies."""
        if engine is None:
            raise ValueError("engine is required")
        if workflow_store is None:
            raise ValueError("workflow_store is required")

        self._engine = engine
        self._store = workflow_store

    def _get_workflow(self, workflow_id: str, owner_id: str | None):
        try:
            return self._store.get_workflow(workflow_id, owner_id)
        except WorkflowNotFoundError:
            raise HTTPException(status_code=404, detail="Workflow not found")

    def create_app(self) -> FastAPI:
        """Create FastAPI application."""
        app = FastAPI(
            title="Tabular Workflow Engine API",
            description="Runs analyze, clean, merge, validate and report stages over spreadsheet data",
            version="1.0.0",
        )

        @app.post(
            "/workflows",
            status_code=201,
            response_model=WorkflowResponse,
        )
        def create_workflow(
            request: WorkflowCreateRequest,
            owner_id: str | None = Header(default=None, alias=OWNER_HEADER),
        ) -> WorkflowResponse:
            """Create a draft workflow."""
            workflow_id = _new_workflow_id()
            state = self._store.create_workflow(
                workflow_id,
                name=request.name,
                owner_id=owner_id,
                tasks=[_to_task(t) for t in request.tasks],
                file_ids=request.file_ids,
                description=request.description,
            )
            logger.info(f"Created workflow {workflow_id} with {len(state.tasks)} tasks")
            return WorkflowResponse.from_state(state)

        @app.get("/workflows", response_model=WorkflowListResponse)
        def list_workflows(
            owner_id: str | None = Header(default=None, alias=OWNER_HEADER),
        ) -> WorkflowListResponse:
            """List workflows, newest first."""
            workflows = self._store.list_workflows(owner_id)
            return WorkflowListResponse(
                workflows=[WorkflowResponse.from_state(w) for w in workflows]
            )

        @app.get(
            "/workflows/{workflow_id}",
            response_model=WorkflowResponse,
            responses={404: {"model": ErrorResponse}},
        )
        def get_workflow(
            workflow_id: str,
            owner_id: str | None = Header(default=None, alias=OWNER_HEADER),
        ) -> WorkflowResponse:
            """Get a workflow with its tasks."""
            return WorkflowResponse.from_state(self._get_workflow(workflow_id, owner_id))

        @app.put(
            "/workflows/{workflow_id}",
            response_model=WorkflowResponse,
            responses={404: {"model": ErrorResponse}},
        )
        def update_workflow(
            workflow_id: str,
            request: WorkflowUpdateRequest,
            owner_id: str | None = Header(default=None, alias=OWNER_HEADER),
        ) -> WorkflowResponse:
            """Update name, description, tasks or files of a workflow."""
            self._get_workflow(workflow_id, owner_id)

            changes = request.model_dump(exclude_unset=True, exclude={"tasks"})
            if request.tasks is not None:
                changes["tasks"] = [_to_task(t).model_dump() for t in request.tasks]

            state = self._store.update_workflow(workflow_id, **changes)
            return WorkflowResponse.from_state(state)

        @app.delete(
            "/workflows/{workflow_id}",
            responses={404: {"model": ErrorResponse}},
        )
        def delete_workflow(
            workflow_id: str,
            owner_id: str | None = Header(default=None, alias=OWNER_HEADER),
        ) -> dict:
            """Delete a workflow and its results."""
            self._get_workflow(workflow_id, owner_id)
            self._store.delete_workflow(workflow_id)
            return {"status": "deleted"}

        @app.post(
            "/workflows/{workflow_id}/execute",
            response_model=WorkflowResponse,
            responses={404: {"model": ErrorResponse}},
        )
        def start_workflow(
            workflow_id: str,
            owner_id: str | None = Header(default=None, alias=OWNER_HEADER),
        ) -> WorkflowResponse:
            """Mark a workflow as running before its tasks are executed."""
            try:
                state = self._engine.start_workflow(workflow_id, owner_id)
            except WorkflowNotFoundError:
                raise HTTPException(status_code=404, detail="Workflow not found")
            return WorkflowResponse.from_state(state)

        @app.post(
            "/workflows/{workflow_id}/tasks/{task_id}/execute",
            response_model=TaskExecuteResponse,
            responses={
                404: {"model": ErrorResponse},
                422: {"model": ErrorResponse},
                500: {"model": ErrorResponse},
            },
        )
        def execute_task(
            workflow_id: str,
            task_id: str,
            request: TaskExecuteRequest,
            owner_id: str | None = Header(default=None, alias=OWNER_HEADER),
        ) -> TaskExecuteResponse:
            """Execute one task of a workflow."""
            try:
                execution = self._engine.execute_task(
                    workflow_id,
                    task_id,
                    task_type=request.task_type,
                    input_data=request.input_data,
                    config=request.config,
                    owner_id=owner_id,
                )
            except WorkflowNotFoundError:
                raise HTTPException(status_code=404, detail="Workflow not found")
            except TaskNotFoundError:
                raise HTTPException(status_code=404, detail="Task not found")
            except InputResolutionError as e:
                raise HTTPException(status_code=422, detail=str(e))
            except TaskExecutionError as e:
                raise HTTPException(status_code=500, detail=f"Failed to execute task: {e}")

            return _execution_response(execution)

        @app.post(
            "/workflows/{workflow_id}/run",
            response_model=WorkflowRunResponse,
            responses={
                404: {"model": ErrorResponse},
                422: {"model": ErrorResponse},
                500: {"model": ErrorResponse},
            },
        )
        def run_workflow(
            workflow_id: str,
            owner_id: str | None = Header(default=None, alias=OWNER_HEADER),
        ) -> WorkflowRunResponse:
            """Run all outstanding tasks of a workflow in order."""
            try:
                executions = self._engine.run_workflow(workflow_id, owner_id)
            except WorkflowNotFoundError:
                raise HTTPException(status_code=404, detail="Workflow not found")
            except InputResolutionError as e:
                raise HTTPException(status_code=422, detail=str(e))
            except TaskExecutionError as e:
                raise HTTPException(status_code=500, detail=f"Failed to execute task: {e}")

            state = self._store.get_workflow(workflow_id)
            return WorkflowRunResponse(
                workflow_id=workflow_id,
                status=state.status.value,
                executions=[_execution_response(e) for e in executions],
            )

        @app.get(
            "/workflows/{workflow_id}/results",
            response_model=ResultListResponse,
            responses={404: {"model": ErrorResponse}},
        )
        def list_results(
            workflow_id: str,
            owner_id: str | None = Header(default=None, alias=OWNER_HEADER),
        ) -> ResultListResponse:
            """Task results in recording order."""
            self._get_workflow(workflow_id, owner_id)
            return ResultListResponse(
                workflow_id=workflow_id, results=self._store.list_results(workflow_id)
            )

        @app.get(
            "/workflows/{workflow_id}/summary",
            response_model=SummaryResponse,
            responses={404: {"model": ErrorResponse}},
        )
        def get_summary(
            workflow_id: str,
            owner_id: str | None = Header(default=None, alias=OWNER_HEADER),
        ) -> SummaryResponse:
            """Aggregated metrics over the workflow's result history."""
            state = self._get_workflow(workflow_id, owner_id)
            summary = summarize_results(self._store.list_results(workflow_id), state.tasks)
            return SummaryResponse(workflow_id=workflow_id, summary=summary)

        @app.get("/templates", response_model=TemplateListResponse)
        def list_templates() -> TemplateListResponse:
            """Built-in workflow templates."""
            return TemplateListResponse(templates=list(BUILTIN_TEMPLATES))

        @app.post(
            "/templates/{template_id}/workflows",
            status_code=201,
            response_model=WorkflowResponse,
            responses={404: {"model": ErrorResponse}},
        )
        def instantiate_template(
            template_id: str,
            request: TemplateInstantiateRequest,
            owner_id: str | None = Header(default=None, alias=OWNER_HEADER),
        ) -> WorkflowResponse:
            """Create a draft workflow from a template."""
            template = get_template(template_id)
            if template is None:
                raise HTTPException(status_code=404, detail="Template not found")

            state = self._store.create_workflow(
                _new_workflow_id(),
                name=request.name or template.name,
                owner_id=owner_id,
                tasks=template.instantiate_tasks(),
                file_ids=request.file_ids,
                description=template.description,
            )
            return WorkflowResponse.from_state(state)

        @app.get("/health", response_model=HealthResponse)
        def health_check() -> HealthResponse:
            """Health check endpoint."""
            return HealthResponse(status="ok")

        return app
