# API package

from api.app import OrchestratorAPI
from api.models import (
    ErrorResponse,
    HealthResponse,
    ResultListResponse,
    SummaryResponse,
    TaskExecuteRequest,
    TaskExecuteResponse,
    TaskSpec,
    TemplateListResponse,
    WorkflowCreateRequest,
    WorkflowListResponse,
    WorkflowResponse,
    WorkflowRunResponse,
    WorkflowUpdateRequest,
)

__all__ = [
    "ErrorResponse",
    "HealthResponse",
    "OrchestratorAPI",
    "ResultListResponse",
    "SummaryResponse",
    "TaskExecuteRequest",
    "TaskExecuteResponse",
    "TaskSpec",
    "TemplateListResponse",
    "WorkflowCreateRequest",
    "WorkflowListResponse",
    "WorkflowResponse",
    "WorkflowRunResponse",
    "WorkflowUpdateRequest",
]
