# Services package

from services.file_store import RedisFileStore
from services.log_service import SizeAndTimeRotatingHandler, configure_logging
from services.results_summary import ResultsSummary, categorize_error, summarize_results
from services.state_store import (
    RedisWorkflowStore,
    TaskNotFoundError,
    WorkflowNotFoundError,
)
from services.templates import BUILTIN_TEMPLATES, WorkflowTemplate, get_template
from services.workflow_engine import (
    InputResolutionError,
    TaskExecutionError,
    WorkflowEngine,
)

__all__ = [
    "BUILTIN_TEMPLATES",
    "InputResolutionError",
    "RedisFileStore",
    "RedisWorkflowStore",
    "ResultsSummary",
    "SizeAndTimeRotatingHandler",
    "TaskExecutionError",
    "TaskNotFoundError",
    "WorkflowEngine",
    "WorkflowNotFoundError",
    "WorkflowTemplate",
    "categorize_error",
    "configure_logging",
    "get_template",
    "summarize_results",
]
