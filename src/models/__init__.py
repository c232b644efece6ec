"""Models package."""

from models.dataset import Dataset, FileReference
from models.outputs import (
    AnalyzedDataset,
    Chart,
    ChartPoint,
    CleanedDataset,
    CleaningReport,
    MergedDataset,
    ReportOutput,
    ValidatedDataset,
    ValidationIssue,
)
from models.state import (
    StageType,
    Task,
    TaskMetrics,
    TaskStatus,
    WorkflowResult,
    WorkflowState,
    WorkflowStatus,
)

__all__ = [
    "AnalyzedDataset",
    "Chart",
    "ChartPoint",
    "CleanedDataset",
    "CleaningReport",
    "Dataset",
    "FileReference",
    "MergedDataset",
    "ReportOutput",
    "StageType",
    "Task",
    "TaskMetrics",
    "TaskStatus",
    "ValidatedDataset",
    "ValidationIssue",
    "WorkflowResult",
    "WorkflowState",
    "WorkflowStatus",
]
