"""Aggregate task result history into operational metrics."""

from collections import Counter

from pydantic import BaseModel

from models.state import StageType, Task, TaskStatus, WorkflowResult

# Checked in order; the first matching keyword group wins
ERROR_CATEGORIES: list[tuple[str, tuple[str, ...]]] = [
    ("Missing Data", ("missing", "null")),
    ("Duplicates", ("duplicate",)),
    ("Formatting Issues", ("format", "date")),
    ("Outliers/Range", ("outlier", "range")),
    ("Schema Inconsistency", ("schema", "header")),
    ("Validation Errors", ("invalid", "violation")),
]
OTHER_CATEGORY = "Other"


class ErrorShare(BaseModel):
    name: str
    value: float


class ProcessingTrend(BaseModel):
    date: str
    completed: int = 0
    failed: int = 0


class ResultsSummary(BaseModel):
    total_completed_tasks: int = 0
    total_records_processed: int = 0
    total_errors_found: int = 0
    error_distribution: list[ErrorShare] = []
    processing_trends: list[ProcessingTrend] = []


def categorize_error(error: str) -> str:
    """Bucket an issue string by keyword."""
    lowered = error.lower()
    for category, keywords in ERROR_CATEGORIES:
        if any(keyword in lowered for keyword in keywords):
            return category
    return OTHER_CATEGORY


def summarize_results(results: list[WorkflowResult], tasks: list[Task]) -> ResultsSummary:
    """Totals, error category shares (percent) and per-day completion trend.

    Only results of tasks with a stage implementation are counted. The engine
    records completed results only, so ``failed`` counts stay at zero unless
    another writer appends failed results to the store.
    """
    stage_types = {stage.value for stage in StageType}
    task_types = {task.id: task.type for task in tasks}

    summary = ResultsSummary()
    categories: Counter[str] = Counter()
    trends: dict[str, ProcessingTrend] = {}

    for result in results:
        if task_types.get(result.task_id) not in stage_types:
            continue

        day = result.completed_at.date().isoformat()
        trend = trends.setdefault(day, ProcessingTrend(date=day))
        if result.status == TaskStatus.COMPLETED:
            summary.total_completed_tasks += 1
            trend.completed += 1
        elif result.status == TaskStatus.FAILED:
            trend.failed += 1

        summary.total_records_processed += result.metrics.records_processed
        for error in result.metrics.errors_found or []:
            categories[categorize_error(error)] += 1

    summary.total_errors_found = sum(categories.values())
    if summary.total_errors_found:
        summary.error_distribution = [
            ErrorShare(name=name, value=count / summary.total_errors_found * 100)
            for name, count in categories.most_common()
        ]
    summary.processing_trends = [trends[day] for day in sorted(trends)]
    return summary
