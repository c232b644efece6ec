"""Unit tests for result aggregation."""

from datetime import datetime, timezone

import pytest

from models.state import Task, TaskMetrics, TaskStatus, WorkflowResult
from services.results_summary import categorize_error, summarize_results


def make_result(
    task_id: str,
    records: int,
    errors: list[str] | None = None,
    day: int = 1,
    status: TaskStatus = TaskStatus.COMPLETED,
) -> WorkflowResult:
    at = datetime(2024, 5, day, 12, tzinfo=timezone.utc)
    return WorkflowResult(
        result_id=f"r-{task_id}-{day}",
        workflow_id="wf-1",
        task_id=task_id,
        status=status,
        error=errors,
        metrics=TaskMetrics(records_processed=records, errors_found=errors),
        started_at=at,
        completed_at=at,
    )


@pytest.fixture
def tasks():
    return [
        Task(id="t1", type="analyze"),
        Task(id="t2", type="validate"),
        Task(id="t3", type="custom"),
    ]


class TestCategorizeError:
    """Tests for keyword categorization."""

    @pytest.mark.parametrize(
        "error,category",
        [
            ("Row 1, Column 'A': Empty or missing value.", "Missing Data"),
            ("Duplicate Customer_ID found: 'C1'", "Duplicates"),
            ("Invalid or unparseable date format ('x').", "Formatting Issues"),
            ("Range violation: Age (12) is out of expected range (18-100).", "Outliers/Range"),
            ("Schema inconsistency detected after harmonization", "Schema Inconsistency"),
            ("Reference integrity: Invalid Region 'Mars'.", "Validation Errors"),
            ("Something odd", "Other"),
        ],
    )
    def test_categories(self, error, category):
        assert categorize_error(error) == category


class TestSummarizeResults:
    """Tests for summarize_results."""

    def test_totals(self, tasks):
        summary = summarize_results(
            [
                make_result("t1", 10, ["Row 1, Column 'A': Empty or missing value."]),
                make_result("t2", 5, ["Duplicate Customer_ID found: 'C1'", "Odd"], day=2),
            ],
            tasks,
        )
        assert summary.total_completed_tasks == 2
        assert summary.total_records_processed == 15
        assert summary.total_errors_found == 3

    def test_error_distribution_percentages(self, tasks):
        summary = summarize_results(
            [
                make_result(
                    "t1",
                    1,
                    [
                        "Row 1, Column 'A': Empty or missing value.",
                        "Row 2, Column 'A': Empty or missing value.",
                        "Duplicate Customer_ID found: 'C1'",
                        "Odd",
                    ],
                )
            ],
            tasks,
        )
        shares = {share.name: share.value for share in summary.error_distribution}
        assert shares == {"Missing Data": 50.0, "Duplicates": 25.0, "Other": 25.0}

    def test_trends_grouped_by_day(self, tasks):
        summary = summarize_results(
            [
                make_result("t1", 1, day=2),
                make_result("t2", 1, day=1),
                make_result("t1", 1, day=2, status=TaskStatus.FAILED),
            ],
            tasks,
        )
        assert [(t.date, t.completed, t.failed) for t in summary.processing_trends] == [
            ("2024-05-01", 1, 0),
            ("2024-05-02", 1, 1),
        ]

    def test_non_stage_tasks_ignored(self, tasks):
        summary = summarize_results(
            [make_result("t3", 100, ["Odd"]), make_result("gone", 7)], tasks
        )
        assert summary.total_completed_tasks == 0
        assert summary.total_records_processed == 0
        assert summary.error_distribution == []
        assert summary.processing_trends == []

    def test_empty(self):
        summary = summarize_results([], [])
        assert summary.total_errors_found == 0
