"""Unit tests for DatasetReporter."""

from datetime import datetime, timezone

import pytest

from models.dataset import Dataset
from stages.reporter import DatasetReporter

NOW = datetime(2021, 3, 15, tzinfo=timezone.utc)


@pytest.fixture
def reporter():
    return DatasetReporter()


@pytest.fixture
def sales():
    return Dataset(
        headers=["Product_Name", "Revenue_Amount", "Transaction_Date"],
        rows=[
            ["Widget", 100, "2021-03-01"],
            ["Gadget", "50.5", "2021-03-10"],
            ["Widget", "n/a", "2021-02-01"],
        ],
    )


class TestDatasetReporter:
    """Tests for report aggregation."""

    def test_totals(self, reporter, sales):
        report = reporter.report(sales, NOW)
        assert report.total_processed_records == 3
        assert report.metadata["total_revenue"] == 150.5
        assert report.summary_text == (
            "A detailed report generated from 3 records. Total estimated revenue: $150.50."
        )
        assert report.report_issues == []

    def test_title_and_date(self, reporter, sales):
        report = reporter.report(sales, NOW)
        assert report.report_title == "Comprehensive Sales Report for 2021"
        assert report.generation_date == "2021-03-15"

    def test_revenue_by_product_chart(self, reporter, sales):
        bar, pie = reporter.report(sales, NOW).charts
        assert bar.type == "bar"
        assert bar.title == "Revenue by Product"
        assert [(p.label, p.value) for p in bar.data] == [("Widget", 100), ("Gadget", 50.5)]
        assert pie.type == "pie"
        assert [p.value for p in pie.data] == [40, 60]

    def test_stale_data_flagged(self, reporter, sales):
        report = reporter.report(sales, datetime(2021, 6, 1, tzinfo=timezone.utc))
        assert report.report_issues == [
            "Data freshness alert: Latest record date (2021-03-10) is older than one month."
        ]

    def test_naive_now_treated_as_utc(self, reporter, sales):
        report = reporter.report(sales, datetime(2021, 3, 15))
        assert report.report_issues == []

    def test_aggregation_inconsistency(self, reporter):
        report = reporter.report(
            Dataset(headers=["Revenue_Amount"], rows=[[10], [-10]]), NOW
        )
        assert len(report.report_issues) == 1
        assert report.report_issues[0].startswith("Calculated total revenue is 0")

    def test_without_known_columns(self, reporter):
        report = reporter.report(Dataset(headers=["A"], rows=[["x"]]), NOW)
        assert report.metadata["total_revenue"] == 0
        assert report.charts[0].data == []
        assert report.report_issues == []

    def test_run(self, reporter, sales):
        result = reporter.run(sales, NOW)
        assert result.records_processed == 3
        assert result.errors_found == []
        assert result.output.metadata["report_generated"] is True
