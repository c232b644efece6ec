"""Aggregate a dataset into summary metrics and chart series."""

import logging
from datetime import datetime, timezone
from typing import Any

from dateutil.relativedelta import relativedelta

from models.dataset import Dataset
from models.outputs import Chart, ChartPoint, ReportOutput
from stages.base import StageResult
from stages.cells import format_date, is_blank, parse_date, to_number

logger = logging.getLogger(__name__)

REVENUE_COLUMN = "Revenue_Amount"
PRODUCT_COLUMN = "Product_Name"
DATE_COLUMN = "Transaction_Date"

# Placeholder distribution shown until region data is wired into reports
EXAMPLE_DISTRIBUTION = [
    ChartPoint(label="Region A", value=40),
    ChartPoint(label="Region B", value=60),
]


class DatasetReporter:
    """Builds a sales report from a (typically validated) dataset."""

    def report(self, dataset: Dataset, now: datetime | None = None) -> ReportOutput:
        now = now or datetime.now(timezone.utc)
        if now.tzinfo is None:
            now = now.replace(tzinfo=timezone.utc)

        headers = dataset.headers
        rows = dataset.aligned_rows()
        revenue_idx = headers.index(REVENUE_COLUMN) if REVENUE_COLUMN in headers else None

        revenues = [to_number(row[revenue_idx]) for row in rows] if revenue_idx is not None else []
        total_revenue = sum(value for value in revenues if value is not None)

        product_revenue: dict[str, float] = {}
        if revenue_idx is not None and PRODUCT_COLUMN in headers:
            product_idx = headers.index(PRODUCT_COLUMN)
            for row, revenue in zip(rows, revenues):
                product = row[product_idx]
                if revenue is None or is_blank(product):
                    continue
                key = str(product)
                product_revenue[key] = product_revenue.get(key, 0.0) + revenue

        issues = []
        if rows and total_revenue == 0 and any(v is not None and v > 0 for v in revenues):
            issues.append(
                "Calculated total revenue is 0 despite records with positive revenue "
                "existing. Check aggregation logic."
            )

        freshness = self._freshness_issue(headers, rows, now)
        if freshness:
            issues.append(freshness)

        return ReportOutput(
            name=dataset.name,
            headers=headers,
            rows=rows,
            report_title=f"Comprehensive Sales Report for {now.year}",
            generation_date=format_date(now),
            total_processed_records=len(rows),
            summary_text=(
                f"A detailed report generated from {len(rows)} records. "
                f"Total estimated revenue: ${total_revenue:.2f}."
            ),
            charts=[
                Chart(
                    type="bar",
                    title="Revenue by Product",
                    data=[
                        ChartPoint(label=label, value=value)
                        for label, value in product_revenue.items()
                    ],
                ),
                Chart(
                    type="pie",
                    title="Sales Distribution (Example)",
                    data=list(EXAMPLE_DISTRIBUTION),
                ),
            ],
            report_issues=issues,
            metadata={
                **dataset.metadata,
                "report_generated": True,
                "total_revenue": total_revenue,
                "issues_found": len(issues),
            },
        )

    def run(self, dataset: Dataset, now: datetime | None = None) -> StageResult:
        report = self.report(dataset, now)
        logger.info(
            f"Report generated for {report.total_processed_records} records "
            f"({len(report.report_issues)} issues)"
        )
        return StageResult(
            output=report,
            records_processed=report.total_processed_records,
            errors_found=list(report.report_issues),
        )

    def _freshness_issue(
        self, headers: list[str], rows: list[list[Any]], now: datetime
    ) -> str | None:
        if DATE_COLUMN not in headers:
            return None
        idx = headers.index(DATE_COLUMN)
        dates = [parsed for parsed in (parse_date(row[idx]) for row in rows) if parsed]
        if not dates:
            return None
        latest = max(dates)
        if latest < now - relativedelta(months=1):
            return (
                f"Data freshness alert: Latest record date ({format_date(latest)}) "
                "is older than one month."
            )
        return None
