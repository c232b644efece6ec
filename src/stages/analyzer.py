"""Dataset profiling: missing values, header problems, mixed types, outliers."""

import json
import logging
from collections import Counter
from typing import Any

import pandas as pd

from models.dataset import Dataset
from models.outputs import AnalyzedDataset
from stages.base import StageResult
from stages.cells import (
    as_plain_number,
    excel_serial_to_date,
    is_blank,
    is_numeric,
    parse_date,
)

logger = logging.getLogger(__name__)

NUMERIC_TYPES = frozenset({"number", "excel_date_number"})
OUTLIER_MIN_VALUES = 10
OUTLIER_SIGMA = 3


def classify_cell(cell: Any) -> set[str]:
    """Type tags for a non-blank cell."""
    if isinstance(cell, bool):
        return {"boolean"}
    if is_numeric(cell):
        tags = {"number"}
        if excel_serial_to_date(cell) is not None:
            tags.add("excel_date_number")
        return tags
    if parse_date(cell) is not None:
        return {"date"}
    return {"string"}


def is_mixed(types: set[str]) -> bool:
    """More than one kind once numeric-adjacent tags collapse into one."""
    kinds = {"number" if t in NUMERIC_TYPES else t for t in types}
    return len(kinds) > 1


def find_outliers(values: list[float], sigma: float = OUTLIER_SIGMA) -> list[int]:
    """Positions of values further than sigma sample deviations from the mean."""
    series = pd.Series(values, dtype="float64")
    std = series.std(ddof=1)
    if pd.isna(std) or std == 0:
        return []
    mask = (series - series.mean()).abs() > sigma * std
    return [int(pos) for pos in series.index[mask]]


class DatasetAnalyzer:
    """Profiles datasets and lists human-readable issues per dataset."""

    def analyze(self, datasets: list[Dataset]) -> list[AnalyzedDataset]:
        return [
            self.analyze_one(dataset, idx) for idx, dataset in enumerate(datasets)
        ]

    def analyze_one(self, dataset: Dataset, index: int = 0) -> AnalyzedDataset:
        label = dataset.label or str(index + 1)
        headers = dataset.headers
        rows = dataset.aligned_rows()
        issues: list[str] = []

        issues.extend(self._header_issues(headers, label))

        column_types: list[set[str]] = [set() for _ in headers]
        # Per column: (row index, numeric value)
        column_numbers: list[list[tuple[int, float]]] = [[] for _ in headers]

        for row_idx, row in enumerate(rows):
            for col_idx, cell in enumerate(row):
                header = headers[col_idx]
                if is_blank(cell):
                    issues.append(
                        f"Row {row_idx + 1}, Column '{header}': Empty or missing value."
                    )
                    continue
                column_types[col_idx].update(classify_cell(cell))
                if is_numeric(cell):
                    column_numbers[col_idx].append((row_idx, float(cell)))

        for col_idx, header in enumerate(headers):
            types = column_types[col_idx]
            if is_mixed(types):
                issues.append(
                    f"File {label}, Column '{header}': Mixed data types detected: "
                    f"{', '.join(sorted(types))}."
                )

        for col_idx, header in enumerate(headers):
            numbers = column_numbers[col_idx]
            if len(numbers) <= OUTLIER_MIN_VALUES:
                continue
            for pos in find_outliers([value for _, value in numbers]):
                row_idx, value = numbers[pos]
                issues.append(
                    f"File {label}, Row {row_idx + 1}, Column '{header}': "
                    f"Statistical outlier detected (Value: {as_plain_number(value)})."
                )

        issues.extend(self._duplicate_row_issues(rows, label))

        return AnalyzedDataset(
            name=dataset.name,
            file_name=dataset.label or f"File {index + 1}",
            headers=headers,
            rows=rows,
            metadata={
                **dataset.metadata,
                "analyzed": True,
                "issues_found": len(issues),
                "row_count": len(rows),
            },
            analysis_issues=issues,
            summary=f"Analysis for {len(rows)} records completed. Issues: {len(issues)}.",
        )

    def run(self, datasets: list[Dataset]) -> StageResult:
        reports = self.analyze(datasets)
        errors = [issue for report in reports for issue in report.analysis_issues]
        logger.info(f"Analyzed {len(reports)} datasets, {len(errors)} issues found")
        return StageResult(
            output=reports,
            records_processed=sum(report.row_count for report in reports),
            errors_found=errors,
        )

    def _header_issues(self, headers: list[str], label: str) -> list[str]:
        if not headers:
            return [f"File {label}: No headers found."]
        issues = []
        if any(not header.strip() for header in headers):
            issues.append(f"File {label}: Empty column header detected.")
        duplicates = [h for h, count in Counter(headers).items() if count > 1]
        if duplicates:
            issues.append(
                f"File {label}: Duplicate column headers detected: {', '.join(duplicates)}."
            )
        return issues

    def _duplicate_row_issues(self, rows: list[list[Any]], label: str) -> list[str]:
        issues = []
        seen: set[str] = set()
        for row_idx, row in enumerate(rows):
            key = json.dumps(row, default=str)
            if key in seen:
                issues.append(f"File {label}: Duplicate record found at row {row_idx + 1}.")
            seen.add(key)
        return issues
