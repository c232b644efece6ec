"""Stage output models."""

from typing import Any

from pydantic import BaseModel

from models.dataset import Dataset


class AnalyzedDataset(Dataset):
    """Dataset annotated with profiling issues."""

    file_name: str
    analysis_issues: list[str] = []
    summary: str = ""


class CleaningReport(BaseModel):
    """Per-dataset change log produced by the cleaner."""

    file_name: str
    original_row_count: int
    cleaned_row_count: int
    changes_made: int
    issues_found: int
    details: list[str] = []


class CleanedDataset(Dataset):
    """Dataset after cell-level repair rules."""

    cleaning_report: CleaningReport


class MergedDataset(Dataset):
    """Union of several datasets with non-blocking merge warnings."""

    merge_issues: list[str] = []


class ValidationIssue(BaseModel):
    """Issues collected for one invalid row (1-based row number)."""

    row: int
    issues: list[str]
    data: dict[str, Any]


class ValidatedDataset(Dataset):
    """Valid rows of a dataset plus the issues of the rejected ones."""

    message: str = ""
    summary: str = ""
    valid_records_count: int
    invalid_records_count: int
    validation_issues: list[ValidationIssue] = []


class ChartPoint(BaseModel):
    label: str
    value: float


class Chart(BaseModel):
    type: str
    title: str
    data: list[ChartPoint] = []


class ReportOutput(Dataset):
    """Aggregated metrics and chart series for a dataset."""

    report_title: str
    generation_date: str
    total_processed_records: int
    summary_text: str
    charts: list[Chart] = []
    report_issues: list[str] = []
