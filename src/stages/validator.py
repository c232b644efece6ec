"""Business-rule validation: partition rows into valid and invalid."""

import logging
from typing import Any

from models.dataset import Dataset
from models.outputs import ValidatedDataset, ValidationIssue
from stages.base import StageResult
from stages.cells import is_blank, is_missing, parse_date, to_number
from stages.rules import (
    AGE_MAX,
    AGE_MIN,
    CANCELLED_STATUS,
    SALARY_CAP,
    VALID_REGIONS,
    VALIDATION_RULES,
    ValidationRule,
)

logger = logging.getLogger(__name__)


class DatasetValidator:
    """Evaluates every rule on every row; a row with any issue is invalid."""

    def __init__(
        self,
        rules: dict[str, ValidationRule] | None = None,
        valid_regions: frozenset[str] | None = None,
    ):
        self._rules = dict(VALIDATION_RULES if rules is None else rules)
        self._valid_regions = VALID_REGIONS if valid_regions is None else valid_regions

    def validate(self, dataset: Dataset) -> ValidatedDataset:
        headers = dataset.headers
        rows = dataset.aligned_rows()
        columns = self._resolve_columns(headers)

        duplicate_ids = self._duplicate_customer_ids(rows, headers, columns)

        valid_rows: list[list[Any]] = []
        issues: list[ValidationIssue] = []
        for row_idx, row in enumerate(rows):
            row_object = dataset.row_as_dict(row)
            row_issues = self._row_issues(row, headers, row_object, columns)
            if row_idx in duplicate_ids:
                row_issues.append(duplicate_ids[row_idx])

            if row_issues:
                issues.append(
                    ValidationIssue(row=row_idx + 1, issues=row_issues, data=row_object)
                )
            else:
                valid_rows.append(row)

        return ValidatedDataset(
            name=dataset.name,
            headers=headers,
            rows=valid_rows,
            message=f"Validation completed for {len(rows)} records.",
            summary=f"{len(issues)} issues found. {len(valid_rows)} valid records.",
            valid_records_count=len(valid_rows),
            invalid_records_count=len(issues),
            validation_issues=issues,
            metadata={
                **dataset.metadata,
                "row_count": len(valid_rows),
                "validated": True,
                "valid_row_count": len(valid_rows),
                "invalid_row_count": len(issues),
            },
        )

    def run(self, dataset: Dataset) -> StageResult:
        validated = self.validate(dataset)
        logger.info(
            f"Validated {dataset.row_count} rows: {validated.valid_records_count} valid, "
            f"{validated.invalid_records_count} invalid"
        )
        return StageResult(
            output=validated,
            records_processed=dataset.row_count,
            errors_found=[
                issue for entry in validated.validation_issues for issue in entry.issues
            ],
        )

    def _resolve_columns(self, headers: list[str]) -> dict[ValidationRule, str]:
        """First header carrying each rule kind."""
        columns: dict[ValidationRule, str] = {}
        for header in headers:
            rule = self._rules.get(header)
            if rule is not None and rule not in columns:
                columns[rule] = header
        return columns

    def _row_issues(
        self,
        row: list[Any],
        headers: list[str],
        values: dict[str, Any],
        columns: dict[ValidationRule, str],
    ) -> list[str]:
        issues = [
            f"Missing value in column '{headers[idx]}'"
            for idx, cell in enumerate(row)
            if is_missing(cell)
        ]

        order_col = columns.get(ValidationRule.ORDER_DATE)
        delivery_col = columns.get(ValidationRule.DELIVERY_DATE)
        if order_col and delivery_col:
            ordered = parse_date(values[order_col])
            delivered = parse_date(values[delivery_col])
            if ordered is not None and delivered is not None and ordered >= delivered:
                issues.append(
                    f"Business rule violation: {order_col} ({values[order_col]}) "
                    f"is not before {delivery_col} ({values[delivery_col]})"
                )

        salary_col = columns.get(ValidationRule.SALARY_CAP)
        if salary_col:
            salary = to_number(values[salary_col])
            if salary is not None and salary > SALARY_CAP:
                issues.append(
                    f"Range violation: {salary_col} ({values[salary_col]}) exceeds $1M."
                )

        age_col = columns.get(ValidationRule.AGE_RANGE)
        if age_col:
            age = to_number(values[age_col])
            if age is not None and (age < AGE_MIN or age > AGE_MAX):
                issues.append(
                    f"Range violation: {age_col} ({values[age_col]}) is out of "
                    f"expected range ({AGE_MIN}-{AGE_MAX})."
                )

        status_col = columns.get(ValidationRule.STATUS)
        amount_col = columns.get(ValidationRule.AMOUNT)
        if status_col and amount_col:
            amount = to_number(values[amount_col])
            if (
                str(values[status_col]).strip().lower() == CANCELLED_STATUS
                and amount is not None
                and amount != 0
            ):
                issues.append(
                    f"Cross-column violation: {status_col} is 'Cancelled' but "
                    f"{amount_col} is not 0 ({values[amount_col]})."
                )

        region_col = columns.get(ValidationRule.REGION)
        if region_col:
            region = values[region_col]
            if isinstance(region, str) and region not in self._valid_regions:
                issues.append(f"Reference integrity: Invalid Region '{region}'.")

        manager_col = columns.get(ValidationRule.MANAGER)
        if region_col and manager_col:
            region = values[region_col]
            if not is_blank(region) and region != 0 and is_missing(values[manager_col]):
                issues.append(
                    f"Custom constraint: Region '{region}' has no manager assigned."
                )

        return issues

    def _duplicate_customer_ids(
        self,
        rows: list[list[Any]],
        headers: list[str],
        columns: dict[ValidationRule, str],
    ) -> dict[int, str]:
        """Row index -> issue for every repeated Customer_ID after the first."""
        column = columns.get(ValidationRule.CUSTOMER_ID)
        if column is None:
            return {}
        idx = headers.index(column)
        seen: set[str] = set()
        duplicates: dict[int, str] = {}
        for row_idx, row in enumerate(rows):
            value = row[idx]
            if is_blank(value):
                continue
            key = str(value)
            if key in seen:
                duplicates[row_idx] = f"Duplicate Customer_ID found: '{value}'"
            seen.add(key)
        return duplicates
