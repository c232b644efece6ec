"""Cell-level cleaning rules applied in a fixed order."""

import logging
import re
from typing import Any

from models.dataset import Dataset
from models.outputs import CleanedDataset, CleaningReport
from stages.base import StageResult
from stages.cells import (
    FILL_VALUE,
    as_plain_number,
    format_date,
    is_blank,
    parse_date,
    parse_number_prefix,
)
from stages.rules import (
    CLEANING_RULES,
    COUNTRY_ALIASES,
    ID_COLUMN,
    CleaningRule,
)

logger = logging.getLogger(__name__)

_NON_NUMERIC_CHARS = re.compile(r"[^0-9.\-]+")


class CellLog:
    """Change counter and log lines for one dataset."""

    def __init__(self):
        self.changes = 0
        self.details: list[str] = []

    def change(self, row_idx: int, header: str, message: str) -> None:
        self.changes += 1
        self.note(row_idx, header, message)

    def note(self, row_idx: int, header: str, message: str) -> None:
        self.details.append(f"Row {row_idx + 1}, Column '{header}': {message}")


class DatasetCleaner:
    """Normalizes cells and repairs common formatting problems.

    Rules run per cell in this order, each seeing the previous rule's result:

    1. strings are trimmed and lowercased
    2. date columns are rewritten as YYYY-MM-DD (unparseable values are nulled)
    3. blank cells are filled with ``"N/A"``
    4. numeric columns have currency symbols and separators stripped
    5. country aliases are replaced by their code

    Duplicate IDs are reported afterwards but never removed.
    """

    def __init__(
        self,
        rules: dict[str, CleaningRule] | None = None,
        country_aliases: dict[str, str] | None = None,
    ):
        self._rules = dict(CLEANING_RULES if rules is None else rules)
        self._country_aliases = dict(
            COUNTRY_ALIASES if country_aliases is None else country_aliases
        )

    def clean(self, datasets: list[Dataset]) -> list[CleanedDataset]:
        return [self.clean_one(dataset, idx) for idx, dataset in enumerate(datasets)]

    def clean_one(self, dataset: Dataset, index: int = 0) -> CleanedDataset:
        headers = dataset.headers
        log = CellLog()
        cleaned_rows = []

        for row_idx, row in enumerate(dataset.aligned_rows()):
            cleaned_rows.append(
                [
                    self._clean_cell(cell, header, row_idx, log)
                    for header, cell in zip(headers, row)
                ]
            )

        if ID_COLUMN in headers:
            self._log_duplicate_ids(cleaned_rows, headers.index(ID_COLUMN), log)

        report = CleaningReport(
            file_name=dataset.label or f"File {index + 1}",
            original_row_count=dataset.row_count,
            cleaned_row_count=len(cleaned_rows),
            changes_made=log.changes,
            issues_found=len(log.details),
            details=log.details,
        )
        return CleanedDataset(
            name=dataset.name,
            headers=headers,
            rows=cleaned_rows,
            metadata={
                **dataset.metadata,
                "row_count": len(cleaned_rows),
                "cleaned": True,
            },
            cleaning_report=report,
        )

    def run(self, datasets: list[Dataset]) -> StageResult:
        cleaned = self.clean(datasets)
        errors = [line for item in cleaned for line in item.cleaning_report.details]
        logger.info(
            f"Cleaned {len(cleaned)} datasets, "
            f"{sum(item.cleaning_report.changes_made for item in cleaned)} changes"
        )
        return StageResult(
            output=cleaned,
            records_processed=sum(item.row_count for item in cleaned),
            errors_found=errors,
        )

    def _clean_cell(self, cell: Any, header: str, row_idx: int, log: CellLog) -> Any:
        rule = self._rules.get(header)

        if isinstance(cell, str):
            normalized = cell.strip().lower()
            if normalized != cell:
                cell = normalized
                log.change(row_idx, header, "Trimmed/normalized casing.")

        if rule == CleaningRule.DATE and not is_blank(cell):
            cell = self._clean_date(cell, header, row_idx, log)

        if is_blank(cell):
            cell = FILL_VALUE
            log.change(row_idx, header, f"Filled empty value with '{FILL_VALUE}'.")

        if rule == CleaningRule.NUMERIC and isinstance(cell, str):
            cell = self._clean_number(cell, header, row_idx, log)

        if rule == CleaningRule.COUNTRY and isinstance(cell, str):
            code = self._country_aliases.get(cell.lower())
            if code is not None and code != cell:
                cell = code
                log.change(row_idx, header, f"Standardized country to '{code}'.")

        return cell

    def _clean_date(self, cell: Any, header: str, row_idx: int, log: CellLog) -> Any:
        parsed = parse_date(cell)
        if parsed is None:
            log.change(
                row_idx, header, f"Invalid or unparseable date format ('{cell}')."
            )
            return None
        converted = format_date(parsed)
        if converted != cell:
            log.change(row_idx, header, "Standardized date to YYYY-MM-DD.")
        return converted

    def _clean_number(self, cell: str, header: str, row_idx: int, log: CellLog) -> Any:
        number = parse_number_prefix(_NON_NUMERIC_CHARS.sub("", cell))
        if number is None or number == parse_number_prefix(cell):
            return cell
        cleaned = as_plain_number(number)
        log.change(
            row_idx, header, f"Cleaned numeric format ('{cell}' -> '{cleaned}')."
        )
        return cleaned

    def _log_duplicate_ids(
        self, rows: list[list[Any]], id_idx: int, log: CellLog
    ) -> None:
        seen: set[str] = set()
        for row_idx, row in enumerate(rows):
            value = row[id_idx]
            if is_blank(value) or value == FILL_VALUE:
                continue
            key = str(value)
            if key in seen:
                log.note(row_idx, ID_COLUMN, f"Duplicate ID found: '{value}'.")
            seen.add(key)
