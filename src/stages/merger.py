"""Concatenate datasets into one, aligning columns by name."""

import logging
from typing import Any

from models.dataset import Dataset
from models.outputs import MergedDataset
from stages.base import StageResult
from stages.harmonizer import SchemaHarmonizer

logger = logging.getLogger(__name__)


class DatasetMerger:
    """Merges harmonized datasets with explicit per-row provenance."""

    def __init__(self, harmonizer: SchemaHarmonizer | None = None):
        self._harmonizer = harmonizer or SchemaHarmonizer()

    def union_headers(self, datasets: list[Dataset]) -> list[str]:
        """First non-empty dataset's headers, then later first-seen headers."""
        headers: list[str] = []
        seen: set[str] = set()
        for dataset in datasets:
            for header in dataset.headers:
                if header not in seen:
                    seen.add(header)
                    headers.append(header)
        return headers

    def merge(self, datasets: list[Dataset]) -> MergedDataset:
        """Concatenate rows from every dataset onto the union of headers."""
        final_headers = self.union_headers(datasets)

        # (source dataset index, row) keeps provenance explicit
        tagged_rows: list[tuple[int, list[Any]]] = [
            (source, row)
            for source, dataset in enumerate(datasets)
            for row in dataset.rows
        ]

        merged_rows = []
        for source, row in tagged_rows:
            row_object = datasets[source].row_as_dict(row)
            merged_rows.append([row_object.get(header) for header in final_headers])

        issues = self._schema_issues(datasets)
        expected = sum(dataset.declared_row_count() for dataset in datasets)
        if len(merged_rows) != expected:
            issues.append(
                f"Merged row count ({len(merged_rows)}) does not match sum of input "
                f"row counts ({expected}). This might indicate dropped/added rows."
            )

        return MergedDataset(
            headers=final_headers,
            rows=merged_rows,
            merge_issues=issues,
            metadata={
                "row_count": len(merged_rows),
                "column_count": len(final_headers),
                "file_type": "merged",
                "has_headers": bool(final_headers),
                "merged": True,
                "issues_found": len(issues),
                "total_merged_rows": len(merged_rows),
            },
        )

    def run(self, datasets: list[Dataset]) -> StageResult:
        """Harmonize, then merge."""
        merged = self.merge(self._harmonizer.harmonize(datasets))
        logger.info(
            f"Merged {len(datasets)} datasets into {merged.row_count} rows "
            f"({len(merged.merge_issues)} issues)"
        )
        return StageResult(
            output=merged,
            records_processed=merged.row_count,
            errors_found=list(merged.merge_issues),
        )

    def _schema_issues(self, datasets: list[Dataset]) -> list[str]:
        if len(datasets) < 2:
            return []
        base = set(datasets[0].headers)
        return [
            f"Schema inconsistency detected after harmonization between file 1 and file {idx + 1}."
            for idx, dataset in enumerate(datasets[1:], start=1)
            if set(dataset.headers) != base
        ]
