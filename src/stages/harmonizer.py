"""Schema harmonization: rename columns to a canonical vocabulary."""

from typing import Any

from models.dataset import Dataset
from stages.rules import HEADER_SYNONYMS


class SchemaHarmonizer:
    """Rewrites dataset headers through a synonym table."""

    def __init__(self, synonyms: dict[str, str] | None = None):
        self._synonyms = dict(HEADER_SYNONYMS if synonyms is None else synonyms)

    def canonical_name(self, header: str) -> str:
        return self._synonyms.get(header, header)

    def harmonize(self, datasets: list[Dataset]) -> list[Dataset]:
        """Return one harmonized copy per input dataset."""
        return [self.harmonize_one(dataset) for dataset in datasets]

    def harmonize_one(self, dataset: Dataset) -> Dataset:
        # Canonical header -> index of the first original column mapped to it
        source_index: dict[str, int] = {}
        for idx, header in enumerate(dataset.headers):
            source_index.setdefault(self.canonical_name(header), idx)
        new_headers = list(source_index)

        new_rows = [self._rebuild_row(row, new_headers, source_index) for row in dataset.rows]

        metadata = {
            **dataset.metadata,
            "column_count": len(new_headers),
            "harmonized": True,
        }
        return dataset.model_copy(
            update={"headers": new_headers, "rows": new_rows, "metadata": metadata}
        )

    def _rebuild_row(
        self,
        row: list[Any],
        new_headers: list[str],
        source_index: dict[str, int],
    ) -> list[Any]:
        rebuilt = []
        for header in new_headers:
            idx = source_index[header]
            rebuilt.append(row[idx] if idx < len(row) else None)
        return rebuilt
