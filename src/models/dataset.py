"""In-memory tabular dataset model."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Dataset(BaseModel):
    """One spreadsheet: ordered headers, positional rows and metadata."""

    model_config = ConfigDict(extra="ignore")

    headers: list[str] = []
    rows: list[list[Any]] = []
    metadata: dict[str, Any] = {}
    name: str | None = None

    @field_validator("headers", mode="before")
    @classmethod
    def coerce_headers(cls, v: Any) -> list[str]:
        if v is None:
            return []
        if not isinstance(v, (list, tuple)):
            return v
        return ["" if h is None else str(h) for h in v]

    @field_validator("rows", mode="before")
    @classmethod
    def coerce_rows(cls, v: Any) -> list[list[Any]]:
        if v is None:
            return []
        if not isinstance(v, (list, tuple)):
            return v
        return [
            list(row) if isinstance(row, (list, tuple)) else [] if row is None else row
            for row in v
        ]

    @property
    def row_count(self) -> int:
        return len(self.rows)

    @property
    def column_count(self) -> int:
        return len(self.headers)

    @property
    def label(self) -> str:
        """Name used when reporting issues about this dataset."""
        return self.name or str(self.metadata.get("file_name") or "")

    def declared_row_count(self) -> int:
        """Row count as declared in metadata, falling back to len(rows)."""
        value = self.metadata.get("row_count")
        if isinstance(value, int) and not isinstance(value, bool):
            return value
        return self.row_count

    def aligned_rows(self) -> list[list[Any]]:
        """Rows padded with None or trimmed to the header length."""
        width = len(self.headers)
        return [(row + [None] * (width - len(row)))[:width] for row in self.rows]

    def row_as_dict(self, row: list[Any]) -> dict[str, Any]:
        return {
            header: row[idx] if idx < len(row) else None
            for idx, header in enumerate(self.headers)
        }


class FileReference(BaseModel):
    """Reference to an uploaded file held by the external file store."""

    model_config = ConfigDict(extra="allow", frozen=True)

    id: str = Field(min_length=1)
