"""Common result type returned by every stage."""

from dataclasses import dataclass, field
from typing import Any


@dataclass
class StageResult:
    """Stage output plus the counts the orchestrator turns into metrics."""

    output: Any
    records_processed: int = 0
    errors_found: list[str] = field(default_factory=list)
