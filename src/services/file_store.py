"""Redis-backed lookup of previously parsed spreadsheet files."""

import json
import logging

from pydantic import ValidationError
from redis import Redis

from models.dataset import Dataset

logger = logging.getLogger(__name__)


class RedisFileStore:
    """Holds parsed file content (headers, rows, metadata) per owner."""

    def __init__(self, redis_client: Redis):
        if redis_client is None:
            raise ValueError("redis_client is required")
        self._redis = redis_client

    def _file_key(self, file_id: str) -> str:
        return f"file:{file_id}"

    def put_dataset(
        self,
        file_id: str,
        dataset: Dataset,
        owner_id: str | None = None,
    ) -> None:
        """Store the parsed content of an uploaded file."""
        if not file_id:
            raise ValueError("file_id is required")

        record = {
            "file_id": file_id,
            "owner_id": owner_id,
            "dataset": dataset.model_dump(mode="json"),
        }
        self._redis.set(self._file_key(file_id), json.dumps(record))

    def fetch_dataset(self, file_id: str, owner_id: str | None = None) -> Dataset | None:
        """Return the stored dataset, or None if missing, foreign or unreadable."""
        if not file_id:
            raise ValueError("file_id is required")

        data = self._redis.get(self._file_key(file_id))
        if data is None:
            logger.warning(f"File {file_id} not found for owner {owner_id}")
            return None

        try:
            record = json.loads(data)
            stored_owner = record.get("owner_id")
            if owner_id is not None and stored_owner not in (None, owner_id):
                logger.warning(f"File {file_id} not found for owner {owner_id}")
                return None
            dataset = Dataset.model_validate(record.get("dataset") or {})
        except (json.JSONDecodeError, AttributeError, ValidationError) as e:
            logger.error(f"Failed to parse stored content for file {file_id}: {e}")
            return None

        metadata = {
            "row_count": dataset.row_count,
            "column_count": dataset.column_count,
            **dataset.metadata,
        }
        return dataset.model_copy(update={"metadata": metadata})

    def delete_dataset(self, file_id: str) -> None:
        if not file_id:
            raise ValueError("file_id is required")
        self._redis.delete(self._file_key(file_id))
