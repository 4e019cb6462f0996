"""Per-resource lists of locally-created records, newest first."""

import json
import logging
import time
from typing import Any, Mapping

from realty.app.constants import LOCAL_ID_PREFIX
from realty.errors import NotFound, StoreError
from realty.models.responses import Pagination, record_id
from .persistent import PersistentStore

logger = logging.getLogger(__name__)


def is_local_id(value: str | None) -> bool:
    """Check whether an identifier was assigned by the local store."""
    return bool(value) and str(value).startswith(LOCAL_ID_PREFIX)


class LocalRecordStore:
    """Ordered record list kept under one storage key.

    Records are plain dicts in the backend's wire shape so they can be mixed
    into backend list responses untouched.
    """

    def __init__(self, store: PersistentStore, key: str) -> None:
        self.store = store
        self.key = key

    def all(self) -> list[dict[str, Any]]:
        """Get every stored record, newest first.

        Unreadable or corrupt contents are logged and read as an empty list.
        """
        try:
            raw = self.store.get(self.key)
        except StoreError as e:
            logger.error(f"Error loading local records from {self.key}: {e}")
            return []
        if not raw:
            return []
        try:
            records = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.error(f"Corrupt local records under {self.key}: {e}")
            return []
        if not isinstance(records, list):
            logger.error(f"Local records under {self.key} are not a list")
            return []
        return [r for r in records if isinstance(r, dict)]

    def save(self, records: list[dict[str, Any]]) -> None:
        """Overwrite the stored list. Raises StoreError on write failure."""
        self.store.set(self.key, json.dumps(records))

    def new_id(self) -> str:
        """Generate an id from the creation time, unique within this store."""
        taken = {record_id(r) for r in self.all()}
        stamp = int(time.time() * 1000)
        candidate = f"{LOCAL_ID_PREFIX}{stamp}"
        while candidate in taken:
            stamp += 1
            candidate = f"{LOCAL_ID_PREFIX}{stamp}"
        return candidate

    def prepend(self, record: dict[str, Any]) -> None:
        records = self.all()
        records.insert(0, record)
        self.save(records)
        logger.info(
            f"Stored local record {record_id(record)} under {self.key} "
            f"({len(records)} total)"
        )

    def find(self, id: str) -> dict[str, Any] | None:
        return next((r for r in self.all() if record_id(r) == str(id)), None)

    def remove(self, id: str) -> bool:
        """Remove the record with this id. Returns False if none matched."""
        records = self.all()
        remaining = [r for r in records if record_id(r) != str(id)]
        if len(remaining) == len(records):
            return False
        self.save(remaining)
        logger.info(f"Removed local record {id} from {self.key}")
        return True

    def update(self, id: str, changes: Mapping[str, Any]) -> dict[str, Any]:
        """Apply a shallow update to one record and return it.

        Raises:
            NotFound: If no record has this id.
        """
        records = self.all()
        for index, record in enumerate(records):
            if record_id(record) == str(id):
                updated = {**record, **changes}
                records[index] = updated
                self.save(records)
                return updated
        raise NotFound(f"Record {id} not found", 404)

    def page(
        self, page: int, limit: int, records: list[dict[str, Any]] | None = None
    ) -> tuple[list[dict[str, Any]], Pagination]:
        """Slice stored records with the backend's pagination contract."""
        if records is None:
            records = self.all()
        page = max(page, 1)
        limit = max(limit, 1)
        start = (page - 1) * limit
        return records[start : start + limit], Pagination.for_total(
            len(records), page, limit
        )
