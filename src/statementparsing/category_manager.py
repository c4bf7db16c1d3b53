"""
Vendor category management with persisted mappings.
"""

import json
import logging

from .events import CategoryEvents
from .models import Transaction
from .storage import StorageBackend, StorageResult

logger = logging.getLogger(__name__)

STORAGE_KEY = "financial-dashboard-categories"
SCHEMA_VERSION = 1

DEFAULT_CATEGORIES = [
    "Groceries",
    "Transportation",
    "Utilities",
    "Entertainment",
    "Healthcare",
    "Shopping",
    "Dining",
    "Bills",
    "Insurance",
    "Education",
    "Travel",
    "Investment",
    "Other",
]


class InvalidCategoryError(ValueError):
    """Exception raised when a vendor or category name is empty."""


class CategoryStore:
    """Manages the vendor to category mapping kept in a storage backend.

    Updates that cannot be persisted are kept on the instance and stay in
    effect for lookups until a later update manages to save them.
    """

    def __init__(
        self,
        storage: StorageBackend,
        events: CategoryEvents | None = None,
        storage_key: str = STORAGE_KEY,
    ):
        self.storage = storage
        self.events = events or CategoryEvents()
        self.storage_key = storage_key
        self._mapping: dict[str, str] = {}
        self._unsaved: dict[str, str] = {}

    def load(self) -> dict[str, str]:
        """Load the persisted mapping, or an empty one if missing or corrupt."""
        return self._read_stored()[1]

    def _read_stored(self) -> tuple[StorageResult, dict[str, str]]:
        result = self.storage.read(self.storage_key)
        if not result.ok:
            logger.error(f"Failed to load category mapping: {result.error}")
            return result, {}
        if result.value is None:
            logger.debug(f"No category mapping stored under '{self.storage_key}'")
            return result, {}

        try:
            data = json.loads(result.value)
        except json.JSONDecodeError as e:
            logger.error(f"Invalid JSON in category mapping '{self.storage_key}': {e}")
            return result, {}

        if isinstance(data, dict) and "version" in data:
            data = data.get("mapping")
        if not isinstance(data, dict):
            logger.error(
                f"Category mapping '{self.storage_key}' is not an object, ignoring it",
            )
            return result, {}

        mapping = {
            vendor: category
            for vendor, category in data.items()
            if isinstance(vendor, str) and isinstance(category, str)
        }
        if len(mapping) < len(data):
            logger.warning(
                f"Dropped {len(data) - len(mapping)} malformed category mapping entries",
            )
        return result, mapping

    def mapping(self) -> dict[str, str]:
        """
        The mapping in effect for this session.

        This is the stored mapping with unsaved updates applied on top. When
        the storage cannot be read, the last known mapping is returned.
        """
        result, stored = self._read_stored()
        if result.ok:
            self._mapping = {**stored, **self._unsaved}
        return dict(self._mapping)

    def save(self, mapping: dict[str, str]) -> StorageResult:
        """Persist the mapping. Failures are logged and returned, not raised."""
        payload = json.dumps(
            {"version": SCHEMA_VERSION, "mapping": mapping},
            indent=2,
            ensure_ascii=False,
        )
        result = self.storage.write(self.storage_key, payload)
        if result.ok:
            logger.debug(f"Saved {len(mapping)} vendor categories")
        else:
            logger.error(f"Failed to save category mapping: {result.error}")
        return result

    def lookup(self, description: str) -> str | None:
        """
        Find the category of a description.

        An exact key match wins. Otherwise the first mapping entry (in
        insertion order) whose vendor contains the description, or is
        contained in it, case-insensitively, is used.
        """
        return self._match(description, self.mapping())

    def _match(self, description: str, mapping: dict[str, str]) -> str | None:
        if not description:
            return None

        exact = mapping.get(description)
        if exact:
            return exact

        lower_description = description.lower()
        for vendor, category in mapping.items():
            lower_vendor = vendor.lower()
            if not lower_vendor:
                continue
            if lower_vendor in lower_description or lower_description in lower_vendor:
                return category

        return None

    def update(self, vendor: str, category: str) -> StorageResult:
        """
        Assign a category to a vendor and persist it immediately.

        The stored mapping is never written when it could not be read first.
        In that case, or when the save fails, the failed result is returned
        and the assignment is kept in memory only.
        """
        vendor = vendor.strip()
        category = category.strip()
        if not vendor:
            raise InvalidCategoryError("Vendor name must not be empty")
        if not category:
            raise InvalidCategoryError(
                f"Category for vendor '{vendor}' must not be empty",
            )

        logger.info(f"Assigned vendor '{vendor}' to category '{category}'")
        self._unsaved[vendor] = category

        result, stored = self._read_stored()
        if result.ok:
            stored.update(self._unsaved)
            self._mapping = stored
            result = self.save(stored)
            if result.ok:
                self._unsaved.clear()
        else:
            logger.error(f"Category for vendor '{vendor}' kept in memory only")
            self._mapping[vendor] = category

        self.events.publish(vendor, category)
        return result

    def all_categories(self) -> list[str]:
        """Default categories plus every category used in the mapping, sorted."""
        custom = set(self.mapping().values())
        return sorted(set(DEFAULT_CATEGORIES) | custom)

    def categorize(self, transactions: list[Transaction]) -> list[Transaction]:
        """Return copies of transactions with their looked-up category."""
        mapping = self.mapping()
        categorized = [
            transaction.with_category(self._match(transaction.description, mapping))
            for transaction in transactions
        ]
        found = sum(1 for t in categorized if t.category)
        logger.info(f"Categorized {found} of {len(categorized)} transactions")
        return categorized
