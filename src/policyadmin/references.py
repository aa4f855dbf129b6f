"""Cache of cross-referenced collections used by selectRef fields."""

import logging
import threading
from typing import Any, Optional

from .schema import FieldDescriptor, SchemaRegistry

logger = logging.getLogger(__name__)


class ReferenceResolver:
    """Holds the records of referenced collections, keyed by endpoint.

    Used to build choice lists for selectRef inputs and to turn a stored
    foreign key back into a readable label. Lookups never raise: an id that
    is not cached resolves to itself.
    """

    def __init__(self, registry: SchemaRegistry):
        self.registry = registry
        self._cache: dict[str, list[dict]] = {}
        self._lock = threading.Lock()

    def replace(self, endpoint: str, records: list[dict]) -> None:
        with self._lock:
            self._cache[endpoint] = list(records)
        logger.debug(f"Reference cache for '{endpoint}' holds {len(records)} records")

    def clear(self) -> None:
        with self._lock:
            self._cache.clear()

    def records(self, endpoint: str) -> list[dict]:
        with self._lock:
            return list(self._cache.get(endpoint, []))

    def _id_field(self, endpoint: str) -> str:
        key = self.registry.entity_for_endpoint(endpoint)
        if key is None:
            return "id"
        return self.registry.get(key).id_field

    def options_for(self, field: FieldDescriptor) -> list[tuple[Any, str]]:
        """Return ``(value, label)`` choices for a selectRef field."""
        if not field.ref_endpoint:
            return []

        id_field = self._id_field(field.ref_endpoint)
        options = []
        for record in self.records(field.ref_endpoint):
            record_id = record.get(id_field)
            options.append((record_id, f"{record_id} - {record.get(field.ref_label, '')}"))
        return options

    def lookup(self, endpoint: str, record_id: Any) -> Optional[dict]:
        id_field = self._id_field(endpoint)
        for record in self.records(endpoint):
            if record.get(id_field) == record_id:
                return record
        return None

    def resolve_label(self, field_name: str, value: Any) -> Any:
        field = self.registry.reference_field(field_name)
        if field is None:
            return value

        record = self.lookup(field.ref_endpoint, value)
        if record is None:
            logger.debug(f"Reference miss: {field_name}={value!r} not in '{field.ref_endpoint}'")
            return value

        label = record.get(field.ref_label)
        return value if label is None else label
