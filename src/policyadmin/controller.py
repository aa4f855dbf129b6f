"""Stateful editing session over the active entity's form and record list."""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, Optional

from .client import EntityStoreClient, coerce_payload
from .config import Config
from .consts import (
    MSG_CONNECTION_ERROR,
    MSG_CREATED,
    MSG_DELETE_FAILED,
    MSG_DELETED,
    MSG_FORM_INVALID,
    MSG_LOAD_FAILED,
    MSG_RECORD_NOT_FOUND,
    MSG_UPDATED,
)
from .enums import FieldType, Mode, NoticeLevel
from .errors import ApiError, ConnectivityError, PolicyAdminException, UnknownFieldError
from .references import ReferenceResolver
from .schema import REGISTRY, EntitySchema, FieldDescriptor, SchemaRegistry
from .validation import validate_form

logger = logging.getLogger(__name__)

EMPTY_CELL = "-"


@dataclass
class Notice:
    """User-facing banner message."""

    text: str
    level: NoticeLevel = NoticeLevel.SUCCESS

    @property
    def is_error(self) -> bool:
        return self.level == NoticeLevel.ERROR


@dataclass
class FormSession:
    """Explicitly owned UI state of one editing session.

    ``values`` and ``errors`` always hold exactly the fields of the active
    schema. ``generation`` changes on every entity switch so that loads issued
    for an earlier entity can be recognised and dropped.
    """

    active: str
    values: dict[str, Any] = field(default_factory=dict)
    errors: dict[str, str] = field(default_factory=dict)
    editing_id: Any = None
    items: list[dict] = field(default_factory=list)
    notice: Optional[Notice] = None
    loading: bool = False
    generation: int = 0

    @classmethod
    def for_schema(cls, key: str, schema: EntitySchema) -> "FormSession":
        session = cls(active=key)
        session.reset_form(schema)
        return session

    def reset_form(self, schema: EntitySchema) -> None:
        self.values = {name: "" for name in schema.field_names}
        self.errors = {name: "" for name in schema.field_names}
        self.editing_id = None

    @property
    def mode(self) -> Mode:
        if self.editing_id is not None:
            return Mode.EDITING
        if any(str(v).strip() for v in self.values.values()):
            return Mode.CREATING
        return Mode.BROWSING


class FormController:
    """Drives one generic create/read/update/delete workflow for every entity.

    The controller owns a ``FormSession`` and reacts to user actions:
    switching entity, editing values, selecting a record, cancelling,
    submitting and deleting. Backend failures never escape; each one ends as
    a ``Notice`` on the session.
    """

    def __init__(
        self,
        client: EntityStoreClient,
        registry: SchemaRegistry = REGISTRY,
        resolver: Optional[ReferenceResolver] = None,
        preload_all_references: bool = False,
        max_workers: int = 4,
        initial: Optional[str] = None,
    ):
        self.client = client
        self.registry = registry
        self.resolver = resolver or ReferenceResolver(registry)
        self.preload_all_references = preload_all_references
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="loader")
        self._lock = threading.RLock()

        key = initial or registry.default_key
        self.session = FormSession.for_schema(key, registry.get(key))

    @classmethod
    def from_config(cls, config: Config, client: Optional[EntityStoreClient] = None) -> "FormController":
        return cls(
            client or EntityStoreClient(config.api),
            preload_all_references=config.references.preload_all,
        )

    @property
    def schema(self) -> EntitySchema:
        return self.registry.get(self.session.active)

    @property
    def mode(self) -> Mode:
        return self.session.mode

    def close(self) -> None:
        self._executor.shutdown(wait=True)

    def _notify(self, text: str, level: NoticeLevel = NoticeLevel.SUCCESS) -> None:
        with self._lock:
            self.session.notice = Notice(text, level)

    def pop_notice(self) -> Optional[Notice]:
        """Return the pending banner once, clearing it from the session."""
        with self._lock:
            notice, self.session.notice = self.session.notice, None
        return notice

    def _is_current(self, key: str, generation: int) -> bool:
        return self.session.active == key and self.session.generation == generation

    # ==================== Loading ====================

    def reload(self, wait: bool = True) -> list[Future]:
        """Load the active entity's records and its reference collections.

        The list load and every reference load run concurrently. Each result
        is tagged with the entity and generation it was issued for and is
        dropped if the session has switched entity in the meantime.

        Args:
            wait: Block until every load has completed

        Returns:
            The futures of the outstanding loads
        """
        with self._lock:
            key = self.session.active
            generation = self.session.generation
            self.session.loading = True

        endpoint = self.registry.get(key).endpoint
        ref_endpoints = self.registry.reference_endpoints(None if self.preload_all_references else key)

        futures = [self._executor.submit(self._load_items, key, generation, endpoint)]
        for ref_endpoint in ref_endpoints:
            futures.append(self._executor.submit(self._load_references, key, generation, ref_endpoint))

        if wait:
            for future in futures:
                future.result()
        return futures

    def _load_items(self, key: str, generation: int, endpoint: str) -> None:
        notice = None
        try:
            records = self.client.list(endpoint)
        except ConnectivityError as e:
            logger.warning(f"Loading '{endpoint}' failed: {e}")
            records = []
            notice = Notice(MSG_LOAD_FAILED, NoticeLevel.ERROR)

        with self._lock:
            if not self._is_current(key, generation):
                logger.debug(f"Discarding stale '{endpoint}' list issued for {key}#{generation}")
                return
            self.session.items = records
            self.session.loading = False
            if notice is not None:
                self.session.notice = notice
        logger.debug(f"Loaded {len(records)} records from '{endpoint}'")

    def _load_references(self, key: str, generation: int, endpoint: str) -> None:
        notice = None
        try:
            records = self.client.list(endpoint)
        except ConnectivityError as e:
            logger.warning(f"Loading reference data '{endpoint}' failed: {e}")
            records = []
            notice = Notice(MSG_LOAD_FAILED, NoticeLevel.ERROR)

        with self._lock:
            if not self._is_current(key, generation):
                logger.debug(f"Discarding stale '{endpoint}' references issued for {key}#{generation}")
                return
            self.resolver.replace(endpoint, records)
            if notice is not None:
                self.session.notice = notice

    # ==================== User actions ====================

    def switch_entity(self, key: str, wait: bool = True) -> list[Future]:
        """Make ``key`` the active entity, discarding any form in progress."""
        schema = self.registry.get(key)
        with self._lock:
            self.session.active = key
            self.session.generation += 1
            self.session.reset_form(schema)
            self.session.items = []
            self.session.notice = None
        logger.info(f"Active entity: {key}")
        return self.reload(wait=wait)

    def set_value(self, name: str, value: Any) -> None:
        with self._lock:
            if name not in self.session.values:
                raise UnknownFieldError(f"Field '{name}' is not part of '{self.session.active}'")
            self.session.values[name] = value
            if self.session.errors.get(name):
                self.session.errors[name] = ""

    def find_record(self, record_id: Any) -> Optional[dict]:
        id_field = self.schema.id_field
        for record in self.session.items:
            if record.get(id_field) == record_id or str(record.get(id_field)) == str(record_id):
                return record
        return None

    def edit(self, record_id: Any) -> bool:
        """Fill the form from a listed record and enter editing mode."""
        record = self.find_record(record_id)
        if record is None:
            self._notify(MSG_RECORD_NOT_FOUND, NoticeLevel.ERROR)
            return False

        schema = self.schema
        if record.get(schema.id_field) is None:
            logger.warning(f"Listed {self.session.active} record has no '{schema.id_field}': {record}")
            self._notify(MSG_RECORD_NOT_FOUND, NoticeLevel.ERROR)
            return False

        with self._lock:
            self.session.reset_form(schema)
            for name in schema.field_names:
                value = record.get(name)
                self.session.values[name] = "" if value is None else value
            self.session.editing_id = record.get(schema.id_field)
        return True

    def cancel(self) -> None:
        with self._lock:
            self.session.reset_form(self.schema)
            self.session.notice = None

    def submit(self) -> bool:
        """Validate and persist the form.

        On failure the form and its field errors are kept so the user can
        correct them. On success the form is reset and the data reloaded.
        """
        schema = self.schema
        with self._lock:
            result = validate_form(schema, self.session.values)
            self.session.errors = result.errors
            values = dict(self.session.values)
            editing_id = self.session.editing_id

        if not result.valid:
            self._notify(MSG_FORM_INVALID, NoticeLevel.ERROR)
            return False

        try:
            payload = coerce_payload(schema, values)
        except PolicyAdminException as e:
            logger.warning(f"Cannot build payload for '{schema.endpoint}': {e}")
            self._notify(MSG_FORM_INVALID, NoticeLevel.ERROR)
            return False

        try:
            if editing_id is None:
                self.client.create(schema.endpoint, payload)
            else:
                self.client.update(schema.endpoint, editing_id, payload)
        except ApiError as e:
            self._notify(e.message, NoticeLevel.ERROR)
            return False
        except ConnectivityError:
            self._notify(MSG_CONNECTION_ERROR, NoticeLevel.ERROR)
            return False

        with self._lock:
            self.session.reset_form(schema)
        self._notify(MSG_CREATED if editing_id is None else MSG_UPDATED)
        self.reload()
        return True

    def delete(self, record_id: Any, confirmed: bool = False) -> bool:
        """Delete a record of the active entity.

        Deletion cannot be undone, so nothing is sent unless the user has
        explicitly confirmed.
        """
        if not confirmed:
            logger.info(f"Delete of {self.session.active}/{record_id} not confirmed")
            return False

        schema = self.schema
        try:
            self.client.remove(schema.endpoint, record_id)
        except ApiError as e:
            self._notify(e.message, NoticeLevel.ERROR)
            return False
        except ConnectivityError:
            self._notify(MSG_DELETE_FAILED, NoticeLevel.ERROR)
            return False

        with self._lock:
            if self.session.editing_id is not None and str(self.session.editing_id) == str(record_id):
                self.session.reset_form(schema)
        self._notify(MSG_DELETED)
        self.reload()
        return True

    # ==================== Display ====================

    def input_options(self, descriptor: FieldDescriptor) -> list[tuple[Any, str]]:
        if descriptor.type == FieldType.SELECT:
            return [(o.value, o.label) for o in descriptor.options]
        if descriptor.type == FieldType.SELECT_REF:
            return self.resolver.options_for(descriptor)
        return []

    def display_value(self, descriptor: FieldDescriptor, record: dict) -> Any:
        value = record.get(descriptor.name)
        if value is None:
            return EMPTY_CELL
        if descriptor.type == FieldType.SELECT_REF:
            return self.resolver.resolve_label(descriptor.name, value)
        return value

    def rows(self) -> list[tuple[Any, list[Any]]]:
        schema = self.schema
        return [
            (record.get(schema.id_field), [self.display_value(f, record) for f in schema.fields])
            for record in self.session.items
        ]
