"""Declarative entity schemas and the fixed registry of manageable entities."""

from __future__ import annotations

import re
from typing import Iterator, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .consts import RECORD_ID_FIELD
from .enums import FieldType
from .errors import UnknownEntityError


class SelectOption(BaseModel):
    value: str
    label: str


class FieldDescriptor(BaseModel):
    """Metadata for one form field: type, constraints and option source."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    name: str
    label: str
    type: FieldType = FieldType.TEXT
    required: bool = False
    min_length: Optional[int] = Field(default=None, alias="minLength", ge=0)
    pattern: Optional[str] = None
    pattern_message: Optional[str] = Field(default=None, alias="patternMessage")
    min: Optional[float] = None
    options: list[SelectOption] = []
    ref_endpoint: Optional[str] = Field(default=None, alias="refEndpoint")
    ref_label: Optional[str] = Field(default=None, alias="refLabel")

    @field_validator("pattern")
    @classmethod
    def validate_pattern(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        try:
            re.compile(v)
        except re.error as e:
            raise ValueError(f"Invalid pattern {v!r}: {e}") from e
        return v

    @model_validator(mode="after")
    def validate_variant(self) -> "FieldDescriptor":
        if self.type == FieldType.SELECT and not self.options:
            raise ValueError(f"Field '{self.name}': select fields require options")
        if self.type == FieldType.SELECT_REF and not (self.ref_endpoint and self.ref_label):
            raise ValueError(
                f"Field '{self.name}': selectRef fields require refEndpoint and refLabel"
            )
        return self

    @property
    def is_numeric(self) -> bool:
        return self.type in (FieldType.NUMBER, FieldType.SELECT_REF)


class EntitySchema(BaseModel):
    """One manageable record type: its ordered fields and backend collection."""

    model_config = ConfigDict(frozen=True)

    title: str
    endpoint: str
    fields: list[FieldDescriptor]
    id_field: str = RECORD_ID_FIELD
    date_ranges: list[tuple[str, str]] = []

    @model_validator(mode="after")
    def validate_fields(self) -> "EntitySchema":
        names = [f.name for f in self.fields]
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            raise ValueError(f"Duplicate field names: {', '.join(duplicates)}")

        for start, end in self.date_ranges:
            for name in (start, end):
                if name not in names:
                    raise ValueError(f"Date range refers to unknown field '{name}'")
        return self

    @property
    def field_names(self) -> list[str]:
        return [f.name for f in self.fields]

    def field(self, name: str) -> Optional[FieldDescriptor]:
        for f in self.fields:
            if f.name == name:
                return f
        return None

    def reference_fields(self) -> list[FieldDescriptor]:
        return [f for f in self.fields if f.type == FieldType.SELECT_REF]


class SchemaRegistry:
    """Ordered, read-only mapping of entity key to schema."""

    def __init__(self, schemas: dict[str, EntitySchema]):
        if not schemas:
            raise ValueError("Schema registry cannot be empty")
        self._schemas = dict(schemas)

    def __contains__(self, key: object) -> bool:
        return key in self._schemas

    def __iter__(self) -> Iterator[str]:
        return iter(self._schemas)

    def __len__(self) -> int:
        return len(self._schemas)

    def keys(self) -> list[str]:
        return list(self._schemas)

    def items(self) -> list[tuple[str, EntitySchema]]:
        return list(self._schemas.items())

    @property
    def default_key(self) -> str:
        return next(iter(self._schemas))

    def get(self, key: str) -> EntitySchema:
        try:
            return self._schemas[key]
        except KeyError:
            raise UnknownEntityError(f"Unknown entity: {key}") from None

    def entity_for_endpoint(self, endpoint: str) -> Optional[str]:
        for key, schema in self._schemas.items():
            if schema.endpoint == endpoint:
                return key
        return None

    def reference_endpoints(self, key: Optional[str] = None) -> list[str]:
        """Return the distinct refEndpoints of one schema, or of every schema.

        Order follows field order, so loads are issued deterministically.
        """
        schemas = [self.get(key)] if key is not None else list(self._schemas.values())
        endpoints: list[str] = []
        for schema in schemas:
            for f in schema.reference_fields():
                if f.ref_endpoint not in endpoints:
                    endpoints.append(f.ref_endpoint)
        return endpoints

    def reference_field(self, field_name: str) -> Optional[FieldDescriptor]:
        for schema in self._schemas.values():
            f = schema.field(field_name)
            if f is not None and f.type == FieldType.SELECT_REF:
                return f
        return None


REGISTRY = SchemaRegistry(
    {
        "customers": EntitySchema(
            title="Customers",
            endpoint="clientes",
            fields=[
                FieldDescriptor(name="nombres", label="Names", required=True, minLength=2),
                FieldDescriptor(
                    name="identificacion",
                    label="Identification",
                    required=True,
                    pattern=r"^[0-9]{10,13}$",
                    patternMessage="Must have between 10 and 13 digits",
                ),
                FieldDescriptor(name="email", label="Email", type=FieldType.EMAIL, required=True),
                FieldDescriptor(
                    name="telefono",
                    label="Phone",
                    required=True,
                    pattern=r"^[0-9]{10}$",
                    patternMessage="Must have 10 digits",
                ),
            ],
        ),
        "plans": EntitySchema(
            title="Plans",
            endpoint="planes",
            fields=[
                FieldDescriptor(name="nombre", label="Name", required=True, minLength=3),
                FieldDescriptor(
                    name="tipo",
                    label="Type",
                    type=FieldType.SELECT,
                    required=True,
                    options=[
                        SelectOption(value="VIDA", label="Life"),
                        SelectOption(value="AUTO", label="Auto"),
                        SelectOption(value="SALUD", label="Health"),
                    ],
                ),
                FieldDescriptor(
                    name="primaBase", label="Base premium", type=FieldType.NUMBER, required=True, min=0
                ),
                FieldDescriptor(
                    name="coberturaMax",
                    label="Maximum coverage",
                    type=FieldType.NUMBER,
                    required=True,
                    min=0,
                ),
            ],
        ),
        "policies": EntitySchema(
            title="Policies",
            endpoint="polizas",
            fields=[
                FieldDescriptor(name="numeroPoliza", label="Policy number", required=True, minLength=3),
                FieldDescriptor(name="fechaInicio", label="Start date", type=FieldType.DATE, required=True),
                FieldDescriptor(name="fechaFin", label="End date", type=FieldType.DATE, required=True),
                FieldDescriptor(
                    name="primaMensual",
                    label="Monthly premium",
                    type=FieldType.NUMBER,
                    required=True,
                    min=0,
                ),
                FieldDescriptor(
                    name="estado",
                    label="Status",
                    type=FieldType.SELECT,
                    required=True,
                    options=[
                        SelectOption(value="ACTIVA", label="Active"),
                        SelectOption(value="CANCELADA", label="Cancelled"),
                    ],
                ),
                FieldDescriptor(
                    name="clienteId",
                    label="Customer",
                    type=FieldType.SELECT_REF,
                    required=True,
                    refEndpoint="clientes",
                    refLabel="nombres",
                ),
                FieldDescriptor(
                    name="planSeguroId",
                    label="Insurance plan",
                    type=FieldType.SELECT_REF,
                    required=True,
                    refEndpoint="planes",
                    refLabel="nombre",
                ),
            ],
            date_ranges=[("fechaInicio", "fechaFin")],
        ),
    }
)
