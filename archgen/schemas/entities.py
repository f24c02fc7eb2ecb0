"""Entity description models accepted by the generator."""
from __future__ import annotations

import re
from decimal import Decimal
from enum import Enum
from typing import ClassVar, List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from archgen.core.errors import StubEntityAccessError

IDENTIFIER_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

# Types rendered without a nullable marker on domain entities.
VALUE_TYPES = frozenset({"int", "long", "decimal", "double", "float", "bool", "DateTime", "Guid"})

DEFAULT_KEY_NAME = "Id"
DEFAULT_KEY_TYPE = "int"


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class RelationshipType(str, Enum):
    ONE_TO_MANY = "OneToMany"
    MANY_TO_ONE = "ManyToOne"
    ONE_TO_ONE = "OneToOne"
    MANY_TO_MANY = "ManyToMany"


class DeleteBehavior(str, Enum):
    CASCADE = "Cascade"
    RESTRICT = "Restrict"
    SET_NULL = "SetNull"
    NO_ACTION = "NoAction"
    CLIENT_SET_NULL = "ClientSetNull"


class PropertyConstraints(_CamelModel):
    min_length: Optional[int] = None
    max_length: Optional[int] = None
    regex_pattern: Optional[str] = None
    min_value: Optional[Decimal] = None
    max_value: Optional[Decimal] = None
    precision: Optional[int] = None
    scale: Optional[int] = None
    is_unique: bool = False
    is_indexed: bool = False
    is_computed: bool = False


class PropertyModel(_CamelModel):
    name: str = Field(..., examples=["Name"])
    type: str = Field("string", examples=["string", "int", "decimal"])
    is_required: bool = False
    is_key: bool = False
    is_nullable: bool = False
    max_length: Optional[int] = None
    default_value: Optional[str] = None
    constraints: Optional[PropertyConstraints] = None

    @property
    def effective_max_length(self) -> Optional[int]:
        if self.constraints and self.constraints.max_length is not None:
            return self.constraints.max_length
        return self.max_length

    @property
    def is_value_type(self) -> bool:
        return self.type in VALUE_TYPES

    @property
    def is_string(self) -> bool:
        return self.type == "string"


class RelationshipModel(_CamelModel):
    type: RelationshipType
    related_entity: str
    foreign_key_property: str = ""
    navigation_property: str = ""
    inverse_navigation_property: str = ""
    on_delete_behavior: DeleteBehavior = DeleteBehavior.RESTRICT
    join_table_name: str = ""

    @property
    def is_collection(self) -> bool:
        return self.type in (RelationshipType.ONE_TO_MANY, RelationshipType.MANY_TO_MANY)


class EntityModel(_CamelModel):
    name: str = Field(..., examples=["Product"])
    namespace: str = ""
    properties: List[PropertyModel] = Field(default_factory=list)
    has_audit_fields: bool = False
    has_soft_delete: bool = False
    relationships: List[RelationshipModel] = Field(default_factory=list)
    business_keys: List[str] = Field(default_factory=list)

    is_stub: ClassVar[bool] = False

    @model_validator(mode="after")
    def _adopt_conventional_key(self) -> "EntityModel":
        """An unmarked `Id` property becomes the key instead of gaining an implicit twin."""
        if any(p.is_key for p in self.properties):
            return self
        for i, prop in enumerate(self.properties):
            if prop.name == DEFAULT_KEY_NAME:
                self.properties[i] = prop.model_copy(update={"is_key": True})
                break
        return self

    @property
    def plural_name(self) -> str:
        return f"{self.name}s"

    @property
    def declared_key(self) -> Optional[PropertyModel]:
        for prop in self.properties:
            if prop.is_key:
                return prop
        return None

    @property
    def key_property(self) -> PropertyModel:
        """The key property, or the implicit `Id: int` key when none is marked."""
        return self.declared_key or PropertyModel(
            name=DEFAULT_KEY_NAME, type=DEFAULT_KEY_TYPE, is_key=True, is_required=True
        )

    @property
    def all_properties(self) -> List[PropertyModel]:
        """Declared properties, led by the implicit key when none is marked."""
        if self.declared_key is None:
            return [self.key_property, *self.properties]
        return list(self.properties)

    @property
    def non_key_properties(self) -> List[PropertyModel]:
        """Everything but the key; a second marked key is kept as a plain member."""
        key = self.declared_key
        return [p for p in self.properties if p is not key]

    def find_property(self, name: str) -> Optional[PropertyModel]:
        for prop in self.all_properties:
            if prop.name == name:
                return prop
        return None

    def related_names(self) -> List[str]:
        return [r.related_entity for r in self.relationships]


class StubEntity:
    """
    Name-only entity recovered from an existing project on disk.

    Only the name survives a directory scan. Anything else a renderer asks for
    raises StubEntityAccessError instead of defaulting to an empty shape.
    """

    is_stub = True

    def __init__(self, name: str, namespace: str = ""):
        self.name = name
        self.namespace = namespace

    @property
    def plural_name(self) -> str:
        return f"{self.name}s"

    def _unknown(self, what: str):
        raise StubEntityAccessError(
            f"{what} is unknown; the entity was recovered from disk by name only",
            entity=self.name,
        )

    @property
    def properties(self):
        self._unknown("properties")

    @property
    def relationships(self):
        self._unknown("relationships")

    @property
    def key_property(self):
        self._unknown("key property")

    def related_names(self) -> List[str]:
        return []

    def __repr__(self) -> str:
        return f"StubEntity({self.name!r})"

    def __eq__(self, other) -> bool:
        return isinstance(other, StubEntity) and other.name == self.name

    def __hash__(self) -> int:
        return hash(("stub", self.name))
