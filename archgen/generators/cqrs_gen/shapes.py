"""Member lists shared by several renderers so their orders never drift apart."""
from typing import List, Tuple

from archgen.schemas.entities import EntityModel, PropertyModel

AUDIT_MEMBERS: List[Tuple[str, str]] = [
    ("CreatedAt", "DateTime"),
    ("CreatedBy", "string?"),
    ("UpdatedAt", "DateTime?"),
    ("UpdatedBy", "string?"),
]

SOFT_DELETE_MEMBERS: List[Tuple[str, str]] = [
    ("IsDeleted", "bool"),
    ("DeletedAt", "DateTime?"),
    ("DeletedBy", "string?"),
]


def entity_member_type(prop: PropertyModel) -> str:
    """Domain entities mark nullability only on reference-like types."""
    if prop.is_nullable and not prop.is_value_type:
        return f"{prop.type}?"
    return prop.type


def nullable_type(prop: PropertyModel) -> str:
    return f"{prop.type}?" if prop.is_nullable else prop.type


def initializer(prop: PropertyModel, member_type: str) -> str:
    """Trailing initializer for an auto-property, or '' when none is needed."""
    if member_type == "string":
        return " = string.Empty;"
    return ""


def property_line(name: str, member_type: str, accessors: str = "get; set;", init: str = "") -> str:
    return f"public {member_type} {name} {{ {accessors} }}{init}"


def dto_members(entity: EntityModel) -> List[Tuple[str, str]]:
    """(name, type) pairs of the DTO, in declaration order; projections follow it."""
    members = [(p.name, nullable_type(p)) for p in entity.all_properties]
    if entity.has_audit_fields:
        members.extend(AUDIT_MEMBERS)
    return members
