"""
Seed data generation.

Entities are ordered so that the referenced side of every ManyToOne/OneToOne
relationship is seeded first. Cycles are tolerated: a node met again while still
in progress is emitted on the spot, which yields a complete order without
promising referential soundness for the cyclic part.

Synthetic values come from VALUE_RULES, an ordered table of
(predicate, generator) pairs evaluated top to bottom; the first match wins and
`_fallback` covers everything else.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from decimal import Decimal
from typing import Callable, Dict, List, Optional, Sequence, Set

from archgen.generators.cqrs_gen.context import RenderContext
from archgen.generators.cqrs_gen.emitter import SourceFile, emit
from archgen.generators.cqrs_gen.layout import namespace
from archgen.generators.cqrs_gen.render_infrastructure import ensure_resolved
from archgen.generators.cqrs_gen.utils import cs_number, cs_string
from archgen.schemas.config import GenerationConfig
from archgen.schemas.entities import EntityModel, PropertyModel, RelationshipType

SEED_ROWS = 3
DEFAULT_STRING_LENGTH = 50

ORDERING_TYPES = (RelationshipType.MANY_TO_ONE, RelationshipType.ONE_TO_ONE)

FIRST_NAMES = ["John", "Jane", "Michael", "Sarah", "David"]
LAST_NAMES = ["Smith", "Johnson", "Williams", "Brown", "Jones"]
STATUSES = ["Active", "Pending", "Completed", "Inactive", "Archived"]


def topological_order(entities: Sequence[EntityModel]) -> List[EntityModel]:
    """Depth-first order over ManyToOne/OneToOne edges, dependencies first."""
    by_name = {e.name: e for e in entities}
    ordered: List[EntityModel] = []
    visited: Set[str] = set()
    visiting: Set[str] = set()

    def visit(entity: EntityModel) -> None:
        if entity.name in visited:
            return
        if entity.name in visiting:
            # Back edge: emit now and let the outer frame skip it.
            visited.add(entity.name)
            ordered.append(entity)
            return
        visiting.add(entity.name)
        for rel in entity.relationships:
            if rel.type in ORDERING_TYPES and rel.related_entity in by_name:
                visit(by_name[rel.related_entity])
        visiting.discard(entity.name)
        if entity.name not in visited:
            visited.add(entity.name)
            ordered.append(entity)

    for entity in entities:
        visit(entity)
    return ordered


@dataclass(frozen=True)
class SeedRow:
    """What a value generator may look at."""
    entity: EntityModel
    prop: PropertyModel
    index: int
    anchor: date
    context: RenderContext

    @property
    def lname(self) -> str:
        return self.prop.name.lower()

    @property
    def min_value(self) -> Optional[Decimal]:
        constraints = self.prop.constraints
        return constraints.min_value if constraints else None


Predicate = Callable[[SeedRow], bool]
Generator = Callable[[SeedRow], str]


def _is(*types: str) -> Callable[[SeedRow], bool]:
    return lambda row: row.prop.type in types


def _type_and(types: Sequence[str], *needles: str, exact: Sequence[str] = ()) -> Predicate:
    def predicate(row: SeedRow) -> bool:
        if row.prop.type not in types:
            return False
        return any(n in row.lname for n in needles) or row.lname in exact
    return predicate


def _date_literal(day: date) -> str:
    return f"new DateTime({day.year}, {day.month}, {day.day}, 0, 0, 0, DateTimeKind.Utc)"


def _offset_literal(day: date) -> str:
    return f"new DateTimeOffset({day.year}, {day.month}, {day.day}, 0, 0, 0, TimeSpan.Zero)"


def _guid_literal(context: RenderContext, label: str) -> str:
    return f'Guid.Parse("{context.ids.guid(label)}")'


def _truncate(value: str, row: SeedRow) -> str:
    limit = row.prop.effective_max_length or DEFAULT_STRING_LENGTH
    return value[:limit]


def _string(value: Callable[[SeedRow], str]) -> Generator:
    return lambda row: cs_string(_truncate(value(row), row))


def _decimal_price(row: SeedRow) -> str:
    value = Decimal("10.00") + row.index * Decimal("5.50")
    if row.min_value is not None and value < row.min_value:
        value = row.min_value + row.index
    return cs_number(value, "decimal")


def _int_with_min(row: SeedRow) -> str:
    return str(max(int(row.min_value), row.index * 10))


VALUE_RULES: List[tuple] = [
    # strings
    (_type_and(["string"], "email"), _string(lambda r: f"user{r.index}@example.com")),
    (_type_and(["string"], "username", exact=["name"]), _string(lambda r: f"User{r.index}")),
    (_type_and(["string"], "firstname"), _string(lambda r: FIRST_NAMES[(r.index - 1) % len(FIRST_NAMES)])),
    (_type_and(["string"], "lastname"), _string(lambda r: LAST_NAMES[(r.index - 1) % len(LAST_NAMES)])),
    (_type_and(["string"], "phone"), _string(lambda r: f"+1-555-{1000 + r.index:04d}")),
    (_type_and(["string"], "address"), _string(lambda r: f"{r.index * 100} Main Street")),
    (_type_and(["string"], "description", "notes"),
     _string(lambda r: f"Sample {r.entity.name.lower()} description {r.index}")),
    (_type_and(["string"], "title"), _string(lambda r: f"{r.entity.name} Title {r.index}")),
    (_type_and(["string"], "code", "sku"), _string(lambda r: f"CODE-{r.index:04d}")),
    (_type_and(["string"], "url", "slug"), _string(lambda r: f"item-{r.index}")),
    (_type_and(["string"], "status"), _string(lambda r: STATUSES[(r.index - 1) % len(STATUSES)])),
    # integers
    (_type_and(["int"], "age"), lambda r: str(20 + r.index * 5)),
    (_type_and(["int"], "quantity", "stock"), lambda r: str(100 + r.index * 10)),
    (_type_and(["int"], "count"), lambda r: str(r.index * 5)),
    (_type_and(["int"], "year"), lambda r: str(2020 + r.index)),
    (lambda r: r.prop.type == "int" and r.min_value is not None, _int_with_min),
    (_is("int"), lambda r: str(r.index * 10)),
    (_is("long"), lambda r: cs_number(r.index * 1000, "long")),
    # decimals and floating point
    (_type_and(["decimal"], "price", "amount", "cost"), _decimal_price),
    (_type_and(["decimal"], "rate", "percentage"), lambda r: cs_number(r.index * Decimal("2.5"), "decimal")),
    (_is("decimal"), lambda r: cs_number(r.index * Decimal("10.5"), "decimal")),
    (_type_and(["double"], "latitude", exact=["lat"]),
     lambda r: cs_number(Decimal("40") + r.index * Decimal("0.1"), "double")),
    (_type_and(["double"], "longitude", exact=["lon", "lng"]),
     lambda r: cs_number(Decimal("-74") + r.index * Decimal("0.1"), "double")),
    (_is("double"), lambda r: cs_number(r.index * Decimal("10.5"), "double")),
    (_is("float"), lambda r: cs_number(r.index * Decimal("10.5"), "float")),
    (_is("bool"), lambda r: "true" if r.index % 2 == 0 else "false"),
    # dates
    (_type_and(["DateTime"], "birth"), lambda r: _date_literal(date(1990 + r.index, r.index, 10 + r.index))),
    (_type_and(["DateTime"], "published", "created"),
     lambda r: _date_literal(r.anchor - timedelta(days=30 - r.index))),
    (_type_and(["DateTime"], "updated", "modified"),
     lambda r: _date_literal(r.anchor - timedelta(days=10 - r.index))),
    (_type_and(["DateTime"], "expir", "enddate"),
     lambda r: _date_literal(r.anchor + timedelta(days=30 * r.index))),
    (_is("DateTime"), lambda r: _date_literal(r.anchor - timedelta(days=r.index))),
    (_is("DateTimeOffset"), lambda r: _offset_literal(r.anchor - timedelta(days=r.index))),
    (_is("Guid"), lambda r: _guid_literal(r.context, f"seed:{r.entity.name}:{r.prop.name}:{r.index}")),
]


def _fallback(row: SeedRow) -> str:
    if row.prop.is_string:
        return cs_string(_truncate(f"{row.prop.name} {row.index}", row))
    return "null" if row.prop.is_nullable else "default"


def sample_value(row: SeedRow) -> str:
    """First matching rule's value for the row, or the fallback."""
    for predicate, generator in VALUE_RULES:
        if predicate(row):
            return generator(row)
    return _fallback(row)


def _key_value(entity: EntityModel, prop: PropertyModel, index: int, context: RenderContext) -> str:
    if prop.type == "Guid":
        return _guid_literal(context, f"seed:{entity.name}:{index}")
    if prop.type == "string":
        return cs_string(f"{entity.name.upper()}-{index}")
    return cs_number(index, prop.type) if prop.type in ("int", "long") else str(index)


def _foreign_keys(entity: EntityModel) -> Dict[str, str]:
    """Foreign key property name -> referenced entity name."""
    return {r.foreign_key_property: r.related_entity for r in entity.relationships if r.foreign_key_property}


def seed_row_values(entity: EntityModel, index: int, context: RenderContext) -> List[tuple]:
    """(member, literal) pairs for one synthetic row."""
    anchor = context.clock().date()
    foreign_keys = _foreign_keys(entity)
    values = []
    for prop in entity.all_properties:
        if prop.constraints and prop.constraints.is_computed:
            continue
        if prop.is_key:
            values.append((prop.name, _key_value(entity, prop, index, context)))
        elif prop.name in foreign_keys:
            if prop.type == "Guid":
                literal = _guid_literal(context, f"seed:{foreign_keys[prop.name]}:{index}")
            else:
                literal = str(index)
            values.append((prop.name, literal))
        else:
            values.append((prop.name, sample_value(SeedRow(entity, prop, index, anchor, context))))
    if entity.has_audit_fields:
        values.append(("CreatedAt", _date_literal(anchor - timedelta(days=30 - index))))
        values.append(("CreatedBy", cs_string("System")))
    if entity.has_soft_delete:
        values.append(("IsDeleted", "false"))
    return values


def render_seed_data(entities: Sequence[EntityModel], config: GenerationConfig, context: RenderContext) -> str:
    """Render ApplicationDbContextSeed with one HasData call per entity in dependency order."""
    ensure_resolved(entities)
    ordered = topological_order(entities)

    source = SourceFile(namespace=namespace(config, "Infrastructure", "Persistence"))
    source.use("System", "Microsoft.EntityFrameworkCore", namespace(config, "Domain", "Entities"))
    decl = source.declare("public static class ApplicationDbContextSeed")

    entry = decl.member()
    with entry.braces("public static void SeedData(ModelBuilder modelBuilder)"):
        for entity in ordered:
            entry.line(f"Seed{entity.plural_name}(modelBuilder);")

    for entity in ordered:
        method = decl.member()
        with method.braces(f"private static void Seed{entity.plural_name}(ModelBuilder modelBuilder)"):
            method.line(f"modelBuilder.Entity<{entity.name}>().HasData(")
            with method.indent():
                for index in range(1, SEED_ROWS + 1):
                    values = seed_row_values(entity, index, context)
                    with method.braces(f"new {entity.name}", close="}," if index < SEED_ROWS else "}"):
                        for i, (member, literal) in enumerate(values):
                            method.line(f"{member} = {literal}" + ("," if i < len(values) - 1 else ""))
            method.line(");")
    return emit(source)
