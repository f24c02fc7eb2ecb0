"""Tests for seed data ordering and synthetic values."""
import pytest

from archgen.core.errors import RenderError
from archgen.generators.cqrs_gen.seed import SeedRow, render_seed_data, sample_value, topological_order
from archgen.schemas.entities import EntityModel

from conftest import FIXED_NOW


def _entity(name, *related, props=None):
    return EntityModel.model_validate({
        "name": name,
        "properties": props or [{"name": "Title", "type": "string"}],
        "relationships": [
            {"type": "ManyToOne", "relatedEntity": r, "navigationProperty": r, "foreignKeyProperty": f"{r}Id"}
            for r in related
        ],
    })


def test_parent_seeded_before_child():
    child = _entity("Child", "Parent")
    parent = _entity("Parent")
    assert [e.name for e in topological_order([child, parent])] == ["Parent", "Child"]


def test_cycle_yields_complete_order():
    x = _entity("X", "Y")
    y = _entity("Y", "X")
    names = [e.name for e in topological_order([x, y])]
    assert sorted(names) == ["X", "Y"]
    assert len(names) == 2


def test_render_seed_data_order(config, fixed_context):
    child = _entity("Child", "Parent", props=[
        {"name": "Title", "type": "string"},
        {"name": "ParentId", "type": "int"},
    ])
    parent = _entity("Parent")
    text = render_seed_data([child, parent], config, fixed_context)
    assert text.index("SeedParents(modelBuilder);") < text.index("SeedChilds(modelBuilder);")
    assert text.count("new Child") == 3
    assert "ParentId = 1\n" in text


def test_render_seed_data_rejects_unknown_entity(config, fixed_context):
    with pytest.raises(RenderError):
        render_seed_data([_entity("Child", "Parent")], config, fixed_context)


def test_seed_is_reproducible_with_fixed_context(product, config, fixed_context):
    assert render_seed_data([product], config, fixed_context) == render_seed_data([product], config, fixed_context)


@pytest.mark.parametrize("name,type_,expected", [
    ("Email", "string", '"user2@example.com"'),
    ("Price", "decimal", "21m"),
    ("Age", "int", "30"),
    ("IsActive", "bool", "true"),
    ("Weight", "double", "21.0"),
])
def test_sample_values(name, type_, expected, fixed_context):
    entity = _entity("Thing", props=[{"name": name, "type": type_}])
    row = SeedRow(entity, entity.properties[0], 2, FIXED_NOW.date(), fixed_context)
    assert sample_value(row) == expected


def test_sample_string_respects_max_length(fixed_context):
    entity = _entity("Thing", props=[{"name": "Description", "type": "string", "maxLength": 8}])
    row = SeedRow(entity, entity.properties[0], 1, FIXED_NOW.date(), fixed_context)
    assert sample_value(row) == '"Sample t"'


def test_dates_come_from_the_clock(fixed_context):
    entity = _entity("Thing", props=[{"name": "DueDate", "type": "DateTime"}])
    row = SeedRow(entity, entity.properties[0], 1, FIXED_NOW.date(), fixed_context)
    assert sample_value(row) == "new DateTime(2026, 1, 14, 0, 0, 0, DateTimeKind.Utc)"


def _row(prop, index, fixed_context):
    entity = _entity("Thing", props=[prop])
    return SeedRow(entity, entity.properties[0], index, FIXED_NOW.date(), fixed_context)


@pytest.mark.parametrize("prop,index,expected", [
    ({"name": "Price", "type": "decimal", "constraints": {"minValue": 100}}, 2, "102m"),
    ({"name": "TotalAmount", "type": "decimal", "constraints": {"minValue": 5}}, 1, "15.5m"),
    ({"name": "ShippingCost", "type": "decimal"}, 3, "26.5m"),
])
def test_money_values_honor_min_value(prop, index, expected, fixed_context):
    assert sample_value(_row(prop, index, fixed_context)) == expected


@pytest.mark.parametrize("name,index,expected", [
    ("Latitude", 1, "40.1"),
    ("Lat", 3, "40.3"),
    ("Longitude", 2, "-73.8"),
    ("Lng", 1, "-73.9"),
])
def test_coordinates_stay_in_range(name, index, expected, fixed_context):
    assert sample_value(_row({"name": name, "type": "double"}, index, fixed_context)) == expected


def test_generic_string_fallback_is_truncated(fixed_context):
    assert sample_value(_row({"name": "Label", "type": "string"}, 3, fixed_context)) == '"Label 3"'
    short = {"name": "Label", "type": "string", "maxLength": 5}
    assert sample_value(_row(short, 3, fixed_context)) == '"Label"'


def test_unknown_type_fallback(fixed_context):
    """Only nullable members may be seeded with null."""
    assert sample_value(_row({"name": "Duration", "type": "TimeSpan"}, 1, fixed_context)) == "default"
    nullable = {"name": "Duration", "type": "TimeSpan", "isNullable": True}
    assert sample_value(_row(nullable, 1, fixed_context)) == "null"
