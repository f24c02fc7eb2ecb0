"""Tests for the domain entity renderer."""
import re

import pytest

from archgen.core.errors import RenderError
from archgen.generators.cqrs_gen.render_domain import render_audit_log, render_entity
from archgen.schemas.entities import EntityModel

from conftest import make_product


def _members(text):
    return re.findall(r"public [\w<>?]+ (\w+) \{ get; set; \}", text)


def test_entity_member_order(product, config):
    """Declared properties, then audit fields, then soft-delete fields."""
    text = render_entity(product, config)
    assert _members(text) == [
        "Id", "Name", "Price",
        "CreatedAt", "CreatedBy", "UpdatedAt", "UpdatedBy",
        "IsDeleted", "DeletedAt", "DeletedBy",
    ]
    assert "namespace Shop.Domain.Entities;" in text
    assert "[Key]" in text
    assert "[MaxLength(200)]" in text
    assert "public string Name { get; set; } = string.Empty;" in text


def test_nullable_marker_only_on_reference_types(config):
    entity = EntityModel.model_validate({
        "name": "Note",
        "properties": [
            {"name": "Body", "type": "string", "isNullable": True},
            {"name": "Rating", "type": "int", "isNullable": True},
        ],
    })
    text = render_entity(entity, config)
    assert "public string? Body { get; set; }" in text
    assert "public int Rating { get; set; }" in text
    # implicit key is rendered first
    assert _members(text)[0] == "Id"


def test_navigation_members(config):
    entity = make_product(relationships=[
        {"type": "ManyToOne", "relatedEntity": "Category", "navigationProperty": "Category",
         "foreignKeyProperty": "CategoryId"},
        {"type": "OneToMany", "relatedEntity": "Review", "navigationProperty": "Reviews"},
        {"type": "ManyToOne", "relatedEntity": "Brand"},
    ])
    text = render_entity(entity, config)
    assert "public virtual Category? Category { get; set; }" in text
    assert "public virtual ICollection<Review> Reviews { get; set; } = new List<Review>();" in text
    assert "Brand" not in text


def test_default_values(config):
    entity = EntityModel.model_validate({
        "name": "Flag",
        "properties": [
            {"name": "Enabled", "type": "bool", "defaultValue": "true"},
            {"name": "Weight", "type": "decimal", "defaultValue": "1.5"},
        ],
    })
    text = render_entity(entity, config)
    assert "public bool Enabled { get; set; } = true;" in text
    assert "public decimal Weight { get; set; } = 1.5m;" in text


def test_render_audit_log(config):
    text = render_audit_log(config)
    assert "namespace Shop.Domain.Common;" in text
    assert "public class AuditLog" in text


def test_unmarked_id_is_rendered_once(config):
    entity = EntityModel.model_validate({
        "name": "Tag",
        "properties": [{"name": "Id", "type": "int"}, {"name": "Label", "type": "string"}],
    })
    text = render_entity(entity, config)
    assert _members(text) == ["Id", "Label"]
    assert text.count("[Key]") == 1


def test_second_marked_key_is_a_plain_member(config):
    entity = EntityModel.model_validate({
        "name": "Line",
        "properties": [
            {"name": "OrderId", "type": "int", "isKey": True},
            {"name": "LineNo", "type": "int", "isKey": True},
        ],
    })
    text = render_entity(entity, config)
    assert text.count("[Key]") == 1
    assert "[Key]\n    public int OrderId" in text


def test_numeric_default_accepts_csharp_suffix(config):
    entity = EntityModel.model_validate({
        "name": "Price",
        "properties": [{"name": "Amount", "type": "decimal", "defaultValue": "0m"}],
    })
    assert "public decimal Amount { get; set; } = 0m;" in render_entity(entity, config)


def test_malformed_numeric_default_is_render_error(config):
    entity = EntityModel.model_validate({
        "name": "Price",
        "properties": [{"name": "Amount", "type": "decimal", "defaultValue": "free"}],
    })
    with pytest.raises(RenderError) as exc:
        render_entity(entity, config)
    assert exc.value.entity == "Price"
