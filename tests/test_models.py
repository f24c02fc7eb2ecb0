"""Tests for the entity and configuration models."""
import pytest

from archgen.core.errors import StubEntityAccessError
from archgen.schemas.config import DatabaseProvider, GenerationConfig
from archgen.schemas.entities import DeleteBehavior, EntityModel, RelationshipModel, StubEntity


def test_entity_accepts_camel_case_payload():
    """Wire payloads use camelCase keys."""
    entity = EntityModel.model_validate({
        "name": "Order",
        "hasSoftDelete": True,
        "businessKeys": ["Number"],
        "properties": [{"name": "Number", "type": "string", "isRequired": True, "maxLength": 20}],
    })
    assert entity.has_soft_delete is True
    assert entity.business_keys == ["Number"]
    assert entity.properties[0].effective_max_length == 20


def test_implicit_key_is_id_int():
    """An entity without a marked key falls back to Id: int."""
    entity = EntityModel(name="Tag", properties=[{"name": "Label", "type": "string"}])
    key = entity.key_property
    assert (key.name, key.type, key.is_key) == ("Id", "int", True)
    assert [p.name for p in entity.all_properties] == ["Id", "Label"]
    assert [p.name for p in entity.non_key_properties] == ["Label"]


def test_unmarked_id_property_becomes_the_key():
    """A declared Id is adopted as the key rather than shadowed by an implicit one."""
    entity = EntityModel(name="Tag", properties=[
        {"name": "Id", "type": "int"},
        {"name": "Label", "type": "string"},
    ])
    assert entity.key_property is entity.properties[0]
    assert entity.key_property.is_key is True
    assert [p.name for p in entity.all_properties] == ["Id", "Label"]
    assert [p.name for p in entity.non_key_properties] == ["Label"]


def test_only_first_marked_key_is_excluded():
    entity = EntityModel(name="Line", properties=[
        {"name": "OrderId", "type": "int", "isKey": True},
        {"name": "LineNo", "type": "int", "isKey": True},
        {"name": "Quantity", "type": "int"},
    ])
    assert entity.key_property.name == "OrderId"
    assert [p.name for p in entity.non_key_properties] == ["LineNo", "Quantity"]


def test_constraint_max_length_wins():
    entity = EntityModel.model_validate({
        "name": "Tag",
        "properties": [{"name": "Label", "type": "string", "maxLength": 10, "constraints": {"maxLength": 30}}],
    })
    assert entity.properties[0].effective_max_length == 30


def test_relationship_defaults_to_restrict():
    rel = RelationshipModel.model_validate({"type": "ManyToOne", "relatedEntity": "Customer"})
    assert rel.on_delete_behavior is DeleteBehavior.RESTRICT
    assert rel.is_collection is False


def test_stub_entity_refuses_shape_access():
    """Stubs know only their name; asking for anything else is an error."""
    stub = StubEntity("Product", "Shop")
    assert stub.plural_name == "Products"
    assert stub.related_names() == []
    with pytest.raises(StubEntityAccessError):
        stub.properties
    with pytest.raises(StubEntityAccessError):
        stub.key_property


def test_flat_config_keys_are_nested():
    """Legacy flat keys land in their option group."""
    config = GenerationConfig.model_validate({
        "rootNamespace": "Acme",
        "databaseProvider": "PostgreSQL",
        "generateTests": True,
        "generateSeedData": True,
    })
    assert config.database.provider is DatabaseProvider.POSTGRESQL
    assert config.database.generate_seed_data is True
    assert config.testing.generate_unit_tests is True
    assert config.generate_tests is True


def test_config_defaults():
    config = GenerationConfig()
    assert config.root_namespace == "MyApp"
    assert config.use_mediator and config.use_fluent_validation and config.use_auto_mapper
    assert config.project_name("Api") == "MyApp.Api"
