"""Shared fixtures for generator tests."""
from datetime import datetime, timezone

import pytest

from archgen.generators.cqrs_gen.context import NameBasedIdentifiers, RenderContext
from archgen.schemas.config import GenerationConfig
from archgen.schemas.entities import EntityModel

FIXED_NOW = datetime(2026, 1, 15, 12, 0, tzinfo=timezone.utc)


def make_product(**overrides) -> EntityModel:
    data = {
        "name": "Product",
        "hasAuditFields": True,
        "hasSoftDelete": True,
        "properties": [
            {"name": "Id", "type": "int", "isKey": True, "isRequired": True},
            {"name": "Name", "type": "string", "isRequired": True, "maxLength": 200},
            {"name": "Price", "type": "decimal", "isRequired": True},
        ],
    }
    data.update(overrides)
    return EntityModel.model_validate(data)


def make_customer(**overrides) -> EntityModel:
    data = {
        "name": "Customer",
        "properties": [
            {"name": "Id", "type": "int", "isKey": True, "isRequired": True},
            {"name": "Email", "type": "string", "isRequired": True, "maxLength": 255},
            {"name": "Phone", "type": "string", "isNullable": True, "maxLength": 20},
        ],
    }
    data.update(overrides)
    return EntityModel.model_validate(data)


@pytest.fixture
def product() -> EntityModel:
    return make_product()


@pytest.fixture
def customer() -> EntityModel:
    return make_customer()


@pytest.fixture
def config(tmp_path) -> GenerationConfig:
    return GenerationConfig(output_path=str(tmp_path / "out"), root_namespace="Shop")


@pytest.fixture
def fixed_context() -> RenderContext:
    return RenderContext(ids=NameBasedIdentifiers("tests"), clock=lambda: FIXED_NOW)
