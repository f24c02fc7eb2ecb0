"""Tests for full project generation."""
import threading
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from archgen.core.errors import GenerationCancelled, RenderError, ValidationError
from archgen.generators.cqrs_gen.generator import generate, render_project
from archgen.generators.cqrs_gen.types import ArtifactKind
from archgen.generators.cqrs_gen.writer import LocalFileWriter
from archgen.schemas.config import GenerationConfig
from archgen.schemas.entities import EntityModel

from conftest import make_product


def test_generate_writes_every_layer(product, customer, config):
    artifacts = generate([product, customer], config)
    out = Path(config.output_path)
    for path in (
        "Domain/Entities/Product.cs",
        "Application/Products/ProductDto.cs",
        "Application/Products/Commands/CreateProduct/CreateProductCommand.cs",
        "Application/Products/Commands/CreateProduct/CreateProductCommandValidator.cs",
        "Application/Products/Queries/GetAllProducts/GetAllProductsQueryHandler.cs",
        "Application/Mappings/CustomerMappingProfile.cs",
        "Infrastructure/Persistence/Configurations/CustomerConfiguration.cs",
        "Api/Controllers/ProductsController.cs",
        "Application/Common/Interfaces/IApplicationDbContext.cs",
        "Infrastructure/Persistence/ApplicationDbContext.cs",
        "Api/Program.cs",
        "Shop.sln",
    ):
        assert (out / path).is_file(), path
    assert len(artifacts) == len({a.path for a in artifacts})
    assert "namespace Shop.Domain.Entities;" in (out / "Domain/Entities/Product.cs").read_text()


def test_entity_artifacts_precede_common(product, customer, config, fixed_context):
    artifacts = render_project([product, customer], config, fixed_context)
    kinds = [a.kind for a in artifacts]
    first_common = kinds.index(ArtifactKind.REGISTRY_INTERFACE)
    assert all(k.value.startswith(("Domain/", "Application/", "Infrastructure/", "Api/", "Tests/"))
               for k in kinds[:first_common])
    assert artifacts[0].path == "Domain/Entities/Product.cs"


def test_no_validators_without_fluent_validation(product, customer, config):
    config = config.model_copy(update={"use_fluent_validation": False})
    artifacts = generate([product, customer], config)
    paths = [a.path for a in artifacts]
    assert not [p for p in paths if p.endswith("Validator.cs")]
    assert "Application/Products/Commands/CreateProduct/CreateProductCommandHandler.cs" in paths


def test_layer_toggles(product, config):
    config = config.model_copy(update={"generate_api": False, "generate_infrastructure": False})
    kinds = {a.kind for a in render_project([product], config)}
    assert ArtifactKind.CONTROLLER not in kinds
    assert ArtifactKind.ENTITY_CONFIGURATION not in kinds
    assert ArtifactKind.ENTITY in kinds


def test_render_is_deterministic_with_fixed_context(product, customer, config, fixed_context):
    config = config.model_copy(update={"database": config.database.model_copy(update={"generate_seed_data": True})})
    first = render_project([product, customer], config, fixed_context)
    second = render_project([product, customer], config, fixed_context)
    assert first == second


def test_deterministic_identifiers_flag(product, config):
    config = config.model_copy(update={"deterministic_identifiers": True})
    first = {a.path: a.content for a in render_project([product], config)}
    second = {a.path: a.content for a in render_project([product], config)}
    assert first["Shop.sln"] == second["Shop.sln"]


@pytest.mark.parametrize("entities,message", [
    ([], "At least one entity"),
    ([EntityModel(name="Bad Name", properties=[{"name": "A"}])], "not a valid identifier"),
    ([EntityModel(name="Empty")], "at least one property"),
    ([EntityModel(name="Dup", properties=[{"name": "A"}]),
      EntityModel(name="Dup", properties=[{"name": "A"}])], "more than once"),
    ([EntityModel(name="Keyed", properties=[{"name": "A"}], business_keys=["Nope"])], "business key"),
    ([EntityModel(name="Price", properties=[{"name": "Amount", "type": "decimal", "defaultValue": "ten"}])],
     "not a valid decimal"),
])
def test_validation_errors(entities, message, config):
    writer = MagicMock()
    with pytest.raises(ValidationError, match=message):
        generate(entities, config, writer=writer)
    writer.write.assert_not_called()


def test_invalid_root_namespace(product, config):
    config = config.model_copy(update={"root_namespace": "My App"})
    with pytest.raises(ValidationError, match="rootNamespace"):
        generate([product], config, writer=MagicMock())


def test_render_error_writes_nothing(customer, config):
    """A failure in any renderer aborts before the first write."""
    broken = make_product(relationships=[{"type": "ManyToOne", "relatedEntity": "Customer"}])
    writer = MagicMock()
    with pytest.raises(RenderError):
        generate([broken, customer], config, writer=writer)
    writer.write.assert_not_called()
    writer.ensure_dir.assert_not_called()


def test_cancellation_between_writes(product, config):
    cancel = threading.Event()
    writer = MagicMock(wraps=LocalFileWriter())

    def write_then_cancel(path, content):
        cancel.set()

    writer.write.side_effect = write_then_cancel
    with pytest.raises(GenerationCancelled):
        generate([product], config, writer=writer, cancel=cancel)
    assert writer.write.call_count == 1


def test_audit_trail_artifacts(product, config):
    artifacts = render_project([product], config)
    paths = {a.path for a in artifacts}
    assert {
        "Domain/Common/AuditLog.cs",
        "Infrastructure/Persistence/Configurations/AuditLogConfiguration.cs",
        "Infrastructure/Services/AuditService.cs",
        "Api/Controllers/AuditController.cs",
    } <= paths

    without_api = render_project([product], config.model_copy(update={"generate_api": False}))
    assert "Api/Controllers/AuditController.cs" not in {a.path for a in without_api}


def test_paged_endpoints_flag(product, config):
    paged_dir = "Application/Products/Queries/GetPagedProducts/"
    default = {a.path for a in render_project([product], config)}
    assert not any(p.startswith(paged_dir) for p in default)

    config = GenerationConfig.model_validate({
        "rootNamespace": "Shop", "outputPath": config.output_path, "generatePagedEndpoints": True,
    })
    paths = {a.path for a in render_project([product], config)}
    assert paged_dir + "GetPagedProductsQuery.cs" in paths
    assert paged_dir + "GetPagedProductsQueryHandler.cs" in paths
