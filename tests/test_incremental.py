"""Tests for incremental generation into an existing project."""
import threading
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from archgen.core.errors import GenerationCancelled, ProjectNotFoundError, RenderError
from archgen.generators.cqrs_gen.generator import generate
from archgen.generators.cqrs_gen.incremental import discover_entity_names, generate_incremental
from archgen.generators.cqrs_gen.layout import DB_CONTEXT_PATH, REGISTRY_INTERFACE_PATH
from archgen.generators.cqrs_gen.writer import LocalFileWriter

from conftest import make_customer


def _snapshot(root: Path):
    return {p.relative_to(root).as_posix(): p.read_bytes() for p in root.rglob("*") if p.is_file()}


def test_add_entity_to_existing_project(product, customer, config):
    """Only Customer files are created; the two aggregate files are rebuilt."""
    generate([product], config)
    root = Path(config.output_path)

    result = generate_incremental([customer], config, root)

    assert result.entities_added == ["Customer"]
    assert result.new_files
    assert all("Customer" in path for path in result.new_files)
    assert result.updated_files == [REGISTRY_INTERFACE_PATH, DB_CONTEXT_PATH]
    assert result.skipped_files == []
    assert result.failed_files == {}
    registry = (root / REGISTRY_INTERFACE_PATH).read_text()
    assert "DbSet<Product> Products" in registry
    assert "DbSet<Customer> Customers" in registry


def test_existing_entity_files_are_never_modified(product, customer, config):
    generate([product], config)
    root = Path(config.output_path)
    before = _snapshot(root)

    result = generate_incremental([product, customer], config, root)

    after = _snapshot(root)
    for path, content in before.items():
        if path in (REGISTRY_INTERFACE_PATH, DB_CONTEXT_PATH):
            continue
        assert after[path] == content, path
    assert result.entities_added == ["Customer"]
    assert any("Product" in p for p in result.skipped_files)
    assert not [p for p in result.new_files if "Product" in p]


def test_rerun_is_idempotent(product, customer, config):
    generate([product], config)
    root = Path(config.output_path)
    generate_incremental([customer], config, root)

    second = generate_incremental([customer], config, root)
    assert second.entities_added == []
    assert second.new_files == []
    assert len(second.updated_files) == 2


def test_missing_project(customer, config, tmp_path):
    with pytest.raises(ProjectNotFoundError):
        generate_incremental([customer], config, tmp_path / "nope")


def test_stubs_precede_new_entities(product, config):
    generate([product, make_customer()], config)
    root = Path(config.output_path)
    order = make_customer(name="Order")

    generate_incremental([order], config, root)

    registry = (root / REGISTRY_INTERFACE_PATH).read_text()
    assert registry.index("Customers") < registry.index("Products") < registry.index("Orders")


def test_per_entity_render_error_is_recorded(product, config):
    """A broken per-entity file is reported and the run carries on."""
    generate([product], config)
    root = Path(config.output_path)
    broken = make_customer(relationships=[{"type": "ManyToOne", "relatedEntity": "Product"}])

    result = generate_incremental([broken], config, root)

    failed = "Infrastructure/Persistence/Configurations/CustomerConfiguration.cs"
    assert failed in result.failed_files
    assert "navigation property" in result.failed_files[failed]
    assert "Domain/Entities/Customer.cs" in result.new_files
    assert not (root / failed).exists()
    assert len(result.updated_files) == 2


def test_registry_render_error_is_fatal(product, config):
    generate([product], config)
    root = Path(config.output_path)
    with patch("archgen.generators.cqrs_gen.planner.render_registry_interface",
               side_effect=RenderError("boom")):
        with pytest.raises(RenderError):
            generate_incremental([make_customer()], config, root)


def test_discover_entity_names(product, customer, config):
    generate([product, customer], config)
    names = discover_entity_names(Path(config.output_path), LocalFileWriter())
    assert names == ["Customer", "Product"]


def test_unknown_relationship_target_fails_before_any_write(product, config):
    generate([product], config)
    root = Path(config.output_path)
    before = _snapshot(root)
    ghostly = make_customer(relationships=[
        {"type": "ManyToOne", "relatedEntity": "Ghost", "navigationProperty": "Ghost"},
    ])

    with pytest.raises(RenderError, match="Ghost"):
        generate_incremental([ghostly], config, root)
    assert _snapshot(root) == before


def test_cancellation_stops_incremental_run(product, config):
    generate([product], config)
    root = Path(config.output_path)
    cancel = threading.Event()
    writer = MagicMock(wraps=LocalFileWriter())

    def write_then_cancel(path, content):
        cancel.set()

    writer.write.side_effect = write_then_cancel
    with pytest.raises(GenerationCancelled):
        generate_incremental([make_customer()], config, root, writer=writer, cancel=cancel)
    assert writer.write.call_count == 1


def test_cancelled_before_start_writes_nothing(product, config):
    generate([product], config)
    root = Path(config.output_path)
    before = _snapshot(root)
    cancel = threading.Event()
    cancel.set()

    with pytest.raises(GenerationCancelled):
        generate_incremental([make_customer()], config, root, cancel=cancel)
    assert _snapshot(root) == before
