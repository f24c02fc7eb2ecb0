"""Tests for persistence renderers."""
import pytest

from archgen.core.errors import RenderError
from archgen.generators.cqrs_gen.render_infrastructure import (
    render_audit_service,
    render_db_context,
    render_entity_configuration,
    render_registry_interface,
)
from archgen.schemas.entities import StubEntity

from conftest import make_customer, make_product


def test_configuration_basics(product, config):
    text = render_entity_configuration(product, config)
    assert 'builder.ToTable("Products");' in text
    assert "builder.HasKey(x => x.Id);" in text
    assert "builder.Property(x => x.Name)\n            .IsRequired()\n            .HasMaxLength(200);" in text
    assert "builder.HasQueryFilter(x => !x.IsDeleted);" in text


def test_relationship_shapes(config):
    entity = make_product(relationships=[
        {"type": "ManyToOne", "relatedEntity": "Category", "navigationProperty": "Category",
         "inverseNavigationProperty": "Products", "foreignKeyProperty": "CategoryId",
         "onDeleteBehavior": "Cascade"},
        {"type": "OneToMany", "relatedEntity": "Review", "navigationProperty": "Reviews"},
        {"type": "OneToOne", "relatedEntity": "Sku", "navigationProperty": "Sku", "foreignKeyProperty": "ProductId"},
        {"type": "ManyToMany", "relatedEntity": "Tag", "navigationProperty": "Tags",
         "inverseNavigationProperty": "Products", "joinTableName": "ProductTags"},
    ])
    text = render_entity_configuration(entity, config)
    assert "builder.HasOne(x => x.Category)" in text
    assert ".WithMany(x => x.Products)" in text
    assert ".HasForeignKey(x => x.CategoryId)" in text
    assert ".OnDelete(DeleteBehavior.Cascade);" in text
    assert "builder.HasMany(x => x.Reviews)" in text
    assert ".WithOne()" in text
    assert ".OnDelete(DeleteBehavior.Restrict);" in text
    assert ".HasForeignKey<Sku>(x => x.ProductId)" in text
    assert '.UsingEntity(j => j.ToTable("ProductTags"));' in text


def test_many_to_many_without_join_table(config):
    entity = make_product(relationships=[
        {"type": "ManyToMany", "relatedEntity": "Tag", "navigationProperty": "Tags"},
    ])
    text = render_entity_configuration(entity, config)
    assert "UsingEntity" not in text


def test_missing_navigation_property_is_a_render_error(config):
    entity = make_product(relationships=[{"type": "ManyToOne", "relatedEntity": "Category"}])
    with pytest.raises(RenderError, match="Product"):
        render_entity_configuration(entity, config)


def test_one_to_one_requires_foreign_key(config):
    entity = make_product(relationships=[{"type": "OneToOne", "relatedEntity": "Sku", "navigationProperty": "Sku"}])
    with pytest.raises(RenderError, match="foreign key"):
        render_entity_configuration(entity, config)


def test_business_key_index(config):
    entity = make_product(businessKeys=["Name", "Price"])
    text = render_entity_configuration(entity, config)
    assert "builder.HasIndex(x => new { x.Name, x.Price })" in text
    assert '.HasDatabaseName("IX_Product_Name_Price_BusinessKey");' in text


def test_unique_and_indexed_properties(config):
    entity = make_customer(properties=[
        {"name": "Email", "type": "string", "constraints": {"isUnique": True}},
        {"name": "City", "type": "string", "constraints": {"isIndexed": True}},
    ])
    text = render_entity_configuration(entity, config)
    assert "builder.HasIndex(x => x.Email).IsUnique();" in text
    assert "builder.HasIndex(x => x.City);" in text


def test_registry_lists_every_entity(product, customer, config):
    text = render_registry_interface([product, customer], config)
    assert "DbSet<Product> Products { get; }" in text
    assert "DbSet<Customer> Customers { get; }" in text
    assert "DbSet<AuditLog> AuditLogs { get; }" in text
    context = render_db_context([product, customer], config)
    assert "public DbSet<Customer> Customers => Set<Customer>();" in context
    assert "ApplyConfigurationsFromAssembly" in context
    assert "ApplicationDbContextSeed" not in context


def test_registry_accepts_stubs(customer, config):
    text = render_registry_interface([StubEntity("Product", "Shop"), customer], config)
    assert text.index("Products") < text.index("Customers")


def test_unknown_related_entity(config):
    entity = make_product(relationships=[
        {"type": "ManyToOne", "relatedEntity": "Ghost", "navigationProperty": "Ghost", "foreignKeyProperty": "GhostId"},
    ])
    with pytest.raises(RenderError, match="Ghost"):
        render_db_context([entity], config)


def test_db_context_records_audit_entries(product, config):
    context = render_db_context([product], config)
    assert "using Shop.Infrastructure.Services;" in context
    assert "AuditLogs.AddRange(AuditService.CreateEntries(ChangeTracker));" in context
    assert context.index("AuditService.CreateEntries") < context.index("return base.SaveChangesAsync")

    quiet = render_db_context([product], config.model_copy(update={"generate_audit_log": False}))
    assert "AuditService" not in quiet
    assert "AuditLogs" not in quiet


def test_audit_service(config):
    text = render_audit_service(config)
    assert "namespace Shop.Infrastructure.Services;" in text
    assert "public static class AuditService" in text
    assert "if (entry.Entity is AuditLog" in text
    assert "Action = entry.State.ToString()," in text
    assert "JsonSerializer.Serialize(data)" in text
