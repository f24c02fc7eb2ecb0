"""Persistence renderers: entity configurations and the aggregate registry."""
from typing import List, Sequence

from archgen.core.errors import RenderError
from archgen.generators.cqrs_gen.emitter import CodeBlock, SourceFile, emit
from archgen.generators.cqrs_gen.layout import namespace
from archgen.generators.cqrs_gen.utils import cs_default_literal, cs_string
from archgen.schemas.config import GenerationConfig
from archgen.schemas.entities import EntityModel, RelationshipModel, RelationshipType


def ensure_resolved(entities: Sequence) -> None:
    """Raise RenderError when a relationship names an entity outside the set."""
    known = {e.name for e in entities}
    for entity in entities:
        for related in entity.related_names():
            if related not in known:
                raise RenderError(f"relationship references unknown entity '{related}'", entity=entity.name)


def _chain(block: CodeBlock, head: str, calls: List[str]) -> None:
    if not calls:
        block.line(f"{head};")
        return
    block.line(head)
    with block.indent():
        for i, call in enumerate(calls):
            block.line(call + (";" if i == len(calls) - 1 else ""))


def _relationship_calls(entity: EntityModel, rel: RelationshipModel) -> List[str]:
    """The four relationship shapes, keyed by relationship type."""
    if not rel.navigation_property:
        raise RenderError(
            f"{rel.type.value} relationship to '{rel.related_entity}' has no navigation property",
            entity=entity.name,
        )
    nav = rel.navigation_property
    inverse = f"x => x.{rel.inverse_navigation_property}" if rel.inverse_navigation_property else ""
    fk = rel.foreign_key_property
    on_delete = f".OnDelete(DeleteBehavior.{rel.on_delete_behavior.value})"

    if rel.type is RelationshipType.ONE_TO_MANY:
        calls = [f".WithOne({inverse})"]
        if fk:
            calls.append(f".HasForeignKey(x => x.{fk})")
        return [f"builder.HasMany(x => x.{nav})", *calls, on_delete]
    if rel.type is RelationshipType.MANY_TO_ONE:
        calls = [f".WithMany({inverse})"]
        if fk:
            calls.append(f".HasForeignKey(x => x.{fk})")
        return [f"builder.HasOne(x => x.{nav})", *calls, on_delete]
    if rel.type is RelationshipType.ONE_TO_ONE:
        if not fk:
            raise RenderError(
                f"OneToOne relationship to '{rel.related_entity}' needs a foreign key property",
                entity=entity.name,
            )
        return [
            f"builder.HasOne(x => x.{nav})",
            f".WithOne({inverse})",
            f".HasForeignKey<{rel.related_entity}>(x => x.{fk})",
            on_delete,
        ]
    calls = [f"builder.HasMany(x => x.{nav})", f".WithMany({inverse})"]
    if rel.join_table_name:
        calls.append(f".UsingEntity(j => j.ToTable({cs_string(rel.join_table_name)}))")
    return calls


def render_entity_configuration(entity: EntityModel, config: GenerationConfig) -> str:
    source = SourceFile(namespace=namespace(config, "Infrastructure", "Persistence", "Configurations"))
    source.use(
        "Microsoft.EntityFrameworkCore",
        "Microsoft.EntityFrameworkCore.Metadata.Builders",
        namespace(config, "Domain", "Entities"),
    )
    decl = source.declare(f"public class {entity.name}Configuration : IEntityTypeConfiguration<{entity.name}>")
    method = decl.member()
    with method.braces(f"public void Configure(EntityTypeBuilder<{entity.name}> builder)"):
        method.line(f"builder.ToTable({cs_string(entity.plural_name)});")
        method.line()
        method.line(f"builder.HasKey(x => x.{entity.key_property.name});")

        for prop in entity.non_key_properties:
            calls: List[str] = []
            if prop.is_required and not prop.is_nullable:
                calls.append(".IsRequired()")
            elif prop.is_nullable:
                calls.append(".IsRequired(false)")
            if prop.is_string and prop.effective_max_length:
                calls.append(f".HasMaxLength({prop.effective_max_length})")
            constraints = prop.constraints
            if constraints and constraints.precision is not None:
                calls.append(f".HasPrecision({constraints.precision}, {constraints.scale or 0})")
            default = cs_default_literal(prop.default_value, prop.type)
            if default is not None:
                calls.append(f".HasDefaultValue({default})")
            if constraints and constraints.is_computed:
                calls.append(".ValueGeneratedOnAddOrUpdate()")
            method.line()
            _chain(method, f"builder.Property(x => x.{prop.name})", calls)
            if constraints and constraints.is_unique:
                method.line(f"builder.HasIndex(x => x.{prop.name}).IsUnique();")
            elif constraints and constraints.is_indexed:
                method.line(f"builder.HasIndex(x => x.{prop.name});")

        if entity.has_soft_delete:
            method.line()
            method.line("builder.HasQueryFilter(x => !x.IsDeleted);")

        for rel in entity.relationships:
            head, *calls = _relationship_calls(entity, rel)
            method.line()
            _chain(method, head, calls)

        if entity.business_keys:
            keys = entity.business_keys
            index_name = f"IX_{entity.name}_{'_'.join(keys)}_BusinessKey"
            if len(keys) == 1:
                selector = f"x => x.{keys[0]}"
            else:
                selector = "x => new { " + ", ".join(f"x.{k}" for k in keys) + " }"
            method.line()
            _chain(method, f"builder.HasIndex({selector})",
                   [".IsUnique()", f".HasDatabaseName({cs_string(index_name)})"])
    return emit(source)


def render_registry_interface(entities: Sequence, config: GenerationConfig) -> str:
    """
    Render IApplicationDbContext over every known entity.

    Only entity names are read, so stub entities recovered from disk are fine
    here.
    """
    ensure_resolved(entities)
    source = SourceFile(namespace=namespace(config, "Application", "Common", "Interfaces"))
    source.use("System.Threading", "System.Threading.Tasks", "Microsoft.EntityFrameworkCore",
               namespace(config, "Domain", "Entities"))
    if config.generate_audit_log:
        source.use(namespace(config, "Domain", "Common"))
    decl = source.declare("public interface IApplicationDbContext")
    sets = decl.member()
    for entity in entities:
        sets.line(f"DbSet<{entity.name}> {entity.plural_name} {{ get; }}")
    if config.generate_audit_log:
        sets.line("DbSet<AuditLog> AuditLogs { get; }")
    decl.member().line("Task<int> SaveChangesAsync(CancellationToken cancellationToken = default);")
    return emit(source)


def render_db_context(entities: Sequence, config: GenerationConfig) -> str:
    ensure_resolved(entities)
    source = SourceFile(namespace=namespace(config, "Infrastructure", "Persistence"))
    source.use(
        "System", "System.Threading", "System.Threading.Tasks", "Microsoft.EntityFrameworkCore",
        namespace(config, "Application", "Common", "Interfaces"), namespace(config, "Domain", "Entities"),
    )
    if config.generate_audit_log:
        source.use(namespace(config, "Domain", "Common"), namespace(config, "Infrastructure", "Services"))
    decl = source.declare("public class ApplicationDbContext : DbContext, IApplicationDbContext")

    ctor = decl.member()
    ctor.line("public ApplicationDbContext(DbContextOptions<ApplicationDbContext> options)")
    with ctor.indent():
        ctor.line(": base(options)")
    ctor.extend(["{", "}"])

    sets = decl.member()
    for entity in entities:
        sets.line(f"public DbSet<{entity.name}> {entity.plural_name} => Set<{entity.name}>();")
    if config.generate_audit_log:
        sets.line("public DbSet<AuditLog> AuditLogs => Set<AuditLog>();")

    model = decl.member()
    with model.braces("protected override void OnModelCreating(ModelBuilder modelBuilder)"):
        model.line("base.OnModelCreating(modelBuilder);")
        model.line("modelBuilder.ApplyConfigurationsFromAssembly(typeof(ApplicationDbContext).Assembly);")
        if config.database.generate_seed_data:
            model.line("ApplicationDbContextSeed.SeedData(modelBuilder);")

    save = decl.member()
    with save.braces("public override Task<int> SaveChangesAsync(CancellationToken cancellationToken = default)"):
        with save.braces("foreach (var entry in ChangeTracker.Entries())"):
            with save.braces('if (entry.State == EntityState.Added && entry.Metadata.FindProperty("CreatedAt") != null)'):
                save.line('entry.Property("CreatedAt").CurrentValue = DateTime.UtcNow;')
            with save.braces('else if (entry.State == EntityState.Modified && entry.Metadata.FindProperty("UpdatedAt") != null)'):
                save.line('entry.Property("UpdatedAt").CurrentValue = DateTime.UtcNow;')
        if config.generate_audit_log:
            save.line()
            save.line("AuditLogs.AddRange(AuditService.CreateEntries(ChangeTracker));")
        save.line()
        save.line("return base.SaveChangesAsync(cancellationToken);")
    return emit(source)


def render_audit_log_configuration(config: GenerationConfig) -> str:
    source = SourceFile(namespace=namespace(config, "Infrastructure", "Persistence", "Configurations"))
    source.use("Microsoft.EntityFrameworkCore", "Microsoft.EntityFrameworkCore.Metadata.Builders",
               namespace(config, "Domain", "Common"))
    decl = source.declare("public class AuditLogConfiguration : IEntityTypeConfiguration<AuditLog>")
    method = decl.member()
    with method.braces("public void Configure(EntityTypeBuilder<AuditLog> builder)"):
        method.line('builder.ToTable("AuditLogs");')
        method.line("builder.HasKey(x => x.Id);")
        method.line("builder.Property(x => x.EntityName).IsRequired().HasMaxLength(100);")
        method.line("builder.Property(x => x.EntityId).IsRequired().HasMaxLength(100);")
        method.line("builder.Property(x => x.Action).IsRequired().HasMaxLength(20);")
        method.line("builder.HasIndex(x => new { x.EntityName, x.EntityId });")
    return emit(source)


def render_audit_service(config: GenerationConfig) -> str:
    """
    Render AuditService, which turns pending ChangeTracker entries into AuditLog rows.

    ApplicationDbContext.SaveChangesAsync adds its output before saving. AuditLog
    rows themselves are never audited.
    """
    source = SourceFile(namespace=namespace(config, "Infrastructure", "Services"))
    source.use(
        "System", "System.Collections.Generic", "System.Linq", "System.Text.Json",
        "Microsoft.EntityFrameworkCore", "Microsoft.EntityFrameworkCore.ChangeTracking",
        namespace(config, "Domain", "Common"),
    )
    decl = source.declare("public static class AuditService", summary="Builds audit log entries from pending changes.")

    create = decl.member()
    with create.braces("public static List<AuditLog> CreateEntries(ChangeTracker changeTracker, string? userId = null)"):
        create.line("var logs = new List<AuditLog>();")
        with create.braces("foreach (var entry in changeTracker.Entries())"):
            with create.braces(
                "if (entry.Entity is AuditLog || entry.State is not "
                "(EntityState.Added or EntityState.Modified or EntityState.Deleted))"
            ):
                create.line("continue;")
            create.line()
            with create.braces("logs.Add(new AuditLog", close="});"):
                create.extend([
                    "EntityName = entry.Metadata.ClrType.Name,",
                    "EntityId = GetEntityId(entry),",
                    "Action = entry.State.ToString(),",
                    "OldValues = entry.State == EntityState.Added ? null : Serialize(entry.OriginalValues),",
                    "NewValues = entry.State == EntityState.Deleted ? null : Serialize(entry.CurrentValues),",
                    "UserId = userId,",
                    "Timestamp = DateTime.UtcNow",
                ])
        create.line()
        create.line("return logs;")

    entity_id = decl.member()
    with entity_id.braces("private static string GetEntityId(EntityEntry entry)"):
        entity_id.line("var key = entry.Properties.FirstOrDefault(p => p.Metadata.IsPrimaryKey());")
        entity_id.line("return key?.CurrentValue?.ToString() ?? string.Empty;")

    serialize = decl.member()
    with serialize.braces("private static string Serialize(PropertyValues values)"):
        serialize.line("var data = values.Properties.ToDictionary(p => p.Name, p => values[p]);")
        serialize.line("return JsonSerializer.Serialize(data);")
    return emit(source)
