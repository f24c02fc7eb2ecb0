"""Domain layer renderers."""
from archgen.core.errors import RenderError
from archgen.generators.cqrs_gen.emitter import SourceFile, emit
from archgen.generators.cqrs_gen.layout import namespace
from archgen.generators.cqrs_gen.shapes import (
    AUDIT_MEMBERS,
    SOFT_DELETE_MEMBERS,
    entity_member_type,
    initializer,
    property_line,
)
from archgen.generators.cqrs_gen.utils import cs_default_literal
from archgen.schemas.config import GenerationConfig
from archgen.schemas.entities import EntityModel


def render_entity(entity: EntityModel, config: GenerationConfig) -> str:
    """
    Render the domain entity class.

    Members come in a fixed order: declared properties, audit fields, soft-delete
    fields, then one navigation member per relationship that names one.
    """
    source = SourceFile(namespace=namespace(config, "Domain", "Entities"))
    source.use("System", "System.Collections.Generic", "System.ComponentModel.DataAnnotations")
    decl = source.declare(f"public class {entity.name}")

    key_name = entity.key_property.name
    for prop in entity.all_properties:
        block = decl.member()
        if prop.name == key_name:
            block.line("[Key]")
        if prop.is_required and not prop.is_nullable:
            block.line("[Required]")
        if prop.is_string and prop.effective_max_length:
            block.line(f"[MaxLength({prop.effective_max_length})]")
        member_type = entity_member_type(prop)
        init = initializer(prop, member_type)
        try:
            default = cs_default_literal(prop.default_value, prop.type)
        except ValueError as e:
            raise RenderError(f"property '{prop.name}': {e}", entity=entity.name) from None
        if default is not None:
            init = f" = {default};"
        block.line(property_line(prop.name, member_type, init=init))

    if entity.has_audit_fields:
        decl.member().extend([property_line(name, t) for name, t in AUDIT_MEMBERS])

    if entity.has_soft_delete:
        decl.member().extend([property_line(name, t) for name, t in SOFT_DELETE_MEMBERS])

    for rel in entity.relationships:
        if not rel.navigation_property:
            continue
        if rel.is_collection:
            decl.member().line(property_line(
                rel.navigation_property,
                f"virtual ICollection<{rel.related_entity}>",
                init=f" = new List<{rel.related_entity}>();",
            ))
        else:
            decl.member().line(property_line(rel.navigation_property, f"virtual {rel.related_entity}?"))

    return emit(source)


def render_audit_log(config: GenerationConfig) -> str:
    """Shared audit trail record; AuditService fills it on every save."""
    source = SourceFile(namespace=namespace(config, "Domain", "Common"))
    source.use("System")
    decl = source.declare("public class AuditLog", summary="Change history entry for any audited entity.")
    decl.member().extend([
        property_line("Id", "long"),
        property_line("EntityName", "string", init=" = string.Empty;"),
        property_line("EntityId", "string", init=" = string.Empty;"),
        property_line("Action", "string", init=" = string.Empty;"),
        property_line("OldValues", "string?"),
        property_line("NewValues", "string?"),
        property_line("UserId", "string?"),
        property_line("Timestamp", "DateTime"),
    ])
    return emit(source)
