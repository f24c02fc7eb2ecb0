"""Application layer renderers: DTOs, commands, queries, handlers, validators, mappings."""
from typing import List, Sequence

from archgen.generators.cqrs_gen.emitter import CodeBlock, SourceFile, TypeDeclaration, emit
from archgen.generators.cqrs_gen.layout import (
    command_name,
    command_namespace,
    feature_namespace,
    get_all_query_name,
    get_by_id_query_name,
    get_paged_query_name,
    namespace,
    query_namespace,
)
from archgen.generators.cqrs_gen.shapes import dto_members, initializer, nullable_type, property_line
from archgen.generators.cqrs_gen.utils import cs_number, cs_string, cs_verbatim
from archgen.schemas.config import GenerationConfig
from archgen.schemas.entities import EntityModel, PropertyModel

SOFT_DELETE_PREDICATE = ".Where(x => x.IsDeleted == false)"


def _request_base(config: GenerationConfig, response_type: str) -> str:
    return f" : IRequest<{response_type}>" if config.use_mediator else ""


def _command_member(prop: PropertyModel) -> str:
    member_type = nullable_type(prop)
    return property_line(prop.name, member_type, "get; init;", initializer(prop, member_type))


# ---------------------------------------------------------------------------
# DTO
# ---------------------------------------------------------------------------

def render_dto(entity: EntityModel, config: GenerationConfig) -> str:
    source = SourceFile(namespace=feature_namespace(config, entity.name))
    source.use("System")
    decl = source.declare(f"public class {entity.name}Dto")
    block = decl.member()
    for name, member_type in dto_members(entity):
        block.line(property_line(name, member_type, init=" = string.Empty;" if member_type == "string" else ""))
    return emit(source)


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------

def render_create_command(entity: EntityModel, config: GenerationConfig) -> str:
    key = entity.key_property
    source = SourceFile(namespace=command_namespace(config, "Create", entity.name))
    source.use("System")
    if config.use_mediator:
        source.use("MediatR")
    decl = source.declare(f"public record {command_name('Create', entity.name)}{_request_base(config, key.type)}")
    decl.member().extend([_command_member(p) for p in entity.non_key_properties])
    return emit(source)


def render_update_command(entity: EntityModel, config: GenerationConfig) -> str:
    key = entity.key_property
    source = SourceFile(namespace=command_namespace(config, "Update", entity.name))
    source.use("System")
    if config.use_mediator:
        source.use("MediatR")
    decl = source.declare(f"public record {command_name('Update', entity.name)}{_request_base(config, 'bool')}")
    decl.member().extend([_command_member(p) for p in [key, *entity.non_key_properties]])
    return emit(source)


def render_delete_command(entity: EntityModel, config: GenerationConfig) -> str:
    key = entity.key_property
    source = SourceFile(namespace=command_namespace(config, "Delete", entity.name))
    source.use("System")
    if config.use_mediator:
        source.use("MediatR")
    source.declare(
        f"public record {command_name('Delete', entity.name)}({key.type} {key.name}){_request_base(config, 'bool')}",
        bodyless=True,
    )
    return emit(source)


# ---------------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------------

def _handler_source(entity: EntityModel, config: GenerationConfig, ns: str) -> SourceFile:
    source = SourceFile(namespace=ns)
    source.use("System", "System.Threading", "System.Threading.Tasks")
    if config.use_mediator:
        source.use("MediatR")
    source.use(
        "Microsoft.EntityFrameworkCore",
        namespace(config, "Application", "Common", "Interfaces"),
        namespace(config, "Domain", "Entities"),
    )
    return source


def _handler_class(source: SourceFile, config: GenerationConfig, request: str, response: str) -> TypeDeclaration:
    base = f" : IRequestHandler<{request}, {response}>" if config.use_mediator else ""
    decl = source.declare(f"public class {request}Handler{base}")
    decl.member().line("private readonly IApplicationDbContext _context;")
    ctor = decl.member()
    with ctor.braces(f"public {request}Handler(IApplicationDbContext context)"):
        ctor.line("_context = context;")
    return decl


def _find_by_key(block: CodeBlock, entity: EntityModel) -> None:
    key = entity.key_property.name
    block.line(
        f"var entity = await _context.{entity.plural_name}"
        f".FirstOrDefaultAsync(x => x.{key} == request.{key}, cancellationToken);"
    )
    block.line()
    with block.braces("if (entity == null)"):
        block.line("return false;")
    block.line()


def render_create_handler(entity: EntityModel, config: GenerationConfig) -> str:
    key = entity.key_property
    request = command_name("Create", entity.name)
    source = _handler_source(entity, config, command_namespace(config, "Create", entity.name))
    decl = _handler_class(source, config, request, key.type)

    handle = decl.member()
    with handle.braces(f"public async Task<{key.type}> Handle({request} request, CancellationToken cancellationToken)"):
        assignments = [f"{p.name} = request.{p.name}" for p in entity.non_key_properties]
        if entity.has_audit_fields:
            assignments.append("CreatedAt = DateTime.UtcNow")
        with handle.braces(f"var entity = new {entity.name}", close="};"):
            for i, assignment in enumerate(assignments):
                handle.line(assignment + ("," if i < len(assignments) - 1 else ""))
        handle.line()
        handle.line(f"_context.{entity.plural_name}.Add(entity);")
        handle.line("await _context.SaveChangesAsync(cancellationToken);")
        handle.line()
        handle.line(f"return entity.{key.name};")
    return emit(source)


def render_update_handler(entity: EntityModel, config: GenerationConfig) -> str:
    request = command_name("Update", entity.name)
    source = _handler_source(entity, config, command_namespace(config, "Update", entity.name))
    decl = _handler_class(source, config, request, "bool")

    handle = decl.member()
    with handle.braces(f"public async Task<bool> Handle({request} request, CancellationToken cancellationToken)"):
        _find_by_key(handle, entity)
        for prop in entity.non_key_properties:
            handle.line(f"entity.{prop.name} = request.{prop.name};")
        if entity.has_audit_fields:
            handle.line("entity.UpdatedAt = DateTime.UtcNow;")
        handle.line()
        handle.line("await _context.SaveChangesAsync(cancellationToken);")
        handle.line()
        handle.line("return true;")
    return emit(source)


def render_delete_handler(entity: EntityModel, config: GenerationConfig) -> str:
    """Soft-delete entities are flagged and timestamped; others are removed."""
    request = command_name("Delete", entity.name)
    source = _handler_source(entity, config, command_namespace(config, "Delete", entity.name))
    decl = _handler_class(source, config, request, "bool")

    handle = decl.member()
    with handle.braces(f"public async Task<bool> Handle({request} request, CancellationToken cancellationToken)"):
        _find_by_key(handle, entity)
        if entity.has_soft_delete:
            handle.line("entity.IsDeleted = true;")
            handle.line("entity.DeletedAt = DateTime.UtcNow;")
        else:
            handle.line(f"_context.{entity.plural_name}.Remove(entity);")
        handle.line()
        handle.line("await _context.SaveChangesAsync(cancellationToken);")
        handle.line()
        handle.line("return true;")
    return emit(source)


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------

def render_get_by_id_query(entity: EntityModel, config: GenerationConfig) -> str:
    key = entity.key_property
    query = get_by_id_query_name(entity.name)
    source = SourceFile(namespace=query_namespace(config, query, entity.name))
    source.use("System")
    if config.use_mediator:
        source.use("MediatR")
    source.declare(
        f"public record {query}({key.type} {key.name}){_request_base(config, f'{entity.name}Dto?')}",
        bodyless=True,
    )
    return emit(source)


def render_get_all_query(entity: EntityModel, config: GenerationConfig) -> str:
    query = get_all_query_name(entity.name)
    source = SourceFile(namespace=query_namespace(config, query, entity.name))
    source.use("System.Collections.Generic")
    if config.use_mediator:
        source.use("MediatR")
    source.declare(f"public record {query}{_request_base(config, f'List<{entity.name}Dto>')}", bodyless=True)
    return emit(source)


def _projection(block: CodeBlock, entity: EntityModel) -> None:
    members = dto_members(entity)
    with block.braces(f".Select(x => new {entity.name}Dto", close="})"):
        for i, (name, _) in enumerate(members):
            block.line(f"{name} = x.{name}" + ("," if i < len(members) - 1 else ""))


def _query_handler_source(entity: EntityModel, config: GenerationConfig, query: str) -> SourceFile:
    source = _handler_source(entity, config, query_namespace(config, query, entity.name))
    source.use("System.Collections.Generic", "System.Linq", feature_namespace(config, entity.name))
    return source


def render_get_by_id_handler(entity: EntityModel, config: GenerationConfig) -> str:
    key = entity.key_property
    query = get_by_id_query_name(entity.name)
    response = f"{entity.name}Dto?"
    source = _query_handler_source(entity, config, query)
    decl = _handler_class(source, config, query, response)

    handle = decl.member()
    with handle.braces(f"public async Task<{response}> Handle({query} request, CancellationToken cancellationToken)"):
        handle.line(f"return await _context.{entity.plural_name}")
        with handle.indent():
            handle.line(".AsNoTracking()")
            if entity.has_soft_delete:
                handle.line(SOFT_DELETE_PREDICATE)
            handle.line(f".Where(x => x.{key.name} == request.{key.name})")
            _projection(handle, entity)
            handle.line(".FirstOrDefaultAsync(cancellationToken);")
    return emit(source)


def render_get_all_handler(entity: EntityModel, config: GenerationConfig) -> str:
    query = get_all_query_name(entity.name)
    response = f"List<{entity.name}Dto>"
    source = _query_handler_source(entity, config, query)
    decl = _handler_class(source, config, query, response)

    handle = decl.member()
    with handle.braces(f"public async Task<{response}> Handle({query} request, CancellationToken cancellationToken)"):
        handle.line(f"return await _context.{entity.plural_name}")
        with handle.indent():
            handle.line(".AsNoTracking()")
            if entity.has_soft_delete:
                handle.line(SOFT_DELETE_PREDICATE)
            _projection(handle, entity)
            handle.line(".ToListAsync(cancellationToken);")
    return emit(source)


SORTABLE_PROPERTIES = 5


def render_get_paged_query(entity: EntityModel, config: GenerationConfig) -> str:
    query = get_paged_query_name(entity.name)
    source = SourceFile(namespace=query_namespace(config, query, entity.name))
    if config.use_mediator:
        source.use("MediatR")
    source.use(namespace(config, "Application", "Common", "Models"))
    base = f", IRequest<PagedResult<{entity.name}Dto>>" if config.use_mediator else ""
    source.declare(f"public record {query} : PagedQuery{base}", bodyless=True)
    return emit(source)


def _search_filter(block: CodeBlock, entity: EntityModel) -> None:
    searchable = [p for p in entity.all_properties if p.is_string]
    if not searchable:
        return
    clauses = []
    for prop in searchable:
        match = f"x.{prop.name}.ToLower().Contains(term)"
        clauses.append(f"(x.{prop.name} != null && {match})" if prop.is_nullable else match)
    block.line()
    with block.braces("if (!string.IsNullOrWhiteSpace(request.SearchTerm))"):
        block.line("var term = request.SearchTerm.ToLower();")
        block.line("query = query.Where(x =>")
        with block.indent():
            for i, clause in enumerate(clauses):
                prefix = "|| " if i else ""
                block.line(prefix + clause + (");" if i == len(clauses) - 1 else ""))


def _sort(block: CodeBlock, entity: EntityModel) -> None:
    block.line()
    with block.braces("if (!string.IsNullOrWhiteSpace(request.SortBy))"):
        with block.braces("query = request.SortBy.ToLower() switch", close="};"):
            for prop in entity.all_properties[:SORTABLE_PROPERTIES]:
                block.line(
                    f"{cs_string(prop.name.lower())} => request.SortDescending"
                    f" ? query.OrderByDescending(x => x.{prop.name})"
                    f" : query.OrderBy(x => x.{prop.name}),"
                )
            block.line("_ => query")


def render_get_paged_handler(entity: EntityModel, config: GenerationConfig) -> str:
    """
    Render the paged query handler.

    Search matches any string property case-insensitively; SortBy accepts the
    lower-cased name of one of the first five properties and is otherwise
    ignored. The total count is taken after filtering and before paging.
    """
    query = get_paged_query_name(entity.name)
    response = f"PagedResult<{entity.name}Dto>"
    source = _query_handler_source(entity, config, query)
    source.use(namespace(config, "Application", "Common", "Models"))
    decl = _handler_class(source, config, query, response)

    handle = decl.member()
    with handle.braces(f"public async Task<{response}> Handle({query} request, CancellationToken cancellationToken)"):
        handle.line(f"IQueryable<{entity.name}> query = _context.{entity.plural_name}.AsNoTracking();")
        if entity.has_soft_delete:
            handle.line(f"query = query{SOFT_DELETE_PREDICATE};")
        _search_filter(handle, entity)
        _sort(handle, entity)
        handle.line()
        handle.line("var totalCount = await query.CountAsync(cancellationToken);")
        handle.line("var items = await query")
        with handle.indent():
            handle.line(".Skip((request.PageNumber - 1) * request.PageSize)")
            handle.line(".Take(request.PageSize)")
            _projection(handle, entity)
            handle.line(".ToListAsync(cancellationToken);")
        handle.line()
        handle.line(f"return new {response}(items, totalCount, request.PageNumber, request.PageSize);")
    return emit(source)


# ---------------------------------------------------------------------------
# Validators
# ---------------------------------------------------------------------------

def property_rules(prop: PropertyModel) -> List[str]:
    """FluentValidation rule calls for one property, required rule first."""
    rules: List[str] = []
    constraints = prop.constraints
    if prop.is_required:
        check = "NotNull()" if prop.type == "bool" else "NotEmpty()"
        rules.append(f".{check}.WithMessage({cs_string(f'{prop.name} is required.')})")
    if prop.is_string:
        if constraints and constraints.min_length is not None:
            rules.append(f".MinimumLength({constraints.min_length})")
        max_length = prop.effective_max_length
        if max_length:
            rules.append(
                f".MaximumLength({max_length})"
                f".WithMessage({cs_string(f'{prop.name} must not exceed {max_length} characters.')})"
            )
        if constraints and constraints.regex_pattern:
            rules.append(f".Matches({cs_verbatim(constraints.regex_pattern)})")
    elif constraints and prop.type in ("int", "long", "decimal", "double", "float"):
        if constraints.min_value is not None:
            rules.append(f".GreaterThanOrEqualTo({cs_number(constraints.min_value, prop.type)})")
        if constraints.max_value is not None:
            rules.append(f".LessThanOrEqualTo({cs_number(constraints.max_value, prop.type)})")
        if prop.type == "decimal" and constraints.precision is not None:
            rules.append(f".PrecisionScale({constraints.precision}, {constraints.scale or 0}, true)")
    return rules


def _rule_block(prop: PropertyModel) -> CodeBlock:
    block = CodeBlock()
    rules = property_rules(prop)
    if not rules:
        return block
    # Optional values are only checked when supplied.
    if prop.is_nullable and not prop.is_required:
        rules.append(f".When(x => x.{prop.name} != null)")
    block.line(f"RuleFor(x => x.{prop.name})")
    with block.indent():
        for i, rule in enumerate(rules):
            block.line(rule + (";" if i == len(rules) - 1 else ""))
    return block


def _render_validator(entity: EntityModel, config: GenerationConfig, action: str,
                      properties: Sequence[PropertyModel], key_rule: bool) -> str:
    request = command_name(action, entity.name)
    source = SourceFile(namespace=command_namespace(config, action, entity.name))
    source.use("FluentValidation")
    decl = source.declare(f"public class {request}Validator : AbstractValidator<{request}>")
    ctor = decl.member()
    with ctor.braces(f"public {request}Validator()"):
        blocks: List[CodeBlock] = []
        if key_rule:
            key = CodeBlock()
            key.line(f"RuleFor(x => x.{entity.key_property.name}).NotEmpty();")
            blocks.append(key)
        blocks.extend(b for b in (_rule_block(p) for p in properties) if b)
        for i, block in enumerate(blocks):
            if i:
                ctor.line()
            ctor.extend(block.lines)
    return emit(source)


def render_create_validator(entity: EntityModel, config: GenerationConfig) -> str:
    return _render_validator(entity, config, "Create", entity.non_key_properties, key_rule=False)


def render_update_validator(entity: EntityModel, config: GenerationConfig) -> str:
    return _render_validator(entity, config, "Update", entity.non_key_properties, key_rule=True)


# ---------------------------------------------------------------------------
# Mappings
# ---------------------------------------------------------------------------

def render_mapping_profile(entity: EntityModel, config: GenerationConfig) -> str:
    source = SourceFile(namespace=namespace(config, "Application", "Mappings"))
    source.use(
        "AutoMapper",
        namespace(config, "Domain", "Entities"),
        feature_namespace(config, entity.name),
        command_namespace(config, "Create", entity.name),
        command_namespace(config, "Update", entity.name),
    )
    decl = source.declare(f"public class {entity.name}MappingProfile : Profile")
    ctor = decl.member()
    with ctor.braces(f"public {entity.name}MappingProfile()"):
        ctor.line(f"CreateMap<{entity.name}, {entity.name}Dto>();")
        ctor.line(f"CreateMap<{command_name('Create', entity.name)}, {entity.name}>();")
        ctor.line(f"CreateMap<{command_name('Update', entity.name)}, {entity.name}>();")
    return emit(source)


def render_master_mapping(entities: Sequence, config: GenerationConfig) -> str:
    """Index of every per-entity mapping profile, in input order."""
    source = SourceFile(namespace=namespace(config, "Application", "Common", "Mappings"))
    source.use("System", "System.Collections.Generic", namespace(config, "Application", "Mappings"))
    decl = source.declare("public static class MappingRegistry")
    block = decl.member()
    with block.braces("public static IReadOnlyList<Type> Profiles { get; } = new[]", close="};"):
        for i, entity in enumerate(entities):
            block.line(f"typeof({entity.name}MappingProfile)" + ("," if i < len(entities) - 1 else ""))
    return emit(source)


# ---------------------------------------------------------------------------
# Pagination helpers
# ---------------------------------------------------------------------------

def render_paged_result(config: GenerationConfig) -> str:
    source = SourceFile(namespace=namespace(config, "Application", "Common", "Models"))
    source.use("System", "System.Collections.Generic")
    decl = source.declare("public class PagedResult<T>", summary="One page of results plus paging metadata.")
    ctor = decl.member()
    with ctor.braces("public PagedResult(List<T> items, int totalCount, int pageNumber, int pageSize)"):
        ctor.extend([
            "Items = items;",
            "TotalCount = totalCount;",
            "PageNumber = pageNumber;",
            "PageSize = pageSize;",
        ])
    decl.member().extend([
        "public List<T> Items { get; }",
        "public int TotalCount { get; }",
        "public int PageNumber { get; }",
        "public int PageSize { get; }",
        "public int TotalPages => (int)Math.Ceiling(TotalCount / (double)PageSize);",
        "public bool HasPreviousPage => PageNumber > 1;",
        "public bool HasNextPage => PageNumber < TotalPages;",
    ])
    return emit(source)


def render_paged_query(config: GenerationConfig) -> str:
    source = SourceFile(namespace=namespace(config, "Application", "Common", "Models"))
    decl = source.declare("public record PagedQuery")
    decl.member().extend([
        "private const int MaxPageSize = 100;",
        "private int _pageSize = 10;",
    ])
    decl.member().extend([
        "public int PageNumber { get; init; } = 1;",
        "public string? SearchTerm { get; init; }",
        "public string? SortBy { get; init; }",
        "public bool SortDescending { get; init; }",
    ])
    size = decl.member()
    with size.braces("public int PageSize"):
        size.line("get => _pageSize;")
        size.line("init => _pageSize = value > MaxPageSize ? MaxPageSize : value;")
    return emit(source)
