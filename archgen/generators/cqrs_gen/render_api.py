"""API layer renderer: one REST controller per entity."""
from typing import List, Tuple

from archgen.generators.cqrs_gen.emitter import SourceFile, emit
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
from archgen.generators.cqrs_gen.utils import to_camel_case
from archgen.schemas.config import GenerationConfig
from archgen.schemas.entities import EntityModel


def _handlers(entity: EntityModel, config: GenerationConfig) -> List[Tuple[str, str]]:
    """(field name, handler type) pairs injected when MediatR is off."""
    name = entity.name
    handlers = [
        ("_getAllHandler", f"{get_all_query_name(name)}Handler"),
        ("_getByIdHandler", f"{get_by_id_query_name(name)}Handler"),
        ("_createHandler", f"{command_name('Create', name)}Handler"),
        ("_updateHandler", f"{command_name('Update', name)}Handler"),
        ("_deleteHandler", f"{command_name('Delete', name)}Handler"),
    ]
    if config.api.paged_endpoints:
        handlers.insert(1, ("_getPagedHandler", f"{get_paged_query_name(name)}Handler"))
    return handlers


def render_controller(entity: EntityModel, config: GenerationConfig) -> str:
    """
    Render the entity controller: five CRUD routes, plus GET `paged` when paged
    endpoints are enabled.

    The update route rejects a body whose key differs from the route key before
    anything is dispatched.
    """
    name = entity.name
    key = entity.key_property
    arg = to_camel_case(key.name)
    dto = f"{name}Dto"

    source = SourceFile(namespace=namespace(config, "Api", "Controllers"))
    source.use("System.Collections.Generic", "System.Threading", "System.Threading.Tasks")
    if config.use_mediator:
        source.use("MediatR")
    source.use(
        "Microsoft.AspNetCore.Http",
        "Microsoft.AspNetCore.Mvc",
        feature_namespace(config, name),
        command_namespace(config, "Create", name),
        command_namespace(config, "Update", name),
        command_namespace(config, "Delete", name),
        query_namespace(config, get_by_id_query_name(name), name),
        query_namespace(config, get_all_query_name(name), name),
    )
    if config.api.paged_endpoints:
        source.use(
            namespace(config, "Application", "Common", "Models"),
            query_namespace(config, get_paged_query_name(name), name),
        )

    decl = source.declare(
        f"public class {name}sController : ControllerBase",
        attributes=["ApiController", 'Route("api/[controller]")'],
    )

    if config.use_mediator:
        decl.member().line("private readonly IMediator _mediator;")
        ctor = decl.member()
        with ctor.braces(f"public {name}sController(IMediator mediator)"):
            ctor.line("_mediator = mediator;")

        def send(field: str, request: str) -> str:
            return f"await _mediator.Send({request}, cancellationToken)"
    else:
        handlers = _handlers(entity, config)
        decl.member().extend([f"private readonly {t} {f};" for f, t in handlers])
        ctor = decl.member()
        params = ", ".join(f"{t} {f[1:]}" for f, t in handlers)
        with ctor.braces(f"public {name}sController({params})"):
            ctor.extend([f"{f} = {f[1:]};" for f, _ in handlers])

        def send(field: str, request: str) -> str:
            return f"await {field}.Handle({request}, cancellationToken)"

    get_all = decl.member()
    get_all.line("[HttpGet]")
    get_all.line(f"[ProducesResponseType(typeof(List<{dto}>), StatusCodes.Status200OK)]")
    with get_all.braces(f"public async Task<ActionResult<List<{dto}>>> GetAll(CancellationToken cancellationToken)"):
        get_all_request = f"new {get_all_query_name(name)}()"
        get_all.line(f"var result = {send('_getAllHandler', get_all_request)};")
        get_all.line("return Ok(result);")

    if config.api.paged_endpoints:
        paged_type = f"PagedResult<{dto}>"
        paged = decl.member()
        paged.line('[HttpGet("paged")]')
        paged.line(f"[ProducesResponseType(typeof({paged_type}), StatusCodes.Status200OK)]")
        with paged.braces(
            f"public async Task<ActionResult<{paged_type}>> GetPaged([FromQuery] {get_paged_query_name(name)} query, "
            f"CancellationToken cancellationToken)"
        ):
            paged.line(f"var result = {send('_getPagedHandler', 'query')};")
            paged.line("return Ok(result);")

    get_by_id = decl.member()
    get_by_id.line(f'[HttpGet("{{{arg}}}")]')
    get_by_id.line(f"[ProducesResponseType(typeof({dto}), StatusCodes.Status200OK)]")
    get_by_id.line("[ProducesResponseType(StatusCodes.Status404NotFound)]")
    with get_by_id.braces(
        f"public async Task<ActionResult<{dto}>> GetById({key.type} {arg}, CancellationToken cancellationToken)"
    ):
        get_by_id_request = f"new {get_by_id_query_name(name)}({arg})"
        get_by_id.line(f"var result = {send('_getByIdHandler', get_by_id_request)};")
        get_by_id.line("return result == null ? NotFound() : Ok(result);")

    create = decl.member()
    create.line("[HttpPost]")
    create.line(f"[ProducesResponseType(typeof({key.type}), StatusCodes.Status201Created)]")
    create.line("[ProducesResponseType(StatusCodes.Status400BadRequest)]")
    with create.braces(
        f"public async Task<ActionResult<{key.type}>> Create({command_name('Create', name)} command, "
        f"CancellationToken cancellationToken)"
    ):
        create.line(f"var {arg} = {send('_createHandler', 'command')};")
        create.line(f"return CreatedAtAction(nameof(GetById), new {{ {arg} }}, {arg});")

    update = decl.member()
    update.line(f'[HttpPut("{{{arg}}}")]')
    update.line("[ProducesResponseType(StatusCodes.Status204NoContent)]")
    update.line("[ProducesResponseType(StatusCodes.Status400BadRequest)]")
    update.line("[ProducesResponseType(StatusCodes.Status404NotFound)]")
    with update.braces(
        f"public async Task<IActionResult> Update({key.type} {arg}, {command_name('Update', name)} command, "
        f"CancellationToken cancellationToken)"
    ):
        with update.braces(f"if ({arg} != command.{key.name})"):
            update.line("return BadRequest();")
        update.line()
        update.line(f"var success = {send('_updateHandler', 'command')};")
        update.line("return success ? NoContent() : NotFound();")

    delete = decl.member()
    delete.line(f'[HttpDelete("{{{arg}}}")]')
    delete.line("[ProducesResponseType(StatusCodes.Status204NoContent)]")
    delete.line("[ProducesResponseType(StatusCodes.Status404NotFound)]")
    with delete.braces(f"public async Task<IActionResult> Delete({key.type} {arg}, CancellationToken cancellationToken)"):
        delete_request = f"new {command_name('Delete', name)}({arg})"
        delete.line(f"var success = {send('_deleteHandler', delete_request)};")
        delete.line("return success ? NoContent() : NotFound();")

    return emit(source)


AUDIT_MAX_RESULTS = 100


def render_audit_controller(config: GenerationConfig) -> str:
    """Read-only queries over the audit trail, newest first."""
    source = SourceFile(namespace=namespace(config, "Api", "Controllers"))
    source.use(
        "System", "System.Linq", "System.Threading", "System.Threading.Tasks",
        "Microsoft.AspNetCore.Mvc", "Microsoft.EntityFrameworkCore",
        namespace(config, "Application", "Common", "Interfaces"),
    )
    decl = source.declare(
        "public class AuditController : ControllerBase",
        attributes=["ApiController", 'Route("api/[controller]")'],
    )
    decl.member().extend([
        f"private const int MaxResults = {AUDIT_MAX_RESULTS};",
        "private readonly IApplicationDbContext _context;",
    ])
    ctor = decl.member()
    with ctor.braces("public AuditController(IApplicationDbContext context)"):
        ctor.line("_context = context;")

    routes = (
        ('entity/{entityName}/{entityId}', "GetEntityHistory(string entityName, string entityId",
         ".Where(x => x.EntityName == entityName && x.EntityId == entityId)", None),
        ("user/{userId}", "GetUserHistory(string userId", ".Where(x => x.UserId == userId)", ".Take(MaxResults)"),
        ("recent", "GetRecent([FromQuery] int count = 50", None, ".Take(Math.Clamp(count, 1, MaxResults))"),
    )
    for route, signature, where, take in routes:
        block = decl.member()
        block.line(f'[HttpGet("{route}")]')
        with block.braces(f"public async Task<IActionResult> {signature}, CancellationToken cancellationToken)"):
            block.line("var logs = await _context.AuditLogs")
            with block.indent():
                block.line(".AsNoTracking()")
                if where:
                    block.line(where)
                block.line(".OrderByDescending(x => x.Timestamp)")
                if take:
                    block.line(take)
                block.line(".ToListAsync(cancellationToken);")
            block.line()
            block.line("return Ok(logs);")
    return emit(source)
