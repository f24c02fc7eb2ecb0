"""Simple string templates for project bootstrap, manifests and docs."""
import json
from typing import Dict, List, Sequence, Tuple

import yaml

from archgen.generators.cqrs_gen.context import RenderContext
from archgen.generators.cqrs_gen.emitter import SourceFile, emit
from archgen.generators.cqrs_gen.layout import (
    command_name,
    command_namespace,
    get_all_query_name,
    get_by_id_query_name,
    get_paged_query_name,
    namespace,
    query_namespace,
)
from archgen.schemas.config import (
    AuthenticationType,
    CachingProvider,
    DatabaseProvider,
    GenerationConfig,
    LoggingProvider,
    TestFramework,
)

TARGET_FRAMEWORK = "net9.0"
CSHARP_PROJECT_TYPE = "9A19103F-16F7-4668-BE54-9A1E7A4F7556"

EF_VERSION = "9.0.0"

PROVIDER_PACKAGES: Dict[DatabaseProvider, Tuple[str, str]] = {
    DatabaseProvider.SQL_SERVER: ("Microsoft.EntityFrameworkCore.SqlServer", EF_VERSION),
    DatabaseProvider.POSTGRESQL: ("Npgsql.EntityFrameworkCore.PostgreSQL", "9.0.2"),
    DatabaseProvider.MYSQL: ("Pomelo.EntityFrameworkCore.MySql", "8.0.2"),
    DatabaseProvider.SQLITE: ("Microsoft.EntityFrameworkCore.Sqlite", EF_VERSION),
    DatabaseProvider.IN_MEMORY: ("Microsoft.EntityFrameworkCore.InMemory", EF_VERSION),
}

TEST_PACKAGES: Dict[TestFramework, List[Tuple[str, str]]] = {
    TestFramework.XUNIT: [("xunit", "2.9.2"), ("xunit.runner.visualstudio", "2.8.2")],
    TestFramework.NUNIT: [("NUnit", "4.2.2"), ("NUnit3TestAdapter", "4.6.0")],
    TestFramework.MSTEST: [("MSTest.TestFramework", "3.6.4"), ("MSTest.TestAdapter", "3.6.4")],
}

LAYERS = ("Domain", "Application", "Infrastructure", "Api")


def default_connection_string(config: GenerationConfig) -> str:
    """Connection string from config, or a local default for the provider."""
    if config.database.connection_string:
        return config.database.connection_string
    db = config.root_namespace.replace(".", "").lower()
    return {
        DatabaseProvider.SQL_SERVER: f"Server=(localdb)\\mssqllocaldb;Database={db};Trusted_Connection=True;MultipleActiveResultSets=true",
        DatabaseProvider.POSTGRESQL: f"Host=localhost;Database={db};Username=postgres;Password=postgres",
        DatabaseProvider.MYSQL: f"Server=localhost;Database={db};User=root;Password=password;",
        DatabaseProvider.SQLITE: f"Data Source={db}.db",
        DatabaseProvider.IN_MEMORY: "",
    }[config.database.provider]


def csproj_path(config: GenerationConfig, layer: str) -> str:
    return f"{layer}/{config.project_name(layer)}.csproj"


def tests_csproj_path(config: GenerationConfig) -> str:
    return f"Tests/Application.Tests/{config.project_name('Application.Tests')}.csproj"


def _use_db_context(config: GenerationConfig) -> str:
    provider = config.database.provider
    if provider is DatabaseProvider.IN_MEMORY:
        return f'options.UseInMemoryDatabase("{config.root_namespace}Db")'
    method = {
        DatabaseProvider.SQL_SERVER: "UseSqlServer",
        DatabaseProvider.POSTGRESQL: "UseNpgsql",
        DatabaseProvider.MYSQL: "UseMySql",
        DatabaseProvider.SQLITE: "UseSqlite",
    }[provider]
    if provider is DatabaseProvider.MYSQL:
        return f"options.{method}(connectionString, ServerVersion.AutoDetect(connectionString))"
    return f"options.{method}(connectionString)"


def render_program(entities: Sequence, config: GenerationConfig) -> str:
    """Generate Api/Program.cs content, one block per enabled feature."""
    root = config.root_namespace
    serilog = config.logging.provider is LoggingProvider.SERILOG
    nlog = config.logging.provider is LoggingProvider.NLOG
    jwt = config.auth.generate_authentication and config.auth.authentication_type is AuthenticationType.JWT
    in_memory = config.database.provider is DatabaseProvider.IN_MEMORY

    usings = ["Microsoft.EntityFrameworkCore"]
    if serilog:
        usings.append("Serilog")
    if nlog:
        usings.append("NLog.Web")
    if config.use_fluent_validation:
        usings.append("FluentValidation")
    if jwt:
        usings.extend(["System.Text", "Microsoft.AspNetCore.Authentication.JwtBearer", "Microsoft.IdentityModel.Tokens"])
    if config.api.enable_rate_limiting:
        usings.extend(["System.Threading.RateLimiting", "Microsoft.AspNetCore.RateLimiting"])
    if config.api.generate_swagger and config.api.generate_xml_documentation:
        usings.append("System.Reflection")
    usings.extend([f"{root}.Application.Common.Interfaces", f"{root}.Infrastructure.Persistence"])
    if config.api.generate_global_exception_handler:
        usings.append(f"{root}.Api.Middleware")
    if config.api.generate_health_checks:
        usings.append(f"{root}.Api.HealthChecks")

    lines = [f"using {u};" for u in usings]
    lines.append("")
    if serilog:
        lines.extend([
            "Log.Logger = new LoggerConfiguration()",
            "    .WriteTo.Console()",
            "    .CreateBootstrapLogger();",
            "",
        ])
    lines.append("var builder = WebApplication.CreateBuilder(args);")
    lines.append("")
    if serilog:
        lines.append("builder.Host.UseSerilog((context, configuration) => configuration.ReadFrom.Configuration(context.Configuration));")
    elif nlog:
        lines.append("builder.Host.UseNLog();")
    if config.logging.enable_application_insights:
        lines.append("builder.Services.AddApplicationInsightsTelemetry();")

    lines.append('var connectionString = builder.Configuration.GetConnectionString("DefaultConnection");')
    lines.append("builder.Services.AddDbContext<ApplicationDbContext>(options =>")
    lines.append(f"    {_use_db_context(config)});")
    lines.append("builder.Services.AddScoped<IApplicationDbContext>(provider => provider.GetRequiredService<ApplicationDbContext>());")
    lines.append("")

    if config.use_mediator:
        lines.append("builder.Services.AddMediatR(cfg => cfg.RegisterServicesFromAssembly(typeof(IApplicationDbContext).Assembly));")
    else:
        for entity in entities:
            name = entity.name
            for action in ("Create", "Update", "Delete"):
                lines.append(f"builder.Services.AddScoped<{command_namespace(config, action, name)}.{command_name(action, name)}Handler>();")
            queries = [get_by_id_query_name(name), get_all_query_name(name)]
            if config.api.paged_endpoints:
                queries.append(get_paged_query_name(name))
            for query in queries:
                lines.append(f"builder.Services.AddScoped<{query_namespace(config, query, name)}.{query}Handler>();")
    if config.use_fluent_validation:
        lines.append("builder.Services.AddValidatorsFromAssembly(typeof(IApplicationDbContext).Assembly);")
    if config.use_auto_mapper:
        lines.append("builder.Services.AddAutoMapper(typeof(IApplicationDbContext).Assembly);")
    lines.append("builder.Services.AddControllers();")

    if config.api.generate_swagger:
        lines.append("builder.Services.AddEndpointsApiExplorer();")
        if config.api.generate_xml_documentation:
            lines.extend([
                "builder.Services.AddSwaggerGen(options =>",
                "{",
                '    var xmlFile = $"{Assembly.GetExecutingAssembly().GetName().Name}.xml";',
                "    var xmlPath = Path.Combine(AppContext.BaseDirectory, xmlFile);",
                "    if (File.Exists(xmlPath))",
                "    {",
                "        options.IncludeXmlComments(xmlPath);",
                "    }",
                "});",
            ])
        else:
            lines.append("builder.Services.AddSwaggerGen();")

    if jwt:
        lines.extend([
            "builder.Services.AddAuthentication(JwtBearerDefaults.AuthenticationScheme)",
            "    .AddJwtBearer(options =>",
            "    {",
            "        options.TokenValidationParameters = new TokenValidationParameters",
            "        {",
            "            ValidateIssuer = true,",
            "            ValidateAudience = true,",
            "            ValidateLifetime = true,",
            "            ValidateIssuerSigningKey = true,",
            '            ValidIssuer = builder.Configuration["Jwt:Issuer"],',
            '            ValidAudience = builder.Configuration["Jwt:Audience"],',
            '            IssuerSigningKey = new SymmetricSecurityKey(Encoding.UTF8.GetBytes(builder.Configuration["Jwt:Key"]!))',
            "        };",
            "    });",
            "builder.Services.AddAuthorization();",
        ])

    if config.api.enable_cors:
        lines.extend([
            "builder.Services.AddCors(options =>",
            '    options.AddPolicy("DefaultCorsPolicy", policy =>',
            '        policy.WithOrigins(builder.Configuration.GetSection("AllowedOrigins").Get<string[]>() ?? Array.Empty<string>())',
            "            .AllowAnyHeader()",
            "            .AllowAnyMethod()));",
        ])

    if config.caching.enabled:
        if config.caching.provider is CachingProvider.REDIS:
            lines.append('builder.Services.AddStackExchangeRedisCache(options => options.Configuration = builder.Configuration.GetConnectionString("Redis"));')
        else:
            lines.append("builder.Services.AddMemoryCache();")

    if config.api.enable_response_compression:
        lines.append("builder.Services.AddResponseCompression(options => options.EnableForHttps = true);")

    if config.api.enable_rate_limiting:
        lines.extend([
            "builder.Services.AddRateLimiter(options =>",
            '    options.AddFixedWindowLimiter("fixed", limiter =>',
            "    {",
            "        limiter.PermitLimit = 100;",
            "        limiter.Window = TimeSpan.FromMinutes(1);",
            "        limiter.QueueProcessingOrder = QueueProcessingOrder.OldestFirst;",
            "    }));",
        ])

    if config.api.generate_health_checks:
        lines.append('builder.Services.AddHealthChecks().AddCheck<DatabaseHealthCheck>("database");')

    lines.append("")
    lines.append("var app = builder.Build();")
    lines.append("")

    if config.database.generate_migrations or in_memory:
        lines.extend([
            "using (var scope = app.Services.CreateScope())",
            "{",
            "    var context = scope.ServiceProvider.GetRequiredService<ApplicationDbContext>();",
            "    context.Database.EnsureCreated();" if in_memory else "    context.Database.Migrate();",
            "}",
            "",
        ])

    if config.api.generate_global_exception_handler:
        lines.append("app.UseMiddleware<ExceptionHandlingMiddleware>();")
    if config.api.generate_swagger:
        lines.extend([
            "if (app.Environment.IsDevelopment())",
            "{",
            "    app.UseSwagger();",
            "    app.UseSwaggerUI();",
            "}",
        ])
    if serilog:
        lines.append("app.UseSerilogRequestLogging();")
    lines.append("app.UseHttpsRedirection();")
    if config.api.enable_response_compression:
        lines.append("app.UseResponseCompression();")
    if config.api.enable_cors:
        lines.append('app.UseCors("DefaultCorsPolicy");')
    if config.api.enable_rate_limiting:
        lines.append("app.UseRateLimiter();")
    if jwt:
        lines.append("app.UseAuthentication();")
    lines.append("app.UseAuthorization();")
    lines.append("app.MapControllers();")
    if config.api.generate_health_checks:
        lines.append('app.MapHealthChecks("/health");')
    lines.append("")
    lines.append("app.Run();")
    lines.append("")
    lines.append("public partial class Program { }")
    return "\n".join(lines) + "\n"


def _json(data: dict) -> str:
    return json.dumps(data, indent=2) + "\n"


def render_appsettings(config: GenerationConfig) -> str:
    """Generate Api/appsettings.json content."""
    settings: Dict[str, object] = {}
    if config.logging.provider is LoggingProvider.SERILOG:
        settings["Serilog"] = {
            "MinimumLevel": {
                "Default": "Information",
                "Override": {"Microsoft": "Warning", "System": "Warning"},
            },
            "WriteTo": [{"Name": "Console"}],
        }
    else:
        settings["Logging"] = {"LogLevel": {"Default": "Information", "Microsoft.AspNetCore": "Warning"}}

    connection_strings = {"DefaultConnection": default_connection_string(config)}
    if config.caching.enabled and config.caching.provider is CachingProvider.REDIS:
        connection_strings["Redis"] = "localhost:6379"
    settings["ConnectionStrings"] = connection_strings

    if config.auth.generate_authentication and config.auth.authentication_type is AuthenticationType.JWT:
        settings["Jwt"] = {
            "Key": "change-this-development-signing-key-to-32-chars-min",
            "Issuer": config.root_namespace,
            "Audience": f"{config.root_namespace}.Clients",
        }
    if config.api.enable_cors:
        settings["AllowedOrigins"] = list(config.api.allowed_origins)
    settings["AllowedHosts"] = "*"
    return _json(settings)


def render_appsettings_environment(config: GenerationConfig, environment: str) -> str:
    """Generate Api/appsettings.{environment}.json content."""
    level = "Debug" if environment == "Development" else "Warning"
    if config.logging.provider is LoggingProvider.SERILOG:
        return _json({"Serilog": {"MinimumLevel": {"Default": level}}})
    return _json({"Logging": {"LogLevel": {"Default": level}}})


def render_launch_settings(config: GenerationConfig) -> str:
    """Generate Api/Properties/launchSettings.json content."""
    return _json({
        "profiles": {
            config.project_name("Api"): {
                "commandName": "Project",
                "launchBrowser": config.api.generate_swagger,
                "launchUrl": "swagger" if config.api.generate_swagger else "",
                "applicationUrl": "https://localhost:7001;http://localhost:5001",
                "environmentVariables": {"ASPNETCORE_ENVIRONMENT": "Development"},
            }
        }
    })


def _csproj(sdk: str, packages: List[Tuple[str, str]], references: List[str],
            properties: Dict[str, str] = None) -> str:
    lines = [f'<Project Sdk="{sdk}">', "", "  <PropertyGroup>"]
    props = {
        "TargetFramework": TARGET_FRAMEWORK,
        "ImplicitUsings": "enable",
        "Nullable": "enable",
    }
    props.update(properties or {})
    for key, value in props.items():
        lines.append(f"    <{key}>{value}</{key}>")
    lines.append("  </PropertyGroup>")
    if packages:
        lines.extend(["", "  <ItemGroup>"])
        for name, version in packages:
            lines.append(f'    <PackageReference Include="{name}" Version="{version}" />')
        lines.append("  </ItemGroup>")
    if references:
        lines.extend(["", "  <ItemGroup>"])
        for ref in references:
            lines.append(f'    <ProjectReference Include="{ref}" />')
        lines.append("  </ItemGroup>")
    lines.extend(["", "</Project>"])
    return "\n".join(lines) + "\n"


def _ref(config: GenerationConfig, layer: str) -> str:
    return f"..\\{layer}\\{config.project_name(layer)}.csproj"


def render_csproj(config: GenerationConfig, layer: str) -> str:
    """Generate the .csproj for one layer, with packages gated by config."""
    if layer == "Domain":
        return _csproj("Microsoft.NET.Sdk", [], [])

    if layer == "Application":
        packages = [("Microsoft.EntityFrameworkCore", EF_VERSION)]
        if config.use_mediator:
            packages.append(("MediatR", "12.4.1"))
        if config.use_fluent_validation:
            packages.append(("FluentValidation", "11.11.0"))
            packages.append(("FluentValidation.DependencyInjectionExtensions", "11.11.0"))
        if config.use_auto_mapper:
            packages.append(("AutoMapper", "13.0.1"))
        return _csproj("Microsoft.NET.Sdk", packages, [_ref(config, "Domain")])

    if layer == "Infrastructure":
        packages = [PROVIDER_PACKAGES[config.database.provider]]
        if config.database.generate_migrations:
            packages.append(("Microsoft.EntityFrameworkCore.Design", EF_VERSION))
        return _csproj("Microsoft.NET.Sdk", packages, [_ref(config, "Application")])

    packages = []
    if config.api.generate_swagger:
        packages.append(("Swashbuckle.AspNetCore", "7.2.0"))
    if config.logging.provider is LoggingProvider.SERILOG:
        packages.append(("Serilog.AspNetCore", "9.0.0"))
    elif config.logging.provider is LoggingProvider.NLOG:
        packages.append(("NLog.Web.AspNetCore", "5.3.15"))
    if config.logging.enable_application_insights:
        packages.append(("Microsoft.ApplicationInsights.AspNetCore", "2.22.0"))
    if config.auth.generate_authentication and config.auth.authentication_type is AuthenticationType.JWT:
        packages.append(("Microsoft.AspNetCore.Authentication.JwtBearer", EF_VERSION))
    if config.caching.enabled and config.caching.provider is CachingProvider.REDIS:
        packages.append(("Microsoft.Extensions.Caching.StackExchangeRedis", EF_VERSION))
    if config.database.generate_migrations:
        packages.append(("Microsoft.EntityFrameworkCore.Design", EF_VERSION))
    properties = {}
    if config.api.generate_xml_documentation:
        properties = {"GenerateDocumentationFile": "true", "NoWarn": "$(NoWarn);1591"}
    return _csproj(
        "Microsoft.NET.Sdk.Web",
        packages,
        [_ref(config, "Application"), _ref(config, "Infrastructure")],
        properties,
    )


def render_tests_csproj(config: GenerationConfig) -> str:
    packages = [("Microsoft.NET.Test.Sdk", "17.12.0"), ("Microsoft.EntityFrameworkCore.InMemory", EF_VERSION)]
    packages.extend(TEST_PACKAGES[config.testing.framework])
    refs = [
        f"..\\..\\Application\\{config.project_name('Application')}.csproj",
        f"..\\..\\Infrastructure\\{config.project_name('Infrastructure')}.csproj",
    ]
    return _csproj("Microsoft.NET.Sdk", packages, refs, {"IsPackable": "false"})


def render_solution(config: GenerationConfig, context: RenderContext) -> str:
    """Generate the .sln file; project GUIDs come from the identifier provider."""
    projects = [(config.project_name(layer), f"{layer}\\{config.project_name(layer)}.csproj") for layer in LAYERS]
    if config.testing.generate_unit_tests:
        name = config.project_name("Application.Tests")
        projects.append((name, f"Tests\\Application.Tests\\{name}.csproj"))

    lines = [
        "",
        "Microsoft Visual Studio Solution File, Format Version 12.00",
        "# Visual Studio Version 17",
        "VisualStudioVersion = 17.0.31903.59",
        "MinimumVisualStudioVersion = 10.0.40219.1",
    ]
    ids = []
    for name, path in projects:
        project_id = str(context.ids.guid(f"project:{name}")).upper()
        ids.append(project_id)
        lines.append(f'Project("{{{CSHARP_PROJECT_TYPE}}}") = "{name}", "{path}", "{{{project_id}}}"')
        lines.append("EndProject")
    lines.extend([
        "Global",
        "\tGlobalSection(SolutionConfigurationPlatforms) = preSolution",
        "\t\tDebug|Any CPU = Debug|Any CPU",
        "\t\tRelease|Any CPU = Release|Any CPU",
        "\tEndGlobalSection",
        "\tGlobalSection(ProjectConfigurationPlatforms) = postSolution",
    ])
    for project_id in ids:
        for build in ("Debug", "Release"):
            lines.append(f"\t\t{{{project_id}}}.{build}|Any CPU.ActiveCfg = {build}|Any CPU")
            lines.append(f"\t\t{{{project_id}}}.{build}|Any CPU.Build.0 = {build}|Any CPU")
    lines.extend(["\tEndGlobalSection", "EndGlobal"])
    return "\n".join(lines) + "\n"


def render_health_check(config: GenerationConfig) -> str:
    source = SourceFile(namespace=namespace(config, "Api", "HealthChecks"))
    source.use("Microsoft.Extensions.Diagnostics.HealthChecks", namespace(config, "Infrastructure", "Persistence"))
    decl = source.declare("public class DatabaseHealthCheck : IHealthCheck")
    decl.member().line("private readonly ApplicationDbContext _context;")
    ctor = decl.member()
    with ctor.braces("public DatabaseHealthCheck(ApplicationDbContext context)"):
        ctor.line("_context = context;")
    check = decl.member()
    with check.braces("public async Task<HealthCheckResult> CheckHealthAsync(HealthCheckContext context, "
                      "CancellationToken cancellationToken = default)"):
        check.line("var canConnect = await _context.Database.CanConnectAsync(cancellationToken);")
        check.line("return canConnect")
        with check.indent():
            check.line('? HealthCheckResult.Healthy("Database is reachable.")')
            check.line(': HealthCheckResult.Unhealthy("Database is unreachable.");')
    return emit(source)


def render_exception_middleware(config: GenerationConfig) -> str:
    """Maps validation failures to 400 and everything else to a 500 problem response."""
    source = SourceFile(namespace=namespace(config, "Api", "Middleware"))
    source.use("System.Net", "System.Text.Json")
    if config.use_fluent_validation:
        source.use("FluentValidation")
    decl = source.declare("public class ExceptionHandlingMiddleware")
    decl.member().extend([
        "private readonly RequestDelegate _next;",
        "private readonly ILogger<ExceptionHandlingMiddleware> _logger;",
    ])
    ctor = decl.member()
    with ctor.braces("public ExceptionHandlingMiddleware(RequestDelegate next, ILogger<ExceptionHandlingMiddleware> logger)"):
        ctor.line("_next = next;")
        ctor.line("_logger = logger;")
    invoke = decl.member()
    with invoke.braces("public async Task InvokeAsync(HttpContext context)"):
        with invoke.braces("try"):
            invoke.line("await _next(context);")
        if config.use_fluent_validation:
            with invoke.braces("catch (ValidationException ex)"):
                invoke.line("var errors = ex.Errors.Select(e => new { e.PropertyName, e.ErrorMessage });")
                invoke.line("await WriteAsync(context, HttpStatusCode.BadRequest, new { title = \"Validation failed\", errors });")
        with invoke.braces("catch (Exception ex)"):
            invoke.line('_logger.LogError(ex, "Unhandled exception for {Path}", context.Request.Path);')
            invoke.line("await WriteAsync(context, HttpStatusCode.InternalServerError, new { title = \"An unexpected error occurred\" });")
    write = decl.member()
    with write.braces("private static Task WriteAsync(HttpContext context, HttpStatusCode status, object body)"):
        write.line('context.Response.ContentType = "application/problem+json";')
        write.line("context.Response.StatusCode = (int)status;")
        write.line("return context.Response.WriteAsync(JsonSerializer.Serialize(body));")
    return emit(source)


def render_readme(entities: Sequence, config: GenerationConfig, context: RenderContext) -> str:
    """Generate README.md content."""
    root = config.root_namespace
    lines = [
        f"# {root}",
        "",
        f"Generated on {context.clock():%Y-%m-%d} as a Clean Architecture Web API using CQRS.",
        "",
        "## Entities",
        "",
    ]
    for entity in entities:
        lines.append(f"- **{entity.name}**: `api/{entity.name}s`")
    lines.extend([
        "",
        "## Projects",
        "",
        f"- `{root}.Domain`: entities",
        f"- `{root}.Application`: DTOs, commands, queries and handlers",
        f"- `{root}.Infrastructure`: EF Core persistence ({config.database.provider.value})",
        f"- `{root}.Api`: REST controllers and startup",
        "",
        "## Getting started",
        "",
        "```bash",
        "dotnet restore",
        "dotnet build",
        f"dotnet run --project Api/{root}.Api.csproj",
        "```",
    ])
    if config.api.generate_swagger:
        lines.extend(["", "Swagger UI is served at `/swagger` in the Development environment."])
    if config.database.generate_migrations:
        lines.extend([
            "",
            "## Migrations",
            "",
            "```bash",
            "dotnet ef migrations add InitialCreate --project Infrastructure --startup-project Api",
            "```",
        ])
    return "\n".join(lines) + "\n"


def render_architecture_doc(entities: Sequence, config: GenerationConfig) -> str:
    """Generate ARCHITECTURE.md content."""
    lines = [
        "# Architecture",
        "",
        "Dependencies point inward: Api -> Infrastructure -> Application -> Domain.",
        "",
        "| Layer | Responsibility |",
        "|-------|----------------|",
        "| Domain | Entities with no framework dependencies |",
        "| Application | Commands, queries, handlers, validators, DTOs |",
        "| Infrastructure | EF Core DbContext and entity configurations |",
        "| Api | Controllers, middleware and startup |",
        "",
        "## Request flow",
        "",
    ]
    if config.use_mediator:
        lines.append("Controller -> IMediator.Send -> handler -> IApplicationDbContext -> database")
    else:
        lines.append("Controller -> injected handler -> IApplicationDbContext -> database")
    if config.use_fluent_validation:
        lines.extend(["", "Create and update commands are checked by FluentValidation validators."])
    lines.extend(["", "## Entities", ""])
    for entity in entities:
        lines.append(f"### {entity.name}")
        lines.append("")
        for rel in getattr(entity, "relationships", []):
            lines.append(f"- {rel.type.value} -> {rel.related_entity}")
        if entity.has_soft_delete:
            lines.append("- Soft delete: rows are flagged, never removed")
        if entity.has_audit_fields:
            lines.append("- Audited: created/updated timestamps and users")
        lines.append("")
    return "\n".join(lines)


def render_changelog(context: RenderContext) -> str:
    return f"""# Changelog

## [1.0.0] - {context.clock():%Y-%m-%d}

### Added
- Initial generated project.
"""


def render_gitignore() -> str:
    return """bin/
obj/
.vs/
.vscode/
.idea/
*.user
*.suo
*.db
appsettings.*.local.json
TestResults/
"""


def render_editorconfig() -> str:
    return """root = true

[*]
charset = utf-8
end_of_line = lf
insert_final_newline = true
trim_trailing_whitespace = true

[*.cs]
indent_style = space
indent_size = 4
csharp_style_namespace_declarations = file_scoped:warning
dotnet_sort_system_directives_first = true

[*.{json,yml,yaml,csproj}]
indent_style = space
indent_size = 2
"""


def render_dockerfile(config: GenerationConfig) -> str:
    api = config.project_name("Api")
    return f"""FROM mcr.microsoft.com/dotnet/sdk:9.0 AS build
WORKDIR /src
COPY . .
RUN dotnet restore Api/{api}.csproj
RUN dotnet publish Api/{api}.csproj -c Release -o /app/publish

FROM mcr.microsoft.com/dotnet/aspnet:9.0
WORKDIR /app
COPY --from=build /app/publish .
ENV ASPNETCORE_URLS=http://+:8080
EXPOSE 8080
ENTRYPOINT ["dotnet", "{api}.dll"]
"""


def _yaml(data) -> str:
    return yaml.safe_dump(data, sort_keys=False, default_flow_style=False)


def render_docker_compose(config: GenerationConfig) -> str:
    """Generate docker-compose.yml content for the API and its database."""
    db_services = {
        DatabaseProvider.SQL_SERVER: {
            "image": "mcr.microsoft.com/mssql/server:2022-latest",
            "environment": {"ACCEPT_EULA": "Y", "MSSQL_SA_PASSWORD": "Your_password123"},
            "ports": ["1433:1433"],
        },
        DatabaseProvider.POSTGRESQL: {
            "image": "postgres:16",
            "environment": {"POSTGRES_USER": "postgres", "POSTGRES_PASSWORD": "postgres"},
            "ports": ["5432:5432"],
        },
        DatabaseProvider.MYSQL: {
            "image": "mysql:8",
            "environment": {"MYSQL_ROOT_PASSWORD": "password"},
            "ports": ["3306:3306"],
        },
    }
    api = {
        "build": ".",
        "ports": ["8080:8080"],
        "environment": {"ASPNETCORE_ENVIRONMENT": "Development"},
    }
    services = {"api": api}
    db = db_services.get(config.database.provider)
    if db:
        services["db"] = db
        api["depends_on"] = ["db"]
    if config.caching.enabled and config.caching.provider is CachingProvider.REDIS:
        services["redis"] = {"image": "redis:7", "ports": ["6379:6379"]}
        api.setdefault("depends_on", []).append("redis")
    return _yaml({"services": services})


def render_github_actions() -> str:
    workflow = {
        "name": "build",
        "on": {"push": {"branches": ["main"]}, "pull_request": {}},
        "jobs": {
            "build": {
                "runs-on": "ubuntu-latest",
                "steps": [
                    {"uses": "actions/checkout@v4"},
                    {"uses": "actions/setup-dotnet@v4", "with": {"dotnet-version": "9.0.x"}},
                    {"run": "dotnet restore"},
                    {"run": "dotnet build --no-restore"},
                    {"run": "dotnet test --no-build --verbosity normal"},
                ],
            }
        },
    }
    return _yaml(workflow)


def render_azure_pipeline() -> str:
    pipeline = {
        "trigger": ["main"],
        "pool": {"vmImage": "ubuntu-latest"},
        "steps": [
            {"task": "UseDotNet@2", "inputs": {"version": "9.0.x"}},
            {"script": "dotnet build --configuration Release", "displayName": "Build"},
            {"script": "dotnet test --configuration Release", "displayName": "Test"},
        ],
    }
    return _yaml(pipeline)


def render_kubernetes(config: GenerationConfig) -> str:
    name = config.root_namespace.replace(".", "-").lower()
    labels = {"app": name}
    deployment = {
        "apiVersion": "apps/v1",
        "kind": "Deployment",
        "metadata": {"name": name},
        "spec": {
            "replicas": 2,
            "selector": {"matchLabels": labels},
            "template": {
                "metadata": {"labels": labels},
                "spec": {
                    "containers": [{
                        "name": name,
                        "image": f"{name}:latest",
                        "ports": [{"containerPort": 8080}],
                    }],
                },
            },
        },
    }
    service = {
        "apiVersion": "v1",
        "kind": "Service",
        "metadata": {"name": name},
        "spec": {"selector": labels, "ports": [{"port": 80, "targetPort": 8080}]},
    }
    return yaml.safe_dump_all([deployment, service], sort_keys=False, default_flow_style=False)
