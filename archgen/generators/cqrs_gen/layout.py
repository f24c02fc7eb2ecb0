"""
On-disk layout of a generated project.

The incremental generator re-reads this layout: existence checks and entity
discovery depend on these exact paths.
"""
from archgen.schemas.config import GenerationConfig

SOURCE_EXT = ".cs"
DOMAIN_ENTITIES_DIR = "Domain/Entities"

REGISTRY_INTERFACE_PATH = "Application/Common/Interfaces/IApplicationDbContext.cs"
DB_CONTEXT_PATH = "Infrastructure/Persistence/ApplicationDbContext.cs"
SEED_DATA_PATH = "Infrastructure/Persistence/ApplicationDbContextSeed.cs"
MASTER_MAPPING_PATH = "Application/Common/Mappings/MappingRegistry.cs"
PAGED_RESULT_PATH = "Application/Common/Models/PagedResult.cs"
PAGED_QUERY_PATH = "Application/Common/Models/PagedQuery.cs"
# Outside Domain/Entities so the discovery scan never mistakes it for a user entity.
AUDIT_LOG_PATH = "Domain/Common/AuditLog.cs"
AUDIT_LOG_CONFIGURATION_PATH = "Infrastructure/Persistence/Configurations/AuditLogConfiguration.cs"
AUDIT_SERVICE_PATH = "Infrastructure/Services/AuditService.cs"
AUDIT_CONTROLLER_PATH = "Api/Controllers/AuditController.cs"


def entity_path(name: str) -> str:
    return f"{DOMAIN_ENTITIES_DIR}/{name}{SOURCE_EXT}"


def feature_dir(name: str) -> str:
    return f"Application/{name}s"


def dto_path(name: str) -> str:
    return f"{feature_dir(name)}/{name}Dto{SOURCE_EXT}"


def mapping_profile_path(name: str) -> str:
    return f"Application/Mappings/{name}MappingProfile{SOURCE_EXT}"


def command_name(action: str, name: str) -> str:
    return f"{action}{name}Command"


def command_path(action: str, name: str, suffix: str = "") -> str:
    """Path of a command file; suffix is '', 'Handler' or 'Validator'."""
    folder = f"{action}{name}"
    return f"{feature_dir(name)}/Commands/{folder}/{command_name(action, name)}{suffix}{SOURCE_EXT}"


def get_by_id_query_name(name: str) -> str:
    return f"Get{name}ByIdQuery"


def get_all_query_name(name: str) -> str:
    return f"GetAll{name}sQuery"


def get_paged_query_name(name: str) -> str:
    return f"GetPaged{name}sQuery"


def query_path(query_name: str, name: str, suffix: str = "") -> str:
    """Path of a query file; suffix is '' or 'Handler'."""
    folder = query_name[: -len("Query")]
    return f"{feature_dir(name)}/Queries/{folder}/{query_name}{suffix}{SOURCE_EXT}"


def configuration_path(name: str) -> str:
    return f"Infrastructure/Persistence/Configurations/{name}Configuration{SOURCE_EXT}"


def controller_path(name: str) -> str:
    return f"Api/Controllers/{name}sController{SOURCE_EXT}"


def handler_tests_path(name: str) -> str:
    return f"Tests/Application.Tests/{name}s/{name}HandlerTests{SOURCE_EXT}"


def namespace(config: GenerationConfig, *parts: str) -> str:
    return ".".join([config.root_namespace, *parts])


def feature_namespace(config: GenerationConfig, name: str, *parts: str) -> str:
    return namespace(config, "Application", f"{name}s", *parts)


def command_namespace(config: GenerationConfig, action: str, name: str) -> str:
    return feature_namespace(config, name, "Commands", f"{action}{name}")


def query_namespace(config: GenerationConfig, query_name: str, name: str) -> str:
    return feature_namespace(config, name, "Queries", query_name[: -len("Query")])
