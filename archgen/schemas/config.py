"""Generation configuration: feature toggles passed to every renderer."""
from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel, to_snake


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class DatabaseProvider(str, Enum):
    SQL_SERVER = "SqlServer"
    POSTGRESQL = "PostgreSQL"
    MYSQL = "MySQL"
    SQLITE = "SQLite"
    IN_MEMORY = "InMemory"


class AuthenticationType(str, Enum):
    NONE = "None"
    JWT = "JWT"
    IDENTITY_SERVER = "IdentityServer"
    AZURE_AD = "AzureAD"


class LoggingProvider(str, Enum):
    DEFAULT = "Default"
    SERILOG = "Serilog"
    NLOG = "NLog"


class CachingProvider(str, Enum):
    MEMORY = "Memory"
    REDIS = "Redis"


class TestFramework(str, Enum):
    XUNIT = "xUnit"
    NUNIT = "NUnit"
    MSTEST = "MSTest"


class DatabaseOptions(_CamelModel):
    provider: DatabaseProvider = DatabaseProvider.SQL_SERVER
    connection_string: str = ""
    generate_migrations: bool = False
    generate_seed_data: bool = False


class AuthOptions(_CamelModel):
    generate_authentication: bool = False
    authentication_type: AuthenticationType = AuthenticationType.JWT
    generate_identity: bool = False
    generate_role_based_auth: bool = False


class ApiOptions(_CamelModel):
    generate_swagger: bool = True
    generate_xml_documentation: bool = True
    generate_api_versioning: bool = False
    enable_cors: bool = True
    allowed_origins: List[str] = Field(default_factory=lambda: ["http://localhost:3000"])
    enable_rate_limiting: bool = False
    enable_response_compression: bool = True
    generate_global_exception_handler: bool = True
    generate_health_checks: bool = True
    generate_pagination: bool = True
    # Adds a sixth controller route (GET paged) plus its query and handler.
    generate_paged_endpoints: bool = False

    @property
    def paged_endpoints(self) -> bool:
        return self.generate_pagination and self.generate_paged_endpoints


class LoggingOptions(_CamelModel):
    provider: LoggingProvider = LoggingProvider.SERILOG
    enable_application_insights: bool = False


class CachingOptions(_CamelModel):
    enabled: bool = False
    provider: CachingProvider = CachingProvider.MEMORY


class TestingOptions(_CamelModel):
    generate_unit_tests: bool = False
    generate_integration_tests: bool = False
    framework: TestFramework = TestFramework.XUNIT


class DevOpsOptions(_CamelModel):
    generate_dockerfile: bool = False
    generate_docker_compose: bool = False
    generate_kubernetes: bool = False
    generate_github_actions: bool = False
    generate_azure_devops: bool = False


class DocsOptions(_CamelModel):
    generate_readme: bool = True
    generate_architecture_docs: bool = True
    generate_changelog: bool = False


class QualityOptions(_CamelModel):
    generate_gitignore: bool = True
    generate_editorconfig: bool = False


# Flat payload keys accepted for backward compatibility, mapped to (group, field).
_FLAT_KEYS: Dict[str, tuple] = {
    "database_provider": ("database", "provider"),
    "connection_string": ("database", "connection_string"),
    "generate_migrations": ("database", "generate_migrations"),
    "generate_seed_data": ("database", "generate_seed_data"),
    "generate_authentication": ("auth", "generate_authentication"),
    "authentication_type": ("auth", "authentication_type"),
    "generate_identity": ("auth", "generate_identity"),
    "generate_role_based_auth": ("auth", "generate_role_based_auth"),
    "generate_swagger": ("api", "generate_swagger"),
    "generate_xml_documentation": ("api", "generate_xml_documentation"),
    "generate_api_versioning": ("api", "generate_api_versioning"),
    "enable_cors": ("api", "enable_cors"),
    "allowed_origins": ("api", "allowed_origins"),
    "enable_rate_limiting": ("api", "enable_rate_limiting"),
    "enable_response_compression": ("api", "enable_response_compression"),
    "generate_global_exception_handler": ("api", "generate_global_exception_handler"),
    "generate_health_checks": ("api", "generate_health_checks"),
    "generate_pagination": ("api", "generate_pagination"),
    "generate_paged_endpoints": ("api", "generate_paged_endpoints"),
    "logging_provider": ("logging", "provider"),
    "enable_application_insights": ("logging", "enable_application_insights"),
    "generate_caching": ("caching", "enabled"),
    "caching_provider": ("caching", "provider"),
    "generate_tests": ("testing", "generate_unit_tests"),
    "generate_unit_tests": ("testing", "generate_unit_tests"),
    "generate_integration_tests": ("testing", "generate_integration_tests"),
    "test_framework": ("testing", "framework"),
    "generate_dockerfile": ("devops", "generate_dockerfile"),
    "generate_docker_compose": ("devops", "generate_docker_compose"),
    "generate_kubernetes": ("devops", "generate_kubernetes"),
    "generate_github_actions": ("devops", "generate_github_actions"),
    "generate_azure_devops": ("devops", "generate_azure_devops"),
    "generate_readme": ("docs", "generate_readme"),
    "generate_architecture_docs": ("docs", "generate_architecture_docs"),
    "generate_changelog": ("docs", "generate_changelog"),
    "generate_gitignore": ("quality", "generate_gitignore"),
    "generate_editorconfig": ("quality", "generate_editorconfig"),
}


class GenerationConfig(_CamelModel):
    """
    Every toggle the renderers consult.

    Layer and pattern flags live at the top level; related options are grouped
    one level down (``config.database.provider``). A flat payload such as
    ``{"databaseProvider": "PostgreSQL", "generateTests": true}`` is lifted into
    the groups before validation.
    """

    output_path: str = "./Generated"
    root_namespace: str = "MyApp"

    generate_domain: bool = True
    generate_application: bool = True
    generate_infrastructure: bool = True
    generate_api: bool = True

    use_mediator: bool = True
    use_fluent_validation: bool = True
    use_auto_mapper: bool = True

    generate_program_file: bool = True
    generate_app_settings: bool = True
    generate_project_files: bool = True
    generate_solution_file: bool = True
    generate_launch_settings: bool = False
    generate_audit_log: bool = True

    # Name-based GUIDs instead of random ones in solution files and seed data.
    deterministic_identifiers: bool = False

    database: DatabaseOptions = Field(default_factory=DatabaseOptions)
    auth: AuthOptions = Field(default_factory=AuthOptions)
    api: ApiOptions = Field(default_factory=ApiOptions)
    logging: LoggingOptions = Field(default_factory=LoggingOptions)
    caching: CachingOptions = Field(default_factory=CachingOptions)
    testing: TestingOptions = Field(default_factory=TestingOptions)
    devops: DevOpsOptions = Field(default_factory=DevOpsOptions)
    docs: DocsOptions = Field(default_factory=DocsOptions)
    quality: QualityOptions = Field(default_factory=QualityOptions)

    @model_validator(mode="before")
    @classmethod
    def _nest_flat_keys(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        for key in list(data):
            target = _FLAT_KEYS.get(to_snake(key))
            if target is None:
                continue
            group, field = target
            value = data.pop(key)
            nested = data.get(group) or data.get(to_camel(group)) or {}
            if isinstance(nested, BaseModel):
                nested = nested.model_dump()
            nested = dict(nested)
            nested.setdefault(field, value)
            data[group] = nested
        return data

    @property
    def generate_tests(self) -> bool:
        return self.testing.generate_unit_tests or self.testing.generate_integration_tests

    def project_name(self, layer: str) -> str:
        return f"{self.root_namespace}.{layer}"
