"""
Ordered artifact plans.

A plan is a list of PlannedArtifact: the target path and kind are known up
front, the text is produced only when `render()` is called. Full generation
renders everything, incremental generation checks the path first, and preview
renders the per-entity plan without writing. All three share these plans, so
gating and ordering live in exactly one place.
"""
from dataclasses import dataclass
from functools import partial
from typing import Callable, List, Sequence

from archgen.core.workflow import GenerationStage
from archgen.generators.cqrs_gen import layout
from archgen.generators.cqrs_gen import render_application as app
from archgen.generators.cqrs_gen import render_project as project
from archgen.generators.cqrs_gen.context import RenderContext
from archgen.generators.cqrs_gen.render_api import render_audit_controller, render_controller
from archgen.generators.cqrs_gen.render_domain import render_audit_log, render_entity
from archgen.generators.cqrs_gen.render_infrastructure import (
    render_audit_log_configuration,
    render_audit_service,
    render_db_context,
    render_entity_configuration,
    render_registry_interface,
)
from archgen.generators.cqrs_gen.render_tests import render_handler_tests
from archgen.generators.cqrs_gen.seed import render_seed_data
from archgen.generators.cqrs_gen.types import ArtifactKind, GeneratedArtifact
from archgen.schemas.config import GenerationConfig
from archgen.schemas.entities import EntityModel


@dataclass(frozen=True)
class PlannedArtifact:
    kind: ArtifactKind
    path: str
    render_text: Callable[[], str]
    stage: GenerationStage = GenerationStage.COMMON
    entity: str = "-"

    def render(self) -> GeneratedArtifact:
        return GeneratedArtifact(path=self.path, content=self.render_text(), kind=self.kind)


def _domain(entity: EntityModel, config: GenerationConfig, context: RenderContext) -> List[tuple]:
    if not config.generate_domain:
        return []
    return [(ArtifactKind.ENTITY, layout.entity_path(entity.name), render_entity)]


def _application(entity: EntityModel, config: GenerationConfig, context: RenderContext) -> List[tuple]:
    if not config.generate_application:
        return []
    name = entity.name
    items = [(ArtifactKind.DTO, layout.dto_path(name), app.render_dto)]
    if config.use_auto_mapper:
        items.append((ArtifactKind.MAPPING_PROFILE, layout.mapping_profile_path(name), app.render_mapping_profile))

    items.append((ArtifactKind.CREATE_COMMAND, layout.command_path("Create", name), app.render_create_command))
    items.append((ArtifactKind.CREATE_HANDLER, layout.command_path("Create", name, "Handler"), app.render_create_handler))
    if config.use_fluent_validation:
        items.append((ArtifactKind.CREATE_VALIDATOR, layout.command_path("Create", name, "Validator"),
                      app.render_create_validator))

    items.append((ArtifactKind.UPDATE_COMMAND, layout.command_path("Update", name), app.render_update_command))
    items.append((ArtifactKind.UPDATE_HANDLER, layout.command_path("Update", name, "Handler"), app.render_update_handler))
    if config.use_fluent_validation:
        items.append((ArtifactKind.UPDATE_VALIDATOR, layout.command_path("Update", name, "Validator"),
                      app.render_update_validator))

    items.append((ArtifactKind.DELETE_COMMAND, layout.command_path("Delete", name), app.render_delete_command))
    items.append((ArtifactKind.DELETE_HANDLER, layout.command_path("Delete", name, "Handler"), app.render_delete_handler))

    by_id = layout.get_by_id_query_name(name)
    items.append((ArtifactKind.GET_BY_ID_QUERY, layout.query_path(by_id, name), app.render_get_by_id_query))
    items.append((ArtifactKind.GET_BY_ID_HANDLER, layout.query_path(by_id, name, "Handler"), app.render_get_by_id_handler))
    get_all = layout.get_all_query_name(name)
    items.append((ArtifactKind.GET_ALL_QUERY, layout.query_path(get_all, name), app.render_get_all_query))
    items.append((ArtifactKind.GET_ALL_HANDLER, layout.query_path(get_all, name, "Handler"), app.render_get_all_handler))
    if config.api.paged_endpoints:
        paged = layout.get_paged_query_name(name)
        items.append((ArtifactKind.GET_PAGED_QUERY, layout.query_path(paged, name), app.render_get_paged_query))
        items.append((ArtifactKind.GET_PAGED_HANDLER, layout.query_path(paged, name, "Handler"),
                      app.render_get_paged_handler))
    return items


def _infrastructure(entity: EntityModel, config: GenerationConfig, context: RenderContext) -> List[tuple]:
    if not config.generate_infrastructure:
        return []
    return [(ArtifactKind.ENTITY_CONFIGURATION, layout.configuration_path(entity.name), render_entity_configuration)]


def _api(entity: EntityModel, config: GenerationConfig, context: RenderContext) -> List[tuple]:
    if not config.generate_api:
        return []
    return [(ArtifactKind.CONTROLLER, layout.controller_path(entity.name), render_controller)]


def _tests(entity: EntityModel, config: GenerationConfig, context: RenderContext) -> List[tuple]:
    if not config.testing.generate_unit_tests:
        return []
    render = partial(render_handler_tests, context=context)
    return [(ArtifactKind.HANDLER_TESTS, layout.handler_tests_path(entity.name), render)]


ENTITY_STAGE_PLANNERS = (
    (GenerationStage.DOMAIN, _domain),
    (GenerationStage.APPLICATION, _application),
    (GenerationStage.INFRASTRUCTURE, _infrastructure),
    (GenerationStage.API, _api),
    (GenerationStage.TESTS, _tests),
)


def plan_entity(entity: EntityModel, config: GenerationConfig,
                context: RenderContext = None) -> List[PlannedArtifact]:
    """Per-entity artifacts in stage order: domain, application, infrastructure, api, tests."""
    context = context or RenderContext.for_config(config)
    planned: List[PlannedArtifact] = []
    for stage, planner in ENTITY_STAGE_PLANNERS:
        for kind, path, renderer in planner(entity, config, context):
            planned.append(PlannedArtifact(
                kind=kind,
                path=path,
                render_text=partial(renderer, entity, config),
                stage=stage,
                entity=entity.name,
            ))
    return planned


def plan_registry(entities: Sequence, config: GenerationConfig) -> List[PlannedArtifact]:
    """The two aggregate artifacts rebuilt on every run, incremental or not."""
    return [
        PlannedArtifact(ArtifactKind.REGISTRY_INTERFACE, layout.REGISTRY_INTERFACE_PATH,
                        partial(render_registry_interface, entities, config)),
        PlannedArtifact(ArtifactKind.DB_CONTEXT, layout.DB_CONTEXT_PATH,
                        partial(render_db_context, entities, config)),
    ]


def plan_common(entities: Sequence[EntityModel], config: GenerationConfig,
                context: RenderContext) -> List[PlannedArtifact]:
    """Cross-entity artifacts for a full run, in their fixed order."""
    planned = plan_registry(entities, config)

    def add(kind: ArtifactKind, path: str, render: Callable[[], str]) -> None:
        planned.append(PlannedArtifact(kind, path, render))

    if config.use_auto_mapper and config.generate_application:
        add(ArtifactKind.MASTER_MAPPING, layout.MASTER_MAPPING_PATH, partial(app.render_master_mapping, entities, config))
    if config.api.generate_pagination:
        add(ArtifactKind.PAGED_RESULT, layout.PAGED_RESULT_PATH, partial(app.render_paged_result, config))
        add(ArtifactKind.PAGED_QUERY, layout.PAGED_QUERY_PATH, partial(app.render_paged_query, config))
    if config.database.generate_seed_data:
        add(ArtifactKind.SEED_DATA, layout.SEED_DATA_PATH, partial(render_seed_data, entities, config, context))
    if config.generate_audit_log:
        add(ArtifactKind.AUDIT_LOG, layout.AUDIT_LOG_PATH, partial(render_audit_log, config))
        add(ArtifactKind.AUDIT_LOG, layout.AUDIT_LOG_CONFIGURATION_PATH, partial(render_audit_log_configuration, config))
        add(ArtifactKind.AUDIT_LOG, layout.AUDIT_SERVICE_PATH, partial(render_audit_service, config))
        if config.generate_api:
            add(ArtifactKind.AUDIT_LOG, layout.AUDIT_CONTROLLER_PATH, partial(render_audit_controller, config))

    boilerplate = ArtifactKind.BOILERPLATE
    if config.generate_program_file:
        add(boilerplate, "Api/Program.cs", partial(project.render_program, entities, config))
    if config.generate_app_settings:
        add(boilerplate, "Api/appsettings.json", partial(project.render_appsettings, config))
        for environment in ("Development", "Production"):
            add(boilerplate, f"Api/appsettings.{environment}.json",
                partial(project.render_appsettings_environment, config, environment))
    if config.generate_launch_settings:
        add(boilerplate, "Api/Properties/launchSettings.json", partial(project.render_launch_settings, config))
    if config.api.generate_health_checks:
        add(boilerplate, "Api/HealthChecks/DatabaseHealthCheck.cs", partial(project.render_health_check, config))
    if config.api.generate_global_exception_handler:
        add(boilerplate, "Api/Middleware/ExceptionHandlingMiddleware.cs",
            partial(project.render_exception_middleware, config))
    if config.generate_project_files:
        for layer in project.LAYERS:
            add(boilerplate, project.csproj_path(config, layer), partial(project.render_csproj, config, layer))
        if config.testing.generate_unit_tests:
            add(boilerplate, project.tests_csproj_path(config), partial(project.render_tests_csproj, config))
    if config.generate_solution_file:
        add(boilerplate, f"{config.root_namespace}.sln", partial(project.render_solution, config, context))
    if config.docs.generate_readme:
        add(boilerplate, "README.md", partial(project.render_readme, entities, config, context))
    if config.docs.generate_architecture_docs:
        add(boilerplate, "ARCHITECTURE.md", partial(project.render_architecture_doc, entities, config))
    if config.docs.generate_changelog:
        add(boilerplate, "CHANGELOG.md", partial(project.render_changelog, context))
    if config.quality.generate_gitignore:
        add(boilerplate, ".gitignore", project.render_gitignore)
    if config.quality.generate_editorconfig:
        add(boilerplate, ".editorconfig", project.render_editorconfig)
    if config.devops.generate_dockerfile:
        add(boilerplate, "Dockerfile", partial(project.render_dockerfile, config))
    if config.devops.generate_docker_compose:
        add(boilerplate, "docker-compose.yml", partial(project.render_docker_compose, config))
    if config.devops.generate_github_actions:
        add(boilerplate, ".github/workflows/build.yml", project.render_github_actions)
    if config.devops.generate_azure_devops:
        add(boilerplate, "azure-pipelines.yml", project.render_azure_pipeline)
    if config.devops.generate_kubernetes:
        add(boilerplate, "k8s/deployment.yaml", partial(project.render_kubernetes, config))
    return planned
