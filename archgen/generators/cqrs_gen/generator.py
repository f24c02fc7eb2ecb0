"""Orchestrator for full project generation."""
import logging
import threading
from pathlib import Path
from typing import List, Optional, Sequence

from archgen.core.errors import GenerationCancelled, ValidationError
from archgen.core.workflow import GenerationStage
from archgen.generators.cqrs_gen.context import RenderContext
from archgen.generators.cqrs_gen.planner import plan_common, plan_entity
from archgen.generators.cqrs_gen.types import GeneratedArtifact
from archgen.generators.cqrs_gen.utils import cs_default_literal
from archgen.generators.cqrs_gen.writer import FileWriter, LocalFileWriter
from archgen.schemas.config import GenerationConfig
from archgen.schemas.entities import IDENTIFIER_RE, EntityModel

log = logging.getLogger(__name__)


def validate_request(entities: Sequence[EntityModel], config: GenerationConfig) -> None:
    """Reject malformed input before anything is rendered or written."""
    parts = config.root_namespace.split(".") if config.root_namespace else []
    if not parts or not all(IDENTIFIER_RE.match(p) for p in parts):
        raise ValidationError(f"rootNamespace '{config.root_namespace}' is not a valid namespace")
    if not entities:
        raise ValidationError("At least one entity is required")

    seen = set()
    for entity in entities:
        if not entity.name or not entity.name.strip():
            raise ValidationError("Entity name is required")
        if not IDENTIFIER_RE.match(entity.name):
            raise ValidationError("name is not a valid identifier", entity=entity.name)
        if entity.name in seen:
            raise ValidationError("entity is declared more than once", entity=entity.name)
        seen.add(entity.name)
        if not entity.properties:
            raise ValidationError("must have at least one property", entity=entity.name)
        for prop in entity.properties:
            if not IDENTIFIER_RE.match(prop.name or ""):
                raise ValidationError(f"property name '{prop.name}' is not a valid identifier", entity=entity.name)
            try:
                cs_default_literal(prop.default_value, prop.type)
            except ValueError as e:
                raise ValidationError(f"property '{prop.name}': {e}", entity=entity.name) from None
        for business_key in entity.business_keys:
            if entity.find_property(business_key) is None:
                raise ValidationError(f"business key '{business_key}' is not a property", entity=entity.name)

        names = [p.name for p in entity.properties]
        if len(names) != len(set(names)):
            log.warning("Entity %s declares duplicate property names; output will not compile", entity.name)
        keys = [p.name for p in entity.properties if p.is_key]
        if len(keys) > 1:
            log.warning("Entity %s marks %d key properties; using %s", entity.name, len(keys), keys[0])


def scoped_entities(entities: Sequence[EntityModel], config: GenerationConfig) -> List[EntityModel]:
    """Copies of the entities carrying the configured root namespace."""
    return [e.model_copy(update={"namespace": config.root_namespace}) for e in entities]


def render_project(
    entities: Sequence[EntityModel],
    config: GenerationConfig,
    context: Optional[RenderContext] = None,
    session_id: str = "-",
) -> List[GeneratedArtifact]:
    """
    Render every artifact of a full project without writing anything.

    Per-entity artifacts come first (entities in input order, stages in
    domain -> application -> infrastructure -> api -> tests order), then the
    cross-entity sequence. Any RenderError propagates and aborts the run.
    """
    context = context or RenderContext.for_config(config)
    artifacts: List[GeneratedArtifact] = []
    for entity in entities:
        for planned in plan_entity(entity, config, context):
            log.debug("Rendering %s", planned.path, extra={"session_id": session_id, "stage": planned.stage.value})
            artifacts.append(planned.render())
        log.info("Rendered entity %s", entity.name, extra={"session_id": session_id, "stage": "-"})

    common = [planned.render() for planned in plan_common(entities, config, context)]
    artifacts.extend(common)
    log.info("Rendered %d common artifacts", len(common),
             extra={"session_id": session_id, "stage": GenerationStage.COMMON.value})
    return artifacts


def generate(
    entities: Sequence[EntityModel],
    config: GenerationConfig,
    writer: Optional[FileWriter] = None,
    context: Optional[RenderContext] = None,
    cancel: Optional[threading.Event] = None,
    session_id: str = "-",
) -> List[GeneratedArtifact]:
    """
    Generate a full project into config.output_path.

    Args:
        entities: Entities to scaffold, in the order they should appear
        config: Feature toggles and output location
        writer: FileWriter to persist artifacts; defaults to LocalFileWriter
        context: Identifier and clock providers; defaults from config
        cancel: Checked between artifact writes, never mid-render
        session_id: Correlation id for log records

    Returns:
        List of GeneratedArtifact objects, in write order

    Raises:
        ValidationError: malformed input, raised before any rendering
        RenderError: an artifact could not be rendered; nothing was written
        WriteError: the writer failed; earlier artifacts stay on disk
        GenerationCancelled: cancel was set between two writes
    """
    extra = {"session_id": session_id, "stage": GenerationStage.VALIDATE.value}
    validate_request(entities, config)
    log.info("Generating %d entities into %s", len(entities), config.output_path, extra=extra)

    artifacts = render_project(scoped_entities(entities, config), config, context, session_id)

    writer = writer or LocalFileWriter()
    out_dir = Path(config.output_path)
    writer.ensure_dir(out_dir)
    for artifact in artifacts:
        if cancel is not None and cancel.is_set():
            raise GenerationCancelled(f"Generation cancelled before writing {artifact.path}")
        writer.write(out_dir / artifact.path, artifact.content)

    log.info("Wrote %d files", len(artifacts), extra={"session_id": session_id, "stage": GenerationStage.WRITE.value})
    return artifacts
