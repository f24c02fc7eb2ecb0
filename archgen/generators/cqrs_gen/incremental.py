"""Merge new entities into an already generated project."""
import logging
import threading
from pathlib import Path
from typing import List, Optional, Sequence

from archgen.core.errors import GenerationCancelled, ProjectNotFoundError, RenderError
from archgen.core.workflow import GenerationStage
from archgen.generators.cqrs_gen.context import RenderContext
from archgen.generators.cqrs_gen.generator import scoped_entities, validate_request
from archgen.generators.cqrs_gen.layout import DOMAIN_ENTITIES_DIR, SOURCE_EXT
from archgen.generators.cqrs_gen.planner import plan_entity, plan_registry
from archgen.generators.cqrs_gen.render_infrastructure import ensure_resolved
from archgen.generators.cqrs_gen.types import IncrementalResult
from archgen.generators.cqrs_gen.writer import FileWriter, LocalFileWriter
from archgen.schemas.config import GenerationConfig
from archgen.schemas.entities import EntityModel, StubEntity

log = logging.getLogger(__name__)


def discover_entity_names(project_root: Path, writer: FileWriter) -> List[str]:
    """Entity names recovered from the domain entity files already on disk."""
    return [p.stem for p in writer.list_files(project_root / DOMAIN_ENTITIES_DIR, SOURCE_EXT)]


def generate_incremental(
    new_entities: Sequence[EntityModel],
    config: GenerationConfig,
    project_path: Path,
    writer: Optional[FileWriter] = None,
    context: Optional[RenderContext] = None,
    cancel: Optional[threading.Event] = None,
    session_id: str = "-",
) -> IncrementalResult:
    """
    Add entities to an existing project without touching files already there.

    Per-entity files are write-once: an existing path is recorded as skipped and
    never rendered. A per-entity RenderError only fails that file. The registry
    interface and DbContext are always rebuilt over the union of entities found
    on disk (as name-only stubs) and the new ones; a RenderError there is fatal.
    Callers must serialize concurrent runs against the same directory.
    """
    root = Path(project_path)
    writer = writer or LocalFileWriter()
    if not writer.exists(root):
        raise ProjectNotFoundError(root)
    validate_request(new_entities, config)
    context = context or RenderContext.for_config(config)
    extra = {"session_id": session_id, "stage": GenerationStage.INCREMENTAL.value}

    existing = discover_entity_names(root, writer)
    log.info("Found %d existing entities in %s", len(existing), root, extra=extra)

    entities = scoped_entities(new_entities, config)
    new_names = {e.name for e in entities}
    stubs = [StubEntity(name, config.root_namespace) for name in sorted(existing) if name not in new_names]
    union = [*stubs, *entities]
    # Unknown relationship targets are fatal, so fail before the first write.
    ensure_resolved(union)

    result = IncrementalResult()
    for entity in entities:
        if entity.name not in existing:
            result.entities_added.append(entity.name)
        for planned in plan_entity(entity, config, context):
            target = root / planned.path
            if writer.exists(target):
                result.skipped_files.append(planned.path)
                continue
            if cancel is not None and cancel.is_set():
                raise GenerationCancelled(f"Incremental generation cancelled before writing {planned.path}")
            try:
                artifact = planned.render()
            except RenderError as e:
                log.error("Skipping %s: %s", planned.path, e, extra={**extra, "stage": planned.stage.value})
                result.failed_files[planned.path] = str(e)
                continue
            writer.write(target, artifact.content)
            result.new_files.append(planned.path)

    registry = [planned.render() for planned in plan_registry(union, config)]
    for artifact in registry:
        if cancel is not None and cancel.is_set():
            raise GenerationCancelled(f"Incremental generation cancelled before writing {artifact.path}")
        writer.write(root / artifact.path, artifact.content)
        result.updated_files.append(artifact.path)

    log.info(
        "Incremental run: %d new, %d skipped, %d failed, %d updated",
        len(result.new_files), len(result.skipped_files), len(result.failed_files), len(result.updated_files),
        extra={**extra, "stage": GenerationStage.DONE.value},
    )
    return result
