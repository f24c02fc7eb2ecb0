"""Render one entity's artifacts for display, without writing anything."""
from typing import Dict, Optional

from archgen.generators.cqrs_gen.context import RenderContext
from archgen.generators.cqrs_gen.generator import scoped_entities, validate_request
from archgen.generators.cqrs_gen.planner import plan_entity
from archgen.schemas.config import GenerationConfig
from archgen.schemas.entities import EntityModel


def preview(entity: EntityModel, config: GenerationConfig,
            context: Optional[RenderContext] = None) -> Dict[str, str]:
    """Artifact kind (e.g. "Domain/Entity") -> text, using the full-run planner."""
    validate_request([entity], config)
    (scoped,) = scoped_entities([entity], config)
    return {planned.kind.value: planned.render().content for planned in plan_entity(scoped, config, context)}
