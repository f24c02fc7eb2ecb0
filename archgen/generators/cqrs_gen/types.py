"""Dataclasses for CQRS project generation."""
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List


class ArtifactKind(str, Enum):
    """Artifact kinds; per-entity values double as preview keys."""
    ENTITY = "Domain/Entity"
    DTO = "Application/Dto"
    MAPPING_PROFILE = "Application/MappingProfile"
    CREATE_COMMAND = "Application/CreateCommand"
    CREATE_HANDLER = "Application/CreateCommandHandler"
    CREATE_VALIDATOR = "Application/CreateCommandValidator"
    UPDATE_COMMAND = "Application/UpdateCommand"
    UPDATE_HANDLER = "Application/UpdateCommandHandler"
    UPDATE_VALIDATOR = "Application/UpdateCommandValidator"
    DELETE_COMMAND = "Application/DeleteCommand"
    DELETE_HANDLER = "Application/DeleteCommandHandler"
    GET_BY_ID_QUERY = "Application/GetByIdQuery"
    GET_BY_ID_HANDLER = "Application/GetByIdQueryHandler"
    GET_ALL_QUERY = "Application/GetAllQuery"
    GET_ALL_HANDLER = "Application/GetAllQueryHandler"
    GET_PAGED_QUERY = "Application/GetPagedQuery"
    GET_PAGED_HANDLER = "Application/GetPagedQueryHandler"
    ENTITY_CONFIGURATION = "Infrastructure/EntityConfiguration"
    CONTROLLER = "Api/Controller"
    HANDLER_TESTS = "Tests/HandlerTests"

    REGISTRY_INTERFACE = "Common/RegistryInterface"
    DB_CONTEXT = "Common/DbContext"
    MASTER_MAPPING = "Common/MasterMappingProfile"
    PAGED_RESULT = "Common/PagedResult"
    PAGED_QUERY = "Common/PagedQuery"
    SEED_DATA = "Common/SeedData"
    AUDIT_LOG = "Common/AuditLog"
    BOILERPLATE = "Common/Boilerplate"


@dataclass(frozen=True)
class GeneratedArtifact:
    """Represents a generated file."""
    path: str  # Relative POSIX path from the project root
    content: str
    kind: ArtifactKind = ArtifactKind.BOILERPLATE

    @property
    def size_bytes(self) -> int:
        return len(self.content.encode("utf-8"))


@dataclass
class IncrementalResult:
    """Outcome of merging new entities into an existing project."""
    new_files: List[str] = field(default_factory=list)
    updated_files: List[str] = field(default_factory=list)
    entities_added: List[str] = field(default_factory=list)
    skipped_files: List[str] = field(default_factory=list)
    failed_files: Dict[str, str] = field(default_factory=dict)  # path -> error message
