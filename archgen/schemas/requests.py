from datetime import datetime
from typing import Dict, List, Optional

from pydantic import Field

from archgen.schemas.config import GenerationConfig
from archgen.schemas.entities import EntityModel, _CamelModel


class GenerateRequest(_CamelModel):
    config: GenerationConfig = Field(default_factory=GenerationConfig)
    entities: List[EntityModel] = Field(default_factory=list)


class FileInfo(_CamelModel):
    path: str
    size: int
    kind: str


class GenerateResponse(_CamelModel):
    session_id: str
    files_generated: int
    files: List[FileInfo] = []
    git_initialized: bool = False
    git_committed: bool = False
    download_url: str


class PreviewRequest(_CamelModel):
    config: GenerationConfig = Field(default_factory=GenerationConfig)
    entity: EntityModel


class IncrementalGenerateRequest(_CamelModel):
    """Targets a previous session, or a project path inside the workspaces directory."""
    session_id: Optional[str] = None
    project_path: Optional[str] = None
    config: GenerationConfig = Field(default_factory=GenerationConfig)
    new_entities: List[EntityModel] = Field(default_factory=list)


class IncrementalResponse(_CamelModel):
    project_path: str
    entities_added: List[str] = []
    new_files: List[str] = []
    updated_files: List[str] = []
    skipped_files: List[str] = []
    failed_files: Dict[str, str] = {}
    git_committed: bool = False


class SessionResponse(_CamelModel):
    id: str
    created_at: datetime
    updated_at: datetime
    root_namespace: str
    entity_names: List[str] = []
    files_generated: int
    status: str
    git_initialized: bool
    git_committed: bool
    error_message: Optional[str] = None
