import logging
import uuid
from datetime import datetime
from pathlib import Path
from typing import Dict, Optional

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import Response
from sqlalchemy.orm import Session

from archgen.core.config import settings
from archgen.core.errors import ArchgenError
from archgen.db.models import GenerationSession
from archgen.db.session import get_db
from archgen.generators.cqrs_gen.archive import build_archive
from archgen.generators.cqrs_gen.generator import generate
from archgen.generators.cqrs_gen.incremental import generate_incremental
from archgen.generators.cqrs_gen.preview import preview
from archgen.generators.cqrs_gen.sample import sample_request
from archgen.schemas.requests import (
    FileInfo,
    GenerateRequest,
    GenerateResponse,
    IncrementalGenerateRequest,
    IncrementalResponse,
    PreviewRequest,
    SessionResponse,
)
from archgen.vcs.git import GitVersionControl

log = logging.getLogger(__name__)

router = APIRouter(prefix="/codegen")


def _workspaces() -> Path:
    return Path(settings.workspaces_dir).resolve()


def _git() -> Optional[GitVersionControl]:
    if not settings.git_enabled or not GitVersionControl.is_available():
        return None
    return GitVersionControl(settings.git_author_name, settings.git_author_email)


def _resolve_project(req: IncrementalGenerateRequest) -> Path:
    """Project directory for an incremental run; never outside the workspaces directory."""
    root = _workspaces()
    if req.session_id:
        try:
            uuid.UUID(req.session_id)
        except ValueError:
            raise HTTPException(status_code=400, detail="sessionId must be a UUID") from None
        path = (root / req.session_id).resolve()
    elif req.project_path:
        path = Path(req.project_path)
        if not path.is_absolute():
            path = root / path
        path = path.resolve()
    else:
        raise HTTPException(status_code=400, detail="sessionId or projectPath is required")
    if path != root and root not in path.parents:
        raise HTTPException(status_code=400, detail="Project must be inside the workspaces directory")
    return path


@router.post("/generate", response_model=GenerateResponse)
def generate_project(req: GenerateRequest, db: Session = Depends(get_db)):
    session_id = str(uuid.uuid4())
    out_dir = _workspaces() / session_id
    extra = {"session_id": session_id, "stage": "-"}

    record = GenerationSession(
        id=session_id,
        root_namespace=req.config.root_namespace,
        entity_names=[e.name for e in req.entities],
        output_dir=str(out_dir),
        status="RUNNING",
    )
    db.add(record)
    db.commit()

    config = req.config.model_copy(update={"output_path": str(out_dir)})
    try:
        artifacts = generate(req.entities, config, session_id=session_id)
    except ArchgenError as e:
        record.status = "FAILED"
        record.error_message = str(e)
        record.updated_at = datetime.utcnow()
        db.commit()
        raise

    git = _git()
    if git is not None:
        record.git_initialized = git.init(out_dir)
        record.git_committed = git.commit(out_dir, f"Generate {config.root_namespace} ({len(artifacts)} files)")
    else:
        log.info("Git disabled or unavailable, skipping repository setup", extra=extra)

    record.files_generated = len(artifacts)
    record.status = "COMPLETED"
    record.updated_at = datetime.utcnow()
    db.commit()
    log.info("Generated %d files into %s", len(artifacts), out_dir, extra=extra)

    return GenerateResponse(
        session_id=session_id,
        files_generated=len(artifacts),
        files=[FileInfo(path=a.path, size=a.size_bytes, kind=a.kind.value) for a in artifacts],
        git_initialized=record.git_initialized,
        git_committed=record.git_committed,
        download_url=f"/v1/codegen/download/{session_id}",
    )


@router.get("/download/{session_id}")
def download(session_id: str):
    root = _workspaces()
    project = (root / session_id).resolve()
    if root not in project.parents or not project.is_dir():
        raise HTTPException(status_code=404, detail="Session not found")
    return Response(
        content=build_archive(project),
        media_type="application/zip",
        headers={"Content-Disposition": f'attachment; filename="{session_id}.zip"'},
    )


@router.get("/sessions/{session_id}", response_model=SessionResponse)
def get_session(session_id: str, db: Session = Depends(get_db)):
    record = db.get(GenerationSession, session_id)
    if not record:
        raise HTTPException(status_code=404, detail="Session not found")
    return SessionResponse(
        id=record.id,
        created_at=record.created_at,
        updated_at=record.updated_at,
        root_namespace=record.root_namespace,
        entity_names=record.entity_names or [],
        files_generated=record.files_generated,
        status=record.status,
        git_initialized=record.git_initialized,
        git_committed=record.git_committed,
        error_message=record.error_message,
    )


@router.post("/preview")
def preview_entity(req: PreviewRequest) -> Dict[str, str]:
    return preview(req.entity, req.config)


@router.post("/generate-incremental", response_model=IncrementalResponse)
def generate_project_incremental(req: IncrementalGenerateRequest, db: Session = Depends(get_db)):
    project = _resolve_project(req)
    session_id = req.session_id or "-"
    config = req.config.model_copy(update={"output_path": str(project)})

    result = generate_incremental(req.new_entities, config, project, session_id=session_id)

    committed = False
    git = _git()
    if git is not None and (project / ".git").exists():
        added = ", ".join(result.entities_added) or "no new entities"
        committed = git.commit(project, f"Add {added}")

    record = db.get(GenerationSession, req.session_id) if req.session_id else None
    if record is not None:
        names = list(record.entity_names or [])
        record.entity_names = names + [n for n in result.entities_added if n not in names]
        record.files_generated = record.files_generated + len(result.new_files)
        record.git_committed = record.git_committed or committed
        record.updated_at = datetime.utcnow()
        db.commit()

    return IncrementalResponse(
        project_path=str(project),
        entities_added=result.entities_added,
        new_files=result.new_files,
        updated_files=result.updated_files,
        skipped_files=result.skipped_files,
        failed_files=result.failed_files,
        git_committed=committed,
    )


@router.get("/sample-config")
def sample_config():
    return sample_request()
