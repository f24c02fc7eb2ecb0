from __future__ import annotations
import uuid
from datetime import datetime
from sqlalchemy import Boolean, DateTime, Integer, JSON, String, Text
from sqlalchemy.orm import Mapped, mapped_column
from archgen.db.session import Base


class GenerationSession(Base):
    __tablename__ = "generation_sessions"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False)

    root_namespace: Mapped[str] = mapped_column(String(200), nullable=False)
    entity_names: Mapped[list] = mapped_column(JSON, default=list, nullable=False)
    output_dir: Mapped[str] = mapped_column(Text, nullable=False)

    files_generated: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    status: Mapped[str] = mapped_column(String(20), default="RUNNING", nullable=False)
    git_initialized: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    git_committed: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    error_message: Mapped[str | None] = mapped_column(Text, nullable=True)
