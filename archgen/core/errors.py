"""Error taxonomy for the generation engine."""
from pathlib import Path
from typing import Optional


class ArchgenError(Exception):
    """Base class for all generation errors."""


class ValidationError(ArchgenError):
    """Malformed input, raised before any rendering or I/O begins."""

    def __init__(self, message: str, entity: Optional[str] = None):
        self.entity = entity
        if entity:
            message = f"Entity '{entity}': {message}"
        super().__init__(message)


class ProjectNotFoundError(ArchgenError):
    """Incremental target directory does not exist."""

    def __init__(self, path: Path):
        self.path = Path(path)
        super().__init__(f"Project directory not found: {self.path}")


class RenderError(ArchgenError):
    """A renderer met a model it cannot safely render."""

    def __init__(self, message: str, entity: Optional[str] = None):
        self.entity = entity
        if entity:
            message = f"Entity '{entity}': {message}"
        super().__init__(message)


class StubEntityAccessError(RenderError):
    """A renderer asked a stub entity for data it never had."""


class WriteError(ArchgenError):
    """I/O failure reported by a FileWriter."""

    def __init__(self, path: Path, cause: OSError):
        self.path = Path(path)
        self.cause = cause
        super().__init__(f"Failed to write {self.path}: {cause}")


class GenerationCancelled(ArchgenError):
    """The caller's cancellation signal was set between artifact writes."""
