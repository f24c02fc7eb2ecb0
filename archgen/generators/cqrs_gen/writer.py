"""File writers for generated projects."""
from pathlib import Path
from typing import List, Protocol

from archgen.core.errors import WriteError


class FileWriter(Protocol):
    """The only way the engine touches the filesystem."""

    def write(self, path: Path, content: str) -> None: ...

    def exists(self, path: Path) -> bool: ...

    def ensure_dir(self, path: Path) -> None: ...

    def list_files(self, directory: Path, suffix: str) -> List[Path]: ...


class LocalFileWriter:
    """FileWriter backed by the local filesystem."""

    def write(self, path: Path, content: str) -> None:
        path = Path(path)
        try:
            # Create parent directories if needed
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8")
        except OSError as e:
            raise WriteError(path, e) from e

    def exists(self, path: Path) -> bool:
        return Path(path).exists()

    def ensure_dir(self, path: Path) -> None:
        try:
            Path(path).mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise WriteError(path, e) from e

    def list_files(self, directory: Path, suffix: str) -> List[Path]:
        directory = Path(directory)
        if not directory.is_dir():
            return []
        return sorted(p for p in directory.iterdir() if p.is_file() and p.suffix == suffix)
