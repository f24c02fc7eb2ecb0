"""Zip packaging of a generated project."""
import io
import zipfile
from pathlib import Path


def build_archive(root: Path) -> bytes:
    """Zip every file under root, with paths relative to root."""
    root = Path(root)
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as zf:
        for path in sorted(root.rglob("*")):
            if path.is_file() and ".git" not in path.relative_to(root).parts:
                zf.write(path, path.relative_to(root).as_posix())
    return buffer.getvalue()
