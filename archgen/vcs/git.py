"""Version control for generated projects, backed by GitPython."""
from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Protocol

# The git binary is optional at import time; callers check is_available().
os.environ.setdefault("GIT_PYTHON_REFRESH", "quiet")

from git import Actor, Git, GitCommandError, GitCommandNotFound, Repo  # noqa: E402

from archgen.generators.cqrs_gen.render_project import render_gitignore  # noqa: E402

log = logging.getLogger(__name__)


class VersionControl(Protocol):
    def init(self, path: Path) -> bool: ...

    def commit(self, path: Path, message: str) -> bool: ...

    def status(self, path: Path) -> str: ...


class GitVersionControl:
    """Initialise, commit and inspect generated project repositories."""

    def __init__(self, author_name: str = "archgen", author_email: str = "archgen@localhost"):
        self.author = Actor(author_name, author_email)

    @staticmethod
    def is_available() -> bool:
        try:
            Git().version()
            return True
        except (GitCommandNotFound, GitCommandError, OSError):
            return False

    def init(self, path: Path) -> bool:
        """Create a repository at path; False when one already exists."""
        path = Path(path)
        if (path / ".git").exists():
            log.info(f"Git repository already exists at {path}")
            return False
        repo = Repo.init(path)
        gitignore = path / ".gitignore"
        if not gitignore.exists():
            gitignore.write_text(render_gitignore(), encoding="utf-8")
        with repo.config_writer() as cw:
            cw.set_value("user", "name", self.author.name)
            cw.set_value("user", "email", self.author.email)
        log.info(f"Initialized git repository at {path}")
        return True

    def commit(self, path: Path, message: str) -> bool:
        """Stage everything and commit; False when there is nothing to commit."""
        repo = Repo(path)
        repo.git.add(all=True)
        if repo.head.is_valid() and not repo.is_dirty(untracked_files=True):
            log.info("No changes to commit")
            return False
        repo.index.commit(message, author=self.author, committer=self.author)
        log.info(f"Committed changes with hash: {repo.head.commit.hexsha}")
        return True

    def status(self, path: Path) -> str:
        return Repo(path).git.status("--short")
