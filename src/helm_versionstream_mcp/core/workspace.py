"""Workspace manager for local version stream checkouts."""

import logging
import re
import shutil
from pathlib import Path

from git import Repo

from helm_versionstream_mcp.core.git import GitError, GitService

logger = logging.getLogger(__name__)


class WorkspaceManager:
    """Manages local clones of version stream repositories.

    Each source URL gets its own directory under the workspace; the clone is
    created on first use and fetched and checked out at the requested ref on
    later uses.
    """

    def __init__(self, workspace_dir: Path, git_service: GitService) -> None:
        """Initialize the workspace manager.

        Args:
            workspace_dir: Base directory for repository clones.
            git_service: Git service instance.
        """
        self._workspace_dir = workspace_dir
        self._git = git_service
        self._repos: dict[str, Repo] = {}

    def get_checkout_path(self, url: str) -> Path:
        """Get the local path used for a source URL."""
        name = re.sub(r"[^A-Za-z0-9._-]+", "-", url).strip("-.") or "versionstream"
        return self._workspace_dir / name

    def ensure_checkout(self, url: str, ref: str, *, force_fresh: bool = False) -> Path:
        """Ensure a repository is available locally at ``ref``.

        Args:
            url: Git URL of the repository.
            ref: Branch, tag or commit to check out.
            force_fresh: Delete and re-clone the repository.

        Returns:
            Path to the checkout.

        Raises:
            GitError: If repository operations fail.
        """
        repo_path = self.get_checkout_path(url)

        if force_fresh and repo_path.exists():
            logger.info(f"Force fresh: removing {repo_path}")
            shutil.rmtree(repo_path)
            self._repos.pop(url, None)

        if repo_path.exists() and (repo_path / ".git").exists():
            repo = self._update_repo(url, repo_path)
        else:
            self._workspace_dir.mkdir(parents=True, exist_ok=True)
            repo = self._git.clone(url, repo_path)
            self._repos[url] = repo

        if ref:
            self._git.checkout(repo, ref)
        logger.info(f"Version stream {url} at {ref or 'HEAD'} ({self._git.get_head_sha(repo)[:8]})")
        return repo_path

    def _update_repo(self, url: str, repo_path: Path) -> Repo:
        """Fetch the latest state of an existing clone."""
        repo = self._repos.get(url)
        if repo is None:
            repo = self._git.open(repo_path)
            self._repos[url] = repo

        try:
            self._git.fetch(repo)
        except GitError as e:
            logger.warning(f"Failed to update {url}: {e}")
            # The existing clone may still contain the requested ref

        return repo

