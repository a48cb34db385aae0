"""Git operations service using GitPython."""

import logging
from pathlib import Path

from git import Repo
from git.exc import GitCommandError, InvalidGitRepositoryError, NoSuchPathError

from helm_versionstream_mcp.errors import FileStoreError

logger = logging.getLogger(__name__)


class GitError(FileStoreError):
    """Exception raised for git operation failures."""

    pass


class GitService:
    """Service for local git operations.

    Wraps GitPython to provide the handful of operations needed to keep a
    version stream checkout at a given ref.
    """

    def clone(self, url: str, target_dir: Path) -> Repo:
        """Clone a repository.

        Args:
            url: Repository URL (HTTPS, SSH or local path).
            target_dir: Local directory to clone into.

        Returns:
            The cloned repository object.

        Raises:
            GitError: If clone fails.
        """
        try:
            logger.info(f"Cloning {url} to {target_dir}")
            return Repo.clone_from(url, target_dir)
        except GitCommandError as e:
            raise GitError(f"Failed to clone {url}: {e}") from e

    def open(self, path: Path) -> Repo:
        """Open an existing repository.

        Raises:
            GitError: If not a valid git repository.
        """
        try:
            return Repo(path)
        except (InvalidGitRepositoryError, NoSuchPathError) as e:
            raise GitError(f"Not a valid git repository: {path}") from e

    def fetch(self, repo: Repo, *, remote: str = "origin") -> None:
        """Fetch updates and tags from remote without merging."""
        try:
            repo.remote(remote).fetch(tags=True)
        except GitCommandError as e:
            raise GitError(f"Failed to fetch from {remote}: {e}") from e

    def checkout(self, repo: Repo, ref: str, *, remote: str = "origin") -> None:
        """Checkout a branch, tag or commit.

        Branch names are resolved against the remote first so the checkout
        tracks the latest fetched state rather than a stale local branch.

        Raises:
            GitError: If checkout fails.
        """
        remote_ref = f"{remote}/{ref}"
        try:
            if any(r.name == remote_ref for r in repo.remote(remote).refs):
                repo.git.checkout("--force", "-B", ref, remote_ref)
            else:
                repo.git.checkout("--force", ref)
            logger.info(f"Checked out {ref}")
        except (GitCommandError, ValueError) as e:
            raise GitError(f"Failed to checkout {ref}: {e}") from e

    def get_head_sha(self, repo: Repo) -> str:
        """Get the SHA of the HEAD commit."""
        return repo.head.commit.hexsha
