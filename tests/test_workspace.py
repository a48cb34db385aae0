"""
Tests for version stream checkouts using a local git repository as remote.
"""

from pathlib import Path

import pytest
from git import Actor, Repo

from conftest import write
from helm_versionstream_mcp.core.git import GitError, GitService
from helm_versionstream_mcp.core.workspace import WorkspaceManager

AUTHOR = Actor("Test", "test@example.com")


@pytest.fixture
def remote(tmp_path: Path) -> Path:
    """A git repo with a v1 tag pinning nginx 1.0.0 and HEAD pinning 2.0.0."""
    src = tmp_path / "remote"
    repo = Repo.init(src)
    entry = write(src / "charts" / "stable" / "nginx.yml", "version: 1.0.0\n")
    repo.index.add([str(entry.relative_to(src))])
    repo.index.commit("pin nginx 1.0.0", author=AUTHOR, committer=AUTHOR)
    repo.create_tag("v1")

    entry.write_text("version: 2.0.0\n")
    repo.index.add([str(entry.relative_to(src))])
    repo.index.commit("pin nginx 2.0.0", author=AUTHOR, committer=AUTHOR)
    return src


@pytest.fixture
def workspace(tmp_path: Path) -> WorkspaceManager:
    return WorkspaceManager(tmp_path / "workspace", GitService())


def _nginx(checkout: Path) -> str:
    return (checkout / "charts" / "stable" / "nginx.yml").read_text()


def test_clone_at_tag(remote: Path, workspace: WorkspaceManager):
    checkout = workspace.ensure_checkout(str(remote), "v1")
    assert checkout == workspace.get_checkout_path(str(remote))
    assert _nginx(checkout) == "version: 1.0.0\n"


def test_existing_checkout_moves_to_new_ref(remote: Path, workspace: WorkspaceManager):
    workspace.ensure_checkout(str(remote), "v1")
    head = Repo(remote).head.commit.hexsha
    checkout = workspace.ensure_checkout(str(remote), head)
    assert _nginx(checkout) == "version: 2.0.0\n"


def test_unknown_ref(remote: Path, workspace: WorkspaceManager):
    with pytest.raises(GitError):
        workspace.ensure_checkout(str(remote), "does-not-exist")


def test_clone_failure(tmp_path: Path, workspace: WorkspaceManager):
    with pytest.raises(GitError):
        workspace.ensure_checkout(str(tmp_path / "missing-remote"), "master")


def test_checkout_path_is_filesystem_safe(workspace: WorkspaceManager):
    path = workspace.get_checkout_path("https://github.com/jenkins-x/jenkins-x-versions.git")
    assert path.name == "https-github.com-jenkins-x-jenkins-x-versions.git"
