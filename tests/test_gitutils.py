import os

import pytest

from branchowners.changeset import extract_changed_paths
from branchowners.divergence import resolve_divergence
from branchowners.errors import NoCommonAncestorError, NotABranchError, RepositoryError
from branchowners.gitutils import GitRepository, is_git_available

from conftest import git, write


def test_changed_paths_since_fork_point(branch_repo):
    repo = GitRepository.open(branch_repo)
    div = resolve_divergence(repo)
    assert div.current_branch == "feature"
    assert div.mainline_branch == "main"

    changed = extract_changed_paths(repo, div.base_tree, div.current_tree)
    assert changed == [
        "README.md",
        "scripts/build.sh",
        "src/app.go",
        "src/legacy/old.go",
        "tools/build.sh",
    ]


def test_rename_is_reported_as_one_record(branch_repo):
    repo = GitRepository.open(branch_repo)
    div = resolve_divergence(repo)
    renames = [r for r in repo.diff_trees(div.base_tree, div.current_tree) if r.status == "R"]
    assert [(r.old_path, r.new_path) for r in renames] == [("scripts/build.sh", "tools/build.sh")]


def test_master_fallback(branch_repo):
    git(branch_repo, "branch", "-m", "main", "master")
    div = resolve_divergence(GitRepository.open(branch_repo))
    assert div.mainline_branch == "master"


def test_detached_head(branch_repo):
    git(branch_repo, "checkout", "-q", "--detach")
    with pytest.raises(NotABranchError):
        resolve_divergence(GitRepository.open(branch_repo))


def test_tag_is_not_a_branch(branch_repo):
    git(branch_repo, "tag", "v1")
    with pytest.raises(NotABranchError):
        resolve_divergence(GitRepository.open(branch_repo), "v1")


def test_unrelated_history(branch_repo):
    git(branch_repo, "checkout", "-q", "--orphan", "island")
    write(branch_repo, "island.txt", "alone\n")
    git(branch_repo, "add", "island.txt")
    git(branch_repo, "commit", "-q", "-m", "orphan")
    with pytest.raises(NoCommonAncestorError):
        resolve_divergence(GitRepository.open(branch_repo))


def test_open_outside_a_repository(tmp_path):
    if not is_git_available():
        pytest.skip("git is not installed")
    with pytest.raises(RepositoryError):
        GitRepository.open(tmp_path)


@pytest.mark.skipif(os.name == "nt", reason="backslash is a separator on Windows")
def test_backslash_file_name_survives_diff(branch_repo):
    write(branch_repo, "odd\\name.txt", "x\n")
    git(branch_repo, "add", "-A")
    git(branch_repo, "commit", "-q", "-m", "odd name")

    repo = GitRepository.open(branch_repo)
    div = resolve_divergence(repo)
    changed = extract_changed_paths(repo, div.base_tree, div.current_tree)
    assert "odd\\name.txt" in changed
    assert "odd/name.txt" not in changed
