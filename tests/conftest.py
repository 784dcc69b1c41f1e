import subprocess

import pytest

from branchowners.gitutils import is_git_available

CODEOWNERS = """\
# Ownership
*.md @docs-team
/src/ @core-team
/src/legacy/ @legacy-team
/scripts/ @scripts-team
/tools/ @tools-team
"""


def git(repo, *args):
    cp = subprocess.run(
        [
            "git",
            "-c", "user.name=Test",
            "-c", "user.email=test@example.com",
            "-c", "commit.gpgsign=false",
            "-c", "init.defaultBranch=main",
            *args,
        ],
        cwd=str(repo),
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        text=True,
        check=True,
    )
    return cp.stdout


def write(repo, rel, text):
    p = repo / rel
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(text, encoding="utf-8")


@pytest.fixture
def branch_repo(tmp_path):
    """A repo with ``main`` and a ``feature`` branch checked out.

    On ``feature``: README.md, src/app.go and src/legacy/old.go are modified
    and scripts/build.sh is renamed to tools/build.sh.
    """
    if not is_git_available():
        pytest.skip("git is not installed")

    repo = tmp_path / "repo"
    repo.mkdir()
    git(repo, "init", "-q")
    git(repo, "symbolic-ref", "HEAD", "refs/heads/main")

    write(repo, ".github/CODEOWNERS", CODEOWNERS)
    write(repo, "README.md", "# readme\n")
    write(repo, "LICENSE", "MIT\n")
    write(repo, "src/app.go", "package main\n")
    write(repo, "src/legacy/old.go", "package legacy\n")
    write(repo, "scripts/build.sh", "#!/bin/sh\necho build\n")
    git(repo, "add", "-A")
    git(repo, "commit", "-q", "-m", "initial")

    git(repo, "checkout", "-q", "-b", "feature")
    write(repo, "README.md", "# readme\n\nmore\n")
    write(repo, "src/app.go", "package main\n\nfunc main() {}\n")
    write(repo, "src/legacy/old.go", "package legacy\n\n// deprecated\n")
    (repo / "tools").mkdir()
    git(repo, "mv", "scripts/build.sh", "tools/build.sh")
    git(repo, "commit", "-q", "-am", "feature work")

    # Mainline moves on after the fork; its changes must not show up.
    git(repo, "checkout", "-q", "main")
    write(repo, "LICENSE", "Apache-2.0\n")
    git(repo, "commit", "-q", "-am", "relicense")
    git(repo, "checkout", "-q", "feature")

    return repo
