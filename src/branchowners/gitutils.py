from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol, Sequence

from .errors import GitError, RepositoryError

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ChangeRecord:
    """One entry of a structural tree diff."""

    status: str  # "A" | "D" | "M" | "T" | "R" | "C"
    old_path: str | None
    new_path: str | None


class TreeDiffer(Protocol):
    def diff_trees(self, base_tree: str, current_tree: str) -> list[ChangeRecord]: ...


class RefStore(Protocol):
    """What divergence resolution needs from a repository."""

    def head_branch(self) -> str | None: ...

    def branch_exists(self, name: str) -> bool: ...

    def upstream_ref(self, name: str) -> str | None: ...

    def resolve_commit(self, ref: str) -> str | None: ...

    def merge_bases(self, a: str, b: str) -> list[str]: ...

    def tree_of(self, commit: str) -> str: ...


def _git(repo_root: Path, args: Sequence[str]) -> subprocess.CompletedProcess[str]:
    _logger.debug("Running git. args=%s", " ".join(args))
    try:
        return subprocess.run(
            ["git", *args],
            cwd=str(repo_root),
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
            encoding="utf-8",
            errors="surrogateescape",
            check=False,
        )
    except FileNotFoundError as e:
        raise GitError("git not found on PATH") from e


def _failure(args: Sequence[str], cp: subprocess.CompletedProcess[str]) -> GitError:
    msg = cp.stderr.strip() or cp.stdout.strip() or f"exit status {cp.returncode}"
    return GitError(f"git {' '.join(args)} failed: {msg}")


def _run_git(repo_root: Path, args: Sequence[str]) -> str:
    cp = _git(repo_root, args)
    if cp.returncode != 0:
        raise _failure(args, cp)
    return cp.stdout


def _try_git(repo_root: Path, args: Sequence[str]) -> str | None:
    """Like _run_git, but a quiet exit status 1 means "not found" and yields None."""
    cp = _git(repo_root, args)
    if cp.returncode == 1 and not cp.stderr.strip():
        return None
    if cp.returncode != 0:
        raise _failure(args, cp)
    return cp.stdout


def find_repo_root(cwd: Path | None = None) -> Path:
    cwd = cwd or Path.cwd()
    out = _run_git(cwd, ["rev-parse", "--show-toplevel"]).strip()
    if not out:
        raise GitError("Not a git repository (or any of the parent directories)")
    return Path(out)


def is_git_available() -> bool:
    try:
        subprocess.run(["git", "--version"], stdout=subprocess.DEVNULL, stderr=subprocess.DEVNULL, check=True)
        return True
    except (OSError, subprocess.CalledProcessError):
        return False


def parse_name_status_z(output: str) -> list[ChangeRecord]:
    """Parse ``git diff-tree -z --name-status`` output.

    Entries are NUL separated: ``STATUS\\0path\\0`` or, for renames and
    copies, ``R100\\0old\\0new\\0``.
    """
    parts = output.split("\0")
    # -z output ends with a NUL
    if parts and parts[-1] == "":
        parts.pop()
    records: list[ChangeRecord] = []
    i = 0
    while i < len(parts):
        status = parts[i].strip()
        if not status:
            i += 1
            continue
        code = status[0]
        if code in ("R", "C"):
            if i + 2 >= len(parts):
                raise GitError(f"truncated diff-tree entry: {status!r}")
            records.append(ChangeRecord(status=code, old_path=parts[i + 1], new_path=parts[i + 2]))
            i += 3
            continue
        if i + 1 >= len(parts):
            raise GitError(f"truncated diff-tree entry: {status!r}")
        path = parts[i + 1]
        if code == "A":
            records.append(ChangeRecord(status=code, old_path=None, new_path=path))
        elif code == "D":
            records.append(ChangeRecord(status=code, old_path=path, new_path=None))
        else:
            # M, T, U, X: both sides share the path
            records.append(ChangeRecord(status=code, old_path=path, new_path=path))
        i += 2
    return records


class GitRepository:
    """Versioned-tree provider backed by the ``git`` executable."""

    def __init__(self, root: Path):
        self.root = root

    @classmethod
    def open(cls, path: Path | None = None) -> "GitRepository":
        try:
            root = find_repo_root(path)
        except GitError as e:
            raise RepositoryError(f"Cannot open repository at {path or Path.cwd()}: {e}") from e
        return cls(root)

    def head_branch(self) -> str | None:
        """Full ref name HEAD points at (``refs/heads/x``), or None when detached."""
        out = _try_git(self.root, ["symbolic-ref", "-q", "HEAD"])
        return out.strip() if out else None

    def branch_exists(self, name: str) -> bool:
        return _try_git(self.root, ["show-ref", "--verify", "--quiet", f"refs/heads/{name}"]) is not None

    def upstream_ref(self, name: str) -> str | None:
        """The ref a local branch tracks, e.g. ``refs/remotes/origin/main``."""
        out = _run_git(self.root, ["for-each-ref", "--format=%(upstream)", f"refs/heads/{name}"]).strip()
        return out or None

    def resolve_commit(self, ref: str) -> str | None:
        out = _try_git(self.root, ["rev-parse", "--verify", "--quiet", f"{ref}^{{commit}}"])
        return out.strip() if out else None

    def merge_bases(self, a: str, b: str) -> list[str]:
        out = _try_git(self.root, ["merge-base", "--all", a, b])
        if out is None:
            return []
        return [line.strip() for line in out.splitlines() if line.strip()]

    def tree_of(self, commit: str) -> str:
        return _run_git(self.root, ["rev-parse", "--verify", f"{commit}^{{tree}}"]).strip()

    def diff_trees(self, base_tree: str, current_tree: str) -> list[ChangeRecord]:
        out = _run_git(self.root, ["diff-tree", "-r", "-z", "-M", "--name-status", base_tree, current_tree])
        return parse_name_status_z(out)
