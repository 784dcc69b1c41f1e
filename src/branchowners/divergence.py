from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

from .errors import (
    GitError,
    NoCommonAncestorError,
    NoMainlineBranchError,
    NotABranchError,
    UnresolvableRefError,
)
from .gitutils import RefStore

_logger = logging.getLogger(__name__)

DEFAULT_MAINLINE = ("main", "master")
_HEADS = "refs/heads/"


@dataclass(frozen=True)
class Divergence:
    current_branch: str
    mainline_branch: str
    mainline_ref: str
    current_commit: str
    mainline_commit: str
    merge_base: str
    base_tree: str
    current_tree: str


def _current_branch(repo: RefStore, requested: str | None) -> str:
    if requested is None:
        head = repo.head_branch()
        if not head or not head.startswith(_HEADS):
            raise NotABranchError("HEAD is not on a branch (detached HEAD?)")
        return head[len(_HEADS) :]

    name = requested[len(_HEADS) :] if requested.startswith(_HEADS) else requested
    if not repo.branch_exists(name):
        raise NotABranchError(f"'{requested}' is not a local branch")
    return name


def _mainline(repo: RefStore, candidates: Sequence[str], log: logging.Logger) -> tuple[str, str]:
    """Pick the first existing mainline branch and the ref to compare against.

    The ref is the branch's upstream when one is configured and resolvable,
    otherwise the local branch itself.
    """
    for name in candidates:
        if not repo.branch_exists(name):
            continue
        upstream = repo.upstream_ref(name)
        if upstream and repo.resolve_commit(upstream):
            return name, upstream
        if upstream:
            log.info("Upstream of mainline branch is not available locally. branch=%s upstream=%s", name, upstream)
        return name, _HEADS + name
    raise NoMainlineBranchError(f"no mainline branch found (tried: {', '.join(candidates)})")


def pick_merge_base(bases: Sequence[str]) -> str:
    """Deterministic choice among several merge-bases: the smallest hash."""
    return min(bases)


def resolve_divergence(
    repo: RefStore,
    current_branch: str | None = None,
    *,
    mainline_candidates: Sequence[str] = DEFAULT_MAINLINE,
    logger: logging.Logger | None = None,
) -> Divergence:
    """Find where ``current_branch`` forked from mainline.

    ``repo`` is a GitRepository or any other RefStore.
    Returns the merge-base tree and the current tip tree; does no diffing.
    """
    log = logger or _logger

    try:
        branch = _current_branch(repo, current_branch)
        log.info("Selected current branch. branch=%s", branch)

        mainline, mainline_ref = _mainline(repo, mainline_candidates, log)
        log.info("Selected reference branch. branch=%s ref=%s", mainline, mainline_ref)

        current_commit = repo.resolve_commit(_HEADS + branch)
        if current_commit is None:
            raise UnresolvableRefError(f"cannot resolve branch '{branch}' to a commit")
        mainline_commit = repo.resolve_commit(mainline_ref)
        if mainline_commit is None:
            raise UnresolvableRefError(f"cannot resolve '{mainline_ref}' to a commit")

        bases = repo.merge_bases(current_commit, mainline_commit)
        if not bases:
            raise NoCommonAncestorError(f"'{branch}' and '{mainline}' have no common ancestor")
        base = pick_merge_base(bases)
        if len(bases) > 1:
            log.debug("Several merge bases found; picked the smallest. bases=%s picked=%s", ",".join(bases), base)
        log.info("Identified base commit. commit=%s", base)

        base_tree = repo.tree_of(base)
        current_tree = repo.tree_of(current_commit)
    except GitError as e:
        raise UnresolvableRefError(str(e)) from e

    return Divergence(
        current_branch=branch,
        mainline_branch=mainline,
        mainline_ref=mainline_ref,
        current_commit=current_commit,
        mainline_commit=mainline_commit,
        merge_base=base,
        base_tree=base_tree,
        current_tree=current_tree,
    )
