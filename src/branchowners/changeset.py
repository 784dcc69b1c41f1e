from __future__ import annotations

import logging
from typing import Iterable

from .errors import DiffError, GitError
from .gitutils import ChangeRecord, TreeDiffer

_logger = logging.getLogger(__name__)


def paths_of(records: Iterable[ChangeRecord]) -> list[str]:
    """Every path a set of change records touches, sorted and unique.

    Renames contribute both the old and the new path; copies only the new one.
    Paths are kept exactly as git reports them.
    """
    touched: set[str] = set()
    for rec in records:
        if rec.old_path is not None and rec.status != "C":
            touched.add(rec.old_path)
        if rec.new_path is not None:
            touched.add(rec.new_path)
    touched.discard("")
    return sorted(touched)


def extract_changed_paths(
    differ: TreeDiffer,
    base_tree: str,
    current_tree: str,
    *,
    logger: logging.Logger | None = None,
) -> list[str]:
    log = logger or _logger
    try:
        records = differ.diff_trees(base_tree, current_tree)
    except GitError as e:
        raise DiffError(f"Error determining diff between trees {base_tree}..{current_tree}: {e}") from e

    changed = paths_of(records)
    log.info("Computed changed paths. records=%d paths=%d", len(records), len(changed))
    return changed
