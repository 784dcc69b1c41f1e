from __future__ import annotations

from pathlib import Path, PurePosixPath


def to_posix(path: str) -> str:
    return path.replace("\\", "/")


def normalize_repo_path(path: str, repo_root: Path | None = None) -> str:
    """Turn a path typed on the command line into a repo-relative POSIX path.

    - Converts backslashes to slashes
    - If absolute and repo_root is provided, makes it relative to repo_root
    - Strips leading './' (repeatable) and a single leading '/'

    Returns an empty string for paths that collapse to the repo root. Paths
    reported by git are already repo-relative and must not go through here.
    """
    p = to_posix(path).strip()

    if repo_root is not None:
        pp = Path(p)
        if pp.is_absolute():
            try:
                p = pp.relative_to(repo_root).as_posix()
            except ValueError:
                # Outside the repo; keep as given and let matching decide.
                pass

    while p.startswith("./"):
        p = p[2:]
    if p.startswith("/"):
        p = p[1:]

    if not p:
        return ""
    out = str(PurePosixPath(p))
    return "" if out == "." else out
