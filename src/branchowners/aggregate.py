from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable

from .errors import MatchError, NoMatchError
from .ownership import Ruleset

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OwnershipReport:
    owners_to_files: dict[str, list[str]] = field(default_factory=dict)
    # Diagnostics only; never folded into owner buckets.
    unowned_files: list[str] = field(default_factory=list)
    failed_files: dict[str, str] = field(default_factory=dict)  # path -> error message

    def owners(self) -> list[str]:
        return sorted(self.owners_to_files.keys())

    def file_count_for(self, owner: str) -> int:
        return len(self.owners_to_files.get(owner, []))

    def total_files(self) -> int:
        owned = {f for files in self.owners_to_files.values() for f in files}
        return len(owned) + len(self.unowned_files) + len(self.failed_files)


def aggregate_ownership(
    ruleset: Ruleset,
    changed_paths: Iterable[str],
    *,
    logger: logging.Logger | None = None,
) -> OwnershipReport:
    log = logger or _logger
    owners_to_files: dict[str, set[str]] = {}
    unowned: set[str] = set()
    failed: dict[str, str] = {}

    for path in changed_paths:
        try:
            owners = ruleset.owners_for(path)
        except NoMatchError:
            log.warning("No rule matches file. file=%s", path)
            unowned.add(path)
            continue
        except MatchError as e:
            log.warning("Failed to match rule for file. file=%s error=%s", path, e)
            failed[path] = str(e)
            continue

        if not owners:
            log.warning("File matched a rule without owners. file=%s", path)
            unowned.add(path)
            continue
        for owner in owners:
            owners_to_files.setdefault(str(owner), set()).add(path)

    return OwnershipReport(
        owners_to_files={o: sorted(files) for o, files in sorted(owners_to_files.items())},
        unowned_files=sorted(unowned),
        failed_files=dict(sorted(failed.items())),
    )
