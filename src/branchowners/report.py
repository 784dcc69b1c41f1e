from __future__ import annotations

import json

from .aggregate import OwnershipReport
from .divergence import Divergence
from .version import __version__

UNOWNED_HEADING = "(unowned)"


def render_text(report: OwnershipReport, *, include_unowned: bool = False) -> str:
    """One blank line, the owner, then each path indented beneath it."""
    lines: list[str] = []
    for owner in report.owners():
        lines.append("")
        lines.append(owner)
        for f in report.owners_to_files[owner]:
            lines.append(f"  {f}")

    if include_unowned and report.unowned_files:
        lines.append("")
        lines.append(UNOWNED_HEADING)
        for f in report.unowned_files:
            lines.append(f"  {f}")

    return "\n".join(lines)


def render_json(
    report: OwnershipReport,
    *,
    divergence: Divergence | None = None,
    include_unowned: bool = False,
) -> str:
    payload: dict = {
        "owners": {o: report.owners_to_files[o] for o in report.owners()},
        "total_files": report.total_files(),
        "version": __version__,
    }
    if divergence is not None:
        payload["branch"] = divergence.current_branch
        payload["mainline"] = divergence.mainline_branch
        payload["merge_base"] = divergence.merge_base
    if include_unowned:
        payload["unowned_files"] = report.unowned_files
    if report.failed_files:
        payload["failed_files"] = report.failed_files
    return json.dumps(payload, indent=2)


def render_markdown(
    report: OwnershipReport,
    *,
    divergence: Divergence | None = None,
    title: str = "Branch owners",
    include_unowned: bool = False,
    max_files_per_owner: int = 50,
) -> str:
    lines: list[str] = [f"## {title}", ""]

    if divergence is not None:
        lines.append(
            f"_`{divergence.current_branch}` vs `{divergence.mainline_branch}` "
            f"(merge base `{divergence.merge_base[:12]}`)_"
        )
        lines.append("")

    if not report.owners_to_files and not (include_unowned and report.unowned_files):
        lines.append("_No owned files changed._")
        return "\n".join(lines)

    by_size = sorted(report.owners_to_files.items(), key=lambda kv: (-len(kv[1]), kv[0]))
    lines.append(f"### Owners ({len(by_size)})")
    lines.append("")
    for owner, files in by_size:
        count = len(files)
        lines.append(f"- **{owner}** ({count} file{'s' if count != 1 else ''})")
        shown = files[:max_files_per_owner]
        for f in shown:
            lines.append(f"  - `{f}`")
        if len(files) > len(shown):
            lines.append(f"  - _…and {len(files) - len(shown)} more_")
    lines.append("")

    if include_unowned and report.unowned_files:
        lines.append(f"### Unowned files ({len(report.unowned_files)})")
        lines.append("")
        for f in report.unowned_files[:max_files_per_owner]:
            lines.append(f"- `{f}`")
        if len(report.unowned_files) > max_files_per_owner:
            lines.append(f"- _…and {len(report.unowned_files) - max_files_per_owner} more_")
        lines.append("")

    return "\n".join(lines)
