from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from .aggregate import aggregate_ownership
from .changeset import extract_changed_paths
from .codeowners_file import DEFAULT_LOCATIONS, find_codeowners
from .config import DEFAULT_CONFIG_FILE, Settings, load_settings
from .divergence import Divergence, resolve_divergence
from .errors import (
    BranchOwnersError,
    ConfigError,
    DiffError,
    GitError,
    ParseError,
    RefResolutionError,
    RepositoryError,
    UsageError,
)
from .gitutils import GitRepository
from .ownership import Ruleset, load_ruleset
from .paths import normalize_repo_path
from .report import render_json, render_markdown, render_text
from .version import __version__

_logger = logging.getLogger(__name__)

LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"

# Checked in order; subclasses before their bases.
_FATAL_MESSAGES: tuple[tuple[type[BranchOwnersError], str], ...] = (
    (ParseError, "Error loading ruleset."),
    (ConfigError, "Error loading configuration."),
    (RepositoryError, "Error opening repository."),
    (RefResolutionError, "Error resolving branches."),
    (DiffError, "Error determining diff between trees."),
    (GitError, "Git command failed."),
    (BranchOwnersError, "Unexpected error."),
)


def configure_logging(verbosity: int) -> None:
    if verbosity < 0:
        level = logging.ERROR
    elif verbosity == 0:
        level = logging.WARNING
    elif verbosity == 1:
        level = logging.INFO
    else:
        level = logging.DEBUG

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    pkg = logging.getLogger("branchowners")
    pkg.handlers[:] = [handler]
    pkg.setLevel(level)
    pkg.propagate = False


def _open_repo(args_repo_root: str | None) -> GitRepository:
    return GitRepository.open(Path(args_repo_root).resolve() if args_repo_root else None)


def _settings(args: argparse.Namespace, repo_root: Path) -> Settings:
    if args.config:
        path = Path(args.config)
        if not path.exists():
            raise ConfigError(f"config file not found: {path}")
    else:
        path = repo_root / DEFAULT_CONFIG_FILE
    settings = load_settings(path)
    return settings.merged(
        codeowners=args.codeowners,
        mainline=tuple(args.mainline) if getattr(args, "mainline", None) else None,
        show_unowned=True if getattr(args, "show_unowned", False) else None,
    )


def _load_rules(repo_root: Path, settings: Settings) -> Ruleset:
    if settings.codeowners:
        path = Path(settings.codeowners)
        if not path.is_absolute():
            path = repo_root / path
    else:
        found = find_codeowners(repo_root)
        if found is None:
            raise ParseError(f"CODEOWNERS file not found (looked in: {', '.join(DEFAULT_LOCATIONS)})")
        path = found
    ruleset = load_ruleset(path)
    _logger.info("Loaded ruleset. file=%s rules=%d", path, len(ruleset))
    return ruleset


def _changed_paths(args: argparse.Namespace, repo: GitRepository, settings: Settings) -> tuple[Divergence, list[str]]:
    div = resolve_divergence(repo, args.branch, mainline_candidates=settings.mainline, logger=_logger)
    changed = extract_changed_paths(repo, div.base_tree, div.current_tree, logger=_logger)
    return div, changed


def cmd_report(args: argparse.Namespace) -> int:
    # A broken CODEOWNERS fails before any branch resolution.
    repo = _open_repo(args.repo_root)
    settings = _settings(args, repo.root)
    ruleset = _load_rules(repo.root, settings)

    div, changed = _changed_paths(args, repo, settings)
    report = aggregate_ownership(ruleset, changed, logger=_logger)

    if args.format == "json":
        print(render_json(report, divergence=div, include_unowned=settings.show_unowned))
    elif args.format == "markdown":
        print(render_markdown(report, divergence=div, include_unowned=settings.show_unowned))
    else:
        text = render_text(report, include_unowned=settings.show_unowned)
        if text:
            print(text)

    if args.fail_on_unowned and report.unowned_files:
        return 3
    return 0


def cmd_changed(args: argparse.Namespace) -> int:
    repo = _open_repo(args.repo_root)
    settings = _settings(args, repo.root)
    div, changed = _changed_paths(args, repo, settings)

    if args.format == "json":
        payload = {
            "branch": div.current_branch,
            "mainline": div.mainline_branch,
            "merge_base": div.merge_base,
            "changed_files": changed,
            "version": __version__,
        }
        print(json.dumps(payload, indent=2))
    else:
        for path in changed:
            print(path)
    return 0


def cmd_who_owns(args: argparse.Namespace) -> int:
    try:
        repo_root = _open_repo(args.repo_root).root
    except RepositoryError:
        # Matching alone does not need git.
        repo_root = Path(args.repo_root).resolve() if args.repo_root else Path.cwd()
    settings = _settings(args, repo_root)
    ruleset = _load_rules(repo_root, settings)

    path = normalize_repo_path(args.path, repo_root=repo_root)
    if not path:
        raise UsageError(f"not a file path: {args.path!r}")
    m = ruleset.match(path)

    if args.format == "json":
        payload = {
            "path": path,
            "owners": [str(o) for o in m.owners],
            "chosen_rule": {
                "pattern": m.chosen.pattern,
                "owners": m.chosen.owner_names,
                "line": m.chosen.line,
                "source": m.chosen.source,
            }
            if m.chosen
            else None,
            "matches": [
                {"pattern": r.pattern, "owners": r.owner_names, "line": r.line, "source": r.source}
                for r in m.matches
            ],
            "version": __version__,
        }
        print(json.dumps(payload, indent=2))
        return 0

    if m.owners:
        print(f"{path}: {' '.join(str(o) for o in m.owners)}")
    else:
        print(f"{path}: (unowned)")

    if args.explain:
        print("")
        if not m.matches:
            print("No matching rules.")
        else:
            print("Matched rules (last-match wins):")
            for r in m.matches:
                chosen = "  <== chosen" if r is m.chosen else ""
                owners = " ".join(r.owner_names) or "(no owners)"
                print(f"- {r.pattern} -> {owners} ({r.source}:{r.line}){chosen}")

    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="branchowners", description="Who owns the files changed on this branch")
    p.add_argument("--codeowners", default=None, help="Path to CODEOWNERS (default: .github/CODEOWNERS, CODEOWNERS, docs/CODEOWNERS)")
    p.add_argument("--repo-root", default=None, help="Repository root (default: auto-detect with git)")
    p.add_argument("--config", default=None, help=f"Path to a YAML config file (default: {DEFAULT_CONFIG_FILE} at repo root)")
    p.add_argument("-v", "--verbose", action="count", default=0, help="More logging (-v info, -vv debug)")
    p.add_argument("-q", "--quiet", action="store_true", help="Only log errors")
    p.add_argument("--version", action="version", version=f"branchowners {__version__}")

    sub = p.add_subparsers(dest="cmd", required=True)

    def add_branch_args(sp: argparse.ArgumentParser) -> None:
        sp.add_argument("--branch", default=None, help="Branch to inspect (default: the branch checked out at HEAD)")
        sp.add_argument(
            "--mainline",
            action="append",
            default=None,
            help="Mainline branch candidate; repeat to try several in order (default: main, then master)",
        )

    r = sub.add_parser("report", aliases=["branch"], help="Owners of the files changed on the branch")
    add_branch_args(r)
    r.add_argument("--format", choices=["text", "json", "markdown"], default="text")
    r.add_argument("--show-unowned", action="store_true", help="Also list changed files no rule owns")
    r.add_argument("--fail-on-unowned", action="store_true", help="Exit 3 if any changed file is unowned")
    r.set_defaults(func=cmd_report)

    c = sub.add_parser("changed", help="List files changed on the branch since it left mainline")
    add_branch_args(c)
    c.add_argument("--format", choices=["text", "json"], default="text")
    c.set_defaults(func=cmd_changed)

    w = sub.add_parser("who-owns", aliases=["owner"], help="Find the owners of a single path")
    w.add_argument("path", help="Path to a file (relative or absolute)")
    w.add_argument("--format", choices=["text", "json"], default="text")
    w.add_argument("--explain", action="store_true", help="Show the matching rules and precedence")
    w.set_defaults(func=cmd_who_owns)

    return p


def main(argv: list[str] | None = None) -> None:
    argv = argv if argv is not None else sys.argv[1:]
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(-1 if args.quiet else args.verbose)
    # Git paths are decoded with surrogateescape; write them back out byte for byte.
    if hasattr(sys.stdout, "reconfigure"):
        sys.stdout.reconfigure(errors="surrogateescape")

    try:
        rc = args.func(args)
    except UsageError as e:
        print(f"error: {e}", file=sys.stderr)
        rc = 2
    except BranchOwnersError as e:
        message = next(msg for cls, msg in _FATAL_MESSAGES if isinstance(e, cls))
        _logger.error("%s error=%s", message, e)
        rc = 1
    except KeyboardInterrupt:
        rc = 130

    raise SystemExit(rc)
