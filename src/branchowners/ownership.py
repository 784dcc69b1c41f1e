from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

from .codeowners_file import Owner, Rule, load_codeowners
from .errors import MatchError, NoMatchError


@dataclass(frozen=True)
class Match:
    path: str
    chosen: Rule | None
    matches: list[Rule]

    @property
    def owners(self) -> tuple[Owner, ...]:
        return self.chosen.owners if self.chosen else ()


class Ruleset:
    """Immutable, ordered CODEOWNERS rules. The last matching rule wins."""

    def __init__(self, rules: Iterable[Rule]):
        self._rules = tuple(rules)

    def __len__(self) -> int:
        return len(self._rules)

    @property
    def rules(self) -> tuple[Rule, ...]:
        return self._rules

    def match(self, path: str) -> Match:
        matches = [r for r in self._rules if r.compiled.matches(path)]
        chosen = matches[-1] if matches else None
        return Match(path=path, chosen=chosen, matches=matches)

    def owners_for(self, path: str) -> tuple[Owner, ...]:
        """Owners of the last rule matching ``path``.

        ``path`` must be repo-relative, as git reports it. Raises
        NoMatchError when no rule matches. A matching rule with no owners
        returns an empty tuple (the path is explicitly unowned).
        """
        if not path or path.startswith("/"):
            raise MatchError(f"expected a repo-relative path, got {path!r}")
        for r in reversed(self._rules):
            if r.compiled.matches(path):
                return r.owners
        raise NoMatchError(f"no rule matches {path}")


def load_ruleset(path: Path) -> Ruleset:
    return Ruleset(load_codeowners(path))
