from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path

from .errors import ParseError
from .patterns import CompiledPattern, PatternSyntaxError, compile_pattern


_USERNAME_RE = re.compile(r"^@[\w.-]+$")
_TEAM_RE = re.compile(r"^@[\w.-]+/[\w.-]+$")
_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s/]+\.[^@\s/]+$")

DEFAULT_LOCATIONS = (".github/CODEOWNERS", "CODEOWNERS", "docs/CODEOWNERS")


@dataclass(frozen=True)
class Owner:
    value: str
    kind: str  # "username" | "team" | "email"

    @staticmethod
    def from_token(token: str, *, source: str) -> "Owner":
        if _TEAM_RE.match(token):
            return Owner(value=token, kind="team")
        if _USERNAME_RE.match(token):
            return Owner(value=token, kind="username")
        if _EMAIL_RE.match(token):
            return Owner(value=token, kind="email")
        raise ParseError(f"{source}: invalid owner {token!r} (expected @user, @org/team or an email)")

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Rule:
    pattern: str
    owners: tuple[Owner, ...]
    line: int
    source: str

    compiled: CompiledPattern

    @property
    def owner_names(self) -> list[str]:
        return [str(o) for o in self.owners]


def _split_line(line: str) -> list[str]:
    """Split a rule line on whitespace.

    A backslash escapes the next character (so patterns may contain '\\ ' or
    '\\#'); the backslash is kept for the glob translator. A '#' that starts a
    token begins an inline comment.
    """
    tokens: list[str] = []
    buf: list[str] = []
    i = 0
    while i < len(line):
        ch = line[i]
        if ch == "\\" and i + 1 < len(line):
            buf.append(line[i : i + 2])
            i += 2
            continue
        if ch == "#" and not buf:
            break
        if ch.isspace():
            if buf:
                tokens.append("".join(buf))
                buf = []
        else:
            buf.append(ch)
        i += 1
    if buf:
        tokens.append("".join(buf))
    return tokens


def parse_codeowners_text(text: str, source: str = "CODEOWNERS") -> list[Rule]:
    rules: list[Rule] = []
    for idx, raw in enumerate(text.splitlines(), start=1):
        line = raw.strip()
        if not line or line.startswith("#"):
            continue

        parts = _split_line(line)
        if not parts:
            continue

        pat, owner_tokens = parts[0], parts[1:]
        where = f"{source}:{idx}"
        owners = tuple(Owner.from_token(tok, source=where) for tok in owner_tokens)

        try:
            compiled = compile_pattern(pat)
        except PatternSyntaxError as e:
            raise ParseError(f"{where}: {e}") from e

        rules.append(Rule(pattern=pat, owners=owners, line=idx, source=source, compiled=compiled))

    return rules


def find_codeowners(repo_root: Path) -> Path | None:
    for rel in DEFAULT_LOCATIONS:
        p = repo_root / rel
        if p.is_file():
            return p
    return None


def load_codeowners(path: Path) -> list[Rule]:
    if not path.exists():
        raise ParseError(f"CODEOWNERS file not found: {path}")
    try:
        txt = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ParseError(f"Failed to read CODEOWNERS: {path}: {e}") from e
    return parse_codeowners_text(txt, source=str(path))
