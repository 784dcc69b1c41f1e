from __future__ import annotations

import re
from dataclasses import dataclass
from functools import lru_cache


class PatternSyntaxError(ValueError):
    pass


@dataclass(frozen=True)
class CompiledPattern:
    raw: str
    normalized: str
    anchored: bool
    directory_only: bool
    regex: re.Pattern[str]

    def matches(self, path: str) -> bool:
        return bool(self.regex.match(path))


def _normalize_pattern(pat: str) -> str:
    pat = pat.strip()
    if not pat:
        raise PatternSyntaxError("empty pattern")

    # Strip leading ./ (common when pasting file paths)
    while pat.startswith("./"):
        pat = pat[2:]

    if not pat.strip("/"):
        raise PatternSyntaxError("pattern points to repo root ('/') which is not a file glob")

    return pat


def _segment_to_regex(seg: str) -> str:
    """Translate one path segment of a glob to a regex.

    Supported:
      - *  (any run of characters within the segment)
      - ?  (single char within a segment)
      - [] character classes (basic)
      - \\x escapes a literal character
    """
    out: list[str] = []
    i = 0
    L = len(seg)

    while i < L:
        c = seg[i]

        if c == "\\" and i + 1 < L:
            out.append(re.escape(seg[i + 1]))
            i += 2
            continue

        if c == "*":
            # A ** that is not a whole segment behaves like *.
            while i + 1 < L and seg[i + 1] == "*":
                i += 1
            out.append("[^/]*")
        elif c == "?":
            out.append("[^/]")
        elif c == "[":
            j = i + 1
            if j < L and seg[j] in ("!", "^"):
                j += 1
            # A ']' right after the opening bracket is part of the class.
            if j < L and seg[j] == "]":
                j += 1
            while j < L and seg[j] != "]":
                j += 1
            if j >= L:
                # Treat lone '[' literally.
                out.append(re.escape(c))
            else:
                inner = seg[i + 1 : j]
                if inner.startswith("!"):
                    inner = "^" + inner[1:]
                inner = inner.replace("\\", "\\\\")
                out.append("[" + inner + "]")
                i = j
        else:
            out.append(re.escape(c))

        i += 1

    return "".join(out)


def _collapse_globstars(segments: list[str]) -> list[str]:
    out: list[str] = []
    for seg in segments:
        if seg == "**" and out and out[-1] == "**":
            continue
        out.append(seg)
    return out


def glob_to_regex(pat: str) -> str:
    """Translate a normalized CODEOWNERS pattern into an anchored regex source.

    Follows gitignore rules:
      - a leading '/' or any '/' before the last character anchors to the root,
        otherwise the pattern matches at any depth
      - a trailing '/' only matches paths beneath a directory of that name
      - '**' as a whole segment matches zero or more directories
      - a pattern ending in '/*' matches direct children only; any other
        pattern also matches everything beneath a directory it names
    """
    directory_only = pat.endswith("/")
    anchored = "/" in pat.rstrip("/")
    segments = _collapse_globstars([s for s in pat.strip("/").split("/") if s])
    n = len(segments)

    body = ""
    for i, seg in enumerate(segments):
        if seg == "**":
            if n == 1:
                body += ".*"
            elif i == 0:
                body += "(?:.*/)?"
            elif i == n - 1:
                body += "/.*"
            else:
                body += "/(?:.*/)?"
            continue
        if i > 0 and segments[i - 1] != "**":
            body += "/"
        body += _segment_to_regex(seg)

    last = segments[-1]
    if last == "**":
        suffix = ""
    elif directory_only:
        suffix = "/.*"
    elif last == "*" and n > 1:
        suffix = ""
    else:
        suffix = "(?:/.*)?"

    prefix = "^" if anchored else r"^(?:.*/)?"
    return prefix + body + suffix + "$"


@lru_cache(maxsize=4096)
def compile_pattern(pattern: str) -> CompiledPattern:
    raw = pattern
    norm = _normalize_pattern(pattern)

    rx = glob_to_regex(norm)
    try:
        compiled = re.compile(rx)
    except re.error as e:
        raise PatternSyntaxError(f"invalid pattern '{raw}': {e}") from e

    return CompiledPattern(
        raw=raw,
        normalized=norm,
        anchored="/" in norm.rstrip("/"),
        directory_only=norm.endswith("/"),
        regex=compiled,
    )
