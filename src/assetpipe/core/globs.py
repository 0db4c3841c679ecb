"""Glob patterns with ``**`` and ``{a,b}`` support over project-relative paths."""

from __future__ import annotations

import re
from collections.abc import Iterator
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath

_WILDCARDS = ("*", "?", "[", "{")


def expand_braces(pattern: str) -> list[str]:
    """Expand the first ``{a,b}`` group recursively: ``*.{js,jsx}`` -> ``*.js``, ``*.jsx``."""

    start = pattern.find("{")
    if start == -1:
        return [pattern]
    end = pattern.find("}", start)
    if end == -1:
        return [pattern]
    head, body, tail = pattern[:start], pattern[start + 1 : end], pattern[end + 1 :]
    expanded: list[str] = []
    for option in body.split(","):
        expanded.extend(expand_braces(f"{head}{option}{tail}"))
    return expanded


def _translate(pattern: str) -> str:
    out: list[str] = []
    index = 0
    length = len(pattern)
    while index < length:
        char = pattern[index]
        if pattern.startswith("**/", index):
            out.append("(?:.*/)?")
            index += 3
        elif pattern.startswith("/**", index) and index + 3 == length:
            out.append("(?:/.*)?")
            index += 3
        elif pattern.startswith("**", index):
            out.append(".*")
            index += 2
        elif char == "*":
            out.append("[^/]*")
            index += 1
        elif char == "?":
            out.append("[^/]")
            index += 1
        elif char == "[":
            close = pattern.find("]", index + 1)
            if close == -1:
                out.append(re.escape(char))
                index += 1
            else:
                body = pattern[index + 1 : close]
                if body.startswith("!"):
                    body = "^" + body[1:]
                out.append(f"[{body}]")
                index = close + 1
        else:
            out.append(re.escape(char))
            index += 1
    return "".join(out)


@dataclass(frozen=True, slots=True)
class GlobPattern:
    """A project-relative glob such as ``src/styles/**/*.{sass,scss}``."""

    pattern: str
    _regexes: tuple[re.Pattern[str], ...] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        normalized = self.pattern.replace("\\", "/")
        if normalized.startswith("./"):
            normalized = normalized[2:]
        object.__setattr__(self, "pattern", normalized)
        regexes = tuple(
            re.compile(f"^{_translate(option)}$") for option in expand_braces(normalized)
        )
        object.__setattr__(self, "_regexes", regexes)

    def matches(self, relative_path: str | PurePosixPath) -> bool:
        """Return True if the project-relative POSIX path matches the pattern."""

        candidate = str(relative_path).replace("\\", "/")
        return any(regex.match(candidate) for regex in self._regexes)

    @property
    def base(self) -> str:
        """Return the static directory prefix before the first wildcard segment."""

        parts: list[str] = []
        for part in PurePosixPath(self.pattern).parts:
            if any(ch in part for ch in _WILDCARDS):
                break
            parts.append(part)
        if len(parts) == len(PurePosixPath(self.pattern).parts):
            parts = parts[:-1]
        return "/".join(parts)

    def iter_files(self, root: Path) -> Iterator[Path]:
        """Yield matching files beneath ``root`` in sorted order."""

        base_dir = root / self.base if self.base else root
        if not base_dir.is_dir():
            return
        for path in sorted(base_dir.rglob("*")):
            if not path.is_file():
                continue
            relative = path.relative_to(root).as_posix()
            if self.matches(relative):
                yield path

