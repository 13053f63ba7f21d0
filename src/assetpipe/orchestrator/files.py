"""Resolve task source patterns into ordered file lists."""

from __future__ import annotations

import fnmatch
import os
from pathlib import Path
from typing import Iterable, Iterator


GLOB_CHARS = "*?["


def is_glob(pattern: str) -> bool:
    return any(ch in pattern for ch in GLOB_CHARS)


def _normalize(pattern: str) -> str:
    while pattern.startswith("./"):
        pattern = pattern[2:]
    return pattern


def _variants(pattern: str) -> Iterator[str]:
    # Each `**/` may also stand for zero directories.
    head, sep, tail = pattern.partition("**/")
    if not sep:
        yield pattern
        return
    for rest in _variants(tail):
        yield head + sep + rest
        yield head + rest


def matches(rel_path: str, pattern: str) -> bool:
    """Match a root-relative posix path against a glob pattern."""
    pattern = _normalize(pattern)
    return any(fnmatch.fnmatchcase(rel_path, v) for v in _variants(pattern))


def split_patterns(patterns: Iterable[str]) -> tuple[list[str], list[str]]:
    includes: list[str] = []
    excludes: list[str] = []
    for pat in patterns:
        if pat.startswith("!"):
            excludes.append(_normalize(pat[1:]))
        else:
            includes.append(_normalize(pat))
    return includes, excludes


def collect(patterns: Iterable[str], root: Path) -> list[Path]:
    """Expand patterns under `root`, keeping the order they are listed in.

    Matches of a single glob are sorted; literal paths are taken as given and
    must exist. Nothing is deduplicated.
    """
    root = Path(root)
    includes, excludes = split_patterns(patterns)
    out: list[Path] = []
    for pat in includes:
        if is_glob(pat):
            found = sorted(p for p in root.glob(pat) if p.is_file())
        else:
            p = root / pat
            if not p.is_file():
                raise FileNotFoundError(f"Source file not found: {p}")
            found = [p]
        for p in found:
            if excludes and _excluded(p, root, excludes):
                continue
            out.append(p)
    return out


def _excluded(path: Path, root: Path, excludes: list[str]) -> bool:
    # Literal sources may be absolute or sit outside the root
    rel = Path(os.path.relpath(path, root)).as_posix()
    return any(matches(rel, ex) for ex in excludes)
