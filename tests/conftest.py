"""Shared fixtures: a throwaway project root with the standard layout."""

from pathlib import Path

import pytest


class Project:
    def __init__(self, root: Path):
        self.root = root
        self.params = {
            "project": {"root": str(root)},
            "server": {
                "backend": {"host": "127.0.0.1", "port": 0, "keepalive": False},
                "proxy": {"open_browser": False},
            },
        }

    def write(self, rel: str, content="") -> Path:
        path = self.root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, bytes):
            path.write_bytes(content)
        else:
            path.write_text(content, encoding="utf-8")
        return path

    def read(self, rel: str) -> str:
        return (self.root / rel).read_text(encoding="utf-8")

    def files(self, rel: str = ".") -> list[str]:
        base = self.root / rel
        return sorted(p.relative_to(base).as_posix() for p in base.rglob("*") if p.is_file())


@pytest.fixture
def project(tmp_path):
    return Project(tmp_path)
