"""Shared fixtures and helpers for the scaffolding test suite.

Provides a scripted ``FakePrompter`` in place of the interactive layer,
an in-memory registry (``FakeSession``) serving JSON documents and
gzip tarballs, and a ``make_tarball`` builder for template archives.
"""

from __future__ import annotations

import io
import json
import tarfile
from collections import deque
from pathlib import Path
from typing import Any

import pytest
import requests

from create_tools.config import Config
from scaffolding.errors import OperationCancelled


REGISTRY = "https://registry.example.test/"


# ---------------------------------------------------------------------------
# Prompter
# ---------------------------------------------------------------------------


class FakePrompter:
    """Answers questions from a script instead of the terminal.

    Each scripted answer is consumed in order. ``CANCEL`` raises
    OperationCancelled; ``DEFAULT`` returns the question's default.
    Every question asked is recorded in ``asked`` as (kind, message, extra).
    """

    CANCEL = object()
    DEFAULT = object()

    def __init__(self, *answers: Any):
        self.answers = deque(answers)
        self.asked: list[tuple[str, str, Any]] = []

    def _next(self, default: Any = None) -> Any:
        if not self.answers:
            raise AssertionError("FakePrompter ran out of answers")
        answer = self.answers.popleft()
        if answer is self.CANCEL:
            raise OperationCancelled()
        if answer is self.DEFAULT:
            return default
        return answer

    def text(self, message: str, default: Any = None, password: bool = False) -> str:
        self.asked.append(("text", message, default))
        answer = self._next(default)
        return "" if answer is None else str(answer)

    def confirm(self, message: str, default: Any = None) -> bool:
        self.asked.append(("confirm", message, default))
        return bool(self._next(default))

    def number(self, message: str, default: Any = None) -> int | float:
        self.asked.append(("number", message, default))
        return self._next(default)

    def select(self, message: str, choices: list[tuple[str, Any]], initial: int = 0) -> Any:
        self.asked.append(("select", message, [title for title, _ in choices]))
        answer = self._next(choices[initial][1])
        if isinstance(answer, int) and not isinstance(answer, bool):
            return choices[answer][1]
        for title, value in choices:
            if answer == title or answer == value:
                return value
        raise AssertionError(f"{answer!r} is not one of {choices!r}")


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------


class RawStream(io.BytesIO):
    """Stand-in for urllib3's raw response stream."""

    decode_content = False


class FakeResponse:
    def __init__(self, status_code: int = 200, body: Any = None, content: bytes | None = None):
        self.status_code = status_code
        self._body = body
        if content is None:
            content = body.encode() if isinstance(body, str) else json.dumps(body).encode()
        self.content = content
        self.raw = RawStream(content)

    def json(self) -> Any:
        if isinstance(self._body, str):
            return json.loads(self._body)
        return self._body

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error", response=None)

    def __enter__(self) -> "FakeResponse":
        return self

    def __exit__(self, *args) -> None:
        self.raw.close()


class FakeSession:
    """Serves canned responses by URL and records every request."""

    def __init__(self, routes: dict[str, Any] | None = None):
        self.routes = dict(routes or {})
        self.calls: list[tuple[str, dict[str, Any]]] = []

    def get(self, url: str, **kwargs: Any) -> FakeResponse:
        self.calls.append((url, kwargs))
        route = self.routes.get(url)
        if route is None:
            return FakeResponse(404, {"error": "Not found"})
        if isinstance(route, Exception):
            raise route
        if isinstance(route, FakeResponse):
            return route
        if isinstance(route, bytes):
            return FakeResponse(200, content=route)
        return FakeResponse(200, route)

    def urls(self) -> list[str]:
        return [url for url, _ in self.calls]


def make_tarball(files: dict[str, Any], prefix: str = "package") -> bytes:
    """Build a gzip tarball the way the registry serves packages.

    Values are file contents (str or bytes), ``None`` for a directory, or
    ``("symlink", target)`` for a symbolic link.
    """
    buffer = io.BytesIO()
    with tarfile.open(fileobj=buffer, mode="w:gz") as tar:
        for name, value in files.items():
            info = tarfile.TarInfo(f"{prefix}/{name}")
            if value is None:
                info.type = tarfile.DIRTYPE
                info.mode = 0o755
                tar.addfile(info)
            elif isinstance(value, tuple):
                info.type = tarfile.SYMTYPE
                info.linkname = value[1]
                tar.addfile(info)
            else:
                data = value.encode() if isinstance(value, str) else value
                info.size = len(data)
                info.mode = 0o644
                tar.addfile(info, io.BytesIO(data))
    return buffer.getvalue()


def package_detail(name: str, version: str, tarball: str) -> dict[str, Any]:
    return {"name": name, "version": version, "dist": {"tarball": tarball}}


def search_result(*packages: tuple[str, str]) -> dict[str, Any]:
    return {
        "objects": [{"package": {"name": name, "version": version}} for name, version in packages],
        "total": len(packages),
    }


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def config(tmp_path: Path) -> Config:
    """Config pointing at the fake registry and a private scratch dir."""
    cfg = Config()
    cfg.registry.url = REGISTRY
    cfg.scaffold.scratch_dir = str(tmp_path / "scratch")
    return cfg


@pytest.fixture
def write_tree():
    """Write a {relative_path: content} mapping under a directory."""

    def _write(root: Path, files: dict[str, Any]) -> Path:
        root.mkdir(parents=True, exist_ok=True)
        for name, value in files.items():
            path = root / name
            if value is None:
                path.mkdir(parents=True, exist_ok=True)
                continue
            path.parent.mkdir(parents=True, exist_ok=True)
            if isinstance(value, bytes):
                path.write_bytes(value)
            else:
                path.write_text(value)
        return root

    return _write
