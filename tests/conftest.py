"""
Shared fixtures.

`FakeVault` implements the VaultClient protocol in memory. `op_tool` writes a
throwaway executable shell script that stands in for the real `op` binary so
OpClient can be exercised end to end without a 1Password account.
"""

from __future__ import annotations

import os
import stat
import threading
from pathlib import Path
from typing import Any, Callable

import pytest

from op_export.config import settings as settings_module
from op_export.services.op_errors import FetchError, ListError


class FakeVault:
    """
    ids: listing order. bodies: id -> detail; an id missing from bodies fails.
    """

    def __init__(self, ids: list[str], bodies: dict[str, Any], list_error: str | None = None):
        self.ids = ids
        self.bodies = bodies
        self.list_error = list_error
        self.fetched: list[str] = []
        self._lock = threading.Lock()

    def list_item_ids(self) -> list[str]:
        if self.list_error:
            raise ListError(self.list_error)
        return list(self.ids)

    def get_item(self, item_id: str) -> Any:
        with self._lock:
            self.fetched.append(item_id)
        if item_id not in self.bodies:
            raise FetchError(item_id, f"mock error for id {item_id}")
        return self.bodies[item_id]


@pytest.fixture()
def fake_vault() -> Callable[..., FakeVault]:
    return FakeVault


@pytest.fixture()
def op_tool(tmp_path: Path) -> Callable[[str], str]:
    """Returns a factory: script body -> path of an executable fake `op`."""
    counter = {"n": 0}

    def make(body: str) -> str:
        counter["n"] += 1
        path = tmp_path / f"fake-op-{counter['n']}"
        path.write_text("#!/bin/bash\n" + body + "\n", encoding="utf-8")
        path.chmod(path.stat().st_mode | stat.S_IXUSR)
        return str(path)

    return make


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in list(os.environ):
        if key == "OP_PATH" or key.startswith("OP_EXPORT_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.setattr(settings_module, "_settings", None)
