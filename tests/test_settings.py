from __future__ import annotations

import pytest
from pydantic import ValidationError

from op_export.config.settings import load_settings


def test_defaults() -> None:
    s = load_settings()
    assert s.op_path == "op"
    assert s.workers == 1
    assert s.timeout_seconds == 120.0
    assert s.id_field == "id"
    assert s.sort_by_id is False


def test_env_overrides(monkeypatch) -> None:
    monkeypatch.setenv("OP_PATH", "/opt/1password/op")
    monkeypatch.setenv("OP_EXPORT_WORKERS", "2")
    monkeypatch.setenv("OP_EXPORT_TIMEOUT_SECONDS", "30.5")
    monkeypatch.setenv("OP_EXPORT_ID_FIELD", "uuid")
    monkeypatch.setenv("OP_EXPORT_SORT_BY_ID", "yes")

    s = load_settings()

    assert s.op_path == "/opt/1password/op"
    assert s.workers == 2
    assert s.timeout_seconds == 30.5
    assert s.id_field == "uuid"
    assert s.sort_by_id is True


def test_blank_values_fall_back_to_defaults(monkeypatch) -> None:
    monkeypatch.setenv("OP_PATH", "")
    monkeypatch.setenv("OP_EXPORT_WORKERS", " ")
    s = load_settings()
    assert s.op_path == "op"
    assert s.workers == 1


def test_rejects_zero_workers(monkeypatch) -> None:
    monkeypatch.setenv("OP_EXPORT_WORKERS", "0")
    with pytest.raises(ValidationError):
        load_settings()
