from pathlib import Path

import pytest
import typer

import rehearsal_cli
from rehearsal_cli import load_state, remember, save_state


def test_load_state_missing_file_returns_empty(tmp_path: Path) -> None:
    p = tmp_path / ".state.json"
    assert load_state(p) == {}


def test_save_and_load_state_roundtrip(tmp_path: Path) -> None:
    p = tmp_path / ".state.json"
    payload = {"rehearsal_id": "r1", "conversation_id": "c1"}
    save_state(payload, p)
    assert load_state(p) == payload


def test_load_state_invalid_json_returns_empty(tmp_path: Path) -> None:
    p = tmp_path / ".state.json"
    p.write_text("not-json")
    assert load_state(p) == {}


def test_remember_keeps_other_keys(tmp_path: Path) -> None:
    p = tmp_path / ".state.json"
    save_state({"rehearsal_id": "r1"}, p)
    remember("script_id", "s1", p)
    assert load_state(p) == {"rehearsal_id": "r1", "script_id": "s1"}


def test_resolve_prefers_explicit_value(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    p = tmp_path / ".state.json"
    save_state({"rehearsal_id": "saved"}, p)
    monkeypatch.setattr(rehearsal_cli, "load_state", lambda path=p: load_state(path))
    assert rehearsal_cli._resolve("rehearsal_id", "explicit") == "explicit"
    assert rehearsal_cli._resolve("rehearsal_id", None) == "saved"
    with pytest.raises(typer.BadParameter):
        rehearsal_cli._resolve("conversation_id", None)
