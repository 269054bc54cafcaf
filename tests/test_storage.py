"""Tests for writing and recovering state backups."""

import pytest

from lunchbot.engine import LunchBotEngine
from lunchbot.models import StateDecodeError
from lunchbot.storage import backup_state, recover_state


def no_members(channel):
    return []


def test_backup_and_recover(engine, clock, tmp_path):
    engine.apply("lb group add team alice,bob", no_members)
    engine.apply("lb propose cafe 12:00 to team", no_members)
    engine.apply("lb add 7", no_members)

    path = tmp_path / "nested" / "state.json"
    backup_state(engine, path)

    assert path.read_text(encoding="utf-8") == engine.serialize()
    assert not (tmp_path / "nested" / "state.json.tmp").exists()

    restored = LunchBotEngine("", clock=clock)
    recover_state(restored, path)
    assert restored.state == engine.state


def test_backup_overwrites_previous_file(engine, tmp_path):
    path = tmp_path / "state.json"
    path.write_text("old contents", encoding="utf-8")
    backup_state(engine, path)
    assert path.read_text(encoding="utf-8") == engine.serialize()


def test_recover_missing_file(engine, tmp_path):
    with pytest.raises(FileNotFoundError):
        recover_state(engine, tmp_path / "missing.json")


def test_recover_invalid_file_keeps_state(engine, tmp_path):
    engine.apply("lb add 3", no_members)
    before = engine.state

    path = tmp_path / "state.json"
    path.write_text("{broken", encoding="utf-8")
    with pytest.raises(StateDecodeError):
        recover_state(engine, path)
    assert engine.state == before


def test_recover_non_utf8_file_keeps_state(engine, tmp_path):
    engine.apply("lb add 3", no_members)
    before = engine.state

    path = tmp_path / "state.json"
    path.write_bytes(b"\xff\xfe{")
    with pytest.raises(StateDecodeError):
        recover_state(engine, path)
    assert engine.state == before
