from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path

import pytest

from hotdeal_agent.models import Watermark
from hotdeal_agent.repositories.state import JsonStateStore, StateError


def test_missing_file_defaults_to_zero(tmp_path: Path) -> None:
    assert JsonStateStore(tmp_path / "state.json").load().last_seen_id == 0


def test_save_writes_expected_schema(tmp_path: Path) -> None:
    path = tmp_path / "nested" / "state.json"
    store = JsonStateStore(path)
    checked = datetime(2026, 10, 19, 9, 30, tzinfo=timezone.utc)

    store.save(Watermark(last_seen_id=105, last_checked_at=checked))

    data = json.loads(path.read_text(encoding="utf-8"))
    assert data["lastPostNumber"] == 105
    assert datetime.fromisoformat(data["lastCheckTime"].replace("Z", "+00:00")) == checked
    loaded = store.load()
    assert loaded.last_seen_id == 105
    assert loaded.last_checked_at == checked


def test_reads_state_written_by_other_tools(tmp_path: Path) -> None:
    path = tmp_path / "state.json"
    path.write_text('{"lastPostNumber": 9361540085, "lastCheckTime": "2026-10-18T23:00:00.000Z"}')
    assert JsonStateStore(path).load().last_seen_id == 9361540085


@pytest.mark.parametrize("content", ["{not json", "[]", '{"lastPostNumber": "abc"}'])
def test_corrupt_file_degrades_to_default(tmp_path: Path, content: str) -> None:
    path = tmp_path / "state.json"
    path.write_text(content)
    assert JsonStateStore(path).load().last_seen_id == 0


def test_unwritable_path_raises_state_error(tmp_path: Path) -> None:
    blocker = tmp_path / "blocker"
    blocker.write_text("")
    with pytest.raises(StateError):
        JsonStateStore(blocker / "state.json").save(Watermark(last_seen_id=1))
