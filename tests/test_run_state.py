from __future__ import annotations

import json

from registry_bench.services.run_state import BenchmarkRunState, StateStore


def test_save_writes_json_and_load_restores_it(tmp_path):
    store = StateStore(tmp_path / "logs" / "state.json")
    state = BenchmarkRunState("idx", 2000, 1000, 500, current_round=2, total_rows=1000)
    state.completed.create = True
    state.completed.fill = True
    store.save(state)

    raw = json.loads(store.path.read_text(encoding="utf-8"))
    assert raw["table"] == "idx"
    assert raw["currentRound"] == 2
    assert raw["completed"] == {
        "create": True,
        "fill": True,
        "layout": False,
        "read": False,
        "queries": False,
    }
    assert store.load() == state
    assert list(store.path.parent.glob("*.tmp")) == []


def test_corrupt_or_missing_file_is_treated_as_absent(tmp_path):
    store = StateStore(tmp_path / "state.json")
    assert store.load() is None
    store.path.write_text("{not json", encoding="utf-8")
    assert store.load() is None
    store.path.write_text(json.dumps({"table": "plain"}), encoding="utf-8")
    assert store.load() is None


def test_state_without_layout_flag_loads_with_layout_pending(tmp_path):
    store = StateStore(tmp_path / "state.json")
    store.path.write_text(
        json.dumps(
            {
                "table": "plain",
                "recordMax": 10,
                "batchSize": 5,
                "fillBatch": 5,
                "currentRound": 1,
                "totalRows": 5,
                "completed": {"create": True, "fill": True, "read": False, "queries": False},
            }
        ),
        encoding="utf-8",
    )
    state = store.load()
    assert state.completed.fill is True
    assert state.completed.layout is False


def test_load_or_init_restarts_on_parameter_mismatch(tmp_path):
    store = StateStore(tmp_path / "state.json")
    saved = BenchmarkRunState("plain", 2000, 1000, 500, current_round=2, total_rows=1000)
    store.save(saved)

    resumed_state, resumed = store.load_or_init("plain", 2000, 1000, 500)
    assert resumed is True
    assert resumed_state.current_round == 2

    fresh, resumed = store.load_or_init("plain", 2000, 999, 500)
    assert resumed is False
    assert fresh.current_round == 1
    assert fresh.total_rows == 0
    assert fresh.completed.create is False

    fresh, resumed = store.load_or_init("part", 2000, 1000, 500)
    assert resumed is False


def test_reset_round_keeps_create():
    state = BenchmarkRunState("plain", 10, 5, 5)
    for name in ("create", "fill", "layout", "read", "queries"):
        setattr(state.completed, name, True)
    state.completed.reset_round()
    assert state.completed.create is True
    assert not any(
        (state.completed.fill, state.completed.layout, state.completed.read, state.completed.queries)
    )
