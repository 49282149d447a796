"""
Tests for the reload-check command line.
"""
import json
import os
import logging

import pytest
import yaml

from reload_engine import cli

DOC = {
    "agent_id": "pawn_9",
    "catalog": {
        "ammo_kinds": ["556_fmj"],
        "ammo_sets": {"556_nato": [{"label": "FMJ", "adders": [{"kind": "556_fmj", "count": 1}]}]},
    },
    "equipped": {
        "name": "M16",
        "ammo_user": {
            "magazine_size": 30,
            "cur_mag_count": 10,
            "ammo_set": "556_nato",
            "current_link": 0,
            "selected_link": 0,
            "loaded_kinds": ["556_fmj"],
        },
    },
    "inventory": {"ammo": [{"kind": "556_fmj", "count": 40}]},
}


@pytest.fixture(autouse=True)
def restore_root_logging():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers = handlers
    root.setLevel(level)


def write(tmp_path, doc, name="pawn.yaml"):
    path = tmp_path / name
    path.write_text(yaml.safe_dump(doc))
    return str(path)


def test_reload_needed(tmp_path, capsys):
    assert cli.main([write(tmp_path, DOC)]) == cli.EXIT_RELOAD
    out = capsys.readouterr().out
    assert "[reload] pawn_9: M16 with FMJ" in out
    assert "top_off" in out


def test_no_reload(tmp_path, capsys):
    doc = json.loads(json.dumps(DOC))
    doc["inventory"]["ammo"][0]["count"] = 5
    assert cli.main([write(tmp_path, doc)]) == cli.EXIT_NO_RELOAD
    assert "[no reload] pawn_9: no_decision" in capsys.readouterr().out


def test_json_output(tmp_path, capsys):
    assert cli.main([write(tmp_path, DOC), "--json"]) == cli.EXIT_RELOAD
    data = json.loads(capsys.readouterr().out)
    assert data["needed"] is True
    assert data["priority"] == 9.1


def test_preset(tmp_path, capsys):
    cli.main([write(tmp_path, DOC), "--json", "--preset", "eager"])
    assert json.loads(capsys.readouterr().out)["priority"] == 9.15


def test_config_file(tmp_path, capsys):
    config = tmp_path / "reload.json"
    config.write_text(json.dumps({"reload_priority": 6.0}))
    cli.main([write(tmp_path, DOC), "--json", "--config", str(config)])
    assert json.loads(capsys.readouterr().out)["priority"] == 6.0


def test_config_and_preset_are_exclusive(tmp_path, capsys):
    config = tmp_path / "reload.json"
    config.write_text(json.dumps({"reload_priority": 6.0}))
    with pytest.raises(SystemExit) as exc:
        cli.main([write(tmp_path, DOC), "--config", str(config), "--preset", "eager"])
    assert exc.value.code == 2
    assert "not allowed with argument" in capsys.readouterr().err


def test_missing_config(tmp_path, capsys):
    code = cli.main([write(tmp_path, DOC), "--config", str(tmp_path / "none.json")])
    assert code == cli.EXIT_INVALID
    assert "cannot load config" in capsys.readouterr().err


def test_invalid_snapshot(tmp_path, capsys):
    doc = dict(DOC, agent_id="")
    assert cli.main([write(tmp_path, doc)]) == cli.EXIT_INVALID
    assert "agent_id" in capsys.readouterr().err


def test_log_dir(tmp_path):
    log_dir = tmp_path / "logs"
    cli.main([write(tmp_path, DOC), "--log-dir", str(log_dir)])
    assert (log_dir / "reload.json.log").exists()


def test_bundled_sample(capsys):
    sample = os.path.join(os.path.dirname(__file__), "..", "samples", "rifleman.yaml")
    assert cli.main([sample]) == cli.EXIT_RELOAD
    assert "M16 with FMJ (restock" in capsys.readouterr().out
