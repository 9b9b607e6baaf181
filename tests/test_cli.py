import json

import pytest

from mining_agent.cli import main


def test_cli_dump_applies_init(tmp_path, capsys):
    path = tmp_path / "agent_conf.json"
    path.write_text(json.dumps({"multi_user_mode": True, "pools": [["a", 1800, "alice"]]}))

    assert main(["--config", str(path), "--dump"]) == 0

    out = json.loads(capsys.readouterr().out)
    assert out["multi_user_mode"] is True
    assert out["pools"] == [["a", 1800, ""]]
    assert out["disconnect_when_lost_asicboost"] is True


def test_cli_missing_file(tmp_path):
    assert main(["--config", str(tmp_path / "nope.json")]) == 1


def test_cli_bad_document(tmp_path):
    path = tmp_path / "agent_conf.json"
    path.write_text('{"pools": [["a", "1800"]]}')
    assert main(["--config", str(path)]) == 1


def test_cli_rejects_unknown_log_level(tmp_path):
    path = tmp_path / "agent_conf.json"
    path.write_text("{}")
    with pytest.raises(SystemExit) as exc:
        main(["--config", str(path), "--log-level", "basic_format"])
    assert exc.value.code == 2


def test_cli_log_level_is_case_insensitive(tmp_path):
    path = tmp_path / "agent_conf.json"
    path.write_text("{}")
    assert main(["--config", str(path), "--log-level", "debug"]) == 0
