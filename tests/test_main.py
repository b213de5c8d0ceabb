from __future__ import annotations

from workshopdesk.main import main


def test_no_command_prints_help(capsys):
    assert main([]) == 1
    assert "usage" in capsys.readouterr().out


def test_missing_config_exits_with_config_error(tmp_path, capsys):
    assert main(["--config", str(tmp_path / "absent.toml"), "init-db"]) == 2
    assert "[CONFIG ERROR]" in capsys.readouterr().err
