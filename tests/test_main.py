from pathlib import Path

import pytest

import main


def test_parse_args_defaults() -> None:
    args = main.parse_args([])

    assert args.config == Path("config.yaml")
    assert args.demo is False
    assert args.port is None
    assert args.log_level == "INFO"


def test_main_runs_bridge_with_cli_options(monkeypatch) -> None:
    calls = []
    monkeypatch.setattr("flask_app.run", lambda *a, **kw: calls.append((a, kw)))

    main.main(["--config", "bridge.yaml", "--demo", "--port", "8581"])

    assert calls == [
        ((Path("bridge.yaml"),), {"host": "0.0.0.0", "port": 8581, "demo": True}),
    ]


def test_version_flag(capsys) -> None:
    with pytest.raises(SystemExit):
        main.parse_args(["--version"])

    assert "SHT3x Bridge" in capsys.readouterr().out
