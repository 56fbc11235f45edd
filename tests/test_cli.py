import pytest
from fastapi import FastAPI

from pma.cli.commands import serve
from pma.cli.runner import build_parser, main


def _db_args(tmp_path):
    return ["--database-url", f"sqlite:///{tmp_path / 'cli.db'}"]


def test_parser_defaults():
    parser = build_parser()

    served = parser.parse_args(["serve"])
    cleanup = parser.parse_args(["audit-cleanup"])

    assert (served.host, served.port, served.reload) == ("127.0.0.1", 8000, False)
    assert cleanup.older_than_days == 90
    assert callable(served.handler)


def test_parser_requires_a_command():
    with pytest.raises(SystemExit):
        build_parser().parse_args([])


def test_init_db_creates_tables(tmp_path, capsys):
    main(_db_args(tmp_path) + ["init-db"])

    assert "✅ Tables created (sqlite)" in capsys.readouterr().out
    assert (tmp_path / "cli.db").exists()


def test_audit_cleanup_clamps_retention(tmp_path, capsys):
    main(_db_args(tmp_path) + ["audit-cleanup", "--older-than-days", "0"])

    assert "Deleted 0 change group(s) older than 90 days" in capsys.readouterr().out


def test_serve_builds_app_and_runs_uvicorn(tmp_path, monkeypatch, capsys):
    calls = {}

    def fake_run(app, **kwargs):
        calls.update(app=app, **kwargs)

    monkeypatch.setattr(serve.uvicorn, "run", fake_run)

    main(_db_args(tmp_path) + ["--log-level", "warning", "serve", "--port", "9001"])

    assert isinstance(calls["app"], FastAPI)
    assert calls["port"] == 9001
    assert calls["log_level"] == "warning"
    assert "http://127.0.0.1:9001/docs" in capsys.readouterr().out


def test_log_format_choice(monkeypatch):
    monkeypatch.setenv("PMA_LOG_FORMAT", "json")

    assert build_parser().parse_args(["init-db"]).log_format == "json"
    with pytest.raises(SystemExit):
        build_parser().parse_args(["--log-format", "xml", "init-db"])
