from __future__ import annotations

from shiftdesk import cli


def test_main_serves_app_on_configured_address(monkeypatch):
    calls = []
    monkeypatch.setattr(cli.uvicorn, "run", lambda app, **kwargs: calls.append((app, kwargs)))

    cli.main()

    assert calls == [("shiftdesk.main:app", {"host": "127.0.0.1", "port": 8000, "log_level": "info"})]
