from pathlib import Path

from typer.testing import CliRunner

import arena_proxy.__main__ as main


def test_logging_configured_before_bootstrap(monkeypatch):
    calls = []
    monkeypatch.setattr(
        main.logging, "basicConfig", lambda **kwargs: calls.append(("logging", kwargs["level"]))
    )
    monkeypatch.setattr(main, "bootstrap", lambda cfg: calls.append(("bootstrap", cfg.port)))
    monkeypatch.setattr(main, "create_app", lambda: "app")
    monkeypatch.setattr(
        main.uvicorn, "run", lambda app, **kwargs: calls.append(("serve", app, kwargs["port"]))
    )

    config = Path(__file__).resolve().parent / "configs" / "permissive.yml"
    result = CliRunner().invoke(
        main.cli, ["--config", str(config), "--port", "9001", "--log-level", "debug"]
    )
    assert result.exit_code == 0, result.output
    assert calls == [("logging", "DEBUG"), ("bootstrap", 9001), ("serve", "app", 9001)]
