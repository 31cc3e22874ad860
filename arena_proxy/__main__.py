"""Command line entry point: python -m arena_proxy --config config.toml"""

import logging
from typing import Optional

import typer
import uvicorn
from dotenv import load_dotenv

from .app import create_app
from .bootstrap import bootstrap
from .config import Config

cli = typer.Typer(add_completion=False)


@cli.command()
def run(
    config: str = typer.Option(
        "config.toml", "--config", "-c", help="Path to the configuration file"
    ),
    env_file: Optional[str] = typer.Option(
        ".env", "--env-file", help="Dotenv file to load before reading the configuration"
    ),
    host: Optional[str] = typer.Option(None, "--host", help="Override the bind address"),
    port: Optional[int] = typer.Option(None, "--port", "-p", help="Override the port"),
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Override the log level"),
) -> None:
    """Run the Arena Proxy server."""
    if env_file:
        load_dotenv(env_file)
    cfg = Config.load(config)
    overrides = {
        k: v
        for k, v in dict(host=host, port=port, log_level=log_level).items()
        if v is not None
    }
    if overrides:
        cfg = cfg.model_copy(update=overrides)
    logging.basicConfig(
        level=cfg.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    bootstrap(cfg)
    logging.info(f"Forwarding http://{cfg.host}:{cfg.port} -> {cfg.upstream_origin}")
    uvicorn.run(create_app(), host=cfg.host, port=cfg.port, log_level=cfg.log_level.lower())


if __name__ == "__main__":
    cli()
