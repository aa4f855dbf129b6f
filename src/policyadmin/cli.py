"""CLI main entry point."""

import logging

import click

from .config import Config
from .errors import PolicyAdminException
from .log import setup as setup_log
from .web import create_app

logger = logging.getLogger(__name__)


@click.group()
@click.option("--config", "-c", default="config.toml", help="Configuration file path")
@click.pass_context
def cli(ctx, config: str):
    """Policy administration - manage customers, plans and policies."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config


@cli.command(name="serve")
@click.option("--host", "-h", default=None, help="Override host from config")
@click.option("--port", "-p", default=None, type=int, help="Override port from config")
@click.option("--debug/--no-debug", default=None, help="Enable/disable debug mode")
@click.pass_context
def serve(ctx, host, port, debug):
    """Start the web UI."""
    config_path = ctx.obj["config_path"]

    try:
        cfg = Config.load(config_path)
        setup_log(cfg.log_file)
        logger.info(f"Loaded configuration (file: {config_path})")

        host = host or cfg.web.host
        port = port or cfg.web.port
        if debug is None:
            debug = cfg.web.debug

        if debug:
            logger.warning("Debug mode is enabled. This should NOT be used in production.")

        app = create_app(cfg)

        logger.info(f"Backend API: {cfg.api.base_url}")
        logger.info(f"Starting web server on {host}:{port}")

        # one controller serves the whole app, so requests are handled one at a time
        app.run(host=host, port=port, debug=debug, use_reloader=False, threaded=False)

    except PolicyAdminException as e:
        logger.error(f"Application error: {e}", exc_info=True)
        raise click.ClickException(str(e))


def main():
    cli(obj={})


if __name__ == "__main__":
    main()
