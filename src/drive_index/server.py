"""Long-running HTTP server front end and command-line entry point."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from flask import Flask, Response

from drive_index.config import DEFAULT_LISTEN, AppConfig, dump_config, load_config_file
from drive_index.web.listing import DriveBrowser, drive_browser_from_config

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "config.yaml"


def create_app(browser: DriveBrowser) -> Flask:
    """Create a Flask app that serves every path through ``browser``."""
    app = Flask(__name__)

    @app.get("/", defaults={"path": ""})
    @app.get("/<path:path>")
    def browse(path: str) -> Response:
        result = browser.browse(path)
        return Response(result.body, status=result.status_code, headers=result.headers)

    return app


def parse_listen(listen: str) -> tuple[str, int]:
    """Split a ``host:port`` listen address; an empty host means all interfaces.

    Raises:
        ValueError: If the port is missing or not a number.
    """
    host, sep, port = listen.rpartition(":")
    if not sep or not port.isdigit():
        raise ValueError(f"invalid listen address: {listen!r}")
    return host or "0.0.0.0", int(port)


def write_default_config(path: str | Path) -> None:
    """Write a config file with empty credentials and the default listen address."""
    config = AppConfig(
        tenant_id="",
        application_id="",
        client_secret="",
        drive_id="",
        listen=DEFAULT_LISTEN,
    )
    Path(path).write_text(dump_config(config), encoding="utf-8")
    logger.info("[write_default_config] wrote config; path:%s", path)


def main(argv: list[str] | None = None) -> int:
    """Run the server, or write a default config with the ``new`` command."""
    parser = argparse.ArgumentParser(prog="drive-index", description=__doc__)
    parser.add_argument("--conf", default=DEFAULT_CONFIG_PATH, help="config file")
    parser.add_argument("command", nargs="?", choices=["new"], help="write a default config")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )

    if args.command == "new":
        try:
            write_default_config(args.conf)
        except OSError:
            logger.error("[main] could not write config; path:%s", args.conf, exc_info=True)
            return 1
        return 0

    try:
        config = load_config_file(args.conf)
        host, port = parse_listen(config.listen)
        browser = drive_browser_from_config(config)
    except Exception:
        logger.error("[main] startup failed; conf:%s", args.conf, exc_info=True)
        return 1

    logger.info("[main] serving drive; drive_id:%s;host:%s;port:%d", config.drive_id, host, port)
    create_app(browser).run(host=host, port=port)
    logger.info("[main] bye")
    return 0


if __name__ == "__main__":
    sys.exit(main())
