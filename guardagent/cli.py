"""Command-line entry point that starts the guard proxy."""

from __future__ import annotations

import argparse
import logging
import os
import threading
from datetime import date
from pathlib import Path

import yaml
from flask import send_from_directory

from .agent import create_app
from .config import load_config
from .logstore import GuardLog
from .rules import load_rules

log = logging.getLogger("guardagent")


def _parse_listen(listen: str) -> tuple[str, int]:
    host, sep, port = listen.rpartition(":")
    if not sep or not port.isdigit():
        raise ValueError(f"invalid listen address: {listen!r}")
    return host.strip("[]") or "0.0.0.0", int(port)


def main(argv=None) -> int:
    """Start the guard proxy; returns the process exit status."""
    parser = argparse.ArgumentParser(prog="guardagent")
    parser.add_argument("--config", default="config/config.yaml")
    parser.add_argument("--rules", default="config/rules.yaml")
    parser.add_argument("--log-dir", default="logs")
    parser.add_argument("--web-root", default="internal/web/templates")
    parser.add_argument("--web-port", type=int, default=8888)
    parser.add_argument("--no-web", action="store_true")
    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(message)s")

    try:
        config = load_config(args.config)
        rules = load_rules(args.rules)
        host, port = _parse_listen(config.listen)
    except (OSError, ValueError, yaml.YAMLError) as exc:
        log.error("startup failed: %s", exc)
        return 1

    log_store = GuardLog(Path(args.log_dir) / f"guard_log_{date.today():%Y%m%d}.json")
    log_store.load()
    app = create_app(config, rules, log_store)
    web_root = os.path.abspath(args.web_root)

    def page(filename: str = "index.html"):
        return send_from_directory(web_root, filename)

    app.add_url_rule("/", "web_page", page)
    app.add_url_rule("/<path:filename>", "web_page_path", page)
    log.info("guard agent on localhost%s, target: %s, rules: %d",
             config.listen, config.model_url, len(rules))

    if not args.no_web:
        log.info("log pages: http://127.0.0.1:%d/index.html", args.web_port)
        web = {"host": "0.0.0.0", "port": args.web_port, "threaded": True, "use_reloader": False}
        threading.Thread(target=app.run, kwargs=web, daemon=True).start()

    try:
        app.run(host=host, port=port, threaded=True, use_reloader=False)
    except OSError as exc:
        log.error("server failed to start: %s", exc)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())