# -*- coding: utf-8 -*-
"""
Manifest MCP server that can run in two modes:
  1) MCP over stdio  ->  `manifest-mcp --manifest manifest.json --handlers app:handlers`
  2) HTTP (FastAPI)  ->  `manifest-mcp ... --mode http --host 0.0.0.0 --port 8000`

Startup failures exit with a distinct status and a message listing every problem:
  2  manifest unreadable or malformed
  3  manifest entries without handlers
  1  anything else (bad settings, handler import failure, server crash)
"""

import argparse
import logging
import signal
import sys
import traceback
from typing import List, Optional

from pydantic import ValidationError

from .config import Settings
from .errors import StartupError
from .handlers import load_handlers
from .logging_setup import setup_logging
from .plugin import ManifestPlugin

logger = logging.getLogger("manifest_mcp")


def _install_signal_handlers():
    def _handler(signum, _frame):
        name = signal.Signals(signum).name
        logger.info(f"Received {name}. Shutting down gracefully…")
        for h in logging.getLogger().handlers:
            h.flush()
        sys.exit(0)

    try:
        signal.signal(signal.SIGINT, _handler)
        signal.signal(signal.SIGTERM, _handler)
    except (ValueError, OSError) as e:
        # Not all environments allow installing signal handlers (threads, restricted runtimes).
        logger.debug(f"Signal handlers not installed: {e}")


def build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Serve a capability manifest over MCP (stdio or HTTP).")
    p.add_argument("--manifest", help="Path to the manifest JSON (env: MCP_MANIFEST_PATH).")
    p.add_argument("--handlers", help="Handler table as 'module:attr' or 'file.py:attr' (env: MCP_HANDLERS).")
    p.add_argument("--name", help="Server name reported to clients (env: MCP_SERVER_NAME).")
    p.add_argument("--version", dest="server_version", help="Server version (env: MCP_SERVER_VERSION).")
    p.add_argument("--mode", choices=["stdio", "http"], default=None,
                   help="Run as MCP over stdio (default) or expose an HTTP API (env: MCP_TRANSPORT).")
    p.add_argument("--host", help="HTTP host when --mode http (env: MCP_HOST).")
    p.add_argument("--port", type=int, help="HTTP port when --mode http (env: MCP_PORT).")
    p.add_argument("--log-level", help="DEBUG|INFO|WARNING|ERROR (env: MCP_LOG_LEVEL).")
    return p


def load_settings(argv: Optional[List[str]] = None) -> Settings:
    args = build_arg_parser().parse_args(argv)
    return Settings.from_env().merged(
        manifest_path=args.manifest,
        handlers=args.handlers,
        server_name=args.name,
        server_version=args.server_version,
        transport=args.mode,
        host=args.host,
        port=args.port,
        log_level=args.log_level,
    )


def build_plugin(settings: Settings) -> ManifestPlugin:
    if not settings.manifest_path:
        raise ValueError("No manifest given (use --manifest or MCP_MANIFEST_PATH).")
    if not settings.handlers:
        raise ValueError("No handler table given (use --handlers or MCP_HANDLERS).")
    handlers = load_handlers(settings.handlers)
    return ManifestPlugin(
        settings.manifest_path,
        handlers,
        name=settings.server_name,
        version=settings.server_version,
    )


def serve(plugin: ManifestPlugin, settings: Settings) -> None:
    if settings.transport == "stdio":
        plugin.start()
    else:
        import uvicorn

        from .http_app import build_http_app

        uvicorn.run(
            build_http_app(plugin),
            host=settings.host,
            port=settings.port,
            log_level=settings.log_level.lower(),
        )


def main(argv: Optional[List[str]] = None) -> int:
    try:
        settings = load_settings(argv)
    except ValidationError as e:
        print(f"Invalid settings:\n{e}", file=sys.stderr)
        return 1

    setup_logging(settings.log_level)
    logger.info(f"Starting {settings.server_name} in mode={settings.transport}")

    try:
        plugin = build_plugin(settings)
    except StartupError as e:
        logger.critical(f"[MCP Startup Error] {e}")
        return e.exit_code
    except Exception as e:
        # Handler modules run arbitrary code at import.
        logger.critical(f"[MCP Startup Error] {type(e).__name__}: {e}", exc_info=True)
        return 1

    _install_signal_handlers()
    try:
        serve(plugin, settings)
    except Exception as e:
        tb = "".join(traceback.format_exception(type(e), e, e.__traceback__))
        logger.critical(f"Fatal server error:\n{tb}")
        return 1
    return 0


def run_entry() -> None:
    sys.exit(main())


if __name__ == "__main__":
    run_entry()
