"""
Poker Coach CLI - Command-line interface for the service.

Usage:
    pokercoach serve [--host HOST] [--port PORT]   Run the HTTP/WebSocket server
    pokercoach check-config                        Validate the environment
"""

import argparse
import logging
import sys

from .config import Settings
from .errors import ConfigurationError


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Poker Coach - photo-driven Texas Hold'em coaching",
        prog="pokercoach",
    )
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Serve command
    serve_parser = subparsers.add_parser("serve", help="Run the server")
    serve_parser.add_argument("--host", default="0.0.0.0", help="Bind address")
    serve_parser.add_argument("--port", type=int, help="Port (defaults to PORT)")

    # Config check
    subparsers.add_parser("check-config", help="Validate configuration")

    args = parser.parse_args(argv)

    if args.command == "serve":
        cmd_serve(args)
    elif args.command == "check-config":
        cmd_check_config(args)
    else:
        parser.print_help()
        sys.exit(1)


def load_settings_or_exit() -> Settings:
    try:
        return Settings.from_env()
    except ConfigurationError as e:
        print(f"Error: {e}")
        sys.exit(1)


def configure_logging(level: str):
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def cmd_serve(args):
    """Run the server with uvicorn."""
    import uvicorn

    from .api.app import create_app

    settings = load_settings_or_exit()
    configure_logging(settings.log_level)

    port = args.port or settings.port
    app = create_app(settings=settings)
    logging.getLogger(__name__).info(
        "Starting %s on %s:%s (public url %s)",
        settings.package_name, args.host, port, settings.public_url,
    )
    uvicorn.run(app, host=args.host, port=port, log_level=settings.log_level.lower())


def cmd_check_config(args):
    """Validate configuration and print the non-secret values."""
    settings = load_settings_or_exit()

    print("Configuration OK")
    print(f"  Package:        {settings.package_name}")
    print(f"  Port:           {settings.port}")
    print(f"  Public URL:     {settings.public_url}")
    print(f"  Analysis model: {settings.analysis_model}")
    print(f"  Analysis URL:   {settings.analysis_url}")
    print(f"  Classifier:     {settings.roboflow_model_url}")
    print(f"  Chime:          {settings.chime_url or '(disabled)'}")
    print(
        "  Timeouts (s):   "
        f"capture={settings.capture_timeout} detect={settings.detect_timeout} "
        f"analyze={settings.analyze_timeout} speak={settings.speak_timeout}"
    )


if __name__ == "__main__":
    main()
