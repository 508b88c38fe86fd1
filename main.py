# main.py

"""Entry point for precios_cr (TUI, headless CLI or HTTP API)."""

import argparse
import asyncio
import logging
import sys

from src.config.logging_config import setup_logging
from src.config.settings import Settings

logger = logging.getLogger("precios_cr.main")


def _build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the CLI."""
    valid_ids = ", ".join(str(s["id"]) for s in Settings.AVAILABLE_STORES)

    parser = argparse.ArgumentParser(
        prog="precios_cr",
        description="Comparador de precios para tiendas de Costa Rica.",
        epilog=f"Available stores: all, {valid_ids}",
    )
    parser.add_argument(
        "query",
        nargs="?",
        default=None,
        help="Search query. Omit to launch the interactive TUI.",
    )
    parser.add_argument(
        "-s",
        "--store",
        default="all",
        help="Store id to search, or 'all' (default: all).",
    )
    parser.add_argument(
        "--sequential",
        action="store_true",
        default=False,
        help="Query stores one at a time instead of concurrently.",
    )
    parser.add_argument(
        "-f",
        "--format",
        choices=["json", "table"],
        default="json",
        dest="output_format",
        help="Output format (default: json).",
    )
    parser.add_argument(
        "-x",
        "--export",
        default=None,
        dest="export_path",
        help="Write the results to this .xlsx file.",
    )
    parser.add_argument(
        "-b",
        "--backend",
        choices=["mock", "ai"],
        default=None,
        help="Generator backend (default: PRECIOS_BACKEND or mock).",
    )
    parser.add_argument(
        "--serve",
        action="store_true",
        default=False,
        help="Run the HTTP API server.",
    )
    parser.add_argument("--host", default=None, help="API bind host.")
    parser.add_argument(
        "--port", type=int, default=None, help="API bind port."
    )
    return parser


def _run_tui(backend: str | None) -> None:
    """Launch the interactive Textual TUI."""
    from src.ui.app import PreciosApp

    try:
        app = PreciosApp(backend=backend)
        app.run()
    except Exception:
        logger.critical("Fatal error during TUI run", exc_info=True)
        raise
    finally:
        logger.info("precios_cr TUI shutting down")


def _run_cli(args: argparse.Namespace) -> None:
    """Run headless CLI search and exit."""
    from src.cli.runner import cli_search

    exit_code = asyncio.run(
        cli_search(
            query=args.query,
            store=args.store,
            sequential=args.sequential,
            output_format=args.output_format,
            export_path=args.export_path,
            backend=args.backend,
        )
    )
    sys.exit(exit_code)


def _run_server(args: argparse.Namespace) -> None:
    """Serve the HTTP API."""
    from src.cli.runner import run_server

    if args.backend is not None:
        Settings.GENERATOR_BACKEND = args.backend
    sys.exit(run_server(args.host, args.port))


def main() -> None:
    """Route to the API server, TUI (no args) or headless CLI."""
    log_file = setup_logging()
    logger.info("precios_cr starting, log file: %s", log_file)

    parser = _build_parser()
    args = parser.parse_args()

    if args.serve:
        _run_server(args)
    elif args.query is None:
        _run_tui(args.backend)
    else:
        _run_cli(args)


if __name__ == "__main__":
    main()
