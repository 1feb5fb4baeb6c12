from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import replace
from pathlib import Path
from typing import Optional, Sequence

from .config import StorageSettings, get_settings
from .logging import configure_logging
from .services import ServiceContext

logger = logging.getLogger(__name__)


DATA_FILE_HELP = "Override the calendar JSON file location."


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Heap Scheduler command line interface.")
    parser.add_argument("--data-file", type=Path, help=DATA_FILE_HELP)

    # Also accepted after the subcommand; SUPPRESS keeps a top-level value from being reset.
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--data-file", type=Path, default=argparse.SUPPRESS, help=DATA_FILE_HELP)

    subparsers = parser.add_subparsers(dest="command", required=True)

    serve_parser = subparsers.add_parser("serve", parents=[common], help="Start the REST API server.")
    serve_parser.add_argument("--host")
    serve_parser.add_argument("--port", type=int)

    export_parser = subparsers.add_parser("export", parents=[common], help="Write the calendar document as JSON.")
    export_parser.add_argument("--output", type=Path, help="Destination file (defaults to stdout).")

    import_parser = subparsers.add_parser(
        "import", parents=[common], help="Replace the calendar document from a JSON file."
    )
    import_parser.add_argument("path", type=Path)

    return parser


def _build_context(data_file: Optional[Path]) -> ServiceContext:
    settings = get_settings()
    if data_file is not None:
        settings = replace(settings, storage=StorageSettings(data_file=data_file))
    return ServiceContext(settings=settings)


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    context = _build_context(args.data_file)
    configure_logging(context.settings.logging)
    logger.info("Heap Scheduler CLI starting: %s (data file %s)", args.command, context.store.path)

    if args.command == "serve":
        from .services.http import run_local_server

        run_local_server(host=args.host, port=args.port, context=context)
    elif args.command == "export":
        payload = context.repository.export_document()
        if args.output:
            args.output.write_text(payload + "\n", encoding="utf-8")
            logger.info("Exported calendar to %s", args.output)
        else:
            sys.stdout.write(payload + "\n")
    elif args.command == "import":
        if not context.repository.import_document(args.path.read_bytes()):
            logger.error("Import from %s failed", args.path)
            return 1
        logger.info("Imported calendar from %s", args.path)
    else:  # pragma: no cover - argparse enforces choices
        parser.print_help()
    return 0


if __name__ == "__main__":
    sys.exit(main())
