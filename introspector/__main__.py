import argparse
import logging
import sys

from .core import create_snapshot_holder
from .core.config import ConfigError, load_settings
from .core.diagrams import DiagramService


def setup_logging(log_level: str = "INFO") -> None:
    """Configure application logging."""
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[
            logging.StreamHandler(sys.stderr)
        ]
    )
    # Reduce noise from third-party libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("uvicorn").setLevel(logging.INFO)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)


logger = logging.getLogger(__name__)

DUMP_CHOICES = ("cases", "usecases", "all")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="introspector",
        description="Introspector - PlantUML diagrams from source annotations",
    )
    parser.add_argument(
        "sources",
        nargs="*",
        help="Files or directories to scan (overrides configured sources)"
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to introspector.yaml"
    )
    parser.add_argument(
        "--root",
        type=str,
        default=None,
        help="Directory Python module names are computed from"
    )
    parser.add_argument(
        "--host",
        type=str,
        default=None,
        help="Bind address for the API server"
    )
    parser.add_argument(
        "--port",
        type=int,
        default=None,
        help="Port for the API server"
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level"
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Shortcut for --log-level DEBUG"
    )
    parser.add_argument(
        "--dump",
        choices=DUMP_CHOICES,
        default=None,
        help="Print cases or diagrams to stdout instead of serving the API"
    )
    return parser


def dump(service: DiagramService, what: str) -> str:
    """Text printed by --dump."""
    if what == "cases":
        lines = []
        for case in service.list_cases():
            lines.append(case.name)
            if case.text:
                lines.extend(f"    {line}" for line in case.text.splitlines())
        return "\n".join(lines)
    if what == "usecases":
        return service.render_use_cases()
    return service.render_all()


def main(argv=None) -> int:
    """Main entry point for Introspector."""
    args = build_parser().parse_args(argv)

    overrides = {
        "sources": args.sources or None,
        "root": args.root,
        "host": args.host,
        "port": args.port,
        "log_level": "DEBUG" if args.debug else args.log_level,
    }
    try:
        settings = load_settings(args.config, overrides)
    except ConfigError as e:
        print(f"introspector: {e}", file=sys.stderr)
        return 2

    setup_logging(settings.log_level)
    logger.info("Starting Introspector - sources: %s", settings.sources)

    holder = create_snapshot_holder(settings.sources, settings.root)

    if args.dump:
        service = DiagramService(holder, package=settings.package)
        print(dump(service, args.dump))
        return 0

    # Build FastAPI app
    from .api.app import create_app
    app = create_app(holder, settings)

    # Launch with uvicorn
    import uvicorn

    logger.info(f"Starting FastAPI server on http://{settings.host}:{settings.port}")
    uvicorn.run(
        app,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
