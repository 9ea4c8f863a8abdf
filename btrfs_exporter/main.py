"""Main application entry point for the btrfs Prometheus exporter."""

import argparse
import asyncio
import logging
import os
import signal
import sys
from typing import List, Optional

import yaml
from pydantic import ValidationError

from .config.loader import ConfigLoader
from .config.models import ExporterConfig
from .services.http_server import create_app, start_server
from .services.publisher import MetricSchema
from .services.scrape_gate import ScrapeGate
from .workflow import CollectionWorkflow
from .utils.logger import resolve_log_level, setup_logger


class ExporterApp:
    """
    Main exporter application.

    Wires the metric schema, collection workflow, scrape gate and HTTP
    listener together and runs until a shutdown signal arrives.
    """

    def __init__(self, config: ExporterConfig, logger: logging.Logger = None):
        """
        Initialize exporter application.

        Args:
            config: Validated exporter configuration
            logger: Optional logger instance
        """
        self.config = config
        self.logger = logger or setup_logger("main", config.log_level)

        self.schema = MetricSchema()
        self.workflow = CollectionWorkflow(config, self.schema, self.logger)
        self.gate = ScrapeGate(self.workflow, self.logger)
        self.app = create_app(self.gate, config.server, self.logger)
        self.stop_event: Optional[asyncio.Event] = None

    def _signal_handler(self, signum):
        """
        Handle shutdown signals by setting the stop event.

        Args:
            signum: Signal number
        """
        signal_name = signal.Signals(signum).name
        self.logger.info(f"Received {signal_name}, shutting down")
        if self.stop_event is not None:
            self.stop_event.set()

    def _install_signal_handlers(self) -> None:
        loop = asyncio.get_running_loop()
        for signum in (signal.SIGINT, signal.SIGTERM):
            loop.add_signal_handler(signum, self._signal_handler, signum)

    async def serve(self, stop_event: Optional[asyncio.Event] = None) -> None:
        """
        Serve scrapes until the stop event is set.

        Args:
            stop_event: Cancellation token; a new one is created if omitted

        Raises:
            OSError: If the metrics listener cannot bind
        """
        self.stop_event = stop_event or asyncio.Event()
        server = self.config.server

        self.logger.info(f"Starting btrfs prometheus exporter on port {server.port}")
        runner = await start_server(self.app, server)
        self.logger.info(
            f"Listening on [{server.listen_address}]:{server.port}{server.metrics_path}"
        )

        try:
            await self.stop_event.wait()
        finally:
            await runner.cleanup()
            self.logger.info(f"Exporter stopped after {self.gate.cycles} scrape(s)")

    async def run(self) -> None:
        """Install signal handlers and serve until interrupted."""
        self.stop_event = asyncio.Event()
        self._install_signal_handlers()
        await self.serve(self.stop_event)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='Prometheus exporter for btrfs device error counters',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Export stats for two filesystems on the default port (9899)
  btrfs-exporter /,/home

  # Custom port, more logging
  btrfs-exporter /data --port 9900 -v

  # Settings from a YAML file
  btrfs-exporter --config /etc/btrfs-exporter/config.yaml
        """
    )

    parser.add_argument(
        'mountpoints',
        nargs='?',
        help='Comma-delimited list of btrfs mountpoints'
    )

    parser.add_argument(
        '-p', '--port',
        type=int,
        help='Port to serve metrics on (default: 9899)'
    )

    parser.add_argument(
        '--listen-address',
        help='Address to bind the metrics listener to (default: ::)'
    )

    parser.add_argument(
        '--timeout',
        type=float,
        help='Seconds to wait for each btrfs invocation (default: 30)'
    )

    parser.add_argument(
        '--no-sudo',
        dest='use_sudo',
        action='store_const',
        const=False,
        help='Run btrfs directly instead of through sudo'
    )

    parser.add_argument(
        '--config',
        help='Path to YAML configuration file'
    )

    parser.add_argument(
        '--log-level',
        default=os.getenv('LOG_LEVEL'),
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
        help='Logging level (default: INFO or LOG_LEVEL env var)'
    )

    parser.add_argument(
        '-v', '--verbose',
        action='count',
        default=0,
        help='More verbose logging (repeatable)'
    )

    parser.add_argument(
        '-q', '--quiet',
        action='count',
        default=0,
        help='Less verbose logging (repeatable)'
    )

    return parser


def load_config(args: argparse.Namespace) -> ExporterConfig:
    """
    Build the exporter configuration from parsed arguments.

    Raises:
        FileNotFoundError, yaml.YAMLError, ValueError, ValidationError
    """
    config = ConfigLoader.from_args(
        mountpoints=args.mountpoints,
        port=args.port,
        listen_address=args.listen_address,
        timeout=args.timeout,
        use_sudo=args.use_sudo,
        log_level=args.log_level,
        config_path=args.config
    )
    if args.verbose or args.quiet:
        level = resolve_log_level(config.log_level, args.verbose, args.quiet)
        config = config.model_copy(update={"log_level": level})
    return config


def main(argv: Optional[List[str]] = None):
    """
    CLI entry point.

    Parses command-line arguments and runs the exporter until SIGINT/SIGTERM.
    """
    args = build_parser().parse_args(argv)

    try:
        config = load_config(args)
    except FileNotFoundError as e:
        setup_logger("main").error(str(e))
        sys.exit(1)
    except (yaml.YAMLError, ValueError, ValidationError) as e:
        setup_logger("main").error(f"Invalid configuration: {e}")
        sys.exit(1)

    logger = setup_logger("main", config.log_level)

    try:
        app = ExporterApp(config, logger)
        asyncio.run(app.run())
    except OSError as e:
        logger.error(f"Unable to start metrics listener: {e}", exc_info=True)
        sys.exit(1)
    except Exception as e:
        logger.error(f"Exporter failed: {e}", exc_info=True)
        sys.exit(1)

    sys.exit(0)


if __name__ == '__main__':
    main()
