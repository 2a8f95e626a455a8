"""
Main entry point for the memtrack host memory monitor.
This script handles command-line arguments for serving snapshots over TCP,
watching memory in the terminal and printing a single snapshot.
"""
import argparse
import sys
from typing import List, Optional

from memtrack.communication import ConnectionServer, ServerStartupError, SnapshotSerializer, StaticFileDelivery
from memtrack.config import ConfigManager
from memtrack.monitoring import ResourceSampler, SamplerPolicy
from memtrack.ui import ui_console
from memtrack.utils.logger import APP_LOGGER_NAME, setup_logger, get_logger
from memtrack.version import __version__, __app_name__

logger = get_logger("memtrack.main")


def _configure_logging(config: ConfigManager):
    """Rebuilds the application logger from the loaded configuration."""
    setup_logger(
        name=APP_LOGGER_NAME,
        console_level_name=config.get('logging.console_level'),
        file_level_name=config.get('logging.file_level'),
        log_file_path=config.get('logging.file_path'),
        max_bytes=config.get('logging.max_bytes'),
        backup_count=config.get('logging.backup_count'),
        force=True
    )


def _build_policy(config: ConfigManager, top: bool) -> SamplerPolicy:
    if top:
        return SamplerPolicy.top_consumers()
    return SamplerPolicy(
        max_processes=config.get('sampler.max_processes'),
        min_working_set_bytes=config.get('sampler.min_working_set_bytes')
    )


def _load_config(args: argparse.Namespace) -> ConfigManager:
    """
    Loads configuration and applies command-line overrides.

    :raises: FileNotFoundError, ValueError on invalid configuration
    """
    config = ConfigManager(args.config)
    config.apply_overrides({
        'logging.console_level': args.log_level,
        'logging.file_path': args.log_file,
        'server.host': getattr(args, 'host', None),
        'server.port': getattr(args, 'port', None),
        'server.push_interval_sec': getattr(args, 'interval', None) if args.command == 'serve' else None,
        'console.refresh_interval_sec': getattr(args, 'interval', None) if args.command == 'watch' else None,
        'static.root': getattr(args, 'static_root', None),
        'serializer.units': getattr(args, 'units', None),
    })
    if getattr(args, 'no_pid', False):
        config.apply_overrides({'serializer.include_pid': False})
    return config


def _run_serve_command(args: argparse.Namespace, config: ConfigManager) -> int:
    """Handles the 'serve' CLI command."""
    server = ConnectionServer(
        host=config.get('server.host'),
        port=config.get('server.port'),
        sampler=ResourceSampler(_build_policy(config, args.top)),
        serializer=SnapshotSerializer(
            include_pid=config.get('serializer.include_pid'),
            units=config.get('serializer.units')
        ),
        static_files=StaticFileDelivery(
            root=config.get('static.root'),
            index_file=config.get('static.index_file')
        ),
        push_interval=config.get('server.push_interval_sec'),
        backlog=config.get('server.backlog'),
        read_buffer_size=config.get('server.read_buffer_size'),
        read_timeout=config.get('server.read_timeout_sec')
    )

    try:
        server.open()
    except ServerStartupError as e:
        ui_console.display_error(str(e))
        return 1

    host, port = server.server_address
    ui_console.display_success(f"Server running at http://{host}:{port}")
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        logger.info("Keyboard interrupt received (Ctrl+C). Stopping server...")
        return 130
    finally:
        server.stop()
        ui_console.display_info("Server stopped.")
    return 0


def _run_watch_command(args: argparse.Namespace, config: ConfigManager) -> int:
    """Handles the 'watch' CLI command."""
    sampler = ResourceSampler(_build_policy(config, not args.all))
    ui_console.run_console_monitor(
        sampler,
        interval=config.get('console.refresh_interval_sec'),
        iterations=args.iterations
    )
    return 0


def _run_snapshot_command(args: argparse.Namespace, config: ConfigManager) -> int:
    """Handles the 'snapshot' CLI command."""
    sampler = ResourceSampler(_build_policy(config, args.top))
    serializer = SnapshotSerializer(
        include_pid=config.get('serializer.include_pid'),
        units=config.get('serializer.units')
    )
    print(serializer.serialize(sampler.sample()))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog=__app_name__, description="Host memory monitor.")
    parser.add_argument('--version', action='version', version=f"%(prog)s {__version__}")
    parser.add_argument('--config', help='Path to a JSON configuration file.')
    parser.add_argument('--log-level', help='Console log level (DEBUG, INFO, WARNING, ERROR).')
    parser.add_argument('--log-file', help='Write logs to this file as well.')
    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    serve_parser = subparsers.add_parser('serve', help='Serve snapshots over TCP (default).')
    serve_parser.add_argument('--host', help='Address to bind.')
    serve_parser.add_argument('--port', type=int, help='Port to listen on.')
    serve_parser.add_argument('--static-root', help='Directory for static files.')
    serve_parser.add_argument('--interval', type=float, help='Seconds between pushed snapshots.')
    serve_parser.add_argument('--top', action='store_true', help='Only report the top memory consumers.')
    serve_parser.set_defaults(func=_run_serve_command)

    watch_parser = subparsers.add_parser('watch', help='Show a refreshing memory view in the terminal.')
    watch_parser.add_argument('--interval', type=float, help='Seconds between refreshes.')
    watch_parser.add_argument('--iterations', type=int, help='Exit after this many refreshes.')
    watch_parser.add_argument('--all', action='store_true', help='List every process, not only the top consumers.')
    watch_parser.set_defaults(func=_run_watch_command)

    snapshot_parser = subparsers.add_parser('snapshot', help='Print one snapshot as JSON.')
    snapshot_parser.add_argument('--top', action='store_true', help='Only report the top memory consumers.')
    snapshot_parser.add_argument('--units', choices=['bytes', 'gb'], help='Units for memory values.')
    snapshot_parser.add_argument('--no-pid', action='store_true', help='Omit process identifiers.')
    snapshot_parser.set_defaults(func=_run_snapshot_command)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main function to parse arguments and dispatch commands.

    :return: Process exit status
    :rtype: int
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.command is None:
        args = parser.parse_args(list(argv if argv is not None else sys.argv[1:]) + ['serve'])

    try:
        config = _load_config(args)
    except (FileNotFoundError, ValueError) as e:
        ui_console.display_error(f"Configuration error: {e}")
        return 1

    _configure_logging(config)
    logger.debug(f"Running command '{args.command}' with memtrack {__version__}")
    return args.func(args, config)


if __name__ == '__main__':
    sys.exit(main())
