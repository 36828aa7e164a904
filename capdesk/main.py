"""Main application entry point for capdesk."""

import sys
import json
import asyncio
import argparse
import logging
from pathlib import Path

from rich.console import Console

from .auto_mode import run_auto_mode
from .backend import HttpRecorderBackend
from .config import CapdeskConfig

logger = logging.getLogger(__name__)


def setup_logging(config: CapdeskConfig, level: str = "INFO") -> None:
    """Set up logging configuration from YAML config."""
    default_log_path = str(Path(config.get_data_directory()) / "logs" / "capdesk.log")
    log_file_path = config.get('logging.file_path', default_log_path)
    console_output = config.get('logging.console_output', True)

    # Create logs directory if it doesn't exist
    log_dir = Path(log_file_path).parent
    log_dir.mkdir(parents=True, exist_ok=True)

    handlers = []

    # File handler - always write to file
    file_handler = logging.FileHandler(log_file_path)
    file_handler.setLevel(logging.DEBUG)
    file_formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s'
    )
    file_handler.setFormatter(file_formatter)
    handlers.append(file_handler)

    # Console handler - only if enabled in config
    if console_output:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(logging.WARNING)  # Only show warnings and above on console
        console_formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
        console_handler.setFormatter(console_formatter)
        handlers.append(console_handler)

    # Configure root logger
    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(getattr(logging, level.upper()))
    for handler in handlers:
        root_logger.addHandler(handler)

    logger.info("="*50)
    logger.info("capdesk starting up")
    logger.info(f"Log file: {log_file_path}")
    logger.info(f"Log level set to: {level}")
    logger.info("="*50)


async def show_devices(config: CapdeskConfig, console: Console) -> None:
    """Print the backend's capture device listing."""
    backend = HttpRecorderBackend(config.get_backend_url(), request_timeout=config.get_request_timeout())
    devices = await backend.list_devices()
    if isinstance(devices, (dict, list)):
        console.print_json(json.dumps(devices))
    else:
        console.print(str(devices), markup=False)


async def show_status(config: CapdeskConfig, console: Console) -> None:
    """Print one backend status blob."""
    backend = HttpRecorderBackend(config.get_backend_url(), request_timeout=config.get_request_timeout())
    status = await backend.status()
    console.print_json(json.dumps(status))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="capdesk - desktop client for an external audio recording backend"
    )

    parser.add_argument(
        "--config",
        type=str,
        help="Path to configuration YAML file (default: looks for capdesk.yaml)"
    )

    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Set logging level (default: logging.level from config, else INFO)"
    )

    mode = parser.add_mutually_exclusive_group(required=True)
    mode.add_argument(
        "--auto",
        action="store_true",
        help="Start a background recording, record for --duration seconds, then stop and exit"
    )
    mode.add_argument(
        "--devices",
        action="store_true",
        help="List capture devices known to the backend"
    )
    mode.add_argument(
        "--status",
        action="store_true",
        help="Query the backend recording status once"
    )

    parser.add_argument(
        "--duration",
        type=float,
        default=10,
        help="Duration in seconds for auto mode recording (default: 10)"
    )

    parser.add_argument(
        "--version",
        action="version",
        version="capdesk v0.1.0"
    )
    return parser


def main() -> None:
    """Main entry point for capdesk."""
    args = build_parser().parse_args()
    console = Console()

    try:
        config = CapdeskConfig(args.config)
        setup_logging(config, args.log_level or config.get('logging.level', 'INFO'))

        if args.auto:
            asyncio.run(run_auto_mode(config, args.duration, console=console))
        elif args.devices:
            asyncio.run(show_devices(config, console))
        else:
            asyncio.run(show_status(config, console))
    except KeyboardInterrupt:
        print("\n👋 Goodbye!")
    except Exception as e:
        print(f"❌ Error: {e}")
        logging.error(f"Application error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
