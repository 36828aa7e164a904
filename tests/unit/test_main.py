"""Unit tests for the command line entry point."""

import logging
import pytest
from pathlib import Path
from unittest.mock import patch

from capdesk.config import CapdeskConfig
from capdesk.main import build_parser, main, setup_logging


def test_parser_requires_a_mode():
    with pytest.raises(SystemExit):
        build_parser().parse_args([])


def test_parser_auto_mode():
    args = build_parser().parse_args(["--auto", "--duration", "2.5", "--config", "x.yaml"])
    assert args.auto
    assert args.duration == 2.5
    assert args.config == "x.yaml"


def test_parser_modes_are_exclusive():
    with pytest.raises(SystemExit):
        build_parser().parse_args(["--auto", "--devices"])


def test_setup_logging_writes_log_file(config_file):
    config = CapdeskConfig(config_file)
    root_logger = logging.getLogger()
    saved_handlers, saved_level = root_logger.handlers[:], root_logger.level
    try:
        setup_logging(config, "DEBUG")
        logging.getLogger("capdesk.test").info("hello log")
        for handler in root_logger.handlers:
            handler.flush()

        log_path = Path(config.get('logging.file_path'))
        assert log_path.exists()
        assert "hello log" in log_path.read_text()
    finally:
        for handler in root_logger.handlers:
            handler.close()
        root_logger.handlers[:] = saved_handlers
        root_logger.setLevel(saved_level)


def test_main_exits_on_error(temp_data_dir):
    missing = str(Path(temp_data_dir) / "missing.yaml")
    with patch("sys.argv", ["capdesk", "--status", "--config", missing]):
        with pytest.raises(SystemExit) as exc_info:
            main()
    assert exc_info.value.code == 1
