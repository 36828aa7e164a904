"""Simple YAML configuration loader for capdesk."""

import os
import yaml
from pathlib import Path
from typing import Dict, Any, List, Optional
import logging

from ..models.backend import StartOptions

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "capdesk.yaml"


def find_config_file(start_dir: Optional[str] = None) -> Path:
    """Look for capdesk.yaml in start_dir and its parents."""
    directory = Path(start_dir or os.getcwd()).absolute()
    for candidate_dir in [directory, *directory.parents]:
        candidate = candidate_dir / CONFIG_FILENAME
        if candidate.exists():
            return candidate
    raise FileNotFoundError(f"{CONFIG_FILENAME} not found in {directory} or its parents")


class CapdeskConfig:
    """capdesk configuration loader."""

    def __init__(self, config_path: Optional[str] = None):
        """Initialize configuration loader.

        Args:
            config_path: Path to YAML config file. If None, looks for
                        capdesk.yaml in current directory and parent directories.
        """
        self.config_file = Path(config_path) if config_path else find_config_file()

        if not self.config_file.exists():
            raise FileNotFoundError(f"Configuration file not found: {self.config_file}")

        logger.info(f"Loading configuration from: {self.config_file}")
        self.config = self._load_config()

    def _load_config(self) -> Dict[str, Any]:
        """Load and parse YAML configuration file."""
        try:
            with open(self.config_file, 'r', encoding='utf-8') as f:
                config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in configuration file: {e}") from e

        if not config:
            raise ValueError("Configuration file is empty")
        if not isinstance(config, dict):
            raise ValueError("Configuration file must contain a mapping")

        # Resolve relative paths
        self._resolve_paths(config)

        logger.info("Configuration loaded successfully")
        return config

    def _resolve_paths(self, config: Dict[str, Any]) -> None:
        """Resolve relative paths in configuration relative to config file location."""
        config_dir = self.config_file.parent

        # Resolve data directory
        if 'storage' in config and 'data_directory' in config['storage']:
            data_dir = config['storage']['data_directory']
            if not os.path.isabs(data_dir):
                config['storage']['data_directory'] = str(config_dir / data_dir)

        # Resolve log file path
        if 'logging' in config and 'file_path' in config['logging']:
            log_path = config['logging']['file_path']
            if not os.path.isabs(log_path):
                config['logging']['file_path'] = str(config_dir / log_path)

    def get(self, key_path: str, default: Any = None) -> Any:
        """Get configuration value using dot notation (e.g., 'backend.url').

        Args:
            key_path: Dot-separated key path
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        keys = key_path.split('.')
        value = self.config

        for key in keys:
            if isinstance(value, dict) and key in value:
                value = value[key]
            else:
                return default

        return value

    def set(self, key_path: str, value: Any) -> None:
        """Set configuration value using dot notation."""
        keys = key_path.split('.')
        config_dict = self.config

        # Navigate to the parent dictionary
        for key in keys[:-1]:
            if key not in config_dict:
                config_dict[key] = {}
            config_dict = config_dict[key]

        config_dict[keys[-1]] = value
        logger.debug(f"Configuration key '{key_path}' set to: {value}")

    def get_backend_url(self) -> str:
        """Get recorder backend URL - raises if not configured."""
        url = self.get('backend.url')
        if not url:
            raise ValueError(f"backend.url not configured in {self.config_file.name}")
        return str(url)

    def get_request_timeout(self) -> float:
        return float(self.get('backend.request_timeout_seconds', 10.0))

    def get_poll_interval(self) -> float:
        interval = float(self.get('recording.poll_interval_seconds', 3.0))
        if interval <= 0:
            raise ValueError(f"recording.poll_interval_seconds must be positive, got {interval}")
        return interval

    def get_ended_statuses(self) -> Optional[List[str]]:
        """Status values that mean the backend session is over, if overridden."""
        statuses = self.get('recording.ended_statuses')
        if statuses is None:
            return None
        return [str(s) for s in statuses]

    def get_start_options(self) -> StartOptions:
        """Default start options from the recording section."""
        return StartOptions(
            output_path_hint=self.get('recording.output_path'),
            background=bool(self.get('recording.background', True)),
            duration_hint=self.get('recording.duration'),
            mic=self.get('recording.mic'),
            system=self.get('recording.system'),
        )

    def get_data_directory(self) -> str:
        """Get data directory path."""
        data_dir = self.get('storage.data_directory', 'data')
        return str(Path(data_dir).absolute())
