"""
Configuration Manager module for the memtrack host memory monitor.
"""
import copy
from typing import Any, Optional, Dict

from memtrack.utils import get_logger, load_json

logger = get_logger(__name__)

DEFAULT_CONFIG: Dict[str, Any] = {
    "server": {
        "host": "0.0.0.0",
        "port": 8080,
        "backlog": 5,
        "read_buffer_size": 8192,
        "read_timeout_sec": 10.0,
        "push_interval_sec": 1.0,
    },
    "static": {
        "root": ".",
        "index_file": "index.html",
    },
    "sampler": {
        "max_processes": 1024,
        "min_working_set_bytes": None,
    },
    "serializer": {
        "include_pid": True,
        "units": "bytes",
    },
    "console": {
        "refresh_interval_sec": 1.0,
    },
    "logging": {
        "console_level": "INFO",
        "file_level": "DEBUG",
        "file_path": None,
        "max_bytes": 10 * 1024 * 1024,
        "backup_count": 5,
    },
}


def _deep_merge(base: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    merged = copy.deepcopy(base)
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


class ConfigManager:
    """
    Loads and manages monitor configuration.

    Values from an optional JSON file are merged over :data:`DEFAULT_CONFIG`
    and read back with dot-separated key paths such as ``server.port``.
    """

    def __init__(self, config_path: Optional[str] = None):
        """
        Initializes the ConfigManager, loading the configuration file if one is given.

        :param config_path: The path to the configuration JSON file
        :type config_path: Optional[str]
        :raises: FileNotFoundError if the configuration file path is provided but does not exist
        :raises: ValueError if the configuration file is invalid JSON or values are invalid
        """
        self._config_path = config_path
        self._config_data: Dict[str, Any] = copy.deepcopy(DEFAULT_CONFIG)

        if self._config_path is None:
            logger.debug("ConfigManager initialized with built-in defaults.")
        else:
            self._load_config()
            logger.info(f"Configuration loaded successfully from: {self._config_path}")
        self._validate_config()

    def _load_config(self):
        """
        Loads the configuration file and merges it over the defaults.

        :raises: FileNotFoundError if the file doesn't exist
        :raises: ValueError if there are JSON parsing errors
        """
        try:
            file_data = load_json(self._config_path)
        except FileNotFoundError:
            logger.critical(f"Configuration file not found: {self._config_path}")
            raise
        except ValueError as e:
            logger.critical(f"Error loading config file {self._config_path}: {e}")
            raise

        if not isinstance(file_data, dict):
            msg = "Configuration file content is not a valid JSON object."
            logger.critical(msg)
            raise ValueError(msg)

        self._config_data = _deep_merge(DEFAULT_CONFIG, file_data)

    def _validate_config(self):
        """
        Validates value types and ranges.

        :raises: ValueError if any value is invalid
        """
        errors = []

        port = self.get('server.port')
        if not isinstance(port, int) or isinstance(port, bool) or not 0 <= port <= 65535:
            errors.append(f"'server.port' must be an integer between 0 and 65535, got {port!r}")

        if not isinstance(self.get('server.host'), str):
            errors.append("'server.host' must be a string")

        for key in ('server.backlog', 'server.read_buffer_size', 'sampler.max_processes', 'logging.backup_count'):
            value = self.get(key)
            if not isinstance(value, int) or isinstance(value, bool) or value <= 0:
                errors.append(f"'{key}' must be a positive integer, got {value!r}")

        for key in ('server.push_interval_sec', 'console.refresh_interval_sec'):
            value = self.get(key)
            if not isinstance(value, (int, float)) or isinstance(value, bool) or value <= 0:
                errors.append(f"'{key}' must be a positive number, got {value!r}")

        read_timeout = self.get('server.read_timeout_sec')
        if read_timeout is not None and (not isinstance(read_timeout, (int, float)) or isinstance(read_timeout, bool) or read_timeout <= 0):
            errors.append(f"'server.read_timeout_sec' must be a positive number or null, got {read_timeout!r}")

        threshold = self.get('sampler.min_working_set_bytes')
        if threshold is not None and (not isinstance(threshold, int) or isinstance(threshold, bool) or threshold < 0):
            errors.append(f"'sampler.min_working_set_bytes' must be a non-negative integer or null, got {threshold!r}")

        units = self.get('serializer.units')
        if units not in ('bytes', 'gb'):
            errors.append(f"'serializer.units' must be 'bytes' or 'gb', got {units!r}")

        if errors:
            msg = "Invalid configuration: " + "; ".join(errors)
            logger.critical(msg)
            raise ValueError(msg)

        logger.debug("Configuration validation passed.")

    def get(self, key_path: str, default: Any = None) -> Any:
        """
        Retrieves a configuration value using a dot-separated key path.

        :param key_path: The dot-separated path to the configuration key
        :type key_path: str
        :param default: The default value to return if the key is not found
        :type default: Any
        :return: The configuration value or the default value
        :rtype: Any
        """
        value = self._config_data
        for key in key_path.split('.'):
            if isinstance(value, dict) and key in value:
                value = value[key]
            else:
                logger.debug(f"Configuration key not found: '{key_path}'. Returning default: {default}")
                return default
        return value

    def apply_overrides(self, overrides: Dict[str, Any]):
        """
        Sets values from dot-separated key paths, skipping None, then re-validates.
        Nothing is applied if the result is invalid.

        :param overrides: Mapping of key path to value, e.g. ``{'server.port': 9000}``
        :type overrides: Dict[str, Any]
        :raises: ValueError if the resulting configuration is invalid
        """
        previous = self._config_data
        updated = copy.deepcopy(previous)
        for key_path, value in overrides.items():
            if value is None:
                continue
            keys = key_path.split('.')
            target = updated
            for key in keys[:-1]:
                target = target.setdefault(key, {})
            target[keys[-1]] = value
            logger.debug(f"Configuration override: {key_path}={value!r}")

        self._config_data = updated
        try:
            self._validate_config()
        except ValueError:
            self._config_data = previous
            raise

    @property
    def all_config(self) -> Dict[str, Any]:
        """
        Returns a copy of the entire configuration dictionary.

        :return: Copy of configuration dictionary
        :rtype: Dict[str, Any]
        """
        return copy.deepcopy(self._config_data)
