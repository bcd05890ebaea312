"""
config.py
=========
Logging setup and configuration loading for psnapi.

Configuration keys (``config.json``)
------------------------------------
::

    "npsso": "YOUR_PSN_NPSSO_TOKEN_HERE",
    "access_token": "",
    "refresh_token": "",
    "api_timeout_seconds": 10,
    "language": "en",
    "log_level": "WARNING"

Environment variables take precedence over config file values:
``PSN_NPSSO``, ``PSN_ACCESS_TOKEN``, ``PSN_REFRESH_TOKEN``, ``PSN_TIMEOUT``
and ``PSN_LOG_LEVEL``.
"""
import json
import logging
import os
from typing import Any, Dict

from .errors import ConfigError

DEFAULT_CONFIG: Dict[str, Any] = {
    'npsso':               '',
    'access_token':        '',
    'refresh_token':       '',
    'api_timeout_seconds': 10,
    'language':            'en',
    'log_level':           'WARNING',
}

_ENV_OVERRIDES = {
    'PSN_NPSSO':         'npsso',
    'PSN_ACCESS_TOKEN':  'access_token',
    'PSN_REFRESH_TOKEN': 'refresh_token',
    'PSN_TIMEOUT':       'api_timeout_seconds',
    'PSN_LOG_LEVEL':     'log_level',
}

_PLACEHOLDER_VALUES = {'DEMO_MODE', 'DEMO_TOKEN', 'YOUR_PSN_NPSSO_TOKEN_HERE'}


def setup_logging(level: str = 'WARNING') -> logging.Logger:
    """Configure the root psnapi logger.

    Args:
        level: Log level string (DEBUG, INFO, WARNING, ERROR, CRITICAL).
               Defaults to WARNING so normal use is quiet.

    Returns:
        Configured logger instance.
    """
    numeric = getattr(logging, str(level).upper(), logging.WARNING)
    logger = logging.getLogger('psnapi')
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter('[%(levelname)s] %(name)s: %(message)s'))
        logger.addHandler(handler)
    logger.setLevel(numeric)
    return logger


def is_placeholder_value(value: Any) -> bool:
    """Check if a value is a placeholder/demo sentinel that should not be used for real API calls."""
    if not value or not isinstance(value, str):
        return True
    return value.startswith('YOUR_') or value in _PLACEHOLDER_VALUES


def load_config(config_path: str = 'config.json') -> Dict[str, Any]:
    """Load configuration from a JSON file with environment variable support.

    A missing file is not an error: defaults plus environment overrides are
    returned. Placeholder credentials are blanked so callers can test them
    with a plain truthiness check.

    Raises:
        ConfigError: The file exists but is not valid JSON, or a value has the
            wrong type.
    """
    config = dict(DEFAULT_CONFIG)

    if os.path.exists(config_path):
        try:
            with open(config_path, 'r') as fh:
                loaded = json.load(fh)
        except (json.JSONDecodeError, IOError) as exc:
            raise ConfigError(f"Error parsing config file {config_path}: {exc}") from exc
        if not isinstance(loaded, dict):
            raise ConfigError(f"Config file {config_path} must contain a JSON object")
        config.update(loaded)

    for env_name, key in _ENV_OVERRIDES.items():
        if os.getenv(env_name):
            config[key] = os.getenv(env_name)

    for key in ('npsso', 'access_token', 'refresh_token'):
        if is_placeholder_value(config.get(key)):
            config[key] = ''

    try:
        config['api_timeout_seconds'] = int(config['api_timeout_seconds'])
    except (TypeError, ValueError) as exc:
        raise ConfigError(
            f"api_timeout_seconds must be an integer, got {config['api_timeout_seconds']!r}"
        ) from exc

    return config
