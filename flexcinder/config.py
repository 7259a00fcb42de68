"""
Flexvolume driver settings
Supports loading from:
1. INI config file (/etc/flexcinder/driver.conf)
2. Environment variables (override config file)
3. Default values (fallback)
"""

import os
import socket
from configparser import ConfigParser, Error as ConfigParserError
from typing import Any, Dict, Optional

from flexcinder.exceptions import ConfigurationException
from flexcinder.utils.logger import get_logger

LOG = get_logger(__name__)


class DriverSettings:
    """Driver settings manager"""

    CONFIG_FILE = '/etc/flexcinder/driver.conf'
    ENV_PREFIX = 'FLEXCINDER_'

    # Default values
    DEFAULT_LOG_LEVEL = 'INFO'
    DEFAULT_LOG_FILE = '/var/log/flexcinder/driver.log'
    DEFAULT_CINDER_CONFIG = '/etc/kubernetes/cinder.conf'
    DEFAULT_METADATA_FILE_NAME = 'flexvolume-meta.json'
    DEFAULT_REQUEST_TIMEOUT = 60

    def __init__(self, log_level: str = DEFAULT_LOG_LEVEL,
                 log_file: Optional[str] = DEFAULT_LOG_FILE,
                 default_cinder_config: str = DEFAULT_CINDER_CONFIG,
                 metadata_file_name: str = DEFAULT_METADATA_FILE_NAME,
                 request_timeout: int = DEFAULT_REQUEST_TIMEOUT,
                 node_name: Optional[str] = None):
        self.log_level = log_level
        self.log_file = log_file
        self.default_cinder_config = default_cinder_config
        self.metadata_file_name = metadata_file_name
        self.request_timeout = request_timeout
        self.node_name = node_name or socket.gethostname()

    @classmethod
    def load(cls, config_file: Optional[str] = None) -> 'DriverSettings':
        """
        Load settings from file and environment variables.

        Priority: env var > config file > default.

        Args:
            config_file: Path to config file (optional)

        Raises:
            ConfigurationException: If the file or a value is invalid
        """
        config_file = config_file or os.environ.get(f'{cls.ENV_PREFIX}CONFIG', cls.CONFIG_FILE)
        config_data = cls._load_ini_file(config_file)

        def value(key: str, default: Any) -> Any:
            return os.environ.get(f'{cls.ENV_PREFIX}{key.upper()}', config_data.get(key, default))

        timeout = value('request_timeout', cls.DEFAULT_REQUEST_TIMEOUT)
        try:
            timeout = int(timeout)
        except (TypeError, ValueError):
            raise ConfigurationException(f"request_timeout must be an integer, got {timeout!r}")
        if timeout <= 0:
            raise ConfigurationException(f"request_timeout must be positive, got {timeout}")

        metadata_file_name = value('metadata_file_name', cls.DEFAULT_METADATA_FILE_NAME)
        if not metadata_file_name or os.sep in metadata_file_name:
            raise ConfigurationException(
                f"metadata_file_name must be a plain file name, got {metadata_file_name!r}"
            )

        return cls(
            log_level=value('log_level', cls.DEFAULT_LOG_LEVEL),
            log_file=value('log_file', cls.DEFAULT_LOG_FILE) or None,
            default_cinder_config=value('default_cinder_config', cls.DEFAULT_CINDER_CONFIG),
            metadata_file_name=metadata_file_name,
            request_timeout=timeout,
            node_name=value('node_name', None),
        )

    @classmethod
    def _load_ini_file(cls, config_file: str) -> Dict[str, Any]:
        """
        Load configuration from INI file.

        Expected format:
        [driver]
        log_level = DEBUG
        log_file = /var/log/flexcinder/driver.log
        default_cinder_config = /etc/kubernetes/cinder.conf
        """
        config_data = {}

        if not os.path.exists(config_file):
            LOG.debug(f"Config file not found: {config_file}, using defaults")
            return config_data

        parser = ConfigParser(interpolation=None)
        try:
            parser.read(config_file)

            # [driver] first, then [DEFAULT]
            for section in ['driver', 'DEFAULT']:
                if parser.has_section(section) or section == 'DEFAULT':
                    for key, val in parser.items(section):
                        if key not in config_data:
                            config_data[key] = val
        except ConfigParserError as e:
            raise ConfigurationException(f"Failed to parse config file {config_file}: {e}")

        LOG.debug(f"Loaded {len(config_data)} config parameters from {config_file}")
        return config_data

    def to_dict(self) -> Dict[str, Any]:
        return {
            'log_level': self.log_level,
            'log_file': self.log_file,
            'default_cinder_config': self.default_cinder_config,
            'metadata_file_name': self.metadata_file_name,
            'request_timeout': self.request_timeout,
            'node_name': self.node_name,
        }
