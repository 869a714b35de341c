"""
Global configuration management for groundtruth.

Implements Singleton pattern to ensure single source of truth for server settings.
Configuration hierarchy (highest to lowest priority):
1. Environment variables (PORT, SESSION_SECRET, GROUNDTRUTH_DB_NAME, ...)
2. Server config file (configs/server.yaml)
3. Hardcoded defaults

Example:
    >>> from groundtruth.config import get_global_config
    >>> config = get_global_config()
    >>> port = config.get_int('server.port')
    >>> db_name = config.get('database.name')
"""

import os
import yaml
import logging
from pathlib import Path
from typing import Any, Dict, Optional


logger = logging.getLogger(__name__)

# Environment variable -> dotted config key
ENV_OVERRIDES = {
    'PORT': 'server.port',
    'HOST': 'server.host',
    'SESSION_SECRET': 'secrets.session',
    'GROUNDTRUTH_DB_NAME': 'database.name',
    'GROUNDTRUTH_LOG_LEVEL': 'logging.level',
    'GROUNDTRUTH_LOG_DIR': 'logging.log_dir',
}


class GlobalConfig:
    """
    Singleton class for server configuration.

    Loads configuration from configs/server.yaml, applies environment
    overrides and provides dotted-key access to settings across all modules.
    """

    _instance: Optional['GlobalConfig'] = None
    _config: Dict[str, Any] = {}
    _loaded: bool = False

    def __new__(cls) -> 'GlobalConfig':
        """Singleton pattern: ensure only one instance exists."""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self):
        """Initialize configuration (only loads once)."""
        if not self._loaded:
            self._load_config()
            self._loaded = True

    def _load_config(self) -> None:
        """Load defaults, then the YAML file, then environment overrides."""
        current_file = Path(__file__).resolve()
        project_root = current_file.parent.parent  # groundtruth/config.py -> repo root

        config_path = Path(os.getenv('GROUNDTRUTH_CONFIG', project_root / 'configs' / 'server.yaml'))

        self._config = self._get_default_config()
        if config_path.exists():
            try:
                with open(config_path, 'r') as f:
                    self._deep_merge(self._config, yaml.safe_load(f) or {})
                logger.info(f"Loaded server config from: {config_path}")
            except (OSError, yaml.YAMLError) as e:
                logger.warning(f"Failed to load server config: {e}. Using defaults.")
        else:
            logger.warning(f"Server config not found at {config_path}. Using defaults.")

        self._apply_env_overrides()

    def _apply_env_overrides(self) -> None:
        for env_name, key in ENV_OVERRIDES.items():
            value = os.getenv(env_name)
            if value:
                self.set(key, value)

    def _get_default_config(self) -> Dict[str, Any]:
        """Return hardcoded default configuration."""
        return {
            'server': {
                'host': '0.0.0.0',
                'port': 9000,
            },
            'secrets': {
                'session': 'ibmwatson-nlc-groundtruth-ui-secret',
            },
            'services': {
                'classifier_name': 'ibmwatson-nlc-classifier',
                'cloudant_name': 'cloudantNoSQLDB',
            },
            'database': {
                'name': 'nlcstore',
            },
            'http': {
                'timeout_sec': 30,
            },
            'content': {
                'max_upload_mb': 10,
            },
            'paths': {
                'views': str(Path(__file__).resolve().parent / 'api' / 'views'),
            },
            'logging': {
                'level': 'INFO',
                'log_dir': 'logs',
                'log_to_console': True,
                'backup_count': 2,
            }
        }

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get configuration value by key (supports nested keys with dots).

        Args:
            key: Configuration key (e.g., 'database.name')
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        keys = key.split('.')
        value = self._config

        for k in keys:
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default

        return value

    def get_path(self, key: str, default: str = '') -> Path:
        """Get configuration value as Path object."""
        return Path(self.get(key, default))

    def get_int(self, key: str, default: int = 0) -> int:
        """Get configuration value as integer."""
        value = self.get(key, default)
        try:
            return int(value)
        except (ValueError, TypeError):
            return default

    def get_float(self, key: str, default: float = 0.0) -> float:
        """Get configuration value as float."""
        value = self.get(key, default)
        try:
            return float(value)
        except (ValueError, TypeError):
            return default

    def get_bool(self, key: str, default: bool = False) -> bool:
        """Get configuration value as boolean."""
        value = self.get(key, default)
        if isinstance(value, bool):
            return value
        if isinstance(value, str):
            return value.lower() in ('true', 'yes', '1', 'on')
        return bool(value)

    def set(self, key: str, value: Any) -> None:
        """
        Set configuration value (runtime only, not persisted).

        Example:
            >>> config = get_global_config()
            >>> config.set('database.name', 'nlcstore-test')
        """
        keys = key.split('.')
        config = self._config

        for k in keys[:-1]:
            if k not in config:
                config[k] = {}
            config = config[k]

        config[keys[-1]] = value

    def _deep_merge(self, base: Dict, updates: Dict) -> None:
        """Recursively merge updates into base dictionary."""
        for key, value in updates.items():
            if key in base and isinstance(base[key], dict) and isinstance(value, dict):
                self._deep_merge(base[key], value)
            else:
                base[key] = value


_global_config_instance: Optional[GlobalConfig] = None


def get_global_config() -> GlobalConfig:
    """Get the global configuration instance (Singleton)."""
    global _global_config_instance
    if _global_config_instance is None:
        _global_config_instance = GlobalConfig()
    return _global_config_instance
