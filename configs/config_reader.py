#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Runtime configuration reader.
Reads ccex.yaml and hands out per-venue driver settings.
"""

import copy
import os
import yaml
from pathlib import Path
from typing import Dict, Any, Optional
import logging

CONFIG_FILE = 'ccex.yaml'

# Values used when ccex.yaml leaves a key out. rate_cache_duration falls back
# to the driver class default.
BUILTIN_DEFAULTS = {
    'timeout': 10,
    'board_cache_duration': 3,
    'fanout_workers': 10,
}

# Settings a driver constructor accepts
DRIVER_OPTIONS = ('timeout', 'rate_cache_duration', 'board_cache_duration',
                  'fanout_workers', 'proxies', 'base_url')


class ConfigReader:
    """YAML configuration reader with a per-file cache."""

    def __init__(self, config_dir: str = None, filename: str = CONFIG_FILE):
        """
        Args:
            config_dir: directory holding the YAML files, defaults to this package
            filename: runtime configuration file name
        """
        if config_dir is None:
            config_dir = os.path.dirname(os.path.abspath(__file__))

        self.config_dir = Path(config_dir)
        self.filename = filename
        self._configs = {}
        self._logger = logging.getLogger('ccex.configs')

    def load_yaml(self, filename: str) -> Dict[str, Any]:
        """
        Load and cache one YAML file.

        Raises:
            FileNotFoundError: the file does not exist
            ValueError: the file is not valid YAML
        """
        file_path = self.config_dir / filename

        if not file_path.exists():
            raise FileNotFoundError(f"config file not found: {file_path}")

        try:
            with open(file_path, 'r', encoding='utf-8') as f:
                config = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            self._logger.error(f"invalid YAML in {filename}: {e}")
            raise ValueError(f"invalid YAML in {file_path}: {e}") from e

        self._configs[filename] = config
        self._logger.debug(f"loaded config file {filename}")
        return config

    def _config(self) -> Dict[str, Any]:
        if self.filename not in self._configs:
            self.load_yaml(self.filename)
        return self._configs[self.filename]

    def get_defaults(self) -> Dict[str, Any]:
        defaults = dict(BUILTIN_DEFAULTS)
        defaults.update(self._config().get('defaults') or {})
        return defaults

    def get_venue_settings(self, venue: str) -> Dict[str, Any]:
        """
        Driver options for one venue: defaults overlaid with venues.<venue>.

        Returns:
            dict: only keys a driver constructor accepts
        """
        merged = self.get_defaults()
        merged.update((self._config().get('venues') or {}).get(venue.lower()) or {})
        return {key: copy.deepcopy(value) for key, value in merged.items()
                if key in DRIVER_OPTIONS and value is not None}

    def get_logging(self) -> Dict[str, Any]:
        return dict(self._config().get('logging') or {})

    def get_config(self, key_path: str = None) -> Any:
        """
        Value at a dotted key path, e.g. 'defaults.timeout'; None when absent.
        """
        value = self._config()
        if key_path is None:
            return value
        try:
            for key in key_path.split('.'):
                value = value[key]
            return value
        except (KeyError, TypeError):
            self._logger.warning(f"config key not found: {key_path}")
            return None

    def reload_config(self):
        self._configs.pop(self.filename, None)
        self._config()


def get_venue_settings(venue: str, config_dir: Optional[str] = None) -> Dict[str, Any]:
    """Shortcut for ConfigReader(config_dir).get_venue_settings(venue)."""
    return ConfigReader(config_dir).get_venue_settings(venue)
