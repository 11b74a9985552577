# -*- coding: utf-8 -*-
# configs/__init__.py
# YAML readers for runtime settings and account credentials

from .config_reader import ConfigReader, get_venue_settings
from .account_reader import AccountReader

__all__ = [
    'ConfigReader',
    'AccountReader',
    'get_venue_settings',
]
