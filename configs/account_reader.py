#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Account credential reader.
Reads account.yaml and turns an account entry into the key / secret
accessors the private drivers take.
"""

import os
import yaml
from pathlib import Path
from typing import Callable, Dict, Any, List, Tuple

from ccex.core.kernel.errors import AuthFailure

ACCOUNT_FILE = 'account.yaml'


class AccountReader:
    """Reader of accounts.<venue>.<account>.{api_key, api_secret}."""

    def __init__(self, config_dir: str = None, filename: str = ACCOUNT_FILE):
        """
        Args:
            config_dir: directory holding account.yaml, defaults to this package
            filename: account file name
        """
        if config_dir is None:
            config_dir = os.path.dirname(os.path.abspath(__file__))

        self.config_dir = Path(config_dir)
        self.account_file = self.config_dir / filename
        self._config = None

    def _load_config(self) -> Dict[str, Any]:
        if self._config is not None:
            return self._config

        if not self.account_file.exists():
            raise FileNotFoundError(f"account file not found: {self.account_file}")

        try:
            with open(self.account_file, 'r', encoding='utf-8') as f:
                self._config = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"invalid YAML in {self.account_file}: {e}") from e
        return self._config

    def get_all_accounts(self) -> Dict[str, Dict[str, Dict[str, Any]]]:
        """
        Returns:
            dict: {venue: {account: {api_key, api_secret}}}
        """
        return self._load_config().get('accounts') or {}

    def get_venue_accounts(self, venue: str) -> Dict[str, Dict[str, Any]]:
        return self.get_all_accounts().get(venue.lower()) or {}

    def get_account(self, venue: str, account: str = 'main') -> Dict[str, Any]:
        """Credentials of one account; empty dict when it is not configured."""
        return self.get_venue_accounts(venue).get(account) or {}

    def list_venues(self) -> List[str]:
        return list(self.get_all_accounts().keys())

    def list_accounts(self, venue: str) -> List[str]:
        return list(self.get_venue_accounts(venue).keys())

    def is_account_valid(self, venue: str, account: str = 'main') -> bool:
        creds = self.get_account(venue, account)
        return bool(str(creds.get('api_key') or '').strip() and str(creds.get('api_secret') or '').strip())

    def key_functions(self, venue: str, account: str = 'main') -> Tuple[Callable[[], str], Callable[[], str]]:
        """
        (key_fn, secret_fn) accessors for a private driver.

        The file is read when an accessor is called, not here; a missing or
        empty credential raises AuthFailure at that point.
        """
        def accessor(name):
            def read():
                value = self.get_account(venue, account).get(name)
                if not value:
                    raise AuthFailure(f"{name} is not configured for {venue}/{account}",
                                      venue=venue.lower(), operation='credentials')
                return str(value)
            return read

        return accessor('api_key'), accessor('api_secret')

    def reload(self):
        self._config = None
        self._load_config()
