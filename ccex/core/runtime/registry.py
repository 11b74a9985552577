# -*- coding: utf-8 -*-
# ccex/core/runtime/registry.py
# Venue registry and ClientManager.
#
# Callers never construct drivers directly: new_public_client /
# new_private_client resolve a venue name, ClientManager keeps one driver per
# (venue, account) and tracks its health.

import threading
import time
from enum import Enum
from typing import Any, Dict, Optional, Union

import requests

from ccex.core.kernel.errors import CcexError, UnknownVenue
from ccex.core.runtime.logger import get_logger
from ccex.drivers.binance.driver import BinancePrivate, BinancePublic
from ccex.drivers.bitflyer.driver import BitflyerPrivate, BitflyerPublic
from ccex.drivers.hitbtc.driver import HitbtcPrivate, HitbtcPublic
from ccex.drivers.huobi.driver import HuobiPrivate, HuobiPublic
from ccex.drivers.kucoin.driver import KucoinPrivate, KucoinPublic
from ccex.drivers.lbank.driver import LbankPrivate, LbankPublic
from ccex.drivers.okex.driver import OkexPrivate, OkexPublic
from ccex.drivers.p2pb2b.driver import P2pb2bPrivate, P2pb2bPublic
from ccex.drivers.poloniex.driver import PoloniexPrivate, PoloniexPublic
from ccex.drivers.shrimpy.driver import ShrimpyClient


class VenueType(Enum):
    """Supported venues"""
    BINANCE = "binance"
    BITFLYER = "bitflyer"
    HITBTC = "hitbtc"
    HUOBI = "huobi"
    KUCOIN = "kucoin"
    LBANK = "lbank"
    OKEX = "okex"
    P2PB2B = "p2pb2b"
    POLONIEX = "poloniex"


# venue name -> (public driver class, private driver class)
VENUES = {
    VenueType.BINANCE.value: (BinancePublic, BinancePrivate),
    VenueType.BITFLYER.value: (BitflyerPublic, BitflyerPrivate),
    VenueType.HITBTC.value: (HitbtcPublic, HitbtcPrivate),
    VenueType.HUOBI.value: (HuobiPublic, HuobiPrivate),
    VenueType.KUCOIN.value: (KucoinPublic, KucoinPrivate),
    VenueType.LBANK.value: (LbankPublic, LbankPrivate),
    VenueType.OKEX.value: (OkexPublic, OkexPrivate),
    VenueType.P2PB2B.value: (P2pb2bPublic, P2pb2bPrivate),
    VenueType.POLONIEX.value: (PoloniexPublic, PoloniexPrivate),
}

UNIFIED = {
    'shrimpy': ShrimpyClient,
}


def _resolve(name, table, kind):
    key = str(name or '').strip().lower()
    if isinstance(name, VenueType):
        key = name.value
    try:
        return key, table[key]
    except KeyError:
        raise UnknownVenue("unknown %s venue %r" % (kind, name), venue=key or None,
                           operation='lookup') from None


def available_venues():
    return sorted(VENUES)


def new_public_client(name, **options):
    """
    Build the public driver of a venue.

    :param name: venue name, case-insensitive ('Binance', 'poloniex', ...)
    :param options: session, timeout, proxies, base_url, rate_cache_duration,
                    board_cache_duration, fanout_workers, clock
    """
    _, (public_class, _private) = _resolve(name, VENUES, 'public')
    return public_class(**options)


def new_private_client(name, key, secret, **options):
    """
    Build the private driver of a venue.

    :param key: api key string or zero-argument callable
    :param secret: api secret string or zero-argument callable
    """
    _, (_public, private_class) = _resolve(name, VENUES, 'private')
    return private_class(key, secret, **options)


def new_unified_client(name='shrimpy', **options):
    _, client_class = _resolve(name, UNIFIED, 'unified')
    return client_class(**options)


class DriverStatus(Enum):
    """Driver state"""
    INITIALIZING = "initializing"
    READY = "ready"
    ERROR = "error"
    CLOSED = "closed"


class DriverInfo:
    """A managed driver and its health record"""
    def __init__(self, driver, venue: VenueType, account: str = 'main', private: bool = True,
                 status: DriverStatus = DriverStatus.INITIALIZING):
        self.driver = driver
        self.venue = venue
        self.account = account
        self.private = private
        self.status = status
        self.created_at = time.time()
        self.last_used = time.time()
        self.error_count = 0
        self.last_error = None

    def update_usage(self):
        self.last_used = time.time()

    def mark_error(self, error_msg: str):
        self.error_count += 1
        self.last_error = error_msg
        self.status = DriverStatus.ERROR

    def mark_ready(self):
        self.status = DriverStatus.READY
        self.error_count = 0
        self.last_error = None

    def is_healthy(self, max_error_count: int = 5, timeout_seconds: int = 3600) -> bool:
        if self.status == DriverStatus.CLOSED:
            return False
        if self.status == DriverStatus.ERROR and self.error_count >= max_error_count:
            return False
        if time.time() - self.last_used > timeout_seconds:
            return False
        return True


class ClientManager:
    """
    Keeps one driver per (venue, account).

    Credentials come from AccountReader.key_functions, driver options from
    ConfigReader.get_venue_settings. Both readers are created on first use
    when not given.
    """

    def __init__(self, config_reader=None, account_reader=None, session=None):
        self.config_reader = config_reader
        self.account_reader = account_reader
        self._owns_session = session is None
        self.session = session if session is not None else requests.Session()
        self._drivers: Dict[str, DriverInfo] = {}
        self._lock = threading.RLock()
        self.logger = get_logger('manager')
        self.logger.info("ClientManager initialized")

    def _readers(self):
        if self.config_reader is None:
            from configs.config_reader import ConfigReader
            self.config_reader = ConfigReader()
        if self.account_reader is None:
            from configs.account_reader import AccountReader
            self.account_reader = AccountReader()
        return self.config_reader, self.account_reader

    @staticmethod
    def _venue_type(venue: Union[VenueType, str]) -> VenueType:
        if isinstance(venue, VenueType):
            return venue
        try:
            return VenueType(str(venue).lower())
        except ValueError:
            raise UnknownVenue("unknown venue %r" % (venue,), operation='lookup') from None

    @staticmethod
    def _driver_key(venue: VenueType, account: Optional[str]) -> str:
        return f"{venue.value}_{account or 'public'}"

    def _settings(self, venue: VenueType) -> Dict[str, Any]:
        config_reader, _ = self._readers()
        try:
            settings = config_reader.get_venue_settings(venue.value)
        except FileNotFoundError:
            self.logger.info(f"no runtime config file, using driver defaults for {venue.value}")
            settings = {}
        settings['session'] = self.session
        return settings

    def _create_driver(self, venue: VenueType, account: Optional[str]):
        settings = self._settings(venue)
        if account is None:
            return new_public_client(venue.value, **settings)
        _, account_reader = self._readers()
        key_fn, secret_fn = account_reader.key_functions(venue.value, account)
        return new_private_client(venue.value, key_fn, secret_fn, **settings)

    def get_client(self, venue: Union[VenueType, str], account: Optional[str] = 'main',
                   auto_create: bool = True):
        """
        Driver for (venue, account); account None means the public driver.

        Returns:
            the driver, or None when it does not exist and auto_create is False
        """
        venue = self._venue_type(venue)
        key = self._driver_key(venue, account)

        with self._lock:
            info = self._drivers.get(key)
            if info is not None:
                if info.is_healthy():
                    info.update_usage()
                    return info.driver
                self.logger.warning(f"Driver {key} is not healthy, recreating")
                del self._drivers[key]

            if not auto_create:
                return None

            driver = self._create_driver(venue, account)
            info = DriverInfo(driver, venue, account or '', private=account is not None)
            info.mark_ready()
            self._drivers[key] = info
            self.logger.info(f"Driver {key} created and ready")
            return driver

    def get_public(self, venue: Union[VenueType, str]):
        return self.get_client(venue, account=None)

    def call(self, venue: Union[VenueType, str], account: Optional[str], operation: str, *args, **kwargs):
        """
        Run driver.<operation>(*args, **kwargs) and record the outcome.

        CcexError is recorded on the DriverInfo and re-raised.
        """
        venue = self._venue_type(venue)
        driver = self.get_client(venue, account)
        try:
            result = getattr(driver, operation)(*args, **kwargs)
        except CcexError as e:
            self.mark_client_error(venue, account, str(e))
            raise
        return result

    def remove_client(self, venue: Union[VenueType, str], account: Optional[str] = 'main') -> bool:
        key = self._driver_key(self._venue_type(venue), account)
        with self._lock:
            if key in self._drivers:
                self._drivers.pop(key).status = DriverStatus.CLOSED
                self.logger.info(f"Driver {key} removed")
                return True
            self.logger.warning(f"Driver {key} not found")
            return False

    def get_all_clients(self) -> Dict[str, DriverInfo]:
        with self._lock:
            return self._drivers.copy()

    def get_client_status(self, venue: Union[VenueType, str],
                          account: Optional[str] = 'main') -> Optional[DriverStatus]:
        key = self._driver_key(self._venue_type(venue), account)
        with self._lock:
            info = self._drivers.get(key)
            return info.status if info else None

    def mark_client_error(self, venue: Union[VenueType, str], account: Optional[str] = 'main',
                          error_msg: str = "Unknown error") -> bool:
        key = self._driver_key(self._venue_type(venue), account)
        with self._lock:
            info = self._drivers.get(key)
            if info is None:
                return False
            info.mark_error(error_msg)
            self.logger.warning(f"Driver {key} marked with error: {error_msg}")
            return True

    def cleanup_unhealthy_clients(self, max_error_count: int = 5, timeout_seconds: int = 3600):
        with self._lock:
            for key in [k for k, info in self._drivers.items()
                        if not info.is_healthy(max_error_count, timeout_seconds)]:
                self._drivers.pop(key).status = DriverStatus.CLOSED
                self.logger.info(f"Removed unhealthy driver: {key}")

    def get_stats(self) -> Dict[str, Any]:
        with self._lock:
            stats = {
                'total_drivers': len(self._drivers),
                'drivers_by_venue': {},
                'drivers_by_status': {},
                'unhealthy_drivers': 0
            }
            for info in self._drivers.values():
                venue = info.venue.value
                stats['drivers_by_venue'][venue] = stats['drivers_by_venue'].get(venue, 0) + 1
                status = info.status.value
                stats['drivers_by_status'][status] = stats['drivers_by_status'].get(status, 0) + 1
                if not info.is_healthy():
                    stats['unhealthy_drivers'] += 1
            return stats

    def close_all(self):
        with self._lock:
            self.logger.info(f"Closing ClientManager, releasing {len(self._drivers)} drivers")
            for info in self._drivers.values():
                info.status = DriverStatus.CLOSED
            self._drivers.clear()
            if self._owns_session and hasattr(self.session, 'close'):
                self.session.close()
