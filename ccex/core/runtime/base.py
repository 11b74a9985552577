# -*- coding: utf-8 -*-
# ccex/core/runtime/base.py
# Shared driver machinery. Venue drivers subclass PublicDriver / PrivateDriver
# and fill in the venue specific fetch and parse hooks.

import json
import threading
import time

from ccex.core.kernel.errors import SchemaMismatch, UnknownPair, VenueError
from ccex.core.kernel.models import Balance, OrderType
from ccex.core.kernel.syscalls import PrivateSyscalls, PublicSyscalls
from ccex.core.runtime.codec import SymbolCodec
from ccex.core.runtime.fanout import DEFAULT_FANOUT_WORKERS, fan_out
from ccex.core.runtime.logger import get_logger, truncate
from ccex.core.runtime.market_cache import (DEFAULT_BOARD_CACHE_DURATION, DEFAULT_RATE_CACHE_DURATION,
                                            MarketCache, SnapshotBuilder, TTLCache)
from ccex.core.runtime.precision import PrecisionRegistry, floor_format
from ccex.core.runtime.transport import DEFAULT_TIMEOUT, HttpTransport

_MISSING = object()


def field(obj, *path, default=_MISSING, venue=None):
    """
    Walk `path` (dict keys or list indexes) through a decoded payload.

    Raises SchemaMismatch when a step is missing, unless `default` is given.
    """
    current = obj
    for key in path:
        try:
            current = current[key]
        except (KeyError, IndexError, TypeError):
            if default is not _MISSING:
                return default
            raise SchemaMismatch("missing field %s" % ".".join(str(p) for p in path),
                                 venue=venue) from None
    return current


def to_float(value, what='value', venue=None):
    """float() for venue numbers that may arrive as strings; SchemaMismatch otherwise."""
    if isinstance(value, bool):
        raise SchemaMismatch("%s is a boolean" % what, venue=venue)
    try:
        return float(value)
    except (TypeError, ValueError):
        raise SchemaMismatch("%s is not numeric: %r" % (what, value), venue=venue) from None


def error_payload(error):
    """Decode the JSON payload carried by a CcexError, or None."""
    if not error.payload:
        return None
    try:
        return json.loads(error.payload)
    except ValueError:
        return None


class PublicDriver(PublicSyscalls):
    """
    Public half of a venue driver.

    Subclasses set the class attributes and implement:
        _fetch_market()     -> MarketSnapshot (use SnapshotBuilder)
        _fetch_precisions() -> {trading: {settlement: Precisions}}
        _fetch_board(t, s)  -> Board
    and optionally _fetch_pairs() and _fetch_frozen().
    """
    venue = None
    base_url = None
    rate_cache_duration = DEFAULT_RATE_CACHE_DURATION
    symbol_delimiter = ''
    symbol_lower = False
    settlement_first = False
    default_headers = None

    def __init__(self, session=None, timeout=DEFAULT_TIMEOUT, proxies=None, base_url=None,
                 rate_cache_duration=None, board_cache_duration=DEFAULT_BOARD_CACHE_DURATION,
                 fanout_workers=DEFAULT_FANOUT_WORKERS, clock=time.time):
        self.logger = get_logger('drivers.' + self.venue)
        self.transport = HttpTransport(self.venue, base_url or self.base_url, timeout=timeout,
                                       session=session, proxies=proxies, headers=self.default_headers)
        self.codec = SymbolCodec(self.venue, delimiter=self.symbol_delimiter, lower=self.symbol_lower,
                                 settlement_first=self.settlement_first, settlements=self.settlements)
        if rate_cache_duration is None:
            rate_cache_duration = self.rate_cache_duration
        self.market = MarketCache(self.venue, self._fetch_market, rate_cache_duration, clock)
        self.precisions = PrecisionRegistry(self.venue, self._fetch_precisions)
        self.boards = TTLCache(board_cache_duration, clock)
        self.fanout_workers = fanout_workers
        self.clock = clock
        self._pairs = None
        self._pairs_lock = threading.Lock()

    # ---- http helpers ----
    def _get(self, path, params=None):
        payload = self.transport.get_json(path, params)
        return self._check(payload, 'GET', path)

    def _check(self, payload, method, path):
        """Inspect a decoded 200 payload for the venue's error envelope."""
        return payload

    def _venue_error(self, message, method, path, payload=None):
        text = truncate(json.dumps(payload, default=str) if payload is not None else None, 2000)
        self.logger.warning("%s %s: %s %s", method, path, message, truncate(text))
        return VenueError(message, venue=self.venue, operation=method, path=path, payload=text)

    def _fan_out(self, items, fn):
        return fan_out(items, fn, max_workers=self.fanout_workers, venue=self.venue)

    def new_builder(self):
        return SnapshotBuilder()

    # ---- pairs ----
    def currency_pairs(self):
        with self._pairs_lock:
            if self._pairs is None:
                self._pairs = list(self._fetch_pairs())
                self.logger.debug("listed %d pairs", len(self._pairs))
            return list(self._pairs)

    def refresh_pairs(self):
        """Re-list pairs and drop everything derived from the old listing."""
        with self._pairs_lock:
            self._pairs = None
        self.market.invalidate()
        self.precisions.invalidate()
        self.boards.clear()
        return self.currency_pairs()

    def _fetch_pairs(self):
        return self.market.currency_pairs()

    def settlements(self):
        seen = []
        for pair in self.currency_pairs():
            if pair.settlement not in seen:
                seen.append(pair.settlement)
        return seen

    def symbol(self, trading, settlement):
        return self.codec.format(trading, settlement)

    # ---- market ----
    def rate(self, trading, settlement):
        return self.market.rate(trading, settlement)

    def volume(self, trading, settlement):
        return self.market.volume(trading, settlement)

    def rate_map(self):
        return self.market.rate_map()

    def volume_map(self):
        return self.market.volume_map()

    def order_book_tick(self, trading, settlement):
        return self.market.tick(trading, settlement)

    def order_book_tick_map(self):
        return self.market.tick_map()

    def precise(self, trading, settlement):
        return self.precisions.precise(trading, settlement)

    def board(self, trading, settlement):
        if trading == settlement:
            raise UnknownPair("trading and settlement are the same: %s" % trading,
                              venue=self.venue, operation='board')
        return self.boards.get_or_load((trading, settlement),
                                       lambda: self._fetch_board(trading, settlement))

    def frozen_currency(self):
        return list(self._fetch_frozen())

    # ---- hooks ----
    def _fetch_market(self):
        raise NotImplementedError

    def _fetch_precisions(self):
        raise NotImplementedError

    def _fetch_board(self, trading, settlement):
        raise NotImplementedError

    def _fetch_frozen(self):
        return []


class PrivateDriver(PrivateSyscalls):
    """
    Private half of a venue driver. Owns (or is handed) the public driver of
    the same venue and uses it for pairs and precision.

    Args:
        api_key: key string or zero-argument callable
        api_secret: secret string or zero-argument callable
        public: existing public driver to share; built from the options otherwise
    """
    venue = None
    public_class = None
    signer_class = None
    private_base_url = None
    buy_side = 'BUY'
    sell_side = 'SELL'

    def __init__(self, api_key, api_secret, public=None, session=None, timeout=DEFAULT_TIMEOUT,
                 proxies=None, base_url=None, clock=time.time, **public_options):
        self.logger = get_logger('drivers.' + self.venue)
        if public is None:
            public = self.public_class(session=session, timeout=timeout, proxies=proxies,
                                       clock=clock, **public_options)
        self.public = public
        self.signer = self.signer_class(api_key, api_secret, clock=clock)
        if session is None:
            session = public.transport.session
        self.transport = HttpTransport(self.venue,
                                       base_url or self.private_base_url or public.transport.base_url,
                                       signer=self.signer, timeout=timeout, session=session,
                                       proxies=proxies)

    # ---- http helpers ----
    def _call(self, method, path, params=None):
        self.logger.debug("private %s %s", method, path)
        payload = self.transport.private_json(method, path, params)
        return self._check(payload, method, path)

    def _check(self, payload, method, path):
        return payload

    def _venue_error(self, message, method, path, payload=None):
        return self.public._venue_error(message, method, path, payload)

    # ---- helpers shared by order paths ----
    def side(self, order_type):
        if order_type == OrderType.ASK:
            return self.buy_side
        if order_type == OrderType.BID:
            return self.sell_side
        raise ValueError("unknown order type %r" % (order_type,))

    def order_type_of(self, side):
        """Inverse of side(); None when the venue side string is unknown."""
        text = str(side).upper()
        if text == str(self.buy_side).upper():
            return OrderType.ASK
        if text == str(self.sell_side).upper():
            return OrderType.BID
        return None

    def format_order(self, trading, settlement, price, amount):
        """Return (price, amount) strings floored to the pair's precision."""
        precisions = self.public.precise(trading, settlement)
        return (floor_format(price, precisions.price_precision),
                floor_format(amount, precisions.amount_precision))

    def symbol(self, trading, settlement):
        return self.public.symbol(trading, settlement)

    @staticmethod
    def require_pair(trading, settlement):
        if not trading or not settlement:
            raise ValueError("trading and settlement are required for this venue")

    # ---- contract defaults ----
    def trade_fee_rates(self):
        rates = {}
        for pair in self.public.currency_pairs():
            rates.setdefault(pair.trading, {})[pair.settlement] = \
                self.trade_fee_rate(pair.trading, pair.settlement)
        return rates

    def balances(self):
        return {asset: balance.available for asset, balance in self.complete_balances().items()}

    def complete_balance(self, asset):
        return self.complete_balances().get(asset, Balance())

    def cancel_order(self, order_id, trading=None, settlement=None, order_type=None):
        try:
            self._cancel(order_id, trading, settlement, order_type)
        except VenueError as e:
            if not self._already_absent(e):
                raise
            self.logger.info("order %s already absent: %s", order_id, e)

    def _cancel(self, order_id, trading, settlement, order_type):
        raise NotImplementedError

    def _already_absent(self, error):
        return False

    def is_order_filled(self, order_id, trading=None, settlement=None):
        return all(order.exchange_order_id != order_id for order in self.active_orders())

    def address(self, asset):
        raise VenueError("deposit address is not supported", venue=self.venue, operation='address')

    def _fan_out(self, items, fn):
        return fan_out(items, fn, max_workers=self.public.fanout_workers, venue=self.venue)
