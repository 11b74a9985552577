# -*- coding: utf-8 -*-
# ccex/core/runtime/market_cache.py
# Time-bounded snapshot of rate / volume / order book tick maps, plus a small
# TTL cache used for boards.

import copy
import threading
import time
from collections import namedtuple

from ccex.core.kernel.errors import UnknownPair
from ccex.core.kernel.models import CurrencyPair, OrderBookTick
from ccex.core.runtime.logger import get_logger

DEFAULT_RATE_CACHE_DURATION = 30.0
DEFAULT_BOARD_CACHE_DURATION = 3.0

MarketSnapshot = namedtuple('MarketSnapshot', ['rates', 'volumes', 'ticks'])

EMPTY_SNAPSHOT = MarketSnapshot({}, {}, {})


class SnapshotBuilder(object):
    """
    Collects one refresh worth of market data. Every add() writes the three
    maps together so they always share the same keys. Safe to call from
    fan-out workers.
    """

    def __init__(self):
        self.rates = {}
        self.volumes = {}
        self.ticks = {}
        self._lock = threading.Lock()

    def add(self, trading, settlement, rate, volume, best_ask=0.0, best_bid=0.0,
            best_ask_amount=0.0, best_bid_amount=0.0):
        tick = OrderBookTick(float(best_ask), float(best_bid),
                             float(best_ask_amount), float(best_bid_amount))
        with self._lock:
            self.rates.setdefault(trading, {})[settlement] = float(rate)
            self.volumes.setdefault(trading, {})[settlement] = float(volume)
            self.ticks.setdefault(trading, {})[settlement] = tick

    def __len__(self):
        with self._lock:
            return sum(len(row) for row in self.rates.values())

    def build(self):
        with self._lock:
            return MarketSnapshot(self.rates, self.volumes, self.ticks)


class MarketCache(object):
    """
    Holds the latest MarketSnapshot and refreshes it when older than `duration`.

    Readers and the refresh share one lock, so concurrent callers that find the
    cache stale wait for a single refresh and then read its result. A refresh
    that raises leaves the previous snapshot and timestamp untouched.

    Args:
        venue: venue name for errors and logs
        refresher: zero-argument callable returning a MarketSnapshot
        duration: max snapshot age in seconds
        clock: epoch-seconds clock
    """

    def __init__(self, venue, refresher, duration=DEFAULT_RATE_CACHE_DURATION, clock=time.time):
        self.venue = venue
        self.duration = duration
        self._refresher = refresher
        self._clock = clock
        self._snapshot = EMPTY_SNAPSHOT
        self._last_updated = 0.0
        self._lock = threading.Lock()
        self.logger = get_logger('market.' + venue)

    @property
    def last_updated(self):
        return self._last_updated

    def snapshot(self):
        with self._lock:
            if self._clock() - self._last_updated >= self.duration:
                started = time.time()
                snapshot = self._refresher()
                self._snapshot = snapshot
                self._last_updated = self._clock()
                self.logger.debug("refreshed %d pairs in %.3fs",
                                  sum(len(r) for r in snapshot.rates.values()),
                                  time.time() - started)
            return self._snapshot

    def invalidate(self):
        with self._lock:
            self._last_updated = 0.0

    def _lookup(self, table, trading, settlement, what):
        try:
            return table[trading][settlement]
        except KeyError:
            raise UnknownPair("%s for %s/%s not found" % (what, trading, settlement),
                              venue=self.venue, operation=what) from None

    def rate(self, trading, settlement):
        if trading == settlement:
            return 1.0
        return self._lookup(self.snapshot().rates, trading, settlement, 'rate')

    def volume(self, trading, settlement):
        return self._lookup(self.snapshot().volumes, trading, settlement, 'volume')

    def tick(self, trading, settlement):
        return self._lookup(self.snapshot().ticks, trading, settlement, 'tick')

    def rate_map(self):
        return copy.deepcopy(self.snapshot().rates)

    def volume_map(self):
        return copy.deepcopy(self.snapshot().volumes)

    def tick_map(self):
        return copy.deepcopy(self.snapshot().ticks)

    def currency_pairs(self):
        rates = self.snapshot().rates
        return [CurrencyPair(t, s) for t in sorted(rates) for s in sorted(rates[t])]


class TTLCache(object):
    """Per-key value cache with a fixed time to live."""

    def __init__(self, ttl=DEFAULT_BOARD_CACHE_DURATION, clock=time.time):
        self.ttl = ttl
        self._clock = clock
        self._items = {}
        self._lock = threading.Lock()

    def get(self, key):
        with self._lock:
            item = self._items.get(key)
            if item is None:
                return None
            stored_at, value = item
            if self._clock() - stored_at >= self.ttl:
                del self._items[key]
                return None
            return value

    def set(self, key, value):
        with self._lock:
            self._items[key] = (self._clock(), value)

    def get_or_load(self, key, loader):
        value = self.get(key)
        if value is None:
            value = loader()
            self.set(key, value)
        return value

    def clear(self):
        with self._lock:
            self._items.clear()
