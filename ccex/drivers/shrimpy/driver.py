# -*- coding: utf-8 -*-
# ccex/drivers/shrimpy/driver.py
# Shrimpy aggregator: pairs, assets and order books of other exchanges
# through one public API.

import time

from ccex.core.kernel.errors import SchemaMismatch
from ccex.core.kernel.models import Asset, Board, CurrencyPair
from ccex.core.runtime.base import field
from ccex.core.runtime.logger import get_logger
from ccex.core.runtime.market_cache import DEFAULT_BOARD_CACHE_DURATION, TTLCache
from ccex.core.runtime.transport import HttpTransport

SHRIMPY_TIMEOUT = 20


class ShrimpyClient(object):
    """
    Read-only client of the Shrimpy public API.

    Args:
        session: requests-compatible session (the requests module by default)
        timeout: request timeout in seconds
        board_cache_duration: seconds a per-exchange boards mapping is reused
    """
    venue = 'shrimpy'
    base_url = 'https://dev-api.shrimpy.io/v1'

    def __init__(self, session=None, timeout=SHRIMPY_TIMEOUT, proxies=None, base_url=None,
                 board_cache_duration=DEFAULT_BOARD_CACHE_DURATION, clock=time.time, **_):
        self.logger = get_logger('drivers.' + self.venue)
        self.transport = HttpTransport(self.venue, base_url or self.base_url, timeout=timeout,
                                       session=session, proxies=proxies)
        self.boards_cache = TTLCache(board_cache_duration, clock)

    def _get_list(self, path, params=None):
        payload = self.transport.get_json(path, params)
        if not isinstance(payload, list):
            raise SchemaMismatch("expected a list", venue=self.venue, operation='GET', path=path)
        return payload

    def currency_pairs(self, exchange):
        rows = self._get_list('/exchanges/%s/trading_pairs' % exchange)
        return [CurrencyPair(row['baseTradingSymbol'], row['quoteTradingSymbol']) for row in rows]

    def assets(self, exchange):
        rows = self._get_list('/exchanges/%s/assets' % exchange)
        return [Asset(row.get('name', ''), row.get('symbol', '')) for row in rows]

    def boards(self, exchange):
        """
        Order books of every pair listed on `exchange`.

        :param exchange: Shrimpy exchange id, e.g. 'binance'
        :return: {trading: {settlement: Board}}
        """
        return self.boards_cache.get_or_load(exchange, lambda: self._fetch_boards(exchange))

    def _fetch_boards(self, exchange):
        boards = {}
        for row in self._get_list('/orderbooks', {'exchange': exchange}):
            book = field(row, 'orderBooks', 0, 'orderBook', default=None)
            if not isinstance(book, dict):
                continue
            asks, bids = book.get('asks'), book.get('bids')
            if not isinstance(asks, list) or not isinstance(bids, list):
                continue
            boards.setdefault(row['baseSymbol'], {})[row['quoteSymbol']] = Board(
                asks=[(level['price'], level['quantity']) for level in asks],
                bids=[(level['price'], level['quantity']) for level in bids])
        self.logger.debug("%s: %d books", exchange, sum(len(v) for v in boards.values()))
        return boards
