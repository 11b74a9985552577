# -*- coding: utf-8 -*-
# ccex/drivers/okex/driver.py
# OKEx driver. Public data comes from the v2 spot endpoints; private calls go
# through the Huobi compatible v1 gateway on the same host.

from ccex.core.kernel.errors import UnknownPair
from ccex.core.kernel.models import Board, TradeFee
from ccex.core.runtime.base import PublicDriver, field, to_float
from ccex.core.runtime.precision import precision_of, valid_precisions
from ccex.drivers.huobi.driver import HuobiPrivate, raise_for_status

MAKER_FEE = -0.001
TAKER_FEE = 0.001


class OkexPublic(PublicDriver):
    venue = 'okex'
    base_url = 'https://www.okex.com'
    symbol_delimiter = '_'
    symbol_lower = True

    def _check(self, payload, method, path):
        if isinstance(payload, dict) and payload.get('code') not in (None, 0):
            raise self._venue_error(str(payload.get('msg') or payload.get('code')), method, path, payload)
        return raise_for_status(self, payload, method, path)

    def _fetch_pairs(self):
        pairs = []
        for row in field(self._get('/v2/markets/products'), 'data', venue=self.venue):
            try:
                pairs.append(self.codec.parse(row['symbol']))
            except UnknownPair:
                continue
        return pairs

    def _tickers(self):
        for row in field(self._get('/v2/spot/markets/tickers'), 'data', venue=self.venue):
            if row.get('last') is None or row.get('volume') is None:
                continue
            try:
                pair = self.codec.parse(row['symbol'])
            except UnknownPair:
                continue
            yield pair, row

    def _fetch_precisions(self):
        table = {}
        for pair, row in self._tickers():
            table.setdefault(pair.trading, {})[pair.settlement] = valid_precisions(
                precision_of(row['last']), precision_of(row['volume']))
        return table

    def _fetch_market(self):
        builder = self.new_builder()
        for pair, row in self._tickers():
            builder.add(pair.trading, pair.settlement,
                        to_float(row['last'], 'last', self.venue),
                        to_float(row['volume'], 'volume', self.venue),
                        to_float(row.get('sell') or 0), to_float(row.get('buy') or 0))
        return builder.build()

    def _fetch_board(self, trading, settlement):
        payload = self._get('/v2/markets/%s/depth' % self.symbol(trading, settlement), {'size': 200})
        data = field(payload, 'data', venue=self.venue)
        return Board(asks=[(level['price'], level['totalSize']) for level in data.get('asks') or []],
                     bids=[(level['price'], level['totalSize']) for level in data.get('bids') or []])

    def currencies(self):
        return field(self._get('/v2/markets/currencies'), 'data', venue=self.venue)

    def _fetch_frozen(self):
        return [row['symbol'].upper() for row in self.currencies()
                if row.get('withdrawable') is False and row.get('rechargeable') is False]


class OkexPrivate(HuobiPrivate):
    venue = 'okex'
    public_class = OkexPublic
    trade_fee = TradeFee(MAKER_FEE, TAKER_FEE)

    def _fee_range(self, currency):
        payload = self.public._get('/v1/dw/withdraw-virtual/fee-range', {'currency': currency.lower()})
        return to_float(field(payload, 'data', 'default-amount', venue=self.venue),
                        'default-amount', self.venue)

    def transfer_fee(self):
        currencies = [row['symbol'].upper() for row in self.public.currencies()]
        return self._fan_out(currencies, self._fee_range)
