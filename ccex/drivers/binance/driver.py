# -*- coding: utf-8 -*-
# ccex/drivers/binance/driver.py
# Binance spot driver (public + private).

from ccex.core.kernel.errors import VenueError
from ccex.core.kernel.models import Balance, Board, CurrencyPair, Order, TradeFee
from ccex.core.runtime.base import PrivateDriver, PublicDriver, error_payload, field, to_float
from ccex.core.runtime.precision import floor_format, valid_precisions
from ccex.core.runtime.signing import BinanceSigner

IP_BANNED = -1003
UNKNOWN_ORDER = -2011
CLOSED_STATUSES = ('FILLED', 'CANCELED', 'EXPIRED', 'REJECTED')


class BinancePublic(PublicDriver):
    venue = 'binance'
    base_url = 'https://api.binance.com'

    def _check(self, payload, method, path):
        if isinstance(payload, dict) and 'code' in payload and 'msg' in payload:
            if str(payload['code']) == str(IP_BANNED):
                raise self._venue_error("ip banned", method, path, payload)
            if payload['code'] not in (0, 200):
                raise self._venue_error(str(payload['msg']), method, path, payload)
        return payload

    def _exchange_symbols(self):
        return field(self._get('/api/v1/exchangeInfo'), 'symbols', venue=self.venue)

    def _fetch_pairs(self):
        return [CurrencyPair(s['baseAsset'], s['quoteAsset']) for s in self._exchange_symbols()]

    def _fetch_precisions(self):
        table = {}
        for s in self._exchange_symbols():
            precisions = valid_precisions(s.get('baseAssetPrecision'), s.get('quotePrecision'))
            table.setdefault(s['baseAsset'], {})[s['quoteAsset']] = precisions
        return table

    def _fetch_frozen(self):
        frozen = []
        for s in self._exchange_symbols():
            if s.get('status') != 'TRADING':
                for asset in (s['baseAsset'], s['quoteAsset']):
                    if asset not in frozen:
                        frozen.append(asset)
        return frozen

    def _symbol_index(self):
        return {pair.trading + pair.settlement: pair for pair in self.currency_pairs()}

    def _pair_of(self, symbol, index=None):
        pair = (index if index is not None else self._symbol_index()).get(symbol)
        return pair if pair is not None else self.codec.parse(symbol)

    def _fetch_market(self):
        tickers = self._get('/api/v1/ticker/24hr')
        quantities = {}
        for row in self._get('/api/v3/ticker/bookTicker'):
            quantities[row.get('symbol')] = (row.get('askQty', 0), row.get('bidQty', 0))
        index = self._symbol_index()
        builder = self.new_builder()
        for row in tickers:
            symbol = field(row, 'symbol', venue=self.venue)
            try:
                pair = self._pair_of(symbol, index)
            except KeyError:
                self.logger.debug("skipping unlisted symbol %s", symbol)
                continue
            ask_qty, bid_qty = quantities.get(symbol, (0, 0))
            builder.add(pair.trading, pair.settlement,
                        to_float(row.get('lastPrice'), 'lastPrice', self.venue),
                        to_float(row.get('volume'), 'volume', self.venue),
                        to_float(row.get('askPrice', 0), 'askPrice', self.venue),
                        to_float(row.get('bidPrice', 0), 'bidPrice', self.venue),
                        to_float(ask_qty, 'askQty', self.venue),
                        to_float(bid_qty, 'bidQty', self.venue))
        return builder.build()

    def _fetch_board(self, trading, settlement):
        payload = self._get('/api/v1/depth', {'symbol': self.symbol(trading, settlement), 'limit': 1000})
        return Board(asks=[row[:2] for row in payload.get('asks', [])],
                     bids=[row[:2] for row in payload.get('bids', [])])


class BinancePrivate(PrivateDriver):
    venue = 'binance'
    public_class = BinancePublic
    signer_class = BinanceSigner

    def _check(self, payload, method, path):
        return self.public._check(payload, method, path)

    def _account(self):
        return self._call('GET', '/api/v3/account')

    def _fee(self):
        account = self._account()
        return TradeFee(to_float(account.get('makerCommission', 0)) / 10000,
                        to_float(account.get('takerCommission', 0)) / 10000)

    def trade_fee_rates(self):
        fee = self._fee()
        rates = {}
        for pair in self.public.currency_pairs():
            rates.setdefault(pair.trading, {})[pair.settlement] = fee
        return rates

    def trade_fee_rate(self, trading, settlement):
        return self._fee()

    def transfer_fee(self):
        payload = self._call('GET', '/wapi/v3/assetDetail.html')
        details = payload.get('assetDetail')
        if details is None:
            raise self._venue_error("asset detail missing", 'GET', '/wapi/v3/assetDetail.html', payload)
        return {asset.upper(): to_float(detail.get('withdrawFee', 0), 'withdrawFee', self.venue)
                for asset, detail in details.items()}

    def complete_balances(self):
        balances = {}
        for row in field(self._account(), 'balances', venue=self.venue):
            balances[row['asset'].upper()] = Balance(to_float(row.get('free', 0)),
                                                     to_float(row.get('locked', 0)))
        return balances

    def order(self, trading, settlement, order_type, price, amount):
        price_text, amount_text = self.format_order(trading, settlement, price, amount)
        params = {
            'symbol': self.symbol(trading, settlement),
            'side': self.side(order_type),
            'type': 'LIMIT',
            'timeInForce': 'GTC',
            'quantity': amount_text,
            'price': price_text,
        }
        payload = self._call('POST', '/api/v3/order', params)
        return str(field(payload, 'clientOrderId', venue=self.venue))

    def _cancel(self, order_id, trading, settlement, order_type):
        self.require_pair(trading, settlement)
        params = {'symbol': self.symbol(trading, settlement), 'origClientOrderId': order_id}
        payload = self._call('DELETE', '/api/v3/order', params)
        if str(payload.get('origClientOrderId')) != str(order_id):
            raise self._venue_error("failed to cancel order %s" % order_id,
                                    'DELETE', '/api/v3/order', payload)

    def _already_absent(self, error):
        payload = error_payload(error)
        return isinstance(payload, dict) and payload.get('code') == UNKNOWN_ORDER

    def is_order_filled(self, order_id, trading=None, settlement=None):
        self.require_pair(trading, settlement)
        params = {'symbol': self.symbol(trading, settlement), 'origClientOrderId': order_id}
        try:
            payload = self._call('GET', '/api/v3/order', params)
        except VenueError as e:
            if self._already_absent(e):
                return True
            raise
        return payload.get('status') in CLOSED_STATUSES

    def active_orders(self):
        orders = []
        index = self.public._symbol_index()
        for row in self._call('GET', '/api/v3/openOrders'):
            try:
                pair = self.public._pair_of(row['symbol'], index)
            except KeyError:
                continue
            orders.append(Order(str(row.get('clientOrderId')), self.order_type_of(row.get('side')),
                                pair.trading, pair.settlement,
                                to_float(row.get('price')), to_float(row.get('origQty'))))
        return orders

    def transfer(self, asset, address, amount, additional_fee=0.0):
        params = {'asset': asset, 'address': address, 'amount': floor_format(amount, 4)}
        payload = self._call('POST', '/wapi/v3/withdraw.html', params)
        if isinstance(payload, dict) and payload.get('success') is False:
            raise self._venue_error(str(payload.get('msg', 'withdraw rejected')),
                                    'POST', '/wapi/v3/withdraw.html', payload)

    def address(self, asset):
        payload = self._call('GET', '/wapi/v3/depositAddress.html', {'asset': asset})
        if isinstance(payload, list):
            payload = field(payload, 0, venue=self.venue)
        return str(field(payload, 'address', venue=self.venue))
