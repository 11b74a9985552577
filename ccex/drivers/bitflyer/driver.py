# -*- coding: utf-8 -*-
# ccex/drivers/bitflyer/driver.py
# bitFlyer Lightning driver. Only spot products settled in JPY are listed.

from ccex.core.kernel.errors import UnknownPair
from ccex.core.kernel.models import Balance, Board, CurrencyPair, Order, Precisions, TradeFee
from ccex.core.runtime.base import PrivateDriver, PublicDriver, field, to_float
from ccex.core.runtime.signing import BitflyerSigner

SETTLEMENTS = ['JPY']
FIXED_PRECISIONS = Precisions(0, 8)


class BitflyerPublic(PublicDriver):
    venue = 'bitflyer'
    base_url = 'https://api.bitflyer.jp'
    symbol_delimiter = '_'

    def _check(self, payload, method, path):
        if isinstance(payload, dict) and payload.get('error_message'):
            raise self._venue_error(str(payload['error_message']), method, path, payload)
        return payload

    def settlements(self):
        return list(SETTLEMENTS)

    def _fetch_pairs(self):
        pairs = []
        for market in self._get('/v1/markets'):
            code = field(market, 'product_code', venue=self.venue)
            try:
                pair = self.codec.parse(code)
            except UnknownPair:
                continue
            if pair.settlement in SETTLEMENTS:
                pairs.append(pair)
        return pairs

    def _fetch_precisions(self):
        table = {}
        for pair in self.currency_pairs():
            table.setdefault(pair.trading, {})[pair.settlement] = FIXED_PRECISIONS
        return table

    def _ticker(self, pair):
        ticker = self._get('/v1/ticker', {'product_code': self.symbol(pair.trading, pair.settlement)})
        return (to_float(field(ticker, 'ltp', venue=self.venue), 'ltp', self.venue),
                to_float(field(ticker, 'volume', venue=self.venue), 'volume', self.venue),
                to_float(ticker.get('best_ask', 0), 'best_ask', self.venue),
                to_float(ticker.get('best_bid', 0), 'best_bid', self.venue),
                to_float(ticker.get('best_ask_size', 0), 'best_ask_size', self.venue),
                to_float(ticker.get('best_bid_size', 0), 'best_bid_size', self.venue))

    def _fetch_market(self):
        builder = self.new_builder()
        for pair, values in self._fan_out(self.currency_pairs(), self._ticker).items():
            builder.add(pair.trading, pair.settlement, *values)
        return builder.build()

    def _fetch_board(self, trading, settlement):
        payload = self._get('/v1/board', {'product_code': self.symbol(trading, settlement)})
        return Board(asks=[(level['price'], level['size']) for level in payload.get('asks', [])],
                     bids=[(level['price'], level['size']) for level in payload.get('bids', [])])


def _number(text):
    return int(text) if '.' not in text else float(text)


class BitflyerPrivate(PrivateDriver):
    venue = 'bitflyer'
    public_class = BitflyerPublic
    signer_class = BitflyerSigner

    def _check(self, payload, method, path):
        return self.public._check(payload, method, path)

    def trade_fee_rate(self, trading, settlement):
        payload = self._call('GET', '/v1/me/gettradingcommission',
                             {'product_code': self.symbol(trading, settlement)})
        rate = to_float(field(payload, 'commission_rate', venue=self.venue), 'commission_rate', self.venue)
        return TradeFee(rate, rate)

    def transfer_fee(self):
        return {}

    def complete_balances(self):
        balances = {}
        for row in self._call('GET', '/v1/me/getbalance'):
            available = to_float(row.get('available', 0), 'available', self.venue)
            amount = to_float(row.get('amount', available), 'amount', self.venue)
            balances[row['currency_code']] = Balance(available, amount - available)
        return balances

    def order(self, trading, settlement, order_type, price, amount):
        price_text, amount_text = self.format_order(trading, settlement, price, amount)
        params = {
            'product_code': self.symbol(trading, settlement),
            'child_order_type': 'LIMIT',
            'side': self.side(order_type),
            'price': _number(price_text),
            'size': _number(amount_text),
        }
        payload = self._call('POST', '/v1/me/sendchildorder', params)
        return str(field(payload, 'child_order_acceptance_id', venue=self.venue))

    def _cancel(self, order_id, trading, settlement, order_type):
        self.require_pair(trading, settlement)
        # success is an empty 200 body
        self.transport.private_call('POST', '/v1/me/cancelchildorder', {
            'product_code': self.symbol(trading, settlement),
            'child_order_acceptance_id': order_id,
        })

    def _active_orders(self, pair):
        params = {'child_order_state': 'ACTIVE', 'product_code': self.symbol(pair.trading, pair.settlement)}
        orders = []
        for row in self._call('GET', '/v1/me/getchildorders', params):
            order_type = self.order_type_of(row.get('side'))
            if order_type is None or 'child_order_acceptance_id' not in row:
                continue
            orders.append(Order(str(row['child_order_acceptance_id']), order_type,
                                pair.trading, pair.settlement,
                                to_float(row.get('price', 0)), to_float(row.get('size', 0))))
        return orders

    def active_orders(self):
        orders = []
        for pair in self.public.currency_pairs():
            orders.extend(self._active_orders(pair))
        return orders

    def is_order_filled(self, order_id, trading=None, settlement=None):
        if trading and settlement:
            orders = self._active_orders(CurrencyPair(trading, settlement))
        else:
            orders = self.active_orders()
        return all(order.exchange_order_id != order_id for order in orders)

    def transfer(self, asset, address, amount, additional_fee=0.0):
        raise self._venue_error("crypto withdrawal is not available through the API", 'POST', 'transfer')

    def address(self, asset):
        for row in self._call('GET', '/v1/me/getaddresses'):
            if row.get('currency_code') == asset:
                return str(row['address'])
        raise self._venue_error("no deposit address for %s" % asset, 'GET', '/v1/me/getaddresses')
