# -*- coding: utf-8 -*-
# ccex/drivers/p2pb2b/driver.py
# P2PB2B driver. Market symbols are 'ETH_BTC'; the private gateway speaks the
# KuCoin style dialect ('ETH-BTC', BUY/SELL books, success envelope).

from pathlib import Path

from ccex.core.kernel.errors import UnknownPair
from ccex.core.kernel.models import Balance, Board, CurrencyPair, Order, OrderType, TradeFee
from ccex.core.runtime.base import PrivateDriver, PublicDriver, field, to_float
from ccex.core.runtime.precision import floor_format, precision_of, valid_precisions
from ccex.core.runtime.signing import P2pb2bSigner
from ccex.drivers.huobi.driver import load_transfer_fees
from ccex.drivers.kucoin.driver import ORDER_ID_INDEX, raise_for_success

TRADE_FEE = 0.001
BOARD_LIMIT = 100
TRANSFER_FEE_FILE = Path(__file__).with_name('transfer_fees.yaml')


class P2pb2bPublic(PublicDriver):
    venue = 'p2pb2b'
    base_url = 'https://api.p2pb2b.io/api/v1'
    rate_cache_duration = 3.0
    symbol_delimiter = '_'

    def _check(self, payload, method, path):
        if isinstance(payload, dict) and str(payload.get('code')) == '-1003':
            raise self._venue_error("ip banned", method, path, payload)
        return raise_for_success(self, payload, method, path)

    def _tickers(self):
        result = field(self._get('/public/tickers'), 'result', venue=self.venue)
        for symbol, row in result.items():
            ticker = row.get('ticker') or {}
            if ticker.get('last') is None or ticker.get('vol') is None:
                continue
            try:
                pair = self.codec.parse(symbol)
            except UnknownPair:
                continue
            yield pair, ticker

    def _fetch_precisions(self):
        table = {}
        for pair, ticker in self._tickers():
            table.setdefault(pair.trading, {})[pair.settlement] = valid_precisions(
                precision_of(ticker['last']), precision_of(ticker['vol']))
        return table

    def _fetch_market(self):
        builder = self.new_builder()
        for pair, ticker in self._tickers():
            builder.add(pair.trading, pair.settlement,
                        to_float(ticker['last'], 'last', self.venue),
                        to_float(ticker['vol'], 'vol', self.venue),
                        to_float(ticker.get('ask') or 0), to_float(ticker.get('bid') or 0))
        return builder.build()

    def _fetch_board(self, trading, settlement):
        payload = self._get('/public/depth/result',
                            {'market': self.symbol(trading, settlement), 'limit': BOARD_LIMIT})
        # depth arrives either bare or wrapped in "result"
        book = payload.get('result') if isinstance(payload.get('result'), dict) else payload
        return Board(asks=[row[:2] for row in book.get('asks') or []],
                     bids=[row[:2] for row in book.get('bids') or []])


class P2pb2bPrivate(PrivateDriver):
    venue = 'p2pb2b'
    public_class = P2pb2bPublic
    signer_class = P2pb2bSigner
    trade_fee = TradeFee(TRADE_FEE, TRADE_FEE)

    def _check(self, payload, method, path):
        return raise_for_success(self, payload, method, path)

    def order_symbol(self, trading, settlement):
        return ('%s-%s' % (trading, settlement)).upper()

    def trade_fee_rate(self, trading, settlement):
        return self.trade_fee

    def transfer_fee(self):
        return load_transfer_fees(TRANSFER_FEE_FILE)

    def complete_balances(self):
        balances = {}
        for row in field(self._call('GET', '/accounts'), 'data', venue=self.venue):
            total = to_float(row.get('balance', 0), 'balance', self.venue)
            available = to_float(row.get('available', 0), 'available', self.venue)
            balances[row['currency'].upper()] = Balance(available, total - available)
        return balances

    def order(self, trading, settlement, order_type, price, amount):
        price_text, amount_text = self.format_order(trading, settlement, price, amount)
        params = {
            'type': self.side(order_type),
            'price': price_text,
            'amount': amount_text,
            'symbol': self.order_symbol(trading, settlement),
        }
        payload = self._call('POST', '/order', params)
        return str(field(payload, 'data', 'orderOid', venue=self.venue))

    def _cancel(self, order_id, trading, settlement, order_type):
        self.require_pair(trading, settlement)
        params = {
            'symbol': self.order_symbol(trading, settlement),
            'orderOid': order_id,
            'type': self.side(order_type if order_type is not None else OrderType.BID),
        }
        self._call('POST', '/cancel-order', params)

    def _active_orders(self, pair):
        payload = self._call('GET', '/order/active', {'symbol': self.order_symbol(pair.trading, pair.settlement)})
        data = field(payload, 'data', venue=self.venue)
        orders = []
        for side in (self.buy_side, self.sell_side):
            for row in data.get(side) or []:
                orders.append(Order(str(row[ORDER_ID_INDEX]), self.order_type_of(side),
                                    pair.trading, pair.settlement, to_float(row[2]), to_float(row[3])))
        return orders

    def active_orders(self):
        held = set(asset for asset, balance in self.complete_balances().items() if balance.on_orders > 0)
        orders = []
        for pair in self.public.currency_pairs():
            if pair.trading in held or pair.settlement in held:
                orders.extend(self._active_orders(pair))
        return orders

    def is_order_filled(self, order_id, trading=None, settlement=None):
        self.require_pair(trading, settlement)
        orders = self._active_orders(CurrencyPair(trading, settlement))
        return all(order.exchange_order_id != order_id for order in orders)

    def transfer(self, asset, address, amount, additional_fee=0.0):
        params = {'coin': asset, 'address': address, 'amount': floor_format(amount, 8)}
        self._call('POST', '/account/%s/withdraw/apply' % asset, params)

    def address(self, asset):
        payload = self._call('GET', '/account/%s/wallet/address' % asset)
        return str(field(payload, 'data', 'address', venue=self.venue))
