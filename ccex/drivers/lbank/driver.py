# -*- coding: utf-8 -*-
# ccex/drivers/lbank/driver.py
# LBank v1 driver. Symbols are lower case 'eth_btc'.

from ccex.core.kernel.errors import UnknownPair
from ccex.core.kernel.models import Balance, Board, Order, TradeFee
from ccex.core.runtime.base import PrivateDriver, PublicDriver, field, to_float
from ccex.core.runtime.precision import floor_format, precision_of, valid_precisions
from ccex.core.runtime.signing import LbankSigner

TRADE_FEE = 0.001
# orders_info status: -1 cancelled, 0 open, 1 partially filled, 2 filled, 4 cancelling
CLOSED_STATUSES = (-1, 2)
PAGE_LENGTH = 100


def _is_false(value):
    return value is False or str(value).lower() == 'false'


class LbankPublic(PublicDriver):
    venue = 'lbank'
    base_url = 'https://api.lbkex.com'
    symbol_delimiter = '_'
    symbol_lower = True

    def _check(self, payload, method, path):
        if isinstance(payload, dict) and _is_false(payload.get('result')):
            raise self._venue_error("error code %s" % payload.get('error_code'), method, path, payload)
        return payload

    def _fetch_pairs(self):
        pairs = []
        for code in self._get('/v1/currencyPairs.do'):
            try:
                pairs.append(self.codec.parse(code))
            except UnknownPair:
                continue
        return pairs

    def _tickers(self):
        for row in self._get('/v1/ticker.do', {'symbol': 'all'}):
            ticker = row.get('ticker') or {}
            if ticker.get('latest') is None or ticker.get('vol') is None:
                continue
            try:
                pair = self.codec.parse(row['symbol'])
            except UnknownPair:
                continue
            yield pair, ticker

    def _fetch_precisions(self):
        table = {}
        for pair, ticker in self._tickers():
            table.setdefault(pair.trading, {})[pair.settlement] = valid_precisions(
                precision_of(ticker['latest']), precision_of(ticker['vol']))
        return table

    def _fetch_market(self):
        builder = self.new_builder()
        for pair, ticker in self._tickers():
            builder.add(pair.trading, pair.settlement,
                        to_float(ticker['latest'], 'latest', self.venue),
                        to_float(ticker['vol'], 'vol', self.venue))
        return builder.build()

    def _fetch_board(self, trading, settlement):
        payload = self._get('/v1/depth.do', {'symbol': self.symbol(trading, settlement), 'size': 60})
        return Board(asks=[row[:2] for row in payload.get('asks') or []],
                     bids=[row[:2] for row in payload.get('bids') or []])

    def withdraw_configs(self):
        return self._get('/v1/withdrawConfigs.do')

    def _fetch_frozen(self):
        return [row['assetCode'].upper() for row in self.withdraw_configs()
                if _is_false(row.get('canWithDraw'))]


class LbankPrivate(PrivateDriver):
    venue = 'lbank'
    public_class = LbankPublic
    signer_class = LbankSigner
    buy_side = 'buy'
    sell_side = 'sell'
    trade_fee = TradeFee(TRADE_FEE, TRADE_FEE)

    def _check(self, payload, method, path):
        return self.public._check(payload, method, path)

    def trade_fee_rate(self, trading, settlement):
        return self.trade_fee

    def trade_fee_rates(self):
        rates = {}
        for pair in self.public.currency_pairs():
            rates.setdefault(pair.trading, {})[pair.settlement] = self.trade_fee
        return rates

    def transfer_fee(self):
        fees = {}
        for row in self.public.withdraw_configs():
            if row.get('fee') in (None, ''):
                continue
            fees[row['assetCode'].upper()] = to_float(row['fee'], 'fee', self.venue)
        return fees

    def complete_balances(self):
        info = field(self._call('POST', '/v1/user_info.do'), 'info', venue=self.venue)
        balances = {}
        for asset, value in (info.get('free') or {}).items():
            balances.setdefault(asset.upper(), Balance()).available = to_float(value, 'free', self.venue)
        for asset, value in (info.get('freeze') or {}).items():
            balances.setdefault(asset.upper(), Balance()).on_orders = to_float(value, 'freeze', self.venue)
        return balances

    def order(self, trading, settlement, order_type, price, amount):
        price_text, amount_text = self.format_order(trading, settlement, price, amount)
        params = {
            'symbol': self.symbol(trading, settlement),
            'type': self.side(order_type),
            'price': price_text,
            'amount': amount_text,
        }
        payload = self._call('POST', '/v1/create_order.do', params)
        return str(field(payload, 'order_id', venue=self.venue))

    def _cancel(self, order_id, trading, settlement, order_type):
        self.require_pair(trading, settlement)
        self._call('POST', '/v1/cancel_order.do',
                   {'symbol': self.symbol(trading, settlement), 'order_id': order_id})

    def is_order_filled(self, order_id, trading=None, settlement=None):
        self.require_pair(trading, settlement)
        payload = self._call('POST', '/v1/orders_info.do',
                             {'symbol': self.symbol(trading, settlement), 'order_id': order_id})
        orders = payload.get('orders')
        if not orders:
            return str(payload.get('result')).lower() == 'true'
        return int(orders[0].get('status', 0)) in CLOSED_STATUSES

    def _open_orders(self, pair):
        params = {'symbol': self.symbol(pair.trading, pair.settlement),
                  'current_page': 1, 'page_length': PAGE_LENGTH}
        payload = self._call('POST', '/v1/orders_info_no_deal.do', params)
        orders = []
        for row in payload.get('orders') or []:
            order_type = self.order_type_of(row.get('type'))
            if order_type is None:
                continue
            orders.append(Order(str(row['order_id']), order_type, pair.trading, pair.settlement,
                                to_float(row.get('price', 0)), to_float(row.get('amount', 0))))
        return orders

    def active_orders(self):
        held = set(asset for asset, balance in self.complete_balances().items() if balance.on_orders > 0)
        orders = []
        for pair in self.public.currency_pairs():
            if pair.trading in held or pair.settlement in held:
                orders.extend(self._open_orders(pair))
        return orders

    def transfer(self, asset, address, amount, additional_fee=0.0):
        params = {
            'account': address,
            'assetCode': asset.lower(),
            'amount': floor_format(amount, 4),
            'fee': floor_format(additional_fee, 4),
        }
        self._call('POST', '/v1/withdraw.do', params)
