# -*- coding: utf-8 -*-
# ccex/drivers/huobi/driver.py
# Huobi Pro driver. Tickers are fetched per symbol through the fan-out pool;
# the private half is shared with the Okex v1 gateway (see drivers/okex).

from pathlib import Path

import yaml

from ccex.core.kernel.errors import AuthFailure, SchemaMismatch, UnknownPair
from ccex.core.kernel.models import Balance, Board, CurrencyPair, Order, TradeFee
from ccex.core.runtime.base import PrivateDriver, PublicDriver, error_payload, field, to_float
from ccex.core.runtime.codec import SymbolCodec
from ccex.core.runtime.precision import floor_format, valid_precisions
from ccex.core.runtime.signing import HuobiSigner

AUTH_ERROR_CODES = ('api-signature-not-valid', 'invalid-access-key', 'login-required',
                    'api-signature-check-failed')
ABSENT_ORDER_CODES = ('order-orderstate-error', 'base-record-invalid', 'order-order-not-exist')
CLOSED_STATES = ('filled', 'canceled', 'partial-canceled')
TRADE_FEE = 0.002

TRANSFER_FEE_FILE = Path(__file__).with_name('transfer_fees.yaml')


def load_transfer_fees(path=TRANSFER_FEE_FILE):
    """Read a packaged {asset: fee} table."""
    with open(path, 'r', encoding='utf-8') as f:
        data = yaml.safe_load(f) or {}
    return {str(asset): float(fee) for asset, fee in (data.get('fees') or {}).items()}


def raise_for_status(driver, payload, method, path):
    """Huobi style envelope: {"status": "error", "err-code": ..., "err-msg": ...}."""
    if isinstance(payload, dict) and payload.get('status') == 'error':
        code = payload.get('err-code')
        message = "%s: %s" % (code, payload.get('err-msg', ''))
        if code in AUTH_ERROR_CODES:
            raise AuthFailure(message, venue=driver.venue, operation=method, path=path)
        raise driver._venue_error(message, method, path, payload)
    return payload


class HuobiPublic(PublicDriver):
    venue = 'huobi'
    base_url = 'https://api.huobi.pro'
    symbol_lower = True

    def _check(self, payload, method, path):
        return raise_for_status(self, payload, method, path)

    def _symbols(self):
        return field(self._get('/v1/common/symbols'), 'data', venue=self.venue)

    def _fetch_pairs(self):
        return [CurrencyPair(row['base-currency'].upper(), row['quote-currency'].upper())
                for row in self._symbols()]

    def _fetch_precisions(self):
        table = {}
        for row in self._symbols():
            table.setdefault(row['base-currency'].upper(), {})[row['quote-currency'].upper()] = \
                valid_precisions(row.get('price-precision'), row.get('amount-precision'))
        return table

    def _level(self, tick, side):
        """(price, amount) of the best ask or bid; (0, 0) when the side is empty."""
        row = tick.get(side) or [0, 0]
        if not isinstance(row, (list, tuple)) or len(row) < 2:
            raise SchemaMismatch("malformed %s level: %r" % (side, row), venue=self.venue)
        return to_float(row[0], side, self.venue), to_float(row[1], side, self.venue)

    def _ticker(self, pair):
        payload = self._get('/market/detail/merged', {'symbol': self.symbol(pair.trading, pair.settlement)})
        tick = field(payload, 'tick', venue=self.venue)
        rate = to_float(field(tick, 'close', venue=self.venue), 'close', self.venue)
        volume = to_float(field(tick, 'vol', venue=self.venue), 'vol', self.venue)
        ask_price, ask_amount = self._level(tick, 'ask')
        bid_price, bid_amount = self._level(tick, 'bid')
        return rate, volume, ask_price, bid_price, ask_amount, bid_amount

    def _fetch_market(self):
        builder = self.new_builder()
        for pair, values in self._fan_out(self.currency_pairs(), self._ticker).items():
            builder.add(pair.trading, pair.settlement, *values)
        return builder.build()

    def _fetch_board(self, trading, settlement):
        payload = self._get('/market/depth', {'symbol': self.symbol(trading, settlement), 'type': 'step0'})
        tick = field(payload, 'tick', venue=self.venue)
        return Board(asks=[row[:2] for row in tick.get('asks', [])],
                     bids=[row[:2] for row in tick.get('bids', [])])


class HuobiPrivate(PrivateDriver):
    venue = 'huobi'
    public_class = HuobiPublic
    signer_class = HuobiSigner
    buy_side = 'buy'
    sell_side = 'sell'
    trade_fee = TradeFee(TRADE_FEE, TRADE_FEE)

    def __init__(self, api_key, api_secret, public=None, **options):
        super(HuobiPrivate, self).__init__(api_key, api_secret, public=public, **options)
        self.order_codec = SymbolCodec(self.venue, lower=True, settlements=self.public.settlements)
        self._account_id = None

    def _check(self, payload, method, path):
        return raise_for_status(self, payload, method, path)

    def account_id(self):
        if self._account_id is None:
            accounts = field(self._call('GET', '/v1/account/accounts'), 'data', venue=self.venue)
            if not accounts:
                raise self._venue_error("there is no available account", 'GET', '/v1/account/accounts')
            self._account_id = str(field(accounts, 0, 'id', venue=self.venue))
        return self._account_id

    def order_symbol(self, trading, settlement):
        return self.order_codec.format(trading, settlement)

    def trade_fee_rate(self, trading, settlement):
        return self.trade_fee

    def trade_fee_rates(self):
        rates = {}
        for pair in self.public.currency_pairs():
            rates.setdefault(pair.trading, {})[pair.settlement] = self.trade_fee
        return rates

    def transfer_fee(self):
        return load_transfer_fees(TRANSFER_FEE_FILE)

    def complete_balances(self):
        account_id = self.account_id()
        path = '/v1/account/accounts/%s/balance' % account_id
        data = field(self._call('GET', path, {'account-id': account_id}), 'data', venue=self.venue)
        balances = {}
        for row in field(data, 'list', venue=self.venue):
            asset = row['currency'].upper()
            balance = balances.setdefault(asset, Balance())
            amount = to_float(row.get('balance', 0), 'balance', self.venue)
            if row.get('type') == 'trade':
                balance.available += amount
            elif row.get('type') == 'frozen':
                balance.on_orders += amount
        return balances

    def order(self, trading, settlement, order_type, price, amount):
        price_text, amount_text = self.format_order(trading, settlement, price, amount)
        params = {
            'account-id': self.account_id(),
            'symbol': self.order_symbol(trading, settlement),
            'type': self.side(order_type) + '-limit',
            'amount': amount_text,
            'price': price_text,
        }
        payload = self._call('POST', '/v1/order/orders/place', params)
        return str(field(payload, 'data', venue=self.venue))

    def _cancel(self, order_id, trading, settlement, order_type):
        self._call('POST', '/v1/order/orders/%s/submitcancel' % order_id)

    def _already_absent(self, error):
        return field(error_payload(error), 'err-code', default=None) in ABSENT_ORDER_CODES

    def is_order_filled(self, order_id, trading=None, settlement=None):
        payload = self._call('GET', '/v1/order/orders/%s' % order_id)
        return field(payload, 'data', 'state', venue=self.venue) in CLOSED_STATES

    def active_orders(self):
        payload = self._call('GET', '/v1/order/openOrders', {'account-id': self.account_id()})
        orders = []
        for row in field(payload, 'data', venue=self.venue):
            try:
                pair = self.order_codec.parse(row['symbol'])
            except UnknownPair:
                continue
            order_type = self.order_type_of(str(row.get('type', '')).split('-')[0])
            if order_type is None:
                continue
            orders.append(Order(str(row['id']), order_type, pair.trading, pair.settlement,
                                to_float(row.get('price', 0)), to_float(row.get('amount', 0))))
        return orders

    def transfer(self, asset, address, amount, additional_fee=0.0):
        params = {
            'address': address,
            'amount': floor_format(amount, 4),
            'currency': asset.lower(),
            'fee': floor_format(additional_fee, 4),
        }
        self._call('POST', '/v1/dw/withdraw/api/create', params)

    def address(self, asset):
        payload = self._call('GET', '/v1/dw/deposit-virtual/addresses',
                             {'currency': asset.lower(), 'type': 'deposit'})
        data = field(payload, 'data', venue=self.venue)
        if isinstance(data, list):
            data = field(data, 0, 'address', venue=self.venue)
        return str(data)
