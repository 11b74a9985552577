# -*- coding: utf-8 -*-
# tests/test_drivers.py
# Per-venue parsing and private call paths against canned payloads.

import pytest
import requests

from ccex.core.kernel.errors import (AuthFailure, DecodeFailure, SchemaMismatch, TransportFailure,
                                     UnknownPair, VenueError)
from ccex.core.kernel.models import (Balance, CurrencyPair, Order, OrderBookTick, OrderType, Precisions,
                                     TradeFee)
from ccex.drivers.binance.driver import BinancePrivate
from ccex.drivers.bitflyer.driver import BitflyerPrivate, BitflyerPublic
from ccex.drivers.hitbtc.driver import HitbtcPrivate, HitbtcPublic
from ccex.drivers.huobi.driver import HuobiPrivate, HuobiPublic
from ccex.drivers.kucoin.driver import KucoinPrivate
from ccex.drivers.lbank.driver import LbankPrivate
from ccex.drivers.okex.driver import OkexPrivate, OkexPublic
from ccex.drivers.p2pb2b.driver import P2pb2bPrivate, P2pb2bPublic
from ccex.drivers.poloniex.driver import PoloniexPrivate

from conftest import form_of, json_of


# ---- transport error mapping ----

class RefusingSession(object):
    def request(self, method, url, **kwargs):
        raise requests.exceptions.ConnectionError("connection refused")


def test_unrouted_request_is_venue_error(session, clock):
    driver = HitbtcPublic(session=session, clock=clock)
    with pytest.raises(VenueError) as info:
        driver.currency_pairs()
    assert info.value.venue == 'hitbtc'
    assert info.value.path == '/api/2/public/symbol'


def test_rejected_credentials_are_auth_failure(session, clock):
    session.add('GET', '/api/2/trading/balance', {'error': {'code': 1002}}, status=401)
    driver = HitbtcPrivate('key', 'secret', session=session, clock=clock)
    with pytest.raises(AuthFailure):
        driver.complete_balances()


def test_error_envelope_on_200_is_mapped(session, clock):
    session.add('GET', '/api/2/trading/balance', {'error': {'code': 1003, 'message': 'Action is forbidden'}})
    session.add('GET', '/api/2/account/crypto/address/XRP', {'error': {'code': 2001, 'message': 'nope'}})
    driver = HitbtcPrivate('key', 'secret', session=session, clock=clock)
    with pytest.raises(AuthFailure):
        driver.complete_balances()
    with pytest.raises(VenueError):
        driver.address('XRP')


def test_bad_json_is_decode_failure(session, clock):
    session.add('GET', '/api/2/public/symbol', b'<html>maintenance</html>')
    with pytest.raises(DecodeFailure):
        HitbtcPublic(session=session, clock=clock).currency_pairs()


def test_connection_error_is_transport_failure(clock):
    driver = HitbtcPublic(session=RefusingSession(), clock=clock)
    with pytest.raises(TransportFailure) as info:
        driver.currency_pairs()
    assert isinstance(info.value.__cause__, requests.exceptions.ConnectionError)


def test_missing_credentials_fail_before_sending(session, clock):
    driver = HitbtcPrivate('', 'secret', session=session, clock=clock)
    with pytest.raises(AuthFailure):
        driver.complete_balances()
    assert session.calls == []


# ---- binance ----

BINANCE_INFO = {'symbols': [
    {'symbol': 'ETHBTC', 'baseAsset': 'ETH', 'quoteAsset': 'BTC', 'status': 'TRADING',
     'baseAssetPrecision': 6, 'quotePrecision': 3},
    {'symbol': 'BTCUSDT', 'baseAsset': 'BTC', 'quoteAsset': 'USDT', 'status': 'TRADING'},
    {'symbol': 'XRPBTC', 'baseAsset': 'XRP', 'quoteAsset': 'BTC', 'status': 'BREAK'},
]}


@pytest.fixture
def binance(session, clock):
    session.add('GET', '/api/v1/exchangeInfo', BINANCE_INFO)
    session.add('GET', '/api/v1/ticker/24hr', [
        {'symbol': 'ETHBTC', 'lastPrice': '0.031', 'volume': '1500.5', 'askPrice': '0.0311', 'bidPrice': '0.0309'},
        {'symbol': 'BTCUSDT', 'lastPrice': '6500.1', 'volume': '20', 'askPrice': '6501', 'bidPrice': '6499'},
        {'symbol': 'ABCXYZ', 'lastPrice': '1', 'volume': '1'},
    ])
    session.add('GET', '/api/v3/ticker/bookTicker', [{'symbol': 'ETHBTC', 'askQty': '2.5', 'bidQty': '4'}])
    session.add('GET', '/api/v1/depth', {'lastUpdateId': 1, 'asks': [['0.0312', '1.0', []], ['0.0311', '2.0', []]],
                                         'bids': [['0.0309', '3.0', []]]}, symbol='ETHBTC', limit='1000')
    return BinancePrivate('key', 'secret', session=session, clock=clock)


def test_binance_market_merges_book_ticker_quantities(binance):
    public = binance.public
    assert public.rate('ETH', 'BTC') == 0.031
    assert public.volume('BTC', 'USDT') == 20.0
    ticks = public.order_book_tick_map()
    assert ticks['ETH']['BTC'] == OrderBookTick(0.0311, 0.0309, 2.5, 4.0)
    assert ticks['BTC']['USDT'] == OrderBookTick(6501.0, 6499.0, 0.0, 0.0)
    assert public.order_book_tick('ETH', 'BTC').best_bid_amount == 4.0
    assert sorted(public.rate_map()) == ['BTC', 'ETH']


def test_binance_board_and_frozen_assets(session, binance):
    board = binance.public.board('ETH', 'BTC')
    assert (board.best_ask_price(), board.best_ask_amount()) == (0.0311, 2.0)
    assert board.best_bid_price() == 0.0309
    assert binance.public.frozen_currency() == ['XRP', 'BTC']


def test_binance_refresh_pairs_drops_cached_state(session, binance):
    public = binance.public
    public.rate('ETH', 'BTC')
    public.board('ETH', 'BTC')
    public.precise('ETH', 'BTC')
    info_calls = len(session.calls_to('/api/v1/exchangeInfo'))
    public.rate('ETH', 'BTC')
    public.board('ETH', 'BTC')
    assert len(session.calls_to('/api/v1/ticker/24hr')) == 1
    assert len(session.calls_to('/api/v1/depth')) == 1

    assert public.refresh_pairs() == [CurrencyPair('ETH', 'BTC'), CurrencyPair('BTC', 'USDT'),
                                      CurrencyPair('XRP', 'BTC')]
    public.rate('ETH', 'BTC')
    public.board('ETH', 'BTC')
    assert public.precise('ETH', 'BTC') == Precisions(6, 3)
    assert len(session.calls_to('/api/v1/ticker/24hr')) == 2
    assert len(session.calls_to('/api/v1/depth')) == 2
    assert len(session.calls_to('/api/v1/exchangeInfo')) == info_calls + 2


def test_binance_open_orders_map_sides_back(session, binance):
    session.add('GET', '/api/v3/openOrders', [
        {'symbol': 'ETHBTC', 'side': 'BUY', 'price': '0.03', 'origQty': '2', 'clientOrderId': 'c1'},
        {'symbol': 'BTCUSDT', 'side': 'SELL', 'price': '7000', 'origQty': '0.5', 'clientOrderId': 'c2'},
    ])
    assert binance.active_orders() == [
        Order('c1', OrderType.ASK, 'ETH', 'BTC', 0.03, 2.0),
        Order('c2', OrderType.BID, 'BTC', 'USDT', 7000.0, 0.5),
    ]
    assert 'signature' in session.last('/api/v3/openOrders').query


def test_binance_order_state(session, binance):
    session.add('GET', '/api/v3/order', {'status': 'FILLED'}, origClientOrderId='done')
    session.add('GET', '/api/v3/order', {'status': 'NEW'}, origClientOrderId='open')
    session.add('GET', '/api/v3/order', {'code': -2011, 'msg': 'Order does not exist.'}, status=400,
                origClientOrderId='gone')
    session.add('GET', '/api/v3/order', {'code': -1021, 'msg': 'Timestamp outside recvWindow.'}, status=400,
                origClientOrderId='late')
    assert binance.is_order_filled('done', 'ETH', 'BTC') is True
    assert binance.is_order_filled('open', 'ETH', 'BTC') is False
    assert binance.is_order_filled('gone', 'ETH', 'BTC') is True
    with pytest.raises(VenueError):
        binance.is_order_filled('late', 'ETH', 'BTC')
    assert session.last('/api/v3/order').query['symbol'] == 'ETHBTC'


def test_binance_withdraw_rejection_is_venue_error(session, binance):
    session.add('POST', '/wapi/v3/withdraw.html', {'success': True, 'id': 'w1'}, asset='ETH')
    session.add('POST', '/wapi/v3/withdraw.html', {'success': False, 'msg': 'Insufficient balance'},
                asset='BTC')
    binance.transfer('ETH', '0xabc', 1.23456)
    assert session.last('/wapi/v3/withdraw.html').query['amount'] == '1.2345'
    with pytest.raises(VenueError) as info:
        binance.transfer('BTC', '1abc', 1.0)
    assert 'Insufficient balance' in str(info.value)


def test_binance_address_and_transfer_fees(session, binance):
    session.add('GET', '/wapi/v3/depositAddress.html', {'address': '1BvBMSEY', 'success': True}, asset='BTC')
    session.add('GET', '/wapi/v3/assetDetail.html', {'success': True, 'assetDetail': {
        'btc': {'withdrawFee': '0.0005'}, 'ETH': {'withdrawFee': 0.01}}})
    assert binance.address('BTC') == '1BvBMSEY'
    assert binance.transfer_fee() == {'BTC': 0.0005, 'ETH': 0.01}
    session.add('GET', '/wapi/v3/assetDetail.html', {'success': False})
    with pytest.raises(VenueError):
        binance.transfer_fee()


# ---- bitflyer ----

def test_bitflyer_lists_only_jpy_products(session, clock):
    session.add('GET', '/v1/markets', [
        {'product_code': 'BTC_JPY'}, {'product_code': 'ETH_BTC'},
        {'product_code': 'FX_BTC_JPY'}, {'product_code': 'BTCJPY28SEP2018'},
    ])
    driver = BitflyerPublic(session=session, clock=clock)
    assert driver.currency_pairs() == [CurrencyPair('BTC', 'JPY')]
    assert driver.precise('BTC', 'JPY') == Precisions(0, 8)


def test_bitflyer_ticker_and_board(session, clock):
    session.add('GET', '/v1/markets', [{'product_code': 'BTC_JPY'}])
    session.add('GET', '/v1/ticker', {'ltp': 700000, 'volume': 1234.5, 'best_ask': 700100,
                                      'best_bid': 699900, 'best_ask_size': 0.5, 'best_bid_size': 1.5},
                product_code='BTC_JPY')
    session.add('GET', '/v1/board', {'asks': [{'price': 700200, 'size': 1}, {'price': 700100, 'size': 0.5}],
                                     'bids': [{'price': 699900, 'size': 1.5}]}, product_code='BTC_JPY')
    driver = BitflyerPublic(session=session, clock=clock)
    assert driver.rate('BTC', 'JPY') == 700000
    assert driver.volume('BTC', 'JPY') == 1234.5
    board = driver.board('BTC', 'JPY')
    assert board.best_ask_price() == 700100
    assert board.best_bid_amount() == 1.5
    assert driver.board('BTC', 'JPY') is board
    assert len(session.calls_to('/v1/board')) == 1


def test_bitflyer_order_and_cancel(session, clock):
    session.add('GET', '/v1/markets', [{'product_code': 'BTC_JPY'}])
    session.add('POST', '/v1/me/sendchildorder', {'child_order_acceptance_id': 'JRF20150707-050237-639234'})
    session.add('POST', '/v1/me/cancelchildorder', b'')
    driver = BitflyerPrivate('key', 'secret', session=session, clock=clock)
    order_id = driver.order('BTC', 'JPY', OrderType.ASK, 700000.9, 0.0123456789)
    assert order_id == 'JRF20150707-050237-639234'
    body = json_of(session.last('/v1/me/sendchildorder'))
    assert body == {'product_code': 'BTC_JPY', 'child_order_type': 'LIMIT', 'side': 'BUY',
                    'price': 700000, 'size': 0.01234567}
    driver.cancel_order(order_id, 'BTC', 'JPY')
    assert json_of(session.last('/v1/me/cancelchildorder'))['child_order_acceptance_id'] == order_id


def test_bitflyer_transfer_is_unsupported(session, clock):
    driver = BitflyerPrivate('key', 'secret', session=session, clock=clock)
    with pytest.raises(VenueError):
        driver.transfer('BTC', 'addr', 1.0)


def test_bitflyer_malformed_ticker_drops_only_that_product(session, clock):
    session.add('GET', '/v1/markets', [{'product_code': 'BTC_JPY'}, {'product_code': 'ETH_JPY'}])
    session.add('GET', '/v1/ticker', {'ltp': 100, 'volume': 5}, product_code='BTC_JPY')
    session.add('GET', '/v1/ticker', {}, product_code='ETH_JPY')
    driver = BitflyerPublic(session=session, clock=clock)
    assert driver.rate('BTC', 'JPY') == 100
    assert driver.order_book_tick_map()['BTC']['JPY'].best_ask_price == 0.0
    with pytest.raises(UnknownPair):
        driver.rate('ETH', 'JPY')


# ---- hitbtc ----

def test_hitbtc_fees_orders_and_history(session, clock):
    session.add('GET', '/api/2/public/symbol', [
        {'id': 'ETHBTC', 'baseCurrency': 'ETH', 'quoteCurrency': 'BTC',
         'provideLiquidityRate': '-0.0001', 'takeLiquidityRate': '0.001'},
    ])
    session.add('GET', '/api/2/order', [
        {'clientOrderId': 'c1', 'symbol': 'ETHBTC', 'side': 'buy', 'price': '0.031', 'quantity': '2'},
        {'clientOrderId': 'c2', 'symbol': 'XYZABC', 'side': 'sell', 'price': '1', 'quantity': '1'},
    ])
    session.add('GET', '/api/2/history/order', [{'clientOrderId': 'c9', 'status': 'filled'}],
                clientOrderId='c9')
    session.add('GET', '/api/2/history/order', [], clientOrderId='c1')
    driver = HitbtcPrivate('key', 'secret', session=session, clock=clock)
    assert driver.trade_fee_rate('ETH', 'BTC') == TradeFee(-0.0001, 0.001)
    with pytest.raises(UnknownPair):
        driver.trade_fee_rate('LTC', 'BTC')
    assert driver.active_orders() == [Order('c1', OrderType.ASK, 'ETH', 'BTC', 0.031, 2.0)]
    assert session.last('/api/2/order').auth == ('key', 'secret')
    assert driver.is_order_filled('c9') is True
    assert driver.is_order_filled('c1') is False


def test_hitbtc_cancel_of_absent_order_is_tolerated(session, clock):
    session.add('DELETE', '/api/2/order/c1', {'error': {'code': 20002, 'message': 'Order not found'}},
                status=400)
    session.add('DELETE', '/api/2/order/c2', {'error': {'code': 500, 'message': 'Internal'}}, status=500)
    driver = HitbtcPrivate('key', 'secret', session=session, clock=clock)
    driver.cancel_order('c1')
    with pytest.raises(VenueError):
        driver.cancel_order('c2')


# ---- huobi ----

HUOBI_SYMBOLS = {'status': 'ok', 'data': [
    {'base-currency': 'eth', 'quote-currency': 'btc', 'price-precision': 6, 'amount-precision': 4},
    {'base-currency': 'eth', 'quote-currency': 'usdt', 'price-precision': 2, 'amount-precision': 4},
]}


@pytest.fixture
def huobi(session, clock):
    session.add('GET', '/v1/common/symbols', HUOBI_SYMBOLS)
    session.add('GET', '/v1/account/accounts', {'status': 'ok', 'data': [{'id': 100009, 'type': 'spot'}]})
    return HuobiPrivate('key', 'secret', session=session, clock=clock)


def test_huobi_balances_merge_trade_and_frozen(session, huobi):
    session.add('GET', '/v1/account/accounts/100009/balance', {'status': 'ok', 'data': {'list': [
        {'currency': 'eth', 'type': 'trade', 'balance': '1.5'},
        {'currency': 'eth', 'type': 'frozen', 'balance': '0.5'},
        {'currency': 'btc', 'type': 'trade', 'balance': '0.1'},
    ]}})
    assert huobi.complete_balances() == {'ETH': Balance(1.5, 0.5), 'BTC': Balance(0.1, 0.0)}
    assert huobi.balances() == {'ETH': 1.5, 'BTC': 0.1}
    assert len(session.calls_to('/v1/account/accounts')) == 1


def test_huobi_order_sends_json_body(session, huobi):
    session.add('POST', '/v1/order/orders/place', {'status': 'ok', 'data': '59378'})
    assert huobi.order('ETH', 'USDT', OrderType.BID, 300.129, 1.23456) == '59378'
    call = session.last('/v1/order/orders/place')
    assert json_of(call) == {'account-id': '100009', 'symbol': 'ethusdt', 'type': 'sell-limit',
                             'amount': '1.2345', 'price': '300.12'}
    assert 'Signature' in call.query


def test_huobi_error_envelope_and_order_state(session, huobi):
    session.add('GET', '/v1/order/orders/1', {'status': 'ok', 'data': {'state': 'partial-canceled'}})
    session.add('GET', '/v1/order/orders/2', {'status': 'ok', 'data': {'state': 'submitted'}})
    session.add('GET', '/v1/order/orders/3', {'status': 'error', 'err-code': 'api-signature-not-valid',
                                              'err-msg': 'bad signature'})
    assert huobi.is_order_filled('1') is True
    assert huobi.is_order_filled('2') is False
    with pytest.raises(AuthFailure):
        huobi.is_order_filled('3')


def test_huobi_open_orders_and_fees(session, huobi):
    session.add('GET', '/v1/order/openOrders', {'status': 'ok', 'data': [
        {'id': 11, 'symbol': 'ethbtc', 'type': 'buy-limit', 'price': '0.03', 'amount': '2'},
        {'id': 12, 'symbol': 'ethbtc', 'type': 'sell-ioc', 'price': '0.04', 'amount': '1'},
        {'id': 13, 'symbol': 'ethbtc', 'type': 'unknown', 'price': '0.04', 'amount': '1'},
    ]}, **{'account-id': '100009'})
    assert huobi.active_orders() == [
        Order('11', OrderType.ASK, 'ETH', 'BTC', 0.03, 2.0),
        Order('12', OrderType.BID, 'ETH', 'BTC', 0.04, 1.0),
    ]
    assert huobi.trade_fee_rates() == {'ETH': {'BTC': TradeFee(0.002, 0.002),
                                               'USDT': TradeFee(0.002, 0.002)}}
    fees = huobi.transfer_fee()
    assert fees['BTC'] > 0


def test_huobi_malformed_tickers_are_dropped(session, clock):
    session.add('GET', '/v1/common/symbols', {'status': 'ok', 'data': [
        {'base-currency': 'eth', 'quote-currency': 'btc'},
        {'base-currency': 'ltc', 'quote-currency': 'btc'},
        {'base-currency': 'xrp', 'quote-currency': 'btc'},
    ]})
    session.add('GET', '/market/detail/merged', {'status': 'ok', 'tick': {
        'close': 0.031, 'vol': 1200.5, 'ask': [0.0311, 2], 'bid': []}}, symbol='ethbtc')
    session.add('GET', '/market/detail/merged', {'status': 'ok', 'tick': {
        'close': 'n/a', 'vol': 10, 'ask': [0.01, 1], 'bid': [0.009, 1]}}, symbol='ltcbtc')
    session.add('GET', '/market/detail/merged', {'status': 'ok', 'tick': {
        'close': 0.0001, 'vol': 10, 'ask': [0.00011], 'bid': [0.00009, 4]}}, symbol='xrpbtc')
    driver = HuobiPublic(session=session, clock=clock)
    assert driver.rate('ETH', 'BTC') == 0.031
    tick = driver.order_book_tick_map()['ETH']['BTC']
    assert (tick.best_ask_price, tick.best_ask_amount, tick.best_bid_price) == (0.0311, 2.0, 0.0)
    for trading in ('LTC', 'XRP'):
        with pytest.raises(UnknownPair):
            driver.rate(trading, 'BTC')


# ---- kucoin ----

KUCOIN_TICKS = {'success': True, 'data': [
    {'coinType': 'ETH', 'coinTypePair': 'BTC', 'lastDealPrice': 0.031, 'vol': 1500.5,
     'sell': 0.0311, 'buy': 0.0309, 'feeRate': 0.001},
    {'coinType': 'NEO', 'coinTypePair': 'USDT', 'lastDealPrice': 20.5, 'vol': 10,
     'sell': 20.6, 'buy': 20.4, 'feeRate': 0.001},
]}
KUCOIN_COINS = {'success': True, 'data': [
    {'coin': 'ETH', 'tradePrecision': 4, 'withdrawMinFee': 0.01, 'enableWithdraw': True, 'enableDeposit': True},
    {'coin': 'BTC', 'tradePrecision': 8, 'withdrawMinFee': 0.0005, 'enableWithdraw': True, 'enableDeposit': True},
    {'coin': 'NEO', 'tradePrecision': 0, 'enableWithdraw': False, 'enableDeposit': True},
    {'coin': 'USDT', 'tradePrecision': 6, 'withdrawMinFee': 1, 'enableWithdraw': True, 'enableDeposit': True},
]}


@pytest.fixture
def kucoin(session, clock):
    session.add('GET', '/v1/open/tick', KUCOIN_TICKS)
    session.add('GET', '/v1/market/open/coins', KUCOIN_COINS)
    return KucoinPrivate('key', 'secret', session=session, clock=clock)


def test_kucoin_public_market(session, kucoin):
    public = kucoin.public
    assert public.rate('ETH', 'BTC') == 0.031
    assert public.precise('ETH', 'BTC') == Precisions(8, 4)
    assert public.frozen_currency() == ['NEO']
    assert session.last('/v1/open/tick').headers['User-Agent'].startswith('Mozilla/5.0')


def test_kucoin_private_paths(session, kucoin):
    session.add('GET', '/v1/account/balances', {'success': True, 'data': {'datas': [
        {'coinType': 'ETH', 'balance': 2.0, 'freezeBalance': 0.5},
        {'coinType': 'BTC', 'balance': 0.1, 'freezeBalance': 0},
    ]}}, page='1')
    session.add('GET', '/v1/order/active', {'success': True, 'data': {
        'BUY': [[1508741840000, 'BUY', 0.03, 1.5, 0, 'oid1']],
        'SELL': [[1508741840000, 'SELL', 0.04, 2.5, 0, 'oid2']],
    }}, symbol='ETH-BTC')
    session.add('POST', '/v1/order', {'success': True, 'data': {'orderOid': 'oid3'}})
    session.add('POST', '/v1/cancel-order', {'success': False, 'code': 'ERROR', 'msg': 'rejected'})

    assert kucoin.complete_balances()['ETH'] == Balance(1.5, 0.5)
    assert kucoin.active_orders() == [
        Order('oid1', OrderType.ASK, 'ETH', 'BTC', 0.03, 1.5),
        Order('oid2', OrderType.BID, 'ETH', 'BTC', 0.04, 2.5),
    ]
    assert session.calls_to('/v1/order/active')[-1].query['symbol'] == 'ETH-BTC'
    assert len(session.calls_to('/v1/order/active')) == 1
    assert kucoin.is_order_filled('oid1', 'ETH', 'BTC') is False
    assert kucoin.is_order_filled('oid9', 'ETH', 'BTC') is True

    assert kucoin.order('ETH', 'BTC', OrderType.ASK, 0.0312345678, 1.23456) == 'oid3'
    assert form_of(session.last('/v1/order')) == {'type': 'BUY', 'price': '0.03123456',
                                                  'amount': '1.2345', 'symbol': 'ETH-BTC'}
    with pytest.raises(VenueError):
        kucoin.cancel_order('oid3', 'ETH', 'BTC', OrderType.ASK)
    assert form_of(session.last('/v1/cancel-order'))['type'] == 'BUY'
    with pytest.raises(ValueError):
        kucoin.cancel_order('oid3')


def test_kucoin_fees_and_address(session, kucoin):
    session.add('GET', '/v1/account/ETH/wallet/address', {'success': True, 'data': {'address': '0xabc'}})
    assert kucoin.trade_fee_rate('ETH', 'BTC') == TradeFee(0.001, 0.001)
    assert kucoin.transfer_fee() == {'ETH': 0.01, 'BTC': 0.0005, 'USDT': 1.0}
    assert kucoin.address('ETH') == '0xabc'


# ---- lbank ----

@pytest.fixture
def lbank(session, clock):
    session.add('GET', '/v1/currencyPairs.do', ['eth_btc', 'bcc_eth'])
    session.add('GET', '/v1/ticker.do', [
        {'symbol': 'eth_btc', 'ticker': {'latest': '0.031200', 'vol': '1200.12'}},
        {'symbol': 'bcc_eth', 'ticker': {'latest': None, 'vol': '1'}},
    ], symbol='all')
    return LbankPrivate('key', 'secret', session=session, clock=clock)


def test_lbank_public(session, lbank):
    public = lbank.public
    assert public.currency_pairs() == [CurrencyPair('ETH', 'BTC'), CurrencyPair('BCC', 'ETH')]
    assert public.rate('ETH', 'BTC') == 0.0312
    assert public.precise('ETH', 'BTC') == Precisions(6, 2)
    with pytest.raises(UnknownPair):
        public.rate('BCC', 'ETH')


def test_lbank_order_state(session, lbank):
    session.add('POST', '/v1/orders_info.do', {'result': 'true', 'orders': [{'status': 2}]}, order_id='a')
    session.add('POST', '/v1/orders_info.do', {'result': 'true', 'orders': [{'status': 0}]}, order_id='b')
    session.add('POST', '/v1/orders_info.do', {'result': 'true', 'orders': []}, order_id='c')
    session.add('POST', '/v1/orders_info.do', {'result': 'false', 'error_code': 10002}, order_id='d')
    assert lbank.is_order_filled('a', 'ETH', 'BTC') is True
    assert lbank.is_order_filled('b', 'ETH', 'BTC') is False
    assert lbank.is_order_filled('c', 'ETH', 'BTC') is True
    with pytest.raises(VenueError):
        lbank.is_order_filled('d', 'ETH', 'BTC')
    form = form_of(session.last('/v1/orders_info.do'))
    assert form['symbol'] == 'eth_btc' and form['api_key'] == 'key' and 'sign' in form


def test_lbank_balances_and_orders(session, lbank):
    session.add('POST', '/v1/user_info.do', {'result': 'true', 'info': {
        'free': {'eth': '1.5', 'btc': '0.2'}, 'freeze': {'eth': '0.5', 'btc': '0'}}})
    session.add('POST', '/v1/orders_info_no_deal.do', {'result': 'true', 'orders': [
        {'order_id': 'x1', 'type': 'sell', 'price': 0.032, 'amount': 0.5},
    ]}, symbol='eth_btc')
    session.add('POST', '/v1/orders_info_no_deal.do', {'result': 'true', 'orders': []}, symbol='bcc_eth')
    session.add('POST', '/v1/create_order.do', {'result': 'true', 'order_id': 'x2'})
    assert lbank.complete_balances() == {'ETH': Balance(1.5, 0.5), 'BTC': Balance(0.2, 0.0)}
    assert lbank.active_orders() == [Order('x1', OrderType.BID, 'ETH', 'BTC', 0.032, 0.5)]
    assert len(session.calls_to('/v1/orders_info_no_deal.do')) == 2
    assert lbank.order('ETH', 'BTC', OrderType.ASK, 0.0312349, 2.345) == 'x2'
    form = form_of(session.last('/v1/create_order.do'))
    assert (form['type'], form['price'], form['amount']) == ('buy', '0.031234', '2.34')
    with pytest.raises(VenueError):
        lbank.address('ETH')


# ---- okex ----

def test_okex_public(session, clock):
    session.add('GET', '/v2/markets/products', {'code': 0, 'data': [{'symbol': 'eth_btc'}, {'symbol': 'ltc_btc'}]})
    session.add('GET', '/v2/spot/markets/tickers', {'code': 0, 'data': [
        {'symbol': 'eth_btc', 'last': '0.0312', 'volume': '1200.12', 'sell': '0.0313', 'buy': '0.0311'},
    ]})
    session.add('GET', '/v2/markets/eth_btc/depth', {'code': 0, 'data': {
        'asks': [{'price': '0.0313', 'totalSize': '2'}], 'bids': [{'price': '0.0311', 'totalSize': '3'}]}})
    session.add('GET', '/v2/markets/ltc_btc/depth', {'code': 30032, 'msg': 'pair suspended'})
    driver = OkexPublic(session=session, clock=clock)
    assert driver.currency_pairs() == [CurrencyPair('ETH', 'BTC'), CurrencyPair('LTC', 'BTC')]
    assert driver.rate('ETH', 'BTC') == 0.0312
    assert driver.precise('ETH', 'BTC') == Precisions(4, 2)
    assert driver.board('ETH', 'BTC').best_bid_amount() == 3.0
    with pytest.raises(VenueError):
        driver.board('LTC', 'BTC')


def test_okex_transfer_fee_keeps_answered_currencies(session, clock):
    session.add('GET', '/v2/markets/currencies', {'code': 0, 'data': [
        {'symbol': 'btc', 'withdrawable': True, 'rechargeable': True},
        {'symbol': 'eth', 'withdrawable': False, 'rechargeable': False},
    ]})
    session.add('GET', '/v1/dw/withdraw-virtual/fee-range', {'status': 'ok', 'data': {'default-amount': 0.002}},
                currency='btc')
    session.add('GET', '/v1/dw/withdraw-virtual/fee-range', {'status': 'error', 'err-code': 'x'},
                currency='eth')
    driver = OkexPrivate('key', 'secret', session=session, clock=clock)
    assert driver.transfer_fee() == {'BTC': 0.002}
    assert driver.public.frozen_currency() == ['ETH']
    assert driver.trade_fee_rate('ETH', 'BTC') == TradeFee(-0.001, 0.001)


# ---- p2pb2b ----

P2PB2B_TICKERS = {'success': True, 'result': {
    'ETH_BTC': {'ticker': {'last': '0.031200', 'vol': '150.123', 'ask': '0.0313', 'bid': '0.0311'}},
}}


@pytest.fixture
def p2pb2b(session, clock):
    session.add('GET', '/api/v1/public/tickers', P2PB2B_TICKERS)
    return P2pb2bPrivate('key', 'secret', session=session, clock=clock)


def test_p2pb2b_public(session, clock):
    session.add('GET', '/api/v1/public/tickers', P2PB2B_TICKERS)
    session.add('GET', '/api/v1/public/depth/result', {'success': True, 'result': {
        'asks': [['0.0313', '2']], 'bids': [['0.0311', '4']]}}, market='ETH_BTC')
    driver = P2pb2bPublic(session=session, clock=clock)
    assert driver.currency_pairs() == [CurrencyPair('ETH', 'BTC')]
    assert driver.rate('ETH', 'BTC') == 0.0312
    assert driver.volume('ETH', 'BTC') == 150.123
    assert driver.board('ETH', 'BTC').best_bid_amount() == 4.0
    assert driver.market.duration == 3.0


def test_p2pb2b_ip_ban_is_venue_error(session, clock):
    session.add('GET', '/api/v1/public/tickers', {'code': -1003, 'msg': 'Way too many requests'})
    with pytest.raises(VenueError) as info:
        P2pb2bPublic(session=session, clock=clock).rate('ETH', 'BTC')
    assert 'ip banned' in str(info.value)


def test_p2pb2b_private_paths(session, p2pb2b):
    session.add('GET', '/api/v1/accounts', {'success': True, 'data': [
        {'currency': 'eth', 'balance': '2', 'available': '1.5'},
    ]})
    session.add('POST', '/api/v1/order', {'success': True, 'data': {'orderOid': 'p1'}})
    session.add('POST', '/api/v1/cancel-order', {'success': True})
    session.add('GET', '/api/v1/order/active', {'success': True, 'data': {
        'BUY': [[0, 'BUY', 0.03, 1.0, 0, 'p1']], 'SELL': []}}, symbol='ETH-BTC')
    session.add('GET', '/api/v1/account/ETH/wallet/address', {'success': True, 'data': {'address': '0xdef'}})

    assert p2pb2b.complete_balances() == {'ETH': Balance(1.5, 0.5)}
    assert p2pb2b.order('ETH', 'BTC', OrderType.ASK, 0.03, 1.0) == 'p1'
    assert form_of(session.last('/api/v1/order'))['symbol'] == 'ETH-BTC'
    p2pb2b.cancel_order('p1', 'ETH', 'BTC')
    assert form_of(session.last('/api/v1/cancel-order')) == {'symbol': 'ETH-BTC', 'orderOid': 'p1',
                                                             'type': 'SELL'}
    assert p2pb2b.active_orders() == [Order('p1', OrderType.ASK, 'ETH', 'BTC', 0.03, 1.0)]
    assert p2pb2b.is_order_filled('p1', 'ETH', 'BTC') is False
    with pytest.raises(ValueError):
        p2pb2b.is_order_filled('p1')
    assert p2pb2b.address('ETH') == '0xdef'
    assert 'KC-API-SIGN' in session.last('/api/v1/account/ETH/wallet/address').headers


# ---- poloniex ----

@pytest.fixture
def poloniex(session, clock):
    session.add('GET', '/public', {
        'BTC_ETH': {'last': '0.03100000', 'baseVolume': '120.5', 'quoteVolume': '3887.1234',
                    'lowestAsk': '0.0311', 'highestBid': '0.0309'},
    }, command='returnTicker')
    session.add('GET', '/public', {
        'BTC': {'txFee': '0.0005', 'frozen': 0, 'delisted': 0, 'disabled': 0},
        'XRP': {'txFee': '0.15', 'frozen': 1, 'delisted': 0, 'disabled': 0},
    }, command='returnCurrencies')
    return PoloniexPrivate('key', 'secret', session=session, clock=clock)


def test_poloniex_public_extras(poloniex):
    assert poloniex.public.precise('ETH', 'BTC') == Precisions(8, 4)
    assert poloniex.public.frozen_currency() == ['XRP']
    assert poloniex.transfer_fee() == {'BTC': 0.0005, 'XRP': 0.15}


def test_poloniex_order_paths(session, poloniex):
    session.add('POST', '/tradingApi', {'orderNumber': '31226040'}, command='buy')
    session.add('POST', '/tradingApi', {'orderNumber': '0'}, command='sell')
    session.add('POST', '/tradingApi', {'success': 0, 'message': 'nope'}, command='cancelOrder')
    assert poloniex.order('ETH', 'BTC', OrderType.ASK, 0.031234567891, 1.23456) == '31226040'
    form = form_of(session.last('/tradingApi'))
    assert form['currencyPair'] == 'BTC_ETH'
    assert form['rate'] == '0.03123456'
    assert form['amount'] == '1.2345'
    assert form['nonce'] == str(int(1500000000))
    with pytest.raises(VenueError):
        poloniex.order('ETH', 'BTC', OrderType.BID, 0.03, 1)
    with pytest.raises(VenueError):
        poloniex.cancel_order('31226040')


def test_poloniex_nonce_increases_per_call(session, poloniex):
    session.add('POST', '/tradingApi', {'BTC': '0.5', 'ETH': '0'}, command='returnBalances')
    poloniex.balances()
    poloniex.balances()
    nonces = [int(form_of(c)['nonce']) for c in session.calls_to('/tradingApi')]
    assert nonces[1] == nonces[0] + 1


def test_poloniex_open_orders_and_balances(session, poloniex):
    session.add('POST', '/tradingApi', {
        'BTC_ETH': [{'orderNumber': '120466', 'type': 'sell', 'rate': '0.025', 'amount': '100'},
                    {'orderNumber': '120467', 'type': 'buy', 'rate': '0.024', 'amount': '10'}],
        'BTC_XRP': [],
    }, command='returnOpenOrders')
    session.add('POST', '/tradingApi', {
        'ETH': {'available': '1.5', 'onOrders': '100', 'btcValue': '3'},
    }, command='returnCompleteBalances')
    session.add('POST', '/tradingApi', {'error': 'Invalid API key/secret pair.'}, command='returnFeeInfo')
    assert poloniex.active_orders() == [
        Order('120466', OrderType.ASK, 'ETH', 'BTC', 0.025, 100.0),
        Order('120467', OrderType.BID, 'ETH', 'BTC', 0.024, 10.0),
    ]
    assert poloniex.complete_balances() == {'ETH': Balance(1.5, 100.0)}
    with pytest.raises(AuthFailure):
        poloniex.trade_fee_rate('ETH', 'BTC')


def test_poloniex_withdraw_and_address(session, poloniex):
    session.add('POST', '/tradingApi', {'response': 'Withdrew 2.0 ETH.'}, command='withdraw')
    session.add('POST', '/tradingApi', {'BTC': '1Addr'}, command='returnDepositAddresses')
    poloniex.transfer('ETH', '0xabc', 2.000000009)
    assert form_of(session.last('/tradingApi'))['amount'] == '2.00000000'
    assert poloniex.address('BTC') == '1Addr'
    with pytest.raises(SchemaMismatch):
        poloniex.address('ETH')
