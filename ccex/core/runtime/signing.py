# -*- coding: utf-8 -*-
# ccex/core/runtime/signing.py
# Per-venue request signers and the nonce latch they share.

import base64
import hashlib
import hmac
import json
import threading
import time
from collections import namedtuple
from datetime import datetime, timezone
from urllib.parse import urlencode

from ccex.core.kernel.errors import AuthFailure

# query: already encoded query string ('' for none)
# body: encoded request body or None
SignedRequest = namedtuple('SignedRequest', ['query', 'body', 'headers', 'auth'])

FORM_CONTENT_TYPE = 'application/x-www-form-urlencoded'
JSON_CONTENT_TYPE = 'application/json'


def encode_sorted(params):
    """urlencode with keys in ascending order (same bytes as Go's url.Values.Encode)."""
    if not params:
        return ''
    return urlencode(sorted((str(k), _text(v)) for k, v in params.items()))


def _text(value):
    if isinstance(value, bool):
        return 'true' if value else 'false'
    return str(value)


def hmac_sha256_hex(secret, message):
    return hmac.new(_bytes(secret), _bytes(message), hashlib.sha256).hexdigest()


def hmac_sha256_b64(secret, message):
    digest = hmac.new(_bytes(secret), _bytes(message), hashlib.sha256).digest()
    return base64.b64encode(digest).decode('ascii')


def hmac_sha512_hex(secret, message):
    return hmac.new(_bytes(secret), _bytes(message), hashlib.sha512).hexdigest()


def md5_upper(message):
    return hashlib.md5(_bytes(message)).hexdigest().upper()


def _bytes(value):
    return value if isinstance(value, bytes) else str(value).encode('utf-8')


def as_accessor(value):
    """Wrap a literal key into a zero-argument callable; callables pass through."""
    if callable(value):
        return value
    return lambda: value


class NonceLatch(object):
    """
    Strictly increasing nonce source.

    Reads the clock at the configured resolution; when the clock has not moved
    past the last issued value (same tick, or clock went backwards) the latch
    issues last + 1 instead.

    Args:
        resolution: 's' for epoch seconds, 'ms' for epoch milliseconds
        clock: callable returning epoch seconds as float
    """

    def __init__(self, resolution='ms', clock=time.time):
        if resolution not in ('s', 'ms'):
            raise ValueError("resolution must be 's' or 'ms'")
        self.resolution = resolution
        self._clock = clock
        self._last = 0
        self._lock = threading.Lock()

    def _now(self):
        now = self._clock()
        if self.resolution == 'ms':
            return int(now * 1000)
        return int(now)

    def next(self):
        with self._lock:
            candidate = self._now()
            if candidate <= self._last:
                candidate = self._last + 1
            self._last = candidate
            return candidate


class Signer(object):
    """
    Base signer. Subclasses implement sign(method, host, path, params).

    Args:
        api_key: key string or zero-argument callable returning it
        api_secret: secret string or zero-argument callable returning it
        clock: epoch-seconds clock, injected by tests
    """
    nonce_resolution = 'ms'

    def __init__(self, api_key, api_secret, clock=time.time):
        self._key_fn = as_accessor(api_key)
        self._secret_fn = as_accessor(api_secret)
        self.clock = clock
        self.nonce = NonceLatch(self.nonce_resolution, clock)

    def credentials(self):
        try:
            key = self._key_fn()
            secret = self._secret_fn()
        except AuthFailure:
            raise
        except Exception as e:
            raise AuthFailure("credential accessor failed: %s" % e) from e
        if not key or not secret:
            raise AuthFailure("api key or secret is empty")
        return key, secret

    def sign(self, method, host, path, params):
        raise NotImplementedError


class BinanceSigner(Signer):
    """Query string + timestamp + recvWindow, hex HMAC-SHA256 appended as `signature`."""

    def __init__(self, api_key, api_secret, clock=time.time, recv_window=60000):
        super(BinanceSigner, self).__init__(api_key, api_secret, clock)
        self.recv_window = recv_window

    def sign(self, method, host, path, params):
        key, secret = self.credentials()
        values = dict(params)
        values['recvWindow'] = self.recv_window
        values['timestamp'] = self.nonce.next()
        payload = encode_sorted(values)
        query = payload + '&signature=' + hmac_sha256_hex(secret, payload)
        headers = {
            'X-MBX-APIKEY': key,
            'Accept': JSON_CONTENT_TYPE,
            'Content-Type': FORM_CONTENT_TYPE + ';charset=utf-8',
        }
        return SignedRequest(query, None, headers, None)


class BitflyerSigner(Signer):
    """ACCESS-SIGN = hex HMAC-SHA256(timestamp + method + path[?query] + body)."""
    nonce_resolution = 's'

    def sign(self, method, host, path, params):
        key, secret = self.credentials()
        timestamp = str(self.nonce.next())
        query = ''
        body = ''
        if params:
            if method == 'GET':
                query = urlencode(list(params.items()))
            else:
                body = json.dumps(params, separators=(',', ':'))
        target = path + ('?' + query if query else '')
        headers = {
            'ACCESS-KEY': key,
            'ACCESS-TIMESTAMP': timestamp,
            'ACCESS-SIGN': hmac_sha256_hex(secret, timestamp + method + target + body),
            'Content-Type': JSON_CONTENT_TYPE,
        }
        return SignedRequest(query, body or None, headers, None)


class BasicAuthSigner(Signer):
    """HTTP basic auth; GET params in the query, others form-encoded in the body."""

    def sign(self, method, host, path, params):
        key, secret = self.credentials()
        if method in ('GET', 'DELETE'):
            return SignedRequest(encode_sorted(params), None, {}, (key, secret))
        headers = {'Content-Type': FORM_CONTENT_TYPE}
        return SignedRequest('', encode_sorted(params), headers, (key, secret))


class HuobiSigner(Signer):
    """
    Signature version 2 shared by Huobi and the Okex v1 gateway.

    The payload is "METHOD\\nhost\\npath\\nsorted-query"; the base64 HMAC-SHA256
    goes into the query as `Signature`. GET carries every parameter in the
    query; POST signs only the access parameters and sends the business
    parameters as a JSON body.
    """

    def _timestamp(self):
        return datetime.fromtimestamp(self.clock(), tz=timezone.utc).strftime('%Y-%m-%dT%H:%M:%S')

    def sign(self, method, host, path, params):
        key, secret = self.credentials()
        values = {
            'AccessKeyId': key,
            'SignatureMethod': 'HmacSHA256',
            'SignatureVersion': '2',
            'Timestamp': self._timestamp(),
        }
        body = None
        if method == 'GET':
            values.update(params)
        elif params:
            body = json.dumps(params, separators=(',', ':'))
        payload = '\n'.join([method, host.lower(), path, encode_sorted(values)])
        values['Signature'] = hmac_sha256_b64(secret, payload)
        headers = {'Content-Type': JSON_CONTENT_TYPE if method != 'GET' else FORM_CONTENT_TYPE}
        return SignedRequest(encode_sorted(values), body, headers, None)


class KucoinSigner(Signer):
    """KC-API-SIGNATURE = hex HMAC-SHA256(secret, base64(path/nonce/sorted-query))."""

    def sign(self, method, host, path, params):
        key, secret = self.credentials()
        nonce = str(self.nonce.next())
        encoded = encode_sorted(params)
        plain = '%s/%s/%s' % (path, nonce, encoded)
        signature = hmac_sha256_hex(secret, base64.b64encode(plain.encode('utf-8')))
        headers = {
            'KC-API-KEY': key,
            'KC-API-NONCE': nonce,
            'KC-API-SIGNATURE': signature,
            'Accept': JSON_CONTENT_TYPE,
            'Content-Type': FORM_CONTENT_TYPE,
        }
        if method == 'GET':
            return SignedRequest(encoded, None, headers, None)
        return SignedRequest('', encoded, headers, None)


class LbankSigner(Signer):
    """`sign` = upper MD5(sorted-query + '&secret_key=' + secret), sent as a form."""

    def sign(self, method, host, path, params):
        key, secret = self.credentials()
        values = dict(params)
        values['api_key'] = key
        values['sign'] = md5_upper(encode_sorted(values) + '&secret_key=' + secret)
        encoded = encode_sorted(values)
        if method == 'GET':
            return SignedRequest(encoded, None, {}, None)
        return SignedRequest('', encoded, {'Content-Type': FORM_CONTENT_TYPE}, None)


class PoloniexSigner(Signer):
    """Form body with `nonce`; header Sign = hex HMAC-SHA512 of the body."""
    nonce_resolution = 's'

    def sign(self, method, host, path, params):
        key, secret = self.credentials()
        values = dict(params)
        values['nonce'] = self.nonce.next()
        body = encode_sorted(values)
        headers = {
            'Key': key,
            'Sign': hmac_sha512_hex(secret, body),
            'Content-Type': FORM_CONTENT_TYPE,
        }
        return SignedRequest('', body, headers, None)


class P2pb2bSigner(Signer):
    """KC-API-SIGN = base64 HMAC-SHA256(timestamp + method + path + sorted-query)."""

    def sign(self, method, host, path, params):
        key, secret = self.credentials()
        timestamp = str(self.nonce.next())
        encoded = encode_sorted(params)
        headers = {
            'KC-API-KEY': key,
            'KC-API-TIMESTAMP': timestamp,
            'KC-API-SIGN': hmac_sha256_b64(secret, timestamp + method + path + encoded),
            'KC-API-PASSPHRASE': key,
            'Content-Type': FORM_CONTENT_TYPE,
        }
        if method == 'GET':
            return SignedRequest(encoded, None, headers, None)
        return SignedRequest('', encoded, headers, None)
